"""Reporting Service - revenue, roster, attendance and credit aggregates"""

import csv
import io
from collections import defaultdict
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Tuple
from uuid import UUID
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from classpass.config import settings
from classpass.models.attendance import Attendance
from classpass.models.course import Course
from classpass.models.credit import StudentCredit
from classpass.models.student import Student
from classpass.models.enums import (
    AttendanceStatus, CourseStatus, CreditStatus, PaymentStatus, StudentStatus, TimeRange
)
from classpass.utils.time import get_utc_now, get_utc_today, add_months

DateRange = Tuple[date, date]

ATTENDED_STATUSES = (AttendanceStatus.PRESENT, AttendanceStatus.LATE)
REPORTED_CREDIT_STATUSES = (CreditStatus.ACTIVE, CreditStatus.EXPIRED, CreditStatus.DEPLETED)


def day_bounds(start: date, end: date) -> Tuple[datetime, datetime]:
    """[start 00:00, end+1 00:00) for filtering timestamp columns by date"""
    return (
        datetime.combine(start, datetime.min.time()),
        datetime.combine(end + timedelta(days=1), datetime.min.time()),
    )


def _round1(value: float) -> float:
    return round(value, 1)


class ReportService:
    """Aggregations for the reports page. Pure helpers take already-fetched rows."""

    @staticmethod
    def get_date_range(time_range: TimeRange, today: Optional[date] = None) -> DateRange:
        """Current period, inclusive. Weeks start on Sunday."""
        today = today or get_utc_today()
        if time_range == TimeRange.WEEK:
            days_since_sunday = (today.weekday() + 1) % 7
            return today - timedelta(days=days_since_sunday), today
        if time_range == TimeRange.MONTH:
            return today.replace(day=1), today
        if time_range == TimeRange.YEAR:
            return date(today.year, 1, 1), today
        return today, today

    @staticmethod
    def get_previous_date_range(time_range: TimeRange, today: Optional[date] = None) -> DateRange:
        """The whole period before the current one"""
        today = today or get_utc_today()
        if time_range == TimeRange.WEEK:
            days_since_sunday = (today.weekday() + 1) % 7
            end = today - timedelta(days=days_since_sunday + 1)
            return end - timedelta(days=6), end
        if time_range == TimeRange.MONTH:
            first_of_month = today.replace(day=1)
            return add_months(first_of_month, -1), first_of_month - timedelta(days=1)
        if time_range == TimeRange.YEAR:
            return date(today.year - 1, 1, 1), date(today.year - 1, 12, 31)
        yesterday = today - timedelta(days=1)
        return yesterday, yesterday

    @staticmethod
    def growth_percent(current: Decimal, previous: Decimal) -> float:
        """Percent change vs the previous period, 0 when there is nothing to compare with"""
        if not previous or previous <= 0:
            return 0.0
        return _round1(float((Decimal(current) - Decimal(previous)) / Decimal(previous) * 100))

    @staticmethod
    def summarize_revenue(
        credits: Iterable[StudentCredit], previous_total: Decimal, chart_points: int = None
    ) -> Dict:
        chart_points = chart_points or settings.REVENUE_CHART_POINTS
        total = Decimal("0")
        daily: Dict[date, Decimal] = defaultdict(Decimal)
        for credit in credits:
            amount = Decimal(credit.final_price or 0)
            total += amount
            daily[credit.purchase_date.date()] += amount
        chart = [
            {"date": day, "amount": daily[day]}
            for day in sorted(daily)[-chart_points:]
        ]
        return {
            "total": total,
            "growth": ReportService.growth_percent(total, previous_total),
            "chart": chart,
        }

    @staticmethod
    def summarize_students(students: Iterable[Student], start: date, end: date) -> Dict:
        total = active = new = 0
        for student in students:
            total += 1
            if student.status == StudentStatus.ACTIVE:
                active += 1
            if start <= student.created_at.date() <= end:
                new += 1
        growth = _round1(new / total * 100) if total else 0.0
        return {"total": total, "active": active, "new": new, "growth": growth}

    @staticmethod
    def attendance_rate(statuses: List[AttendanceStatus]) -> Tuple[float, int, int]:
        """
        Rate of present/late among non-cancelled records.

        Returns:
            (rate percent, total sessions, total check-ins)
        """
        counted = [s for s in statuses if s != AttendanceStatus.CANCELLED]
        attended = sum(1 for s in counted if s in ATTENDED_STATUSES)
        rate = attended / len(counted) * 100 if counted else 0.0
        return rate, len(counted), attended

    @staticmethod
    def summarize_attendance(
        statuses: List[AttendanceStatus], previous_statuses: List[AttendanceStatus]
    ) -> Dict:
        rate, sessions, checkins = ReportService.attendance_rate(statuses)
        previous_rate, _, _ = ReportService.attendance_rate(previous_statuses)
        return {
            "rate": _round1(rate),
            "total_sessions": sessions,
            "total_checkins": checkins,
            "trend": _round1(rate - previous_rate),
        }

    @staticmethod
    def summarize_credits(
        credits: Iterable[StudentCredit], start: date, end: date, today: Optional[date] = None
    ) -> Dict:
        """
        sold counts credits purchased in the period; used and remaining are
        lifetime totals; expiring_soon is what active credits lose within
        EXPIRING_SOON_DAYS.
        """
        today = today or get_utc_today()
        horizon = today + timedelta(days=settings.EXPIRING_SOON_DAYS)
        sold = used = remaining = expiring_soon = 0
        for credit in credits:
            if start <= credit.purchase_date.date() <= end:
                sold += credit.total_credits or 0
            used += credit.used_credits or 0
            remaining += credit.remaining_credits or 0
            if (
                credit.status == CreditStatus.ACTIVE
                and credit.has_expiry
                and credit.expiry_date
                and today <= credit.expiry_date <= horizon
                and credit.remaining_credits > 0
            ):
                expiring_soon += credit.remaining_credits
        return {"sold": sold, "used": used, "remaining": remaining, "expiring_soon": expiring_soon}

    @staticmethod
    def rank_top_courses(
        courses: Iterable[Course], credits: Iterable[StudentCredit], top_n: int = None
    ) -> List[Dict]:
        top_n = top_n or settings.TOP_COURSES_LIMIT
        stats = {
            c.id: {"course_id": c.id, "name": c.name, "code": c.code, "revenue": Decimal("0"), "students": set()}
            for c in courses
        }
        for credit in credits:
            entry = stats.get(credit.course_id)
            if entry is None:
                continue
            entry["revenue"] += Decimal(credit.final_price or 0)
            entry["students"].add(credit.student_id)
        ranked = sorted(
            (e for e in stats.values() if e["revenue"] > 0),
            key=lambda e: e["revenue"],
            reverse=True,
        )[:top_n]
        return [{**e, "students": len(e["students"])} for e in ranked]

    # Queries

    @staticmethod
    async def _paid_credits(db: AsyncSession, school_id: UUID, start: date, end: date) -> List[StudentCredit]:
        lower, upper = day_bounds(start, end)
        result = await db.execute(
            select(StudentCredit).where(
                StudentCredit.school_id == school_id,
                StudentCredit.payment_status == PaymentStatus.PAID,
                StudentCredit.purchase_date >= lower,
                StudentCredit.purchase_date < upper,
            )
        )
        return list(result.scalars().all())

    @staticmethod
    async def _attendance_statuses(
        db: AsyncSession, school_id: UUID, start: date, end: date
    ) -> List[AttendanceStatus]:
        result = await db.execute(
            select(Attendance.status).where(
                Attendance.school_id == school_id,
                Attendance.check_in_date >= start,
                Attendance.check_in_date <= end,
            )
        )
        return list(result.scalars().all())

    @staticmethod
    async def get_revenue_stats(db: AsyncSession, school_id: UUID, time_range: TimeRange) -> Dict:
        start, end = ReportService.get_date_range(time_range)
        prev_start, prev_end = ReportService.get_previous_date_range(time_range)
        credits = await ReportService._paid_credits(db, school_id, start, end)
        previous = await ReportService._paid_credits(db, school_id, prev_start, prev_end)
        previous_total = sum((Decimal(c.final_price or 0) for c in previous), Decimal("0"))
        return ReportService.summarize_revenue(credits, previous_total)

    @staticmethod
    async def get_student_stats(db: AsyncSession, school_id: UUID, time_range: TimeRange) -> Dict:
        start, end = ReportService.get_date_range(time_range)
        result = await db.execute(
            select(Student).where(Student.school_id == school_id, Student.is_deleted.is_(False))
        )
        return ReportService.summarize_students(result.scalars().all(), start, end)

    @staticmethod
    async def get_attendance_stats(db: AsyncSession, school_id: UUID, time_range: TimeRange) -> Dict:
        start, end = ReportService.get_date_range(time_range)
        prev_start, prev_end = ReportService.get_previous_date_range(time_range)
        current = await ReportService._attendance_statuses(db, school_id, start, end)
        previous = await ReportService._attendance_statuses(db, school_id, prev_start, prev_end)
        return ReportService.summarize_attendance(current, previous)

    @staticmethod
    async def get_credit_stats(db: AsyncSession, school_id: UUID, time_range: TimeRange) -> Dict:
        start, end = ReportService.get_date_range(time_range)
        result = await db.execute(
            select(StudentCredit).where(
                StudentCredit.school_id == school_id,
                StudentCredit.status.in_(REPORTED_CREDIT_STATUSES),
            )
        )
        return ReportService.summarize_credits(result.scalars().all(), start, end)

    @staticmethod
    async def get_top_courses(
        db: AsyncSession, school_id: UUID, time_range: TimeRange, top_n: int = None
    ) -> List[Dict]:
        start, end = ReportService.get_date_range(time_range)
        courses = await db.execute(
            select(Course).where(
                Course.school_id == school_id,
                Course.status == CourseStatus.ACTIVE,
                Course.is_deleted.is_(False),
            )
        )
        credits = await ReportService._paid_credits(db, school_id, start, end)
        return ReportService.rank_top_courses(courses.scalars().all(), credits, top_n)

    @staticmethod
    async def export_report(
        db: AsyncSession, school_id: UUID, report_type: str, time_range: TimeRange
    ) -> Dict:
        start, end = ReportService.get_date_range(time_range)
        return {
            "report_type": report_type,
            "time_range": time_range,
            "generated_at": get_utc_now(),
            "start_date": start,
            "end_date": end,
            "revenue": await ReportService.get_revenue_stats(db, school_id, time_range),
            "students": await ReportService.get_student_stats(db, school_id, time_range),
            "attendance": await ReportService.get_attendance_stats(db, school_id, time_range),
            "credits": await ReportService.get_credit_stats(db, school_id, time_range),
            "top_courses": await ReportService.get_top_courses(db, school_id, time_range),
        }

    @staticmethod
    def to_csv(report: Dict) -> str:
        """Flatten an exported report into section,metric,value rows"""
        buffer = io.StringIO()
        writer = csv.writer(buffer)
        writer.writerow(["section", "metric", "value"])
        writer.writerow(["report", "type", report["report_type"]])
        writer.writerow(["report", "time_range", getattr(report["time_range"], "value", report["time_range"])])
        writer.writerow(["report", "start_date", report["start_date"].isoformat()])
        writer.writerow(["report", "end_date", report["end_date"].isoformat()])
        for section in ("revenue", "students", "attendance", "credits"):
            for metric, value in report[section].items():
                if metric == "chart":
                    for point in value:
                        writer.writerow([section, f"chart:{point['date'].isoformat()}", point["amount"]])
                else:
                    writer.writerow([section, metric, value])
        for rank, course in enumerate(report["top_courses"], start=1):
            writer.writerow(["top_courses", f"{rank}:{course['code']}:revenue", course["revenue"]])
            writer.writerow(["top_courses", f"{rank}:{course['code']}:students", course["students"]])
        return buffer.getvalue()
