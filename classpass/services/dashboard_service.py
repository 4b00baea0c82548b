"""Dashboard Service - home page numbers and activity feed"""

from collections import Counter
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional
from uuid import UUID
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from classpass.config import settings
from classpass.core.exceptions import NotFoundError
from classpass.models.attendance import Attendance
from classpass.models.course import Course
from classpass.models.credit import StudentCredit
from classpass.models.package import CreditPackage
from classpass.models.student import Student
from classpass.models.enums import (
    AttendanceStatus, CourseStatus, CreditStatus, DayOfWeek, PaymentStatus, StudentStatus, TimeRange
)
from classpass.services.report_service import ReportService, day_bounds
from classpass.services.school_service import SchoolService
from classpass.utils.time import get_utc_today

ACTIVITY_SAMPLE_SIZE = 3
WEEKDAYS = list(DayOfWeek)

# id, title, where the app sends the user to finish the step
ONBOARDING_STEPS = [
    ("school-info", "Complete your school information", "/settings"),
    ("create-course", "Create your first course", "/courses/add"),
    ("create-package", "Create a credit package", "/packages/add"),
    ("add-student", "Add your first student", "/students/add"),
]


class DashboardService:

    @staticmethod
    def weekday_of(day: date) -> DayOfWeek:
        return WEEKDAYS[day.weekday()]

    @staticmethod
    def todays_sessions(courses: List[Course], today: date, checked_in: Dict[UUID, int] = None) -> List[Dict]:
        """Sessions of active courses that fall on today's weekday, earliest first"""
        weekday = DashboardService.weekday_of(today)
        checked_in = checked_in or {}
        classes = []
        for course in courses:
            for session in course.sessions:
                if session.day != weekday:
                    continue
                classes.append({
                    "course_id": course.id,
                    "course_name": course.name,
                    "course_code": course.code,
                    "start_time": session.start_time,
                    "end_time": session.end_time,
                    "room": session.room,
                    "enrolled_count": course.total_enrolled or 0,
                    "checked_in": checked_in.get(course.id, 0),
                })
        return sorted(classes, key=lambda c: c["start_time"])

    @staticmethod
    def merge_activities(groups: List[List[Dict]], limit: int) -> List[Dict]:
        merged = [activity for group in groups for activity in group]
        merged.sort(key=lambda a: a["timestamp"], reverse=True)
        return merged[:limit]

    @staticmethod
    def onboarding_status(
        has_school_info: bool, has_courses: bool, has_packages: bool, has_students: bool
    ) -> Dict:
        """
        Setup checklist for a new school. Each step is done once the thing it
        asks for exists, so the checklist never needs to be stored.
        """
        done = {
            "school-info": has_school_info,
            "create-course": has_courses,
            "create-package": has_packages,
            "add-student": has_students,
        }
        steps = [
            {"id": step_id, "title": title, "path": path, "completed": done[step_id]}
            for step_id, title, path in ONBOARDING_STEPS
        ]
        pending = [s["id"] for s in steps if not s["completed"]]
        return {
            "steps": steps,
            "completed_steps": len(steps) - len(pending),
            "total_steps": len(steps),
            "is_complete": not pending,
            "next_step": pending[0] if pending else None,
        }

    @staticmethod
    async def _active_courses(db: AsyncSession, school_id: UUID) -> List[Course]:
        result = await db.execute(
            select(Course).where(
                Course.school_id == school_id,
                Course.status == CourseStatus.ACTIVE,
                Course.is_deleted.is_(False),
            )
        )
        return list(result.scalars().all())

    @staticmethod
    async def _paid_revenue(db: AsyncSession, school_id: UUID, start: date, end: date) -> Decimal:
        lower, upper = day_bounds(start, end)
        total = await db.scalar(
            select(func.coalesce(func.sum(StudentCredit.final_price), 0)).where(
                StudentCredit.school_id == school_id,
                StudentCredit.payment_status == PaymentStatus.PAID,
                StudentCredit.purchase_date >= lower,
                StudentCredit.purchase_date < upper,
            )
        )
        return Decimal(total or 0)

    @staticmethod
    async def get_stats(db: AsyncSession, school_id: UUID) -> Dict:
        today = get_utc_today()
        month_start, month_end = ReportService.get_date_range(TimeRange.MONTH, today)
        prev_start, prev_end = ReportService.get_previous_date_range(TimeRange.MONTH, today)

        total_students = await db.scalar(
            select(func.count(Student.id)).where(
                Student.school_id == school_id,
                Student.status == StudentStatus.ACTIVE,
                Student.is_deleted.is_(False),
            )
        )
        lower, _ = day_bounds(month_start, month_end)
        new_students = await db.scalar(
            select(func.count(Student.id)).where(
                Student.school_id == school_id,
                Student.is_deleted.is_(False),
                Student.created_at >= lower,
            )
        )

        monthly_revenue = await DashboardService._paid_revenue(db, school_id, month_start, month_end)
        last_month_revenue = await DashboardService._paid_revenue(db, school_id, prev_start, prev_end)

        statuses = await db.execute(
            select(Attendance.status).where(
                Attendance.school_id == school_id, Attendance.check_in_date == today
            )
        )
        rate, _, _ = ReportService.attendance_rate(list(statuses.scalars().all()))

        courses = await DashboardService._active_courses(db, school_id)
        return {
            "total_students": total_students or 0,
            "new_students_this_month": new_students or 0,
            "monthly_revenue": monthly_revenue,
            "revenue_growth": ReportService.growth_percent(monthly_revenue, last_month_revenue),
            "today_attendance_rate": round(rate, 1),
            "today_classes": len({c["course_id"] for c in DashboardService.todays_sessions(courses, today)}),
        }

    @staticmethod
    async def get_recent_activities(db: AsyncSession, school_id: UUID, limit: Optional[int] = 10) -> List[Dict]:
        """Latest registrations, purchases, check-ins and low-credit warnings, newest first"""
        students = await db.execute(
            select(Student)
            .where(Student.school_id == school_id, Student.is_deleted.is_(False))
            .order_by(Student.created_at.desc())
            .limit(ACTIVITY_SAMPLE_SIZE)
        )
        purchases = await db.execute(
            select(StudentCredit)
            .where(StudentCredit.school_id == school_id, StudentCredit.payment_status == PaymentStatus.PAID)
            .order_by(StudentCredit.created_at.desc())
            .limit(ACTIVITY_SAMPLE_SIZE)
        )
        check_ins = await db.execute(
            select(Attendance)
            .where(Attendance.school_id == school_id)
            .order_by(Attendance.created_at.desc())
            .limit(ACTIVITY_SAMPLE_SIZE)
        )
        low_credits = await db.execute(
            select(StudentCredit)
            .where(
                StudentCredit.school_id == school_id,
                StudentCredit.status == CreditStatus.ACTIVE,
                StudentCredit.remaining_credits > 0,
                StudentCredit.remaining_credits <= settings.LOW_CREDIT_THRESHOLD,
            )
            .order_by(StudentCredit.updated_at.desc())
            .limit(ACTIVITY_SAMPLE_SIZE)
        )

        groups = [
            [
                {
                    "id": str(s.id),
                    "type": "student",
                    "title": "New student registered",
                    "description": f"{s.first_name} {s.last_name} joined",
                    "timestamp": s.created_at,
                    "student_id": s.id,
                }
                for s in students.scalars().all()
            ],
            [
                {
                    "id": str(c.id),
                    "type": "payment",
                    "title": "Package purchased",
                    "description": f"{c.student_name} - {c.package_name} {c.final_price:,.2f}",
                    "timestamp": c.created_at,
                    "student_id": c.student_id,
                }
                for c in purchases.scalars().all()
            ],
            [
                {
                    "id": str(a.id),
                    "type": "attendance",
                    "title": "Checked in",
                    "description": f"{a.course_name} - {a.student_name}",
                    "timestamp": a.created_at,
                    "student_id": a.student_id,
                }
                for a in check_ins.scalars().all()
            ],
            [
                {
                    "id": str(c.id),
                    "type": "warning",
                    "title": "Credits running low",
                    "description": f"{c.student_name} has {c.remaining_credits} credits left",
                    "timestamp": c.updated_at or c.created_at,
                    "student_id": c.student_id,
                }
                for c in low_credits.scalars().all()
            ],
        ]
        return DashboardService.merge_activities(groups, limit)

    @staticmethod
    async def get_today_classes(db: AsyncSession, school_id: UUID) -> List[Dict]:
        today = get_utc_today()
        courses = await DashboardService._active_courses(db, school_id)
        result = await db.execute(
            select(Attendance.course_id).where(
                Attendance.school_id == school_id,
                Attendance.check_in_date == today,
                Attendance.status != AttendanceStatus.CANCELLED,
            )
        )
        counts = Counter(result.scalars().all())
        return DashboardService.todays_sessions(courses, today, counts)

    @staticmethod
    async def get_onboarding(db: AsyncSession, school_id: UUID) -> Dict:
        school = await SchoolService.get_school_by_id(db, school_id)
        if not school:
            raise NotFoundError("School not found")
        usage = await SchoolService.get_usage(db, school)
        packages = await db.scalar(
            select(func.count(CreditPackage.id)).where(
                CreditPackage.school_id == school_id, CreditPackage.is_deleted.is_(False)
            )
        )
        return DashboardService.onboarding_status(
            has_school_info=bool(school.address or school.phone or school.logo_url),
            has_courses=usage["courses"] > 0,
            has_packages=(packages or 0) > 0,
            has_students=usage["students"] > 0,
        )
