"""Unit tests for ReportService aggregations."""

import pytest
from datetime import date, datetime, timedelta
from decimal import Decimal
from uuid import uuid4

from classpass.models.course import Course
from classpass.models.credit import StudentCredit
from classpass.models.enums import AttendanceStatus, CreditStatus, StudentStatus, TimeRange
from classpass.models.student import Student
from classpass.services.report_service import ReportService, day_bounds

# A Wednesday
TODAY = date(2025, 3, 12)


def _sale(amount, purchased, course_id=None, student_id=None, **kwargs):
    return StudentCredit(
        final_price=Decimal(amount),
        purchase_date=purchased,
        course_id=course_id,
        student_id=student_id or uuid4(),
        **kwargs,
    )


# ---------------------------------------------------------------------------
# Periods
# ---------------------------------------------------------------------------

@pytest.mark.parametrize(
    "time_range, expected",
    [
        (TimeRange.TODAY, (TODAY, TODAY)),
        (TimeRange.WEEK, (date(2025, 3, 9), TODAY)),
        (TimeRange.MONTH, (date(2025, 3, 1), TODAY)),
        (TimeRange.YEAR, (date(2025, 1, 1), TODAY)),
    ],
)
def test_get_date_range(time_range, expected):
    assert ReportService.get_date_range(time_range, TODAY) == expected


@pytest.mark.parametrize(
    "time_range, expected",
    [
        (TimeRange.TODAY, (date(2025, 3, 11), date(2025, 3, 11))),
        (TimeRange.WEEK, (date(2025, 3, 2), date(2025, 3, 8))),
        (TimeRange.MONTH, (date(2025, 2, 1), date(2025, 2, 28))),
        (TimeRange.YEAR, (date(2024, 1, 1), date(2024, 12, 31))),
    ],
)
def test_get_previous_date_range(time_range, expected):
    assert ReportService.get_previous_date_range(time_range, TODAY) == expected


def test_week_starts_on_sunday():
    sunday = date(2025, 3, 9)
    assert ReportService.get_date_range(TimeRange.WEEK, sunday) == (sunday, sunday)


def test_day_bounds_cover_whole_end_day():
    start, end = day_bounds(date(2025, 3, 1), date(2025, 3, 12))
    assert start == datetime(2025, 3, 1)
    assert end == datetime(2025, 3, 13)


# ---------------------------------------------------------------------------
# Revenue
# ---------------------------------------------------------------------------

def test_growth_percent():
    assert ReportService.growth_percent(Decimal("150"), Decimal("100")) == 50.0
    assert ReportService.growth_percent(Decimal("100"), Decimal("300")) == -66.7
    assert ReportService.growth_percent(Decimal("100"), Decimal("0")) == 0.0


def test_summarize_revenue_keeps_latest_chart_points():
    credits = [
        _sale("100.00", datetime(2025, 3, day, 9)) for day in range(1, 8)
    ] + [_sale("50.00", datetime(2025, 3, 7, 15))]

    summary = ReportService.summarize_revenue(credits, Decimal("375"), chart_points=5)

    assert summary["total"] == Decimal("750.00")
    assert summary["growth"] == 100.0
    assert [p["date"] for p in summary["chart"]] == [date(2025, 3, d) for d in range(3, 8)]
    assert summary["chart"][-1]["amount"] == Decimal("150.00")


# ---------------------------------------------------------------------------
# Students and attendance
# ---------------------------------------------------------------------------

def test_summarize_students():
    students = [
        Student(status=StudentStatus.ACTIVE, created_at=datetime(2025, 3, 5)),
        Student(status=StudentStatus.ACTIVE, created_at=datetime(2024, 12, 1)),
        Student(status=StudentStatus.INACTIVE, created_at=datetime(2024, 11, 1)),
        Student(status=StudentStatus.GRADUATED, created_at=datetime(2024, 10, 1)),
    ]
    summary = ReportService.summarize_students(students, date(2025, 3, 1), TODAY)
    assert summary == {"total": 4, "active": 2, "new": 1, "growth": 25.0}


def test_summarize_students_empty():
    assert ReportService.summarize_students([], date(2025, 3, 1), TODAY)["growth"] == 0.0


def test_attendance_rate_ignores_cancelled():
    statuses = [
        AttendanceStatus.PRESENT,
        AttendanceStatus.LATE,
        AttendanceStatus.ABSENT,
        AttendanceStatus.CANCELLED,
    ]
    rate, sessions, checkins = ReportService.attendance_rate(statuses)
    assert sessions == 3
    assert checkins == 2
    assert round(rate, 1) == 66.7


def test_summarize_attendance_trend():
    current = [AttendanceStatus.PRESENT] * 3 + [AttendanceStatus.ABSENT]
    previous = [AttendanceStatus.PRESENT, AttendanceStatus.ABSENT]
    summary = ReportService.summarize_attendance(current, previous)
    assert summary == {"rate": 75.0, "total_sessions": 4, "total_checkins": 3, "trend": 25.0}


def test_summarize_attendance_no_records():
    summary = ReportService.summarize_attendance([], [])
    assert summary["rate"] == 0.0
    assert summary["trend"] == 0.0


# ---------------------------------------------------------------------------
# Credits and courses
# ---------------------------------------------------------------------------

def test_summarize_credits():
    credits = [
        StudentCredit(
            purchase_date=datetime(2025, 3, 2), total_credits=12, used_credits=2, remaining_credits=10,
            status=CreditStatus.ACTIVE, has_expiry=True, expiry_date=TODAY + timedelta(days=10),
        ),
        StudentCredit(
            purchase_date=datetime(2025, 1, 2), total_credits=5, used_credits=1, remaining_credits=4,
            status=CreditStatus.ACTIVE, has_expiry=True, expiry_date=TODAY + timedelta(days=90),
        ),
        StudentCredit(
            purchase_date=datetime(2025, 1, 2), total_credits=5, used_credits=0, remaining_credits=5,
            status=CreditStatus.EXPIRED, has_expiry=True, expiry_date=TODAY - timedelta(days=1),
        ),
    ]
    summary = ReportService.summarize_credits(credits, date(2025, 3, 1), TODAY, today=TODAY)
    assert summary == {"sold": 12, "used": 3, "remaining": 19, "expiring_soon": 10}


def test_rank_top_courses():
    swim = Course(id=uuid4(), name="Swimming", code="SPO25001")
    piano = Course(id=uuid4(), name="Piano", code="ART25001")
    idle = Course(id=uuid4(), name="Chess", code="OTH25001")
    student = uuid4()
    credits = [
        _sale("1000.00", datetime(2025, 3, 1), course_id=swim.id, student_id=student),
        _sale("1000.00", datetime(2025, 3, 2), course_id=swim.id, student_id=student),
        _sale("1500.00", datetime(2025, 3, 3), course_id=piano.id),
        _sale("999.00", datetime(2025, 3, 3), course_id=uuid4()),
    ]

    ranked = ReportService.rank_top_courses([swim, piano, idle], credits, top_n=5)

    assert [c["code"] for c in ranked] == ["SPO25001", "ART25001"]
    assert ranked[0]["revenue"] == Decimal("2000.00")
    assert ranked[0]["students"] == 1


def test_to_csv_flattens_sections():
    report = {
        "report_type": "summary",
        "time_range": TimeRange.MONTH,
        "start_date": date(2025, 3, 1),
        "end_date": TODAY,
        "revenue": {"total": Decimal("100.00"), "growth": 0.0, "chart": [{"date": TODAY, "amount": Decimal("100.00")}]},
        "students": {"total": 1, "active": 1, "new": 1, "growth": 100.0},
        "attendance": {"rate": 100.0, "total_sessions": 1, "total_checkins": 1, "trend": 0.0},
        "credits": {"sold": 10, "used": 1, "remaining": 9, "expiring_soon": 0},
        "top_courses": [{"code": "SPO25001", "revenue": Decimal("100.00"), "students": 1}],
    }
    lines = ReportService.to_csv(report).strip().splitlines()
    assert lines[0] == "section,metric,value"
    assert "report,time_range,month" in lines
    assert "revenue,chart:2025-03-12,100.00" in lines
    assert "top_courses,1:SPO25001:students,1" in lines
