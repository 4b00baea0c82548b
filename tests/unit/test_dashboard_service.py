"""Unit tests for DashboardService helpers."""

from datetime import date, datetime, time
from unittest.mock import AsyncMock, patch
from uuid import uuid4

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from classpass.models.course import Course, CourseSession
from classpass.models.enums import DayOfWeek, SchoolPlan
from classpass.models.school import School
from classpass.services.dashboard_service import DashboardService


def test_weekday_of():
    assert DashboardService.weekday_of(date(2025, 6, 2)) == DayOfWeek.MONDAY
    assert DashboardService.weekday_of(date(2025, 6, 8)) == DayOfWeek.SUNDAY


def test_todays_sessions_filters_and_sorts():
    monday = date(2025, 6, 2)
    swim = Course(id=uuid4(), name="Swimming", code="SPO25001", total_enrolled=8)
    swim.sessions = [
        CourseSession(day=DayOfWeek.MONDAY, start_time=time(16), end_time=time(17), room="Pool"),
        CourseSession(day=DayOfWeek.WEDNESDAY, start_time=time(16), end_time=time(17), room="Pool"),
    ]
    piano = Course(id=uuid4(), name="Piano", code="ART25001", total_enrolled=2)
    piano.sessions = [
        CourseSession(day=DayOfWeek.MONDAY, start_time=time(9), end_time=time(10), room="Studio"),
    ]

    classes = DashboardService.todays_sessions([swim, piano], monday, {swim.id: 3})

    assert [c["course_code"] for c in classes] == ["ART25001", "SPO25001"]
    assert classes[0]["checked_in"] == 0
    assert classes[1]["checked_in"] == 3
    assert classes[1]["enrolled_count"] == 8
    assert classes[1]["room"] == "Pool"


def test_todays_sessions_empty_on_free_day():
    course = Course(id=uuid4(), name="Swimming", code="SPO25001", total_enrolled=0)
    course.sessions = [
        CourseSession(day=DayOfWeek.MONDAY, start_time=time(16), end_time=time(17)),
    ]
    assert DashboardService.todays_sessions([course], date(2025, 6, 3)) == []


def test_merge_activities_newest_first_with_limit():
    purchases = [
        {"type": "purchase", "timestamp": datetime(2025, 6, 2, 9)},
        {"type": "purchase", "timestamp": datetime(2025, 6, 1, 9)},
    ]
    check_ins = [
        {"type": "check_in", "timestamp": datetime(2025, 6, 2, 10)},
    ]
    merged = DashboardService.merge_activities([purchases, check_ins], limit=2)
    assert [a["type"] for a in merged] == ["check_in", "purchase"]
    assert merged[1]["timestamp"] == datetime(2025, 6, 2, 9)


def test_onboarding_new_school_starts_at_school_info():
    status = DashboardService.onboarding_status(False, False, False, False)
    assert [s["id"] for s in status["steps"]] == ["school-info", "create-course", "create-package", "add-student"]
    assert status["completed_steps"] == 0
    assert status["is_complete"] is False
    assert status["next_step"] == "school-info"


def test_onboarding_next_step_is_first_pending():
    status = DashboardService.onboarding_status(True, True, False, True)
    assert status["completed_steps"] == 3
    assert status["next_step"] == "create-package"
    assert status["steps"][2]["path"] == "/packages/add"


def test_onboarding_complete():
    status = DashboardService.onboarding_status(True, True, True, True)
    assert status["is_complete"] is True
    assert status["next_step"] is None


@pytest.mark.asyncio
async def test_get_onboarding_from_counts():
    db = AsyncMock(spec=AsyncSession)
    db.scalar.return_value = 2
    school = School(id=uuid4(), name="Bright Minds", plan=SchoolPlan.FREE, phone="021234567")

    with patch("classpass.services.dashboard_service.SchoolService.get_school_by_id", new_callable=AsyncMock) as mock_school, \
            patch("classpass.services.dashboard_service.SchoolService.get_usage", new_callable=AsyncMock) as mock_usage:
        mock_school.return_value = school
        mock_usage.return_value = {"students": 0, "courses": 1, "teachers": 0}
        status = await DashboardService.get_onboarding(db, school.id)

    done = {s["id"]: s["completed"] for s in status["steps"]}
    assert done == {"school-info": True, "create-course": True, "create-package": True, "add-student": False}
    assert status["next_step"] == "add-student"
