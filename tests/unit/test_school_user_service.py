"""Unit tests for SchoolService plans/quotas and UserService helpers."""

import pytest
from unittest.mock import AsyncMock, patch
from uuid import uuid4
from sqlalchemy.ext.asyncio import AsyncSession

from classpass.core.exceptions import AuthenticationError, ConflictError, QuotaExceededError, ValidationError
from classpass.core.security import get_password_hash
from classpass.models.enums import SchoolPlan, UserRole
from classpass.models.school import School
from classpass.models.user import User
from classpass.services.school_service import SchoolService, UNLIMITED_QUOTA
from classpass.services.user_service import UserService


# ---------------------------------------------------------------------------
# Plans
# ---------------------------------------------------------------------------

def test_free_plan_defaults():
    defaults = SchoolService.plan_defaults(SchoolPlan.FREE)
    assert defaults["max_students"] == 50
    assert defaults["max_teachers"] == 3
    assert defaults["max_courses"] == 5
    assert defaults["feature_online_payment"] is False
    assert defaults["feature_white_label"] is False


def test_enterprise_plan_is_unlimited_with_white_label():
    defaults = SchoolService.plan_defaults(SchoolPlan.ENTERPRISE)
    assert defaults["max_students"] == UNLIMITED_QUOTA
    assert defaults["feature_api_access"] is True
    assert defaults["feature_white_label"] is True
    assert SchoolService.plan_defaults(SchoolPlan.PRO)["feature_white_label"] is False


@pytest.mark.asyncio
async def test_ensure_quota_blocks_at_limit():
    db = AsyncMock(spec=AsyncSession)
    school = School(id=uuid4(), plan=SchoolPlan.FREE, max_students=50, max_teachers=3, max_courses=5)

    with patch("classpass.services.school_service.SchoolService.get_school_by_id", new_callable=AsyncMock) as mock_school, \
            patch("classpass.services.school_service.SchoolService.get_usage", new_callable=AsyncMock) as mock_usage:
        mock_school.return_value = school
        mock_usage.return_value = {
            "students": 50, "max_students": 50,
            "teachers": 1, "max_teachers": 3,
            "courses": 0, "max_courses": 5,
        }

        with pytest.raises(QuotaExceededError):
            await SchoolService.ensure_quota(db, school.id, "students")
        await SchoolService.ensure_quota(db, school.id, "teachers")


@pytest.mark.asyncio
async def test_staff_count_includes_admins_and_teachers():
    db = AsyncMock(spec=AsyncSession)
    db.scalar.return_value = 3

    assert await UserService.count_staff(db, uuid4()) == 3

    params = db.scalar.call_args.args[0].compile().params
    role_values = [v for v in params.values() if isinstance(v, (list, tuple))]
    assert [set(v) for v in role_values] == [{UserRole.ADMIN, UserRole.TEACHER}]


@pytest.mark.asyncio
async def test_usage_reports_staff_against_max_teachers():
    db = AsyncMock(spec=AsyncSession)
    db.scalar.side_effect = [4, 1]
    school = School(id=uuid4(), plan=SchoolPlan.FREE, max_students=50, max_teachers=3, max_courses=5)

    with patch("classpass.services.school_service.UserService.count_staff", new_callable=AsyncMock) as mock_staff:
        mock_staff.return_value = 3
        usage = await SchoolService.get_usage(db, school)

    mock_staff.assert_awaited_once_with(db, school.id)
    assert usage["teachers"] == 3
    assert usage["students"] == 4
    assert usage["courses"] == 1

@pytest.mark.asyncio
async def test_duplicate_owner_email_creates_nothing():
    db = AsyncMock(spec=AsyncSession)
    owner = {"email": "taken@example.com", "password": "secret123", "first_name": "A", "last_name": "B"}

    with patch("classpass.services.school_service.UserService.check_email_exists", new_callable=AsyncMock) as mock_exists:
        mock_exists.return_value = True
        with pytest.raises(ConflictError) as exc:
            await SchoolService.create_school_with_owner(db, "Dup School", owner)

    assert exc.value.code == "EMAIL_ALREADY_IN_USE"
    assert not db.add.called


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------

def test_display_name():
    assert UserService.build_display_name("Olivia", "Owner") == "Olivia Owner"
    assert UserService.build_display_name("Olivia", "") == "Olivia"


def test_weak_password():
    with pytest.raises(ValidationError) as exc:
        UserService.validate_password("12345")
    assert exc.value.code == "WEAK_PASSWORD"
    UserService.validate_password("123456")


def test_summarize_users():
    users = [
        User(role=UserRole.OWNER, is_active=True),
        User(role=UserRole.TEACHER, is_active=True),
        User(role=UserRole.TEACHER, is_active=False),
    ]
    summary = UserService.summarize_users(users)
    assert summary["total"] == 3
    assert summary["active"] == 2
    assert summary["inactive"] == 1
    assert summary["by_role"] == {"owner": 1, "admin": 0, "teacher": 2}


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "password, is_active, code",
    [
        ("wrong-password", True, "WRONG_PASSWORD"),
        ("right-password", False, "ACCOUNT_DISABLED"),
    ],
)
async def test_authenticate_failures(password, is_active, code):
    db = AsyncMock(spec=AsyncSession)
    user = User(
        id=uuid4(),
        email="t@example.com",
        hashed_password=get_password_hash("right-password"),
        is_active=is_active,
        is_deleted=False,
    )
    with patch("classpass.services.user_service.UserService.get_user_by_email", new_callable=AsyncMock) as mock_get:
        mock_get.return_value = user
        with pytest.raises(AuthenticationError) as exc:
            await UserService.authenticate_user(db, "t@example.com", password)
    assert exc.value.code == code
    assert not db.commit.called


@pytest.mark.asyncio
async def test_authenticate_unknown_email():
    db = AsyncMock(spec=AsyncSession)
    with patch("classpass.services.user_service.UserService.get_user_by_email", new_callable=AsyncMock) as mock_get:
        mock_get.return_value = None
        with pytest.raises(AuthenticationError) as exc:
            await UserService.authenticate_user(db, "nobody@example.com", "whatever")
    assert exc.value.code == "USER_NOT_FOUND"
