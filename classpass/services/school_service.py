"""School (tenant) Service"""

from typing import Optional, Dict, Any, Tuple
from uuid import UUID
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from classpass.core.exceptions import ConflictError, QuotaExceededError
from classpass.core.logging import get_logger
from classpass.models.school import School
from classpass.models.user import User
from classpass.models.student import Student
from classpass.models.course import Course
from classpass.models.enums import SchoolPlan, UserRole
from classpass.schemas.school import SchoolUpdate
from classpass.services.user_service import UserService
from classpass.utils.time import get_utc_now

logger = get_logger(__name__)

GIB = 1024 ** 3
UNLIMITED_QUOTA = 999999

# (max_students, max_teachers, max_courses, storage bytes)
PLAN_QUOTAS = {
    SchoolPlan.FREE: (50, 3, 5, 1 * GIB),
    SchoolPlan.BASIC: (200, 10, 20, 5 * GIB),
    SchoolPlan.PRO: (UNLIMITED_QUOTA, UNLIMITED_QUOTA, UNLIMITED_QUOTA, 20 * GIB),
    SchoolPlan.ENTERPRISE: (UNLIMITED_QUOTA, UNLIMITED_QUOTA, UNLIMITED_QUOTA, 20 * GIB),
}


class SchoolService:
    """Service layer for School operations"""

    @staticmethod
    def plan_defaults(plan: SchoolPlan) -> Dict[str, Any]:
        """Quota and feature columns for a plan, ready to pass to School(**...)"""
        max_students, max_teachers, max_courses, storage = PLAN_QUOTAS[plan]
        top_tier = plan in (SchoolPlan.PRO, SchoolPlan.ENTERPRISE)
        return {
            "plan": plan,
            "max_students": max_students,
            "max_teachers": max_teachers,
            "max_courses": max_courses,
            "storage_quota": storage,
            "feature_online_payment": plan != SchoolPlan.FREE,
            "feature_parent_app": top_tier,
            "feature_api_access": top_tier,
            "feature_custom_domain": top_tier,
            "feature_white_label": plan == SchoolPlan.ENTERPRISE,
        }

    @staticmethod
    async def get_school_by_id(db: AsyncSession, school_id: UUID) -> Optional[School]:
        result = await db.execute(select(School).where(School.id == school_id))
        return result.scalar_one_or_none()

    @staticmethod
    async def create_school_with_owner(
        db: AsyncSession,
        school_name: str,
        owner_data: Dict[str, str],
        plan: SchoolPlan = SchoolPlan.FREE,
        school_email: Optional[str] = None,
        school_phone: Optional[str] = None,
        created_by: Optional[UUID] = None,
    ) -> Tuple[School, User]:
        """
        Create a school and its owner account in one session.

        The email uniqueness check runs before anything is added so a
        duplicate signup leaves no orphan school behind.
        """
        UserService.validate_password(owner_data["password"])
        if await UserService.check_email_exists(db, owner_data["email"]):
            raise ConflictError("Email is already in use", code="EMAIL_ALREADY_IN_USE")

        school = School(
            name=school_name,
            email=school_email or owner_data["email"],
            phone=school_phone,
            billing_email=owner_data["email"],
            timezone="Asia/Bangkok",
            currency="THB",
            date_format="DD/MM/YYYY",
            language="th",
            is_active=True,
            is_verified=False,
            **SchoolService.plan_defaults(plan),
        )
        db.add(school)
        await db.flush()

        owner = await UserService.create_user(
            db,
            role=UserRole.OWNER,
            school_id=school.id,
            created_by=created_by,
            **owner_data,
        )
        await db.commit()
        await db.refresh(school)
        logger.info(
            "School created",
            extra={"school_id": str(school.id), "plan": plan.value, "owner_id": str(owner.id)},
        )
        return school, owner

    @staticmethod
    async def update_school(
        db: AsyncSession, school_id: UUID, school_update: SchoolUpdate
    ) -> Optional[School]:
        school = await SchoolService.get_school_by_id(db, school_id)
        if not school:
            return None

        for field, value in School.writable_changes(school_update.model_dump(exclude_unset=True)).items():
            setattr(school, field, value)
        school.last_active_at = get_utc_now()

        await db.commit()
        await db.refresh(school)
        return school

    @staticmethod
    async def get_usage(db: AsyncSession, school: School) -> Dict[str, int]:
        students = await db.scalar(
            select(func.count(Student.id)).where(
                Student.school_id == school.id, Student.is_deleted.is_(False)
            )
        )
        courses = await db.scalar(
            select(func.count(Course.id)).where(
                Course.school_id == school.id, Course.is_deleted.is_(False)
            )
        )
        teachers = await UserService.count_staff(db, school.id)
        return {
            "students": students or 0,
            "max_students": school.max_students,
            "teachers": teachers,
            "max_teachers": school.max_teachers,
            "courses": courses or 0,
            "max_courses": school.max_courses,
        }

    @staticmethod
    async def ensure_quota(db: AsyncSession, school_id: UUID, resource: str) -> None:
        """
        Refuse to create another student, course or staff user beyond the plan quota.

        Args:
            resource: "students", "courses" or "teachers" (admins and teachers)
        """
        school = await SchoolService.get_school_by_id(db, school_id)
        if not school:
            return
        usage = await SchoolService.get_usage(db, school)
        if usage[resource] >= usage[f"max_{resource}"]:
            raise QuotaExceededError(
                f"Your {school.plan.value} plan allows {usage[f'max_{resource}']} {resource}"
            )
