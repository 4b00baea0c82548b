"""Platform Administration Service"""

from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID
from sqlalchemy import select, func, delete
from sqlalchemy.ext.asyncio import AsyncSession

from classpass.config import settings
from classpass.core.exceptions import NotFoundError
from classpass.core.logging import get_logger
from classpass.models.attendance import Attendance
from classpass.models.course import Course, CourseSession
from classpass.models.credit import StudentCredit, CreditAdjustment
from classpass.models.package import CreditPackage
from classpass.models.school import School
from classpass.models.student import Student, StudentParent
from classpass.models.system_log import SystemLog
from classpass.models.user import User
from classpass.models.enums import PaymentStatus, UserRole
from classpass.schemas.superadmin import SchoolCreateRequest
from classpass.services.school_service import SchoolService

logger = get_logger(__name__)


class SuperAdminService:
    """Cross-tenant operations. Callers must already be verified superadmins."""

    @staticmethod
    async def write_log(
        db: AsyncSession,
        action: str,
        actor: Optional[User] = None,
        school_id: Optional[UUID] = None,
        details: Optional[Dict[str, Any]] = None,
        error: Optional[str] = None,
    ) -> SystemLog:
        entry = SystemLog(
            action=action,
            school_id=school_id,
            actor_id=actor.id if actor else None,
            actor_email=actor.email if actor else None,
            details=details,
            error=error,
        )
        db.add(entry)
        await db.commit()
        return entry

    @staticmethod
    async def get_system_stats(db: AsyncSession) -> Dict:
        total_schools = await db.scalar(select(func.count(School.id)))
        active_schools = await db.scalar(
            select(func.count(School.id)).where(School.is_active.is_(True))
        )
        total_users = await db.scalar(
            select(func.count(User.id)).where(
                User.role != UserRole.SUPERADMIN, User.is_deleted.is_(False)
            )
        )
        total_students = await db.scalar(
            select(func.count(Student.id)).where(Student.is_deleted.is_(False))
        )
        total_revenue = await db.scalar(
            select(func.coalesce(func.sum(StudentCredit.final_price), 0)).where(
                StudentCredit.payment_status == PaymentStatus.PAID
            )
        )
        return {
            "total_schools": total_schools or 0,
            "active_schools": active_schools or 0,
            "total_users": total_users or 0,
            "total_students": total_students or 0,
            "total_revenue": Decimal(total_revenue or 0),
            "storage_used": 0,
        }

    @staticmethod
    async def list_schools(db: AsyncSession) -> List[Dict]:
        """Every school, newest first, with headcounts and paid revenue"""
        schools = (await db.execute(select(School).order_by(School.created_at.desc()))).scalars().all()

        students = dict((await db.execute(
            select(Student.school_id, func.count(Student.id))
            .where(Student.is_deleted.is_(False))
            .group_by(Student.school_id)
        )).all())
        users = dict((await db.execute(
            select(User.school_id, func.count(User.id))
            .where(User.school_id.is_not(None), User.is_deleted.is_(False))
            .group_by(User.school_id)
        )).all())
        revenue = dict((await db.execute(
            select(StudentCredit.school_id, func.sum(StudentCredit.final_price))
            .where(StudentCredit.payment_status == PaymentStatus.PAID)
            .group_by(StudentCredit.school_id)
        )).all())

        return [
            {
                "id": school.id,
                "name": school.name,
                "email": school.email,
                "plan": school.plan,
                "is_active": school.is_active,
                "created_at": school.created_at,
                "student_count": students.get(school.id, 0),
                "user_count": users.get(school.id, 0),
                "revenue": Decimal(revenue.get(school.id) or 0),
            }
            for school in schools
        ]

    @staticmethod
    async def create_school(
        db: AsyncSession, request: SchoolCreateRequest, actor: User
    ) -> Tuple[School, User]:
        school, owner = await SchoolService.create_school_with_owner(
            db,
            school_name=request.school_name,
            owner_data={
                "email": request.owner_email,
                "password": request.owner_password,
                "first_name": request.owner_first_name,
                "last_name": request.owner_last_name,
            },
            plan=request.plan,
            school_email=request.school_email,
            school_phone=request.school_phone,
            created_by=actor.id,
        )
        await SuperAdminService.write_log(
            db,
            "school.create",
            actor=actor,
            school_id=school.id,
            details={"name": school.name, "plan": request.plan.value, "owner_email": owner.email},
        )
        return school, owner

    @staticmethod
    async def _delete_in_batches(db: AsyncSession, model, condition) -> int:
        """Delete matching rows at most DELETE_BATCH_SIZE at a time, committing each batch"""
        deleted = 0
        while True:
            ids = (await db.execute(
                select(model.id).where(condition).limit(settings.DELETE_BATCH_SIZE)
            )).scalars().all()
            if not ids:
                return deleted
            await db.execute(delete(model).where(model.id.in_(ids)))
            await db.commit()
            deleted += len(ids)

    @staticmethod
    async def delete_school(db: AsyncSession, school_id: UUID, actor: User) -> Dict[str, int]:
        """
        Permanently remove a school and everything it owns.

        Children go before parents so no batch trips a foreign key. Each batch
        commits on its own; a failure part way leaves the earlier batches
        deleted and is recorded as school.delete.error.

        Returns:
            Rows deleted per table
        """
        school = await SchoolService.get_school_by_id(db, school_id)
        if not school:
            raise NotFoundError("School not found")
        school_name = school.name

        await SuperAdminService.write_log(
            db, "school.delete", actor=actor, school_id=school_id, details={"name": school_name}
        )
        logger.warning("Deleting school", extra={"school_id": str(school_id), "actor_id": str(actor.id)})

        school_courses = select(Course.id).where(Course.school_id == school_id)
        school_students = select(Student.id).where(Student.school_id == school_id)
        plan = [
            ("attendance", Attendance, Attendance.school_id == school_id),
            ("credit_adjustments", CreditAdjustment, CreditAdjustment.school_id == school_id),
            ("student_credits", StudentCredit, StudentCredit.school_id == school_id),
            ("credit_packages", CreditPackage, CreditPackage.school_id == school_id),
            ("course_sessions", CourseSession, CourseSession.course_id.in_(school_courses)),
            ("courses", Course, Course.school_id == school_id),
            ("student_parents", StudentParent, StudentParent.student_id.in_(school_students)),
            ("students", Student, Student.school_id == school_id),
            ("users", User, User.school_id == school_id),
        ]

        counts: Dict[str, int] = {}
        try:
            for table, model, condition in plan:
                counts[table] = await SuperAdminService._delete_in_batches(db, model, condition)
            await db.execute(delete(School).where(School.id == school_id))
            await db.commit()
            counts["schools"] = 1
        except Exception as exc:
            await db.rollback()
            logger.error(
                "School deletion failed",
                extra={"school_id": str(school_id), "deleted": counts},
                exc_info=True,
            )
            await SuperAdminService.write_log(
                db,
                "school.delete.error",
                actor=actor,
                school_id=school_id,
                details={"name": school_name, "deleted": counts},
                error=str(exc),
            )
            raise

        await SuperAdminService.write_log(
            db,
            "school.delete.completed",
            actor=actor,
            school_id=school_id,
            details={"name": school_name, "deleted": counts},
        )
        logger.info("School deleted", extra={"school_id": str(school_id), "deleted": counts})
        return counts

    @staticmethod
    async def list_logs(db: AsyncSession, limit: int = None) -> List[SystemLog]:
        limit = limit or settings.SYSTEM_LOGS_LIMIT
        result = await db.execute(
            select(SystemLog).order_by(SystemLog.timestamp.desc()).limit(limit)
        )
        return list(result.scalars().all())
