"""Course Catalog Service"""

import re
from typing import Optional, List
from uuid import UUID
from sqlalchemy import select, or_, func, String
from sqlalchemy.ext.asyncio import AsyncSession

from classpass.core.logging import get_logger
from classpass.models.course import Course, CourseSession
from classpass.models.enums import CourseCategory, CourseStatus
from classpass.schemas.course import CourseCreate, CourseUpdate
from classpass.services.school_service import SchoolService
from classpass.utils.time import get_utc_today

logger = get_logger(__name__)


class CourseService:
    """Service layer for courses and their weekly sessions"""

    @staticmethod
    def code_prefix(category: CourseCategory, year: int) -> str:
        """First three letters of the category, upper-cased, plus the two-digit year"""
        return f"{category.value[:3].upper()}{year % 100:02d}"

    @staticmethod
    def next_course_code(existing_codes: List[str], category: CourseCategory, year: int) -> str:
        prefix = CourseService.code_prefix(category, year)
        pattern = re.compile(rf"^{prefix}(\d+)$")
        highest = 0
        for code in existing_codes:
            match = pattern.match(code or "")
            if match:
                highest = max(highest, int(match.group(1)))
        return f"{prefix}{highest + 1:03d}"

    @staticmethod
    async def generate_course_code(db: AsyncSession, school_id: UUID, category: CourseCategory) -> str:
        year = get_utc_today().year
        prefix = CourseService.code_prefix(category, year)
        result = await db.execute(
            select(Course.code).where(Course.school_id == school_id, Course.code.like(f"{prefix}%"))
        )
        return CourseService.next_course_code(list(result.scalars().all()), category, year)

    @staticmethod
    async def get_course(db: AsyncSession, school_id: UUID, course_id: UUID) -> Optional[Course]:
        result = await db.execute(
            select(Course).where(
                Course.id == course_id,
                Course.school_id == school_id,
                Course.is_deleted.is_(False),
            )
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def list_courses(
        db: AsyncSession, school_id: UUID, status: Optional[CourseStatus] = None
    ) -> List[Course]:
        query = select(Course).where(Course.school_id == school_id, Course.is_deleted.is_(False))
        if status:
            query = query.where(Course.status == status)
        result = await db.execute(query.order_by(Course.name))
        return list(result.scalars().all())

    @staticmethod
    async def search_courses(db: AsyncSession, school_id: UUID, term: str) -> List[Course]:
        """Match name, code, description or any tag, case-insensitive"""
        like = f"%{term.strip()}%"
        tags_text = func.array_to_string(Course.tags, " ", type_=String)
        result = await db.execute(
            select(Course)
            .where(
                Course.school_id == school_id,
                Course.is_deleted.is_(False),
                or_(
                    Course.name.ilike(like),
                    Course.code.ilike(like),
                    Course.description.ilike(like),
                    tags_text.ilike(like),
                ),
            )
            .order_by(Course.name)
        )
        return list(result.scalars().all())

    @staticmethod
    async def create_course(db: AsyncSession, school_id: UUID, course_in: CourseCreate) -> Course:
        await SchoolService.ensure_quota(db, school_id, "courses")

        course = Course(
            school_id=school_id,
            code=await CourseService.generate_course_code(db, school_id, course_in.category),
            status=CourseStatus.ACTIVE,
            is_active=True,
            total_enrolled=0,
            sessions=[CourseSession(**s.model_dump()) for s in course_in.sessions],
            **course_in.model_dump(exclude={"sessions"}),
        )
        db.add(course)
        await db.commit()
        await db.refresh(course)
        logger.info("Course created", extra={"school_id": str(school_id), "code": course.code})
        return course

    @staticmethod
    async def update_course(
        db: AsyncSession, school_id: UUID, course_id: UUID, course_update: CourseUpdate
    ) -> Optional[Course]:
        course = await CourseService.get_course(db, school_id, course_id)
        if not course:
            return None

        data = Course.writable_changes(course_update.model_dump(exclude_unset=True, exclude={"sessions"}))
        for field, value in data.items():
            setattr(course, field, value)
        if course_update.sessions is not None:
            course.sessions = [CourseSession(**s.model_dump()) for s in course_update.sessions]
        if "status" in data:
            course.is_active = course.status == CourseStatus.ACTIVE

        await db.commit()
        await db.refresh(course)
        return course

    @staticmethod
    async def delete_course(db: AsyncSession, school_id: UUID, course_id: UUID) -> bool:
        """Soft delete: archived and hidden from lists"""
        course = await CourseService.get_course(db, school_id, course_id)
        if not course:
            return False
        course.status = CourseStatus.ARCHIVED
        course.is_active = False
        course.soft_delete()
        await db.commit()
        logger.info("Course archived", extra={"course_id": str(course_id)})
        return True
