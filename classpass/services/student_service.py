"""Student Roster Service"""

import re
from datetime import date
from typing import Optional, List
from uuid import UUID
from sqlalchemy import select, or_
from sqlalchemy.ext.asyncio import AsyncSession

from classpass.core.logging import get_logger
from classpass.models.student import Student, StudentParent
from classpass.models.enums import StudentStatus, ParentType
from classpass.schemas.student import StudentCreate, StudentUpdate, ParentBase
from classpass.services.school_service import SchoolService
from classpass.utils.time import get_utc_today

logger = get_logger(__name__)

STUDENT_CODE_PREFIX = "STD"


class StudentService:
    """Service layer for the student roster"""

    @staticmethod
    def calculate_age(birth_date: Optional[date], today: Optional[date] = None) -> Optional[int]:
        """Whole years since birth_date; one less until this year's birthday has passed."""
        if not birth_date:
            return None
        today = today or get_utc_today()
        age = today.year - birth_date.year
        if (today.month, today.day) < (birth_date.month, birth_date.day):
            age -= 1
        return age

    @staticmethod
    def next_student_code(existing_codes: List[str], year: int) -> str:
        """
        STD{year}{seq:03d}, one past the highest sequence already used this year.
        Codes that do not match the pattern are ignored.
        """
        pattern = re.compile(rf"^{STUDENT_CODE_PREFIX}{year}(\d+)$")
        highest = 0
        for code in existing_codes:
            match = pattern.match(code or "")
            if match:
                highest = max(highest, int(match.group(1)))
        return f"{STUDENT_CODE_PREFIX}{year}{highest + 1:03d}"

    @staticmethod
    def split_parent_name(full_name: str):
        """'Jane Doe Smith' -> ('Jane', 'Doe Smith')"""
        parts = full_name.strip().split(" ", 1)
        return parts[0], parts[1].strip() if len(parts) > 1 else ""

    @staticmethod
    def build_parents(student_in: StudentCreate) -> List[StudentParent]:
        if student_in.parents:
            return [StudentParent(**p.model_dump()) for p in student_in.parents]
        if student_in.parent_name and student_in.parent_name.strip():
            first, last = StudentService.split_parent_name(student_in.parent_name)
            return [
                StudentParent(
                    type=ParentType.MOTHER,
                    first_name=first,
                    last_name=last,
                    phone=student_in.parent_phone,
                    email=student_in.parent_email,
                    is_primary_contact=True,
                    receive_notifications=True,
                )
            ]
        return []

    @staticmethod
    async def generate_student_code(db: AsyncSession, school_id: UUID) -> str:
        year = get_utc_today().year
        result = await db.execute(
            select(Student.student_code).where(
                Student.school_id == school_id,
                Student.student_code.like(f"{STUDENT_CODE_PREFIX}{year}%"),
            )
        )
        return StudentService.next_student_code(list(result.scalars().all()), year)

    @staticmethod
    async def get_student(db: AsyncSession, school_id: UUID, student_id: UUID) -> Optional[Student]:
        result = await db.execute(
            select(Student).where(
                Student.id == student_id,
                Student.school_id == school_id,
                Student.is_deleted.is_(False),
            )
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def list_students(
        db: AsyncSession, school_id: UUID, status: Optional[StudentStatus] = None
    ) -> List[Student]:
        query = select(Student).where(
            Student.school_id == school_id, Student.is_deleted.is_(False)
        )
        if status:
            query = query.where(Student.status == status)
        result = await db.execute(query.order_by(Student.created_at.desc()))
        return list(result.scalars().all())

    @staticmethod
    async def search_students(db: AsyncSession, school_id: UUID, term: str) -> List[Student]:
        """Case-insensitive match on first name, last name, nickname or student code"""
        like = f"%{term.strip()}%"
        result = await db.execute(
            select(Student)
            .where(
                Student.school_id == school_id,
                Student.is_deleted.is_(False),
                or_(
                    Student.first_name.ilike(like),
                    Student.last_name.ilike(like),
                    Student.nickname.ilike(like),
                    Student.student_code.ilike(like),
                ),
            )
            .order_by(Student.first_name)
        )
        return list(result.scalars().all())

    @staticmethod
    async def create_student(db: AsyncSession, school_id: UUID, student_in: StudentCreate) -> Student:
        await SchoolService.ensure_quota(db, school_id, "students")

        data = student_in.model_dump(
            exclude={"parent_name", "parent_phone", "parent_email", "parents", "address"}
        )
        student = Student(
            school_id=school_id,
            student_code=await StudentService.generate_student_code(db, school_id),
            age=StudentService.calculate_age(student_in.birth_date),
            address=student_in.address.model_dump() if student_in.address else None,
            status=StudentStatus.ACTIVE,
            is_active=True,
            parents=StudentService.build_parents(student_in),
            **data,
        )
        db.add(student)
        await db.commit()
        await db.refresh(student)
        logger.info(
            "Student created",
            extra={"school_id": str(school_id), "student_code": student.student_code},
        )
        return student

    @staticmethod
    async def update_student(
        db: AsyncSession, school_id: UUID, student_id: UUID, student_update: StudentUpdate
    ) -> Optional[Student]:
        """Update roster fields. id, school and student_code never change."""
        student = await StudentService.get_student(db, school_id, student_id)
        if not student:
            return None

        data = Student.writable_changes(
            student_update.model_dump(exclude_unset=True, exclude={"parents", "address"})
        )
        for field, value in data.items():
            setattr(student, field, value)
        if "address" in student_update.model_fields_set:
            student.address = student_update.address.model_dump() if student_update.address else None
        if student_update.parents is not None:
            student.parents = [StudentParent(**p.model_dump()) for p in student_update.parents]
        if "birth_date" in data:
            student.age = StudentService.calculate_age(student.birth_date)
        if "status" in data:
            student.is_active = student.status == StudentStatus.ACTIVE

        await db.commit()
        await db.refresh(student)
        return student

    @staticmethod
    async def delete_student(db: AsyncSession, school_id: UUID, student_id: UUID) -> bool:
        """Soft delete: status inactive, hidden from every list"""
        student = await StudentService.get_student(db, school_id, student_id)
        if not student:
            return False
        student.status = StudentStatus.INACTIVE
        student.is_active = False
        student.soft_delete()
        await db.commit()
        logger.info("Student deleted", extra={"student_id": str(student_id)})
        return True

    @staticmethod
    async def set_profile_image(
        db: AsyncSession, school_id: UUID, student_id: UUID, url: str
    ) -> Optional[Student]:
        student = await StudentService.get_student(db, school_id, student_id)
        if not student:
            return None
        student.profile_image_url = url
        await db.commit()
        await db.refresh(student)
        return student
