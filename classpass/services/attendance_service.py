"""Attendance Service - check-in redeems one credit"""

from datetime import date
from typing import Optional, List
from uuid import UUID
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from classpass.core.exceptions import (
    ConflictError, InsufficientCreditsError, NotFoundError, ValidationError
)
from classpass.core.logging import get_logger
from classpass.models.attendance import Attendance
from classpass.models.credit import StudentCredit
from classpass.models.enums import AttendanceStatus, CreditStatus
from classpass.models.user import User
from classpass.schemas.attendance import CheckInRequest
from classpass.services.course_service import CourseService
from classpass.services.credit_service import CreditService
from classpass.services.package_service import PackageService
from classpass.services.student_service import StudentService
from classpass.utils.time import get_utc_now, get_utc_today

logger = get_logger(__name__)

CREDITS_PER_CHECK_IN = 1


class AttendanceService:
    """Service layer for attendance records"""

    @staticmethod
    def select_credit(
        credits: List[StudentCredit], course_id: UUID, today: Optional[date] = None
    ) -> Optional[StudentCredit]:
        """
        The credit to spend when none was chosen: active, not expired, usable for
        the course, with credits left. Soonest expiry first; credits without
        expiry last, then oldest purchase.
        """
        today = today or get_utc_today()
        usable = [
            c for c in credits
            if c.status == CreditStatus.ACTIVE
            and c.remaining_credits >= CREDITS_PER_CHECK_IN
            and not CreditService.is_expired(c, today)
            and PackageService.is_usable_for_course(c, course_id)
        ]
        if not usable:
            return None
        return min(
            usable,
            key=lambda c: (c.expiry_date is None, c.expiry_date or date.max, c.purchase_date),
        )

    @staticmethod
    def validate_credit(credit: StudentCredit, student_id: UUID, course_id: UUID, today: date) -> None:
        if credit.student_id != student_id:
            raise ValidationError("Credit does not belong to this student", code="CREDIT_MISMATCH")
        if credit.status != CreditStatus.ACTIVE:
            raise ValidationError("Credit is not active", code="CREDIT_INACTIVE")
        if credit.remaining_credits < CREDITS_PER_CHECK_IN:
            raise InsufficientCreditsError("No credits remaining")
        if CreditService.is_expired(credit, today):
            raise ValidationError("Credit has expired", code="CREDIT_EXPIRED")
        if not PackageService.is_usable_for_course(credit, course_id):
            raise ValidationError(
                "Credit cannot be used for this course", code="PACKAGE_NOT_APPLICABLE"
            )

    @staticmethod
    async def get_attendance(db: AsyncSession, school_id: UUID, attendance_id: UUID) -> Optional[Attendance]:
        result = await db.execute(
            select(Attendance).where(
                Attendance.id == attendance_id, Attendance.school_id == school_id
            )
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def find_today_check_in(
        db: AsyncSession, school_id: UUID, student_id: UUID, course_id: UUID, today: date
    ) -> Optional[Attendance]:
        result = await db.execute(
            select(Attendance).where(
                Attendance.school_id == school_id,
                Attendance.student_id == student_id,
                Attendance.course_id == course_id,
                Attendance.check_in_date == today,
                Attendance.status != AttendanceStatus.CANCELLED,
            ).limit(1)
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def check_in(
        db: AsyncSession, school_id: UUID, check_in: CheckInRequest, checked_by: User
    ) -> Attendance:
        """
        Check a student into a course and deduct one credit.

        Raises:
            NotFoundError: student, course or credit missing
            ValidationError / InsufficientCreditsError: credit cannot be spent
            ConflictError: ALREADY_CHECKED_IN for the same course today
        """
        student = await StudentService.get_student(db, school_id, check_in.student_id)
        if not student:
            raise NotFoundError("Student not found")
        course = await CourseService.get_course(db, school_id, check_in.course_id)
        if not course:
            raise NotFoundError("Course not found")

        now = get_utc_now()
        today = now.date()

        if check_in.credit_id:
            credit = await CreditService.get_credit(db, school_id, check_in.credit_id)
            if not credit:
                raise NotFoundError("Credit not found")
        else:
            candidates = await CreditService.list_student_credits(db, school_id, student.id)
            credit = AttendanceService.select_credit(candidates, course.id, today)
            if not credit:
                raise InsufficientCreditsError("Student has no usable credits for this course")
        AttendanceService.validate_credit(credit, student.id, course.id, today)

        if await AttendanceService.find_today_check_in(db, school_id, student.id, course.id, today):
            raise ConflictError("Student already checked in to this course today", code="ALREADY_CHECKED_IN")

        before, after = CreditService.consume(credit, CREDITS_PER_CHECK_IN, now)

        attendance = Attendance(
            school_id=school_id,
            student_id=student.id,
            course_id=course.id,
            credit_id=credit.id,
            student_code=student.student_code,
            student_name=student.full_name,
            student_nickname=student.nickname,
            course_name=course.name,
            course_code=course.code,
            check_in_date=today,
            check_in_time=now,
            check_in_method=check_in.check_in_method,
            session_date=today,
            session_start_time=check_in.session_start_time,
            session_end_time=check_in.session_end_time,
            room=check_in.room,
            credits_deducted=CREDITS_PER_CHECK_IN,
            credits_before=before,
            credits_after=after,
            status=AttendanceStatus.LATE if check_in.is_late else AttendanceStatus.PRESENT,
            is_late=check_in.is_late,
            late_minutes=check_in.late_minutes if check_in.is_late else None,
            checked_by=checked_by.id,
            checked_by_name=checked_by.display_name,
            checked_by_role=checked_by.role,
            teacher_notes=check_in.teacher_notes,
        )
        db.add(attendance)
        await db.commit()
        await db.refresh(attendance)
        logger.info(
            "Student checked in",
            extra={
                "school_id": str(school_id),
                "student_id": str(student.id),
                "course_id": str(course.id),
                "credit_id": str(credit.id),
                "credits_after": after,
            },
        )
        return attendance

    @staticmethod
    async def get_today_attendance(
        db: AsyncSession, school_id: UUID, course_id: Optional[UUID] = None
    ) -> List[Attendance]:
        query = select(Attendance).where(
            Attendance.school_id == school_id,
            Attendance.check_in_date == get_utc_today(),
        )
        if course_id:
            query = query.where(Attendance.course_id == course_id)
        result = await db.execute(query.order_by(Attendance.check_in_time.desc()))
        return list(result.scalars().all())

    @staticmethod
    async def get_attendance_history(
        db: AsyncSession,
        school_id: UUID,
        student_id: Optional[UUID] = None,
        course_id: Optional[UUID] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> List[Attendance]:
        query = select(Attendance).where(Attendance.school_id == school_id)
        if student_id:
            query = query.where(Attendance.student_id == student_id)
        if course_id:
            query = query.where(Attendance.course_id == course_id)
        if start_date:
            query = query.where(Attendance.check_in_date >= start_date)
        if end_date:
            query = query.where(Attendance.check_in_date <= end_date)
        result = await db.execute(query.order_by(Attendance.check_in_time.desc()))
        return list(result.scalars().all())

    @staticmethod
    async def cancel_attendance(
        db: AsyncSession, school_id: UUID, attendance_id: UUID, reason: str
    ) -> Attendance:
        """Cancel a check-in and give the deducted credits back"""
        attendance = await AttendanceService.get_attendance(db, school_id, attendance_id)
        if not attendance:
            raise NotFoundError("Attendance record not found")
        if attendance.status == AttendanceStatus.CANCELLED:
            raise ConflictError("Attendance already cancelled", code="ALREADY_CANCELLED")

        attendance.status = AttendanceStatus.CANCELLED
        attendance.cancelled_at = get_utc_now()
        attendance.cancel_reason = reason

        if attendance.credit_id and attendance.credits_deducted:
            credit = await CreditService.get_credit(db, school_id, attendance.credit_id)
            if credit:
                CreditService.refund(credit, attendance.credits_deducted)

        await db.commit()
        await db.refresh(attendance)
        logger.info(
            "Attendance cancelled",
            extra={"attendance_id": str(attendance_id), "refunded": attendance.credits_deducted},
        )
        return attendance
