"""Student Credit Service - purchases, usage, adjustments and expiry"""

import math
import secrets
from datetime import date, datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, List, Tuple
from uuid import UUID
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from classpass.config import settings
from classpass.core.exceptions import (
    InsufficientCreditsError, NotFoundError, ValidationError
)
from classpass.core.logging import get_logger
from classpass.models.credit import StudentCredit, CreditAdjustment
from classpass.models.enums import (
    AdjustmentType, CreditStatus, PaymentStatus, ValidityType
)
from classpass.models.user import User
from classpass.schemas.credit import PurchaseRequest, AdjustmentRequest, CreditResponse
from classpass.services.course_service import CourseService
from classpass.services.package_service import PackageService
from classpass.services.student_service import StudentService
from classpass.utils.time import get_utc_now, get_utc_today, add_months

logger = get_logger(__name__)

CENT = Decimal("0.01")


class CreditService:
    """Service layer for purchased credits"""

    # Pure rules

    @staticmethod
    def final_price(package_price: Decimal, discount: Decimal) -> Decimal:
        """Price after discount, never below zero"""
        return max(Decimal("0"), Decimal(package_price) - Decimal(discount or 0))

    @staticmethod
    def calculate_expiry_date(
        purchase_date: date, validity_type: ValidityType, validity_value: Optional[int]
    ) -> Optional[date]:
        if validity_type == ValidityType.UNLIMITED or not validity_value:
            return None
        if validity_type == ValidityType.MONTHS:
            return add_months(purchase_date, validity_value)
        return purchase_date + timedelta(days=validity_value)

    @staticmethod
    def days_until_expiry(expiry_date: Optional[date], today: Optional[date] = None) -> Optional[int]:
        if not expiry_date:
            return None
        today = today or get_utc_today()
        return math.ceil((expiry_date - today).total_seconds() / 86400)

    @staticmethod
    def is_expired(credit: StudentCredit, today: Optional[date] = None) -> bool:
        today = today or get_utc_today()
        return bool(credit.has_expiry and credit.expiry_date and credit.expiry_date < today)

    @staticmethod
    def generate_receipt_number(now: Optional[datetime] = None) -> str:
        """RCP{yyyy}{mm}{4 random digits}"""
        now = now or get_utc_now()
        return f"RCP{now.year}{now.month:02d}{secrets.randbelow(10000):04d}"

    @staticmethod
    def calculate_adjusted_credits(current: int, adjustment_type: AdjustmentType, amount: int) -> int:
        if adjustment_type == AdjustmentType.ADD:
            return current + amount
        if adjustment_type == AdjustmentType.SUBTRACT:
            return max(0, current - amount)
        return max(0, amount)

    @staticmethod
    def consume(credit: StudentCredit, amount: int = 1, now: Optional[datetime] = None) -> Tuple[int, int]:
        """
        Deduct credits in place; depleted at zero.

        Returns:
            (remaining_before, remaining_after)

        Raises:
            InsufficientCreditsError: fewer than amount remaining
        """
        if amount <= 0:
            raise ValidationError("Amount must be greater than 0")
        before = credit.remaining_credits
        if before < amount:
            raise InsufficientCreditsError(
                f"Only {before} credits remaining, {amount} required"
            )
        credit.used_credits += amount
        credit.remaining_credits = before - amount
        credit.last_used_date = now or get_utc_now()
        if credit.remaining_credits == 0:
            credit.status = CreditStatus.DEPLETED
        return before, credit.remaining_credits

    @staticmethod
    def refund(credit: StudentCredit, amount: int) -> None:
        """Give back credits taken by a cancelled check-in; a depleted credit becomes active again."""
        credit.used_credits = max(0, credit.used_credits - amount)
        credit.remaining_credits += amount
        if credit.status == CreditStatus.DEPLETED and credit.remaining_credits > 0:
            credit.status = CreditStatus.ACTIVE

    @staticmethod
    def to_response(credit: StudentCredit, today: Optional[date] = None) -> CreditResponse:
        response = CreditResponse.model_validate(credit)
        response.days_until_expiry = CreditService.days_until_expiry(credit.expiry_date, today)
        return response

    # Queries

    @staticmethod
    async def get_credit(db: AsyncSession, school_id: UUID, credit_id: UUID) -> Optional[StudentCredit]:
        result = await db.execute(
            select(StudentCredit).where(
                StudentCredit.id == credit_id, StudentCredit.school_id == school_id
            )
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def list_student_credits(
        db: AsyncSession,
        school_id: UUID,
        student_id: UUID,
        course_id: Optional[UUID] = None,
        active_only: bool = True,
    ) -> List[StudentCredit]:
        """A student's credits, newest purchase first, optionally only those usable for a course"""
        query = select(StudentCredit).where(
            StudentCredit.school_id == school_id, StudentCredit.student_id == student_id
        )
        if active_only:
            query = query.where(StudentCredit.status == CreditStatus.ACTIVE)
        result = await db.execute(query.order_by(StudentCredit.purchase_date.desc()))
        credits = list(result.scalars().all())
        if course_id:
            credits = [c for c in credits if PackageService.is_usable_for_course(c, course_id)]
        return credits

    @staticmethod
    async def list_school_credits(
        db: AsyncSession,
        school_id: UUID,
        course_id: Optional[UUID] = None,
        status: Optional[CreditStatus] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> List[StudentCredit]:
        query = select(StudentCredit).where(StudentCredit.school_id == school_id)
        if status:
            query = query.where(StudentCredit.status == status)
        if start_date:
            query = query.where(StudentCredit.purchase_date >= datetime.combine(start_date, datetime.min.time()))
        if end_date:
            query = query.where(
                StudentCredit.purchase_date < datetime.combine(end_date + timedelta(days=1), datetime.min.time())
            )
        result = await db.execute(query.order_by(StudentCredit.purchase_date.desc()))
        credits = list(result.scalars().all())
        if course_id:
            credits = [c for c in credits if PackageService.is_usable_for_course(c, course_id)]
        return credits

    # Mutations

    @staticmethod
    async def purchase(
        db: AsyncSession, school_id: UUID, purchase_in: PurchaseRequest, sold_by: User
    ) -> StudentCredit:
        """
        Sell a package to a student.

        Counters, prices, validity and course targeting are snapshotted from
        the package so later package edits do not touch this credit.
        """
        student = await StudentService.get_student(db, school_id, purchase_in.student_id)
        if not student:
            raise NotFoundError("Student not found")
        package = await PackageService.get_package(db, school_id, purchase_in.package_id)
        if not package or not package.is_active:
            raise NotFoundError("Package not found")

        course_name = None
        if purchase_in.course_id:
            course = await CourseService.get_course(db, school_id, purchase_in.course_id)
            if not course:
                raise NotFoundError("Course not found")
            if not PackageService.is_usable_for_course(package, course.id):
                raise ValidationError(
                    "This package cannot be used for the selected course", code="PACKAGE_NOT_APPLICABLE"
                )
            course_name = course.name

        now = get_utc_now()
        total = package.total_credits_with_bonus
        final_price = CreditService.final_price(package.price, purchase_in.discount)
        has_expiry = package.validity_type != ValidityType.UNLIMITED

        credit = StudentCredit(
            school_id=school_id,
            student_id=student.id,
            package_id=package.id,
            course_id=purchase_in.course_id or package.course_id,
            is_universal=package.is_universal,
            applicable_course_ids=list(package.applicable_course_ids or []),
            student_name=student.full_name,
            student_code=student.student_code,
            course_name=course_name,
            package_name=package.name,
            package_code=package.code,
            total_credits=total,
            bonus_credits=package.bonus_credits,
            used_credits=0,
            remaining_credits=total,
            original_price=package.price,
            discount_amount=purchase_in.discount,
            final_price=final_price,
            price_per_credit=(final_price / total).quantize(CENT, rounding=ROUND_HALF_UP) if total else Decimal("0"),
            payment_status=PaymentStatus.PAID,
            payment_method=purchase_in.payment_method,
            payment_reference=purchase_in.payment_reference,
            payment_note=purchase_in.note,
            payment_date=now,
            has_expiry=has_expiry,
            purchase_date=now,
            activation_date=now,
            expiry_date=CreditService.calculate_expiry_date(
                now.date(), package.validity_type, package.validity_value
            ) if has_expiry else None,
            status=CreditStatus.ACTIVE,
            receipt_number=CreditService.generate_receipt_number(now),
            sold_by=sold_by.id,
        )
        db.add(credit)
        await db.commit()
        await db.refresh(credit)
        logger.info(
            "Credits purchased",
            extra={
                "school_id": str(school_id),
                "student_id": str(student.id),
                "package_code": package.code,
                "receipt_number": credit.receipt_number,
                "final_price": str(final_price),
            },
        )
        return credit

    @staticmethod
    async def use_credits(
        db: AsyncSession, school_id: UUID, credit_id: UUID, amount: int = 1
    ) -> StudentCredit:
        credit = await CreditService.get_credit(db, school_id, credit_id)
        if not credit:
            raise NotFoundError("Credit not found")
        CreditService.consume(credit, amount)
        await db.commit()
        await db.refresh(credit)
        return credit

    @staticmethod
    async def adjust_credits(
        db: AsyncSession,
        school_id: UUID,
        credit_id: UUID,
        adjustment_in: AdjustmentRequest,
        adjusted_by: User,
    ) -> Tuple[StudentCredit, CreditAdjustment]:
        """
        Manual correction of remaining credits with an audit record.
        used_credits is recomputed from the total so the two always add up.
        """
        credit = await CreditService.get_credit(db, school_id, credit_id)
        if not credit:
            raise NotFoundError("Credit not found")

        before = credit.remaining_credits
        after = CreditService.calculate_adjusted_credits(
            before, adjustment_in.adjustment_type, adjustment_in.amount
        )
        now = get_utc_now()
        credit.remaining_credits = after
        credit.used_credits = max(0, credit.total_credits - after)
        credit.status = CreditStatus.DEPLETED if after == 0 else CreditStatus.ACTIVE
        credit.last_adjusted_at = now
        credit.last_adjusted_by = adjusted_by.id

        adjustment = CreditAdjustment(
            school_id=school_id,
            credit_id=credit.id,
            student_id=credit.student_id,
            student_name=credit.student_name,
            package_name=credit.package_name,
            adjustment_type=adjustment_in.adjustment_type,
            amount=adjustment_in.amount,
            credits_before=before,
            credits_after=after,
            reason=adjustment_in.reason.strip(),
            adjusted_by=adjusted_by.id,
            adjusted_by_name=adjusted_by.display_name,
            adjusted_by_role=adjusted_by.role,
        )
        db.add(adjustment)
        await db.commit()
        await db.refresh(credit)
        await db.refresh(adjustment)
        logger.info(
            "Credits adjusted",
            extra={
                "credit_id": str(credit_id),
                "type": adjustment_in.adjustment_type.value,
                "before": before,
                "after": after,
            },
        )
        return credit, adjustment

    @staticmethod
    async def list_adjustments(
        db: AsyncSession,
        school_id: UUID,
        student_id: Optional[UUID] = None,
        limit: int = settings.ADJUSTMENT_HISTORY_LIMIT,
    ) -> List[CreditAdjustment]:
        query = select(CreditAdjustment).where(CreditAdjustment.school_id == school_id)
        if student_id:
            query = query.where(CreditAdjustment.student_id == student_id)
        result = await db.execute(query.order_by(CreditAdjustment.created_at.desc()).limit(limit))
        return list(result.scalars().all())

    @staticmethod
    async def expire_credits(db: AsyncSession, school_id: Optional[UUID] = None) -> int:
        """Mark active credits whose expiry date has passed as expired. Returns the count."""
        stmt = (
            update(StudentCredit)
            .where(
                StudentCredit.status == CreditStatus.ACTIVE,
                StudentCredit.has_expiry.is_(True),
                StudentCredit.expiry_date < get_utc_today(),
            )
            .values(status=CreditStatus.EXPIRED, updated_at=get_utc_now())
            .execution_options(synchronize_session=False)
        )
        if school_id:
            stmt = stmt.where(StudentCredit.school_id == school_id)
        result = await db.execute(stmt)
        await db.commit()
        logger.info("Expired credits swept", extra={"school_id": str(school_id), "count": result.rowcount})
        return result.rowcount
