"""Purchased Credits and Adjustment Audit Models"""

from sqlalchemy import Column, String, Text, Integer, Numeric, Boolean, Date, DateTime, ForeignKey
from sqlalchemy.dialects.postgresql import UUID, ARRAY

from classpass.models.base import BaseModel, SchoolScopedMixin, enum_column_type
from classpass.models.enums import (
    PaymentStatus, PaymentMethod, CreditStatus, AdjustmentType, UserRole
)


class StudentCredit(BaseModel, SchoolScopedMixin):
    """
    A purchased package instance owned by one student.

    Names, codes, prices and course targeting are copied from the student
    and package at purchase time, so later package edits do not change
    credits already sold.
    """
    __tablename__ = "student_credits"

    student_id = Column(
        UUID(as_uuid=True), ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True
    )
    package_id = Column(
        UUID(as_uuid=True), ForeignKey("credit_packages.id", ondelete="SET NULL"), nullable=True, index=True
    )
    course_id = Column(
        UUID(as_uuid=True), ForeignKey("courses.id", ondelete="SET NULL"), nullable=True, index=True
    )

    # Targeting snapshot
    is_universal = Column(Boolean, default=False, nullable=False)
    applicable_course_ids = Column(ARRAY(UUID(as_uuid=True)), nullable=True)

    # Denormalized labels
    student_name = Column(String(512), nullable=False)
    student_code = Column(String(20), nullable=False)
    course_name = Column(String(255), nullable=True)
    package_name = Column(String(255), nullable=False)
    package_code = Column(String(20), nullable=False)

    # Counters
    total_credits = Column(Integer, nullable=False)
    bonus_credits = Column(Integer, default=0, nullable=False)
    used_credits = Column(Integer, default=0, nullable=False)
    remaining_credits = Column(Integer, nullable=False)

    # Financials
    original_price = Column(Numeric(12, 2), nullable=False)
    discount_amount = Column(Numeric(12, 2), default=0, nullable=False)
    final_price = Column(Numeric(12, 2), nullable=False)
    price_per_credit = Column(Numeric(12, 2), nullable=False)
    payment_status = Column(
        enum_column_type(PaymentStatus, "payment_status"), default=PaymentStatus.PAID, nullable=False, index=True
    )
    payment_method = Column(enum_column_type(PaymentMethod, "payment_method"), nullable=False)
    payment_reference = Column(String(255), nullable=True)
    payment_date = Column(DateTime, nullable=True)
    payment_note = Column(Text, nullable=True)

    # Validity
    has_expiry = Column(Boolean, default=False, nullable=False)
    purchase_date = Column(DateTime, nullable=False, index=True)
    activation_date = Column(DateTime, nullable=True)
    expiry_date = Column(Date, nullable=True, index=True)

    status = Column(
        enum_column_type(CreditStatus, "credit_status"), default=CreditStatus.ACTIVE, nullable=False, index=True
    )
    receipt_number = Column(String(20), nullable=False, index=True)

    last_used_date = Column(DateTime, nullable=True)
    last_adjusted_at = Column(DateTime, nullable=True)
    last_adjusted_by = Column(UUID(as_uuid=True), nullable=True)
    sold_by = Column(UUID(as_uuid=True), nullable=True)

    def __repr__(self) -> str:
        return f"<StudentCredit {self.receipt_number} {self.remaining_credits}/{self.total_credits}>"


class CreditAdjustment(BaseModel, SchoolScopedMixin):
    """Manual correction to a student's remaining credits"""
    __tablename__ = "credit_adjustments"

    credit_id = Column(
        UUID(as_uuid=True), ForeignKey("student_credits.id", ondelete="CASCADE"), nullable=False, index=True
    )
    student_id = Column(
        UUID(as_uuid=True), ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True
    )
    student_name = Column(String(512), nullable=False)
    package_name = Column(String(255), nullable=False)

    adjustment_type = Column(enum_column_type(AdjustmentType, "adjustment_type"), nullable=False)
    amount = Column(Integer, nullable=False)
    credits_before = Column(Integer, nullable=False)
    credits_after = Column(Integer, nullable=False)
    reason = Column(Text, nullable=False)

    adjusted_by = Column(UUID(as_uuid=True), nullable=False)
    adjusted_by_name = Column(String(512), nullable=False)
    adjusted_by_role = Column(enum_column_type(UserRole, "user_role"), nullable=False)
