from typing import Optional, List
from uuid import UUID
from decimal import Decimal
from datetime import date, datetime
from pydantic import BaseModel, ConfigDict, Field, model_validator

from classpass.models.enums import (
    PaymentMethod, PaymentStatus, CreditStatus, AdjustmentType, UserRole
)


class PurchaseRequest(BaseModel):
    student_id: UUID
    package_id: UUID
    course_id: Optional[UUID] = None
    payment_method: PaymentMethod
    discount: Decimal = Field(Decimal("0"), ge=0)
    payment_reference: Optional[str] = None
    note: Optional[str] = None


class CreditResponse(BaseModel):
    id: UUID
    school_id: UUID
    student_id: UUID
    package_id: Optional[UUID] = None
    course_id: Optional[UUID] = None
    is_universal: bool
    applicable_course_ids: Optional[List[UUID]] = None
    student_name: str
    student_code: str
    course_name: Optional[str] = None
    package_name: str
    package_code: str
    total_credits: int
    bonus_credits: int
    used_credits: int
    remaining_credits: int
    original_price: Decimal
    discount_amount: Decimal
    final_price: Decimal
    price_per_credit: Decimal
    payment_status: PaymentStatus
    payment_method: PaymentMethod
    payment_reference: Optional[str] = None
    payment_date: Optional[datetime] = None
    payment_note: Optional[str] = None
    has_expiry: bool
    purchase_date: datetime
    activation_date: Optional[datetime] = None
    expiry_date: Optional[date] = None
    days_until_expiry: Optional[int] = None
    status: CreditStatus
    receipt_number: str
    last_used_date: Optional[datetime] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AdjustmentRequest(BaseModel):
    adjustment_type: AdjustmentType
    amount: int = Field(..., ge=0)
    reason: str = Field(..., min_length=1)

    @model_validator(mode="after")
    def check_amount(self):
        if self.adjustment_type != AdjustmentType.SET and self.amount <= 0:
            raise ValueError("amount must be greater than 0")
        if not self.reason.strip():
            raise ValueError("reason is required")
        return self


class AdjustmentResponse(BaseModel):
    id: UUID
    credit_id: UUID
    student_id: UUID
    student_name: str
    package_name: str
    adjustment_type: AdjustmentType
    amount: int
    credits_before: int
    credits_after: int
    reason: str
    adjusted_by: UUID
    adjusted_by_name: str
    adjusted_by_role: UserRole
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ExpireResult(BaseModel):
    expired: int
