from typing import Optional, List
from uuid import UUID
from decimal import Decimal
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field, model_validator

from classpass.models.enums import ValidityType, PackageStatus


class PackageCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None

    # Targeting
    is_universal: bool = False
    applicable_course_ids: List[UUID] = []
    course_id: Optional[UUID] = None

    credits: int = Field(..., gt=0)
    bonus_credits: int = Field(0, ge=0)
    price: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)

    validity_type: ValidityType
    validity_value: Optional[int] = Field(None, gt=0)

    is_promotion: bool = False
    original_price: Optional[Decimal] = Field(None, ge=0)
    discount_percent: Optional[Decimal] = Field(None, ge=0, le=100)
    promotion_end_date: Optional[datetime] = None

    display_order: int = 0
    color: str = Field("#f97316", pattern=r"^#[0-9a-fA-F]{6}$")
    popular: bool = False
    recommended: bool = False

    @model_validator(mode="after")
    def check_targeting_and_validity(self):
        if not self.is_universal and not self.applicable_course_ids and not self.course_id:
            raise ValueError("select at least one course or mark the package universal")
        if self.validity_type != ValidityType.UNLIMITED and not self.validity_value:
            raise ValueError("validity_value is required for months/days validity")
        return self


class PackageUpdate(BaseModel):
    """id, school_id, code and created_at are not editable"""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    is_universal: Optional[bool] = None
    applicable_course_ids: Optional[List[UUID]] = None
    course_id: Optional[UUID] = None
    credits: Optional[int] = Field(None, gt=0)
    bonus_credits: Optional[int] = Field(None, ge=0)
    price: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)
    validity_type: Optional[ValidityType] = None
    validity_value: Optional[int] = Field(None, gt=0)
    is_promotion: Optional[bool] = None
    original_price: Optional[Decimal] = Field(None, ge=0)
    discount_percent: Optional[Decimal] = Field(None, ge=0, le=100)
    promotion_end_date: Optional[datetime] = None
    display_order: Optional[int] = None
    color: Optional[str] = Field(None, pattern=r"^#[0-9a-fA-F]{6}$")
    popular: Optional[bool] = None
    recommended: Optional[bool] = None
    status: Optional[PackageStatus] = None


class PackageOrderItem(BaseModel):
    id: UUID
    display_order: int


class PackageOrderUpdate(BaseModel):
    items: List[PackageOrderItem] = Field(..., min_length=1)


class PackageResponse(BaseModel):
    id: UUID
    school_id: UUID
    code: str
    name: str
    description: Optional[str] = None
    is_universal: bool
    applicable_course_ids: Optional[List[UUID]] = None
    course_id: Optional[UUID] = None
    credits: int
    bonus_credits: int
    total_credits_with_bonus: int
    price: Decimal
    price_per_credit: Decimal
    validity_type: ValidityType
    validity_value: Optional[int] = None
    validity_description: str
    is_promotion: bool
    original_price: Optional[Decimal] = None
    discount_percent: Optional[Decimal] = None
    promotion_end_date: Optional[datetime] = None
    display_order: int
    color: str
    popular: bool
    recommended: bool
    status: PackageStatus
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class MigrationResult(BaseModel):
    packages_migrated: int
    packages_skipped: int
    credits_migrated: int
