"""Credit Package Model"""

from sqlalchemy import Column, String, Text, Integer, Numeric, Boolean, DateTime, ForeignKey
from sqlalchemy.dialects.postgresql import UUID, ARRAY

from classpass.models.base import (
    BaseModel, SchoolScopedMixin, SoftDeleteMixin, StatusMixin, enum_column_type
)
from classpass.models.enums import ValidityType, PackageStatus


class CreditPackage(BaseModel, SchoolScopedMixin, SoftDeleteMixin, StatusMixin):
    """
    A purchasable bundle of credits.

    Course targeting has three states, checked in this order:
    is_universal, applicable_course_ids, then the legacy single course_id.
    """
    __tablename__ = "credit_packages"

    # Targeting
    is_universal = Column(Boolean, default=False, nullable=False)
    applicable_course_ids = Column(ARRAY(UUID(as_uuid=True)), nullable=True)
    course_id = Column(
        UUID(as_uuid=True), ForeignKey("courses.id", ondelete="SET NULL"), nullable=True, index=True
    )

    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    code = Column(String(20), nullable=False, index=True)

    # Credits
    credits = Column(Integer, nullable=False)
    bonus_credits = Column(Integer, default=0, nullable=False)
    total_credits_with_bonus = Column(Integer, nullable=False)

    # Pricing
    price = Column(Numeric(12, 2), nullable=False)
    price_per_credit = Column(Numeric(12, 2), nullable=False)

    # Validity
    validity_type = Column(enum_column_type(ValidityType, "validity_type"), nullable=False)
    validity_value = Column(Integer, nullable=True)
    validity_description = Column(String(100), nullable=False)

    # Promotion
    is_promotion = Column(Boolean, default=False, nullable=False)
    original_price = Column(Numeric(12, 2), nullable=True)
    discount_percent = Column(Numeric(5, 2), nullable=True)
    promotion_end_date = Column(DateTime, nullable=True)

    # Display
    display_order = Column(Integer, default=0, nullable=False)
    color = Column(String(20), default="#f97316", nullable=False)
    popular = Column(Boolean, default=False, nullable=False)
    recommended = Column(Boolean, default=False, nullable=False)

    status = Column(
        enum_column_type(PackageStatus, "package_status"),
        default=PackageStatus.ACTIVE,
        nullable=False,
        index=True
    )

    def __repr__(self) -> str:
        return f"<CreditPackage {self.code} {self.name}>"
