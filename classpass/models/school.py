"""Tenant Model"""

from sqlalchemy import Column, String, Text, Boolean, Integer, BigInteger, DateTime
from sqlalchemy.dialects.postgresql import JSONB

from classpass.models.base import BaseModel, StatusMixin, enum_column_type
from classpass.models.enums import SchoolPlan


class School(BaseModel, StatusMixin):
    """
    Tenant/School model - the multi-tenant anchor.
    Every other business table carries a school_id pointing here.
    """
    __tablename__ = "schools"

    # Basic Information
    name = Column(String(255), nullable=False)
    logo_url = Column(Text, nullable=True)
    address = Column(Text, nullable=True)
    phone = Column(String(50), nullable=True)
    email = Column(String(255), nullable=True)
    line_oa = Column(String(100), nullable=True)
    website = Column(String(255), nullable=True)
    tax_id = Column(String(50), nullable=True)

    # Locale settings
    timezone = Column(String(64), default="Asia/Bangkok", nullable=False)
    currency = Column(String(8), default="THB", nullable=False)
    date_format = Column(String(20), default="DD/MM/YYYY", nullable=False)
    language = Column(String(8), default="th", nullable=False)
    business_hours = Column(JSONB, nullable=True)

    # Subscription
    plan = Column(enum_column_type(SchoolPlan, "school_plan"), default=SchoolPlan.FREE, nullable=False)
    plan_expiry = Column(DateTime, nullable=True)
    billing_email = Column(String(255), nullable=True)

    # Quotas
    max_students = Column(Integer, default=50, nullable=False)
    max_teachers = Column(Integer, default=3, nullable=False)
    max_courses = Column(Integer, default=5, nullable=False)
    storage_quota = Column(BigInteger, default=1024 ** 3, nullable=False)

    # Features
    feature_online_payment = Column(Boolean, default=False, nullable=False)
    feature_parent_app = Column(Boolean, default=False, nullable=False)
    feature_api_access = Column(Boolean, default=False, nullable=False)
    feature_custom_domain = Column(Boolean, default=False, nullable=False)
    feature_white_label = Column(Boolean, default=False, nullable=False)

    is_verified = Column(Boolean, default=False, nullable=False)
    last_active_at = Column(DateTime, nullable=True)

    @property
    def features(self) -> dict:
        return {
            "online_payment": self.feature_online_payment,
            "parent_app": self.feature_parent_app,
            "api_access": self.feature_api_access,
            "custom_domain": self.feature_custom_domain,
            "white_label": self.feature_white_label,
        }

    def __repr__(self) -> str:
        return f"<School {self.name}>"
