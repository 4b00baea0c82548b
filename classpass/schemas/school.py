from typing import Optional, Dict, Any
from uuid import UUID
from datetime import datetime
from pydantic import BaseModel, ConfigDict, EmailStr, Field

from classpass.models.enums import SchoolPlan


class SchoolFeatures(BaseModel):
    online_payment: bool = False
    parent_app: bool = False
    api_access: bool = False
    custom_domain: bool = False
    white_label: bool = False


class SchoolResponse(BaseModel):
    id: UUID
    name: str
    logo_url: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    line_oa: Optional[str] = None
    website: Optional[str] = None
    tax_id: Optional[str] = None

    timezone: str
    currency: str
    date_format: str
    language: str
    business_hours: Optional[Dict[str, Any]] = None

    plan: SchoolPlan
    plan_expiry: Optional[datetime] = None
    billing_email: Optional[str] = None
    max_students: int
    max_teachers: int
    max_courses: int
    storage_quota: int
    features: SchoolFeatures

    is_active: bool
    is_verified: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class SchoolUpdate(BaseModel):
    """Owner/admin editable school settings. Plan and quotas are superadmin-only."""
    name: Optional[str] = Field(None, min_length=1)
    logo_url: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[EmailStr] = None
    line_oa: Optional[str] = None
    website: Optional[str] = None
    tax_id: Optional[str] = None
    timezone: Optional[str] = None
    currency: Optional[str] = Field(None, max_length=8)
    date_format: Optional[str] = None
    language: Optional[str] = Field(None, max_length=8)
    business_hours: Optional[Dict[str, Any]] = None
    billing_email: Optional[EmailStr] = None


class SchoolUsage(BaseModel):
    """Current counts against plan quotas"""
    students: int
    max_students: int
    teachers: int
    max_teachers: int
    courses: int
    max_courses: int
