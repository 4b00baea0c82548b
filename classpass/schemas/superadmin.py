from typing import Optional, Dict, Any, List
from uuid import UUID
from decimal import Decimal
from datetime import datetime
from pydantic import BaseModel, ConfigDict, EmailStr, Field

from classpass.models.enums import SchoolPlan


class SystemStats(BaseModel):
    total_schools: int
    active_schools: int
    total_users: int
    total_students: int
    total_revenue: Decimal
    storage_used: int = 0


class SchoolSummary(BaseModel):
    id: UUID
    name: str
    email: Optional[str] = None
    plan: SchoolPlan
    is_active: bool
    created_at: datetime
    student_count: int
    user_count: int
    revenue: Decimal


class SchoolCreateRequest(BaseModel):
    """Superadmin provisions a school together with its owner account"""
    school_name: str = Field(..., min_length=1)
    plan: SchoolPlan = SchoolPlan.FREE
    school_email: Optional[EmailStr] = None
    school_phone: Optional[str] = None
    owner_email: EmailStr
    owner_password: str
    owner_first_name: str = Field(..., min_length=1)
    owner_last_name: str = Field(..., min_length=1)


class SchoolCreateResult(BaseModel):
    school_id: UUID
    owner_id: UUID


class DeleteSchoolResult(BaseModel):
    school_id: UUID
    deleted: Dict[str, int]


class SystemLogResponse(BaseModel):
    id: UUID
    action: str
    school_id: Optional[UUID] = None
    actor_id: Optional[UUID] = None
    actor_email: Optional[str] = None
    details: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    timestamp: datetime

    model_config = ConfigDict(from_attributes=True)


class DemoSeedRequest(BaseModel):
    """Login details for the three demo accounts; defaults match the public demo"""
    owner_email: EmailStr = "demo@owner.com"
    admin_email: EmailStr = "demo@admin.com"
    teacher_email: EmailStr = "demo@teacher.com"
    password: str = Field("demo1234", min_length=6)


class DemoAccount(BaseModel):
    role: str
    email: str


class DemoSeedResult(BaseModel):
    school_id: UUID
    accounts: List[DemoAccount]
    courses: int
    packages: int
    students: int
    credits: int
