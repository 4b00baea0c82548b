from typing import Optional, Dict
from uuid import UUID
from datetime import datetime
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from classpass.models.enums import UserRole


STAFF_ROLES = (UserRole.ADMIN, UserRole.TEACHER)


class UserResponse(BaseModel):
    id: UUID
    email: str
    first_name: str
    last_name: str
    display_name: str
    phone: Optional[str] = None
    profile_image_url: Optional[str] = None
    role: UserRole
    school_id: Optional[UUID] = None
    is_active: bool
    last_login: Optional[datetime] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class UserCreate(BaseModel):
    """Owner/admin adds a staff member"""
    email: EmailStr
    password: str
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    phone: Optional[str] = None
    role: UserRole = UserRole.TEACHER

    @field_validator("role")
    @classmethod
    def staff_role_only(cls, v: UserRole) -> UserRole:
        if v not in STAFF_ROLES:
            raise ValueError("role must be admin or teacher")
        return v


class UserUpdate(BaseModel):
    first_name: Optional[str] = Field(None, min_length=1)
    last_name: Optional[str] = Field(None, min_length=1)
    phone: Optional[str] = None
    profile_image_url: Optional[str] = None
    role: Optional[UserRole] = None

    @field_validator("role")
    @classmethod
    def staff_role_only(cls, v: Optional[UserRole]) -> Optional[UserRole]:
        if v is not None and v not in STAFF_ROLES:
            raise ValueError("role must be admin or teacher")
        return v


class ProfileUpdate(BaseModel):
    """Fields a user may change on their own account"""
    first_name: Optional[str] = Field(None, min_length=1)
    last_name: Optional[str] = Field(None, min_length=1)
    phone: Optional[str] = None
    profile_image_url: Optional[str] = None


class UserStats(BaseModel):
    total: int
    active: int
    inactive: int
    by_role: Dict[str, int]
