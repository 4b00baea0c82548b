from typing import Optional, List
from uuid import UUID
from datetime import date, datetime
from pydantic import BaseModel, ConfigDict, EmailStr, Field

from classpass.models.enums import Gender, StudentStatus, ParentType


class Address(BaseModel):
    house_number: Optional[str] = None
    street: Optional[str] = None
    subdistrict: Optional[str] = None
    district: Optional[str] = None
    province: Optional[str] = None
    postal_code: Optional[str] = None


class ParentBase(BaseModel):
    type: ParentType = ParentType.MOTHER
    first_name: str = Field(..., min_length=1)
    last_name: str = ""
    phone: Optional[str] = None
    email: Optional[EmailStr] = None
    line_id: Optional[str] = None
    occupation: Optional[str] = None
    is_primary_contact: bool = False
    receive_notifications: bool = True


class ParentResponse(ParentBase):
    id: UUID
    email: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class StudentCreate(BaseModel):
    """
    New roster entry.

    parent_name/parent_phone/parent_email are a shorthand for a single primary
    contact; a full list can be given in parents instead.
    """
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    nickname: Optional[str] = None
    birth_date: Optional[date] = None
    gender: Optional[Gender] = None
    current_grade: Optional[str] = None
    profile_image_url: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[EmailStr] = None
    address: Optional[Address] = None
    notes: Optional[str] = None
    parent_name: Optional[str] = None
    parent_phone: Optional[str] = None
    parent_email: Optional[EmailStr] = None
    parents: Optional[List[ParentBase]] = None


class StudentUpdate(BaseModel):
    first_name: Optional[str] = Field(None, min_length=1)
    last_name: Optional[str] = Field(None, min_length=1)
    nickname: Optional[str] = None
    birth_date: Optional[date] = None
    gender: Optional[Gender] = None
    current_grade: Optional[str] = None
    profile_image_url: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[EmailStr] = None
    address: Optional[Address] = None
    notes: Optional[str] = None
    status: Optional[StudentStatus] = None
    parents: Optional[List[ParentBase]] = None


class StudentResponse(BaseModel):
    id: UUID
    school_id: UUID
    student_code: str
    first_name: str
    last_name: str
    nickname: Optional[str] = None
    birth_date: Optional[date] = None
    age: Optional[int] = None
    gender: Optional[Gender] = None
    current_grade: Optional[str] = None
    profile_image_url: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[Address] = None
    notes: Optional[str] = None
    status: StudentStatus
    is_active: bool
    parents: List[ParentResponse] = []
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
