from typing import Optional, List
from uuid import UUID
from datetime import datetime, time
from pydantic import BaseModel, ConfigDict, Field, model_validator

from classpass.models.enums import CourseCategory, CourseStatus, DayOfWeek


class CourseSessionBase(BaseModel):
    day: DayOfWeek
    start_time: time
    end_time: time
    room: Optional[str] = None

    @model_validator(mode="after")
    def check_times(self):
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self


class CourseSessionResponse(CourseSessionBase):
    id: UUID

    model_config = ConfigDict(from_attributes=True)


class CourseCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    category: CourseCategory
    description: Optional[str] = None
    cover_image_url: Optional[str] = None
    tags: List[str] = []
    max_students_per_class: Optional[int] = Field(None, ge=1)
    default_credits_per_session: int = Field(1, ge=1)
    primary_teacher_id: Optional[UUID] = None
    sessions: List[CourseSessionBase] = []


class CourseUpdate(BaseModel):
    """code, school_id and total_enrolled are not editable"""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    category: Optional[CourseCategory] = None
    description: Optional[str] = None
    cover_image_url: Optional[str] = None
    tags: Optional[List[str]] = None
    max_students_per_class: Optional[int] = Field(None, ge=1)
    default_credits_per_session: Optional[int] = Field(None, ge=1)
    primary_teacher_id: Optional[UUID] = None
    status: Optional[CourseStatus] = None
    sessions: Optional[List[CourseSessionBase]] = None


class CourseResponse(BaseModel):
    id: UUID
    school_id: UUID
    code: str
    name: str
    category: CourseCategory
    description: Optional[str] = None
    cover_image_url: Optional[str] = None
    tags: List[str] = []
    max_students_per_class: Optional[int] = None
    default_credits_per_session: int
    primary_teacher_id: Optional[UUID] = None
    status: CourseStatus
    is_active: bool
    total_enrolled: int
    sessions: List[CourseSessionResponse] = []
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
