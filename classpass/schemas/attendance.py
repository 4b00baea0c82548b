from typing import Optional
from uuid import UUID
from datetime import date, datetime, time
from pydantic import BaseModel, ConfigDict, Field

from classpass.models.enums import CheckInMethod, AttendanceStatus, UserRole


class CheckInRequest(BaseModel):
    student_id: UUID
    course_id: UUID
    credit_id: Optional[UUID] = Field(
        None, description="Credit to deduct from; the usable credit expiring soonest when omitted"
    )
    check_in_method: CheckInMethod = CheckInMethod.MANUAL
    session_start_time: Optional[time] = None
    session_end_time: Optional[time] = None
    room: Optional[str] = None
    is_late: bool = False
    late_minutes: Optional[int] = Field(None, ge=0)
    teacher_notes: Optional[str] = None


class CancelRequest(BaseModel):
    reason: str = Field(..., min_length=1)


class AttendanceResponse(BaseModel):
    id: UUID
    school_id: UUID
    student_id: UUID
    course_id: UUID
    credit_id: Optional[UUID] = None
    student_code: str
    student_name: str
    student_nickname: Optional[str] = None
    course_name: str
    course_code: str
    check_in_date: date
    check_in_time: datetime
    check_in_method: CheckInMethod
    session_date: date
    session_start_time: Optional[time] = None
    session_end_time: Optional[time] = None
    room: Optional[str] = None
    credits_deducted: int
    credits_before: int
    credits_after: int
    status: AttendanceStatus
    is_late: bool
    late_minutes: Optional[int] = None
    checked_by: UUID
    checked_by_name: str
    checked_by_role: UserRole
    teacher_notes: Optional[str] = None
    cancelled_at: Optional[datetime] = None
    cancel_reason: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)
