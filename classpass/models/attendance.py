"""Attendance (credit redemption) Model"""

from sqlalchemy import Column, String, Text, Integer, Boolean, Date, DateTime, Time, ForeignKey
from sqlalchemy.dialects.postgresql import UUID

from classpass.models.base import BaseModel, SchoolScopedMixin, enum_column_type
from classpass.models.enums import CheckInMethod, AttendanceStatus, UserRole


class Attendance(BaseModel, SchoolScopedMixin):
    """
    One check-in of a student into a course session.
    Records the credit it consumed with before/after counters so it can be refunded.
    """
    __tablename__ = "attendance"

    student_id = Column(
        UUID(as_uuid=True), ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True
    )
    course_id = Column(
        UUID(as_uuid=True), ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True
    )
    credit_id = Column(
        UUID(as_uuid=True), ForeignKey("student_credits.id", ondelete="SET NULL"), nullable=True, index=True
    )

    # Denormalized labels
    student_code = Column(String(20), nullable=False)
    student_name = Column(String(512), nullable=False)
    student_nickname = Column(String(100), nullable=True)
    course_name = Column(String(255), nullable=False)
    course_code = Column(String(20), nullable=False)

    # Check-in
    check_in_date = Column(Date, nullable=False, index=True)
    check_in_time = Column(DateTime, nullable=False)
    check_in_method = Column(
        enum_column_type(CheckInMethod, "check_in_method"), default=CheckInMethod.MANUAL, nullable=False
    )

    # Session
    session_date = Column(Date, nullable=False)
    session_start_time = Column(Time, nullable=True)
    session_end_time = Column(Time, nullable=True)
    room = Column(String(100), nullable=True)

    # Credits
    credits_deducted = Column(Integer, default=1, nullable=False)
    credits_before = Column(Integer, nullable=False)
    credits_after = Column(Integer, nullable=False)

    status = Column(
        enum_column_type(AttendanceStatus, "attendance_status"),
        default=AttendanceStatus.PRESENT,
        nullable=False,
        index=True
    )
    is_late = Column(Boolean, default=False, nullable=False)
    late_minutes = Column(Integer, nullable=True)

    checked_by = Column(UUID(as_uuid=True), nullable=False)
    checked_by_name = Column(String(512), nullable=False)
    checked_by_role = Column(enum_column_type(UserRole, "user_role"), nullable=False)
    teacher_notes = Column(Text, nullable=True)

    cancelled_at = Column(DateTime, nullable=True)
    cancel_reason = Column(Text, nullable=True)
