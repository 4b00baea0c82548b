"""Course Catalog Models"""

from sqlalchemy import Column, String, Text, Integer, Time, ForeignKey
from sqlalchemy.dialects.postgresql import UUID, ARRAY
from sqlalchemy.orm import relationship

from classpass.models.base import (
    BaseModel, SchoolScopedMixin, SoftDeleteMixin, StatusMixin, enum_column_type
)
from classpass.models.enums import CourseCategory, CourseStatus, DayOfWeek


class Course(BaseModel, SchoolScopedMixin, SoftDeleteMixin, StatusMixin):
    """
    A course offered by the school.
    Code format is {CAT}{yy}{seq}, e.g. SPO25001.
    """
    __tablename__ = "courses"

    code = Column(String(20), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    category = Column(enum_column_type(CourseCategory, "course_category"), nullable=False)
    description = Column(Text, nullable=True)
    cover_image_url = Column(String(500), nullable=True)
    tags = Column(ARRAY(String), default=list, nullable=False)

    max_students_per_class = Column(Integer, nullable=True)
    default_credits_per_session = Column(Integer, default=1, nullable=False)
    primary_teacher_id = Column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )

    status = Column(
        enum_column_type(CourseStatus, "course_status"),
        default=CourseStatus.ACTIVE,
        nullable=False,
        index=True
    )
    total_enrolled = Column(Integer, default=0, nullable=False)

    sessions = relationship(
        "CourseSession",
        back_populates="course",
        cascade="all, delete-orphan",
        order_by="CourseSession.start_time",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<Course {self.code} {self.name}>"


class CourseSession(BaseModel):
    """Recurring weekly timeslot of a course"""
    __tablename__ = "course_sessions"

    course_id = Column(
        UUID(as_uuid=True),
        ForeignKey("courses.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    day = Column(enum_column_type(DayOfWeek, "day_of_week"), nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    room = Column(String(100), nullable=True)

    course = relationship("Course", back_populates="sessions")
