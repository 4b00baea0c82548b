"""Student Roster Models"""

from sqlalchemy import Column, String, Text, Boolean, Date, Integer, ForeignKey
from sqlalchemy.dialects.postgresql import UUID, JSONB
from sqlalchemy.orm import relationship

from classpass.models.base import (
    BaseModel, SchoolScopedMixin, SoftDeleteMixin, StatusMixin, enum_column_type
)
from classpass.models.enums import Gender, StudentStatus, ParentType


class Student(BaseModel, SchoolScopedMixin, SoftDeleteMixin, StatusMixin):
    """A learner on the school roster. Students do not log in."""
    __tablename__ = "students"

    student_code = Column(String(20), nullable=False, index=True)
    first_name = Column(String(255), nullable=False)
    last_name = Column(String(255), nullable=False)
    nickname = Column(String(100), nullable=True)
    birth_date = Column(Date, nullable=True)
    age = Column(Integer, nullable=True)
    gender = Column(enum_column_type(Gender, "gender"), nullable=True)
    current_grade = Column(String(50), nullable=True)
    profile_image_url = Column(String(500), nullable=True)

    # Contact
    phone = Column(String(50), nullable=True)
    email = Column(String(255), nullable=True)
    address = Column(JSONB, nullable=True)

    status = Column(
        enum_column_type(StudentStatus, "student_status"),
        default=StudentStatus.ACTIVE,
        nullable=False,
        index=True
    )
    notes = Column(Text, nullable=True)

    parents = relationship(
        "StudentParent",
        back_populates="student",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def __repr__(self) -> str:
        return f"<Student {self.student_code} {self.full_name}>"


class StudentParent(BaseModel):
    """Parent or guardian contact for a student"""
    __tablename__ = "student_parents"

    student_id = Column(
        UUID(as_uuid=True),
        ForeignKey("students.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    type = Column(enum_column_type(ParentType, "parent_type"), nullable=False)
    first_name = Column(String(255), nullable=False)
    last_name = Column(String(255), nullable=False, default="")
    phone = Column(String(50), nullable=True)
    email = Column(String(255), nullable=True)
    line_id = Column(String(100), nullable=True)
    occupation = Column(String(255), nullable=True)
    is_primary_contact = Column(Boolean, default=False, nullable=False)
    receive_notifications = Column(Boolean, default=True, nullable=False)

    student = relationship("Student", back_populates="parents")
