"""Staff & Authentication Model"""

from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey
from sqlalchemy.dialects.postgresql import UUID

from classpass.models.base import BaseModel, SoftDeleteMixin, enum_column_type
from classpass.models.enums import UserRole


class User(BaseModel, SoftDeleteMixin):
    """
    Staff account (owner, admin, teacher) or platform superadmin.
    Superadmins are the only users without a school.
    """
    __tablename__ = "users"

    school_id = Column(
        UUID(as_uuid=True),
        ForeignKey("schools.id", ondelete="CASCADE"),
        nullable=True,
        index=True
    )

    # Authentication
    email = Column(String(255), unique=True, nullable=False, index=True)
    hashed_password = Column(String(255), nullable=False)

    # Personal Information
    first_name = Column(String(255), nullable=False)
    last_name = Column(String(255), nullable=False)
    display_name = Column(String(512), nullable=False)
    phone = Column(String(50), nullable=True)
    profile_image_url = Column(String(500), nullable=True)

    # Role & Permissions (RBAC)
    role = Column(enum_column_type(UserRole, "user_role"), nullable=False, index=True)

    is_active = Column(Boolean, default=True, nullable=False, index=True)
    last_login = Column(DateTime, nullable=True)
    created_by = Column(UUID(as_uuid=True), nullable=True)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def is_admin(self) -> bool:
        """Owners and admins manage the school"""
        return self.role in (UserRole.OWNER, UserRole.ADMIN)

    @property
    def is_superadmin(self) -> bool:
        return self.role == UserRole.SUPERADMIN

    def __repr__(self) -> str:
        return f"<User {self.email} ({self.role})>"
