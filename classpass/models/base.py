"""Base Models and Mixins shared by every table"""

import uuid
from sqlalchemy import Column, DateTime, Boolean, ForeignKey
from sqlalchemy.dialects.postgresql import UUID, ENUM
from sqlalchemy.orm import declared_attr

from classpass.database import Base
from classpass.utils.time import get_utc_now


def enum_column_type(enum_cls, name: str) -> ENUM:
    """Postgres ENUM type that stores the lowercase enum values, not member names."""
    return ENUM(enum_cls, name=name, values_callable=lambda e: [m.value for m in e])


class BaseModel(Base):
    """
    Base model class with common fields for all models.

    Provides:
    - UUID primary key
    - created_at timestamp
    - updated_at timestamp
    """
    __abstract__ = True

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    created_at = Column(DateTime, default=get_utc_now, nullable=False, index=True)
    updated_at = Column(DateTime, default=get_utc_now, onupdate=get_utc_now, nullable=False)

    @classmethod
    def writable_changes(cls, changes: dict) -> dict:
        """
        Drop explicit nulls aimed at NOT NULL columns from a partial update.

        A client sending {"name": null} means "no change" for a required column.
        Keys that are not columns (relationships, derived input) pass through.
        """
        columns = cls.__table__.columns
        return {
            field: value
            for field, value in changes.items()
            if value is not None or field not in columns or columns[field].nullable
        }


class SchoolScopedMixin:
    """
    Mixin for multi-tenant models scoped to a school.

    Provides:
    - school_id foreign key
    """

    @declared_attr
    def school_id(cls):
        return Column(
            UUID(as_uuid=True),
            ForeignKey("schools.id", ondelete="CASCADE"),
            nullable=False,
            index=True
        )


class SoftDeleteMixin:
    """
    Mixin for soft delete functionality.

    Provides:
    - is_deleted flag (queried by list endpoints)
    - deleted_at timestamp
    """
    is_deleted = Column(Boolean, default=False, nullable=False, index=True)
    deleted_at = Column(DateTime, nullable=True)

    def soft_delete(self):
        """Mark record as deleted without removing from database"""
        self.is_deleted = True
        self.deleted_at = get_utc_now()

    def restore(self):
        """Restore a soft-deleted record"""
        self.is_deleted = False
        self.deleted_at = None


class StatusMixin:
    """
    Mixin for models with active/inactive status.

    Provides:
    - is_active boolean flag
    """
    is_active = Column(Boolean, default=True, nullable=False, index=True)
