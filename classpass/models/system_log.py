"""Platform Audit Log Model"""

from sqlalchemy import Column, String, Text, DateTime
from sqlalchemy.dialects.postgresql import UUID, JSONB

from classpass.models.base import BaseModel
from classpass.utils.time import get_utc_now


class SystemLog(BaseModel):
    """
    Superadmin audit trail.
    school_id is not a foreign key so entries survive the school's deletion.
    """
    __tablename__ = "system_logs"

    action = Column(String(100), nullable=False, index=True)
    school_id = Column(UUID(as_uuid=True), nullable=True, index=True)
    actor_id = Column(UUID(as_uuid=True), nullable=True)
    actor_email = Column(String(255), nullable=True)
    details = Column(JSONB, nullable=True)
    error = Column(Text, nullable=True)
    timestamp = Column(DateTime, default=get_utc_now, nullable=False, index=True)
