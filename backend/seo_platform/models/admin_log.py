"""
Admin audit log model
"""

from sqlalchemy import Column, String, Text, DateTime, Uuid, Index
from sqlalchemy.orm import validates
from enum import Enum

from seo_platform.models.base import BaseModel, JSONType, utcnow


class AdminLogLevel(str, Enum):
    INFO = "INFO"
    WARN = "WARN"
    ERROR = "ERROR"
    SECURITY = "SECURITY"


class AdminLog(BaseModel):
    __tablename__ = "admin_logs"

    level = Column(String(20), nullable=False, default=AdminLogLevel.INFO.value, index=True)
    action = Column(String(255), nullable=False, index=True)

    user_id = Column(Uuid(as_uuid=True), nullable=True, index=True)
    workspace_id = Column(Uuid(as_uuid=True), nullable=True, index=True)

    log_metadata = Column("metadata", JSONType, nullable=True)

    ip_address = Column(String(64), nullable=True)
    user_agent = Column(Text, nullable=True)

    timestamp = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        Index("ix_admin_logs_timestamp", "timestamp"),
    )

    @validates('level')
    def validate_level(self, key: str, level: str) -> str:
        return AdminLogLevel(level).value
