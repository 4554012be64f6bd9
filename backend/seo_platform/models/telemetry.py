"""
Telemetry events and daily usage snapshots
"""

from sqlalchemy import Column, String, Integer, Date, ForeignKey, Uuid, UniqueConstraint, Index
from sqlalchemy.orm import relationship, validates
from enum import Enum

from seo_platform.models.base import BaseModel, JSONType


class TelemetryEventType(str, Enum):
    USER_LOGIN = "USER_LOGIN"
    USER_LOGOUT = "USER_LOGOUT"
    PROJECT_CREATED = "PROJECT_CREATED"
    PROJECT_UPDATED = "PROJECT_UPDATED"
    PROJECT_DELETED = "PROJECT_DELETED"
    KEYWORD_SEARCH = "KEYWORD_SEARCH"
    AUDIT_RUN = "AUDIT_RUN"
    CONTENT_BRIEF_GENERATED = "CONTENT_BRIEF_GENERATED"
    DOCUMENT_CREATED = "DOCUMENT_CREATED"
    INTEGRATION_CONNECTED = "INTEGRATION_CONNECTED"
    INTEGRATION_DISCONNECTED = "INTEGRATION_DISCONNECTED"
    ERROR_OCCURRED = "ERROR_OCCURRED"
    API_CALL = "API_CALL"


class TelemetryEvent(BaseModel):
    """
    Product usage event scoped to a workspace
    """
    __tablename__ = "telemetry_events"

    workspace_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("workspaces.id", ondelete="CASCADE"),
        nullable=False,
    )

    user_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    type = Column(String(50), nullable=False, index=True)

    context = Column(String(255), nullable=True, comment="Where the event happened, e.g. a route")

    event_metadata = Column("metadata", JSONType, nullable=True)

    workspace = relationship("Workspace", back_populates="telemetry_events")

    __table_args__ = (
        Index("ix_telemetry_events_workspace_created", "workspace_id", "created_at"),
    )

    @validates('type')
    def validate_type(self, key: str, event_type: str) -> str:
        return TelemetryEventType(event_type).value


class DailyUsageSnapshot(BaseModel):
    """
    Per-workspace event counts for one UTC day
    """
    __tablename__ = "daily_usage_snapshots"

    workspace_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("workspaces.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    date = Column(Date, nullable=False, index=True)

    login_count = Column(Integer, nullable=False, default=0)
    project_count = Column(Integer, nullable=False, default=0)
    keyword_search_count = Column(Integer, nullable=False, default=0)
    audit_run_count = Column(Integer, nullable=False, default=0)
    content_brief_count = Column(Integer, nullable=False, default=0)
    document_count = Column(Integer, nullable=False, default=0)
    api_call_count = Column(Integer, nullable=False, default=0)
    error_count = Column(Integer, nullable=False, default=0)

    workspace = relationship("Workspace", back_populates="usage_snapshots")

    __table_args__ = (
        UniqueConstraint("workspace_id", "date", name="uq_daily_usage_snapshots_workspace_date"),
    )
