"""
Workspace (tenant) and membership models
"""

from sqlalchemy import Column, String, ForeignKey, Uuid, UniqueConstraint
from sqlalchemy.orm import relationship, validates
from enum import Enum

from seo_platform.models.base import BaseModel


class WorkspaceRole(str, Enum):
    """Role of a member inside a workspace"""
    OWNER = "OWNER"
    ADMIN = "ADMIN"
    MEMBER = "MEMBER"
    VIEWER = "VIEWER"


class Workspace(BaseModel):
    """
    Tenant that owns projects, clients, documents and integration credentials
    """
    __tablename__ = "workspaces"

    name = Column(String(255), nullable=False)

    slug = Column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
        comment="URL-safe unique identifier"
    )

    website = Column(String(1024), nullable=True)

    owner_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # Relationships
    owner = relationship("User", back_populates="owned_workspaces")
    members = relationship("WorkspaceUser", back_populates="workspace", cascade="all, delete-orphan")
    projects = relationship("Project", back_populates="workspace", cascade="all, delete-orphan")
    clients = relationship("Client", back_populates="workspace", cascade="all, delete-orphan")
    documents = relationship("Document", back_populates="workspace", cascade="all, delete-orphan")
    integration_configs = relationship("IntegrationConfig", back_populates="workspace", cascade="all, delete-orphan")
    connected_sites = relationship("ConnectedSite", back_populates="workspace", cascade="all, delete-orphan")
    subscription = relationship("Subscription", back_populates="workspace", uselist=False, cascade="all, delete-orphan")
    telemetry_events = relationship("TelemetryEvent", back_populates="workspace", cascade="all, delete-orphan")
    usage_snapshots = relationship("DailyUsageSnapshot", back_populates="workspace", cascade="all, delete-orphan")

    def __repr__(self) -> str:
        return f"<Workspace(slug='{self.slug}')>"


class WorkspaceUser(BaseModel):
    """
    Membership of a user in a workspace
    """
    __tablename__ = "workspace_users"

    workspace_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("workspaces.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    user_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    role = Column(
        String(20),
        nullable=False,
        default=WorkspaceRole.MEMBER.value,
    )

    workspace = relationship("Workspace", back_populates="members")
    user = relationship("User", back_populates="memberships")

    __table_args__ = (
        UniqueConstraint("workspace_id", "user_id", name="uq_workspace_users_workspace_user"),
    )

    @validates('role')
    def validate_role(self, key: str, role: str) -> str:
        return WorkspaceRole(role).value

    def to_dict(self):
        data = super().to_dict()
        if self.user:
            data["user"] = self.user.to_public_dict()
        return data
