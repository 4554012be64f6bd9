"""
CMS sites (WordPress, Wix) connected to a workspace
"""

from sqlalchemy import Column, String, Text, DateTime, ForeignKey, Uuid
from sqlalchemy.orm import relationship, validates
from typing import Any, Dict
from enum import Enum

from seo_platform.models.base import BaseModel


class SiteType(str, Enum):
    WORDPRESS = "WORDPRESS"
    WIX = "WIX"


class SiteStatus(str, Enum):
    PENDING = "PENDING"
    CONNECTED = "CONNECTED"
    ERROR = "ERROR"


class ConnectedSite(BaseModel):
    """
    A publishing target whose API token is kept encrypted like integration credentials
    """
    __tablename__ = "connected_sites"
    __private_fields__ = ("encrypted_credentials",)

    workspace_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("workspaces.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    project_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("projects.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    type = Column(String(20), nullable=False)
    name = Column(String(255), nullable=False)
    url = Column(Text, nullable=False)
    status = Column(String(20), nullable=False, default=SiteStatus.PENDING.value)

    last_sync_at = Column(DateTime(timezone=True), nullable=True)
    last_sync_status = Column(Text, nullable=True)

    encrypted_credentials = Column(
        Text,
        nullable=True,
        comment="base64(salt|iv|tag|ciphertext) of {apiToken, siteId}"
    )

    workspace = relationship("Workspace", back_populates="connected_sites")
    project = relationship("Project", back_populates="connected_sites")

    @validates('type')
    def validate_type(self, key: str, site_type: str) -> str:
        return SiteType(site_type).value

    @validates('status')
    def validate_status(self, key: str, site_status: str) -> str:
        return SiteStatus(site_status).value

    def summary(self) -> Dict[str, Any]:
        return {
            "id": str(self.id),
            "name": self.name,
            "url": self.url,
            "status": self.status,
            "type": self.type,
        }
