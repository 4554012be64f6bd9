"""
Project model: a website tracked inside a workspace
"""

from sqlalchemy import Column, String, ForeignKey, Uuid
from sqlalchemy.orm import relationship
from typing import Dict, Any

from seo_platform.models.base import BaseModel


class Project(BaseModel):
    __tablename__ = "projects"

    workspace_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("workspaces.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    client_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("clients.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    name = Column(String(100), nullable=False)

    domain = Column(
        String(1024),
        nullable=True,
        comment="Site URL, null when not provided"
    )

    workspace = relationship("Workspace", back_populates="projects")
    client = relationship("Client", back_populates="projects")
    keywords = relationship("Keyword", back_populates="project", cascade="all, delete-orphan")
    audits = relationship("SeoAudit", back_populates="project", cascade="all, delete-orphan")
    content_briefs = relationship("ContentBrief", back_populates="project", cascade="all, delete-orphan")
    documents = relationship("Document", back_populates="project")
    connected_sites = relationship("ConnectedSite", back_populates="project")

    def summary(self) -> Dict[str, Any]:
        """ID and name, embedded in child resources"""
        return {"id": str(self.id), "name": self.name}

    def __repr__(self) -> str:
        return f"<Project(name='{self.name}')>"
