"""
Document model: notes, reports, legal texts and uploads
"""

from sqlalchemy import Column, String, Text, ForeignKey, Uuid
from sqlalchemy.orm import relationship, validates
from typing import Dict, Any
from enum import Enum

from seo_platform.models.base import BaseModel


class DocumentType(str, Enum):
    NOTE = "NOTE"
    REPORT = "REPORT"
    UPLOAD = "UPLOAD"
    LEGAL = "LEGAL"
    STRATEGY = "STRATEGY"
    RESEARCH = "RESEARCH"


class Document(BaseModel):
    __tablename__ = "documents"

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

    project_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("projects.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    title = Column(String(200), nullable=False)
    type = Column(String(20), nullable=False, default=DocumentType.NOTE.value)
    content = Column(Text, nullable=True)
    url = Column(Text, nullable=True)
    tags = Column(String(500), nullable=True, comment="Comma separated tags")

    workspace = relationship("Workspace", back_populates="documents")
    client = relationship("Client", back_populates="documents")
    project = relationship("Project", back_populates="documents")

    @validates('type')
    def validate_type(self, key: str, doc_type: str) -> str:
        return DocumentType(doc_type).value

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data['client'] = {"id": str(self.client.id), "name": self.client.name} if self.client else None
        data['project'] = self.project.summary() if self.project else None
        return data
