"""
Client model (agency customers inside a workspace)
"""

from sqlalchemy import Column, String, Text, ForeignKey, Uuid
from sqlalchemy.orm import relationship

from seo_platform.models.base import BaseModel


class Client(BaseModel):
    __tablename__ = "clients"

    workspace_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("workspaces.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    name = Column(String(200), nullable=False)
    primary_domain = Column(String(1024), nullable=True)
    contact_email = Column(String(255), nullable=True)
    notes = Column(Text, nullable=True)

    workspace = relationship("Workspace", back_populates="clients")
    projects = relationship("Project", back_populates="client")
    documents = relationship("Document", back_populates="client")
