"""
Content brief model
"""

from sqlalchemy import Column, String, Integer, Text, ForeignKey, Uuid
from sqlalchemy.orm import relationship
from typing import Dict, Any

from seo_platform.models.base import BaseModel, JSONType


class ContentBrief(BaseModel):
    __tablename__ = "content_briefs"

    project_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    target_keyword = Column(String(200), nullable=False)
    target_url = Column(Text, nullable=True)
    search_intent = Column(String(50), nullable=True, default="informational")

    title = Column(Text, nullable=True)
    meta_description = Column(Text, nullable=True)
    h1 = Column(Text, nullable=True)

    outline = Column(JSONType, nullable=True, comment="List of {level, heading, description}")
    questions = Column(JSONType, nullable=True, comment="Talking points")
    keywords = Column(JSONType, nullable=True, comment="Related keywords")

    word_count_target = Column(Integer, nullable=True)
    notes = Column(Text, nullable=True)

    project = relationship("Project", back_populates="content_briefs")

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data['talking_points'] = self.questions or []
        if self.project:
            data['project'] = self.project.summary()
        return data
