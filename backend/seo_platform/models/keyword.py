"""
Keyword model for SEO keyword research and tracking
"""

from sqlalchemy import Column, String, Integer, Text, ForeignKey, Numeric, Uuid
from sqlalchemy.orm import relationship, validates
from typing import Dict, Any

from seo_platform.models.base import BaseModel

VALID_INTENTS = ['informational', 'navigational', 'commercial', 'transactional']


class Keyword(BaseModel):
    """
    Keyword model for storing keyword research data
    """
    __tablename__ = "keywords"

    project_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    term = Column(
        Text,
        nullable=False,
        comment="The keyword phrase"
    )

    # Search metrics
    volume = Column(
        Integer,
        nullable=True,
        comment="Monthly search volume"
    )

    difficulty = Column(
        Integer,
        nullable=True,
        comment="Keyword difficulty score (0-100)"
    )

    cpc = Column(
        Numeric(10, 2),
        nullable=True,
        comment="Cost per click in USD"
    )

    serp_feature_summary = Column(
        String(50),
        nullable=True,
        comment="Search intent inferred from the results page"
    )

    project = relationship("Project", back_populates="keywords")

    @validates('difficulty')
    def validate_difficulty(self, key: str, difficulty: int) -> int:
        """Validate keyword difficulty is between 0 and 100"""
        if difficulty is not None and (difficulty < 0 or difficulty > 100):
            raise ValueError("Keyword difficulty must be between 0 and 100")
        return difficulty

    @validates('serp_feature_summary')
    def validate_intent(self, key: str, intent: str) -> str:
        if intent is not None:
            if intent.lower() not in VALID_INTENTS:
                raise ValueError(f"Search intent must be one of: {', '.join(VALID_INTENTS)}")
            return intent.lower()
        return intent

    def is_long_tail(self) -> bool:
        """Check if keyword is long-tail (3+ words)"""
        return len(self.term.split()) >= 3

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data['is_long_tail'] = self.is_long_tail()
        if self.project:
            data['project'] = self.project.summary()
        return data

    def __repr__(self) -> str:
        return f"<Keyword(term='{self.term}', volume={self.volume})>"
