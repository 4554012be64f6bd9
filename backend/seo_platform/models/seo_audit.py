"""
SEO audit model for storing page audit results and recommendations
"""

from sqlalchemy import Column, String, Integer, Text, ForeignKey, Boolean, Float, Uuid
from sqlalchemy.orm import relationship, validates
from typing import Dict, Any, List

from seo_platform.models.base import BaseModel, JSONType


class SeoAudit(BaseModel):
    """
    Result of analyzing one URL: on-page checks plus PageSpeed scores
    """
    __tablename__ = "seo_audits"

    project_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    url = Column(Text, nullable=False, comment="Audited URL")

    # Scores (0-100)
    overall_score = Column(Integer, nullable=True, comment="Mean of on-page and performance scores")
    seo_score = Column(Integer, nullable=True)
    performance_score = Column(Integer, nullable=True)
    accessibility_score = Column(Integer, nullable=True)
    best_practices_score = Column(Integer, nullable=True)

    mobile_friendly = Column(Boolean, nullable=True)

    # On-page facts
    title = Column(Text, nullable=True)
    meta_description = Column(Text, nullable=True)
    h1_count = Column(Integer, nullable=True)
    h2_count = Column(Integer, nullable=True)
    word_count = Column(Integer, nullable=True)
    load_time = Column(Float, nullable=True, comment="Page load time in seconds")

    issues = Column(
        JSONType,
        nullable=False,
        default=list,
        comment="Combined analyzer and PageSpeed issues"
    )

    recommendations = Column(
        JSONType,
        nullable=False,
        default=list,
        comment="Recommendation strings"
    )

    project = relationship("Project", back_populates="audits")

    @validates('overall_score', 'seo_score', 'performance_score', 'accessibility_score', 'best_practices_score')
    def validate_score(self, key: str, score: int) -> int:
        """Validate score is between 0 and 100"""
        if score is not None and (score < 0 or score > 100):
            raise ValueError(f"{key} must be between 0 and 100")
        return score

    def get_issues_by_type(self, issue_type: str) -> List[Dict[str, Any]]:
        return [issue for issue in (self.issues or []) if issue.get("type") == issue_type]

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data['error_count'] = len(self.get_issues_by_type("error"))
        if self.project:
            data['project'] = self.project.summary()
        return data

    def __repr__(self) -> str:
        return f"<SeoAudit(url='{self.url}', score={self.overall_score})>"
