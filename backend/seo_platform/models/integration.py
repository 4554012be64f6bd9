"""
Per-workspace integration credentials (encrypted at rest)
"""

from sqlalchemy import Column, String, Text, Boolean, DateTime, ForeignKey, Uuid, UniqueConstraint
from sqlalchemy.orm import relationship, validates
from enum import Enum

from seo_platform.models.base import BaseModel


class IntegrationType(str, Enum):
    """Third-party providers a workspace can bring its own key for"""
    GA4 = "GA4"
    GSC = "GSC"
    SERP_API = "SERP_API"
    OPENAI = "OPENAI"
    ANTHROPIC = "ANTHROPIC"
    GEMINI = "GEMINI"
    STRIPE = "STRIPE"
    PAGESPEED = "PAGESPEED"


class IntegrationConfig(BaseModel):
    """
    Encrypted credentials for one provider in one workspace
    """
    __tablename__ = "integration_configs"
    __private_fields__ = ("encrypted_credentials",)

    workspace_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("workspaces.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    type = Column(String(20), nullable=False)

    display_name = Column(String(255), nullable=True)

    encrypted_credentials = Column(
        Text,
        nullable=False,
        comment="base64(salt|iv|tag|ciphertext) of the credentials JSON"
    )

    is_enabled = Column(Boolean, nullable=False, default=True)

    last_tested_at = Column(DateTime(timezone=True), nullable=True)
    last_test_status = Column(String(20), nullable=True, comment="success or error")
    last_test_error = Column(Text, nullable=True)

    workspace = relationship("Workspace", back_populates="integration_configs")

    __table_args__ = (
        UniqueConstraint("workspace_id", "type", name="uq_integration_configs_workspace_type"),
    )

    @validates('type')
    def validate_type(self, key: str, integration_type: str) -> str:
        return IntegrationType(integration_type).value
