"""
Service accounts for machine access to the admin API
"""

from sqlalchemy import Column, String, Boolean, DateTime

from seo_platform.models.base import BaseModel


class ServiceAccount(BaseModel):
    __tablename__ = "service_accounts"
    __private_fields__ = ("api_key_hash",)

    name = Column(String(255), nullable=False)

    api_key_hash = Column(
        String(64),
        unique=True,
        nullable=False,
        index=True,
        comment="SHA-256 hex digest of the API key"
    )

    is_active = Column(Boolean, nullable=False, default=True)
    last_used_at = Column(DateTime(timezone=True), nullable=True)
