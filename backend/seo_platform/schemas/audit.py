"""
Pydantic schemas for SEO audits
"""

from pydantic import BaseModel, Field, field_validator
from typing import Optional
from uuid import UUID

from .common import validate_url


class AuditCreate(BaseModel):
    project_id: UUID
    url: str = Field(..., description="Page to audit")
    keyword: Optional[str] = None

    @field_validator('url')
    @classmethod
    def validate_page_url(cls, v):
        url = validate_url(v)
        if url is None:
            raise ValueError("Must be a valid URL")
        return url
