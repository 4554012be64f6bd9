"""
Pydantic schemas for content briefs
"""

from pydantic import BaseModel, Field, field_validator
from typing import Optional
from uuid import UUID

from .common import blank_to_none, validate_url


class ContentBriefCreate(BaseModel):
    project_id: UUID
    target_keyword: str = Field(..., min_length=1, max_length=200)
    target_url: Optional[str] = None
    notes: Optional[str] = None

    @field_validator('target_url')
    @classmethod
    def validate_target_url(cls, v):
        return validate_url(v)

    @field_validator('notes')
    @classmethod
    def validate_notes(cls, v):
        return blank_to_none(v)
