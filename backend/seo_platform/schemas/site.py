"""
Pydantic schemas for connected CMS sites and the assistant chat
"""

from pydantic import BaseModel, Field, field_validator
from typing import List, Literal, Optional
from uuid import UUID

from .common import validate_url


class SiteConnect(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    url: str = Field(..., description="Public site URL")
    api_token: str = Field(..., min_length=1)
    project_id: Optional[UUID] = None

    @field_validator('url')
    @classmethod
    def validate_site_url(cls, v):
        url = validate_url(v)
        if url is None:
            raise ValueError("Site URL is required")
        return url


class WordPressConnect(SiteConnect):
    pass


class WixConnect(SiteConnect):
    site_id: str = Field(..., min_length=1, description="Wix site ID")


class ChatMessage(BaseModel):
    role: Literal["user", "assistant"]
    content: str = Field(..., min_length=1, max_length=4000)


class ChatRequest(BaseModel):
    messages: List[ChatMessage] = Field(..., min_length=1)
