"""
Pydantic schemas for workspace documents
"""

from pydantic import BaseModel, Field, field_validator
from typing import Optional
from uuid import UUID

from seo_platform.models.document import DocumentType
from seo_platform.services.llm import LLMProfile, LLMProvider
from .common import validate_url


class DocumentBase(BaseModel):
    content: Optional[str] = None
    url: Optional[str] = None
    tags: Optional[str] = Field(None, description="Comma separated tags")
    client_id: Optional[UUID] = None
    project_id: Optional[UUID] = None

    @field_validator('url')
    @classmethod
    def validate_document_url(cls, v):
        return validate_url(v)


class DocumentCreate(DocumentBase):
    title: str = Field(..., min_length=1, max_length=200)
    type: DocumentType


class DocumentUpdate(DocumentBase):
    """Omitted fields are left unchanged; explicit nulls clear client and project links"""

    title: Optional[str] = Field(None, min_length=1, max_length=200)
    type: Optional[DocumentType] = None


class DocumentGenerate(BaseModel):
    template: str = Field(..., min_length=1)
    workspace_name: str = Field(..., min_length=1)
    domain: Optional[str] = None
    provider: LLMProvider = LLMProvider.OPENAI
    profile: LLMProfile = LLMProfile.BALANCED
