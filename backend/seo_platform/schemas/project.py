"""
Pydantic schemas for projects
"""

from pydantic import BaseModel, Field, field_validator
from typing import Optional
from uuid import UUID

from .common import validate_url


class ProjectCreate(BaseModel):
    """Schema for creating a project"""

    name: str = Field(..., min_length=1, max_length=100, description="Project name")
    domain: Optional[str] = Field(None, description="Site URL; an empty string is stored as null")
    client_id: Optional[UUID] = Field(None, description="Client the project belongs to")

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        if not v.strip():
            raise ValueError("Project name is required")
        return v.strip()

    @field_validator('domain')
    @classmethod
    def validate_domain(cls, v):
        return validate_url(v)


class ProjectUpdate(BaseModel):
    """Schema for updating a project; omitted fields are left unchanged"""

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    domain: Optional[str] = None
    client_id: Optional[UUID] = None

    @field_validator('domain')
    @classmethod
    def validate_domain(cls, v):
        return validate_url(v)
