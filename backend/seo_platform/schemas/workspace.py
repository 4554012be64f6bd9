"""
Pydantic schemas for workspace membership and onboarding
"""

from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional

from seo_platform.models.workspace import WorkspaceRole
from .common import blank_to_none, validate_url


class MemberInvite(BaseModel):
    email: EmailStr
    role: WorkspaceRole = WorkspaceRole.MEMBER

    @field_validator('role')
    @classmethod
    def validate_role(cls, v):
        if v == WorkspaceRole.OWNER:
            raise ValueError("A workspace has exactly one owner")
        return v


class OnboardingComplete(BaseModel):
    workspace_name: Optional[str] = Field(None, max_length=255)
    website: Optional[str] = None
    project_name: Optional[str] = Field(None, max_length=100)

    @field_validator('website')
    @classmethod
    def validate_website(cls, v):
        return validate_url(v)

    @field_validator('workspace_name', 'project_name')
    @classmethod
    def strip_names(cls, v):
        return blank_to_none(v)
