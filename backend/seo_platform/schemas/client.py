"""
Pydantic schemas for agency clients
"""

from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional

from .common import blank_to_none, validate_url


class ClientBase(BaseModel):
    primary_domain: Optional[str] = None
    contact_email: Optional[EmailStr] = None
    notes: Optional[str] = None

    @field_validator('primary_domain')
    @classmethod
    def validate_primary_domain(cls, v):
        return validate_url(v)

    @field_validator('contact_email', mode='before')
    @classmethod
    def empty_email_to_none(cls, v):
        return blank_to_none(v) if isinstance(v, str) else v


class ClientCreate(ClientBase):
    name: str = Field(..., min_length=1, max_length=200)


class ClientUpdate(ClientBase):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
