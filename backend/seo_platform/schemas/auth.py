"""
Pydantic schemas for registration and login
"""

from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Any, Dict

from seo_platform.core.security import MAX_PASSWORD_BYTES


class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(..., min_length=6)

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        if len(value.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
        return value


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class SessionResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: Dict[str, Any]
