"""
Pydantic schemas for billing and contact requests
"""

from pydantic import BaseModel, EmailStr, Field

from seo_platform.models.subscription import Plan


class CheckoutRequest(BaseModel):
    plan: Plan = Field(..., description="PRO or AGENCY")


class ContactRequest(BaseModel):
    name: str = Field(..., min_length=2)
    email: EmailStr
    company: str = ""
    message: str = Field(..., min_length=10)
