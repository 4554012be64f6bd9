"""
Pydantic schemas for workspace integration configs
"""

from pydantic import BaseModel, Field
from typing import Any, Dict, Optional

from seo_platform.models.integration import IntegrationType


class IntegrationConfigCreate(BaseModel):
    type: IntegrationType
    display_name: Optional[str] = Field(None, max_length=255)
    credentials: Dict[str, Any] = Field(..., description="Provider credentials, e.g. {\"apiKey\": \"...\"}")


class IntegrationConfigUpdate(BaseModel):
    display_name: Optional[str] = Field(None, max_length=255)
    credentials: Optional[Dict[str, Any]] = None
    is_enabled: Optional[bool] = None
