"""
Pydantic schemas for API request validation
"""

from .auth import RegisterRequest, LoginRequest, SessionResponse
from .project import ProjectCreate, ProjectUpdate
from .keyword import KeywordCreate
from .audit import AuditCreate
from .content_brief import ContentBriefCreate
from .document import DocumentCreate, DocumentUpdate, DocumentGenerate
from .client import ClientCreate, ClientUpdate
from .integration import IntegrationConfigCreate, IntegrationConfigUpdate
from .site import WordPressConnect, WixConnect, ChatRequest
from .workspace import MemberInvite, OnboardingComplete
from .billing import CheckoutRequest, ContactRequest

__all__ = [
    # Auth schemas
    "RegisterRequest", "LoginRequest", "SessionResponse",
    # Project schemas
    "ProjectCreate", "ProjectUpdate",
    # Research schemas
    "KeywordCreate", "AuditCreate", "ContentBriefCreate",
    # Document schemas
    "DocumentCreate", "DocumentUpdate", "DocumentGenerate",
    # Client schemas
    "ClientCreate", "ClientUpdate",
    # Integration schemas
    "IntegrationConfigCreate", "IntegrationConfigUpdate",
    # Connected site and chat schemas
    "WordPressConnect", "WixConnect", "ChatRequest",
    # Workspace schemas
    "MemberInvite", "OnboardingComplete",
    # Billing schemas
    "CheckoutRequest", "ContactRequest",
]
