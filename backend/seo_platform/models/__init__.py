"""
Database models package
"""

from .base import Base, BaseModel
from .user import User, UserRole, PlatformRole
from .workspace import Workspace, WorkspaceUser, WorkspaceRole
from .client import Client
from .project import Project
from .keyword import Keyword
from .seo_audit import SeoAudit
from .content_brief import ContentBrief
from .document import Document, DocumentType
from .integration import IntegrationConfig, IntegrationType
from .connected_site import ConnectedSite, SiteStatus, SiteType
from .subscription import Subscription, Plan
from .telemetry import TelemetryEvent, TelemetryEventType, DailyUsageSnapshot
from .rate_limit import RateLimitLog, RateLimitLock
from .admin_log import AdminLog, AdminLogLevel
from .service_account import ServiceAccount

__all__ = [
    "Base", "BaseModel", "User", "UserRole", "PlatformRole",
    "Workspace", "WorkspaceUser", "WorkspaceRole", "Client", "Project", "Keyword",
    "SeoAudit", "ContentBrief", "Document", "DocumentType",
    "IntegrationConfig", "IntegrationType", "ConnectedSite", "SiteStatus", "SiteType",
    "Subscription", "Plan",
    "TelemetryEvent", "TelemetryEventType", "DailyUsageSnapshot",
    "RateLimitLog", "RateLimitLock", "AdminLog", "AdminLogLevel", "ServiceAccount",
]
