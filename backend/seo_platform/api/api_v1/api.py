"""
Main API router that includes all endpoint routers
"""

from fastapi import APIRouter

from seo_platform.api.api_v1.endpoints import (
    admin,
    audits,
    auth,
    billing,
    chat,
    clients,
    content_briefs,
    cron,
    documents,
    integrations,
    keywords,
    onboarding,
    projects,
    sites,
    workspace,
)

# Create main API router
api_router = APIRouter()

# Include all endpoint routers
api_router.include_router(auth.router, prefix="/auth", tags=["authentication"])
api_router.include_router(projects.router, prefix="/projects", tags=["projects"])
api_router.include_router(keywords.router, prefix="/keywords", tags=["keywords"])
api_router.include_router(audits.router, prefix="/audits", tags=["audits"])
api_router.include_router(content_briefs.router, prefix="/content-briefs", tags=["content-briefs"])
api_router.include_router(documents.router, prefix="/documents", tags=["documents"])
api_router.include_router(clients.router, prefix="/clients", tags=["clients"])
api_router.include_router(integrations.router, prefix="/integrations", tags=["integrations"])
# Registered after integrations so /integrations/config/... resolves there first
api_router.include_router(sites.router, prefix="/integrations", tags=["sites"])
api_router.include_router(workspace.router, prefix="/workspace", tags=["workspace"])
api_router.include_router(billing.router, tags=["billing"])
api_router.include_router(onboarding.router, tags=["onboarding"])
api_router.include_router(chat.router, tags=["chat"])
api_router.include_router(cron.router, prefix="/cron", tags=["cron"])
api_router.include_router(admin.router, prefix="/admin", tags=["admin"])
api_router.include_router(admin.dash_router, prefix="/admin/dash", tags=["admin"])
