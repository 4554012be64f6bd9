"""
Onboarding and public contact endpoints
"""

from fastapi import APIRouter, HTTPException, Depends, Request, status
from sqlalchemy.orm import Session
import logging

from seo_platform.api.deps import get_current_user, rate_limit_by_ip
from seo_platform.core.database import get_db
from seo_platform.models.admin_log import AdminLogLevel
from seo_platform.models.project import Project
from seo_platform.models.user import User
from seo_platform.schemas.billing import ContactRequest
from seo_platform.schemas.workspace import OnboardingComplete
from seo_platform.services import telemetry
from seo_platform.services.admin_logger import log_admin_action
from seo_platform.services.workspace_service import get_or_create_user_workspace

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/onboarding/complete")
async def complete_onboarding(
    payload: OnboardingComplete,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Name the user's workspace, optionally create a first project, and mark
    onboarding as done
    """
    if user.has_completed_onboarding:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Onboarding already completed")

    workspace = get_or_create_user_workspace(db, user)
    if payload.workspace_name:
        workspace.name = payload.workspace_name
    if payload.website:
        workspace.website = payload.website

    project = None
    if payload.project_name:
        project = Project(workspace_id=workspace.id, name=payload.project_name, domain=payload.website)
        db.add(project)

    user.has_completed_onboarding = True
    db.commit()

    if project is not None:
        telemetry.log_project_created(db, workspace.id, user.id, project.id, project.name)

    return {
        "success": True,
        "workspace": {"id": str(workspace.id), "name": workspace.name},
        "project": project.to_dict() if project is not None else None,
    }


@router.post("/contact", dependencies=[Depends(rate_limit_by_ip)])
async def contact(payload: ContactRequest, request: Request, db: Session = Depends(get_db)):
    logger.info(f"Contact form submission from {payload.email}")
    log_admin_action(
        db,
        AdminLogLevel.INFO,
        "CONTACT_FORM_SUBMITTED",
        metadata={
            "name": payload.name,
            "email": payload.email,
            "company": payload.company or "Not provided",
            "message": payload.message,
        },
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
    )
    return {"success": True, "message": "Message received"}
