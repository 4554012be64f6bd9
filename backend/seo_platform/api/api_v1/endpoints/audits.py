"""
SEO audit endpoints
"""

from fastapi import APIRouter, HTTPException, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Optional
from uuid import UUID
import logging

from seo_platform.api.deps import (
    get_current_user,
    get_current_workspace,
    get_workspace_project,
    raise_if_over_limit,
    rate_limit,
)
from seo_platform.core.database import get_db
from seo_platform.models.project import Project
from seo_platform.models.seo_audit import SeoAudit
from seo_platform.models.user import User
from seo_platform.models.workspace import Workspace
from seo_platform.schemas.audit import AuditCreate
from seo_platform.services import telemetry
from seo_platform.services.plan_limits import check_limit, get_limits_for_plan, get_workspace_plan
from seo_platform.services.seo_analyzer import SEOAnalyzerError
from seo_platform.services.site_audit import count_recent_audits, run_site_audit

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/")
async def list_audits(
    project_id: Optional[UUID] = Query(None),
    workspace: Workspace = Depends(get_current_workspace),
    db: Session = Depends(get_db),
):
    """50 most recent audits in the workspace"""
    query = db.query(SeoAudit).join(Project).filter(Project.workspace_id == workspace.id)
    if project_id:
        query = query.filter(SeoAudit.project_id == project_id)

    audits = query.order_by(SeoAudit.created_at.desc()).limit(50).all()
    return {"audits": [audit.to_dict() for audit in audits]}


@router.post("/", status_code=status.HTTP_201_CREATED, dependencies=[Depends(rate_limit)])
async def create_audit(
    payload: AuditCreate,
    user: User = Depends(get_current_user),
    workspace: Workspace = Depends(get_current_workspace),
    db: Session = Depends(get_db),
):
    """
    Run an on-page and PageSpeed audit of a URL, subject to the weekly plan limit
    """
    project = get_workspace_project(db, workspace, payload.project_id)

    limits = get_limits_for_plan(get_workspace_plan(db, workspace.id))
    raise_if_over_limit(check_limit(
        count_recent_audits(db, workspace.id),
        limits.max_audits_per_week,
        "audits per week",
    ))

    try:
        audit = await run_site_audit(db, project, payload.url, limits.openai_model)
    except SEOAnalyzerError as e:
        logger.error(f"Audit failed for {payload.url}: {e}")
        telemetry.log_error(db, workspace.id, user.id, e, context=str(project.id))
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))

    telemetry.log_audit_run(db, workspace.id, user.id, project.id, payload.url)
    return {"audit": audit.to_dict()}


@router.get("/{audit_id}")
async def get_audit(
    audit_id: UUID,
    workspace: Workspace = Depends(get_current_workspace),
    db: Session = Depends(get_db),
):
    audit = db.query(SeoAudit).join(Project).filter(
        SeoAudit.id == audit_id,
        Project.workspace_id == workspace.id,
    ).first()
    if not audit:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Audit not found")
    return {"audit": audit.to_dict()}
