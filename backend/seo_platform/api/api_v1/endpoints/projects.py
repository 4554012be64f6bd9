"""
Project management endpoints
"""

from fastapi import APIRouter, HTTPException, Depends, status
from sqlalchemy.orm import Session
from typing import Any, Dict
from uuid import UUID
import logging

from seo_platform.api.deps import (
    get_current_user,
    get_current_workspace,
    get_permission_context,
    get_workspace_project,
    raise_if_over_limit,
)
from seo_platform.core.database import get_db
from seo_platform.models.client import Client
from seo_platform.models.keyword import Keyword
from seo_platform.models.project import Project
from seo_platform.models.seo_audit import SeoAudit
from seo_platform.models.user import User
from seo_platform.models.workspace import Workspace
from seo_platform.schemas.project import ProjectCreate, ProjectUpdate
from seo_platform.services import rbac, telemetry
from seo_platform.services.plan_limits import check_limit, get_limits_for_plan, get_workspace_plan

logger = logging.getLogger(__name__)

router = APIRouter()


def _with_counts(project: Project) -> Dict[str, Any]:
    data = project.to_dict()
    data["_count"] = {
        "keywords": len(project.keywords),
        "audits": len(project.audits),
        "content_briefs": len(project.content_briefs),
    }
    return data


def _check_client(db: Session, workspace: Workspace, client_id: UUID) -> None:
    exists = db.query(Client.id).filter(Client.id == client_id, Client.workspace_id == workspace.id).first()
    if not exists:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Client not found")


@router.get("/")
async def list_projects(
    workspace: Workspace = Depends(get_current_workspace),
    db: Session = Depends(get_db),
):
    projects = db.query(Project).filter(
        Project.workspace_id == workspace.id
    ).order_by(Project.created_at.desc()).all()

    return {"projects": [_with_counts(project) for project in projects]}


@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_project(
    payload: ProjectCreate,
    user: User = Depends(get_current_user),
    workspace: Workspace = Depends(get_current_workspace),
    db: Session = Depends(get_db),
):
    """
    Create a project, subject to the plan's project limit
    """
    limits = get_limits_for_plan(get_workspace_plan(db, workspace.id))
    current = db.query(Project).filter(Project.workspace_id == workspace.id).count()
    raise_if_over_limit(check_limit(current, limits.max_projects, "projects"))

    if payload.client_id:
        _check_client(db, workspace, payload.client_id)

    project = Project(
        workspace_id=workspace.id,
        client_id=payload.client_id,
        name=payload.name,
        domain=payload.domain,
    )
    db.add(project)
    db.commit()
    db.refresh(project)

    telemetry.log_project_created(db, workspace.id, user.id, project.id, project.name)
    return {"project": project.to_dict()}


@router.get("/{project_id}")
async def get_project(
    project_id: UUID,
    workspace: Workspace = Depends(get_current_workspace),
    db: Session = Depends(get_db),
):
    """Project with counts, its 10 newest keywords and 5 newest audits"""
    project = get_workspace_project(db, workspace, project_id)

    data = _with_counts(project)
    data["keywords"] = [
        keyword.to_dict() for keyword in db.query(Keyword).filter(
            Keyword.project_id == project.id
        ).order_by(Keyword.created_at.desc()).limit(10)
    ]
    data["audits"] = [
        audit.to_dict() for audit in db.query(SeoAudit).filter(
            SeoAudit.project_id == project.id
        ).order_by(SeoAudit.created_at.desc()).limit(5)
    ]
    return {"project": data}


@router.patch("/{project_id}")
async def update_project(
    project_id: UUID,
    payload: ProjectUpdate,
    user: User = Depends(get_current_user),
    workspace: Workspace = Depends(get_current_workspace),
    db: Session = Depends(get_db),
):
    project = get_workspace_project(db, workspace, project_id)

    changes = payload.model_dump(exclude_unset=True)
    if changes.get("client_id"):
        _check_client(db, workspace, changes["client_id"])
    if "name" in changes and changes["name"] is None:
        del changes["name"]

    project.update_from_dict(changes)
    db.commit()
    db.refresh(project)

    telemetry.log_project_updated(db, workspace.id, user.id, project.id)
    return {"project": project.to_dict()}


@router.delete("/{project_id}")
async def delete_project(
    project_id: UUID,
    context: rbac.PermissionContext = Depends(get_permission_context),
    workspace: Workspace = Depends(get_current_workspace),
    db: Session = Depends(get_db),
):
    """Delete a project and its keywords, audits and briefs (owner or admin)"""
    if not rbac.can_delete_projects(context):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden - Workspace admin access required")

    project = get_workspace_project(db, workspace, project_id)
    db.delete(project)
    db.commit()

    telemetry.log_project_deleted(db, workspace.id, context.user_id, project_id)
    return {"success": True}
