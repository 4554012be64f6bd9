"""
Platform administration endpoints

Routes under /admin authenticate a service account through the
x-service-api-key header. Routes under /admin/dash need a super admin
session coming from an allowed dashboard origin.
"""

from fastapi import APIRouter, HTTPException, Depends, Query, status
from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload
from datetime import date, datetime, timezone
from typing import Optional
from uuid import UUID
import logging

from seo_platform.api.deps import require_service_account, require_super_admin
from seo_platform.core.config import settings
from seo_platform.core.database import get_db
from seo_platform.core.database_utils import DatabaseHealthCheck
from seo_platform.models.admin_log import AdminLogLevel
from seo_platform.models.client import Client
from seo_platform.models.content_brief import ContentBrief
from seo_platform.models.document import Document
from seo_platform.models.integration import IntegrationConfig
from seo_platform.models.keyword import Keyword
from seo_platform.models.project import Project
from seo_platform.models.seo_audit import SeoAudit
from seo_platform.models.subscription import Subscription
from seo_platform.models.telemetry import DailyUsageSnapshot, TelemetryEvent
from seo_platform.models.user import User
from seo_platform.models.workspace import Workspace, WorkspaceRole, WorkspaceUser
from seo_platform.services.admin_logger import get_admin_logs, log_admin_action
from seo_platform.services.usage_aggregation import COUNTED_EVENTS

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(require_service_account)])
dash_router = APIRouter()

_started_at = datetime.now(timezone.utc)


def _count_by_workspace(db: Session, model, workspace_ids):
    rows = db.query(model.workspace_id, func.count(model.id)).filter(
        model.workspace_id.in_(workspace_ids)
    ).group_by(model.workspace_id).all()
    return dict(rows)


def _workspace_summary(workspace: Workspace) -> dict:
    return {"id": str(workspace.id), "name": workspace.name, "slug": workspace.slug}


@router.get("/workspaces")
async def list_workspaces(
    limit: int = Query(100, ge=1),
    include_stats: bool = Query(False, alias="includeStats"),
    db: Session = Depends(get_db),
):
    """
    Workspaces with owner, subscription and resource counts
    """
    workspaces = db.query(Workspace).options(
        selectinload(Workspace.owner),
        selectinload(Workspace.subscription),
    ).order_by(Workspace.created_at.desc()).limit(min(limit, 1000)).all()

    ids = [w.id for w in workspaces]
    counts = {
        "users": _count_by_workspace(db, WorkspaceUser, ids),
        "projects": _count_by_workspace(db, Project, ids),
        "clients": _count_by_workspace(db, Client, ids),
        "documents": _count_by_workspace(db, Document, ids),
        "integrations": _count_by_workspace(db, IntegrationConfig, ids),
    }

    result = []
    for workspace in workspaces:
        data = workspace.to_dict()
        data["owner"] = workspace.owner.to_public_dict() if workspace.owner else None
        subscription = workspace.subscription
        data["subscription"] = {
            "plan": subscription.plan,
            "status": subscription.status,
            "current_period_end": subscription.current_period_end.isoformat() if subscription.current_period_end else None,
        } if subscription else None
        data["_count"] = {name: per_ws.get(workspace.id, 0) for name, per_ws in counts.items()}
        result.append(data)

    stats = None
    if include_stats:
        breakdown = db.query(Subscription.plan, func.count(Subscription.id)).group_by(Subscription.plan).all()
        stats = {
            "total_workspaces": db.query(Workspace).count(),
            "total_users": db.query(User).count(),
            "total_projects": db.query(Project).count(),
            "total_keywords": db.query(Keyword).count(),
            "total_audits": db.query(SeoAudit).count(),
            "total_briefs": db.query(ContentBrief).count(),
            "subscription_breakdown": [{"plan": plan, "count": count} for plan, count in breakdown],
        }

    return {"workspaces": result, "count": len(result), "stats": stats}


@router.get("/telemetry")
async def list_telemetry(
    workspace_id: Optional[UUID] = Query(None, alias="workspaceId"),
    event_type: Optional[str] = Query(None, alias="type"),
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
    limit: int = Query(100, ge=1),
    db: Session = Depends(get_db),
):
    query = db.query(TelemetryEvent).options(selectinload(TelemetryEvent.workspace))
    if workspace_id:
        query = query.filter(TelemetryEvent.workspace_id == workspace_id)
    if event_type:
        query = query.filter(TelemetryEvent.type == event_type)
    if start_date:
        query = query.filter(TelemetryEvent.created_at >= start_date)
    if end_date:
        query = query.filter(TelemetryEvent.created_at <= end_date)

    events = query.order_by(TelemetryEvent.created_at.desc()).limit(min(limit, 1000)).all()

    result = []
    for event in events:
        data = event.to_dict()
        data["workspace"] = _workspace_summary(event.workspace) if event.workspace else None
        result.append(data)

    return {"events": result, "count": len(result)}


@router.get("/usage")
async def list_usage(
    workspace_id: Optional[UUID] = Query(None, alias="workspaceId"),
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    limit: int = Query(30, ge=1),
    db: Session = Depends(get_db),
):
    """
    Daily usage snapshots, newest first, with sums and averages over the
    whole filtered range
    """
    filters = []
    if workspace_id:
        filters.append(DailyUsageSnapshot.workspace_id == workspace_id)
    if start_date:
        filters.append(DailyUsageSnapshot.date >= start_date)
    if end_date:
        filters.append(DailyUsageSnapshot.date <= end_date)

    snapshots = db.query(DailyUsageSnapshot).options(
        selectinload(DailyUsageSnapshot.workspace).selectinload(Workspace.owner)
    ).filter(*filters).order_by(DailyUsageSnapshot.date.desc()).limit(min(limit, 365)).all()

    columns = [getattr(DailyUsageSnapshot, name) for name in COUNTED_EVENTS]
    row = db.query(
        *[func.sum(column) for column in columns],
        *[func.avg(column) for column in columns],
    ).filter(*filters).one()

    names = list(COUNTED_EVENTS)
    aggregates = {
        "sum": {name: int(row[i] or 0) for i, name in enumerate(names)},
        "avg": {name: float(row[len(names) + i]) if row[len(names) + i] is not None else None
                for i, name in enumerate(names)},
    }

    result = []
    for snapshot in snapshots:
        data = snapshot.to_dict()
        workspace = snapshot.workspace
        data["workspace"] = {
            **_workspace_summary(workspace),
            "owner": workspace.owner.to_public_dict() if workspace.owner else None,
        } if workspace else None
        result.append(data)

    return {"snapshots": result, "count": len(result), "aggregates": aggregates}


@router.get("/health")
async def admin_health(db: Session = Depends(get_db)):
    db_status = DatabaseHealthCheck.check_connection(db)
    body = {
        "database": db_status["status"],
        "details": db_status["details"],
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "uptime": (datetime.now(timezone.utc) - _started_at).total_seconds(),
        "env": {
            "environment": settings.ENVIRONMENT,
            "has_openai": bool(settings.OPENAI_API_KEY),
            "has_serp_api": bool(settings.SERP_API_KEY),
            "has_stripe": bool(settings.STRIPE_SECRET_KEY),
        },
    }
    if db_status["status"] != "healthy":
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=body)
    return body


@router.get("/logs")
async def list_admin_logs(
    level: Optional[AdminLogLevel] = None,
    user_id: Optional[UUID] = Query(None, alias="userId"),
    workspace_id: Optional[UUID] = Query(None, alias="workspaceId"),
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
):
    logs, total = get_admin_logs(
        db,
        limit=limit,
        offset=offset,
        level=level,
        user_id=user_id,
        workspace_id=workspace_id,
        start_date=start_date,
        end_date=end_date,
    )
    return {"logs": [log.to_dict() for log in logs], "total": total, "limit": limit, "offset": offset}


@dash_router.get("/users")
async def dash_list_users(
    email: Optional[str] = None,
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    admin: User = Depends(require_super_admin),
    db: Session = Depends(get_db),
):
    query = db.query(User)
    if email:
        query = query.filter(User.email.ilike(f"%{email}%"))

    total = query.count()
    users = query.options(
        selectinload(User.memberships).selectinload(WorkspaceUser.workspace)
    ).order_by(User.created_at.desc()).offset(offset).limit(limit).all()

    result = []
    for user in users:
        data = user.to_public_dict()
        data["platform_role"] = user.platform_role
        data["has_completed_onboarding"] = user.has_completed_onboarding
        data["workspaces"] = [
            {"role": m.role, "workspace": {"id": str(m.workspace.id), "name": m.workspace.name}}
            for m in user.memberships
        ]
        result.append(data)

    log_admin_action(db, AdminLogLevel.INFO, "USERS_LIST_ACCESSED", user_id=admin.id,
                     metadata={"filters": {"email": email}})

    return {"users": result, "total": total, "limit": limit, "offset": offset}


@dash_router.get("/workspaces")
async def dash_list_workspaces(
    name: Optional[str] = None,
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    admin: User = Depends(require_super_admin),
    db: Session = Depends(get_db),
):
    query = db.query(Workspace)
    if name:
        query = query.filter(Workspace.name.ilike(f"%{name}%"))

    total = query.count()
    workspaces = query.options(
        selectinload(Workspace.members).selectinload(WorkspaceUser.user)
    ).order_by(Workspace.created_at.desc()).offset(offset).limit(limit).all()

    ids = [w.id for w in workspaces]
    counts = {
        "users": _count_by_workspace(db, WorkspaceUser, ids),
        "projects": _count_by_workspace(db, Project, ids),
        "clients": _count_by_workspace(db, Client, ids),
    }

    result = []
    for workspace in workspaces:
        data = workspace.to_dict()
        data["owners"] = [
            m.user.to_public_dict() for m in workspace.members
            if m.role == WorkspaceRole.OWNER.value and m.user
        ]
        data["_count"] = {key: per_ws.get(workspace.id, 0) for key, per_ws in counts.items()}
        result.append(data)

    log_admin_action(db, AdminLogLevel.INFO, "WORKSPACES_LIST_ACCESSED", user_id=admin.id,
                     metadata={"filters": {"name": name}})

    return {"workspaces": result, "total": total, "limit": limit, "offset": offset}


@dash_router.get("/integrations")
async def dash_list_integrations(
    workspace_id: Optional[UUID] = Query(None, alias="workspaceId"),
    integration_type: Optional[str] = Query(None, alias="type"),
    admin: User = Depends(require_super_admin),
    db: Session = Depends(get_db),
):
    """Integration configs across all workspaces; credentials are never returned"""
    query = db.query(IntegrationConfig).options(selectinload(IntegrationConfig.workspace))
    if workspace_id:
        query = query.filter(IntegrationConfig.workspace_id == workspace_id)
    if integration_type:
        query = query.filter(IntegrationConfig.type == integration_type)

    integrations = query.order_by(IntegrationConfig.created_at.desc()).all()

    result = []
    for config in integrations:
        data = config.to_dict()
        data["workspace"] = {"id": str(config.workspace.id), "name": config.workspace.name}
        result.append(data)

    log_admin_action(
        db, AdminLogLevel.INFO, "INTEGRATIONS_LIST_ACCESSED", user_id=admin.id,
        metadata={"filters": {"workspaceId": str(workspace_id) if workspace_id else None, "type": integration_type}},
    )

    return {"integrations": result}
