"""
Keyword research endpoints
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
from seo_platform.models.keyword import Keyword
from seo_platform.models.project import Project
from seo_platform.models.user import User
from seo_platform.models.workspace import Workspace
from seo_platform.schemas.keyword import KeywordCreate
from seo_platform.services import telemetry
from seo_platform.services.integration_credentials import get_or_fallback_serp_api_key
from seo_platform.services.plan_limits import check_limit, get_limits_for_plan, get_workspace_plan
from seo_platform.services.serp_api import fetch_keyword_metrics

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/")
async def list_keywords(
    project_id: Optional[UUID] = Query(None, description="Only keywords for this project"),
    limit: int = Query(100, ge=1, le=500, description="Maximum results"),
    workspace: Workspace = Depends(get_current_workspace),
    db: Session = Depends(get_db),
):
    query = db.query(Keyword).join(Project).filter(Project.workspace_id == workspace.id)
    if project_id:
        query = query.filter(Keyword.project_id == project_id)

    keywords = query.order_by(Keyword.created_at.desc()).limit(limit).all()
    return {"keywords": [keyword.to_dict() for keyword in keywords]}


@router.post("/", status_code=status.HTTP_201_CREATED, dependencies=[Depends(rate_limit)])
async def create_keywords(
    payload: KeywordCreate,
    user: User = Depends(get_current_user),
    workspace: Workspace = Depends(get_current_workspace),
    db: Session = Depends(get_db),
):
    """
    Look up SERP metrics for each term and store them as project keywords
    """
    project = get_workspace_project(db, workspace, payload.project_id)

    limits = get_limits_for_plan(get_workspace_plan(db, workspace.id))
    existing = db.query(Keyword).filter(Keyword.project_id == project.id).count()
    check = check_limit(existing + len(payload.terms) - 1, limits.max_keywords_per_project, "keywords per project")
    if not check.allowed:
        check.current = existing
    raise_if_over_limit(check)

    serp_api_key = get_or_fallback_serp_api_key(db, workspace.id)
    if not serp_api_key:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="SERP API not configured. Please add your SERP API key in Integrations.",
        )

    metrics = await fetch_keyword_metrics(payload.terms, serp_api_key)

    keywords = [
        Keyword(
            project_id=project.id,
            term=metric.term,
            volume=metric.search_volume,
            difficulty=metric.difficulty,
            cpc=metric.cpc,
            serp_feature_summary=metric.intent,
        )
        for metric in metrics
    ]
    db.add_all(keywords)
    db.commit()
    for keyword in keywords:
        db.refresh(keyword)

    telemetry.log_keyword_search(db, workspace.id, user.id, project.id, payload.terms)
    return {"keywords": [keyword.to_dict() for keyword in keywords]}


@router.delete("/{keyword_id}")
async def delete_keyword(
    keyword_id: UUID,
    workspace: Workspace = Depends(get_current_workspace),
    db: Session = Depends(get_db),
):
    keyword = db.query(Keyword).join(Project).filter(
        Keyword.id == keyword_id,
        Project.workspace_id == workspace.id,
    ).first()
    if not keyword:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Keyword not found")

    db.delete(keyword)
    db.commit()
    return {"success": True}
