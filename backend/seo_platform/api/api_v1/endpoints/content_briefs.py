"""
Content brief endpoints
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
from seo_platform.models.content_brief import ContentBrief
from seo_platform.models.project import Project
from seo_platform.models.user import User
from seo_platform.models.workspace import Workspace
from seo_platform.schemas.content_brief import ContentBriefCreate
from seo_platform.services import telemetry
from seo_platform.services.content_ai import generate_content_brief
from seo_platform.services.integration_credentials import get_or_fallback_openai_key
from seo_platform.services.llm import LLMConfigurationError, LLMError
from seo_platform.services.plan_limits import check_limit, get_limits_for_plan, get_workspace_plan

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_brief(db: Session, workspace: Workspace, brief_id: UUID) -> ContentBrief:
    brief = db.query(ContentBrief).join(Project).filter(
        ContentBrief.id == brief_id,
        Project.workspace_id == workspace.id,
    ).first()
    if not brief:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Content brief not found")
    return brief


@router.get("/")
async def list_content_briefs(
    project_id: Optional[UUID] = Query(None),
    workspace: Workspace = Depends(get_current_workspace),
    db: Session = Depends(get_db),
):
    query = db.query(ContentBrief).join(Project).filter(Project.workspace_id == workspace.id)
    if project_id:
        query = query.filter(ContentBrief.project_id == project_id)

    briefs = query.order_by(ContentBrief.created_at.desc()).all()
    return {"briefs": [brief.to_dict() for brief in briefs]}


@router.post("/", status_code=status.HTTP_201_CREATED, dependencies=[Depends(rate_limit)])
async def create_content_brief(
    payload: ContentBriefCreate,
    user: User = Depends(get_current_user),
    workspace: Workspace = Depends(get_current_workspace),
    db: Session = Depends(get_db),
):
    """
    Generate a brief for a target keyword with the workspace's OpenAI key
    """
    project = get_workspace_project(db, workspace, payload.project_id)

    limits = get_limits_for_plan(get_workspace_plan(db, workspace.id))
    existing = db.query(ContentBrief).filter(ContentBrief.project_id == project.id).count()
    raise_if_over_limit(check_limit(existing, limits.max_briefs_per_project, "content briefs per project"))

    try:
        brief_data = await generate_content_brief(
            target_keyword=payload.target_keyword,
            target_url=payload.target_url,
            notes=payload.notes,
            model=limits.openai_model,
            api_key=get_or_fallback_openai_key(db, workspace.id),
        )
    except LLMConfigurationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except LLMError as e:
        logger.error(f"Content brief generation failed for '{payload.target_keyword}': {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))

    brief = ContentBrief(
        project_id=project.id,
        target_keyword=payload.target_keyword,
        target_url=payload.target_url,
        search_intent="informational",
        title=brief_data.title or None,
        meta_description=brief_data.metaDescription or None,
        h1=brief_data.h1 or None,
        outline=[section.model_dump() for section in brief_data.outline],
        questions=brief_data.talkingPoints,
        keywords=brief_data.keywords,
        word_count_target=brief_data.targetWordCount,
        notes=payload.notes,
    )
    db.add(brief)
    db.commit()
    db.refresh(brief)

    telemetry.log_content_brief_generated(db, workspace.id, user.id, project.id, payload.target_keyword)
    return {"brief": brief.to_dict()}


@router.get("/{brief_id}")
async def get_content_brief(
    brief_id: UUID,
    workspace: Workspace = Depends(get_current_workspace),
    db: Session = Depends(get_db),
):
    return {"brief": _get_brief(db, workspace, brief_id).to_dict()}


@router.delete("/{brief_id}")
async def delete_content_brief(
    brief_id: UUID,
    workspace: Workspace = Depends(get_current_workspace),
    db: Session = Depends(get_db),
):
    brief = _get_brief(db, workspace, brief_id)
    db.delete(brief)
    db.commit()
    return {"success": True}
