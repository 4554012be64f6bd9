"""
Workspace document endpoints, including AI-generated templates
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
    rate_limit,
)
from seo_platform.core.database import get_db
from seo_platform.models.client import Client
from seo_platform.models.document import Document
from seo_platform.models.user import User
from seo_platform.models.workspace import Workspace
from seo_platform.schemas.document import DocumentCreate, DocumentGenerate, DocumentUpdate
from seo_platform.services import telemetry
from seo_platform.services.document_templates import get_template, render_prompt
from seo_platform.services.llm import LLMConfigurationError, LLMError, LLMGenerateOptions, generate_text

logger = logging.getLogger(__name__)

router = APIRouter()

GENERATION_SYSTEM_PROMPT = (
    "You are a helpful assistant that generates professional, clear, and comprehensive text content."
)


def _get_document(db: Session, workspace: Workspace, document_id: UUID) -> Document:
    document = db.query(Document).filter(
        Document.id == document_id,
        Document.workspace_id == workspace.id,
    ).first()
    if not document:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Document not found")
    return document


def _check_links(db: Session, workspace: Workspace, client_id: Optional[UUID], project_id: Optional[UUID]) -> None:
    if client_id:
        client = db.query(Client.id).filter(Client.id == client_id, Client.workspace_id == workspace.id).first()
        if not client:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Client not found")
    if project_id:
        get_workspace_project(db, workspace, project_id)


@router.get("/")
async def list_documents(
    client_id: Optional[UUID] = Query(None),
    project_id: Optional[UUID] = Query(None),
    workspace: Workspace = Depends(get_current_workspace),
    db: Session = Depends(get_db),
):
    query = db.query(Document).filter(Document.workspace_id == workspace.id)
    if client_id:
        query = query.filter(Document.client_id == client_id)
    if project_id:
        query = query.filter(Document.project_id == project_id)

    documents = query.order_by(Document.created_at.desc()).all()
    return {"documents": [document.to_dict() for document in documents]}


@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_document(
    payload: DocumentCreate,
    user: User = Depends(get_current_user),
    workspace: Workspace = Depends(get_current_workspace),
    db: Session = Depends(get_db),
):
    _check_links(db, workspace, payload.client_id, payload.project_id)

    document = Document(workspace_id=workspace.id, **payload.model_dump())
    db.add(document)
    db.commit()
    db.refresh(document)

    telemetry.log_document_created(db, workspace.id, user.id, document.id, document.type)
    return {"document": document.to_dict()}


@router.post("/generate", dependencies=[Depends(rate_limit)])
async def generate_document(
    payload: DocumentGenerate,
    workspace: Workspace = Depends(get_current_workspace),
    db: Session = Depends(get_db),
):
    """
    Draft a document from a named template with the workspace's LLM provider

    The draft is returned, not stored.
    """
    template = get_template(payload.template)
    if not template:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid template type")

    options = LLMGenerateOptions(
        prompt=render_prompt(template, payload.workspace_name, payload.domain),
        system=GENERATION_SYSTEM_PROMPT,
        max_tokens=3000,
    )

    try:
        result = await generate_text(db, workspace.id, options, payload.profile, payload.provider)
    except LLMConfigurationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except LLMError as e:
        logger.error(f"Document generation failed for template {payload.template}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to generate document template",
        )

    return {
        "title": template.title,
        "content": result.content,
        "provider": result.provider,
        "model": result.model,
    }


@router.get("/{document_id}")
async def get_document(
    document_id: UUID,
    workspace: Workspace = Depends(get_current_workspace),
    db: Session = Depends(get_db),
):
    return {"document": _get_document(db, workspace, document_id).to_dict()}


@router.patch("/{document_id}")
async def update_document(
    document_id: UUID,
    payload: DocumentUpdate,
    workspace: Workspace = Depends(get_current_workspace),
    db: Session = Depends(get_db),
):
    document = _get_document(db, workspace, document_id)

    changes = payload.model_dump(exclude_unset=True)
    for required in ("title", "type"):
        if required in changes and changes[required] is None:
            del changes[required]
    _check_links(db, workspace, changes.get("client_id"), changes.get("project_id"))

    document.update_from_dict(changes)
    db.commit()
    db.refresh(document)
    return {"document": document.to_dict()}


@router.delete("/{document_id}")
async def delete_document(
    document_id: UUID,
    workspace: Workspace = Depends(get_current_workspace),
    db: Session = Depends(get_db),
):
    document = _get_document(db, workspace, document_id)
    db.delete(document)
    db.commit()
    return {"success": True}
