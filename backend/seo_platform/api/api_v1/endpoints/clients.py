"""
Agency client endpoints
"""

from fastapi import APIRouter, HTTPException, Depends, status
from sqlalchemy.orm import Session
from uuid import UUID
import logging

from seo_platform.api.deps import get_current_workspace
from seo_platform.core.database import get_db
from seo_platform.models.client import Client
from seo_platform.models.workspace import Workspace
from seo_platform.schemas.client import ClientCreate, ClientUpdate

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_client(db: Session, workspace: Workspace, client_id: UUID) -> Client:
    client = db.query(Client).filter(
        Client.id == client_id,
        Client.workspace_id == workspace.id,
    ).first()
    if not client:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Client not found")
    return client


@router.get("/")
async def list_clients(
    workspace: Workspace = Depends(get_current_workspace),
    db: Session = Depends(get_db),
):
    clients = db.query(Client).filter(
        Client.workspace_id == workspace.id
    ).order_by(Client.created_at.desc()).all()

    results = []
    for client in clients:
        data = client.to_dict()
        data["_count"] = {"projects": len(client.projects), "documents": len(client.documents)}
        results.append(data)
    return {"clients": results}


@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_client(
    payload: ClientCreate,
    workspace: Workspace = Depends(get_current_workspace),
    db: Session = Depends(get_db),
):
    client = Client(workspace_id=workspace.id, **payload.model_dump())
    db.add(client)
    db.commit()
    db.refresh(client)
    return {"client": client.to_dict()}


@router.get("/{client_id}")
async def get_client(
    client_id: UUID,
    workspace: Workspace = Depends(get_current_workspace),
    db: Session = Depends(get_db),
):
    """
    Client with its projects and totals across those projects
    """
    client = _get_client(db, workspace, client_id)

    projects = []
    stats = {"total_keywords": 0, "total_audits": 0, "total_content_briefs": 0}
    for project in client.projects:
        counts = {
            "keywords": len(project.keywords),
            "audits": len(project.audits),
            "content_briefs": len(project.content_briefs),
        }
        stats["total_keywords"] += counts["keywords"]
        stats["total_audits"] += counts["audits"]
        stats["total_content_briefs"] += counts["content_briefs"]
        projects.append({**project.to_dict(), "_count": counts})

    data = client.to_dict()
    data["projects"] = projects
    data["_count"] = {"projects": len(client.projects), "documents": len(client.documents)}
    return {"client": data, "stats": stats}


@router.patch("/{client_id}")
async def update_client(
    client_id: UUID,
    payload: ClientUpdate,
    workspace: Workspace = Depends(get_current_workspace),
    db: Session = Depends(get_db),
):
    client = _get_client(db, workspace, client_id)

    changes = payload.model_dump(exclude_unset=True)
    if "name" in changes and changes["name"] is None:
        del changes["name"]

    client.update_from_dict(changes)
    db.commit()
    db.refresh(client)
    return {"client": client.to_dict()}


@router.delete("/{client_id}")
async def delete_client(
    client_id: UUID,
    workspace: Workspace = Depends(get_current_workspace),
    db: Session = Depends(get_db),
):
    """Delete a client; its projects and documents are kept and unlinked"""
    client = _get_client(db, workspace, client_id)
    db.delete(client)
    db.commit()
    return {"success": True}
