"""
Workspace membership endpoints
"""

from fastapi import APIRouter, HTTPException, Depends, Request, status
from sqlalchemy.orm import Session
from uuid import UUID
import logging

from seo_platform.api.deps import get_current_workspace, require_workspace_admin, require_workspace_owner
from seo_platform.core.database import get_db
from seo_platform.models.admin_log import AdminLogLevel
from seo_platform.models.user import User
from seo_platform.models.workspace import Workspace, WorkspaceRole, WorkspaceUser
from seo_platform.schemas.workspace import MemberInvite
from seo_platform.services import rbac
from seo_platform.services.admin_logger import log_admin_action

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/members")
async def list_members(
    workspace: Workspace = Depends(get_current_workspace),
    db: Session = Depends(get_db),
):
    members = db.query(WorkspaceUser).filter(
        WorkspaceUser.workspace_id == workspace.id
    ).order_by(WorkspaceUser.created_at.asc()).all()

    return {
        "members": [member.to_dict() for member in members],
        "owner": workspace.owner.to_public_dict() if workspace.owner else None,
        "workspace": {"id": str(workspace.id), "name": workspace.name, "slug": workspace.slug},
    }


@router.post("/members", status_code=status.HTTP_201_CREATED)
async def invite_member(
    payload: MemberInvite,
    request: Request,
    context: rbac.PermissionContext = Depends(require_workspace_admin),
    db: Session = Depends(get_db),
):
    """
    Add an existing user to the workspace (owner or admin)
    """
    invited = db.query(User).filter(User.email == payload.email.lower()).first()
    if not invited:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found. They must create an account first.",
        )

    existing = db.query(WorkspaceUser).filter(
        WorkspaceUser.workspace_id == context.workspace_id,
        WorkspaceUser.user_id == invited.id,
    ).first()
    if existing:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="User is already a member of this workspace")

    member = WorkspaceUser(workspace_id=context.workspace_id, user_id=invited.id, role=payload.role.value)
    db.add(member)
    db.commit()
    db.refresh(member)

    log_admin_action(
        db,
        AdminLogLevel.INFO,
        "WORKSPACE_MEMBER_ADDED",
        user_id=context.user_id,
        workspace_id=context.workspace_id,
        metadata={"memberUserId": str(invited.id), "role": member.role},
        ip_address=request.client.host if request.client else None,
    )
    return {"member": member.to_dict()}


@router.delete("/members/{member_id}")
async def remove_member(
    member_id: UUID,
    context: rbac.PermissionContext = Depends(require_workspace_owner),
    db: Session = Depends(get_db),
):
    """Remove a member (owner only); the owner's own membership cannot be removed"""
    member = db.query(WorkspaceUser).filter(
        WorkspaceUser.id == member_id,
        WorkspaceUser.workspace_id == context.workspace_id,
    ).first()
    if not member:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Member not found")
    if member.role == WorkspaceRole.OWNER.value or member.user_id == context.user_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Cannot remove the workspace owner")

    removed_user_id = member.user_id
    db.delete(member)
    db.commit()

    log_admin_action(
        db,
        AdminLogLevel.INFO,
        "WORKSPACE_MEMBER_REMOVED",
        user_id=context.user_id,
        workspace_id=context.workspace_id,
        metadata={"memberUserId": str(removed_user_id)},
    )
    return {"success": True}
