"""
Workspace lookup and creation for users
"""

import logging
import re
from typing import List, Optional
from uuid import UUID

from sqlalchemy import or_
from sqlalchemy.orm import Session

from seo_platform.models.subscription import Plan, Subscription
from seo_platform.models.user import User
from seo_platform.models.workspace import Workspace, WorkspaceRole, WorkspaceUser

logger = logging.getLogger(__name__)


def build_workspace_slug(user: User) -> str:
    base = re.sub(r"\s+", "-", user.name.strip().lower()) if user.name and user.name.strip() else "user"
    return f"{base}-{str(user.id)[:8]}"


def create_workspace_for_user(db: Session, user: User, name: Optional[str] = None,
                              website: Optional[str] = None) -> Workspace:
    """
    Create a workspace owned by the user, with an OWNER membership and a FREE subscription
    """
    workspace = Workspace(
        name=name or f"{user.name or 'My'} Workspace",
        slug=build_workspace_slug(user),
        website=website,
        owner_id=user.id,
    )
    db.add(workspace)
    db.flush()

    db.add(WorkspaceUser(workspace_id=workspace.id, user_id=user.id, role=WorkspaceRole.OWNER.value))
    db.add(Subscription(workspace_id=workspace.id, user_id=user.id, plan=Plan.FREE.value, status="active"))
    db.commit()
    db.refresh(workspace)

    logger.info(f"Created workspace {workspace.slug} for user {user.id}")
    return workspace


def get_or_create_user_workspace(db: Session, user: User) -> Workspace:
    """The workspace the user owns, created on first use"""
    workspace = db.query(Workspace).filter(Workspace.owner_id == user.id).order_by(Workspace.created_at).first()
    if workspace:
        return workspace
    return create_workspace_for_user(db, user)


def _member_filter(user_id: UUID):
    return or_(
        Workspace.owner_id == user_id,
        Workspace.members.any(WorkspaceUser.user_id == user_id),
    )


def get_user_workspace(db: Session, user: User) -> Workspace:
    """
    Default workspace for a user: one they own, else one they belong to,
    else a newly created one
    """
    owned = db.query(Workspace).filter(Workspace.owner_id == user.id).order_by(Workspace.created_at).first()
    if owned:
        return owned

    member_of = db.query(Workspace).filter(_member_filter(user.id)).order_by(Workspace.created_at).first()
    if member_of:
        return member_of

    return create_workspace_for_user(db, user)


def check_workspace_access(db: Session, workspace_id: UUID, user_id: UUID) -> bool:
    return db.query(Workspace.id).filter(
        Workspace.id == workspace_id,
        _member_filter(user_id),
    ).first() is not None


def get_user_workspace_role(db: Session, workspace: Workspace, user_id: UUID) -> Optional[WorkspaceRole]:
    if workspace.owner_id == user_id:
        return WorkspaceRole.OWNER

    membership = db.query(WorkspaceUser).filter(
        WorkspaceUser.workspace_id == workspace.id,
        WorkspaceUser.user_id == user_id,
    ).first()
    return WorkspaceRole(membership.role) if membership else None


def get_all_user_workspaces(db: Session, user_id: UUID) -> List[Workspace]:
    return db.query(Workspace).filter(_member_filter(user_id)).order_by(Workspace.created_at).all()
