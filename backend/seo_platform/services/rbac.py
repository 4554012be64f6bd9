"""
Workspace permission context and role checks
"""

from uuid import UUID

from pydantic import BaseModel
from sqlalchemy.orm import Session

from seo_platform.models.user import PlatformRole, User, UserRole
from seo_platform.models.workspace import Workspace, WorkspaceRole
from seo_platform.services.workspace_service import get_user_workspace_role


class PermissionContext(BaseModel):
    user_id: UUID
    user_role: str
    platform_role: str
    workspace_id: UUID
    workspace_role: WorkspaceRole
    is_owner: bool
    is_super_admin: bool


class PermissionDenied(Exception):
    """User lacks the role an operation needs"""
    pass


def build_permission_context(db: Session, user: User, workspace: Workspace) -> PermissionContext:
    is_owner = workspace.owner_id == user.id
    # Access was already checked; a user with no membership row reads as MEMBER
    role = get_user_workspace_role(db, workspace, user.id) or WorkspaceRole.MEMBER

    return PermissionContext(
        user_id=user.id,
        user_role=user.role or UserRole.USER.value,
        platform_role=user.platform_role or PlatformRole.USER.value,
        workspace_id=workspace.id,
        workspace_role=WorkspaceRole.OWNER if is_owner else role,
        is_owner=is_owner,
        is_super_admin=user.platform_role == PlatformRole.SUPERADMIN.value,
    )


def _is_owner_or_admin(context: PermissionContext) -> bool:
    return context.is_owner or context.workspace_role == WorkspaceRole.ADMIN


def can_delete_projects(context: PermissionContext) -> bool:
    return _is_owner_or_admin(context)


def require_workspace_owner(context: PermissionContext) -> PermissionContext:
    if not context.is_owner:
        raise PermissionDenied("Forbidden - Workspace owner access required")
    return context


def require_workspace_admin(context: PermissionContext) -> PermissionContext:
    if not _is_owner_or_admin(context):
        raise PermissionDenied("Forbidden - Workspace admin access required")
    return context
