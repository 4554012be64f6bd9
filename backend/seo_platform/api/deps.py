"""
Shared request dependencies: session auth, workspace selection, role checks
and rate limiting
"""

from datetime import datetime, timezone
from typing import Optional
from uuid import UUID
import logging

from fastapi import Depends, Header, HTTPException, Request, status
from sqlalchemy.orm import Session

from seo_platform.core.config import settings
from seo_platform.core.database import get_db
from seo_platform.core.security import TokenError, decode_access_token, hash_api_key
from seo_platform.models.project import Project
from seo_platform.models.service_account import ServiceAccount
from seo_platform.models.user import PlatformRole, User
from seo_platform.models.workspace import Workspace
from seo_platform.services import rbac
from seo_platform.services.plan_limits import LimitCheckResult, PlanLimitExceeded
from seo_platform.services.rate_limiter import (
    RateLimitConfig,
    RateLimitIdentifier,
    REJECTED_STATUS,
    check_rate_limit,
    log_rate_limit_attempt,
)
from seo_platform.services.workspace_service import check_workspace_access, get_user_workspace

logger = logging.getLogger(__name__)

WORKSPACE_HEADER = "X-Workspace-Id"


def get_client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip
    return request.client.host if request.client else "unknown"


def _session_token(request: Request) -> Optional[str]:
    authorization = request.headers.get("authorization")
    if authorization and authorization.lower().startswith("bearer "):
        return authorization[7:].strip()
    return request.cookies.get(settings.SESSION_COOKIE_NAME)


def get_current_user(request: Request, db: Session = Depends(get_db)) -> User:
    """Resolve the signed-in user from a bearer token or the session cookie"""
    token = _session_token(request)
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")

    try:
        payload = decode_access_token(token)
        user_id = UUID(payload["sub"])
    except (TokenError, ValueError):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")

    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    return user


def get_current_workspace(
    request: Request,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> Workspace:
    """
    Workspace named by the X-Workspace-Id header, or the user's default one
    """
    requested = request.headers.get(WORKSPACE_HEADER)
    if not requested:
        return get_user_workspace(db, user)

    try:
        workspace_id = UUID(requested)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Workspace not found")

    workspace = db.query(Workspace).filter(Workspace.id == workspace_id).first()
    if not workspace:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Workspace not found")
    if not check_workspace_access(db, workspace.id, user.id):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
    return workspace


def get_permission_context(
    user: User = Depends(get_current_user),
    workspace: Workspace = Depends(get_current_workspace),
    db: Session = Depends(get_db),
) -> rbac.PermissionContext:
    return rbac.build_permission_context(db, user, workspace)


def require_workspace_admin(
    context: rbac.PermissionContext = Depends(get_permission_context),
) -> rbac.PermissionContext:
    try:
        return rbac.require_workspace_admin(context)
    except rbac.PermissionDenied as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))


def require_workspace_owner(
    context: rbac.PermissionContext = Depends(get_permission_context),
) -> rbac.PermissionContext:
    try:
        return rbac.require_workspace_owner(context)
    except rbac.PermissionDenied as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))


def is_allowed_dash_origin(request: Request) -> bool:
    origin = request.headers.get("origin")
    referer = request.headers.get("referer")
    allowed = settings.DASH_ALLOWED_ORIGINS

    if origin and origin in allowed:
        return True
    if referer and any(referer.startswith(prefix) for prefix in allowed):
        return True
    return False


def require_super_admin(
    request: Request,
    user: User = Depends(get_current_user),
) -> User:
    """
    Platform superadmin session coming from the admin dashboard origin
    """
    if (
        not settings.SUPER_ADMIN_EMAIL
        or user.email != settings.SUPER_ADMIN_EMAIL.lower()
        or user.platform_role != PlatformRole.SUPERADMIN.value
    ):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Forbidden - Super Admin access required",
        )
    if not is_allowed_dash_origin(request):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden - Invalid origin")
    return user


def require_service_account(
    x_service_api_key: Optional[str] = Header(None),
    db: Session = Depends(get_db),
) -> ServiceAccount:
    if not x_service_api_key:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing service API key")

    account = db.query(ServiceAccount).filter(
        ServiceAccount.api_key_hash == hash_api_key(x_service_api_key),
        ServiceAccount.is_active.is_(True),
    ).first()
    if not account:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid service API key")

    account.last_used_at = datetime.now(timezone.utc)
    db.commit()
    return account


def enforce_rate_limit(
    request: Request,
    db: Session,
    workspace_id: Optional[UUID] = None,
    user_id: Optional[UUID] = None,
    config: Optional[RateLimitConfig] = None,
) -> None:
    """Raise 429 when the caller is over the limit for this route"""
    if not settings.RATE_LIMIT_ENABLED:
        return

    identifier = RateLimitIdentifier(
        workspace_id=workspace_id,
        user_id=user_id,
        ip=get_client_ip(request),
        route=request.url.path,
        method=request.method,
    )
    result = check_rate_limit(db, identifier, config)

    if not result.allowed:
        log_rate_limit_attempt(db, identifier, REJECTED_STATUS)
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Rate limit exceeded. Please try again later.",
            headers={
                "Retry-After": str(result.retry_after),
                "X-RateLimit-Remaining": str(result.remaining),
                "X-RateLimit-Reset": result.reset_at.isoformat(),
            },
        )


def rate_limit(
    request: Request,
    user: User = Depends(get_current_user),
    workspace: Workspace = Depends(get_current_workspace),
    db: Session = Depends(get_db),
) -> None:
    enforce_rate_limit(request, db, workspace_id=workspace.id, user_id=user.id)


def rate_limit_by_ip(request: Request, db: Session = Depends(get_db)) -> None:
    enforce_rate_limit(request, db)


def raise_if_over_limit(check: LimitCheckResult) -> None:
    """403 with {error, current, limit}; rendered by the handler in main"""
    if not check.allowed:
        raise PlanLimitExceeded(check)


def get_workspace_project(db: Session, workspace: Workspace, project_id: UUID) -> Project:
    project = db.query(Project).filter(
        Project.id == project_id,
        Project.workspace_id == workspace.id,
    ).first()
    if not project:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")
    return project
