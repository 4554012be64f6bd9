"""
Authentication endpoints: registration, password login and session tokens
"""

from fastapi import APIRouter, HTTPException, Depends, Request, Response, status
from sqlalchemy.orm import Session
import logging

from seo_platform.api.deps import get_current_user, get_current_workspace, rate_limit_by_ip
from seo_platform.core.config import settings
from seo_platform.core.database import get_db
from seo_platform.core.security import create_access_token, hash_password, verify_password
from seo_platform.models.user import User
from seo_platform.models.workspace import Workspace
from seo_platform.schemas.auth import LoginRequest, RegisterRequest, SessionResponse
from seo_platform.services import telemetry
from seo_platform.services.admin_logger import log_security_event
from seo_platform.services.plan_limits import get_workspace_plan
from seo_platform.services.workspace_service import (
    create_workspace_for_user,
    get_all_user_workspaces,
    get_user_workspace,
    get_user_workspace_role,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _start_session(response: Response, user: User) -> dict:
    token = create_access_token(str(user.id), user.email)
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        max_age=settings.JWT_EXPIRE_MINUTES * 60,
        httponly=True,
        secure=settings.ENVIRONMENT == "production",
        samesite="lax",
    )
    return {"access_token": token, "token_type": "bearer", "user": user.to_dict()}


@router.post("/register", response_model=SessionResponse, status_code=status.HTTP_201_CREATED,
             dependencies=[Depends(rate_limit_by_ip)])
async def register(payload: RegisterRequest, response: Response, db: Session = Depends(get_db)):
    """
    Create an account with its own workspace and sign it in
    """
    if db.query(User).filter(User.email == payload.email.lower()).first():
        raise HTTPException(status_code=400, detail="User already exists")

    user = User(
        name=payload.name,
        email=payload.email,
        password_hash=hash_password(payload.password),
    )
    db.add(user)
    db.commit()
    db.refresh(user)

    workspace = create_workspace_for_user(db, user)
    logger.info(f"Registered user {user.id} with workspace {workspace.slug}")

    return _start_session(response, user)


@router.post("/login", response_model=SessionResponse, dependencies=[Depends(rate_limit_by_ip)])
async def login(
    payload: LoginRequest,
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
):
    user = db.query(User).filter(User.email == payload.email.lower()).first()

    if not user or not verify_password(payload.password, user.password_hash):
        log_security_event(
            db,
            "LOGIN_FAILED",
            user.id if user else None,
            {"email": payload.email},
            request,
        )
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid email or password")

    workspace = get_user_workspace(db, user)
    telemetry.log_user_login(db, workspace.id, user.id)

    return _start_session(response, user)


@router.post("/logout")
async def logout(
    response: Response,
    user: User = Depends(get_current_user),
    workspace: Workspace = Depends(get_current_workspace),
    db: Session = Depends(get_db),
):
    telemetry.log_user_logout(db, workspace.id, user.id)
    response.delete_cookie(settings.SESSION_COOKIE_NAME)
    return {"success": True}


@router.get("/me")
async def me(
    user: User = Depends(get_current_user),
    workspace: Workspace = Depends(get_current_workspace),
    db: Session = Depends(get_db),
):
    """Current user with the active workspace, role and plan, plus every workspace they can switch to"""
    role = get_user_workspace_role(db, workspace, user.id)
    return {
        "user": user.to_dict(),
        "workspace": workspace.to_dict(),
        "workspaces": [
            {"id": str(w.id), "name": w.name, "slug": w.slug} for w in get_all_user_workspaces(db, user.id)
        ],
        "role": role.value if role else None,
        "plan": get_workspace_plan(db, workspace.id).value,
    }
