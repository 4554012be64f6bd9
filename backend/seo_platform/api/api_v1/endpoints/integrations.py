"""
Integration status and per-workspace credential management endpoints
"""

from fastapi import APIRouter, HTTPException, Depends, status
from sqlalchemy.orm import Session
from typing import Any, Dict
from uuid import UUID
import logging

from seo_platform.api.deps import get_current_user, get_current_workspace, require_workspace_admin
from seo_platform.core.config import settings
from seo_platform.core.database import get_db
from seo_platform.core.encryption import EncryptionError, decrypt_credentials, encrypt_credentials
from seo_platform.models.admin_log import AdminLogLevel
from seo_platform.models.integration import IntegrationConfig
from seo_platform.models.user import User
from seo_platform.models.workspace import Workspace
from seo_platform.schemas.integration import IntegrationConfigCreate, IntegrationConfigUpdate
from seo_platform.services import rbac, telemetry
from seo_platform.services.admin_logger import log_admin_action
from seo_platform.services.integration_tester import run_integration_test
from seo_platform.services.llm import get_available_providers
from seo_platform.services.plan_limits import get_limits_for_plan, get_workspace_plan

logger = logging.getLogger(__name__)

router = APIRouter()


def _env_status(*values) -> str:
    return "connected" if all(values) else "missing"


def _get_config(db: Session, context: rbac.PermissionContext, config_id: UUID) -> IntegrationConfig:
    config = db.query(IntegrationConfig).filter(IntegrationConfig.id == config_id).first()
    if not config:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Integration config not found")
    if config.workspace_id != context.workspace_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
    return config


@router.get("/")
async def platform_integrations(user: User = Depends(get_current_user)):
    """Which platform-wide provider keys are set in the environment"""
    return {
        "integrations": [
            {
                "id": "stripe",
                "name": "Stripe",
                "description": "Payment processing and subscription management",
                "status": _env_status(settings.STRIPE_SECRET_KEY),
                "config_key": "STRIPE_SECRET_KEY",
            },
            {
                "id": "openai",
                "name": "OpenAI",
                "description": "AI-powered content brief generation",
                "status": _env_status(settings.OPENAI_API_KEY),
                "config_key": "OPENAI_API_KEY",
            },
            {
                "id": "serp_api",
                "name": "SERP API",
                "description": "Keyword research and search volume data",
                "status": _env_status(settings.SERP_API_KEY),
                "config_key": "SERP_API_KEY",
            },
            {
                "id": "pagespeed",
                "name": "PageSpeed Insights",
                "description": "Lighthouse performance audits",
                "status": _env_status(settings.PAGESPEED_API_KEY),
                "config_key": "PAGESPEED_API_KEY",
            },
            {
                "id": "ga4",
                "name": "Google Analytics 4",
                "description": "Website analytics and tracking",
                "status": _env_status(settings.GA4_PROPERTY_ID, settings.GA4_MEASUREMENT_ID, settings.GA4_API_SECRET),
                "config_key": "GA4_PROPERTY_ID, GA4_MEASUREMENT_ID, GA4_API_SECRET",
            },
        ]
    }


@router.get("/llm-providers")
async def llm_providers(
    workspace: Workspace = Depends(get_current_workspace),
    db: Session = Depends(get_db),
):
    return {"providers": get_available_providers(db, workspace.id)}


@router.get("/config")
async def list_integration_configs(
    workspace: Workspace = Depends(get_current_workspace),
    db: Session = Depends(get_db),
):
    """Configs for the workspace, without credentials"""
    configs = db.query(IntegrationConfig).filter(
        IntegrationConfig.workspace_id == workspace.id
    ).order_by(IntegrationConfig.created_at).all()
    return [config.to_dict() for config in configs]


@router.post("/config", status_code=status.HTTP_201_CREATED)
async def create_integration_config(
    payload: IntegrationConfigCreate,
    context: rbac.PermissionContext = Depends(require_workspace_admin),
    db: Session = Depends(get_db),
):
    """
    Store encrypted credentials for a provider (owner or admin, paid plans only)
    """
    limits = get_limits_for_plan(get_workspace_plan(db, context.workspace_id))
    if not limits.integrations_allowed:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Integrations are not available on your plan. Upgrade to connect your own API keys.",
        )

    if not payload.credentials:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Credentials are required")

    existing = db.query(IntegrationConfig).filter(
        IntegrationConfig.workspace_id == context.workspace_id,
        IntegrationConfig.type == payload.type.value,
    ).first()
    if existing:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Integration already exists. Use PUT to update.",
        )

    try:
        encrypted = encrypt_credentials(payload.credentials)
    except EncryptionError as e:
        logger.error(f"Failed to encrypt {payload.type.value} credentials: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to encrypt credentials")

    config = IntegrationConfig(
        workspace_id=context.workspace_id,
        type=payload.type.value,
        display_name=payload.display_name or None,
        encrypted_credentials=encrypted,
        is_enabled=True,
    )
    db.add(config)
    db.commit()
    db.refresh(config)

    telemetry.log_integration_connected(db, context.workspace_id, context.user_id, config.type)
    log_admin_action(
        db,
        AdminLogLevel.INFO,
        "INTEGRATION_CONFIG_CREATED",
        user_id=context.user_id,
        workspace_id=context.workspace_id,
        metadata={"type": config.type},
    )
    return config.to_dict()


@router.get("/config/{config_id}")
async def get_integration_config(
    config_id: UUID,
    context: rbac.PermissionContext = Depends(require_workspace_admin),
    db: Session = Depends(get_db),
):
    """Config with decrypted credentials (owner or admin)"""
    config = _get_config(db, context, config_id)

    try:
        credentials = decrypt_credentials(config.encrypted_credentials)
    except EncryptionError as e:
        logger.error(f"Failed to decrypt integration config {config.id}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to decrypt credentials")

    data: Dict[str, Any] = config.to_dict()
    data["credentials"] = credentials
    return data


@router.put("/config/{config_id}")
async def update_integration_config(
    config_id: UUID,
    payload: IntegrationConfigUpdate,
    context: rbac.PermissionContext = Depends(require_workspace_admin),
    db: Session = Depends(get_db),
):
    config = _get_config(db, context, config_id)
    changes = payload.model_dump(exclude_unset=True)

    if "display_name" in changes:
        config.display_name = changes["display_name"]
    if changes.get("credentials"):
        try:
            config.encrypted_credentials = encrypt_credentials(changes["credentials"])
        except EncryptionError as e:
            logger.error(f"Failed to encrypt {config.type} credentials: {e}")
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to encrypt credentials")
    if changes.get("is_enabled") is not None:
        config.is_enabled = changes["is_enabled"]

    db.commit()
    db.refresh(config)
    return config.to_dict()


@router.delete("/config/{config_id}")
async def delete_integration_config(
    config_id: UUID,
    context: rbac.PermissionContext = Depends(require_workspace_admin),
    db: Session = Depends(get_db),
):
    config = _get_config(db, context, config_id)
    integration_type = config.type

    db.delete(config)
    db.commit()

    telemetry.log_integration_disconnected(db, context.workspace_id, context.user_id, integration_type)
    log_admin_action(
        db,
        AdminLogLevel.INFO,
        "INTEGRATION_CONFIG_DELETED",
        user_id=context.user_id,
        workspace_id=context.workspace_id,
        metadata={"type": integration_type},
    )
    return {"success": True}


@router.post("/config/{config_id}/test")
async def check_integration_config(
    config_id: UUID,
    context: rbac.PermissionContext = Depends(require_workspace_admin),
    db: Session = Depends(get_db),
):
    """Check the stored credentials against the provider and record the outcome"""
    config = _get_config(db, context, config_id)

    try:
        result = await run_integration_test(db, config)
    except EncryptionError as e:
        logger.error(f"Failed to decrypt integration config {config.id}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to decrypt credentials")

    return result.model_dump()
