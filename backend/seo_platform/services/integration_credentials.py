"""
Bring-your-own-key credential lookup

A workspace may store its own API keys as encrypted integration configs.
Each helper below prefers the workspace key and falls back to the
platform-wide key from settings.
"""

import logging
from typing import Any, Dict, Optional, Union
from uuid import UUID

from sqlalchemy.orm import Session

from seo_platform.core.config import settings
from seo_platform.core.encryption import EncryptionError, decrypt_credentials
from seo_platform.models.integration import IntegrationConfig, IntegrationType

logger = logging.getLogger(__name__)


def _get_config(db: Session, workspace_id: Union[UUID, str], integration_type: IntegrationType) -> Optional[IntegrationConfig]:
    return db.query(IntegrationConfig).filter(
        IntegrationConfig.workspace_id == _as_uuid(workspace_id),
        IntegrationConfig.type == integration_type.value,
    ).first()


def _as_uuid(value: Union[UUID, str]) -> UUID:
    return value if isinstance(value, UUID) else UUID(str(value))


def get_workspace_integration_credentials(
    db: Session,
    workspace_id: Union[UUID, str],
    integration_type: IntegrationType,
) -> Optional[Dict[str, Any]]:
    """
    Decrypted credentials for an enabled integration, or None

    Missing, disabled and undecryptable configs all return None.
    """
    config = _get_config(db, workspace_id, integration_type)
    if not config or not config.is_enabled:
        return None

    try:
        return decrypt_credentials(config.encrypted_credentials)
    except EncryptionError as e:
        logger.error(f"Failed to decrypt credentials for {integration_type.value}: {e}")
        return None


def _workspace_api_key(db: Session, workspace_id: Union[UUID, str], integration_type: IntegrationType) -> Optional[str]:
    credentials = get_workspace_integration_credentials(db, workspace_id, integration_type)
    if credentials and credentials.get("apiKey"):
        return credentials["apiKey"]
    return None


def get_or_fallback_serp_api_key(db: Session, workspace_id: Union[UUID, str]) -> Optional[str]:
    return _workspace_api_key(db, workspace_id, IntegrationType.SERP_API) or settings.SERP_API_KEY or None


def get_or_fallback_openai_key(db: Session, workspace_id: Union[UUID, str]) -> Optional[str]:
    return _workspace_api_key(db, workspace_id, IntegrationType.OPENAI) or settings.OPENAI_API_KEY or None


def get_or_fallback_pagespeed_key(db: Session, workspace_id: Union[UUID, str]) -> Optional[str]:
    return _workspace_api_key(db, workspace_id, IntegrationType.PAGESPEED) or settings.PAGESPEED_API_KEY or None
