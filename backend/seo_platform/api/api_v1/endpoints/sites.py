"""
Connected CMS site endpoints (WordPress and Wix)
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional
from uuid import UUID
import logging

from fastapi import APIRouter, HTTPException, Depends, status
from sqlalchemy.orm import Session

from seo_platform.api.deps import (
    get_current_user,
    get_current_workspace,
    get_workspace_project,
    require_workspace_admin,
)
from seo_platform.core.database import get_db
from seo_platform.core.encryption import EncryptionError, decrypt_credentials, encrypt_credentials
from seo_platform.models.admin_log import AdminLogLevel
from seo_platform.models.connected_site import ConnectedSite, SiteStatus, SiteType
from seo_platform.models.user import User
from seo_platform.models.workspace import Workspace
from seo_platform.schemas.site import SiteConnect, WixConnect, WordPressConnect
from seo_platform.services import cms_sites, rbac, telemetry
from seo_platform.services.admin_logger import log_admin_action

logger = logging.getLogger(__name__)

router = APIRouter()

PLATFORM_PATHS = {
    "wordpress": SiteType.WORDPRESS,
    "wix": SiteType.WIX,
}


def _site_type(platform: str) -> SiteType:
    site_type = PLATFORM_PATHS.get(platform)
    if site_type is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Unknown site platform")
    return site_type


def _get_site(db: Session, workspace_id: UUID, site_id: UUID, site_type: Optional[SiteType] = None) -> ConnectedSite:
    query = db.query(ConnectedSite).filter(
        ConnectedSite.id == site_id,
        ConnectedSite.workspace_id == workspace_id,
    )
    if site_type is not None:
        query = query.filter(ConnectedSite.type == site_type.value)
    site = query.first()
    if not site:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Site not found")
    return site


def _site_credentials(site: ConnectedSite) -> Dict[str, Any]:
    site_type = SiteType(site.type)
    credentials: Dict[str, Any] = {}
    if site.encrypted_credentials:
        try:
            credentials = decrypt_credentials(site.encrypted_credentials)
        except EncryptionError as e:
            logger.error(f"Failed to decrypt credentials for site {site.id}: {e}")
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to decrypt credentials")

    if not cms_sites.has_credentials(site_type, credentials):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=cms_sites.MISSING_CREDENTIALS[site_type])
    return credentials


async def _connect(
    site_type: SiteType,
    payload: SiteConnect,
    credentials: Dict[str, Any],
    context: rbac.PermissionContext,
    db: Session,
) -> Dict[str, Any]:
    workspace_id = context.workspace_id
    if payload.project_id is not None:
        workspace = db.get(Workspace, workspace_id)
        get_workspace_project(db, workspace, payload.project_id)

    connected = await cms_sites.verify_site(site_type, payload.url, credentials)

    try:
        encrypted = encrypt_credentials(credentials)
    except EncryptionError as e:
        logger.error(f"Failed to encrypt {site_type.value} credentials: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to encrypt credentials")

    site = ConnectedSite(
        workspace_id=workspace_id,
        project_id=payload.project_id,
        type=site_type.value,
        name=payload.name,
        url=payload.url,
        status=(SiteStatus.CONNECTED if connected else SiteStatus.ERROR).value,
        last_sync_at=datetime.now(timezone.utc) if connected else None,
        last_sync_status="Successfully connected" if connected else cms_sites.CONNECT_FAILURE[site_type],
        encrypted_credentials=encrypted,
    )
    db.add(site)
    db.commit()
    db.refresh(site)

    logger.info(f"Connected {site_type.value} site {site.id} for workspace {workspace_id}: {site.status}")
    telemetry.log_integration_connected(db, workspace_id, context.user_id, site_type.value)
    log_admin_action(
        db,
        AdminLogLevel.INFO,
        "SITE_CONNECTED",
        user_id=context.user_id,
        workspace_id=workspace_id,
        metadata={"type": site_type.value, "status": site.status},
    )
    return {"success": True, "site": site.summary()}


@router.get("/sites")
async def list_sites(
    user: User = Depends(get_current_user),
    workspace: Workspace = Depends(get_current_workspace),
    db: Session = Depends(get_db),
):
    sites = db.query(ConnectedSite).filter(
        ConnectedSite.workspace_id == workspace.id
    ).order_by(ConnectedSite.created_at).all()
    return {"sites": [site.to_dict() for site in sites]}


@router.post("/wordpress/connect", status_code=status.HTTP_201_CREATED)
async def connect_wordpress(
    payload: WordPressConnect,
    context: rbac.PermissionContext = Depends(require_workspace_admin),
    db: Session = Depends(get_db),
):
    """Store a WordPress site; its status reflects a live API check"""
    return await _connect(SiteType.WORDPRESS, payload, {"apiToken": payload.api_token}, context, db)


@router.post("/wix/connect", status_code=status.HTTP_201_CREATED)
async def connect_wix(
    payload: WixConnect,
    context: rbac.PermissionContext = Depends(require_workspace_admin),
    db: Session = Depends(get_db),
):
    """Store a Wix site; its status reflects a live API check"""
    credentials = {"siteId": payload.site_id, "apiToken": payload.api_token}
    return await _connect(SiteType.WIX, payload, credentials, context, db)


@router.post("/{platform}/{site_id}/test")
async def check_site_connection(
    platform: str,
    site_id: UUID,
    workspace: Workspace = Depends(get_current_workspace),
    db: Session = Depends(get_db),
):
    """Re-check a site's credentials and record the outcome"""
    site_type = _site_type(platform)
    site = _get_site(db, workspace.id, site_id, site_type)
    credentials = _site_credentials(site)

    success = await cms_sites.verify_site(site_type, site.url, credentials)
    message = (
        f"Successfully connected to {cms_sites.PLATFORM_NAMES[site_type]}"
        if success else cms_sites.CONNECT_FAILURE[site_type]
    )

    site.status = (SiteStatus.CONNECTED if success else SiteStatus.ERROR).value
    site.last_sync_status = message
    if success:
        site.last_sync_at = datetime.now(timezone.utc)
    db.commit()

    return {"success": success, "message": message}


@router.get("/{platform}/{site_id}/pages")
async def list_site_pages(
    platform: str,
    site_id: UUID,
    workspace: Workspace = Depends(get_current_workspace),
    db: Session = Depends(get_db),
):
    site_type = _site_type(platform)
    site = _get_site(db, workspace.id, site_id, site_type)
    credentials = _site_credentials(site)

    pages = await cms_sites.fetch_site_pages(site_type, site.url, credentials)
    if pages is None:
        return {
            "success": False,
            "pages": [],
            "message": f"Unable to fetch pages from {cms_sites.PLATFORM_NAMES[site_type]}",
        }
    return {"success": True, "pages": [page.model_dump() for page in pages]}


@router.delete("/sites/{site_id}")
async def disconnect_site(
    site_id: UUID,
    context: rbac.PermissionContext = Depends(require_workspace_admin),
    db: Session = Depends(get_db),
):
    site = _get_site(db, context.workspace_id, site_id)
    site_type = site.type

    db.delete(site)
    db.commit()

    telemetry.log_integration_disconnected(db, context.workspace_id, context.user_id, site_type)
    return {"success": True}
