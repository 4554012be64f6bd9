"""
Admin audit logging
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID

from fastapi import Request
from sqlalchemy.orm import Session

from seo_platform.models.admin_log import AdminLog, AdminLogLevel

logger = logging.getLogger(__name__)


def log_admin_action(
    db: Session,
    level: AdminLogLevel,
    action: str,
    user_id: Optional[UUID] = None,
    workspace_id: Optional[UUID] = None,
    metadata: Optional[Dict[str, Any]] = None,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None,
) -> None:
    """Write an admin log row; failures are logged, not raised"""
    try:
        db.add(AdminLog(
            level=AdminLogLevel(level).value,
            action=action,
            user_id=user_id,
            workspace_id=workspace_id,
            log_metadata=metadata,
            ip_address=ip_address,
            user_agent=user_agent,
            timestamp=datetime.now(timezone.utc),
        ))
        db.commit()
    except Exception as e:
        db.rollback()
        logger.error(f"Failed to write admin log {action}: {e}")


def log_security_event(
    db: Session,
    action: str,
    user_id: Optional[UUID],
    details: Dict[str, Any],
    request: Optional[Request] = None,
) -> None:
    ip_address = "unknown"
    user_agent = "unknown"
    if request is not None:
        ip_address = request.headers.get("x-forwarded-for") or request.headers.get("x-real-ip") or "unknown"
        user_agent = request.headers.get("user-agent") or "unknown"

    log_admin_action(
        db,
        AdminLogLevel.SECURITY,
        action,
        user_id=user_id,
        metadata=details,
        ip_address=ip_address,
        user_agent=user_agent,
    )


def get_admin_logs(
    db: Session,
    limit: int = 100,
    offset: int = 0,
    level: Optional[AdminLogLevel] = None,
    user_id: Optional[UUID] = None,
    workspace_id: Optional[UUID] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
) -> Tuple[List[AdminLog], int]:
    """Newest-first page of logs and the total matching count"""
    query = db.query(AdminLog)

    if level:
        query = query.filter(AdminLog.level == AdminLogLevel(level).value)
    if user_id:
        query = query.filter(AdminLog.user_id == user_id)
    if workspace_id:
        query = query.filter(AdminLog.workspace_id == workspace_id)
    if start_date:
        query = query.filter(AdminLog.timestamp >= start_date)
    if end_date:
        query = query.filter(AdminLog.timestamp <= end_date)

    total = query.count()
    logs = query.order_by(AdminLog.timestamp.desc()).offset(offset).limit(limit).all()
    return logs, total


def delete_old_logs(db: Session, days_to_keep: int = 90) -> int:
    """Delete non-SECURITY logs older than the retention window"""
    cutoff = datetime.now(timezone.utc) - timedelta(days=days_to_keep)
    deleted = db.query(AdminLog).filter(
        AdminLog.timestamp < cutoff,
        AdminLog.level != AdminLogLevel.SECURITY.value,
    ).delete(synchronize_session=False)
    db.commit()

    logger.info(f"Deleted {deleted} admin log rows older than {days_to_keep} days")
    return deleted
