"""
Product telemetry events

Writes are best-effort: a failed insert is logged and rolled back, never raised.
Call these after the request's own changes are committed.
"""

import logging
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from seo_platform.models.telemetry import TelemetryEvent, TelemetryEventType

logger = logging.getLogger(__name__)


def log_telemetry_event(
    db: Session,
    workspace_id: UUID,
    event_type: TelemetryEventType,
    user_id: Optional[UUID] = None,
    context: Optional[str] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> None:
    try:
        db.add(TelemetryEvent(
            workspace_id=workspace_id,
            user_id=user_id,
            type=TelemetryEventType(event_type).value,
            context=context,
            event_metadata=metadata,
        ))
        db.commit()
    except Exception as e:
        db.rollback()
        logger.error(f"Failed to log telemetry event {event_type}: {e}")


def log_user_login(db: Session, workspace_id: UUID, user_id: UUID) -> None:
    log_telemetry_event(db, workspace_id, TelemetryEventType.USER_LOGIN, user_id)


def log_user_logout(db: Session, workspace_id: UUID, user_id: UUID) -> None:
    log_telemetry_event(db, workspace_id, TelemetryEventType.USER_LOGOUT, user_id)


def log_project_created(db: Session, workspace_id: UUID, user_id: UUID, project_id: UUID, project_name: str) -> None:
    log_telemetry_event(db, workspace_id, TelemetryEventType.PROJECT_CREATED, user_id,
                        context=str(project_id), metadata={"projectName": project_name})


def log_project_updated(db: Session, workspace_id: UUID, user_id: UUID, project_id: UUID) -> None:
    log_telemetry_event(db, workspace_id, TelemetryEventType.PROJECT_UPDATED, user_id, context=str(project_id))


def log_project_deleted(db: Session, workspace_id: UUID, user_id: UUID, project_id: UUID) -> None:
    log_telemetry_event(db, workspace_id, TelemetryEventType.PROJECT_DELETED, user_id, context=str(project_id))


def log_keyword_search(db: Session, workspace_id: UUID, user_id: UUID, project_id: UUID, keywords: List[str]) -> None:
    log_telemetry_event(db, workspace_id, TelemetryEventType.KEYWORD_SEARCH, user_id,
                        context=str(project_id), metadata={"keywords": keywords, "count": len(keywords)})


def log_audit_run(db: Session, workspace_id: UUID, user_id: UUID, project_id: UUID, url: str) -> None:
    log_telemetry_event(db, workspace_id, TelemetryEventType.AUDIT_RUN, user_id,
                        context=str(project_id), metadata={"url": url})


def log_content_brief_generated(db: Session, workspace_id: UUID, user_id: UUID, project_id: UUID, keyword: str) -> None:
    log_telemetry_event(db, workspace_id, TelemetryEventType.CONTENT_BRIEF_GENERATED, user_id,
                        context=str(project_id), metadata={"keyword": keyword})


def log_document_created(db: Session, workspace_id: UUID, user_id: UUID, document_id: UUID, document_type: str) -> None:
    log_telemetry_event(db, workspace_id, TelemetryEventType.DOCUMENT_CREATED, user_id,
                        context=str(document_id), metadata={"documentType": document_type})


def log_integration_connected(db: Session, workspace_id: UUID, user_id: UUID, integration_type: str) -> None:
    log_telemetry_event(db, workspace_id, TelemetryEventType.INTEGRATION_CONNECTED, user_id,
                        metadata={"integrationType": integration_type})


def log_integration_disconnected(db: Session, workspace_id: UUID, user_id: UUID, integration_type: str) -> None:
    log_telemetry_event(db, workspace_id, TelemetryEventType.INTEGRATION_DISCONNECTED, user_id,
                        metadata={"integrationType": integration_type})


def log_error(db: Session, workspace_id: UUID, user_id: Optional[UUID], error: Exception,
              context: Optional[str] = None) -> None:
    log_telemetry_event(db, workspace_id, TelemetryEventType.ERROR_OCCURRED, user_id,
                        context=context, metadata={"error": str(error), "errorType": type(error).__name__})
