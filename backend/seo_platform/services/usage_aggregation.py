"""
Daily usage aggregation

Rolls yesterday's (UTC) telemetry events up into one DailyUsageSnapshot per
workspace. Re-running for the same day overwrites the counts.
"""

import logging
from collections import defaultdict
from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Dict, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from seo_platform.models.telemetry import DailyUsageSnapshot, TelemetryEvent, TelemetryEventType
from seo_platform.models.workspace import Workspace

logger = logging.getLogger(__name__)

# Snapshot column -> event types it counts
COUNTED_EVENTS = {
    "login_count": (TelemetryEventType.USER_LOGIN,),
    "project_count": (
        TelemetryEventType.PROJECT_CREATED,
        TelemetryEventType.PROJECT_UPDATED,
        TelemetryEventType.PROJECT_DELETED,
    ),
    "keyword_search_count": (TelemetryEventType.KEYWORD_SEARCH,),
    "audit_run_count": (TelemetryEventType.AUDIT_RUN,),
    "content_brief_count": (TelemetryEventType.CONTENT_BRIEF_GENERATED,),
    "document_count": (TelemetryEventType.DOCUMENT_CREATED,),
    "api_call_count": (TelemetryEventType.API_CALL,),
    "error_count": (TelemetryEventType.ERROR_OCCURRED,),
}


def usage_window(day: date):
    start = datetime.combine(day, time.min, tzinfo=timezone.utc)
    return start, start + timedelta(days=1)


def aggregate_daily_usage(db: Session, day: Optional[date] = None) -> Dict[str, Any]:
    """
    Upsert a usage snapshot for every workspace for the given day

    Defaults to yesterday in UTC.
    """
    day = day or (datetime.now(timezone.utc).date() - timedelta(days=1))
    start, end = usage_window(day)

    rows = db.query(
        TelemetryEvent.workspace_id,
        TelemetryEvent.type,
        func.count(TelemetryEvent.id),
    ).filter(
        TelemetryEvent.created_at >= start,
        TelemetryEvent.created_at < end,
    ).group_by(TelemetryEvent.workspace_id, TelemetryEvent.type).all()

    counts_by_workspace = defaultdict(dict)
    for workspace_id, event_type, count in rows:
        counts_by_workspace[workspace_id][event_type] = count

    results = []
    for (workspace_id,) in db.query(Workspace.id).order_by(Workspace.created_at).all():
        event_counts = counts_by_workspace.get(workspace_id, {})
        values = {
            column: sum(event_counts.get(t.value, 0) for t in event_types)
            for column, event_types in COUNTED_EVENTS.items()
        }

        snapshot = db.query(DailyUsageSnapshot).filter(
            DailyUsageSnapshot.workspace_id == workspace_id,
            DailyUsageSnapshot.date == day,
        ).first()
        if snapshot is None:
            snapshot = DailyUsageSnapshot(workspace_id=workspace_id, date=day, **values)
            db.add(snapshot)
        else:
            snapshot.update_from_dict(values)
        db.flush()

        results.append({
            "workspaceId": str(workspace_id),
            "date": day.isoformat(),
            "snapshot": str(snapshot.id),
        })

    db.commit()
    logger.info(f"Aggregated usage for {len(results)} workspaces on {day.isoformat()}")

    return {
        "success": True,
        "date": day.isoformat(),
        "workspacesProcessed": len(results),
        "results": results,
    }
