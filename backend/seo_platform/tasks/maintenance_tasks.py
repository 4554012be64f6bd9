"""
Periodic maintenance: usage roll-ups and log retention
"""

import logging
from datetime import date
from typing import Any, Dict, Optional
from celery import shared_task

from seo_platform.core.database import SessionLocal
from seo_platform.services.admin_logger import delete_old_logs
from seo_platform.services.rate_limiter import cleanup_old_rate_limit_logs
from seo_platform.services.usage_aggregation import aggregate_daily_usage

logger = logging.getLogger(__name__)


@shared_task(bind=True, max_retries=3)
def aggregate_usage(self, day: Optional[str] = None) -> Dict[str, Any]:
    """
    Build daily usage snapshots

    Args:
        day: ISO date to aggregate, yesterday (UTC) when omitted

    Returns:
        Aggregation summary
    """
    db = SessionLocal()

    try:
        result = aggregate_daily_usage(db, date.fromisoformat(day) if day else None)
        logger.info(f"Aggregated usage for {result['date']}: {result['workspacesProcessed']} workspaces")
        return result

    except Exception as e:
        logger.error(f"Error aggregating usage: {e}")
        db.rollback()
        # Retry with exponential backoff
        raise self.retry(exc=e, countdown=60 * (2 ** self.request.retries))

    finally:
        db.close()


@shared_task(bind=True, max_retries=3)
def cleanup_rate_limit_logs(self, older_than_days: int = 7) -> Dict[str, Any]:
    db = SessionLocal()

    try:
        deleted = cleanup_old_rate_limit_logs(db, older_than_days)
        return {'status': 'success', 'deleted': deleted}

    except Exception as e:
        logger.error(f"Error cleaning up rate limit logs: {e}")
        db.rollback()
        raise self.retry(exc=e, countdown=60 * (2 ** self.request.retries))

    finally:
        db.close()


@shared_task(bind=True, max_retries=3)
def cleanup_admin_logs(self, days_to_keep: int = 90) -> Dict[str, Any]:
    """Delete old admin logs; SECURITY entries are kept"""
    db = SessionLocal()

    try:
        deleted = delete_old_logs(db, days_to_keep)
        return {'status': 'success', 'deleted': deleted}

    except Exception as e:
        logger.error(f"Error cleaning up admin logs: {e}")
        db.rollback()
        raise self.retry(exc=e, countdown=60 * (2 ** self.request.retries))

    finally:
        db.close()
