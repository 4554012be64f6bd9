"""
Scheduled job triggers called by an external cron with a shared secret
"""

from fastapi import APIRouter, HTTPException, Depends, Header, status
from sqlalchemy.orm import Session
from typing import Optional
import hmac
import logging

from seo_platform.core.config import settings
from seo_platform.core.database import get_db
from seo_platform.services.usage_aggregation import aggregate_daily_usage

logger = logging.getLogger(__name__)

router = APIRouter()


def verify_cron_secret(authorization: Optional[str] = Header(None)) -> None:
    if not settings.CRON_SECRET:
        logger.error("CRON_SECRET not configured")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Cron secret not configured",
        )

    expected = f"Bearer {settings.CRON_SECRET}"
    if not authorization or not hmac.compare_digest(authorization, expected):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")


@router.post("/aggregate-usage", dependencies=[Depends(verify_cron_secret)])
async def aggregate_usage(db: Session = Depends(get_db)):
    """
    Roll up yesterday's telemetry into per-workspace daily snapshots
    """
    try:
        return aggregate_daily_usage(db)
    except Exception as e:
        db.rollback()
        logger.error(f"Usage aggregation failed: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e) or "Aggregation failed")
