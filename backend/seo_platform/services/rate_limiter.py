"""
Sliding-window rate limiter backed by the database

Every admitted request is stored as a RateLimitLog row. A request is allowed
when fewer than max_requests rows exist for the same identifier inside the
trailing window.

Check and insert happen inside one transaction that first upserts the key's
RateLimitLock row. The upsert takes a row lock (PostgreSQL) or the database
write lock (SQLite) that is held until commit, so two concurrent checks for
the same key cannot both read the same count.
"""

import logging
import math
from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import UUID

from pydantic import BaseModel
from sqlalchemy import func, or_, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

from seo_platform.models.rate_limit import RateLimitLock, RateLimitLog

logger = logging.getLogger(__name__)


class RateLimitConfig(BaseModel):
    max_requests: int
    window_ms: int


class RateLimitIdentifier(BaseModel):
    workspace_id: Optional[UUID] = None
    user_id: Optional[UUID] = None
    ip: str
    route: str
    method: str

    @property
    def key(self) -> str:
        return f"{self.workspace_id or 'null'}:{self.user_id or 'null'}:{self.ip}:{self.route}:{self.method}"


class RateLimitResult(BaseModel):
    allowed: bool
    remaining: int
    reset_at: datetime
    retry_after: Optional[int] = None


# Rejected requests are logged with this status and do not count toward the window
REJECTED_STATUS = 429

DEFAULT_CONFIGS = {
    "api:default": RateLimitConfig(max_requests=100, window_ms=60 * 1000),
    "api:heavy": RateLimitConfig(max_requests=10, window_ms=60 * 1000),
    "api:auth": RateLimitConfig(max_requests=5, window_ms=15 * 60 * 1000),
    "api:search": RateLimitConfig(max_requests=30, window_ms=60 * 1000),
    "api:generation": RateLimitConfig(max_requests=10, window_ms=60 * 1000),
    "api:chat": RateLimitConfig(max_requests=20, window_ms=60 * 1000),
}


def get_rate_limit_config(route: str) -> RateLimitConfig:
    """Pick a route class from the request path"""
    if "/keywords" in route or "/audits" in route:
        return DEFAULT_CONFIGS["api:search"]
    if "/documents/generate" in route or "/content-briefs" in route:
        return DEFAULT_CONFIGS["api:generation"]
    if route.rstrip("/").endswith("/chat"):
        return DEFAULT_CONFIGS["api:chat"]
    if "/auth" in route:
        return DEFAULT_CONFIGS["api:auth"]
    return DEFAULT_CONFIGS["api:default"]


def _acquire_key_lock(db: Session, key: str, now: datetime) -> None:
    dialect = db.get_bind().dialect.name

    if dialect in ("postgresql", "sqlite"):
        insert = postgresql.insert if dialect == "postgresql" else sqlite.insert
        stmt = insert(RateLimitLock).values(key=key, hits=1, touched_at=now)
        stmt = stmt.on_conflict_do_update(
            index_elements=[RateLimitLock.key],
            set_={"hits": RateLimitLock.hits + 1, "touched_at": now},
        )
        db.execute(stmt)
        return

    lock = db.execute(
        select(RateLimitLock).where(RateLimitLock.key == key).with_for_update()
    ).scalar_one_or_none()
    if lock is None:
        db.add(RateLimitLock(key=key, hits=1, touched_at=now))
    else:
        lock.hits += 1
        lock.touched_at = now
    db.flush()


def _identifier_filter(identifier: RateLimitIdentifier):
    return (
        RateLimitLog.workspace_id == identifier.workspace_id,
        RateLimitLog.user_id == identifier.user_id,
        RateLimitLog.ip == identifier.ip,
        RateLimitLog.route == identifier.route,
        RateLimitLog.method == identifier.method,
    )


def check_rate_limit(
    db: Session,
    identifier: RateLimitIdentifier,
    config: Optional[RateLimitConfig] = None,
) -> RateLimitResult:
    """
    Count recent requests for the identifier and record this one if allowed

    Commits the session.
    """
    effective_config = config or get_rate_limit_config(identifier.route)
    now = datetime.now(timezone.utc)
    window = timedelta(milliseconds=effective_config.window_ms)
    window_start = now - window

    try:
        _acquire_key_lock(db, identifier.key, now)

        recent = db.execute(
            select(func.count(RateLimitLog.id)).where(
                *_identifier_filter(identifier),
                RateLimitLog.created_at >= window_start,
                or_(RateLimitLog.status.is_(None), RateLimitLog.status != REJECTED_STATUS),
            )
        ).scalar_one()

        allowed = recent < effective_config.max_requests
        if allowed:
            db.add(RateLimitLog(
                workspace_id=identifier.workspace_id,
                user_id=identifier.user_id,
                ip=identifier.ip,
                route=identifier.route,
                method=identifier.method,
                status=None,
                created_at=now,
            ))
        db.commit()
    except Exception:
        db.rollback()
        raise

    remaining = max(0, effective_config.max_requests - recent - 1)
    retry_after = None if allowed else math.ceil(effective_config.window_ms / 1000)

    if not allowed:
        logger.warning(f"Rate limit exceeded for {identifier.key}")

    return RateLimitResult(
        allowed=allowed,
        remaining=remaining,
        reset_at=now + window,
        retry_after=retry_after,
    )


def log_rate_limit_attempt(db: Session, identifier: RateLimitIdentifier, status: int) -> None:
    """Record a finished request; the HTTP layer logs every 429 it sends"""
    db.add(RateLimitLog(
        workspace_id=identifier.workspace_id,
        user_id=identifier.user_id,
        ip=identifier.ip,
        route=identifier.route,
        method=identifier.method,
        status=status,
    ))
    db.commit()


def cleanup_old_rate_limit_logs(db: Session, older_than_days: int = 7) -> int:
    """Delete log rows and idle lock rows older than the cutoff"""
    cutoff = datetime.now(timezone.utc) - timedelta(days=older_than_days)

    deleted = db.query(RateLimitLog).filter(RateLimitLog.created_at < cutoff).delete(synchronize_session=False)
    db.query(RateLimitLock).filter(RateLimitLock.touched_at < cutoff).delete(synchronize_session=False)
    db.commit()

    logger.info(f"Deleted {deleted} rate limit log rows older than {older_than_days} days")
    return deleted
