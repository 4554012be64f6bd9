"""
Rate limiter storage: request log rows and per-key lock rows
"""

from sqlalchemy import Column, String, Integer, DateTime, Uuid, Index, func

from seo_platform.models.base import Base, BaseModel, utcnow


class RateLimitLog(BaseModel):
    """
    One row per request admitted by the rate limiter
    """
    __tablename__ = "rate_limit_logs"

    workspace_id = Column(Uuid(as_uuid=True), nullable=True)
    user_id = Column(Uuid(as_uuid=True), nullable=True)
    ip = Column(String(64), nullable=False)
    route = Column(String(255), nullable=False)
    method = Column(String(10), nullable=False)
    status = Column(Integer, nullable=True, comment="HTTP status, when logged after the response")

    __table_args__ = (
        Index("ix_rate_limit_logs_key_created", "ip", "route", "method", "created_at"),
        Index("ix_rate_limit_logs_user_created", "user_id", "created_at"),
    )


class RateLimitLock(Base):
    """
    Row upserted at the start of every limiter check.

    Writing the row takes a lock that is held until the transaction ends, so
    concurrent checks for the same key run count-then-insert one at a time.
    """
    __tablename__ = "rate_limit_locks"

    key = Column(String(512), primary_key=True)
    hits = Column(Integer, nullable=False, default=0)
    touched_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )
