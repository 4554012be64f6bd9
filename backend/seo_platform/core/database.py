"""
Engine and session factory shared by the API and the Celery workers
"""

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from typing import Any, Dict, Generator
import logging

from seo_platform.core.config import settings, DATABASE_URL

logger = logging.getLogger(__name__)


def is_memory_sqlite(url: str) -> bool:
    return url.startswith("sqlite") and (url.rstrip("/") in ("sqlite:", "sqlite:/") or ":memory:" in url)


def engine_options(url: str) -> Dict[str, Any]:
    """
    Pool settings for the configured backend

    In-memory SQLite (tests) shares a single connection so the database is
    visible to every session and thread.
    """
    if is_memory_sqlite(url):
        return {
            "connect_args": {"check_same_thread": False},
            "poolclass": StaticPool,
            "echo": settings.DEBUG,
        }
    if url.startswith("sqlite"):
        return {
            "connect_args": {"check_same_thread": False, "timeout": 30},
            "echo": settings.DEBUG,
        }
    return {
        "pool_pre_ping": True,
        "pool_recycle": 300,
        "pool_size": 10,
        "max_overflow": 20,
        "echo": settings.DEBUG,
        "echo_pool": settings.DEBUG,
    }


def _use_immediate_transactions(engine: Engine) -> None:
    # Every transaction holds the write lock from its first statement;
    # other writers wait on the busy timeout
    @event.listens_for(engine, "connect")
    def disable_driver_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def begin_immediate(connection):
        connection.exec_driver_sql("BEGIN IMMEDIATE")


def build_engine(url: str) -> Engine:
    engine = create_engine(url, **engine_options(url))
    if url.startswith("sqlite") and not is_memory_sqlite(url):
        _use_immediate_transactions(engine)
    return engine


engine = build_engine(DATABASE_URL)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
    expire_on_commit=False,
)

if settings.DEBUG:
    @event.listens_for(engine, "checkout")
    def receive_checkout(dbapi_connection, connection_record, connection_proxy):
        logger.debug("Connection checked out from pool")

    @event.listens_for(engine, "checkin")
    def receive_checkin(dbapi_connection, connection_record):
        logger.debug("Connection returned to pool")


def get_db() -> Generator[Session, None, None]:
    """
    Request-scoped session; rolled back if the handler raises
    """
    db = SessionLocal()
    try:
        yield db
    except Exception as e:
        logger.error(f"Database session error: {e}")
        db.rollback()
        raise
    finally:
        db.close()
