"""
Schema management and connectivity checks
"""

from contextlib import contextmanager
from typing import Any, Dict, Generator
import logging
import time

from sqlalchemy import text
from sqlalchemy.orm import Session

from seo_platform.core.database import SessionLocal, engine
from seo_platform.models.base import Base

logger = logging.getLogger(__name__)


@contextmanager
def session_scope() -> Generator[Session, None, None]:
    """Session that commits on success and rolls back on any error"""
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception as e:
        logger.error(f"Rolling back session: {e}")
        db.rollback()
        raise
    finally:
        db.close()


def create_all_tables() -> None:
    """
    Create the schema for every model

    Production deployments manage the schema with migrations; this is for
    development, tests and first runs.
    """
    # Registers every model on Base.metadata
    import seo_platform.models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    logger.info(f"Created {len(Base.metadata.tables)} tables")


def drop_all_tables() -> None:
    """Drop every table. Destroys all data."""
    Base.metadata.drop_all(bind=engine)
    logger.info("Dropped all tables")


def check_database_connection() -> bool:
    try:
        with session_scope() as db:
            db.execute(text("SELECT 1"))
    except Exception as e:
        logger.error(f"Database connection failed: {e}")
        return False
    return True


class DatabaseHealthCheck:
    """Database status for the health endpoints"""

    @staticmethod
    def check_connection(db: Session) -> Dict[str, Any]:
        health_status: Dict[str, Any] = {"status": "unknown", "connection": False, "details": {}}

        started = time.perf_counter()
        try:
            db.execute(text("SELECT 1"))
        except Exception as e:
            health_status["status"] = "unhealthy"
            health_status["details"]["error"] = str(e)
            logger.error(f"Database health check failed: {e}")
            return health_status

        health_status["connection"] = True
        health_status["status"] = "healthy"
        health_status["details"]["query_time_ms"] = round((time.perf_counter() - started) * 1000, 2)
        health_status["details"]["backend"] = engine.dialect.name
        return health_status
