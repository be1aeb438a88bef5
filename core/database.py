from sqlmodel import SQLModel, create_engine, Session
from typing import Generator
import logging

from core.config import get_settings

logger = logging.getLogger(__name__)


# ============================================================
# ✅ Create SQLModel engine
# ============================================================
def build_engine(database_url: str):
    """Build an engine; SQLite needs check_same_thread off for FastAPI workers."""
    if database_url.startswith("sqlite"):
        logger.warning("⚠️ Using SQLite database at %s", database_url)
        return create_engine(database_url, echo=False, connect_args={"check_same_thread": False})

    logger.info("✅ Using database from environment")
    # For PostgreSQL, pool_pre_ping avoids stale connections
    return create_engine(database_url, echo=False, pool_pre_ping=True)


engine = build_engine(get_settings().DATABASE_URL)


# ============================================================
# ✅ Create tables (called at startup)
# ============================================================
def create_db_and_tables(bind=None) -> None:
    """
    Create all database tables based on SQLModel models.
    This runs automatically at app startup.
    """
    # Import registers every table on SQLModel.metadata
    import models.models  # noqa: F401

    try:
        SQLModel.metadata.create_all(bind or engine)
        logger.info("✅ All database tables created successfully.")
    except Exception as e:
        logger.error(f"❌ Failed to create tables: {e}")
        raise


# ============================================================
# ✅ Dependency: FastAPI session generator
# ============================================================
def get_session() -> Generator[Session, None, None]:
    """
    Provides a SQLModel Session to FastAPI dependencies.
    Closes automatically after request completes.
    """
    with Session(engine) as session:
        yield session
