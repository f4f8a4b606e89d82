"""PostgreSQL connection, session management and schema migrations."""

import logging
from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, text
from sqlalchemy.orm import Session, sessionmaker

from app.core.config import settings

logger = logging.getLogger(__name__)

# Repository root: holds alembic.ini and the alembic/ scripts directory.
PROJECT_ROOT = Path(__file__).resolve().parents[2]

engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,
    echo=settings.DEBUG,
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def check_db_connected(db: Session) -> bool:
    """Run a trivial query to verify the database is reachable."""
    try:
        db.execute(text("SELECT 1"))
        return True
    except Exception:
        return False


def run_migrations(revision: str = "head") -> None:
    """Apply Alembic migrations up to ``revision`` (same as ``alembic upgrade head``)."""
    cfg = Config(str(PROJECT_ROOT / "alembic.ini"))
    cfg.set_main_option("script_location", str(PROJECT_ROOT / "alembic"))
    cfg.attributes["configure_logger"] = False
    logger.info("Applying database migrations up to %s", revision)
    command.upgrade(cfg, revision)
