# app/db/session.py
# Database session management
#
# DATABASE_URL selects the backend:
#   Production → PostgreSQL via psycopg2 (row locks honoured by FOR UPDATE)
#   Local/test → SQLite is accepted (single file or in-memory)
#
# FastAPI endpoints get a session via: Depends(get_db)
# One request == one transaction: commit on success, rollback on any error.

import logging
from typing import Generator

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import make_url
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from app.core.config import settings

logger = logging.getLogger("tutorhub.db")


def _engine_options(database_url: str) -> dict:
    """Pool settings per backend -- SQLite rejects the QueuePool options."""
    url = make_url(database_url)
    if url.get_backend_name() == "sqlite":
        options = {"connect_args": {"check_same_thread": False}}
        if url.database in (None, "", ":memory:"):
            # One shared connection so every session sees the same in-memory DB
            options["poolclass"] = StaticPool
        return options

    return {
        "pool_pre_ping": True,   # test connection before each use
        "pool_size": 5,
        "max_overflow": 10,
        "pool_recycle": 1800,    # recycle connections every 30 min
    }


# ── Engine ────────────────────────────────────────────────────────────────────
engine = create_engine(
    settings.database_url,
    echo=settings.debug,
    **_engine_options(settings.database_url),
)

# SQLite only enforces ON DELETE CASCADE with the pragma switched on
if engine.dialect.name == "sqlite":

    @event.listens_for(engine, "connect")
    def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

# ── Session Factory ───────────────────────────────────────────────────────────
SessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,  # Prevents lazy load errors after commit
)


# ── FastAPI Dependency ────────────────────────────────────────────────────────
def get_db() -> Generator[Session, None, None]:
    """
    Dependency injected into every FastAPI endpoint that needs DB access.

    Usage:
        @router.get("/example")
        def example(db: Session = Depends(get_db)):
            ...

    Guarantees the session is always closed, even on exceptions.
    """
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


# ── Health Check Helper ───────────────────────────────────────────────────────
def check_db_connection() -> bool:
    """
    Used by /health endpoint to verify DB connectivity.
    Returns True if connected, False otherwise.
    """
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception as exc:
        logger.warning("Database connectivity check failed: %s", exc)
        return False
