"""
SQLAlchemy engine and session. Supports PostgreSQL and SQLite (for local runs without Docker).
Sync usage; one session per request via get_db.
"""
import logging
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, declarative_base

from navigator.config import settings

logger = logging.getLogger(__name__)

_is_sqlite = "sqlite" in settings.database_url
_connect_args = {"check_same_thread": False} if _is_sqlite else {}
engine = create_engine(
    settings.database_url,
    pool_pre_ping=not _is_sqlite,
    connect_args=_connect_args,
    echo=False,  # Set True for SQL logging during development
)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def enable_sqlite_foreign_keys(bind) -> None:
    """SQLite ignores ON DELETE CASCADE unless PRAGMA foreign_keys is on for each connection."""

    @event.listens_for(bind, "connect")
    def _set_pragma(dbapi_connection, _record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


if _is_sqlite:
    enable_sqlite_foreign_keys(engine)


def init_sqlite_db(bind=None):
    """When using SQLite: create tables. Call once at app startup; PostgreSQL goes through Alembic."""
    bind = bind or engine
    if bind.dialect.name != "sqlite":
        return
    # Import all models so they register with Base before create_all
    from navigator.models import user, organization, module, article, form, form_response, file  # noqa: F401
    Base.metadata.create_all(bind=bind)
    logger.info("SQLite schema ready (%s tables)", len(Base.metadata.tables))


def get_db():
    """Dependency: yield a DB session, close after request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
