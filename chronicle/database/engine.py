"""
chronicle.database.engine — Database Connection & Session Helper
=================================================================

The import job is a single-threaded batch run, so everything here is plain
synchronous SQLAlchemy.  The engine URL comes from ``DATABASE_URL`` (loaded
from ``.env`` by the CLI); SQLite is the default target, matching the
portable dump the project publishes.

Usage::

    from chronicle.database.engine import create_db_engine, init_db, get_session

    engine = create_db_engine()          # reads DATABASE_URL from .env
    init_db(engine)                      # CREATE TABLE IF NOT EXISTS …

    with get_session(engine) as session:
        session.add(User(id="1234"))
"""

from __future__ import annotations

import logging
import os
from contextlib import contextmanager

from sqlalchemy import Engine, create_engine, event
from sqlalchemy.orm import Session

from chronicle.database.models import Base

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Engine creation
# ---------------------------------------------------------------------------
def create_db_engine(url: str | None = None) -> Engine:
    """Build a SQLAlchemy :class:`Engine`.

    Parameters
    ----------
    url:
        Explicit database URL.  Falls back to the ``DATABASE_URL`` env var.

    Raises
    ------
    RuntimeError
        If neither *url* nor ``DATABASE_URL`` is set.
    """
    url = url or os.getenv("DATABASE_URL")
    if not url:
        raise RuntimeError(
            "DATABASE_URL is not set.  "
            "Copy .env.example → .env and set a database URL "
            "(e.g. sqlite:///main.db)."
        )

    engine = create_engine(url, echo=False)  # Set echo=True for SQL debugging

    if engine.dialect.name == "sqlite":
        @event.listens_for(engine, "connect")
        def _set_sqlite_pragma(dbapi_connection, _connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    logger.info("Database engine created → %s", engine.url.render_as_string(hide_password=True))
    return engine


# ---------------------------------------------------------------------------
# Schema initialization
# ---------------------------------------------------------------------------
def init_db(engine: Engine) -> None:
    """Create all tables defined in :mod:`chronicle.database.models`.

    Safe to call on every run — ``CREATE TABLE IF NOT EXISTS`` under the hood.

    .. note::

        Long-lived databases can be managed by Alembic instead
        (``alembic upgrade head``).  ``create_all`` keeps throwaway SQLite
        rebuilds and tests working without a migration step.
    """
    Base.metadata.create_all(engine)
    logger.info("Database tables verified / created.")


def reset_db(engine: Engine) -> None:
    """Drop and recreate every table.  Used by ``python -m chronicle reset``."""
    Base.metadata.drop_all(engine)
    Base.metadata.create_all(engine)
    logger.warning("Database reset — all tables dropped and recreated.")


# ---------------------------------------------------------------------------
# Session helper
# ---------------------------------------------------------------------------
@contextmanager
def get_session(engine: Engine):
    """Yield a :class:`Session` that auto-commits on success and rolls back
    on exception.

    Usage::

        with get_session(engine) as session:
            session.add(Item(name="Egg Launcher"))
            # commit happens automatically on block exit
    """
    session = Session(engine)
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
