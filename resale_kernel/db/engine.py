"""
Module: resale_kernel.db.engine
Responsibility: Owns the process-wide SQLAlchemy engine and session factory,
    and the commit-or-rollback ``session_scope``.
Architecture position: Kernel > DB.  May import from db/base.py; imports
    the models package only inside create_tables/drop_tables so the metadata
    is complete.

Invariants enforced:
    - One engine per process.  Re-initializing disposes the previous engine
      before replacing it.
    - ``sqlite://`` (in-memory) runs on a single shared connection so every
      session sees the same database; file SQLite allows cross-thread use.
    - Any other URL (PostgreSQL) gets a pre-pinged QueuePool at
      READ COMMITTED.
    - Sessions keep loaded attributes after commit (expire_on_commit=False);
      services hand out frozen snapshots, not live rows.

Failure modes:
    - RuntimeError from get_engine/get_session/session_scope before
      init_engine_from_url().
    - Errors inside session_scope() roll back, are logged and re-raised.
"""

import atexit
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.engine import URL, Engine, make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import QueuePool, StaticPool

from resale_kernel.logging_config import configure_logging, get_logger

logger = get_logger("db.engine")

_engine: Engine | None = None
_SessionFactory: sessionmaker[Session] | None = None


def _engine_options(url: URL, pool_size: int, max_overflow: int) -> dict[str, Any]:
    if url.get_backend_name() == "sqlite":
        options: dict[str, Any] = {"connect_args": {"check_same_thread": False}}
        if url.database in (None, "", ":memory:"):
            options["poolclass"] = StaticPool
        return options
    return {
        "poolclass": QueuePool,
        "pool_size": pool_size,
        "max_overflow": max_overflow,
        "pool_pre_ping": True,
        "isolation_level": "READ COMMITTED",
    }


def init_engine_from_url(
    database_url: str,
    echo: bool = False,
    pool_size: int = 5,
    max_overflow: int = 10,
) -> Engine:
    """
    Create the engine for ``database_url`` and make it current.

    Args:
        database_url: ``sqlite:///resale.db``, ``sqlite://`` or a
            ``postgresql+psycopg://`` URL.
        echo: Log every SQL statement.
        pool_size: Pooled connections (PostgreSQL only).
        max_overflow: Connections beyond pool_size (PostgreSQL only).
    """
    global _engine, _SessionFactory

    reset_engine()
    url = make_url(database_url)
    _engine = create_engine(url, echo=echo, **_engine_options(url, pool_size, max_overflow))
    _SessionFactory = sessionmaker(bind=_engine, expire_on_commit=False)

    configure_logging()
    logger.info("engine_initialized", extra={
        "dialect": url.get_backend_name(),
        "database": url.database,
        "echo": echo,
    })
    return _engine


def get_engine() -> Engine:
    if _engine is None:
        raise RuntimeError("Engine not initialized. Call init_engine_from_url() first.")
    return _engine


def get_session() -> Session:
    """A new session bound to the current engine. The caller closes it."""
    if _SessionFactory is None:
        raise RuntimeError("Engine not initialized. Call init_engine_from_url() first.")
    return _SessionFactory()


@contextmanager
def session_scope() -> Iterator[Session]:
    """
    Commit on normal exit, roll back and re-raise on error; always close.

    Usage:
        with session_scope() as session:
            LandedCostService(session).recalculate_all()
    """
    session = get_session()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        logger.warning("transaction_rolled_back", exc_info=True)
        raise
    finally:
        session.close()


def create_tables() -> None:
    """Create every table in resale_kernel.models (existing tables are kept)."""
    from resale_kernel.db.base import Base
    import resale_kernel.models  # noqa: F401

    Base.metadata.create_all(get_engine())
    logger.info("tables_created", extra={"tables": sorted(Base.metadata.tables)})


def drop_tables() -> None:
    """Drop every table. Tests and local resets only."""
    from resale_kernel.db.base import Base
    import resale_kernel.models  # noqa: F401

    Base.metadata.drop_all(get_engine())
    logger.info("tables_dropped")


def reset_engine() -> None:
    """Dispose the current engine, if any, and forget the session factory."""
    global _engine, _SessionFactory

    if _engine is not None:
        _engine.dispose()
    _engine = None
    _SessionFactory = None


atexit.register(reset_engine)
