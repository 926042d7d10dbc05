"""
Engine and session factory for the FlowGate tables.

The engine is created on first use from DatabaseConfig.resolved_url().
Postgres deployments use NullPool so forked Celery workers never share a
connection; SQLite files get the thread check disabled for the API's
threadpool.
"""

from __future__ import annotations

from typing import Generator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import NullPool

from flowgate.config import get_config
from flowgate.logging_utils import get_logger

logger = get_logger(__name__)

Base = declarative_base()

_engine: Optional[Engine] = None
_SessionLocal: Optional[sessionmaker] = None


def _build_engine(url: str, echo: bool) -> Engine:
    if url.startswith("sqlite"):
        return create_engine(url, echo=echo, connect_args={"check_same_thread": False})
    return create_engine(url, echo=echo, poolclass=NullPool, pool_pre_ping=True)


def get_engine() -> Engine:
    global _engine

    if _engine is None:
        db_cfg = get_config().database
        url = db_cfg.resolved_url()
        _engine = _build_engine(url, db_cfg.echo)
        logger.debug("Database engine created for %s", _engine.url.render_as_string(hide_password=True))
    return _engine


def get_session_local() -> sessionmaker:
    global _SessionLocal

    if _SessionLocal is None:
        _SessionLocal = sessionmaker(bind=get_engine(), autoflush=False, expire_on_commit=False)
    return _SessionLocal


def reset_engine() -> None:
    """Drop the cached engine and session factory (after fork or config change)."""
    global _engine, _SessionLocal

    if _engine is not None:
        _engine.dispose()
    _engine = None
    _SessionLocal = None


def get_db() -> Generator[Session, None, None]:
    """Request-scoped session; the caller commits."""
    db = get_session_local()()
    try:
        yield db
    finally:
        db.close()


def init_db() -> None:
    """Create any missing analysis_servers/modules/module_params/analyses tables."""
    from flowgate.database import models  # noqa: F401

    Base.metadata.create_all(bind=get_engine())
    logger.info("Database tables ready: %s", ", ".join(sorted(Base.metadata.tables)))
