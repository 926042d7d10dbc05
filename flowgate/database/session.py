"""Unit-of-work scope for scripts and Celery tasks."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.orm import Session

from flowgate.database.base import get_session_local
from flowgate.logging_utils import get_logger

logger = get_logger(__name__)


@contextmanager
def db_session(commit: bool = True) -> Iterator[Session]:
    """
    Session committed when the block exits cleanly, rolled back otherwise.

    Pass commit=False for read-only sweeps.
    """
    db = get_session_local()()
    try:
        yield db
        if commit:
            db.commit()
    except Exception:
        logger.warning("Rolling back database session")
        db.rollback()
        raise
    finally:
        db.close()
