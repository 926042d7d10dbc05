"""
Database layer for analysis servers, modules and submitted analyses.

This package provides:
- SQLAlchemy models for the tables the job glue reads and writes
- Database connection and session management
"""

from flowgate.database.base import Base, get_db, get_engine, get_session_local, init_db, reset_engine

# Import models to register them with Base
from flowgate.database import models  # noqa: F401

__all__ = [
    "Base",
    "get_db",
    "get_engine",
    "get_session_local",
    "init_db",
    "models",
    "reset_engine",
]
