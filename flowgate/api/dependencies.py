"""
FastAPI dependencies: database session and 404-checked row lookups.
"""

from typing import Generator

from fastapi import Depends, HTTPException, status
from sqlalchemy.orm import Session

from flowgate.database.base import get_db
from flowgate.database.crud import get_analysis, get_server
from flowgate.database.models import Analysis, AnalysisServer


def get_database_session() -> Generator[Session, None, None]:
    yield from get_db()


def get_analysis_or_404(
    analysis_id: int,
    db: Session = Depends(get_database_session),
) -> Analysis:
    analysis = get_analysis(db, analysis_id)
    if analysis is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Analysis not found")
    return analysis


def get_server_or_404(
    server_id: int,
    db: Session = Depends(get_database_session),
) -> AnalysisServer:
    server = get_server(db, server_id)
    if server is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Server not found")
    return server
