"""
Analysis CRUD operations used by submission, polling and the API.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable, List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from flowgate.constants import FAILED_JOB_NUMBER, JOB_NUMBER_SEPARATOR
from flowgate.database.models import Analysis, AnalysisServer, Module
from flowgate.logging_utils import get_logger
from flowgate.models.domain import AnalysisStatus, TERMINAL_STATUSES

logger = get_logger(__name__)


def create_analysis(
    db: Session,
    module: Module,
    analysis_name: str,
    job_number: str,
    analysis_status: AnalysisStatus,
    analysis_description: Optional[str] = None,
    experiment_id: Optional[int] = None,
    user_name: Optional[str] = None,
    commit: bool = True,
) -> Analysis:
    """Create a new analysis row for a submitted job."""
    analysis = Analysis(
        module=module,
        module_id=module.id,
        analysis_name=analysis_name,
        analysis_description=analysis_description,
        job_number=job_number,
        analysis_status=int(analysis_status),
        experiment_id=experiment_id,
        user_name=user_name,
    )
    db.add(analysis)

    if commit:
        db.commit()
        db.refresh(analysis)
        logger.info(
            "[CRUD][ANALYSIS] Created analysis: %s (ID: %s, job: %s)",
            analysis.analysis_name,
            analysis.id,
            analysis.job_number,
        )

    return analysis


def get_analysis(db: Session, analysis_id: int) -> Optional[Analysis]:
    return db.query(Analysis).filter(Analysis.id == analysis_id).first()


def get_server(db: Session, server_id: int) -> Optional[AnalysisServer]:
    return db.query(AnalysisServer).filter(AnalysisServer.id == server_id).first()


def get_module(db: Session, module_id: int) -> Optional[Module]:
    return db.query(Module).filter(Module.id == module_id).first()


def find_by_job_number(db: Session, job_number: str) -> Optional[Analysis]:
    """Analysis whose job number is job_number or lists it among comma-joined ids."""
    job_number = str(job_number).strip()
    sep = JOB_NUMBER_SEPARATOR
    candidates = (
        db.query(Analysis)
        .filter(
            or_(
                Analysis.job_number == job_number,
                Analysis.job_number.like(f"{job_number}{sep}%"),
                Analysis.job_number.like(f"%{sep}{job_number}"),
                Analysis.job_number.like(f"%{sep}{job_number}{sep}%"),
            )
        )
        .order_by(Analysis.id)
        .all()
    )
    for analysis in candidates:
        if job_number in analysis.job_numbers():
            return analysis
    return None


def get_unfinished_analyses(db: Session, experiment_id: Optional[int] = None) -> List[Analysis]:
    """Submitted analyses whose status can still change on the remote server."""
    query = db.query(Analysis).filter(
        Analysis.analysis_status.notin_([int(s) for s in TERMINAL_STATUSES]),
        Analysis.job_number.isnot(None),
        Analysis.job_number != FAILED_JOB_NUMBER,
    )
    if experiment_id is not None:
        query = query.filter(Analysis.experiment_id == experiment_id)
    return query.order_by(Analysis.id).all()


def set_status(db: Session, analysis: Analysis, status: AnalysisStatus, commit: bool = True) -> Analysis:
    """Store a new status; terminal states stamp date_completed."""
    previous = analysis.analysis_status
    analysis.analysis_status = int(status)
    analysis.timestamp = datetime.now(timezone.utc)
    if AnalysisStatus(status).is_terminal and analysis.date_completed is None:
        analysis.date_completed = analysis.timestamp
    db.add(analysis)
    if commit:
        db.commit()
    if previous != int(status):
        logger.info(
            "[CRUD][ANALYSIS] %s (job %s) status %s -> %s",
            analysis.id,
            analysis.job_number,
            previous,
            int(status),
        )
    return analysis


def mark_deleted(db: Session, analysis: Analysis) -> Analysis:
    """Soft delete: the row stays, hidden from listings and polling."""
    return set_status(db, analysis, AnalysisStatus.DELETED)


def periodic_check_needed(db: Session, job_numbers: Iterable[str]) -> bool:
    """True while any positive job number belongs to an analysis not yet finished."""
    for job_number in job_numbers:
        try:
            if int(str(job_number)) <= 0:
                continue
        except ValueError:
            # Galaxy invocation ids are not numeric; they are always live ids
            pass
        analysis = find_by_job_number(db, str(job_number))
        if analysis is not None and analysis.analysis_status != AnalysisStatus.FINISHED:
            return True
    return False
