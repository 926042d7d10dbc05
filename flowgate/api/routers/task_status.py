"""
Job-status callback endpoint.

GenePattern calls back with ?jobId=<n>&status=<text> when a job changes state.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from flowgate.api.dependencies import get_database_session
from flowgate.api.schemas import StatusMessage
from flowgate.logging_utils import get_logger
from flowgate.services.status import apply_status_callback

logger = get_logger(__name__)

router = APIRouter()


@router.get("/setStatus", response_model=StatusMessage)
def set_status(
    job_id: Optional[str] = Query(None, alias="jobId"),
    status: Optional[str] = Query(None),
    db: Session = Depends(get_database_session),
) -> StatusMessage:
    if not job_id:
        return StatusMessage(msg="got no status!")

    apply_status_callback(db, job_id, status)
    logger.info("got status! %s %s", job_id, status)
    return StatusMessage(msg=f"got status! jobId={job_id} jobStatus={status}")
