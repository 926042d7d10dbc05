"""
Analysis endpoints: row lookup, status refresh, soft delete, remote job
result, report and output file download.
"""

from __future__ import annotations

from pathlib import PurePosixPath
from typing import Any, Dict, Optional, Tuple

import httpx
from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session

from flowgate.api.dependencies import get_analysis_or_404, get_database_session
from flowgate.api.schemas import AnalysisResponse
from flowgate.client import APIError, GalaxyClient, client_for_server
from flowgate.database.crud import mark_deleted
from flowgate.database.models import Analysis
from flowgate.logging_utils import get_logger
from flowgate.services.status import download_output_file, download_result_report, refresh_analysis

logger = get_logger(__name__)

router = APIRouter()


def _file_response(file: Optional[Tuple[str, bytes]], download: bool) -> Response:
    if file is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No result file found to download!")

    path, content = file
    if download:
        return Response(
            content=content,
            media_type="application/octet-stream",
            headers={"Content-Disposition": f'attachment; filename="{PurePosixPath(path).name}"'},
        )
    return Response(content=content, media_type="text/html")


@router.get("/{analysis_id}", response_model=AnalysisResponse)
def read_analysis(analysis: Analysis = Depends(get_analysis_or_404)) -> Analysis:
    return analysis


@router.post("/{analysis_id}/refresh", response_model=AnalysisResponse)
def refresh(
    analysis: Analysis = Depends(get_analysis_or_404),
    db: Session = Depends(get_database_session),
) -> Analysis:
    refresh_analysis(db, analysis)
    return analysis


@router.delete("/{analysis_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_analysis(
    analysis: Analysis = Depends(get_analysis_or_404),
    db: Session = Depends(get_database_session),
) -> Response:
    mark_deleted(db, analysis)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{analysis_id}/result")
def job_result(analysis: Analysis = Depends(get_analysis_or_404)) -> Dict[str, Any]:
    if analysis.is_failed_on_submit() or not analysis.job_numbers():
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Analysis has no remote job")

    job_id = analysis.job_numbers()[0]
    try:
        with client_for_server(analysis.module.server) as client:
            if isinstance(client, GalaxyClient):
                return client.show_invocation(analysis.module.name, job_id).model_dump()
            return client.job_result(job_id).model_dump(by_alias=True)
    except (APIError, httpx.HTTPError) as e:
        logger.error("No job result for analysis %s (maybe deleted on server): %s", analysis.id, e)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))


@router.get("/{analysis_id}/report")
def result_report(
    download: bool = Query(False, description="Send as attachment instead of inline HTML"),
    analysis: Analysis = Depends(get_analysis_or_404),
) -> Response:
    try:
        with client_for_server(analysis.module.server) as client:
            report = download_result_report(client, analysis)
    except (APIError, httpx.HTTPError) as e:
        logger.error("Report download failed for analysis %s: %s", analysis.id, e)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))

    return _file_response(report, download)


@router.get("/{analysis_id}/outputs")
def output_file(
    path: str = Query(..., description="Job output file path, or Galaxy dataset id"),
    download: bool = Query(False, description="Send as attachment instead of inline HTML"),
    analysis: Analysis = Depends(get_analysis_or_404),
) -> Response:
    try:
        with client_for_server(analysis.module.server) as client:
            file = download_output_file(client, analysis, path)
    except (APIError, httpx.HTTPError) as e:
        logger.error("Output file %s download failed for analysis %s: %s", path, analysis.id, e)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))

    return _file_response(file, download)
