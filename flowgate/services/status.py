"""
Polling of remote job status and its mapping onto Analysis status codes.

Both platforms are polled through the clients' get_job_status(job_id,
module_name); an analysis with several comma-joined job ids gets the
aggregate state of its jobs.
"""

from __future__ import annotations

from typing import Dict, Iterable, Optional, Tuple

from sqlalchemy.orm import Session
from tenacity import Retrying, retry_if_result, stop_after_delay, wait_fixed

from flowgate.client import AnalysisClient, client_for_server
from flowgate.client.galaxy import GalaxyClient
from flowgate.client.genepattern import GenePatternClient
from flowgate.client.schemas import GPJobResult, GPOutputFile, JobState, JobStatusReport
from flowgate.config import get_config
from flowgate.database.crud import find_by_job_number, get_unfinished_analyses, set_status
from flowgate.database.models import Analysis
from flowgate.logging_utils import get_logger
from flowgate.models.domain import AnalysisStatus

logger = get_logger(__name__)

FINISHED_CALLBACK_STATUS = "Finished"


def to_analysis_status(state: JobState) -> AnalysisStatus:
    if state == JobState.FINISHED:
        return AnalysisStatus.FINISHED
    if state == JobState.FAILED:
        return AnalysisStatus.FAILED
    return AnalysisStatus.PENDING


def aggregate_states(states: Iterable[JobState]) -> JobState:
    states = list(states)
    if not states:
        return JobState.PENDING
    if JobState.FAILED in states:
        return JobState.FAILED
    if all(s == JobState.FINISHED for s in states):
        return JobState.FINISHED
    if JobState.RUNNING in states:
        return JobState.RUNNING
    return JobState.PENDING


def find_report_output(result: GPJobResult, render_result: Optional[str]) -> Optional[GPOutputFile]:
    if not render_result:
        return None
    return result.output_file(render_result)


def poll_analysis(client: AnalysisClient, analysis: Analysis) -> AnalysisStatus:
    """Current status of the analysis on its remote server (no database writes)."""
    module_name = analysis.module.name if analysis.module is not None else None
    reports = [client.get_job_status(job_id, module_name) for job_id in analysis.job_numbers()]
    status = to_analysis_status(aggregate_states(r.state for r in reports))

    if status == AnalysisStatus.FINISHED and isinstance(client, GenePatternClient) and analysis.render_result:
        for job_id in analysis.job_numbers():
            if find_report_output(client.job_result(job_id), analysis.render_result) is None:
                logger.warning(
                    "Job %s finished without report file %s", job_id, analysis.render_result
                )
                return AnalysisStatus.REPORT_FILE_MISSING
    return status


def refresh_analysis(db: Session, analysis: Analysis, client: Optional[AnalysisClient] = None) -> AnalysisStatus:
    """
    Poll one analysis and store its status.

    Remote errors are logged and leave the stored status unchanged.
    """
    current = AnalysisStatus(analysis.analysis_status)
    if current == AnalysisStatus.DELETED:
        return current
    if analysis.is_failed_on_submit() or not analysis.job_numbers():
        return current

    own_client = client is None
    try:
        if client is None:
            client = client_for_server(analysis.module.server)
        status = poll_analysis(client, analysis)
    except Exception as e:
        logger.error("Could not poll analysis %s (job %s): %s", analysis.id, analysis.job_number, e)
        return current
    finally:
        if own_client and client is not None:
            client.close()

    if status != current:
        set_status(db, analysis, status)
    return status


def refresh_unfinished(db: Session, experiment_id: Optional[int] = None) -> Dict[str, int]:
    """Poll every unfinished analysis once, one client per server."""
    clients: Dict[int, AnalysisClient] = {}
    summary = {"checked": 0, "updated": 0, "errors": 0}
    try:
        for analysis in get_unfinished_analyses(db, experiment_id=experiment_id):
            summary["checked"] += 1
            analysis_id = analysis.id
            try:
                server = analysis.module.server
                if server.id not in clients:
                    clients[server.id] = client_for_server(server)
                before = analysis.analysis_status
                after = refresh_analysis(db, analysis, client=clients[server.id])
                if int(after) != before:
                    summary["updated"] += 1
            except Exception as e:
                db.rollback()
                summary["errors"] += 1
                logger.error("Skipping analysis %s: %s", analysis_id, e)
    finally:
        for client in clients.values():
            client.close()
    return summary


def apply_status_callback(db: Session, job_id: str, status: Optional[str]) -> Optional[Analysis]:
    """
    Status pushed by the remote server for job_id.

    Only positive numeric job ids are considered; the analysis becomes
    FINISHED when status is "Finished" and PENDING otherwise.
    """
    try:
        if int(job_id) <= 0:
            return None
    except (TypeError, ValueError):
        return None

    analysis = find_by_job_number(db, str(int(job_id)))
    if analysis is None:
        logger.warning("Status callback for unknown job %s", job_id)
        return None

    completed = status == FINISHED_CALLBACK_STATUS
    set_status(db, analysis, AnalysisStatus.FINISHED if completed else AnalysisStatus.PENDING)
    return analysis


def wait_for_completion(
    client: AnalysisClient,
    job_id: str,
    module_name: Optional[str] = None,
    interval: Optional[float] = None,
    timeout: Optional[float] = None,
) -> JobStatusReport:
    """
    Block until the job reaches a terminal state or timeout elapses.

    Returns the last report either way; transport errors propagate.
    """
    cfg = get_config().polling
    retrying = Retrying(
        retry=retry_if_result(lambda report: not report.state.is_terminal),
        wait=wait_fixed(cfg.interval_seconds if interval is None else interval),
        stop=stop_after_delay(cfg.timeout_seconds if timeout is None else timeout),
        retry_error_callback=lambda retry_state: retry_state.outcome.result(),
    )
    return retrying(client.get_job_status, job_id, module_name)


def download_result_report(client: AnalysisClient, analysis: Analysis) -> Optional[Tuple[str, bytes]]:
    """(path, content) of the analysis report file, or None when there is none."""
    if not isinstance(client, GenePatternClient) or analysis.is_failed_on_submit():
        return None
    for job_id in analysis.job_numbers():
        output = find_report_output(client.job_result(job_id), analysis.render_result)
        if output is not None:
            return output.path, client.download_output(output.link.href)
    return None


def download_output_file(client: AnalysisClient, analysis: Analysis, path: str) -> Optional[Tuple[str, bytes]]:
    """
    (path, content) of one output file of the analysis, or None when absent.

    For GenePattern path is the output file path within a job result; for
    Galaxy it is the dataset id in the FlowGate history.
    """
    if analysis.is_failed_on_submit() or not path:
        return None
    if isinstance(client, GalaxyClient):
        return path, client.download_dataset(path)
    for job_id in analysis.job_numbers():
        output = client.job_result(job_id).output_file(path)
        if output is not None:
            return output.path, client.download_output(output.link.href)
    return None
