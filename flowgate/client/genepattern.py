"""
GenePattern REST client.

Covers the endpoints FlowGate needs under /gp/rest/v1: task lookup, job
submission, input-file upload, job status/result and the module listing.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

import httpx

from flowgate.client.base import APIError, BaseHTTPClient
from flowgate.client.schemas import (
    GPJobResult,
    GPJobStatus,
    GPTask,
    JobParam,
    JobState,
    JobStatusReport,
    SubmitResult,
    UploadResult,
)
from flowgate.config import get_config
from flowgate.constants import FAILED_JOB_NUMBER
from flowgate.logging_utils import get_logger

logger = get_logger(__name__)


class GenePatternClient(BaseHTTPClient):
    """
    Example:
        with GenePatternClient("https://gp.example.org", "user", "pw") as gp:
            job_no, err = gp.get_job_no("FlowClusterPipeline", params)
    """

    def __init__(
        self,
        server_url: str,
        user_name: Optional[str] = None,
        password: Optional[str] = None,
        *,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        cfg = get_config().genepattern
        super().__init__(
            server_url,
            user_name,
            password,
            timeout=timeout if timeout is not None else cfg.timeout,
            transport=transport,
        )
        self.prefix = cfg.api_prefix

    def _path(self, suffix: str) -> str:
        return f"{self.prefix}/{suffix.lstrip('/')}"

    # ------------------------------------------------------------------
    # Tasks
    # ------------------------------------------------------------------

    def get_task(self, task_name: str) -> GPTask:
        payload = self._request("GET", self._path(f"tasks/{task_name}"))
        return GPTask.model_validate(payload if isinstance(payload, dict) else {})

    def resolve_lsid(self, task_name: str) -> str:
        """Task names starting with 'urn' are already LSIDs."""
        if task_name.startswith("urn"):
            return task_name
        try:
            return self.get_task(task_name).lsid
        except APIError as e:
            logger.warning("GenePattern task lookup failed for %s: %s", task_name, e)
            return ""

    def fetch_modules(self) -> List[Dict[str, Any]]:
        """All modules installed on the server (tasks/all.json)."""
        try:
            resp = self._raw("GET", self._path("tasks/all.json"))
        except httpx.HTTPError as e:
            raise RuntimeError(str(e.__cause__ or e)) from e
        if resp.status_code >= 300:
            raise APIError(status_code=resp.status_code, message="Could not list modules", response_text=resp.text)
        try:
            data = resp.json()
        except ValueError as e:
            raise APIError(status_code=resp.status_code, message="Module listing is not JSON", response_text=resp.text) from e
        modules = data.get("all_modules", []) if isinstance(data, dict) else None
        if not isinstance(modules, list) or not all(isinstance(m, dict) for m in modules):
            raise APIError(status_code=resp.status_code, message="Unexpected module listing", response_text=resp.text)
        return modules

    # ------------------------------------------------------------------
    # Jobs
    # ------------------------------------------------------------------

    def submit_job(self, task_name: str, params: Sequence[JobParam]) -> SubmitResult:
        lsid = self.resolve_lsid(task_name)
        if lsid == "":
            return SubmitResult(status_code=405, message="E: task not found!")

        resp = self._raw(
            "POST",
            self._path("jobs"),
            json={"lsid": lsid, "params": [p.model_dump() for p in params]},
        )
        body: Dict[str, Any] = {}
        try:
            data = resp.json()
            if isinstance(data, dict):
                body = data
        except ValueError:
            pass
        job_id = body.get("jobId")
        return SubmitResult(
            status_code=resp.status_code,
            job_id=str(job_id) if job_id is not None else None,
            message=str(body.get("err_msg") or body.get("message") or ""),
        )

    def get_job_no(self, task_name: str, params: Sequence[JobParam]) -> Tuple[str, str]:
        """Submit and return (job_number, error_message); job_number is "-1" on failure."""
        job_number = FAILED_JOB_NUMBER
        error_message = ""
        try:
            result = self.submit_job(task_name, params)
            if result.ok:
                job_number = str(result.job_id)
            else:
                error_message = result.message or f"HTTP {result.status_code}"
        except Exception as e:
            logger.error("GenePattern submission of %s failed: %s", task_name, e)
            error_message = str(e)
        return job_number, error_message

    def job_result(self, job_id: str) -> GPJobResult:
        payload = self._request("GET", self._path(f"jobs/{job_id}"))
        return GPJobResult.model_validate(payload)

    def job_status(self, job_id: str) -> GPJobStatus:
        payload = self._request("GET", self._path(f"jobs/{job_id}/status.json"))
        return GPJobStatus.model_validate(payload or {})

    def is_complete(self, job_id: str) -> bool:
        return self.job_result(job_id).status.is_finished

    def is_pending(self, job_id: str) -> bool:
        return self.job_status(job_id).is_pending

    def get_job_status(self, job_id: str, module_name: Optional[str] = None) -> JobStatusReport:
        status = self.job_status(job_id)
        if status.is_finished:
            state = JobState.FAILED if status.has_error else JobState.FINISHED
        elif status.is_pending:
            state = JobState.PENDING
        else:
            state = JobState.RUNNING
        return JobStatusReport(job_id=str(job_id), state=state, detail=status.execution_log_location)

    # ------------------------------------------------------------------
    # Files
    # ------------------------------------------------------------------

    def upload_file(self, path: Union[str, Path], name: str) -> UploadResult:
        """Upload one job input file; location is the server-side URL of the upload."""
        try:
            resp = self._raw(
                "POST",
                self._path("data/upload/job_input"),
                params={"name": name},
                content=Path(path).read_bytes(),
                headers={"Content-Type": "application/octet-stream"},
            )
        except (OSError, httpx.HTTPError) as e:
            logger.error("Error uploading file %s: %s", name, e)
            return UploadResult(code=500)

        if not (201 <= resp.status_code < 300):
            logger.error("Error uploading file %s: HTTP %s", name, resp.status_code)
            return UploadResult(code=resp.status_code)
        return UploadResult(code=200, location=resp.text.strip())

    def upload_file_or_dir_params(self, path: Union[str, Path], name: str) -> List[str]:
        """Locations to pass as parameter values; empty when nothing was uploaded."""
        locations: List[str] = []
        if Path(path).is_file():
            result = self.upload_file(path, name)
            if result.code != 200:
                logger.error("Error uploading file %s, parameter left empty", name)
                return locations
            locations.append(result.location)
        return locations

    def download_output(self, href: str) -> bytes:
        """Fetch an output file link (absolute job-result URL) with this client's auth."""
        resp = self._raw("GET", href)
        if resp.status_code >= 300:
            raise APIError(status_code=resp.status_code, message=f"Could not download {href}", response_text=resp.text)
        return resp.content
