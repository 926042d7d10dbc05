"""
Galaxy (ImmPortGalaxy) REST client.

Libraries hold the uploaded FCS files in /<project>/<experiment> folders,
workflows are run into the shared FlowGate history, and invocation steps are
inspected to find the job whose state decides the analysis status.
"""

from __future__ import annotations

import uuid
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

import httpx

from flowgate.client.base import APIError, BaseHTTPClient
from flowgate.client.schemas import (
    GalaxyLibrary,
    GalaxyWorkflow,
    JobDetails,
    JobState,
    JobStatusReport,
    LibraryContent,
    LibraryFolder,
    LibraryUpload,
    WorkflowInput,
    WorkflowInvocation,
    WorkflowOutputs,
)
from flowgate.config import get_config
from flowgate.logging_utils import get_logger

logger = get_logger(__name__)

_FINISHED_STATES = {"ok"}
_FAILED_STATES = {"error", "failed", "deleted"}
_RUNNING_STATES = {"running"}


def library_file_name(file_name: str) -> str:
    """
    Name under which a file is stored in the library.

    FCS files keep their name; anything else (metadata sheets, descriptions)
    gets a random suffix so repeated submissions do not collide.
    """
    if file_name.endswith(".fcs"):
        return file_name
    stem, dot, ext = file_name.rpartition(".")
    if not dot:
        return f"{file_name}-{uuid.uuid4()}"
    return f"{stem}-{uuid.uuid4()}.{ext}"


class GalaxyClient(BaseHTTPClient):
    """
    Galaxy API client authenticated either with an API key or with the
    stored user name/password (exchanged for a key via baseauth).
    """

    def __init__(
        self,
        server_url: str,
        user_name: Optional[str] = None,
        password: Optional[str] = None,
        *,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        cfg = get_config().galaxy
        super().__init__(
            server_url,
            user_name,
            password,
            timeout=timeout if timeout is not None else cfg.timeout,
            transport=transport,
        )
        self._api_key = api_key

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------

    @property
    def api_key(self) -> str:
        if not self._api_key:
            payload = self._request("GET", "/api/authenticate/baseauth")
            key = (payload or {}).get("api_key") if isinstance(payload, dict) else None
            if not key:
                raise APIError(status_code=401, message="Galaxy did not return an API key")
            self._api_key = str(key)
        return self._api_key

    def _call(self, method: str, path: str, **kwargs: Any) -> Any:
        headers = dict(kwargs.pop("headers", None) or {})
        headers["x-api-key"] = self.api_key
        return self._request(method, path, headers=headers, **kwargs)

    # ------------------------------------------------------------------
    # Libraries
    # ------------------------------------------------------------------

    def get_libraries(self) -> List[GalaxyLibrary]:
        return [GalaxyLibrary.model_validate(item) for item in (self._call("GET", "/api/libraries") or [])]

    def find_library(self, name: str) -> Optional[GalaxyLibrary]:
        for library in self.get_libraries():
            if library.name == name:
                return library
        return None

    def get_library_contents(self, library_id: str) -> List[LibraryContent]:
        payload = self._call("GET", f"/api/libraries/{library_id}/contents")
        return [LibraryContent.model_validate(item) for item in (payload or [])]

    def get_root_folder(self, library_id: str) -> Optional[LibraryContent]:
        for content in self.get_library_contents(library_id):
            if content.name == "/":
                return content
        return None

    def create_library_folder(
        self,
        library_id: str,
        name: str,
        description: str = "",
        parent_folder_id: Optional[str] = None,
    ) -> LibraryFolder:
        """Create a folder under parent_folder_id, or under the library root."""
        if parent_folder_id is None:
            root = self.get_root_folder(library_id)
            if root is None:
                raise APIError(status_code=404, message=f"Library {library_id} has no root folder")
            parent_folder_id = root.id

        payload = self._call(
            "POST",
            f"/api/libraries/{library_id}/contents",
            json={
                "folder_id": parent_folder_id,
                "create_type": "folder",
                "name": name,
                "description": description,
            },
        )
        created = payload[0] if isinstance(payload, list) else payload
        return LibraryFolder.model_validate(created)

    def upload_file_to_folder(
        self,
        library_id: str,
        folder_id: str,
        path: Union[str, Path],
        file_name: str,
    ) -> LibraryUpload:
        name = library_file_name(file_name)
        data = {
            "folder_id": folder_id,
            "create_type": "file",
            "upload_option": "upload_file",
            "file_type": "fcs" if file_name.endswith(".fcs") else "auto",
            "dbkey": "?",
        }
        with open(path, "rb") as fh:
            payload = self._call(
                "POST",
                f"/api/libraries/{library_id}/contents",
                data=data,
                files={"files_0|file_data": (name, fh)},
            )
        uploaded = payload[0] if isinstance(payload, list) else payload
        return LibraryUpload.model_validate(uploaded)

    # ------------------------------------------------------------------
    # Workflows
    # ------------------------------------------------------------------

    def get_workflows(self) -> List[GalaxyWorkflow]:
        return [GalaxyWorkflow.model_validate(item) for item in (self._call("GET", "/api/workflows") or [])]

    def get_workflow_inputs(self, workflow_id: str) -> List[WorkflowInput]:
        payload = self._call("GET", f"/api/workflows/{workflow_id}") or {}
        inputs: Dict[str, Dict[str, Any]] = payload.get("inputs", {})
        return [
            WorkflowInput(value=item.get("value"), name=item.get("label"), order=int(key))
            for key, item in inputs.items()
        ]

    def run_workflow(
        self,
        workflow_id: str,
        history_id: str,
        inputs: Mapping[Union[int, str], str],
    ) -> WorkflowOutputs:
        """Run a workflow into an existing history; inputs map input order -> library dataset id."""
        ds_map = {str(order): {"src": "ld", "id": ld_id} for order, ld_id in inputs.items()}
        try:
            payload = self._call(
                "POST",
                "/api/workflows",
                json={
                    "workflow_id": workflow_id,
                    "history": f"hist_id={history_id}",
                    "ds_map": ds_map,
                },
            )
        except APIError as e:
            raise RuntimeError("Workflow couldn't be created!") from e
        outputs = WorkflowOutputs.model_validate(payload)
        logger.info("Running workflow %s in history %s", workflow_id, outputs.history_id)
        for output_id in outputs.output_ids:
            logger.debug("Workflow writing to output id %s", output_id)
        return outputs

    def show_invocation(self, workflow_id: str, invocation_id: str) -> WorkflowInvocation:
        payload = self._call("GET", f"/api/workflows/{workflow_id}/invocations/{invocation_id}")
        return WorkflowInvocation.model_validate(payload)

    def show_job(self, job_id: str) -> JobDetails:
        return JobDetails.model_validate(self._call("GET", f"/api/jobs/{job_id}"))

    def get_invocation_status(self, workflow_id: str, invocation_id: str) -> Optional[JobDetails]:
        """
        Job that decides the invocation's status.

        Walks the steps in order; the first errored job wins, otherwise the
        last step's job. None while the last step has no job yet.
        """
        invocation = self.show_invocation(workflow_id, invocation_id)
        steps = sorted(invocation.steps, key=lambda s: s.order_index)
        for i, step in enumerate(steps):
            if step.job_id is None:
                continue
            job = self.show_job(step.job_id)
            if job.state == "error" or i == len(steps) - 1:
                return job
        return None

    def get_job_status(self, job_id: str, module_name: Optional[str] = None) -> JobStatusReport:
        if not module_name:
            raise ValueError("Galaxy status lookup needs the workflow id")
        job = self.get_invocation_status(module_name, job_id)
        if job is None:
            return JobStatusReport(job_id=str(job_id), state=JobState.PENDING)
        if job.state in _FINISHED_STATES:
            state = JobState.FINISHED
        elif job.state in _FAILED_STATES:
            state = JobState.FAILED
        elif job.state in _RUNNING_STATES:
            state = JobState.RUNNING
        else:
            state = JobState.PENDING
        return JobStatusReport(job_id=str(job_id), state=state, detail=job.state)

    # ------------------------------------------------------------------
    # Histories
    # ------------------------------------------------------------------

    def download_dataset(self, dataset_id: str, history_id: Optional[str] = None) -> bytes:
        history_id = history_id or get_config().galaxy.history_id
        resp = self._raw(
            "GET",
            f"/api/histories/{history_id}/contents/{dataset_id}/display",
            headers={"x-api-key": self.api_key},
        )
        if resp.status_code >= 300:
            raise APIError(status_code=resp.status_code, message=f"Could not download {dataset_id}", response_text=resp.text)
        return resp.content
