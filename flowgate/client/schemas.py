"""
Typed request/response structures for the GenePattern and Galaxy REST APIs.

Field aliases follow the remote JSON; Python code uses the snake_case names.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class _RemoteModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore", coerce_numbers_to_str=True)


# ============================================================================
# Uniform polling
# ============================================================================


class JobState(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    FINISHED = "finished"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (JobState.FINISHED, JobState.FAILED)


class JobStatusReport(BaseModel):
    """Platform-neutral view of one remote job."""
    job_id: str
    state: JobState
    detail: Optional[str] = None


# ============================================================================
# GenePattern
# ============================================================================


class JobParam(_RemoteModel):
    """One GenePattern job input: a parameter name and its values."""
    name: str
    values: List[str] = Field(default_factory=list)


class GPTask(_RemoteModel):
    lsid: str = ""
    name: Optional[str] = None
    description: Optional[str] = None
    params: List[Dict[str, Any]] = Field(default_factory=list)


class GPJobStatus(_RemoteModel):
    is_finished: bool = Field(False, alias="isFinished")
    is_pending: bool = Field(False, alias="isPending")
    has_error: bool = Field(False, alias="hasError")
    execution_log_location: Optional[str] = Field(None, alias="executionLogLocation")
    status_date: Optional[str] = Field(None, alias="statusDate")


class GPLink(_RemoteModel):
    href: str
    name: Optional[str] = None


class GPOutputFile(_RemoteModel):
    path: str
    link: GPLink
    file_length: Optional[int] = Field(None, alias="fileLength")


class GPJobResult(_RemoteModel):
    job_id: str = Field(alias="jobId")
    task_name: Optional[str] = Field(None, alias="taskName")
    task_lsid: Optional[str] = Field(None, alias="taskLsid")
    status: GPJobStatus = Field(default_factory=GPJobStatus)
    output_files: List[GPOutputFile] = Field(default_factory=list, alias="outputFiles")

    def output_file(self, path: str) -> Optional[GPOutputFile]:
        for output in self.output_files:
            if output.path == path:
                return output
        return None


class SubmitResult(BaseModel):
    status_code: int
    job_id: Optional[str] = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300 and bool(self.job_id)


class UploadResult(BaseModel):
    code: int
    location: str = ""


# ============================================================================
# Galaxy
# ============================================================================


class GalaxyLibrary(_RemoteModel):
    id: str
    name: str
    description: Optional[str] = None


class LibraryContent(_RemoteModel):
    id: str
    name: str
    type: Optional[str] = None


class LibraryFolder(_RemoteModel):
    id: str
    name: str
    description: Optional[str] = None


class LibraryUpload(_RemoteModel):
    id: str
    name: str


class GalaxyWorkflow(_RemoteModel):
    id: str
    name: str
    owner: Optional[str] = None


class WorkflowInput(BaseModel):
    """A workflow input as offered to module parameter setup."""
    name: Optional[str] = None
    value: Optional[str] = None
    order: int


class WorkflowOutputs(_RemoteModel):
    id: str
    history_id: Optional[str] = Field(None, validation_alias=AliasChoices("history_id", "history"))
    output_ids: List[str] = Field(default_factory=list, validation_alias=AliasChoices("output_ids", "outputs"))

    @field_validator("output_ids", mode="before")
    @classmethod
    def _flatten_outputs(cls, value: Any) -> List[str]:
        # older servers return a list of ids, newer ones a {label: {"id": ...}} map
        if isinstance(value, dict):
            return [str(v.get("id")) if isinstance(v, dict) else str(v) for v in value.values()]
        return [str(v) for v in value or []]


class InvocationStep(_RemoteModel):
    order_index: int = 0
    job_id: Optional[str] = None
    state: Optional[str] = None


class WorkflowInvocation(_RemoteModel):
    id: str
    state: Optional[str] = None
    steps: List[InvocationStep] = Field(default_factory=list)


class JobDetails(_RemoteModel):
    id: str
    state: str
    exit_code: Optional[int] = None
    tool_id: Optional[str] = None
