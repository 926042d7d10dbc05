"""
Pydantic response schemas for the API.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict


class StatusMessage(BaseModel):
    msg: str


class AnalysisResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    module_id: int
    experiment_id: Optional[int] = None
    user_name: Optional[str] = None
    analysis_name: str
    analysis_description: Optional[str] = None
    job_number: Optional[str] = None
    analysis_status: int
    render_result: Optional[str] = None
    date_created: Optional[datetime] = None
    date_completed: Optional[datetime] = None


class RemoteModule(BaseModel):
    """A GenePattern task or Galaxy workflow offered by a server."""
    name: str
    lsid: Optional[str] = None
    description: Optional[str] = None
    extra: Dict[str, Any] = {}


class WorkflowInputResponse(BaseModel):
    name: Optional[str] = None
    value: Optional[str] = None
    order: int


class RemoteModuleList(BaseModel):
    server_id: int
    modules: List[RemoteModule]
