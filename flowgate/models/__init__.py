"""
Domain models shared by the clients and services.
"""

from flowgate.models.domain import (
    AnalysisStatus,
    Dataset,
    ExpFile,
    ExpFileMetadata,
    Experiment,
    ParamType,
    Platform,
    Project,
    TERMINAL_STATUSES,
)

__all__ = [
    "AnalysisStatus",
    "Dataset",
    "ExpFile",
    "ExpFileMetadata",
    "Experiment",
    "ParamType",
    "Platform",
    "Project",
    "TERMINAL_STATUSES",
]
