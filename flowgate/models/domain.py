"""
Domain models for analysis submission.

Projects, experiments, datasets and their files are owned by the portal's
CRUD layer; the job glue only reads them, so they are plain dataclasses here.
Status and platform codes are the integers stored in the relational tables.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import List, Optional


# ============================================================================
# Enums
# ============================================================================


class Platform(IntEnum):
    """Remote analysis platform of an AnalysisServer."""
    GENEPATTERN = 1
    GALAXY = 2


class AnalysisStatus(IntEnum):
    """Analysis status codes as stored in analysis.analysis_status."""
    DELETED = -2
    FAILED = -1
    INIT = 1
    PENDING = 2
    FINISHED = 3
    REPORT_FILE_MISSING = 4

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES = frozenset(
    {
        AnalysisStatus.DELETED,
        AnalysisStatus.FAILED,
        AnalysisStatus.FINISHED,
        AnalysisStatus.REPORT_FILE_MISSING,
    }
)


class ParamType(str, Enum):
    """ModuleParam.p_type values that need special handling on submit."""
    DATASET = "ds"
    DIRECTORY = "dir"
    FILE = "file"
    METADATA = "meta"
    FIELD = "field"


# ============================================================================
# Portal entities
# ============================================================================


@dataclass
class Project:
    id: int
    title: str


@dataclass
class Experiment:
    id: int
    title: str
    project: Project


@dataclass
class ExpFileMetadata:
    md_key: str
    md_val: Optional[str] = None
    disp_order: Optional[int] = None


@dataclass
class ExpFile:
    """
    An uploaded FCS file.

    file_path carries its trailing separator; the local file is
    file_path + file_name.
    """
    id: int
    file_name: str
    file_path: str
    metadata: List[ExpFileMetadata] = field(default_factory=list)

    @property
    def local_path(self) -> str:
        return self.file_path + self.file_name

    def metadata_value(self, key: str) -> Optional[str]:
        for md in self.metadata:
            if md.md_key == key:
                return md.md_val
        return None


@dataclass
class Dataset:
    id: int
    name: str
    description: Optional[str] = None
    exp_files: List[ExpFile] = field(default_factory=list)
