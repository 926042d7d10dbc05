"""
Map a module's parameter schema plus the user's form input onto GenePattern
job parameters, uploading whatever files the parameters refer to.
"""

from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from flowgate.client.genepattern import GenePatternClient
from flowgate.client.schemas import JobParam
from flowgate.constants import DESCRIPTION_FILE_NAME, METADATA_FILE_NAME
from flowgate.logging_utils import get_logger
from flowgate.models.domain import Dataset, ParamType
from flowgate.services.annotation import description_file_content, metadata_file_content

logger = get_logger(__name__)


@dataclass
class UploadedFile:
    """A file the user attached to a form field; path is the local temp copy."""
    path: str
    filename: str


@dataclass
class SubmissionForm:
    """
    User input for one submission, keyed by ModuleParam id.

    meta_dataset_param_id names the dataset parameter whose dataset feeds the
    metadata/description sheets.
    """
    analysis_name: str
    analysis_description: Optional[str] = None
    values: Dict[int, str] = field(default_factory=dict)
    datasets: Dict[int, Dataset] = field(default_factory=dict)
    uploads: Dict[int, List[UploadedFile]] = field(default_factory=dict)
    meta_dataset_param_id: Optional[int] = None

    def meta_dataset(self) -> Optional[Dataset]:
        if self.meta_dataset_param_id is None:
            return None
        return self.datasets.get(self.meta_dataset_param_id)


def _upload_text(client: GenePatternClient, content: str, name: str) -> List[str]:
    stem, _, suffix = name.rpartition(".")
    fd, tmp_path = tempfile.mkstemp(prefix=stem, suffix="." + suffix)
    try:
        with os.fdopen(fd, "w") as fh:
            fh.write(content)
        return client.upload_file_or_dir_params(tmp_path, name)
    finally:
        os.remove(tmp_path)


def _visible_directory_entries(files: Iterable[UploadedFile]) -> List[UploadedFile]:
    """Directory uploads minus hidden entries; names reduced to their basename."""
    entries = []
    for f in files:
        if "/." in f.filename:
            continue
        entries.append(UploadedFile(path=f.path, filename=f.filename.rsplit("/", 1)[-1]))
    return entries


def build_genepattern_params(
    client: GenePatternClient,
    module,
    form: SubmissionForm,
) -> List[JobParam]:
    """
    Build the job parameter list for module, uploading files as needed.

    Failed uploads leave the parameter with an empty values list.
    """
    params: List[JobParam] = []

    for mp in module.module_params:
        p_type = mp.p_type or ""

        if p_type == ParamType.DATASET.value:
            dataset = form.datasets.get(mp.id)
            if dataset is None:
                logger.error("No dataset selected for parameter %s", mp.p_key)
                continue
            for exp_file in dataset.exp_files:
                logger.debug("Uploading dataset file %s for %s", exp_file.file_name, mp.p_key)
                location = client.upload_file_or_dir_params(exp_file.local_path, exp_file.file_name)
                params.append(JobParam(name=mp.p_key, values=location))

        elif p_type == ParamType.DIRECTORY.value:
            for entry in _visible_directory_entries(form.uploads.get(mp.id, [])):
                location = client.upload_file_or_dir_params(entry.path, entry.filename)
                params.append(JobParam(name=mp.p_key, values=location))

        elif p_type == ParamType.FILE.value:
            uploads = form.uploads.get(mp.id, [])
            if uploads and not uploads[0].filename.startswith("."):
                part = uploads[0]
                location = client.upload_file_or_dir_params(part.path, Path(part.filename).name)
                params.append(JobParam(name=mp.p_key, values=location))

        elif p_type == ParamType.METADATA.value:
            dataset = form.meta_dataset()
            if dataset is None:
                logger.error("No dataset selected for metadata parameter %s", mp.p_key)
                params.append(JobParam(name=mp.p_key, values=[]))
                continue
            location = _upload_text(client, metadata_file_content(dataset), METADATA_FILE_NAME)
            params.append(JobParam(name=mp.p_key, values=location))

        elif p_type == ParamType.FIELD.value:
            content = description_file_content(
                form.analysis_name,
                form.analysis_description,
                form.meta_dataset(),
            )
            location = _upload_text(client, content, DESCRIPTION_FILE_NAME)
            params.append(JobParam(name=mp.p_key, values=location))

        else:
            value = form.values.get(mp.id)
            if value is None:
                value = mp.default_val or ""
            params.append(JobParam(name=mp.p_key, values=[str(value)]))

    return params
