"""Annotation sheets uploaded alongside a dataset (metadata.txt / description.txt)."""

from __future__ import annotations

import os
from typing import List, Optional

from flowgate.models.domain import Dataset

TAB = "\t"


def annotation_header(dataset: Dataset) -> List[str]:
    """Metadata keys of all files in the dataset, unique, in order of first appearance."""
    header: List[str] = []
    for exp_file in dataset.exp_files:
        for md in exp_file.metadata:
            if md.md_key not in header:
                header.append(md.md_key)
    return header


def annotation_header_str(dataset: Dataset, separator: str = TAB) -> str:
    return separator.join(annotation_header(dataset))


def annotation_body(dataset: Dataset, separator: str = TAB) -> str:
    """One line per file, values in header order; keys a file lacks are left empty."""
    fields = annotation_header(dataset)
    lines = []
    for exp_file in dataset.exp_files:
        values = [exp_file.metadata_value(key) or "" for key in fields]
        lines.append(separator.join(values) + "\n")
    return "".join(lines)


def metadata_file_content(dataset: Dataset) -> str:
    return annotation_header_str(dataset, TAB) + "\n" + annotation_body(dataset, TAB)


def description_file_content(
    analysis_name: str,
    analysis_description: Optional[str],
    dataset: Optional[Dataset] = None,
) -> str:
    content = f"{analysis_name}{os.linesep}{analysis_description or ''}"
    if dataset is not None:
        content += os.linesep + dataset.name
    return content
