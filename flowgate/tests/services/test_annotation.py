"""Tests for metadata/description sheet generation."""

import os

from flowgate.models.domain import Dataset
from flowgate.services.annotation import (
    annotation_body,
    annotation_header,
    annotation_header_str,
    description_file_content,
    metadata_file_content,
)


def test_header_is_union_of_keys_in_first_seen_order(dataset):
    assert annotation_header(dataset) == ["Subject", "Visit", "Stim"]
    assert annotation_header_str(dataset) == "Subject\tVisit\tStim"
    assert annotation_header_str(dataset, ",") == "Subject,Visit,Stim"


def test_body_leaves_missing_keys_empty(dataset):
    assert annotation_body(dataset) == "S1\t1\t\nS2\t\tCMV\n"


def test_metadata_file_content(dataset):
    assert metadata_file_content(dataset) == "Subject\tVisit\tStim\nS1\t1\t\nS2\t\tCMV\n"


def test_empty_dataset():
    empty = Dataset(id=1, name="empty")
    assert annotation_header(empty) == []
    assert metadata_file_content(empty) == "\n"


def test_description_file_content(dataset):
    content = description_file_content("Run 1", "first pass", dataset)
    assert content == f"Run 1{os.linesep}first pass{os.linesep}Baseline"


def test_description_without_dataset():
    assert description_file_content("Run 1", None) == f"Run 1{os.linesep}"
