"""Tests for the one-shot status poll script."""

import importlib.util
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from flowgate.models.domain import AnalysisStatus

SCRIPT = Path(__file__).resolve().parents[2] / "scripts" / "poll_analyses.py"


@pytest.fixture
def script():
    spec = importlib.util.spec_from_file_location("poll_analyses", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_sweep_summary(script, capsys):
    with patch.object(script, "db_session") as mock_session, \
            patch.object(script, "refresh_unfinished") as mock_refresh:
        db = MagicMock()
        mock_session.return_value.__enter__.return_value = db
        mock_refresh.return_value = {"checked": 4, "updated": 2, "errors": 0}

        assert script.main(["--experiment-id", "7"]) == 0

    mock_refresh.assert_called_once_with(db, experiment_id=7)
    assert "Checked 4 analyses: 2 updated, 0 errors" in capsys.readouterr().out


def test_errors_give_nonzero_exit(script):
    with patch.object(script, "db_session"), \
            patch.object(script, "refresh_unfinished") as mock_refresh:
        mock_refresh.return_value = {"checked": 1, "updated": 0, "errors": 1}

        assert script.main([]) == 1


def test_single_analysis(script, capsys):
    with patch.object(script, "db_session"), \
            patch.object(script, "get_analysis") as mock_get, \
            patch.object(script, "refresh_analysis") as mock_refresh:
        mock_get.return_value = MagicMock(id=5, job_number="42")
        mock_refresh.return_value = AnalysisStatus.FINISHED

        assert script.main(["--analysis-id", "5"]) == 0

    assert "Analysis 5 (job 42): status 3" in capsys.readouterr().out


def test_unknown_analysis(script):
    with patch.object(script, "db_session"), patch.object(script, "get_analysis", return_value=None):
        assert script.main(["--analysis-id", "99"]) == 1


def test_database_failure(script):
    with patch.object(script, "db_session", side_effect=RuntimeError("no database")):
        assert script.main([]) == 2
