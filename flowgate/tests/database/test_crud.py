"""Tests for analysis CRUD helpers against in-memory SQLite."""

from flowgate.database.crud import (
    create_analysis,
    find_by_job_number,
    get_analysis,
    get_module,
    get_server,
    get_unfinished_analyses,
    mark_deleted,
    periodic_check_needed,
    set_status,
)
from flowgate.database.models import Analysis
from flowgate.models.domain import AnalysisStatus, Platform


class TestModels:
    def test_server_platform_flags(self, gp_server, galaxy_server):
        assert gp_server.is_genepattern_server()
        assert not gp_server.is_galaxy_server()
        assert galaxy_server.is_galaxy_server()
        assert galaxy_server.platform == Platform.GALAXY

    def test_module_params_ordered(self, gp_module):
        assert [p.p_key for p in gp_module.module_params] == ["Input.Files", "clusters"]

    def test_job_numbers(self):
        assert Analysis(job_number="inv1, inv2,").job_numbers() == ["inv1", "inv2"]
        assert Analysis(job_number=None).job_numbers() == []

    def test_failed_on_submit(self):
        assert Analysis(job_number="-1").is_failed_on_submit()
        assert not Analysis(job_number="42").is_failed_on_submit()
        assert not Analysis(job_number="inv1").is_failed_on_submit()


class TestAnalysisCrud:
    def test_create_and_get(self, db, gp_module):
        analysis = create_analysis(db, gp_module, "run 1", "42", AnalysisStatus.PENDING, experiment_id=7)

        fetched = get_analysis(db, analysis.id)
        assert fetched.analysis_name == "run 1"
        assert fetched.status == AnalysisStatus.PENDING
        assert fetched.module.server.name == "GenePattern"
        assert fetched.date_created is not None
        assert fetched.date_completed is None

    def test_lookups(self, db, gp_module):
        assert get_module(db, gp_module.id) is gp_module
        assert get_server(db, gp_module.server_id) is gp_module.server
        assert get_analysis(db, 12345) is None

    def test_find_by_job_number(self, db, gp_module, galaxy_module):
        single = create_analysis(db, gp_module, "single", "12", AnalysisStatus.PENDING)
        multi = create_analysis(db, galaxy_module, "multi", "inv1,112,inv3", AnalysisStatus.PENDING)

        assert find_by_job_number(db, "12") is single
        assert find_by_job_number(db, "112") is multi
        assert find_by_job_number(db, "inv3") is multi
        assert find_by_job_number(db, "1") is None

    def test_unfinished(self, db, gp_module):
        pending = create_analysis(db, gp_module, "p", "1", AnalysisStatus.PENDING, experiment_id=7)
        init = create_analysis(db, gp_module, "i", "2", AnalysisStatus.INIT, experiment_id=8)
        create_analysis(db, gp_module, "f", "3", AnalysisStatus.FINISHED)
        create_analysis(db, gp_module, "d", "4", AnalysisStatus.DELETED)
        create_analysis(db, gp_module, "m", "5", AnalysisStatus.REPORT_FILE_MISSING)
        create_analysis(db, gp_module, "x", "-1", AnalysisStatus.INIT)

        assert get_unfinished_analyses(db) == [pending, init]
        assert get_unfinished_analyses(db, experiment_id=8) == [init]

    def test_set_status_terminal_stamps_completion(self, db, gp_module):
        analysis = create_analysis(db, gp_module, "run", "42", AnalysisStatus.PENDING)

        set_status(db, analysis, AnalysisStatus.PENDING)
        assert analysis.date_completed is None

        set_status(db, analysis, AnalysisStatus.FINISHED)
        assert analysis.status == AnalysisStatus.FINISHED
        assert analysis.date_completed is not None

    def test_mark_deleted(self, db, gp_module):
        analysis = create_analysis(db, gp_module, "run", "42", AnalysisStatus.PENDING)

        mark_deleted(db, analysis)

        assert get_analysis(db, analysis.id).status == AnalysisStatus.DELETED
        assert get_unfinished_analyses(db) == []


class TestPeriodicCheck:
    def test_needed_while_unfinished(self, db, gp_module):
        create_analysis(db, gp_module, "run", "42", AnalysisStatus.PENDING)
        assert periodic_check_needed(db, ["42"])

    def test_not_needed_when_finished(self, db, gp_module):
        create_analysis(db, gp_module, "run", "42", AnalysisStatus.FINISHED)
        assert not periodic_check_needed(db, ["42"])

    def test_ignores_failed_and_unknown_ids(self, db, gp_module):
        create_analysis(db, gp_module, "run", "-1", AnalysisStatus.FAILED)
        assert not periodic_check_needed(db, ["-1", "0", "999"])

    def test_galaxy_invocation_ids(self, db, galaxy_module):
        create_analysis(db, galaxy_module, "run", "inv1,inv2", AnalysisStatus.PENDING)
        assert periodic_check_needed(db, ["inv2"])
