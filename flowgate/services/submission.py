"""
Submit an analysis to its module's server and record it.

GenePattern receives one job whose parameters carry uploaded file locations.
Galaxy receives one workflow invocation per file of the fanned-out dataset,
with inputs taken from the FlowGate data library; the invocation ids are
stored comma-joined as the analysis job number.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from flowgate.client import AnalysisClient, client_for_server
from flowgate.client.galaxy import GalaxyClient
from flowgate.client.genepattern import GenePatternClient
from flowgate.client.schemas import LibraryContent
from flowgate.config import get_config
from flowgate.constants import FAILED_JOB_NUMBER, JOB_NUMBER_SEPARATOR
from flowgate.database.crud import create_analysis
from flowgate.database.models import Analysis
from flowgate.logging_utils import get_logger
from flowgate.models.domain import AnalysisStatus, Experiment, ParamType, Platform
from flowgate.services.parameters import SubmissionForm, build_genepattern_params

logger = get_logger(__name__)


@dataclass
class SubmissionResult:
    job_number: str
    error_message: str = ""

    @property
    def ok(self) -> bool:
        return self.job_number != FAILED_JOB_NUMBER and bool(self.job_number)


def submit_genepattern(client: GenePatternClient, module, form: SubmissionForm) -> SubmissionResult:
    params = build_genepattern_params(client, module, form)
    job_number, error_message = client.get_job_no(module.name, params)
    return SubmissionResult(job_number=job_number, error_message=error_message)


def _find_content(contents: List[LibraryContent], name: str) -> Optional[str]:
    for content in contents:
        if content.name == name:
            return content.id
    return None


def _ensure_experiment_folder(
    client: GalaxyClient,
    library_id: str,
    contents: List[LibraryContent],
    experiment: Experiment,
) -> str:
    project_path = f"/{experiment.project.id}"
    experiment_path = f"{project_path}/{experiment.id}"

    project_folder_id = _find_content(contents, project_path)
    experiment_folder_id = _find_content(contents, experiment_path)

    if not project_folder_id:
        folder = client.create_library_folder(library_id, str(experiment.project.id), experiment.project.title)
        project_folder_id = folder.id

    if not experiment_folder_id:
        folder = client.create_library_folder(
            library_id,
            str(experiment.id),
            experiment.title,
            parent_folder_id=project_folder_id,
        )
        experiment_folder_id = folder.id

    return experiment_folder_id


def submit_galaxy(
    client: GalaxyClient,
    module,
    experiment: Experiment,
    form: SubmissionForm,
    library_name: Optional[str] = None,
    history_id: Optional[str] = None,
) -> SubmissionResult:
    cfg = get_config().galaxy
    library_name = library_name or cfg.library_name
    history_id = history_id or cfg.history_id

    library = client.find_library(library_name)
    if library is None:
        raise RuntimeError(f"{library_name} library doesn't exist in ImmportGalaxy")

    contents = client.get_library_contents(library.id)
    folder_id = _ensure_experiment_folder(client, library.id, contents, experiment)
    experiment_path = f"/{experiment.project.id}/{experiment.id}"

    shared_inputs: Dict[int, str] = {}
    fan_out: Optional[Tuple[int, List[str]]] = None

    for mp in module.module_params:
        order = mp.p_order if mp.p_order is not None else 0

        if mp.p_type == ParamType.DATASET.value:
            dataset = form.datasets.get(mp.id)
            if dataset is None:
                logger.error("No dataset selected for workflow input %s", mp.p_key)
                continue
            file_ids = []
            for exp_file in dataset.exp_files:
                ld_id = _find_content(contents, f"{experiment_path}/{exp_file.file_name}")
                if ld_id is None:
                    ld_id = client.upload_file_to_folder(
                        library.id, folder_id, exp_file.local_path, exp_file.file_name
                    ).id
                file_ids.append(ld_id)
            if not file_ids:
                continue
            if fan_out is None and len(file_ids) > 1:
                fan_out = (order, file_ids)
            else:
                shared_inputs[order] = file_ids[-1]
        else:
            uploads = form.uploads.get(mp.id, [])
            if not uploads:
                logger.warning("No file given for workflow input %s", mp.p_key)
                continue
            upload = client.upload_file_to_folder(library.id, folder_id, uploads[0].path, uploads[0].filename)
            shared_inputs[order] = upload.id

    runs: List[Dict[int, str]] = []
    if fan_out is None:
        runs.append(dict(shared_inputs))
    else:
        fan_order, file_ids = fan_out
        for ld_id in file_ids:
            runs.append({**shared_inputs, fan_order: ld_id})

    invocation_ids = [client.run_workflow(module.name, history_id, inputs).id for inputs in runs]
    return SubmissionResult(job_number=JOB_NUMBER_SEPARATOR.join(invocation_ids))


def submit_analysis(
    db: Session,
    module,
    experiment: Experiment,
    form: SubmissionForm,
    user_name: Optional[str] = None,
    client: Optional[AnalysisClient] = None,
) -> Tuple[Analysis, SubmissionResult]:
    """
    Submit to the module's server and persist the Analysis.

    Remote failures never raise: the analysis is stored as FAILED with job
    number "-1" and the error message is returned for display.
    """
    server = module.server
    own_client = client is None
    try:
        if client is None:
            client = client_for_server(server)
        if server.platform == Platform.GALAXY:
            result = submit_galaxy(client, module, experiment, form)
        else:
            result = submit_genepattern(client, module, form)
    except Exception as e:
        logger.error("Submission of %s to %s failed: %s", module.name, server.name, e)
        result = SubmissionResult(job_number=FAILED_JOB_NUMBER, error_message=str(e))
    finally:
        if own_client and client is not None:
            client.close()

    status = AnalysisStatus.PENDING if result.ok else AnalysisStatus.FAILED
    analysis = create_analysis(
        db,
        module,
        analysis_name=form.analysis_name,
        analysis_description=form.analysis_description,
        job_number=result.job_number,
        analysis_status=status,
        experiment_id=experiment.id,
        user_name=user_name,
    )
    return analysis, result
