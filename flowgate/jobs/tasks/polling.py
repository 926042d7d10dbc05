"""Scheduled polling of remote analysis jobs."""

from datetime import datetime, timezone

from flowgate.jobs.celery_app import celery_app
from flowgate.logging_utils import get_logger

logger = get_logger(__name__)


@celery_app.task(queue='scheduled')
def check_task_results(experiment_id: int = None) -> dict:
    """Refresh the status of every unfinished analysis.

    Args:
        experiment_id: Limit the sweep to one experiment

    Returns:
        Dict with status and counts of checked/updated analyses
    """
    from flowgate.database.session import db_session
    from flowgate.services.status import refresh_unfinished

    try:
        with db_session() as db:
            summary = refresh_unfinished(db, experiment_id=experiment_id)
        if summary["checked"]:
            logger.info("Executing scheduled job... %s", summary)
        return {
            "status": "complete",
            **summary,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
    except Exception as e:
        logger.error("Scheduled status poll failed: %s", e)
        return {"status": "failed", "error": str(e)}


@celery_app.task(queue='scheduled')
def refresh_analysis_status(analysis_id: int) -> dict:
    """Poll one analysis now.

    Args:
        analysis_id: Primary key of the analysis

    Returns:
        Dict with status, analysis_id and the stored analysis status code
    """
    from flowgate.database.crud import get_analysis
    from flowgate.database.session import db_session
    from flowgate.services.status import refresh_analysis

    try:
        with db_session() as db:
            analysis = get_analysis(db, analysis_id)
            if analysis is None:
                return {"status": "failed", "analysis_id": analysis_id, "error": "Analysis not found"}
            new_status = refresh_analysis(db, analysis)
        return {"status": "complete", "analysis_id": analysis_id, "analysis_status": int(new_status)}
    except Exception as e:
        return {"status": "failed", "analysis_id": analysis_id, "error": str(e)}
