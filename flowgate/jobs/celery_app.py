"""Celery application for analysis status polling."""

from celery import Celery
from celery.signals import worker_process_init, worker_ready

from flowgate.logging_utils import get_logger

logger = get_logger(__name__)

celery_app = Celery('flowgate', include=['flowgate.jobs.tasks.polling'])
celery_app.config_from_object('flowgate.jobs.config')


@worker_process_init.connect
def init_worker(**kwargs):
    """Forked workers open their own database connections."""
    from flowgate.database.base import reset_engine
    reset_engine()


@worker_ready.connect
def poll_on_startup(sender=None, **kwargs):
    """First status sweep right away instead of one interval after start."""
    from flowgate.config import get_config

    if not get_config().polling.enabled:
        return
    logger.info("Worker ready, queueing initial analysis status poll")
    celery_app.send_task(
        'flowgate.jobs.tasks.polling.check_task_results',
        queue='scheduled',
    )
