"""Celery Beat schedule configuration."""

from datetime import timedelta

from flowgate.config import get_config

_polling = get_config().polling

CELERYBEAT_SCHEDULE = {}

# Fixed-rate poll of unfinished analyses; no backoff, no locking.
if _polling.enabled:
    CELERYBEAT_SCHEDULE['poll-analysis-status'] = {
        'task': 'flowgate.jobs.tasks.polling.check_task_results',
        'schedule': timedelta(seconds=_polling.interval_seconds),
        'options': {'queue': 'scheduled', 'expires': _polling.interval_seconds},
    }
