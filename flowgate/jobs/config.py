"""Celery settings for the status-polling worker and beat."""

import os

from kombu import Exchange, Queue

from flowgate.config import get_config
from flowgate.jobs.schedules import CELERYBEAT_SCHEDULE

_polling = get_config().polling

broker_url = os.getenv('CELERY_BROKER_URL', 'redis://localhost:6379/0')
result_backend = os.getenv('CELERY_RESULT_BACKEND', 'redis://localhost:6379/0')
broker_connection_retry_on_startup = True

task_serializer = 'json'
result_serializer = 'json'
accept_content = ['json']
timezone = 'UTC'
enable_utc = True

# seconds
result_expires = int(os.getenv('CELERY_RESULT_EXPIRES', '3600'))

# one sweep at a time
worker_prefetch_multiplier = 1
worker_concurrency = int(os.getenv('CELERY_WORKER_CONCURRENCY', '1'))
task_soft_time_limit = int(os.getenv('CELERY_POLL_SOFT_TIME_LIMIT', str(int(_polling.timeout_seconds))))

default_exchange = Exchange('flowgate', type='direct')
task_default_queue = 'default'
task_default_exchange = 'flowgate'
task_queues = (
    Queue('default', default_exchange, routing_key='default'),
    Queue('scheduled', default_exchange, routing_key='scheduled'),
)
task_routes = {
    'flowgate.jobs.tasks.polling.*': {'queue': 'scheduled', 'routing_key': 'scheduled'},
}

task_always_eager = os.getenv('CELERY_TASK_ALWAYS_EAGER', 'false').lower() == 'true'

beat_schedule = CELERYBEAT_SCHEDULE
beat_scheduler = 'celery.beat:PersistentScheduler'
beat_schedule_filename = os.getenv('CELERY_BEAT_SCHEDULE_FILE', 'celerybeat-schedule')
