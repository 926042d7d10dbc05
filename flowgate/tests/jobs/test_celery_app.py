"""Tests for Celery application configuration."""

import importlib
import os
from datetime import timedelta
from unittest.mock import patch

from celery import Celery


class TestCeleryApp:
    """Test Celery application initialization and configuration."""

    def test_celery_app_initialization(self):
        """Test that Celery app is properly initialized."""
        from flowgate.jobs.celery_app import celery_app

        assert isinstance(celery_app, Celery)
        assert celery_app.main == 'flowgate'

    def test_config_loading(self):
        """Test that Celery loads configuration from config module."""
        from flowgate.jobs.celery_app import celery_app

        assert celery_app.conf.task_serializer == 'json'
        assert celery_app.conf.result_serializer == 'json'
        assert celery_app.conf.accept_content == ['json']

    def test_polling_routed_to_scheduled_queue(self):
        from flowgate.jobs.celery_app import celery_app

        assert celery_app.conf.task_default_queue == 'default'
        assert celery_app.conf.task_routes['flowgate.jobs.tasks.polling.*']['queue'] == 'scheduled'

    def test_celery_task_always_eager_mode(self):
        """Test CELERY_TASK_ALWAYS_EAGER configuration."""
        with patch.dict(os.environ, {'CELERY_TASK_ALWAYS_EAGER': 'true'}):
            from flowgate.jobs import config
            importlib.reload(config)

            assert config.task_always_eager is True

        importlib.reload(config)

    def test_tasks_registered(self):
        from flowgate.jobs.celery_app import celery_app
        import flowgate.jobs.tasks.polling  # noqa: F401

        assert 'flowgate.jobs.tasks.polling.check_task_results' in celery_app.tasks
        assert 'flowgate.jobs.tasks.polling.refresh_analysis_status' in celery_app.tasks


class TestBeatSchedule:
    def test_poll_entry(self):
        from flowgate.config import get_config
        from flowgate.jobs.schedules import CELERYBEAT_SCHEDULE

        if not get_config().polling.enabled:
            assert 'poll-analysis-status' not in CELERYBEAT_SCHEDULE
            return

        entry = CELERYBEAT_SCHEDULE['poll-analysis-status']
        assert entry['task'] == 'flowgate.jobs.tasks.polling.check_task_results'
        assert entry['schedule'] == timedelta(seconds=get_config().polling.interval_seconds)
        assert entry['options']['queue'] == 'scheduled'


class TestWorkerSignals:
    @patch('flowgate.database.base.reset_engine')
    def test_worker_process_resets_engine(self, mock_reset):
        from flowgate.jobs.celery_app import init_worker

        init_worker()

        mock_reset.assert_called_once()

    def test_initial_poll_on_worker_ready(self):
        from flowgate.config import get_config
        from flowgate.jobs.celery_app import celery_app, poll_on_startup

        with patch.object(celery_app, 'send_task') as mock_send:
            poll_on_startup()

        if get_config().polling.enabled:
            mock_send.assert_called_once_with(
                'flowgate.jobs.tasks.polling.check_task_results',
                queue='scheduled',
            )
        else:
            mock_send.assert_not_called()
