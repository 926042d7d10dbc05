"""Celery task definitions for background processing."""

from .polling import check_task_results, refresh_analysis_status

__all__ = [
    "check_task_results",
    "refresh_analysis_status",
]
