"""Background jobs (Celery) for analysis status polling."""
