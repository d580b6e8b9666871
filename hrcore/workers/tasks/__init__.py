"""Celery task modules, listed in ``celery_app.TASK_MODULES``."""
