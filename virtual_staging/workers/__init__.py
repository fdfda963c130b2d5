"""
Celery workers module.

Periodic reaper tasks driven by celery beat: stuck-job sweep, refund
reconciliation and retention cleanup.

Dependencies: celery, virtual_staging.configs
System role: Background task processing
"""

from celery import Celery

from virtual_staging.configs import get_settings

settings = get_settings()
celery_config = settings.celery

celery_app = Celery(
    "virtual_staging",
    broker=celery_config.broker_url,
    backend=celery_config.result_backend_url,
    include=["virtual_staging.workers.tasks.reaper_tasks"],
)

celery_app.conf.update(
    task_serializer=celery_config.task_serializer,
    result_serializer=celery_config.result_serializer,
    accept_content=celery_config.accept_content,
    timezone=celery_config.timezone,
    beat_schedule={
        "sweep-stuck-jobs": {
            "task": "virtual_staging.workers.tasks.reaper_tasks.sweep_stuck_jobs",
            "schedule": float(settings.reaper.sweep_interval_seconds),
        },
        "reconcile-refunds": {
            "task": "virtual_staging.workers.tasks.reaper_tasks.reconcile_refunds",
            "schedule": float(settings.reaper.sweep_interval_seconds),
        },
        "retention-cleanup": {
            "task": "virtual_staging.workers.tasks.reaper_tasks.retention_cleanup",
            "schedule": float(settings.reaper.cleanup_interval_seconds),
        },
    },
)
