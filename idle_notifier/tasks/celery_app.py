"""Celery application configuration."""

import time

from celery import Celery
from celery.schedules import crontab
from celery.signals import task_failure, task_postrun, task_prerun, task_retry, worker_process_init

from idle_notifier.config import get_settings
from idle_notifier.log_config import setup_logging
from idle_notifier.metrics import celery_task_duration_seconds, celery_task_total

settings = get_settings()

celery_app = Celery(
    "idle_notifier",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    worker_prefetch_multiplier=1,
    task_default_queue="default",
    task_routes={
        "idle_notifier.tasks.idle_device_tasks.*": {"queue": "crawls"},
    },
    beat_schedule={
        # Idle device wake-up crawl: daily
        "notify-idle-devices-without-messages": {
            "task": "idle_notifier.tasks.idle_device_tasks.notify_idle_devices_without_messages",
            "schedule": crontab(hour=settings.idle_crawl_hour_utc, minute=0),
        },
    },
)

celery_app.autodiscover_tasks(["idle_notifier.tasks"], related_name="idle_device_tasks")

# task_id -> monotonic start time
_task_start_times: dict[str, float] = {}


def _setup_task_signals() -> None:
    """Record task counts and durations in Prometheus."""

    @task_prerun.connect(weak=False)
    def _on_prerun(task_id=None, task=None, **kwargs):
        _task_start_times[task_id] = time.monotonic()

    @task_postrun.connect(weak=False)
    def _on_postrun(task_id=None, task=None, state=None, **kwargs):
        started = _task_start_times.pop(task_id, None)
        if started is not None:
            celery_task_duration_seconds.labels(task_name=task.name).observe(time.monotonic() - started)
        if state == "SUCCESS":
            celery_task_total.labels(task_name=task.name, status="success").inc()

    @task_failure.connect(weak=False)
    def _on_failure(sender=None, **kwargs):
        celery_task_total.labels(task_name=sender.name, status="failure").inc()

    @task_retry.connect(weak=False)
    def _on_retry(sender=None, **kwargs):
        celery_task_total.labels(task_name=sender.name, status="retry").inc()


_setup_task_signals()


@worker_process_init.connect(weak=False)
def _configure_worker_logging(**kwargs):
    setup_logging(debug=settings.debug)
