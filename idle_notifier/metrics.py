"""Prometheus metric definitions for the idle device notifier.

Single source of truth for all custom metrics. Import from here in crawler and Celery code.
"""

from prometheus_client import Counter, Histogram

# --- Celery task metrics ---

celery_task_total = Counter(
    "idle_notifier_celery_task_total",
    "Total Celery tasks executed",
    ["task_name", "status"],
)

celery_task_duration_seconds = Histogram(
    "idle_notifier_celery_task_duration_seconds",
    "Celery task execution duration in seconds",
    ["task_name"],
    buckets=(1.0, 5.0, 15.0, 30.0, 60.0, 300.0, 900.0, 1800.0, 3600.0, 7200.0),
)

# --- Crawl metrics ---

idle_devices_evaluated_total = Counter(
    "idle_devices_evaluated_total",
    "Devices evaluated for idle wake-up notifications",
    ["eligible"],
)

idle_device_notifications_total = Counter(
    "idle_device_notifications_total",
    "Idle device notifications by outcome",
    ["dry_run", "outcome"],
)

idle_crawl_account_failures_total = Counter(
    "idle_crawl_account_failures_total",
    "Accounts abandoned during a crawl pass, by failing stage",
    ["stage"],
)

idle_crawl_duration_seconds = Histogram(
    "idle_crawl_duration_seconds",
    "Duration of a full idle device crawl pass in seconds",
    buckets=(10.0, 60.0, 300.0, 900.0, 1800.0, 3600.0, 7200.0, 14400.0),
)
