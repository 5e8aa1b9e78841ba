"""Celery task and runner for the idle device notification crawl."""

import asyncio
import logging

from celery import shared_task
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine

from idle_notifier.config import Settings, get_settings
from idle_notifier.services.account_source import iter_accounts
from idle_notifier.services.crawler import CrawlSummary, IdleDeviceCrawler
from idle_notifier.services.message_presence import StoredMessagePresenceOracle
from idle_notifier.services.notification_scheduler import (
    IdleDeviceNotificationScheduler,
    SchedulerGateway,
)

logger = logging.getLogger(__name__)


def _create_engine(settings: Settings, max_concurrency: int) -> AsyncEngine:
    # Each in-flight account may hold one connection per device lookup
    return create_async_engine(
        settings.database_url,
        echo=False,
        pool_size=max_concurrency,
        max_overflow=max_concurrency,
        pool_pre_ping=True,
    )


async def run_idle_device_crawl(
    settings: Settings,
    dry_run: bool | None = None,
    max_concurrency: int | None = None,
) -> CrawlSummary:
    """Wire collaborators from settings and run one crawl pass.

    Explicit arguments override the corresponding settings.
    """
    if dry_run is None:
        dry_run = settings.idle_crawl_dry_run
    if max_concurrency is None:
        max_concurrency = settings.idle_crawl_max_concurrency

    engine = _create_engine(settings, max_concurrency)
    session_factory = async_sessionmaker(engine, expire_on_commit=False)

    crawler = IdleDeviceCrawler(
        oracle=StoredMessagePresenceOracle(session_factory),
        gateway=SchedulerGateway(
            IdleDeviceNotificationScheduler(session_factory),
            settings.preferred_notification_time,
        ),
        max_concurrency=max_concurrency,
        dry_run=dry_run,
        min_idle=settings.min_idle_duration,
        max_idle=settings.max_idle_duration,
    )

    try:
        return await crawler.crawl_accounts(
            iter_accounts(session_factory, page_size=settings.idle_crawl_page_size)
        )
    finally:
        await engine.dispose()


@shared_task(name="idle_notifier.tasks.idle_device_tasks.notify_idle_devices_without_messages")
def notify_idle_devices_without_messages(dry_run: bool | None = None, max_concurrency: int | None = None):
    """Periodic task: schedule wake-up pushes for idle devices with no stored messages.

    Not retried; the next scheduled run re-evaluates every device.
    """
    settings = get_settings()
    summary = asyncio.run(run_idle_device_crawl(settings, dry_run=dry_run, max_concurrency=max_concurrency))
    return summary.as_dict()
