"""Crawl orchestration for idle device wake-up notifications.

Accounts are pulled lazily from the source and processed with bounded
concurrency: the next account is only pulled once one of the
``max_concurrency`` slots frees up. Each account is independent, so a
failure while evaluating or scheduling one account's devices abandons that
account only. Failures of the account source itself end the crawl.
"""

import asyncio
import logging
import time
from dataclasses import asdict, dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, AsyncIterable, Callable

from idle_notifier.log_config import redact_number
from idle_notifier.metrics import (
    idle_crawl_account_failures_total,
    idle_crawl_duration_seconds,
    idle_device_notifications_total,
    idle_devices_evaluated_total,
)
from idle_notifier.models.account import Account
from idle_notifier.services.device_selector import EvaluationError, select_eligible_devices
from idle_notifier.services.eligibility import MAX_IDLE_DURATION, MIN_IDLE_DURATION
from idle_notifier.services.message_presence import MessagePresenceOracle
from idle_notifier.services.notification_scheduler import SchedulerGateway

logger = logging.getLogger(__name__)


@dataclass
class CrawlSummary:
    """Counters for a single crawl pass."""

    dry_run: bool
    accounts_processed: int = 0
    accounts_failed: int = 0
    devices_evaluated: int = 0
    eligible_devices: int = 0
    notifications_scheduled: int = 0
    notifications_skipped: int = 0
    evaluation_failures: int = 0
    scheduling_failures: int = 0

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


class IdleDeviceCrawler:
    """Finds idle devices without messages and schedules wake-up notifications."""

    def __init__(
        self,
        oracle: MessagePresenceOracle,
        gateway: SchedulerGateway,
        max_concurrency: int,
        dry_run: bool = False,
        clock: Callable[[], datetime] | None = None,
        min_idle: timedelta = MIN_IDLE_DURATION,
        max_idle: timedelta = MAX_IDLE_DURATION,
    ) -> None:
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be a positive integer")

        self._oracle = oracle
        self._gateway = gateway
        self._max_concurrency = max_concurrency
        self._dry_run = dry_run
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._min_idle = min_idle
        self._max_idle = max_idle

    @property
    def dry_run(self) -> bool:
        return self._dry_run

    async def crawl_accounts(self, accounts: AsyncIterable[Account]) -> CrawlSummary:
        """Process every account from the source.

        Returns once every admitted account has finished. Errors raised by the
        source are re-raised after in-flight accounts finish; cancellation
        cancels in-flight accounts and waits for them before re-raising.
        """
        summary = CrawlSummary(dry_run=self._dry_run)
        slots = asyncio.Semaphore(self._max_concurrency)
        in_flight: set[asyncio.Task] = set()
        started = time.monotonic()

        async def _run(account: Account) -> None:
            try:
                await self._process_account(account, summary)
            finally:
                slots.release()

        logger.info(
            "Starting idle device crawl (max_concurrency=%d, dry_run=%s)",
            self._max_concurrency,
            self._dry_run,
        )

        source = aiter(accounts)
        try:
            while True:
                await slots.acquire()
                try:
                    account = await anext(source)
                except StopAsyncIteration:
                    slots.release()
                    break
                except BaseException:
                    slots.release()
                    raise

                task = asyncio.create_task(_run(account))
                in_flight.add(task)
                task.add_done_callback(in_flight.discard)

            if in_flight:
                await asyncio.gather(*in_flight)
        except asyncio.CancelledError:
            logger.warning("Idle device crawl cancelled with %d accounts in flight", len(in_flight))
            for task in in_flight:
                task.cancel()
            await asyncio.gather(*in_flight, return_exceptions=True)
            raise
        except Exception as e:
            logger.error(
                "Account source failed; waiting for %d in-flight accounts: %s", len(in_flight), redact_number(str(e))
            )
            await asyncio.gather(*in_flight, return_exceptions=True)
            raise
        finally:
            idle_crawl_duration_seconds.observe(time.monotonic() - started)

        logger.info(
            "Idle device crawl complete: %d accounts processed, %d failed, "
            "%d eligible devices, %d scheduled, %d skipped (dry_run=%s)",
            summary.accounts_processed,
            summary.accounts_failed,
            summary.eligible_devices,
            summary.notifications_scheduled,
            summary.notifications_skipped,
            self._dry_run,
        )
        return summary

    async def _process_account(self, account: Account, summary: CrawlSummary) -> None:
        devices = list(account.devices or [])

        try:
            pairs = await select_eligible_devices(
                account, self._oracle, self._clock(), self._min_idle, self._max_idle
            )
        except EvaluationError as e:
            summary.evaluation_failures += 1
            summary.accounts_failed += 1
            idle_crawl_account_failures_total.labels(stage="evaluation").inc()
            logger.error(
                "Failed to evaluate device %s.%d; skipping account: %s",
                e.account_id,
                e.device_id,
                redact_number(str(e.cause)),
            )
            return

        summary.devices_evaluated += len(devices)
        summary.eligible_devices += len(pairs)
        idle_devices_evaluated_total.labels(eligible="true").inc(len(pairs))
        idle_devices_evaluated_total.labels(eligible="false").inc(len(devices) - len(pairs))

        dry_run_label = str(self._dry_run).lower()
        for pair in pairs:
            if self._dry_run:
                summary.notifications_skipped += 1
                idle_device_notifications_total.labels(dry_run=dry_run_label, outcome="skipped").inc()
                logger.debug("Dry run: would schedule notification for %s.%d", account.id, pair.device.device_id)
                continue

            try:
                await self._gateway.schedule(pair.account, pair.device)
            except Exception as e:
                summary.scheduling_failures += 1
                summary.accounts_failed += 1
                idle_device_notifications_total.labels(dry_run=dry_run_label, outcome="failed").inc()
                idle_crawl_account_failures_total.labels(stage="scheduling").inc()
                logger.error(
                    "Failed to schedule notification for %s.%d; skipping account: %s",
                    account.id,
                    pair.device.device_id,
                    redact_number(str(e)),
                )
                return

            summary.notifications_scheduled += 1
            idle_device_notifications_total.labels(dry_run=dry_run_label, outcome="scheduled").inc()

        summary.accounts_processed += 1
