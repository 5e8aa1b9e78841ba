"""Scheduling of idle device wake-up notifications."""

import logging
import uuid
from abc import ABC, abstractmethod
from datetime import datetime, time, timedelta, timezone
from typing import Callable

from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from idle_notifier.models.account import Account, Device
from idle_notifier.models.idle_device_notification import IdleDeviceNotification

logger = logging.getLogger(__name__)


class SchedulingError(Exception):
    """Raised when a notification could not be scheduled for a device."""

    def __init__(self, account_id: uuid.UUID, device_id: int, cause: BaseException) -> None:
        super().__init__(f"Failed to schedule notification for {account_id}.{device_id}: {cause}")
        self.account_id = account_id
        self.device_id = device_id
        self.cause = cause


class NotificationScheduler(ABC):
    """Persists "send a wake-up push to this device at time T" tasks."""

    @abstractmethod
    async def schedule_notification(self, account: Account, device: Device, preferred_time: time) -> None:
        ...


def next_notification_time(preferred_time: time, now: datetime) -> datetime:
    """Next UTC instant at ``preferred_time`` strictly after ``now``."""
    now_utc = now.astimezone(timezone.utc)
    candidate = datetime.combine(now_utc.date(), preferred_time.replace(tzinfo=None), tzinfo=timezone.utc)
    if candidate <= now_utc:
        candidate += timedelta(days=1)
    return candidate


class IdleDeviceNotificationScheduler(NotificationScheduler):
    """Stores scheduled notifications in ``idle_device_notifications``.

    There is at most one pending notification per device; scheduling again
    moves the existing row to the new time.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    async def schedule_notification(self, account: Account, device: Device, preferred_time: time) -> None:
        scheduled_for = next_notification_time(preferred_time, self._clock())

        stmt = pg_insert(IdleDeviceNotification).values(
            id=uuid.uuid4(),
            account_id=account.id,
            device_id=device.device_id,
            scheduled_for=scheduled_for,
        )
        stmt = stmt.on_conflict_do_update(
            constraint="uq_idle_device_notification_device",
            set_={"scheduled_for": stmt.excluded.scheduled_for, "updated_at": datetime.now(timezone.utc)},
        )

        async with self._session_factory() as db:
            await db.execute(stmt)
            await db.commit()

        logger.info(
            "Scheduled idle device notification for %s.%d at %s",
            account.id,
            device.device_id,
            scheduled_for.isoformat(),
        )


class SchedulerGateway:
    """Fixes the preferred send time and maps scheduler failures to ``SchedulingError``."""

    def __init__(self, scheduler: NotificationScheduler, preferred_time: time) -> None:
        self._scheduler = scheduler
        self._preferred_time = preferred_time

    @property
    def preferred_time(self) -> time:
        return self._preferred_time

    async def schedule(self, account: Account, device: Device) -> None:
        try:
            await self._scheduler.schedule_notification(account, device, self._preferred_time)
        except Exception as e:
            raise SchedulingError(account.id, device.device_id, e) from e
