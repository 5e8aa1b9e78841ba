"""Per-account fan-out over devices."""

import asyncio
import uuid
from datetime import datetime, timedelta
from typing import NamedTuple

from idle_notifier.models.account import Account, Device
from idle_notifier.services.eligibility import (
    MAX_IDLE_DURATION,
    MIN_IDLE_DURATION,
    is_device_eligible,
)
from idle_notifier.services.message_presence import MessagePresenceOracle


class EligiblePair(NamedTuple):
    account: Account
    device: Device


class EvaluationError(Exception):
    """Raised when a device's eligibility could not be determined."""

    def __init__(self, account_id: uuid.UUID, device_id: int, cause: BaseException) -> None:
        super().__init__(f"Failed to evaluate {account_id}.{device_id}: {cause}")
        self.account_id = account_id
        self.device_id = device_id
        self.cause = cause


async def _evaluate(
    account: Account,
    device: Device,
    oracle: MessagePresenceOracle,
    now: datetime,
    min_idle: timedelta,
    max_idle: timedelta,
) -> bool:
    try:
        return await is_device_eligible(account, device, oracle, now, min_idle, max_idle)
    except Exception as e:
        raise EvaluationError(account.id, device.device_id, e) from e


async def select_eligible_devices(
    account: Account,
    oracle: MessagePresenceOracle,
    now: datetime,
    min_idle: timedelta = MIN_IDLE_DURATION,
    max_idle: timedelta = MAX_IDLE_DURATION,
) -> list[EligiblePair]:
    """Evaluate every device of the account concurrently.

    Works on the account snapshot as loaded. If any device's evaluation
    fails, the first ``EvaluationError`` is raised once all evaluations have
    settled.
    """
    devices = list(account.devices or [])
    if not devices:
        return []

    results = await asyncio.gather(
        *(_evaluate(account, device, oracle, now, min_idle, max_idle) for device in devices),
        return_exceptions=True,
    )

    for result in results:
        if isinstance(result, BaseException):
            raise result

    return [EligiblePair(account, device) for device, eligible in zip(devices, results) if eligible]
