"""Builders for transient accounts, devices and mocked sessions used across tests."""

import uuid
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

from idle_notifier.models.account import Account, Device
from idle_notifier.models.base import to_epoch_millis
from idle_notifier.services.eligibility import MIN_IDLE_DURATION

CURRENT_TIME = datetime(2026, 10, 18, 9, 30, 15, 123000, tzinfo=timezone.utc)


def make_device(
    device_id: int = Device.PRIMARY_ID,
    idle_for: timedelta | None = None,
    fcm_token: str | None = None,
    apns_token: str | None = None,
    voip_apns_token: str | None = None,
    now: datetime = CURRENT_TIME,
) -> Device:
    """Build a transient device last seen ``idle_for`` before ``now`` (default: just now)."""
    last_seen = now - (idle_for if idle_for is not None else timedelta(0))
    return Device(
        device_id=device_id,
        last_seen=to_epoch_millis(last_seen),
        fcm_token=fcm_token,
        apns_token=apns_token,
        voip_apns_token=voip_apns_token,
    )


def make_idle_device(device_id: int = Device.PRIMARY_ID, **kwargs) -> Device:
    """An idle device with an APNs token, eligible unless it has messages."""
    kwargs.setdefault("apns_token", "apns-token")
    return make_device(device_id=device_id, idle_for=MIN_IDLE_DURATION, **kwargs)


def make_account(devices=(), account_id: uuid.UUID | None = None, number: str = "+12015550123") -> Account:
    account = Account(id=account_id or uuid.uuid4(), number=number)
    account.devices = list(devices)
    return account


def mock_session_factory(db):
    """Session factory whose sessions are all ``db``."""
    return MagicMock(
        return_value=AsyncMock(
            __aenter__=AsyncMock(return_value=db),
            __aexit__=AsyncMock(return_value=False),
        )
    )


async def account_stream(accounts):
    for account in accounts:
        yield account
