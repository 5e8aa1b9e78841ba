"""Eligibility checks for idle device wake-up notifications.

A device is eligible when all of the following hold, checked in this order:

1. It has been idle for at least ``MIN_IDLE_DURATION`` but less than
   ``MAX_IDLE_DURATION``.
2. It has an FCM or APNs token and no APNs VoIP token.
3. The message store reports no persisted messages for it.

The first two checks are synchronous; the message store is only consulted
when both pass.
"""

import uuid
from datetime import datetime, timedelta

from idle_notifier.config import DEFAULT_MAX_IDLE_DURATION, DEFAULT_MIN_IDLE_DURATION
from idle_notifier.models.account import Account, Device
from idle_notifier.models.base import to_epoch_millis
from idle_notifier.services.message_presence import MessagePresenceOracle

MIN_IDLE_DURATION = DEFAULT_MIN_IDLE_DURATION
MAX_IDLE_DURATION = DEFAULT_MAX_IDLE_DURATION


def is_idle(
    device: Device,
    now: datetime,
    min_idle: timedelta = MIN_IDLE_DURATION,
    max_idle: timedelta = MAX_IDLE_DURATION,
) -> bool:
    """Whether the device's last contact falls inside the idle window.

    The lower bound is inclusive and the upper bound exclusive: devices idle
    for ``max_idle`` or longer belong to other cleanup paths.
    """
    idle_millis = to_epoch_millis(now) - device.last_seen
    return min_idle // timedelta(milliseconds=1) <= idle_millis < max_idle // timedelta(milliseconds=1)


def has_push_token(device: Device) -> bool:
    """Whether the device can be woken by an ordinary FCM/APNs push.

    Devices with a VoIP token are woken through the VoIP channel instead.
    """
    if device.voip_apns_token:
        return False
    return bool(device.fcm_token) or bool(device.apns_token)


async def may_have_persisted_messages(
    account_id: uuid.UUID,
    device: Device,
    oracle: MessagePresenceOracle,
) -> bool:
    return await oracle.may_have_persisted_messages(account_id, device)


async def is_device_eligible(
    account: Account,
    device: Device,
    oracle: MessagePresenceOracle,
    now: datetime,
    min_idle: timedelta = MIN_IDLE_DURATION,
    max_idle: timedelta = MAX_IDLE_DURATION,
) -> bool:
    """Run all eligibility checks; oracle failures propagate to the caller."""
    if not is_idle(device, now, min_idle, max_idle):
        return False

    if not has_push_token(device):
        return False

    return not await may_have_persisted_messages(account.id, device, oracle)
