"""Idle notifier database models."""

from idle_notifier.models.account import Account, Device
from idle_notifier.models.idle_device_notification import IdleDeviceNotification
from idle_notifier.models.stored_message import StoredMessage

__all__ = [
    "Account",
    "Device",
    "StoredMessage",
    "IdleDeviceNotification",
]
