"""Scheduled wake-up notification for an idle device."""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, SmallInteger, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from idle_notifier.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin


class IdleDeviceNotification(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "idle_device_notifications"
    __table_args__ = (
        UniqueConstraint("account_id", "device_id", name="uq_idle_device_notification_device"),
    )

    account_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False, index=True)
    device_id: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    scheduled_for: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)

    def __repr__(self) -> str:
        return f"<IdleDeviceNotification {self.account_id}.{self.device_id} at={self.scheduled_for}>"
