"""Persisted message model; rows are messages not yet delivered to a device."""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKeyConstraint, Index, LargeBinary, SmallInteger
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from idle_notifier.models.base import Base, UUIDPrimaryKeyMixin


class StoredMessage(Base, UUIDPrimaryKeyMixin):
    __tablename__ = "stored_messages"
    __table_args__ = (
        ForeignKeyConstraint(
            ["account_id", "device_id"],
            ["devices.account_id", "devices.device_id"],
            ondelete="CASCADE",
        ),
        Index("ix_stored_messages_destination", "account_id", "device_id"),
    )

    account_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False)
    device_id: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    envelope: Mapped[bytes] = mapped_column(LargeBinary, nullable=False)
    stored_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default="now()",
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<StoredMessage {self.id} device={self.account_id}.{self.device_id}>"
