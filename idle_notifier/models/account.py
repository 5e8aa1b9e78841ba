"""Account and device models.

Rows are owned by the account directory; this service only reads them.
"""

import uuid

from sqlalchemy import BigInteger, ForeignKey, SmallInteger, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from idle_notifier.models.base import Base, TimestampMixin


class Account(Base, TimestampMixin):
    __tablename__ = "accounts"

    # Account identifier (ACI), assigned by the directory
    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True)
    number: Mapped[str] = mapped_column(String(32), unique=True, nullable=False)

    # Relationships
    devices: Mapped[list["Device"]] = relationship(
        "Device",
        back_populates="account",
        order_by="Device.device_id",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<Account {self.id}>"


class Device(Base):
    __tablename__ = "devices"

    PRIMARY_ID = 1

    account_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("accounts.id", ondelete="CASCADE"),
        primary_key=True,
    )
    device_id: Mapped[int] = mapped_column(SmallInteger, primary_key=True)
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    last_seen: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)  # epoch millis
    fcm_token: Mapped[str | None] = mapped_column(String(512), nullable=True)
    apns_token: Mapped[str | None] = mapped_column(String(512), nullable=True)
    voip_apns_token: Mapped[str | None] = mapped_column(String(512), nullable=True)

    account: Mapped["Account"] = relationship("Account", back_populates="devices")

    @property
    def is_primary(self) -> bool:
        return self.device_id == self.PRIMARY_ID

    def __repr__(self) -> str:
        return f"<Device {self.device_id} account_id={self.account_id}>"
