"""Message presence lookups against the persisted message store."""

import logging
import uuid
from abc import ABC, abstractmethod

from sqlalchemy import exists, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from idle_notifier.models.account import Device
from idle_notifier.models.stored_message import StoredMessage

logger = logging.getLogger(__name__)


class MessagePresenceOracle(ABC):
    """Answers whether a device may have undelivered messages waiting."""

    @abstractmethod
    async def may_have_persisted_messages(self, account_id: uuid.UUID, device: Device) -> bool:
        ...


class StoredMessagePresenceOracle(MessagePresenceOracle):
    """Checks the ``stored_messages`` table for any row addressed to the device."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def may_have_persisted_messages(self, account_id: uuid.UUID, device: Device) -> bool:
        stmt = select(
            exists().where(
                StoredMessage.account_id == account_id,
                StoredMessage.device_id == device.device_id,
            )
        )
        async with self._session_factory() as db:
            result = await db.execute(stmt)
            has_messages = bool(result.scalar())

        logger.debug(
            "Message presence for %s.%d: %s", account_id, device.device_id, has_messages
        )
        return has_messages
