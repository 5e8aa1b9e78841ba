"""Paginated, single-pass stream over every account in the directory."""

import logging
from typing import AsyncIterator

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import selectinload

from idle_notifier.models.account import Account

logger = logging.getLogger(__name__)


async def iter_accounts(
    session_factory: async_sessionmaker[AsyncSession],
    page_size: int = 500,
) -> AsyncIterator[Account]:
    """Yield every account once, fetching one page per query.

    Pages are keyed on account id, so accounts created during the crawl may
    or may not be seen. Devices are eager-loaded; yielded accounts are
    detached snapshots.
    """
    if page_size < 1:
        raise ValueError("page_size must be positive")

    last_id = None
    pages = 0
    while True:
        stmt = select(Account).options(selectinload(Account.devices)).order_by(Account.id).limit(page_size)
        if last_id is not None:
            stmt = stmt.where(Account.id > last_id)

        async with session_factory() as db:
            result = await db.execute(stmt)
            page = result.scalars().all()

        if not page:
            break

        pages += 1
        logger.debug("Fetched account page %d (%d accounts)", pages, len(page))

        for account in page:
            yield account

        if len(page) < page_size:
            break
        last_id = page[-1].id
