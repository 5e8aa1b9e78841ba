"""Shared test fixtures."""

from datetime import datetime
from unittest.mock import AsyncMock

import pytest

from factories import CURRENT_TIME


@pytest.fixture
def current_time() -> datetime:
    return CURRENT_TIME


@pytest.fixture
def clock():
    return lambda: CURRENT_TIME


@pytest.fixture
def oracle():
    """Message presence oracle reporting no stored messages."""
    oracle = AsyncMock()
    oracle.may_have_persisted_messages.return_value = False
    return oracle


@pytest.fixture
def scheduler():
    scheduler = AsyncMock()
    scheduler.schedule_notification.return_value = None
    return scheduler
