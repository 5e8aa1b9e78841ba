"""Unit tests for idle device eligibility checks."""

import uuid
from datetime import timedelta
from unittest.mock import AsyncMock

import pytest

from factories import CURRENT_TIME, make_account, make_device
from idle_notifier.services.eligibility import (
    MAX_IDLE_DURATION,
    MIN_IDLE_DURATION,
    has_push_token,
    is_device_eligible,
    is_idle,
)

ONE_MS = timedelta(milliseconds=1)


class TestIsIdle:

    @pytest.mark.parametrize(
        "idle_for,expected",
        [
            (MIN_IDLE_DURATION, True),
            (MIN_IDLE_DURATION + ONE_MS, True),
            (MIN_IDLE_DURATION - ONE_MS, False),
            (MAX_IDLE_DURATION, False),
            (MAX_IDLE_DURATION + ONE_MS, False),
            (MAX_IDLE_DURATION - ONE_MS, True),
        ],
    )
    def test_idle_window_boundaries(self, idle_for, expected):
        device = make_device(idle_for=idle_for)
        assert is_idle(device, CURRENT_TIME) is expected

    def test_recently_seen_device_is_not_idle(self):
        assert is_idle(make_device(), CURRENT_TIME) is False

    def test_device_seen_in_the_future_is_not_idle(self):
        device = make_device(idle_for=-timedelta(minutes=5))
        assert is_idle(device, CURRENT_TIME) is False

    def test_custom_window(self):
        device = make_device(idle_for=timedelta(days=2))
        assert is_idle(device, CURRENT_TIME, timedelta(days=1), timedelta(days=3)) is True
        assert is_idle(device, CURRENT_TIME, timedelta(days=3), timedelta(days=5)) is False


class TestHasPushToken:

    @pytest.mark.parametrize(
        "tokens,expected",
        [
            ({}, False),
            ({"fcm_token": "fcm-token"}, True),
            ({"apns_token": "apns-token"}, True),
            ({"fcm_token": "fcm-token", "apns_token": "apns-token"}, True),
            ({"apns_token": "apns-token", "voip_apns_token": "apns-voip-token"}, False),
            ({"fcm_token": "fcm-token", "voip_apns_token": "apns-voip-token"}, False),
            ({"voip_apns_token": "apns-voip-token"}, False),
            ({"fcm_token": "", "apns_token": ""}, False),
            ({"apns_token": "apns-token", "voip_apns_token": ""}, True),
        ],
    )
    def test_token_combinations(self, tokens, expected):
        assert has_push_token(make_device(**tokens)) is expected


class TestIsDeviceEligible:

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "idle,has_token,may_have_messages,expected",
        [
            # Idle device with push token and messages
            (True, True, True, False),
            # Idle device missing push token, but with messages
            (True, False, True, False),
            # Idle device missing push token and messages
            (True, False, False, False),
            # Idle device with push token, but no messages
            (True, True, False, True),
            # Active device with push token and messages
            (False, True, True, False),
            # Active device missing push token, but with messages
            (False, False, True, False),
            # Active device missing push token and messages
            (False, False, False, False),
            # Active device with push token, but no messages
            (False, True, False, False),
        ],
    )
    async def test_eligibility_matrix(self, oracle, idle, has_token, may_have_messages, expected):
        oracle.may_have_persisted_messages.return_value = may_have_messages
        device = make_device(
            idle_for=MIN_IDLE_DURATION if idle else timedelta(0),
            apns_token="apns-token" if has_token else None,
        )
        account = make_account([device])

        assert await is_device_eligible(account, device, oracle, CURRENT_TIME) is expected

    @pytest.mark.asyncio
    async def test_oracle_not_called_for_active_device(self, oracle):
        device = make_device(apns_token="apns-token")
        account = make_account([device])

        assert await is_device_eligible(account, device, oracle, CURRENT_TIME) is False
        oracle.may_have_persisted_messages.assert_not_called()

    @pytest.mark.asyncio
    async def test_oracle_not_called_without_push_token(self, oracle):
        device = make_device(idle_for=MIN_IDLE_DURATION)
        account = make_account([device])

        assert await is_device_eligible(account, device, oracle, CURRENT_TIME) is False
        oracle.may_have_persisted_messages.assert_not_called()

    @pytest.mark.asyncio
    async def test_oracle_not_called_for_voip_device(self, oracle):
        device = make_device(idle_for=MIN_IDLE_DURATION, apns_token="apns-token", voip_apns_token="voip")
        account = make_account([device])

        assert await is_device_eligible(account, device, oracle, CURRENT_TIME) is False
        oracle.may_have_persisted_messages.assert_not_called()

    @pytest.mark.asyncio
    async def test_oracle_called_with_account_id_and_device(self, oracle):
        account_id = uuid.UUID("aaaaaaaa-aaaa-aaaa-aaaa-aaaaaaaaaaaa")
        device = make_device(idle_for=MIN_IDLE_DURATION, fcm_token="fcm-token")
        account = make_account([device], account_id=account_id)

        assert await is_device_eligible(account, device, oracle, CURRENT_TIME) is True
        oracle.may_have_persisted_messages.assert_awaited_once_with(account_id, device)

    @pytest.mark.asyncio
    async def test_oracle_failure_propagates(self):
        oracle = AsyncMock()
        oracle.may_have_persisted_messages.side_effect = ConnectionError("message store unavailable")
        device = make_device(idle_for=MIN_IDLE_DURATION, apns_token="apns-token")
        account = make_account([device])

        with pytest.raises(ConnectionError):
            await is_device_eligible(account, device, oracle, CURRENT_TIME)
