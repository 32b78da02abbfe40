"""
WhatsApp Registration Check Tests

Single and batch checks against a recording client, without HTTP.
"""

import pytest

from config import Config
from transport.whatsapp.checker import MAX_BATCH_SIZE, check_number, check_numbers
from transport.whatsapp.normalize import MIN_DIGITS
from transport.whatsapp.errors import ClientNotReadyError, InvalidRequestError
from transport.whatsapp.throttle import NoDelay, ThrottlePolicy


class CountingThrottle(ThrottlePolicy):
    """Counts waits instead of sleeping."""

    def __init__(self):
        self.waits = 0

    async def wait(self):
        self.waits += 1


class TestCheckNumber:
    """Test single number checks."""

    @pytest.mark.asyncio
    async def test_registered_number(self, ready_session, fake_client):
        result = await check_number(ready_session, "+1 (234) 567-8901")

        assert result.number == "12345678901"
        assert result.is_registered is True
        assert fake_client.calls_to("is_registered_user") == [
            ("is_registered_user", "12345678901@c.us")
        ]

    @pytest.mark.asyncio
    async def test_not_ready_makes_no_calls(self, session, fake_client):
        with pytest.raises(ClientNotReadyError):
            await check_number(session, "12345678901")

        assert fake_client.calls == []

    @pytest.mark.asyncio
    async def test_missing_number(self, ready_session, fake_client):
        with pytest.raises(InvalidRequestError, match="Phone number is required"):
            await check_number(ready_session, "")

        assert fake_client.calls == []

    @pytest.mark.asyncio
    async def test_short_number(self, ready_session, fake_client):
        with pytest.raises(InvalidRequestError, match="Invalid phone number format"):
            await check_number(ready_session, "123")

        assert fake_client.calls == []


class TestCheckNumbers:
    """Test sequential batch checks."""

    @pytest.mark.asyncio
    async def test_mixed_batch_keeps_input_order(self, ready_session):
        result = await check_numbers(ready_session, ["12345678901", "bad"], throttle=NoDelay())

        assert result.total == 2
        assert len(result.results) == 2

        first, second = result.results
        assert first.number == "12345678901"
        assert first.is_registered is True
        assert first.error is None

        assert second.number == "bad"
        assert second.is_registered is False
        assert second.error == "Invalid phone number format"

    @pytest.mark.asyncio
    async def test_invalid_item_skips_client_and_delay(self, ready_session, fake_client):
        throttle = CountingThrottle()

        await check_numbers(ready_session, ["123", "12345678901", "0000000000"], throttle=throttle)

        # Only the two valid numbers hit the client, each followed by a wait
        assert [c[1] for c in fake_client.calls_to("is_registered_user")] == [
            "12345678901@c.us",
            "0000000000@c.us",
        ]
        assert throttle.waits == 2

    @pytest.mark.asyncio
    async def test_item_exception_does_not_abort_batch(self, ready_session, fake_client):
        fake_client.fail_on = {"5555555555"}

        result = await check_numbers(
            ready_session,
            ["(555) 555-5555", "12345678901"],
            throttle=NoDelay(),
        )

        failed, ok = result.results
        assert failed.number == "(555) 555-5555"
        assert failed.is_registered is False
        assert failed.error == "lookup failed for 5555555555"
        assert ok.number == "12345678901"
        assert ok.is_registered is True

    @pytest.mark.asyncio
    async def test_non_string_item_is_reported(self, ready_session, fake_client):
        result = await check_numbers(ready_session, [12345678901, "12345678901"], throttle=NoDelay())

        assert result.results[0].number == 12345678901
        assert result.results[0].error == "Phone number must be a string"
        assert result.results[1].is_registered is True
        assert len(fake_client.calls_to("is_registered_user")) == 1

    @pytest.mark.asyncio
    async def test_null_item_is_echoed_as_null(self, ready_session, fake_client):
        result = await check_numbers(ready_session, [None, "12345678901"], throttle=NoDelay())

        assert result.to_wire()["results"] == [
            {"number": None, "isRegistered": False, "error": "Phone number must be a string"},
            {"number": "12345678901", "isRegistered": True},
        ]
        assert len(fake_client.calls_to("is_registered_user")) == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("numbers", [None, [], "12345678901", {"a": "12345678901"}])
    async def test_missing_or_non_list_rejected(self, ready_session, fake_client, numbers):
        with pytest.raises(InvalidRequestError, match="An array of phone numbers is required"):
            await check_numbers(ready_session, numbers, throttle=NoDelay())

        assert fake_client.calls == []

    @pytest.mark.asyncio
    async def test_oversized_batch_rejected_before_processing(self, ready_session, fake_client):
        numbers = ["12345678901"] * 51

        with pytest.raises(InvalidRequestError, match="Maximum 50 numbers allowed per request"):
            await check_numbers(ready_session, numbers, throttle=NoDelay())

        assert fake_client.calls == []

    @pytest.mark.asyncio
    async def test_batch_of_exactly_limit_is_accepted(self, ready_session):
        result = await check_numbers(ready_session, ["12345678901"] * 50, throttle=NoDelay())

        assert result.total == 50
        assert all(r.is_registered for r in result.results)

    @pytest.mark.asyncio
    async def test_not_ready(self, session, fake_client):
        with pytest.raises(ClientNotReadyError):
            await check_numbers(session, ["12345678901"], throttle=NoDelay())

        assert fake_client.calls == []


class TestLimits:
    """Limits come from the application configuration."""

    def test_limits_follow_config(self):
        assert MAX_BATCH_SIZE == Config.MAX_BATCH_SIZE
        assert MIN_DIGITS == Config.MIN_DIGITS
