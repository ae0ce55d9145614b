"""Tests for the polling scheduler."""
import asyncio

import pytest

from ticket_alarm_notify.errors import FetchError
from ticket_alarm_notify.notifications import BURST_SIZE
from ticket_alarm_notify.registry import SubscriptionRegistry
from ticket_alarm_notify.scheduler import PollingScheduler
from ticket_alarm_notify.session import SessionClient
from ticket_alarm_notify.tracker import AvailabilityTracker

TOKEN_A = "ExponentPushToken[aaaaaaaaaaaaaaaaaaaaaa]"
TOKEN_B = "ExponentPushToken[bbbbbbbbbbbbbbbbbbbbbb]"


async def wait_until(predicate, attempts: int = 100) -> None:
    for _ in range(attempts):
        if predicate():
            return
        await asyncio.sleep(0)
    raise AssertionError("condition not reached")


class TestPollingScheduler:
    """Tests for the PollingScheduler class."""

    @pytest.fixture
    def registry(self):
        registry = SubscriptionRegistry()
        registry.register(TOKEN_A)
        return registry

    @pytest.fixture
    def scheduler(self, events, provider, session_config, registry, dispatcher):
        return PollingScheduler(
            events=events,
            session=SessionClient(provider, session_config),
            tracker=AvailabilityTracker(),
            registry=registry,
            dispatcher=dispatcher,
            check_interval=3600,
        )

    @pytest.mark.asyncio
    async def test_new_seats_send_one_burst(self, scheduler, provider, transport, make_payload):
        provider.payloads["E1"] = make_payload(5)

        assert await scheduler.run_sweep() is True

        assert len(transport.messages) == BURST_SIZE
        assert {m.to for m in transport.messages} == {TOKEN_A}
        assert transport.messages[0].data == {"eventCode": "E1", "seats": 5}
        assert scheduler.tracker.snapshot() == {"E1": 5, "E2": 0}
        assert scheduler.status.last_check_at is not None
        assert scheduler.status.is_checking is False

    @pytest.mark.asyncio
    async def test_repeat_then_zero_sends_nothing_more(self, scheduler, provider, transport, make_payload):
        provider.payloads["E1"] = make_payload(5)
        await scheduler.run_sweep()
        sent = len(transport.messages)

        await scheduler.run_sweep()
        assert len(transport.messages) == sent

        provider.payloads["E1"] = make_payload(0)
        await scheduler.run_sweep()
        assert len(transport.messages) == sent
        assert scheduler.tracker.previous("E1") == 0

    @pytest.mark.asyncio
    async def test_decrease_still_alarms(self, scheduler, provider, transport, make_payload):
        provider.payloads["E1"] = make_payload(5)
        await scheduler.run_sweep()
        provider.payloads["E1"] = make_payload(2)
        await scheduler.run_sweep()

        assert len(transport.messages) == 2 * BURST_SIZE
        assert transport.messages[-1].data["seats"] == 2

    @pytest.mark.asyncio
    async def test_events_checked_in_order(self, scheduler, provider):
        await scheduler.run_sweep()

        assert provider.calls == ["E1", "E2"]

    @pytest.mark.asyncio
    async def test_fetch_error_counts_as_zero_and_sweep_continues(self, scheduler, provider, transport, make_payload):
        provider.payloads["E1"] = make_payload(5)
        await scheduler.run_sweep()

        provider.payloads["E1"] = FetchError("Failed to fetch")
        provider.payloads["E2"] = make_payload(3)
        await scheduler.run_sweep()

        assert scheduler.tracker.snapshot() == {"E1": 0, "E2": 3}
        assert [m.data["eventCode"] for m in transport.messages[BURST_SIZE:]] == ["E2"] * BURST_SIZE

    @pytest.mark.asyncio
    async def test_non_finite_seat_count_does_not_halt_sweep(self, scheduler, provider, make_payload):
        payload = make_payload(2)
        payload["data"]["eventCards"]["Stadium"]["2026-06-15"]["19:30"]["HUGE"] = {
            "minAvailableSeats": float("inf"),
        }
        provider.payloads["E1"] = payload
        provider.payloads["E2"] = make_payload(3)

        assert await scheduler.run_sweep() is True

        assert provider.calls == ["E1", "E2"]
        assert scheduler.tracker.snapshot() == {"E1": 2, "E2": 3}
        assert scheduler.status.last_check_at is not None

    @pytest.mark.asyncio
    async def test_session_not_ready_sweeps_are_noops(self, scheduler, provider, transport, make_payload):
        provider.ready = False
        provider.payloads["E1"] = make_payload(5)

        assert await scheduler.run_sweep() is True

        assert provider.calls == []
        assert transport.batches == []
        assert scheduler.tracker.snapshot() == {"E1": 0, "E2": 0}

    @pytest.mark.asyncio
    async def test_only_interested_devices_alarmed(self, scheduler, provider, registry, transport, make_payload):
        registry.register(TOKEN_A, ["E2"])
        registry.register(TOKEN_B)
        provider.payloads["E1"] = make_payload(4)

        await scheduler.run_sweep()

        assert {m.to for m in transport.messages} == {TOKEN_B}

    @pytest.mark.asyncio
    async def test_overlapping_trigger_is_dropped(self, scheduler, provider):
        provider.gate = asyncio.Event()
        first = asyncio.create_task(scheduler.run_sweep())
        await wait_until(lambda: provider.calls)

        assert scheduler.status.is_checking is True
        assert await scheduler.run_sweep() is False
        assert scheduler.tick() is None

        provider.gate.set()
        assert await first is True
        assert provider.calls == ["E1", "E2"]
        assert scheduler.sweep_count == 1

    @pytest.mark.asyncio
    async def test_tick_starts_background_sweep(self, scheduler, provider):
        task = scheduler.tick()

        assert task is not None
        assert await task is True
        assert provider.calls == ["E1", "E2"]

    @pytest.mark.asyncio
    async def test_run_sweeps_immediately_and_stops(self, scheduler, provider):
        scheduler.start()
        await wait_until(lambda: scheduler.sweep_count == 1 and not scheduler.status.is_checking)

        assert scheduler.running is True
        await scheduler.stop()

        assert scheduler.running is False
        assert provider.calls == ["E1", "E2"]

    @pytest.mark.asyncio
    async def test_stop_cancels_sweep_in_flight(self, scheduler, provider):
        provider.gate = asyncio.Event()
        scheduler.start()
        await wait_until(lambda: provider.calls)

        await scheduler.stop()

        assert scheduler.running is False
        assert scheduler.status.is_checking is False
        assert scheduler.status.last_check_at is None
