"""Shared fixtures and fakes for the test suite."""
import asyncio
from typing import Any, Dict, List, Optional

import pytest

from ticket_alarm_notify.models import Event, NotificationConfig, SessionConfig
from ticket_alarm_notify.notifications import NotificationDispatcher, PushTransport


def build_payload(*seat_counts: int, venue: str = "Stadium", date: str = "2026-06-15",
                 time: str = "19:30") -> Dict[str, Any]:
    """Provider payload with one tier per seat count under a single showtime."""
    tiers = {
        f"TIER{i}": {"minAvailableSeats": seats, "minPrice": 1500}
        for i, seats in enumerate(seat_counts, 1)
    }
    return {"data": {"eventCards": {venue: {date: {time: tiers}}}}}


class FakeProvider:
    """SessionProvider returning canned payloads keyed by event code."""

    def __init__(self, payloads: Optional[Dict[str, Any]] = None, ready: bool = True):
        self.ready = ready
        self.payloads = payloads or {}
        self.calls: List[str] = []
        self.headers: List[Dict[str, str]] = []
        self.gate: Optional[asyncio.Event] = None

    async def fetch_json(self, url: str, headers: Dict[str, str]) -> Dict[str, Any]:
        code = url.rsplit("/", 1)[-1]
        self.calls.append(code)
        self.headers.append(headers)
        if self.gate is not None:
            await self.gate.wait()
        payload = self.payloads.get(code, {"data": {}})
        if isinstance(payload, Exception):
            raise payload
        return payload


class RecordingTransport(PushTransport):
    """Push transport that records batches and can fail chosen ones."""

    def __init__(self, fail_batches=()):
        super().__init__(NotificationConfig())
        self.batches: List[list] = []
        self.fail_batches = set(fail_batches)

    async def _send_impl(self, messages):
        index = len(self.batches)
        self.batches.append(list(messages))
        if index in self.fail_batches:
            raise RuntimeError("push service unavailable")
        return [{"status": "ok", "id": f"ticket-{index}-{i}"} for i in range(len(messages))]

    @property
    def messages(self) -> list:
        return [m for batch in self.batches for m in batch]


@pytest.fixture
def events():
    return [Event(code="E1", name="Opening Match"), Event(code="E2", name="Final")]


@pytest.fixture
def session_config():
    return SessionConfig(base_url="https://tickets.example.com", region_code="BANG", settle_delay=0)


@pytest.fixture
def make_payload():
    return build_payload


@pytest.fixture
def provider():
    return FakeProvider()


@pytest.fixture
def transport():
    return RecordingTransport()


@pytest.fixture
def dispatcher(transport):
    return NotificationDispatcher(transport, batch_size=100)
