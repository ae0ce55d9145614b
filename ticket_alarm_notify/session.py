"""
Seat availability lookups against the ticketing provider's event API.
"""
import logging
from typing import Any, Dict, Protocol

from .errors import FetchError, MalformedPayload, SessionNotReady
from .models import EventSnapshot, SessionConfig, TicketOffer

logger = logging.getLogger(__name__)


class SessionProvider(Protocol):
    """Anything that can fetch JSON with an established provider session."""

    ready: bool

    async def fetch_json(self, url: str, headers: Dict[str, str]) -> Dict[str, Any]:
        ...


def _tier_to_offer(
    tier: Dict[str, Any],
    key: str,
    venue: str,
    date: str,
    time: str,
    seats: int,
    url: str,
) -> TicketOffer:
    return TicketOffer(
        name=tier.get('eventName') or key,
        venue=tier.get('venueName') or venue,
        date=tier.get('eventDate') or date,
        time=tier.get('eventTime') or time,
        seats=seats,
        price=float(tier.get('minPrice') or 0),
        url=url,
    )


def parse_event_cards(code: str, payload: Dict[str, Any], base_url: str) -> EventSnapshot:
    """Flatten a venue -> date -> showtime -> tier payload into a snapshot.

    Tiers that cannot be read are skipped; a tier without
    ``minAvailableSeats`` counts as zero seats.

    Raises:
        FetchError: the in-page request reported an error.
        MalformedPayload: the payload has no root ``data`` field.
    """
    if not isinstance(payload, dict):
        raise MalformedPayload("response is not a JSON object", code)
    if payload.get('error'):
        raise FetchError(str(payload['error']), code)
    if 'data' not in payload:
        raise MalformedPayload("missing data field", code)

    snapshot = EventSnapshot(code=code)
    data = payload['data']
    event_cards = data.get('eventCards') if isinstance(data, dict) else None
    if not isinstance(event_cards, dict):
        return snapshot

    url = f"{base_url}/events/{code}"
    for venue, dates in event_cards.items():
        if not isinstance(dates, dict):
            continue
        for date, times in dates.items():
            if not isinstance(times, dict):
                continue
            for time, tiers in times.items():
                if not isinstance(tiers, dict):
                    continue
                for key, tier in tiers.items():
                    try:
                        seats = max(int(tier.get('minAvailableSeats') or 0), 0)
                        offer = _tier_to_offer(tier, key, venue, date, time, seats, url) if seats else None
                    except (AttributeError, TypeError, ValueError, OverflowError) as e:
                        logger.debug(f"Skipping malformed tier {key!r} for {code}: {e}")
                        continue
                    snapshot.total_seats += seats
                    if offer:
                        snapshot.tickets.append(offer)
    return snapshot


class SessionClient:
    """Fetches event availability through a shared provider session."""

    def __init__(self, provider: SessionProvider, config: SessionConfig):
        self.provider = provider
        self.config = config

    @property
    def ready(self) -> bool:
        return bool(self.provider.ready)

    def _headers(self) -> Dict[str, str]:
        return {
            "Accept": "application/json",
            "x-app-code": "WEB",
            "x-platform-code": "WEB",
            "x-region-code": self.config.region_code,
        }

    async def fetch_event_availability(self, code: str) -> EventSnapshot:
        """Fetch and parse availability for one event code.

        Raises:
            SessionNotReady: the session was never established.
            FetchError: the request or payload failed.
        """
        if not self.ready:
            raise SessionNotReady(code)

        url = f"{self.config.base_url}/api/le/events/info/{code}"
        try:
            payload = await self.provider.fetch_json(url, self._headers())
            return parse_event_cards(code, payload, self.config.base_url)
        except FetchError:
            raise
        except Exception as e:
            raise FetchError(str(e), code) from e
