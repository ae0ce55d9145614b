"""
In-memory registry of devices subscribed to seat alarms.
"""
import logging
import re
from typing import Any, Dict, FrozenSet, Iterable, List, Optional

from .errors import InvalidToken
from .models import DeviceSubscription

logger = logging.getLogger(__name__)

_UUID_RE = re.compile(r'^[a-z\d]{8}-[a-z\d]{4}-[a-z\d]{4}-[a-z\d]{4}-[a-z\d]{12}$', re.IGNORECASE)


def is_push_token(token: Any) -> bool:
    """Check a token against the Expo push address format."""
    if not isinstance(token, str) or not token:
        return False
    if token.startswith(('ExponentPushToken[', 'ExpoPushToken[')) and token.endswith(']'):
        return True
    return bool(_UUID_RE.match(token))


def mask_token(token: Optional[str]) -> str:
    """Shorten a token for log output."""
    if not token:
        return "<none>"
    return f"{token[:30]}..."


def normalize_events(events: Optional[Iterable[Any]]) -> Optional[FrozenSet[str]]:
    """Turn a list of codes or ``{code, name}`` objects into a set of codes.

    ``None`` and empty input both mean every event.
    """
    if not events:
        return None
    codes = set()
    for item in events:
        code = item.get('code') if isinstance(item, dict) else getattr(item, 'code', item)
        if code:
            codes.add(str(code))
    return frozenset(codes) or None


class SubscriptionRegistry:
    """Devices keyed by push token; one entry per token."""

    def __init__(self):
        self._subscriptions: Dict[str, DeviceSubscription] = {}

    def __len__(self) -> int:
        return len(self._subscriptions)

    def __contains__(self, token: str) -> bool:
        return token in self._subscriptions

    def get(self, token: str) -> Optional[DeviceSubscription]:
        return self._subscriptions.get(token)

    def all(self) -> List[DeviceSubscription]:
        return list(self._subscriptions.values())

    def register(self, token: str, subscribed_events: Optional[Iterable[Any]] = None) -> DeviceSubscription:
        """Add a device, replacing any earlier registration of the token.

        Raises:
            InvalidToken: the token is not a push address.
        """
        if not is_push_token(token):
            raise InvalidToken()

        # Re-registration moves the token to the end
        self._subscriptions.pop(token, None)
        subscription = DeviceSubscription(token=token, subscribed_events=normalize_events(subscribed_events))
        self._subscriptions[token] = subscription
        logger.info(f"✅ Token registered: {mask_token(token)} ({len(self)} total)")
        return subscription

    def unregister(self, token: str) -> bool:
        removed = self._subscriptions.pop(token, None) is not None
        logger.info(f"❌ Token unregistered: {mask_token(token)}")
        return removed

    def update_events(self, token: str, events: Optional[Iterable[Any]]) -> bool:
        """Replace the event filter of a known token; unknown tokens are ignored."""
        subscription = self._subscriptions.get(token)
        if subscription is None:
            return False
        subscription.subscribed_events = normalize_events(events)
        logger.info(f"📝 Events updated for token: {mask_token(token)}")
        return True

    def list_interested(self, code: str) -> List[DeviceSubscription]:
        """Devices whose filter includes ``code`` or that have no filter."""
        return [s for s in self._subscriptions.values() if s.is_interested_in(code)]
