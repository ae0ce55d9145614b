"""
Push notification delivery for the Ticket Alarm Notifier.
"""
import logging
from typing import Optional, List, Dict, Any, Sequence, Tuple

import httpx

from .errors import InvalidToken, TransportError
from .models import BatchResult, DeviceSubscription, Event, NotificationConfig, PushMessage
from .registry import is_push_token, mask_token

logger = logging.getLogger(__name__)

# Ordered, escalating alarm texts; one message per entry in a burst
ALARM_TEMPLATES: List[Tuple[str, str]] = [
    ('🚨🔔 ALARM 1/10 🔔🚨', '{name}: {seats} SEATS AVAILABLE NOW!!!'),
    ('🔔🚨 ALARM 2/10 🚨🔔', 'BOOK NOW! {seats} tickets for {name}!'),
    ('⚡💥 ALARM 3/10 💥⚡', 'HURRY! {name} has {seats} seats!'),
    ('🔥🔥 ALARM 4/10 🔥🔥', 'HOT! {seats} seats for {name}!'),
    ('🏏🎫 ALARM 5/10 🎫🏏', 'CRICKET TICKETS! {name}: {seats}!'),
    ('💥⚡ ALARM 6/10 ⚡💥', 'ACT FAST! {seats} seats going fast!'),
    ('🎯🎯 ALARM 7/10 🎯🎯', 'TARGET: {name} - {seats} seats!'),
    ('⏰⏰ ALARM 8/10 ⏰⏰', 'TIME CRITICAL! Book {name} NOW!'),
    ('🎫🚀 ALARM 9/10 🚀🎫', 'LAST CHANCE! {seats} seats remaining!'),
    ('🚀🚀 ALARM 10/10 🚀🚀', 'FINAL ALERT! {name}: {seats} seats! GO!!!'),
]

BURST_SIZE = len(ALARM_TEMPLATES)

TEST_TEMPLATES: List[Tuple[str, str]] = [
    (f'🚨🔔 ALARM {i}/{BURST_SIZE} 🔔🚨', f'TEST NOTIFICATION {i}/{BURST_SIZE} - Server is working!')
    for i in range(1, BURST_SIZE + 1)
]


class PushTransport:
    """Base class for push transports.

    ``send`` hands one batch to the service and returns one ticket per
    message. Each batch is posted once; a failure is left to the caller.
    """

    def __init__(self, config: NotificationConfig):
        self.config = config

    async def send(self, messages: Sequence[PushMessage]) -> List[Dict[str, Any]]:
        """Send one batch.

        Raises:
            TransportError: the batch was not accepted.
        """
        try:
            return await self._send_impl(messages)
        except Exception as e:
            raise TransportError(f"Failed to send {len(messages)} notifications: {e}") from e

    async def _send_impl(self, messages: Sequence[PushMessage]) -> List[Dict[str, Any]]:
        """Implementation of the sending logic."""
        raise NotImplementedError("Subclasses must implement this method")


class ExpoPushService(PushTransport):
    """Push transport for the Expo push API."""

    async def _send_impl(self, messages: Sequence[PushMessage]) -> List[Dict[str, Any]]:
        """Post a batch to the Expo push endpoint."""
        headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
        }
        if self.config.access_token:
            headers["Authorization"] = f"Bearer {self.config.access_token}"

        async with httpx.AsyncClient(timeout=30.0) as client:
            response = await client.post(
                self.config.push_url,
                json=[m.to_payload() for m in messages],
                headers=headers
            )
            response.raise_for_status()
            body = response.json()

        if body.get("errors"):
            raise TransportError(f"Push service returned errors: {body['errors']}")
        return body.get("data") or []


def chunk_messages(messages: Sequence[PushMessage], size: int) -> List[List[PushMessage]]:
    """Split messages into consecutive batches of at most ``size``."""
    size = max(size, 1)
    return [list(messages[i:i + size]) for i in range(0, len(messages), size)]


class NotificationDispatcher:
    """Builds alarm bursts and delivers them in transport-sized batches."""

    def __init__(self, transport: PushTransport, batch_size: int = 100):
        self.transport = transport
        self.batch_size = batch_size

    @staticmethod
    def _compose(token: str, templates: Sequence[Tuple[str, str]], data: Optional[Dict[str, Any]] = None,
                 **values: Any) -> List[PushMessage]:
        return [
            PushMessage(
                to=token,
                title=title.format(**values),
                body=body.format(**values),
                data=dict(data or {}),
            )
            for title, body in templates
        ]

    def build_burst(self, token: str, event: Event, seats: int) -> List[PushMessage]:
        """The ordered alarm burst for one device and one event."""
        return self._compose(
            token,
            ALARM_TEMPLATES,
            data={'eventCode': event.code, 'seats': seats},
            name=event.name,
            seats=seats,
        )

    def build_test_burst(self, token: str) -> List[PushMessage]:
        return self._compose(token, TEST_TEMPLATES)

    async def deliver(self, messages: Sequence[PushMessage]) -> List[BatchResult]:
        """Send every batch; a failed batch is logged and the rest still go out."""
        results = []
        for batch in chunk_messages(messages, self.batch_size):
            try:
                tickets = await self.transport.send(batch)
            except TransportError as e:
                logger.error(f"❌ Error sending {len(batch)} notifications: {e}")
                results.append(BatchResult(size=len(batch), success=False, error=str(e)))
                continue

            failed = [t for t in tickets if isinstance(t, dict) and t.get("status") == "error"]
            for ticket in failed:
                logger.warning(f"⚠️ Push ticket error: {ticket.get('message')}")
            logger.info(f"📤 Sent {len(batch)} notifications")
            results.append(BatchResult(size=len(batch), success=True, tickets=tickets))
        return results

    async def send_alarm_burst(
        self,
        devices: Sequence[DeviceSubscription],
        event: Event,
        seats: int
    ) -> List[BatchResult]:
        """Send the alarm burst for ``event`` to every device."""
        if not devices:
            logger.info("⚠️ No registered devices to notify")
            return []

        messages: List[PushMessage] = []
        notified = 0
        for device in devices:
            if not is_push_token(device.token):
                logger.warning(f"Skipping invalid token {mask_token(device.token)}")
                continue
            messages.extend(self.build_burst(device.token, event, seats))
            notified += 1

        if not messages:
            return []

        logger.info(f"🎉 Sending {len(messages)} alarm notifications for {event.name} to {notified} device(s)")
        return await self.deliver(messages)

    async def send_test_burst(self, token: str) -> List[BatchResult]:
        """Send the fixed test burst to one token.

        Raises:
            InvalidToken: the token is not a push address.
            TransportError: a batch could not be delivered.
        """
        if not is_push_token(token):
            raise InvalidToken("Invalid token")

        results = await self.deliver(self.build_test_burst(token))
        for result in results:
            if not result.success:
                raise TransportError(result.error or "Failed to send test notifications")

        logger.info(f"🧪 Test notifications sent to: {mask_token(token)}")
        return results


def create_dispatcher(config: NotificationConfig) -> NotificationDispatcher:
    """Create a dispatcher backed by the Expo push service."""
    return NotificationDispatcher(ExpoPushService(config), batch_size=config.batch_size)
