"""Exceptions raised across the Ticket Alarm Notifier."""
from typing import Optional


class AlarmError(Exception):
    """Base error for the application."""


class InvalidToken(AlarmError):
    """A push token does not match the push service address format."""

    def __init__(self, message: str = "Invalid Expo push token"):
        self.message = message
        super().__init__(message)


class FetchError(AlarmError):
    """Availability for an event could not be fetched."""

    def __init__(self, reason: str, code: Optional[str] = None):
        self.reason = reason
        self.code = code
        super().__init__(reason if code is None else f"{code}: {reason}")


class SessionNotReady(FetchError):
    """The browser session has not been established."""

    def __init__(self, code: Optional[str] = None):
        super().__init__("session_not_ready", code)


class MalformedPayload(FetchError):
    """The provider response is missing its root data field."""


class TransportError(AlarmError):
    """The push service rejected or failed a batch."""
