"""Data models and types for the Ticket Alarm Notifier."""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, Tuple, List, Dict, Any, FrozenSet


@dataclass(frozen=True)
class Event:
    """A monitored event on the ticketing provider."""
    code: str
    name: str


@dataclass
class TicketOffer:
    """One ticket tier with seats left."""
    name: str
    venue: str
    date: str
    time: str
    seats: int
    price: float = 0
    url: Optional[str] = None


@dataclass
class EventSnapshot:
    """Availability observed for one event in a single poll."""
    code: str
    total_seats: int = 0
    tickets: List[TicketOffer] = field(default_factory=list)


@dataclass(frozen=True)
class Transition:
    """Result of comparing a new observation with the last one."""
    is_new_availability: bool
    previous: int
    current: int


@dataclass
class DeviceSubscription:
    """A registered device and the events it wants alarms for."""
    token: str
    subscribed_events: Optional[FrozenSet[str]] = None
    registered_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def is_interested_in(self, code: str) -> bool:
        # No explicit filter means every event
        if not self.subscribed_events:
            return True
        return code in self.subscribed_events


@dataclass
class SweepStatus:
    """State of the polling loop, read by status reporting."""
    is_checking: bool = False
    last_check_at: Optional[datetime] = None


@dataclass
class PushMessage:
    """Represents a push notification to be sent to one device."""
    to: str
    title: str
    body: str
    data: Dict[str, Any] = field(default_factory=dict)
    sound: str = "default"
    priority: str = "high"
    channel_id: str = "alarm"

    def to_payload(self) -> Dict[str, Any]:
        """Serialise to the push service wire format."""
        payload = {
            "to": self.to,
            "sound": self.sound,
            "title": self.title,
            "body": self.body,
            "priority": self.priority,
            "channelId": self.channel_id,
        }
        if self.data:
            payload["data"] = self.data
        return payload


@dataclass
class BatchResult:
    """Outcome of handing one batch of messages to the push transport."""
    size: int
    success: bool
    tickets: List[Dict[str, Any]] = field(default_factory=list)
    error: Optional[str] = None


@dataclass
class SessionConfig:
    """Configuration for the browser session."""
    headless: bool = True
    timeout: int = 60
    user_agent: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/120.0.0.0 Safari/537.36"
    )
    viewport: Tuple[int, int] = (1280, 800)
    executable_path: Optional[str] = None
    base_url: str = "https://in.bookmyshow.com"
    region_code: str = "BANG"
    settle_delay: float = 2.0  # seconds to wait after the landing page loads


@dataclass
class NotificationConfig:
    """Configuration for push notifications."""
    push_url: str = "https://exp.host/--/api/v2/push/send"
    access_token: Optional[str] = None
    batch_size: int = 100


@dataclass
class AppConfig:
    """Main application configuration."""
    events: List[Event]
    check_interval: float = 30.0  # seconds
    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"
    session: SessionConfig = field(default_factory=SessionConfig)
    notification: NotificationConfig = field(default_factory=NotificationConfig)
