"""
Main application module for the Ticket Alarm Notifier.
"""
import logging
import os
from typing import List, Optional

from .browser import BrowserManager
from .models import AppConfig, Event, NotificationConfig, SessionConfig
from .notifications import NotificationDispatcher, create_dispatcher
from .registry import SubscriptionRegistry
from .scheduler import PollingScheduler
from .session import SessionClient, SessionProvider
from .tracker import AvailabilityTracker

logger = logging.getLogger(__name__)

DEFAULT_EVENTS: List[Event] = [
    Event(code="ET00474265", name="India vs USA"),
    Event(code="ET00474011", name="India vs Namibia"),
    Event(code="ET00474320", name="India vs Pakistan"),
    Event(code="ET00474264", name="Super 8 Match 8"),
    Event(code="ET00474002", name="Super 8 Match 12"),
]


class AlarmServer:
    """Owns the session, state and scheduler for one running process."""

    def __init__(
        self,
        config: AppConfig,
        provider: Optional[SessionProvider] = None,
        dispatcher: Optional[NotificationDispatcher] = None,
    ):
        self.config = config
        self.provider = provider if provider is not None else BrowserManager(config.session)
        self.session = SessionClient(self.provider, config.session)
        self.tracker = AvailabilityTracker()
        self.registry = SubscriptionRegistry()
        self.dispatcher = dispatcher if dispatcher is not None else create_dispatcher(config.notification)
        self.scheduler = PollingScheduler(
            events=config.events,
            session=self.session,
            tracker=self.tracker,
            registry=self.registry,
            dispatcher=self.dispatcher,
            check_interval=config.check_interval,
        )

    @property
    def events(self) -> List[Event]:
        return self.scheduler.events

    @property
    def session_ready(self) -> bool:
        return self.session.ready

    async def start(self) -> None:
        """Establish the session and start periodic checks if it succeeded."""
        logger.info("📱 Waiting for devices to register...")
        start = getattr(self.provider, "start", None)
        if start is not None:
            await start()

        if self.session_ready:
            self.scheduler.start()
        else:
            logger.error("❌ Browser failed to start. Ticket checking disabled.")

    async def stop(self) -> None:
        logger.info("🛑 Shutting down...")
        await self.scheduler.stop()
        cleanup = getattr(self.provider, "cleanup", None)
        if cleanup is not None:
            await cleanup()


def create_default_config() -> AppConfig:
    """Create a default configuration."""
    return AppConfig(
        events=list(DEFAULT_EVENTS),
        check_interval=30.0,
        host="0.0.0.0",
        port=3000,
        log_level="INFO",
        session=SessionConfig(headless=True),
        notification=NotificationConfig(),
    )


def load_config() -> AppConfig:
    """Load configuration from environment variables."""
    from dotenv import load_dotenv

    # Load environment variables from .env file
    load_dotenv()

    config = create_default_config()

    if os.getenv("HOST"):
        config.host = os.getenv("HOST")

    if os.getenv("PORT"):
        try:
            config.port = int(os.getenv("PORT"))
        except (ValueError, TypeError):
            logger.warning("Invalid PORT. Using default.")

    if os.getenv("CHECK_INTERVAL"):
        try:
            interval = float(os.getenv("CHECK_INTERVAL"))
        except (ValueError, TypeError):
            interval = 0
        if interval > 0:
            config.check_interval = interval
        else:
            logger.warning("Invalid CHECK_INTERVAL. Using default.")

    if os.getenv("HEADLESS"):
        config.session.headless = os.getenv("HEADLESS").lower() == "true"

    executable_path = os.getenv("BROWSER_EXECUTABLE_PATH") or os.getenv("PUPPETEER_EXECUTABLE_PATH")
    if executable_path:
        config.session.executable_path = executable_path

    if os.getenv("PROVIDER_URL"):
        config.session.base_url = os.getenv("PROVIDER_URL").rstrip("/")

    if os.getenv("REGION_CODE"):
        config.session.region_code = os.getenv("REGION_CODE")

    if os.getenv("EXPO_ACCESS_TOKEN"):
        config.notification.access_token = os.getenv("EXPO_ACCESS_TOKEN")

    if os.getenv("LOG_LEVEL"):
        log_level = os.getenv("LOG_LEVEL").upper()
        if log_level in ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]:
            config.log_level = log_level

    return config
