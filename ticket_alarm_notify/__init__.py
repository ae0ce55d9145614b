"""Ticket Alarm Notifier package.

This package polls a ticketing provider for seat availability on a fixed
list of events and pushes alarm notifications to registered devices when
seats appear.
"""

__version__ = "0.1.0"

# Import key components to make them available at the package level
from .app import AlarmServer, create_default_config, load_config
from .models import AppConfig, Event, EventSnapshot, TicketOffer, SessionConfig, NotificationConfig
from .notifications import NotificationDispatcher, ExpoPushService
from .registry import SubscriptionRegistry
from .scheduler import PollingScheduler
from .session import SessionClient
from .tracker import AvailabilityTracker
from .browser import BrowserManager

__all__ = [
    'AlarmServer',
    'create_default_config',
    'load_config',
    'AppConfig',
    'Event',
    'EventSnapshot',
    'TicketOffer',
    'SessionConfig',
    'NotificationConfig',
    'NotificationDispatcher',
    'ExpoPushService',
    'SubscriptionRegistry',
    'PollingScheduler',
    'SessionClient',
    'AvailabilityTracker',
    'BrowserManager',
]
