"""
Periodic, single-flight availability sweeps.
"""
import asyncio
import logging
from datetime import datetime, timezone
from typing import List, Optional, Set

from .errors import FetchError
from .models import Event, SweepStatus, Transition
from .notifications import NotificationDispatcher
from .registry import SubscriptionRegistry
from .session import SessionClient
from .tracker import AvailabilityTracker

logger = logging.getLogger(__name__)


class PollingScheduler:
    """Sweeps the configured events and raises alarms on new availability.

    At most one sweep runs at a time. A trigger that arrives while a sweep
    is in progress is dropped, not queued. Events within a sweep are
    checked one after another in configured order.
    """

    def __init__(
        self,
        events: List[Event],
        session: SessionClient,
        tracker: AvailabilityTracker,
        registry: SubscriptionRegistry,
        dispatcher: NotificationDispatcher,
        check_interval: float = 30.0,
    ):
        self.events = list(events)
        self.session = session
        self.tracker = tracker
        self.registry = registry
        self.dispatcher = dispatcher
        self.check_interval = check_interval
        self.status = SweepStatus()
        self.sweep_count = 0
        self.shutdown_event = asyncio.Event()
        self._loop_task: Optional[asyncio.Task] = None
        self._sweeps: Set[asyncio.Task] = set()

    @property
    def running(self) -> bool:
        return self._loop_task is not None and not self._loop_task.done()

    async def run_sweep(self) -> bool:
        """Check every event once.

        Returns:
            False if the trigger was dropped because a sweep is already running.
        """
        if self.status.is_checking:
            logger.info("⏭️ Sweep already in progress, dropping trigger")
            return False

        self.status.is_checking = True
        self.sweep_count += 1
        try:
            logger.info(f"🔍 Checking tickets (sweep #{self.sweep_count})...")
            for event in self.events:
                await self.check_event(event)
            self.status.last_check_at = datetime.now(timezone.utc)
        finally:
            self.status.is_checking = False
        return True

    async def check_event(self, event: Event) -> Transition:
        """Fetch one event, record it, and send alarms on new availability."""
        try:
            snapshot = await self.session.fetch_event_availability(event.code)
            seats = snapshot.total_seats
        except FetchError as e:
            logger.warning(f"  ⚠️ Error checking {event.code}: {e.reason}")
            seats = 0

        transition = self.tracker.observe(event.code, seats)
        logger.info(f"  {event.name}: {transition.current} seats (was: {transition.previous})")

        if transition.is_new_availability:
            logger.info(f"  🎉 NEW TICKETS FOUND for {event.name}!")
            devices = self.registry.list_interested(event.code)
            await self.dispatcher.send_alarm_burst(devices, event, transition.current)

        return transition

    def tick(self) -> Optional[asyncio.Task]:
        """Start a background sweep unless one is already running."""
        if self.status.is_checking:
            logger.debug("Timer tick dropped, sweep in progress")
            return None
        task = asyncio.create_task(self.run_sweep())
        self._sweeps.add(task)
        task.add_done_callback(self._sweep_done)
        return task

    def _sweep_done(self, task: asyncio.Task) -> None:
        self._sweeps.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error(f"Error in sweep: {task.exception()}", exc_info=task.exception())

    async def run(self) -> None:
        """Tick now and then every ``check_interval`` seconds until stopped."""
        logger.info(f"🔄 Checking tickets every {self.check_interval:g} seconds")
        while not self.shutdown_event.is_set():
            self.tick()
            try:
                await asyncio.wait_for(self.shutdown_event.wait(), timeout=self.check_interval)
            except asyncio.TimeoutError:
                pass
        logger.info("✅ Ticket checking stopped")

    def start(self) -> asyncio.Task:
        if not self.running:
            self.shutdown_event.clear()
            self._loop_task = asyncio.create_task(self.run())
        return self._loop_task

    async def stop(self) -> None:
        """Stop the timer and abandon any sweep still in flight."""
        self.shutdown_event.set()
        if self._loop_task:
            await self._loop_task
            self._loop_task = None
        for task in list(self._sweeps):
            task.cancel()
        if self._sweeps:
            await asyncio.gather(*self._sweeps, return_exceptions=True)
