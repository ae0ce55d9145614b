"""Last-known seat counts and the rule for raising an alarm."""
from typing import Dict

from .models import Transition


class AvailabilityTracker:
    """Remembers the last seat count seen for each event code.

    An observation is new availability when seats exist and the count
    differs from the previous one. Decreases between two non-zero counts
    therefore alarm as well.
    """

    def __init__(self):
        self._seats: Dict[str, int] = {}

    def previous(self, code: str) -> int:
        return self._seats.get(code, 0)

    def observe(self, code: str, total_seats: int) -> Transition:
        """Record ``total_seats`` for ``code`` and report the transition."""
        current = max(int(total_seats), 0)
        previous = self.previous(code)
        self._seats[code] = current
        return Transition(
            is_new_availability=current > 0 and current != previous,
            previous=previous,
            current=current,
        )

    def snapshot(self) -> Dict[str, int]:
        """Copy of the current state for status reporting."""
        return dict(self._seats)
