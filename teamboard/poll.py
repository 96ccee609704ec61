"""Live-update detection across polling cycles.

The tracker keeps the running total of answers for the active game. The first
snapshot only sets the baseline; later snapshots with a higher total emit a
``LiveEvent``. A lower or equal total (corrections, deleted answers) silently
becomes the new baseline. Selecting another game resets the tracker.
"""

from enum import Enum

import structlog

from teamboard.models import LiveEvent, TeamResult
from teamboard.results import total_answer_count

logger = structlog.get_logger(__name__)

LIVE_MESSAGE = "INCOMING TRANSMISSION"


class TrackerState(Enum):
    BASELINE = "baseline"
    ARMED = "armed"


def live_event_for(delta: int, ttl: float = 4.0) -> LiveEvent:
    plural = "S" if delta > 1 else ""
    return LiveEvent(
        message=LIVE_MESSAGE,
        subtext=f"{delta} NEW ANSWER{plural} RECEIVED",
        delta=delta,
        ttl=ttl,
    )


class PollDiffTracker:
    """Emits a notification when the total answer count grows.

    The tracker only decides *whether* to notify; how long a notification is
    displayed is up to the consumer (``LiveEvent.ttl`` carries the hint).
    """

    def __init__(self, notification_ttl: float = 4.0) -> None:
        self.notification_ttl = notification_ttl
        self._game_id: str | None = None
        self._state = TrackerState.BASELINE
        self._total = 0

    @property
    def state(self) -> TrackerState:
        return self._state

    @property
    def total(self) -> int:
        return self._total

    @property
    def game_id(self) -> str | None:
        return self._game_id

    def reset(self, game_id: str | None = None) -> None:
        self._game_id = game_id
        self._state = TrackerState.BASELINE
        self._total = 0

    def observe_total(self, game_id: str, total: int) -> LiveEvent | None:
        """Feeds one answer total; returns a LiveEvent when it increased."""
        if game_id != self._game_id:
            logger.debug("tracker_reset", previous=self._game_id, game_id=game_id)
            self.reset(game_id)

        if self._state is TrackerState.BASELINE:
            self._total = total
            self._state = TrackerState.ARMED
            return None

        previous = self._total
        self._total = total
        if total > previous:
            delta = total - previous
            logger.info("new_answers", game_id=game_id, delta=delta, total=total)
            return live_event_for(delta, self.notification_ttl)
        return None

    def observe(self, game_id: str, results: list[TeamResult]) -> LiveEvent | None:
        return self.observe_total(game_id, total_answer_count(results))
