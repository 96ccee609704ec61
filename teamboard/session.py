"""Live session orchestration for one selected game.

Snapshots are applied wholesale and keyed by a generation counter taken
when a request is issued. Selecting another game bumps the generation, so a
response belonging to the previous selection is dropped on arrival. Results
fetches are single-flight per generation (the initial load included): a poll
tick issued while one is outstanding is skipped. Every results request is
numbered when issued and a response older than the last applied one is
dropped.
"""

import asyncio
from collections.abc import Callable

import structlog

from teamboard.config import Settings
from teamboard.exceptions import TeamboardError
from teamboard.models import GameSession, LiveEvent, Photo, TaskDefinition, TeamResult
from teamboard.poll import PollDiffTracker
from teamboard.sources.base_source import BaseSource
from teamboard.tasks import all_answers, reconcile, tasks_from_records
from teamboard.utils.diff import calculate_stats

logger = structlog.get_logger(__name__)

Listener = Callable[[LiveEvent], None]


class LiveSession:
    """Holds the state of the currently selected game and keeps it fresh."""

    def __init__(
        self,
        source: BaseSource,
        settings: Settings | None = None,
        derive_titles: bool = False,
    ):
        self.source = source
        self.settings = settings or Settings()
        self.derive_titles = derive_titles
        self.tracker = PollDiffTracker(self.settings.notification_ttl)
        self._listeners: list[Listener] = []
        self._generation = 0
        self._in_flight_generation: int | None = None
        # Results requests are numbered; an older response never replaces a newer one
        self._issued = 0
        self._applied = 0
        self.game_id: str | None = None
        self._clear()

    def _clear(self) -> None:
        self.game: GameSession | None = None
        self.tasks: list[TaskDefinition] = []
        self.results: list[TeamResult] | None = None
        self.photos: list[Photo] = []
        self.photos_loaded = False

    @property
    def generation(self) -> int:
        return self._generation

    def add_listener(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def select_game(self, game_id: str) -> None:
        """Switches the active game; in-flight responses for the old one are dropped."""
        self._generation += 1
        self.game_id = game_id
        self._clear()
        self.tracker.reset(game_id)
        logger.info("game_selected", game_id=game_id, generation=self._generation)

    def _is_current(self, generation: int, game_id: str) -> bool:
        return generation == self._generation and game_id == self.game_id

    def _require_game(self) -> str:
        if self.game_id is None:
            raise TeamboardError(
                "No game selected", suggestion="Call select_game() first."
            )
        return self.game_id

    def _notify(self, event: LiveEvent) -> None:
        for listener in self._listeners:
            try:
                listener(event)
            except Exception as e:
                logger.error("listener_failed", error=str(e), exc_info=True)

    def _issue(self) -> int:
        """Numbers a results request in the order it was issued."""
        self._issued += 1
        return self._issued

    def _apply_results(self, game_id: str, results: list[TeamResult], ticket: int) -> bool:
        if ticket <= self._applied:
            logger.info(
                "older_snapshot_dropped", game_id=game_id, ticket=ticket, applied=self._applied
            )
            return False
        self._applied = ticket
        if self.results is not None:
            logger.info(
                "snapshot_applied",
                game_id=game_id,
                stats=calculate_stats(self.results, results),
            )
        self.tasks = reconcile(self.tasks, all_answers(results), self.derive_titles)
        self.results = results
        event = self.tracker.observe(game_id, results)
        if event is not None:
            self._notify(event)
        return True

    async def load(self) -> bool:
        """Initial load: game info, task catalog and results, fetched concurrently.

        The results fetch occupies the in-flight slot, so polls issued while
        loading are skipped. Errors propagate to the caller (user-visible
        first load).

        Returns:
            False if the selection changed while loading and the data was dropped.
        """
        game_id = self._require_game()
        generation = self._generation
        ticket = self._issue()

        self._in_flight_generation = generation
        try:
            info, tasks, results = await asyncio.gather(
                self.source.fetch_game_info(game_id),
                self.source.fetch_tasks(game_id),
                self.source.fetch_results(game_id),
            )
        finally:
            if self._in_flight_generation == generation:
                self._in_flight_generation = None

        if not self._is_current(generation, game_id):
            logger.info("stale_load_dropped", game_id=game_id, generation=generation)
            return False

        if not tasks and info.embedded_tasks:
            tasks = tasks_from_records(info.embedded_tasks)
        self.game = info
        self.tasks = tasks
        if not self._apply_results(game_id, results, ticket):
            self.tasks = reconcile(
                tasks, all_answers(self.results or []), self.derive_titles
            )
        return True

    async def poll(self) -> list[TeamResult] | None:
        """Fetches a fresh results snapshot.

        Failures are logged and the previous snapshot is kept.

        Returns:
            The applied snapshot, or None if skipped, failed or stale.
        """
        game_id = self._require_game()
        generation = self._generation
        if self._in_flight_generation == generation:
            logger.debug("poll_skipped_in_flight", game_id=game_id)
            return None

        ticket = self._issue()
        self._in_flight_generation = generation
        try:
            results = await self.source.fetch_results(game_id)
        except TeamboardError as e:
            logger.warning("poll_failed", game_id=game_id, **e.to_dict())
            return None
        finally:
            if self._in_flight_generation == generation:
                self._in_flight_generation = None

        if not self._is_current(generation, game_id):
            logger.info("stale_snapshot_dropped", game_id=game_id, generation=generation)
            return None

        if not self._apply_results(game_id, results, ticket):
            return None
        return results

    async def load_photos(self, refresh: bool = False) -> list[Photo]:
        """Returns the gallery, fetching it on first use or when refreshing.

        Never raises for upstream failures; the gallery stays as it was.
        """
        game_id = self._require_game()
        if self.photos_loaded and not refresh:
            return self.photos

        generation = self._generation
        try:
            gallery = await self.source.fetch_photos(game_id, self.results, self.tasks)
        except TeamboardError as e:
            logger.warning("photos_unavailable", game_id=game_id, **e.to_dict())
            return self.photos

        if not self._is_current(generation, game_id):
            logger.info("stale_gallery_dropped", game_id=game_id)
            return self.photos

        self.photos = gallery
        self.photos_loaded = True
        return self.photos

    async def run(self, stop: asyncio.Event) -> None:
        """Polls every ``poll_interval`` seconds until ``stop`` is set."""
        while not stop.is_set():
            try:
                await asyncio.wait_for(stop.wait(), timeout=self.settings.poll_interval)
            except TimeoutError:
                await self.poll()
