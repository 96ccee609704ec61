from typing import Any

import structlog

from teamboard import photos as photo_aggregator
from teamboard.client import ApiClient
from teamboard.config import Settings
from teamboard.endpoints import Operation
from teamboard.exceptions import AuthError, TeamboardError
from teamboard.models import (
    GameListItem,
    GameSession,
    Photo,
    RawRecord,
    TaskDefinition,
    TeamResult,
)
from teamboard.results import results_from_records
from teamboard.sequencer import EndpointSequencer
from teamboard.sources.base_source import BaseSource
from teamboard.tasks import tasks_from_records
from teamboard.transport import GUEST_CREDENTIAL

logger = structlog.get_logger(__name__)

CREATED_FIELDS = ("eventDate", "date", "startTime", "start", "created", "createdAt")


def _first_truthy(record: RawRecord, keys: tuple[str, ...]) -> Any:
    return next((record[k] for k in keys if record.get(k)), None)


def game_from_record(record: RawRecord) -> GameListItem | None:
    raw_id = record.get("id")
    if raw_id in (None, ""):
        return None
    game_id = str(raw_id)
    return GameListItem(
        id=game_id,
        name=str(record.get("title") or record.get("name") or game_id),
        created=_first_truthy(record, CREATED_FIELDS),
        is_playable=record.get("playable") is not False,
        status=record.get("status"),
    )


def session_from_record(game_id: str, record: RawRecord | None) -> GameSession:
    if not record:
        return GameSession(id=game_id, name=game_id)
    embedded = record.get("tasks") or record.get("questions") or []
    return GameSession(
        id=game_id,
        name=str(record.get("title") or record.get("name") or game_id),
        logo_url=record.get("logoUrl") or record.get("imageUrl"),
        intro=record.get("intro"),
        outro=record.get("outro"),
        embedded_tasks=[t for t in embedded if isinstance(t, dict)]
        if isinstance(embedded, list)
        else [],
    )


class QuizApiSource(BaseSource):
    """Source implementation for the versioned quiz REST API (both dialects)."""

    def __init__(
        self,
        credential: str,
        settings: Settings | None = None,
        sequencer: EndpointSequencer | None = None,
    ):
        """Initializes the QuizApiSource.

        Args:
            credential: Opaque credential; its form selects the dialect.
            settings: Runtime settings (defaults if omitted).
            sequencer: An optional pre-built sequencer (tests inject fakes here).
        """
        self.credential = credential
        self.settings = settings or Settings()
        self._client: ApiClient | None = None
        if sequencer is None:
            self._client = ApiClient(timeout=self.settings.request_timeout)
            sequencer = EndpointSequencer(self._client, self.settings)
        self.sequencer = sequencer

    async def fetch_games(self) -> list[GameListItem]:
        if self.credential.strip() == GUEST_CREDENTIAL:
            return []

        records = await self.sequencer.resolve(Operation.GAMES, self.credential)
        games: list[GameListItem] = []
        seen: set[str] = set()
        for record in records:
            game = game_from_record(record)
            if game is None or game.id in seen:
                continue
            seen.add(game.id)
            games.append(game)
        logger.info("games_found", count=len(games))
        return games

    async def fetch_game_info(self, game_id: str) -> GameSession:
        records = await self.sequencer.resolve(
            Operation.GAME_INFO, self.credential, game_id=game_id
        )
        return session_from_record(game_id, records[0] if records else None)

    async def fetch_tasks(self, game_id: str) -> list[TaskDefinition]:
        records = await self.sequencer.resolve(
            Operation.TASKS, self.credential, game_id=game_id
        )
        tasks = tasks_from_records(records)
        logger.info("tasks_found", game_id=game_id, count=len(tasks))
        return tasks

    async def fetch_results(self, game_id: str) -> list[TeamResult]:
        records = await self.sequencer.resolve(
            Operation.RESULTS, self.credential, game_id=game_id
        )
        return results_from_records(records)

    async def fetch_photos(
        self,
        game_id: str,
        results: list[TeamResult] | None = None,
        tasks: list[TaskDefinition] | None = None,
    ) -> list[Photo]:
        sources = await self.sequencer.collect_all(
            Operation.PHOTOS, self.credential, game_id=game_id
        )

        if results is None:
            try:
                results = await self.fetch_results(game_id)
            except AuthError:
                raise
            except TeamboardError as e:
                logger.warning("photo_results_unavailable", game_id=game_id, error=e.message)
                results = []

        gallery = photo_aggregator.collect(sources, results, tasks)
        logger.info("photos_found", game_id=game_id, count=len(gallery))
        return gallery

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
