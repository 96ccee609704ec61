"""Candidate endpoint catalog.

Each logical query is served by several REST paths across the two API
dialects. Candidates are listed in priority order; the sequencer moves the
credential's own dialect to the front and keeps the relative order otherwise.
"""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Mapping

from teamboard.transport import Dialect


class Operation(Enum):
    GAMES = "games"
    GAME_INFO = "game-info"
    TASKS = "tasks"
    RESULTS = "results"
    PHOTOS = "photos"


@dataclass(frozen=True)
class Candidate:
    """One REST path template, relative to its dialect's root."""

    dialect: Dialect
    path: str

    def render(self, root: str, params: Mapping[str, object]) -> str:
        return f"{root}{self.path.format(**params)}"


@dataclass(frozen=True)
class OperationPolicy:
    """How the sequencer treats outcomes of one operation.

    advance_on_empty: a 2xx with zero records moves to the next candidate.
    critical: exhausting all candidates without any success raises instead
        of returning an empty collection.
    single_record: the endpoint returns one document, not a collection.
    """

    advance_on_empty: bool = True
    critical: bool = False
    single_record: bool = False


V4 = Dialect.MODERN
V3 = Dialect.LEGACY

DEFAULT_CANDIDATES: Mapping[Operation, tuple[Candidate, ...]] = MappingProxyType(
    {
        Operation.GAMES: (
            Candidate(V4, "/games?limit={games_limit}"),
            Candidate(V3, "/games?limit={games_limit}"),
        ),
        Operation.GAME_INFO: (
            Candidate(V4, "/games/{game_id}?includeTasks=true"),
            Candidate(V3, "/games/{game_id}"),
        ),
        Operation.TASKS: (
            Candidate(V4, "/games/{game_id}/tasks?limit={tasks_limit}"),
            Candidate(V4, "/tasks?gameId={game_id}&limit={tasks_limit}"),
            Candidate(V3, "/games/{game_id}/questions?limit={tasks_limit}"),
        ),
        Operation.RESULTS: (
            Candidate(
                V4,
                "/games/{game_id}/results?sort=-totalScore&includeAnswers=true"
                "&limit={results_limit}",
            ),
            Candidate(
                V4, "/results?gameId={game_id}&includeAnswers=true&limit={results_limit}"
            ),
            Candidate(V3, "/games/{game_id}/results"),
        ),
        Operation.PHOTOS: (
            Candidate(V4, "/results/media?gameId={game_id}&limit={photos_limit}"),
            Candidate(V4, "/results/{game_id}/media"),
            Candidate(V3, "/results/{game_id}/media"),
        ),
    }
)

DEFAULT_POLICIES: Mapping[Operation, OperationPolicy] = MappingProxyType(
    {
        Operation.GAMES: OperationPolicy(),
        Operation.GAME_INFO: OperationPolicy(advance_on_empty=False, single_record=True),
        Operation.TASKS: OperationPolicy(),
        Operation.RESULTS: OperationPolicy(critical=True),
        Operation.PHOTOS: OperationPolicy(),
    }
)


def ordered_candidates(
    candidates: tuple[Candidate, ...], preferred: Dialect
) -> tuple[Candidate, ...]:
    """Moves the preferred dialect's candidates to the front (stable)."""
    own = tuple(c for c in candidates if c.dialect is preferred)
    other = tuple(c for c in candidates if c.dialect is not preferred)
    return own + other
