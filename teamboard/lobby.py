"""Game catalog grouping for the lobby.

Games are split into today / planned / completed by status and event date.
"""

from dataclasses import dataclass, field
from datetime import datetime

from teamboard.models import GameListItem
from teamboard.utils.date_and_time import parse_game_date

CLOSED_STATUSES = frozenset({"closed", "ended", "archived"})


@dataclass
class GroupedGames:
    today: list[GameListItem] = field(default_factory=list)
    planned: list[GameListItem] = field(default_factory=list)
    completed: list[GameListItem] = field(default_factory=list)


def is_closed(game: GameListItem) -> bool:
    status = str(game.status or "").lower()
    return status in CLOSED_STATUSES or game.is_playable is False


def _sort_key(game: GameListItem) -> float:
    parsed = parse_game_date(game.created)
    return parsed.timestamp() if parsed else 0.0


def group_games(games: list[GameListItem], now: datetime | None = None) -> GroupedGames:
    """Groups games relative to the local calendar day of ``now``.

    Closed or unplayable games and games without a parseable date are
    completed. Today and planned are sorted oldest first, completed newest
    first.
    """
    now = (now or datetime.now()).astimezone()
    today = now.date()
    grouped = GroupedGames()

    for game in games:
        if is_closed(game):
            grouped.completed.append(game)
            continue

        parsed = parse_game_date(game.created)
        if parsed is None:
            grouped.completed.append(game)
            continue

        day = parsed.astimezone(now.tzinfo).date()
        if day < today:
            grouped.completed.append(game)
        elif day > today:
            grouped.planned.append(game)
        else:
            grouped.today.append(game)

    grouped.today.sort(key=_sort_key)
    grouped.planned.sort(key=_sort_key)
    grouped.completed.sort(key=_sort_key, reverse=True)
    return grouped
