from dataclasses import dataclass, field
from typing import Any, TypedDict

RawRecord = dict[str, Any]


class AnswerDict(TypedDict):
    task_id: str
    is_correct: bool | None
    score: float | None


class TeamResultDict(TypedDict):
    position: int
    name: str
    score: float
    correct_answers: int | None
    incorrect_answers: int | None
    color: str | None
    answers: list[AnswerDict]


class PhotoDict(TypedDict):
    id: str
    url: str
    thumbnail_url: str | None
    team_name: str | None
    task_title: str | None
    timestamp: str | int | None


class TaskDict(TypedDict):
    id: str
    title: str
    type: str


@dataclass
class GameListItem:
    """One entry of the game catalog shown in the lobby."""

    id: str
    name: str
    created: str | int | float | None = None
    is_playable: bool = True
    status: str | int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "created": self.created,
            "is_playable": self.is_playable,
            "status": self.status,
        }


@dataclass
class GameSession:
    """Game metadata, fetched once per game selection."""

    id: str
    name: str
    logo_url: str | None = None
    intro: str | None = None
    outro: str | None = None
    # Task records embedded in the game detail response, when the dialect has them
    embedded_tasks: list[RawRecord] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "logo_url": self.logo_url,
            "intro": self.intro,
            "outro": self.outro,
        }


@dataclass
class TaskDefinition:
    """A task in the reconciled catalog.

    ``type`` is the upstream kind for authoritative tasks and
    ``"synthetic"`` for tasks only known from an answer reference.
    """

    id: str
    title: str
    type: str
    raw_payload: RawRecord | None = None
    synthetic: bool = False

    def to_dict(self) -> TaskDict:
        return TaskDict(id=self.id, title=self.title, type=self.type)


@dataclass
class Answer:
    task_id: str
    is_correct: bool | None = None
    score: float | None = None
    raw_payload: RawRecord | None = None

    def to_dict(self) -> AnswerDict:
        return AnswerDict(
            task_id=self.task_id, is_correct=self.is_correct, score=self.score
        )


@dataclass
class TeamResult:
    """One team's standing in a results snapshot.

    Positions are 1-based, dense and unique within a snapshot.
    """

    position: int
    name: str
    score: float
    correct_answers: int | None = None
    incorrect_answers: int | None = None
    color: str | None = None
    is_finished: bool | None = None
    answers: list[Answer] = field(default_factory=list)
    raw_payload: RawRecord | None = None

    def to_dict(self) -> TeamResultDict:
        return TeamResultDict(
            position=self.position,
            name=self.name,
            score=self.score,
            correct_answers=self.correct_answers,
            incorrect_answers=self.incorrect_answers,
            color=self.color,
            answers=[a.to_dict() for a in self.answers],
        )


@dataclass
class Photo:
    """A media item; ``url`` is unique within any returned collection."""

    id: str
    url: str
    thumbnail_url: str | None = None
    team_name: str | None = None
    task_title: str | None = None
    timestamp: str | int | None = None

    def to_dict(self) -> PhotoDict:
        return PhotoDict(
            id=self.id,
            url=self.url,
            thumbnail_url=self.thumbnail_url,
            team_name=self.team_name,
            task_title=self.task_title,
            timestamp=self.timestamp,
        )


@dataclass(frozen=True)
class LiveEvent:
    """Transient notification raised when new answers arrive."""

    message: str
    subtext: str
    delta: int
    ttl: float = 4.0

    def to_dict(self) -> dict[str, Any]:
        return {"message": self.message, "subtext": self.subtext, "delta": self.delta}
