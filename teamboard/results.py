"""Raw team records to ranked TeamResult snapshots."""

from collections.abc import Iterable
from typing import Any

import structlog

from teamboard.models import Answer, RawRecord, TeamResult

logger = structlog.get_logger(__name__)

UNKNOWN_TEAM = "Unknown Team"


def _first_present(record: RawRecord, *keys: str) -> Any:
    """Returns the first value that is not None (0 counts as present)."""
    for key in keys:
        value = record.get(key)
        if value is not None:
            return value
    return None


def _number(value: Any) -> float:
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return value
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def answer_task_id(raw: RawRecord) -> str | None:
    """Finds the task reference of an answer across dialect field names."""
    for key in ("taskId", "questionId"):
        if raw.get(key):
            return str(raw[key])
    for key in ("task", "question"):
        nested = raw.get(key)
        if isinstance(nested, dict) and nested.get("id"):
            return str(nested["id"])
    if raw.get("question_id"):
        return str(raw["question_id"])
    return None


def answers_from_records(records: Iterable[Any]) -> list[Answer]:
    """Maps raw answers; answers without a task reference are dropped."""
    answers = []
    for raw in records:
        if not isinstance(raw, dict):
            continue
        task_id = answer_task_id(raw)
        if task_id is None:
            continue
        score = _number(raw.get("score"))
        answers.append(
            Answer(
                task_id=task_id,
                is_correct=raw.get("isCorrect") is True or score > 0,
                score=score,
                raw_payload=raw,
            )
        )
    return answers


def team_from_record(record: RawRecord, index: int) -> TeamResult:
    raw_answers = record.get("answers")
    return TeamResult(
        position=index + 1,
        name=str(record.get("name") or record.get("teamName") or UNKNOWN_TEAM),
        score=_number(
            _first_present(record, "totalScore", "answersScore", "score")
        ),
        correct_answers=record.get("correctAnswers"),
        incorrect_answers=record.get("incorrectAnswers"),
        color=record.get("color"),
        is_finished=record.get("isFinished"),
        answers=answers_from_records(raw_answers if isinstance(raw_answers, list) else []),
        raw_payload=record,
    )


def rank(teams: list[TeamResult]) -> list[TeamResult]:
    """Orders teams by score (descending, stable) and assigns positions 1..n."""
    ordered = sorted(teams, key=lambda t: -t.score)
    for position, team in enumerate(ordered, start=1):
        team.position = position
    return ordered


def results_from_records(records: Iterable[RawRecord]) -> list[TeamResult]:
    """Builds a ranked snapshot from raw team records."""
    teams = [team_from_record(r, i) for i, r in enumerate(records)]
    ranked = rank(teams)
    logger.debug("results_mapped", teams=len(ranked))
    return ranked


def total_answer_count(results: Iterable[TeamResult]) -> int:
    return sum(len(team.answers) for team in results)
