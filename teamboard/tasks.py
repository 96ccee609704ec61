"""Task catalog construction and reconciliation.

The authoritative catalog comes from a tasks/questions endpoint, but answers
may reference tasks that the catalog never returned (deleted tasks, other
dialect, endpoint failure). Reconciliation appends a synthetic entry for each
such reference so that every answer resolves to exactly one task.
"""

from collections.abc import Iterable
from dataclasses import dataclass

from teamboard.models import Answer, RawRecord, TaskDefinition, TeamResult
from teamboard.richtext import extract_text, resolve_title

SYNTHETIC_TYPE = "synthetic"


def tasks_from_records(records: Iterable[RawRecord]) -> list[TaskDefinition]:
    """Maps raw task/question records to authoritative TaskDefinitions.

    Records without an id are skipped; a repeated id keeps its first record.
    """
    tasks: list[TaskDefinition] = []
    seen: set[str] = set()
    for record in records:
        raw_id = record.get("id")
        if raw_id in (None, ""):
            continue
        task_id = str(raw_id)
        if task_id in seen:
            continue
        seen.add(task_id)
        tasks.append(
            TaskDefinition(
                id=task_id,
                title=resolve_title(record),
                type=str(record.get("type") or "unknown"),
                raw_payload=record,
            )
        )
    return tasks


def _derived_title(answer: Answer) -> str | None:
    """Looks for a task title hidden in an answer payload."""
    raw = answer.raw_payload or {}
    question = raw.get("question")
    if isinstance(question, dict):
        for key in ("title", "text"):
            text = extract_text(question.get(key))
            if text:
                return text
    for key in ("title", "text"):
        text = extract_text(raw.get(key))
        if text:
            return text
    return None


def reconcile(
    authoritative: list[TaskDefinition],
    answers: Iterable[Answer],
    derive_titles: bool = False,
) -> list[TaskDefinition]:
    """Merges the authoritative catalog with tasks referenced by answers.

    Authoritative entries keep their upstream order; synthetic entries follow
    in first-discovery order. Ids are unique in the result.

    Args:
        authoritative: Tasks returned by the API.
        answers: All answers of a snapshot, in team then answer order.
        derive_titles: Take synthetic titles from answer payloads when present
            instead of using the bare task id, and their type from the
            answer when it names one.

    Returns:
        The reconciled catalog.
    """
    merged: list[TaskDefinition] = []
    known: set[str] = set()
    for task in authoritative:
        if task.id in known:
            continue
        known.add(task.id)
        merged.append(task)

    for answer in answers:
        if answer.task_id in known:
            continue
        known.add(answer.task_id)
        title, kind = answer.task_id, SYNTHETIC_TYPE
        if derive_titles:
            raw_type = (answer.raw_payload or {}).get("type")
            title = _derived_title(answer) or title
            kind = raw_type if isinstance(raw_type, str) and raw_type else kind
        merged.append(
            TaskDefinition(id=answer.task_id, title=title, type=kind, synthetic=True)
        )
    return merged


def all_answers(results: Iterable[TeamResult]) -> list[Answer]:
    return [answer for team in results for answer in team.answers]


@dataclass
class TaskBreakdown:
    """Teams that answered one task, best answers first."""

    task: TaskDefinition
    entries: list[tuple[TeamResult, Answer]]

    @property
    def correct_count(self) -> int:
        return sum(1 for _, a in self.entries if a.is_correct)


def task_breakdown(
    tasks: list[TaskDefinition], results: list[TeamResult]
) -> list[TaskBreakdown]:
    """Groups answers per task.

    Within a task, positive-score answers come first, then by score
    descending; ties keep team ranking order.
    """
    breakdowns = []
    for task in tasks:
        entries = []
        for team in results:
            answer = next((a for a in team.answers if a.task_id == task.id), None)
            if answer is not None:
                entries.append((team, answer))
        entries.sort(
            key=lambda e: (not (e[1].score or 0) > 0, -(e[1].score or 0))
        )
        breakdowns.append(TaskBreakdown(task=task, entries=entries))
    return breakdowns
