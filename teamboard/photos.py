"""Photo gallery aggregation.

Media references are scattered: dedicated media endpoints, ``media`` lists
on team payloads, and plain fields of answer payloads (photo tasks store the
uploaded file URL in the answer). All of them are mapped to ``Photo`` objects
and deduplicated by URL, first occurrence wins.
"""

import hashlib
from collections.abc import Iterable
from typing import Any

import structlog

from teamboard.models import Answer, Photo, RawRecord, TaskDefinition, TeamResult
from teamboard.richtext import resolve_title

logger = structlog.get_logger(__name__)

URL_FIELDS = ("url", "mediaUrl", "file", "imageUrl", "large")
THUMBNAIL_FIELDS = ("thumbnailUrl", "thumbnail", "thumb", "small")
TIMESTAMP_FIELDS = ("timestamp", "created", "createdAt")
# Dotted names reach into nested mappings
ANSWER_MEDIA_FIELDS = (
    "mediaUrl",
    "url",
    "file",
    "imageUrl",
    "answer.mediaUrl",
    "answer.url",
)
ANSWER_VALUE_FIELDS = ("answer", "value")
IMAGE_PREFIXES = ("http://", "https://", "data:image/")
DEFAULT_TASK_TITLE = "Photo"


def is_image_like(value: Any) -> bool:
    return isinstance(value, str) and value.strip().lower().startswith(IMAGE_PREFIXES)


def _lookup(record: RawRecord, dotted: str) -> Any:
    value: Any = record
    for part in dotted.split("."):
        if not isinstance(value, dict):
            return None
        value = value.get(part)
    return value


def _first_string(record: RawRecord, keys: Iterable[str]) -> str | None:
    for key in keys:
        value = _lookup(record, key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def _photo_id(record: RawRecord, url: str) -> str:
    raw_id = record.get("id")
    if raw_id not in (None, ""):
        return str(raw_id)
    return "photo-" + hashlib.md5(url.encode("utf-8")).hexdigest()[:12]


def _task_title(record: RawRecord) -> str:
    for key in ("task", "question"):
        nested = record.get(key)
        if isinstance(nested, dict) and nested:
            return resolve_title(nested)
    title = record.get("taskTitle")
    if isinstance(title, str) and title.strip():
        return title.strip()
    return DEFAULT_TASK_TITLE


def _team_name(record: RawRecord) -> str | None:
    team = record.get("team")
    if isinstance(team, dict) and team.get("name"):
        return str(team["name"])
    if record.get("teamName"):
        return str(record["teamName"])
    return None


def photo_from_record(record: RawRecord, team_name: str | None = None) -> Photo | None:
    """Maps a media record to a Photo; None when no URL can be resolved.

    Args:
        record: Raw media record.
        team_name: Owning team, used when the record names none itself.
    """
    url = _first_string(record, URL_FIELDS)
    if url is None:
        return None
    timestamp = next(
        (record[k] for k in TIMESTAMP_FIELDS if record.get(k) not in (None, "")), None
    )
    return Photo(
        id=_photo_id(record, url),
        url=url,
        thumbnail_url=_first_string(record, THUMBNAIL_FIELDS) or url,
        team_name=_team_name(record) or team_name,
        task_title=_task_title(record),
        timestamp=timestamp,
    )


def answer_media_url(raw: RawRecord) -> str | None:
    """Finds an image-like value in an answer payload."""
    for key in ANSWER_MEDIA_FIELDS:
        value = _lookup(raw, key)
        if is_image_like(value):
            return value.strip()
    for key in ANSWER_VALUE_FIELDS:
        value = raw.get(key)
        if is_image_like(value):
            return value.strip()
    return None


def photo_from_answer(
    answer: Answer, team: TeamResult, tasks_by_id: dict[str, TaskDefinition]
) -> Photo | None:
    raw = answer.raw_payload or {}
    url = answer_media_url(raw)
    if url is None:
        return None
    task = tasks_by_id.get(answer.task_id)
    return Photo(
        id=_photo_id(raw, url),
        url=url,
        thumbnail_url=_first_string(raw, THUMBNAIL_FIELDS) or url,
        team_name=team.name,
        task_title=task.title if task else _task_title(raw),
        timestamp=next(
            (raw[k] for k in TIMESTAMP_FIELDS if raw.get(k) not in (None, "")), None
        ),
    )


def _contributing_answer_ids(sources: Iterable[list[RawRecord]]) -> set[str]:
    ids = set()
    for records in sources:
        for record in records:
            if record.get("answerId") not in (None, ""):
                ids.add(str(record["answerId"]))
    return ids


def collect(
    dedicated_sources: list[list[RawRecord]],
    team_results: list[TeamResult],
    tasks: list[TaskDefinition] | None = None,
) -> list[Photo]:
    """Builds the deduplicated gallery.

    Order of precedence: dedicated media records (in source order), team-level
    ``media`` lists, then image-like values found in answer payloads that no
    dedicated record already covers. Records without a URL are skipped.

    Args:
        dedicated_sources: Record collections from media endpoints.
        team_results: Current results snapshot (with raw payloads).
        tasks: Optional reconciled catalog used to title answer photos.

    Returns:
        Photos with unique URLs.
    """
    tasks_by_id = {t.id: t for t in tasks or []}
    candidates: list[Photo | None] = []

    for records in dedicated_sources:
        candidates.extend(photo_from_record(r) for r in records)

    for team in team_results:
        media = (team.raw_payload or {}).get("media")
        if isinstance(media, list):
            candidates.extend(
                photo_from_record(m, team_name=team.name)
                for m in media
                if isinstance(m, dict)
            )

    covered = _contributing_answer_ids(dedicated_sources)
    for team in team_results:
        for answer in team.answers:
            raw_id = (answer.raw_payload or {}).get("id")
            if raw_id not in (None, "") and str(raw_id) in covered:
                continue
            candidates.append(photo_from_answer(answer, team, tasks_by_id))

    photos: list[Photo] = []
    seen_urls: set[str] = set()
    for photo in candidates:
        if photo is None or photo.url in seen_urls:
            continue
        seen_urls.add(photo.url)
        photos.append(photo)

    logger.debug("photos_collected", count=len(photos), candidates=len(candidates))
    return photos
