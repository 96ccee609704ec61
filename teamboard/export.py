"""Payloads handed to outbound collaborators (mail, archive).

The collaborators treat these as opaque documents; only field stability
matters. Files are written as JSON or YAML depending on the extension and are
left untouched when the content did not change.
"""

import json
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import structlog
import yaml

from teamboard.models import GameSession, Photo, TeamResult

logger = structlog.get_logger(__name__)

SCHEMA_VERSION = "1.0"


def results_payload(game: GameSession, results: list[TeamResult]) -> dict[str, Any]:
    return {
        "schema_version": SCHEMA_VERSION,
        "game": game.to_dict(),
        "results": [r.to_dict() for r in results],
    }


def showtime_payload(
    game: GameSession, photos: list[Photo], selected_ids: set[str] | None = None
) -> dict[str, Any]:
    """Gallery payload; restricted to ``selected_ids`` when given."""
    chosen = photos if selected_ids is None else [p for p in photos if p.id in selected_ids]
    return {
        "schema_version": SCHEMA_VERSION,
        "game": game.to_dict(),
        "total_photos": len(photos),
        "photos": [p.to_dict() for p in chosen],
    }


def _serialize(payload: dict[str, Any], path: Path) -> str:
    if path.suffix.lower() in (".yaml", ".yml"):
        # allow_unicode keeps team names readable
        return yaml.dump(payload, allow_unicode=True, sort_keys=False)
    return json.dumps(payload, indent=2, ensure_ascii=False) + "\n"


def write_payload(payload: dict[str, Any], path: str | Path) -> bool:
    """Writes a payload, skipping the write when the file already matches.

    Args:
        payload: Document to write.
        path: Target file; ``.yaml``/``.yml`` selects YAML, anything else JSON.

    Returns:
        True if the file was written.
    """
    target = Path(path)
    content = _serialize(payload, target)

    if target.exists():
        try:
            if target.read_text(encoding="utf-8") == content:
                logger.debug("export_unchanged", path=str(target))
                return False
        except OSError as e:
            logger.warning("export_read_failed", path=str(target), error=str(e))

    target.parent.mkdir(parents=True, exist_ok=True)
    with open(target, "w", encoding="utf-8") as f:
        f.write(content)
    logger.info(
        "export_written", path=str(target), at=datetime.now(UTC).isoformat()
    )
    return True
