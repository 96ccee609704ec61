import re
from datetime import UTC, date, datetime, time
from typing import Any

import structlog

logger = structlog.get_logger(__name__)

# Values below this are epoch seconds, above it epoch milliseconds
EPOCH_MILLIS_THRESHOLD = 100_000_000_000

EU_DATE_RE = re.compile(r"^(\d{1,2})[-./](\d{1,2})[-./](\d{2,4})(?:\s.*)?$")


def _from_epoch(value: float) -> datetime | None:
    seconds = value if value < EPOCH_MILLIS_THRESHOLD else value / 1000
    try:
        return datetime.fromtimestamp(seconds, UTC)
    except (OverflowError, OSError, ValueError):
        return None


def _is_plain_number(text: str) -> bool:
    """True for strings like '1718000000' (no date separators)."""
    if any(sep in text for sep in "-./T:"):
        return False
    try:
        float(text)
    except ValueError:
        return False
    return True


def parse_game_date(raw_value: Any) -> datetime | None:
    """Parses the many date shapes used by game records.

    Supports epoch seconds or milliseconds (number or numeric string),
    European day-first dates (``21.06.2025``, ``1-2-25``) and ISO 8601
    strings. Naive results are interpreted as local time.

    Args:
        raw_value: The raw date value from the API.

    Returns:
        A timezone-aware datetime, or None if the value cannot be parsed.
    """
    if raw_value is None or isinstance(raw_value, bool) or raw_value == "":
        return None

    if isinstance(raw_value, (int, float)):
        return _from_epoch(raw_value)

    if not isinstance(raw_value, str):
        return None

    clean = raw_value.strip()
    if _is_plain_number(clean):
        return _from_epoch(float(clean))

    eu_match = EU_DATE_RE.match(clean)
    if eu_match:
        day, month, year = (int(g) for g in eu_match.groups())
        if year < 100:
            year += 2000
        try:
            return datetime.combine(date(year, month, day), time()).astimezone()
        except ValueError:
            logger.debug("invalid_game_date", value=raw_value)
            return None

    try:
        parsed = datetime.fromisoformat(clean.replace(" ", "T", 1))
    except ValueError:
        logger.debug("unparseable_game_date", value=raw_value)
        return None
    return parsed.astimezone()
