"""Response envelope normalization.

The API wraps collections in one of three shapes depending on dialect and
endpoint: a bare list, ``{"data": [...]}`` or ``{"items": [...]}``. Anything
else normalizes to an empty collection. Nothing in this module raises.
"""

from enum import Enum
from typing import Any

from teamboard.models import RawRecord


class Envelope(Enum):
    ARRAY = "array"
    DATA = "data"
    ITEMS = "items"
    UNKNOWN = "unknown"


def classify_envelope(body: Any) -> Envelope:
    """Identifies which envelope shape a decoded body uses."""
    if isinstance(body, list):
        return Envelope.ARRAY
    if isinstance(body, dict):
        if isinstance(body.get("data"), list):
            return Envelope.DATA
        if isinstance(body.get("items"), list):
            return Envelope.ITEMS
    return Envelope.UNKNOWN


def unwrap(body: Any) -> list[RawRecord]:
    """Returns the ordered records carried by a response body.

    Non-mapping entries inside the collection are dropped so that callers can
    treat every record as a dict.
    """
    kind = classify_envelope(body)
    if kind is Envelope.ARRAY:
        items = body
    elif kind is Envelope.DATA:
        items = body["data"]
    elif kind is Envelope.ITEMS:
        items = body["items"]
    else:
        return []
    return [item for item in items if isinstance(item, dict)]


def unwrap_one(body: Any) -> list[RawRecord]:
    """Normalizes a single-document response (e.g. game detail) to 0 or 1 records.

    Accepts the bare object or an object nested under ``data``.
    """
    if not isinstance(body, dict):
        return []
    nested = body.get("data")
    if isinstance(nested, dict):
        body = nested
    return [body] if body else []
