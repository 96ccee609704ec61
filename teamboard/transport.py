"""Credential classification.

A credential is an opaque string supplied by the operator. Its form selects
the API dialect: strings carrying the legacy scheme prefix talk to the legacy
root with ``<scheme> <token>`` authorization, anything else is a bare modern
token sent as ``Bearer <token>``.
"""

from dataclasses import dataclass
from enum import Enum

from teamboard.config import Settings

GUEST_CREDENTIAL = "GUEST"


class Dialect(Enum):
    LEGACY = "legacy"
    MODERN = "modern"


@dataclass(frozen=True)
class TransportConfig:
    dialect: Dialect
    base_root: str
    auth_header: str

    def headers(self) -> dict[str, str]:
        return {"Authorization": self.auth_header, "Accept": "application/json"}


def classify(credential: str, legacy_scheme: str = Settings.legacy_scheme) -> Dialect:
    """Returns the dialect of a credential (case-insensitive prefix match).

    The bare scheme without a token is not a legacy key and counts as modern.
    """
    trimmed = credential.strip()
    prefix = legacy_scheme.lower()
    if trimmed.lower().startswith(prefix) and trimmed[len(prefix) :].strip():
        return Dialect.LEGACY
    return Dialect.MODERN


def resolve_transport(credential: str, settings: Settings | None = None) -> TransportConfig:
    """Derives base root and authorization header for a credential.

    Never fails: unrecognised strings are treated as modern tokens.

    Example:
        >>> resolve_transport("ApiKey-v1 abc123").auth_header
        'ApiKey-v1 abc123'
        >>> resolve_transport("abcdef0123456789").auth_header
        'Bearer abcdef0123456789'
    """
    settings = settings or Settings()
    scheme = settings.legacy_scheme
    trimmed = credential.strip()

    if classify(trimmed, scheme) is Dialect.LEGACY:
        token = trimmed[len(scheme) :].strip()
        return TransportConfig(
            dialect=Dialect.LEGACY,
            base_root=settings.legacy_root.rstrip("/"),
            auth_header=f"{scheme} {token}",
        )

    return TransportConfig(
        dialect=Dialect.MODERN,
        base_root=settings.modern_root.rstrip("/"),
        auth_header=f"Bearer {trimmed}",
    )


def root_for(dialect: Dialect, settings: Settings) -> str:
    if dialect is Dialect.LEGACY:
        return settings.legacy_root.rstrip("/")
    return settings.modern_root.rstrip("/")
