"""Shared pytest fixtures for teamboard tests."""

import pytest

from teamboard.config import Settings
from tests.fakes import LEGACY_ROOT, MODERN_ROOT, make_team


@pytest.fixture
def settings() -> Settings:
    """Settings pointing at a fake API without relays."""
    return Settings(modern_root=MODERN_ROOT, legacy_root=LEGACY_ROOT, relays=())


@pytest.fixture
def relay_settings() -> Settings:
    """Settings with a single relay behind the direct transport."""
    return Settings(
        modern_root=MODERN_ROOT,
        legacy_root=LEGACY_ROOT,
        relays=("https://relay.test/?url=",),
    )


@pytest.fixture
def team_factory():
    return make_team
