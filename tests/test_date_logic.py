from datetime import UTC, datetime

import pytest

from teamboard.utils.date_and_time import parse_game_date


def test_epoch_seconds_and_millis_agree() -> None:
    seconds = parse_game_date(1718000000)
    millis = parse_game_date(1718000000000)

    assert seconds == millis
    assert seconds == datetime(2024, 6, 10, 6, 13, 20, tzinfo=UTC)


def test_numeric_string_epoch() -> None:
    assert parse_game_date("1718000000") == parse_game_date(1718000000)


def test_european_day_first() -> None:
    parsed = parse_game_date("21.06.2025")

    assert (parsed.year, parsed.month, parsed.day) == (2025, 6, 21)
    assert parsed.tzinfo is not None


def test_two_digit_year() -> None:
    parsed = parse_game_date("1-2-25")

    assert (parsed.year, parsed.month, parsed.day) == (2025, 2, 1)


def test_iso_with_offset() -> None:
    parsed = parse_game_date("2025-06-21T10:00:00+02:00")

    assert parsed == datetime(2025, 6, 21, 8, 0, tzinfo=UTC)


@pytest.mark.parametrize("value", [None, "", "soon", "31.02.2025", True, [2025]])
def test_unparseable_values(value) -> None:
    assert parse_game_date(value) is None
