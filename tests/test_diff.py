from teamboard.utils.diff import calculate_stats
from tests.fakes import make_team


def test_calculate_stats_no_changes() -> None:
    data = [make_team("Owls", 10, ["t1"])]
    msg = calculate_stats(data, data)
    assert "New: 0, Changed: 0, Dropped: 0" in msg


def test_calculate_stats_changes() -> None:
    old_data = [
        make_team("Owls", 10, ["t1"]),
        make_team("Bears", 5, []),  # Dropped
    ]
    new_data = [
        make_team("Owls", 10, ["t1", "t2"]),  # Changed
        make_team("Foxes", 0, []),  # New
    ]
    msg = calculate_stats(old_data, new_data)
    assert "New: 1, Changed: 1, Dropped: 1" in msg


def test_calculate_stats_score_change() -> None:
    msg = calculate_stats([make_team("Owls", 10, [])], [make_team("Owls", 12, [])])
    assert "Changed: 1" in msg


def test_calculate_stats_empty() -> None:
    msg = calculate_stats([], [])
    assert "New: 0, Changed: 0, Dropped: 0" in msg

    msg = calculate_stats([], [make_team("Owls", 0, [])])
    assert "New: 1" in msg
