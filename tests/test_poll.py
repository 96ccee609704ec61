"""Tests for live-update detection."""

from teamboard.poll import LIVE_MESSAGE, PollDiffTracker, TrackerState, live_event_for
from tests.fakes import make_team


def test_only_increases_notify() -> None:
    tracker = PollDiffTracker()

    events = [tracker.observe_total("g1", total) for total in (5, 5, 8, 8)]

    assert events[0] is None
    assert events[1] is None
    assert events[2] is not None and events[2].delta == 3
    assert events[3] is None


def test_first_snapshot_sets_baseline() -> None:
    tracker = PollDiffTracker()

    assert tracker.observe_total("g1", 40) is None
    assert tracker.state is TrackerState.ARMED
    assert tracker.total == 40


def test_decrease_rebaselines_silently() -> None:
    tracker = PollDiffTracker()
    tracker.observe_total("g1", 10)

    assert tracker.observe_total("g1", 7) is None
    event = tracker.observe_total("g1", 9)

    assert event is not None and event.delta == 2


def test_game_change_resets_baseline() -> None:
    tracker = PollDiffTracker()
    tracker.observe_total("g1", 3)

    assert tracker.observe_total("g2", 50) is None
    assert tracker.game_id == "g2"
    assert tracker.observe_total("g2", 51).delta == 1


def test_observe_counts_answers_across_teams() -> None:
    tracker = PollDiffTracker(notification_ttl=2.5)
    tracker.observe("g1", [make_team("A", 1, ["t1"])])

    event = tracker.observe("g1", [make_team("A", 2, ["t1", "t2"]), make_team("B", 1, ["t1"])])

    assert event.delta == 2
    assert event.ttl == 2.5


def test_live_event_text() -> None:
    assert live_event_for(1).subtext == "1 NEW ANSWER RECEIVED"
    assert live_event_for(4).subtext == "4 NEW ANSWERS RECEIVED"
    assert live_event_for(4).message == LIVE_MESSAGE
