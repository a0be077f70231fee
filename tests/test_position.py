import pytest

from audiothek_cli.player.position import (
    PlaybackState,
    PositionAnchor,
    PositionTracker,
    clamp_position,
    current_position,
)
from tests.conftest import FakeClock


@pytest.mark.parametrize("position", [0.0, 5.0, 64.5, 130.0])
@pytest.mark.parametrize("delta", [-200.0, -10.0, 0.0, 10.0, 200.0])
def test_clamp_stays_within_bounds(position, delta):
    clamped = clamp_position(position + delta, 130.0)
    assert 0.0 <= clamped <= 130.0


def test_clamp_unknown_total_only_bounds_below():
    assert clamp_position(-5.0, 0.0) == 0.0
    assert clamp_position(500.0, 0.0) == 500.0


def test_current_position_playing_accrues_time():
    anchor = PositionAnchor(frozen_offset=10.0, anchor_time=100.0)
    assert current_position(PlaybackState.PLAYING, anchor, 130.0, 105.5) == 15.5


def test_current_position_paused_ignores_time():
    anchor = PositionAnchor(frozen_offset=10.0, anchor_time=100.0)
    assert current_position(PlaybackState.PAUSED, anchor, 130.0, 900.0) == 10.0


def test_current_position_caps_at_total():
    anchor = PositionAnchor(frozen_offset=120.0, anchor_time=0.0)
    assert current_position(PlaybackState.PLAYING, anchor, 130.0, 50.0) == 130.0


def test_current_position_without_total_is_uncapped():
    anchor = PositionAnchor(frozen_offset=0.0, anchor_time=0.0)
    assert current_position(PlaybackState.PLAYING, anchor, 0.0, 4000.0) == 4000.0


def test_pause_freezes_position():
    clock = FakeClock()
    tracker = PositionTracker(130.0, clock)
    clock.advance(12)
    tracker.pause()
    before = tracker.position()
    for _ in range(5):
        clock.advance(7)
        assert tracker.position() == before == 12.0


def test_position_is_monotonic_while_playing():
    clock = FakeClock()
    tracker = PositionTracker(130.0, clock)
    samples = []
    for _ in range(100):
        clock.advance(2)
        samples.append(tracker.position())
    assert samples == sorted(samples)
    assert samples[-1] == 130.0


def test_resume_reanchors_without_jump():
    clock = FakeClock()
    tracker = PositionTracker(130.0, clock)
    clock.advance(12)
    tracker.pause()
    clock.advance(30)
    tracker.resume()
    assert tracker.position() == 12.0
    clock.advance(3)
    assert tracker.position() == 15.0


def test_pause_and_resume_are_idempotent():
    clock = FakeClock()
    tracker = PositionTracker(130.0, clock)
    clock.advance(4)
    tracker.pause()
    clock.advance(4)
    tracker.pause()
    assert tracker.position() == 4.0
    tracker.resume()
    clock.advance(1)
    tracker.resume()
    assert tracker.position() == 5.0


@pytest.mark.parametrize("state", list(PlaybackState))
def test_seek_to_sets_position_immediately(state):
    clock = FakeClock()
    tracker = PositionTracker(130.0, clock, state=state)
    clock.advance(40)
    tracker.seek_to(22.0)
    assert tracker.position() == 22.0
    assert tracker.state is state
