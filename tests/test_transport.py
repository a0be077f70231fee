import io
import logging
import time
from contextlib import contextmanager

import pytest
from rich.console import Console

from audiothek_cli.player import transport
from audiothek_cli.player.commands import Key, Quit, SeekRelative, TogglePause
from audiothek_cli.player.position import PlaybackState
from audiothek_cli.player.renderer import format_status
from audiothek_cli.player.transport import Termination, TransportController
from tests.conftest import FakeEngine, RecordingRenderer, ScriptedPoller


def make_controller(clock, total=130.0, script=(), **engine_kwargs):
    engine = FakeEngine(clock, **engine_kwargs)
    poller = ScriptedPoller(clock, script)
    renderer = RecordingRenderer()
    controller = TransportController(engine, total, poller, renderer, clock=clock)
    return controller, engine, renderer


def status_of(controller):
    tracker = controller.tracker
    return format_status(tracker.state, tracker.position(), controller.total_duration)


def test_start_plays_from_zero(clock):
    controller, engine, _ = make_controller(clock)
    controller.start()
    assert engine.calls == [("play",)]
    assert controller.tracker.state is PlaybackState.PLAYING
    assert controller.tracker.position() == 0.0


def test_walkthrough_pause_seek_resume_finish(clock):
    controller, engine, renderer = make_controller(clock, length=130.0)
    controller.start()

    clock.advance(12)
    assert "Status: Playing | Position: 00:12 / 02:10" in status_of(controller)

    controller.apply(TogglePause())
    assert engine.paused
    clock.advance(5)
    assert "Status: Paused | Position: 00:12 / 02:10" in status_of(controller)

    controller.apply(SeekRelative(10.0))
    assert engine.calls[-1] == ("seek", 22.0)
    assert controller.tracker.anchor.frozen_offset == 22.0
    assert controller.tracker.is_paused

    controller.apply(TogglePause())
    assert not engine.paused
    clock.advance(200)
    assert "Position: 02:10 / 02:10" in status_of(controller)

    assert controller.tick() is Termination.FINISHED
    state, position, total = renderer.frames[-1]
    assert (state, position, total) == (PlaybackState.PLAYING, 130.0, 130.0)


def test_rewind_clamps_at_zero(clock):
    controller, engine, _ = make_controller(clock)
    controller.start()
    clock.advance(5)
    assert controller.seek_relative(-10.0, clock())
    assert engine.calls[-1] == ("seek", 0.0)
    assert controller.tracker.position() == 0.0


def test_forward_clamps_at_total(clock):
    controller, engine, _ = make_controller(clock)
    controller.start()
    clock.advance(125)
    controller.apply(SeekRelative(10.0))
    assert engine.calls[-1] == ("seek", 130.0)
    assert controller.tracker.position() == 130.0


def test_failed_seek_keeps_anchor_and_reports(clock, caplog):
    controller, engine, renderer = make_controller(clock, seek_fails=True)
    controller.start()
    clock.advance(30)
    anchor_before = (
        controller.tracker.anchor.frozen_offset,
        controller.tracker.anchor.anchor_time,
    )

    with caplog.at_level(logging.WARNING):
        assert controller.apply(SeekRelative(10.0)) is None

    anchor_after = (
        controller.tracker.anchor.frozen_offset,
        controller.tracker.anchor.anchor_time,
    )
    assert anchor_after == anchor_before
    assert controller.tracker.position() == 30.0
    assert "Seek failed" in caplog.text
    assert renderer.breaks == 1


def test_seek_with_unknown_length_is_a_reported_noop(clock, caplog):
    controller, engine, _ = make_controller(clock, total=0.0)
    controller.start()
    clock.advance(30)

    with caplog.at_level(logging.WARNING):
        assert controller.seek_relative(10.0, clock()) is False

    assert not any(call[0] == "seek" for call in engine.calls)
    assert controller.tracker.position() == 30.0
    assert "length is unknown" in caplog.text


@pytest.mark.parametrize("paused", [False, True])
def test_quit_terminates_within_one_tick(clock, paused):
    script = [TogglePause(), Quit()] if paused else [Quit()]
    controller, _, _ = make_controller(clock, script=script)
    assert controller.run() is Termination.QUIT
    assert controller.poller.polls == len(script)


def test_run_finishes_when_engine_runs_dry(clock):
    controller, engine, renderer = make_controller(clock, total=1.0, length=1.0)
    assert controller.run() is Termination.FINISHED
    assert clock.now >= 1001.0
    assert all(frame[1] <= 1.0 for frame in renderer.frames)


def test_paused_engine_never_finishes(clock):
    controller, engine, _ = make_controller(
        clock, total=1.0, length=1.0, script=[TogglePause()]
    )
    controller.start()
    for _ in range(50):
        assert controller.tick() is None


def test_command_tick_skips_finish_check(clock):
    controller, engine, _ = make_controller(clock, length=0.0, script=[SeekRelative(5)])
    controller.start()
    assert controller.tick() is None
    assert controller.tick() is Termination.FINISHED


class KeyScript:
    """Hands out scripted keys; an exception instance in the script is raised."""

    def __init__(self, *keys):
        self.keys = list(keys)

    def read_key(self, timeout):
        if not self.keys:
            return None
        key = self.keys.pop(0)
        if isinstance(key, Exception):
            raise key
        return key


@pytest.fixture
def stream_harness(monkeypatch):
    state = {"entered": 0, "released": 0}
    engine = FakeEngine(time.monotonic)
    monkeypatch.setattr(
        transport.PygameEngine,
        "load",
        classmethod(lambda cls, stream, **kwargs: (engine, 130.0)),
    )

    @contextmanager
    def recording_input_mode():
        state["entered"] += 1
        try:
            yield state["reader"]
        finally:
            state["released"] += 1

    monkeypatch.setattr(transport, "raw_input_mode", recording_input_mode)
    output = io.StringIO()
    state.update(engine=engine, output=output, console=Console(file=output, width=120))
    return state


def test_play_stream_quits_and_reports(stream_harness):
    stream_harness["reader"] = KeyScript(None, Key.Q)

    reason = transport.play_stream(b"audio", stream_harness["console"])

    assert reason is Termination.QUIT
    assert stream_harness["released"] == 1
    assert stream_harness["engine"].closed
    assert "Playback stopped." in stream_harness["output"].getvalue()


def test_play_stream_releases_terminal_when_loop_fails(stream_harness):
    stream_harness["reader"] = KeyScript(None, Key.SPACE, RuntimeError("tty vanished"))

    with pytest.raises(RuntimeError, match="tty vanished"):
        transport.play_stream(b"audio", stream_harness["console"])

    assert stream_harness["entered"] == 1
    assert stream_harness["released"] == 1
    assert stream_harness["engine"].closed
    output = stream_harness["output"].getvalue()
    assert "Playback stopped." not in output
    assert "Playback finished." not in output
