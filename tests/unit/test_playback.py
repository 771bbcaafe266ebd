"""
Unit tests for the virtual playback clock.
"""

import pytest

from pcs.core.playback import PlaybackClock


class TestPlaybackClock:
    """Tests for play/pause/seek/tick."""

    def test_paused_clock_does_not_advance(self, clock, fake_time):
        fake_time.now = 5.0
        assert clock.tick() == 0.0

    def test_tick_uses_wall_clock_delta(self, clock, fake_time):
        clock.play()
        fake_time.now = 0.25
        assert clock.tick() == pytest.approx(250.0)

    def test_loops_over_duration(self, clock, fake_time):
        clock.play()
        fake_time.now = 1.2
        assert clock.tick() == pytest.approx(200.0)
        assert clock.playing

    def test_stops_at_end_without_loop(self, fake_time):
        c = PlaybackClock(1000.0, loop=False, now=fake_time)
        c.play()
        fake_time.now = 3.0
        assert c.tick() == 1000.0
        assert c.playing is False

    def test_pause_keeps_time(self, clock, fake_time):
        clock.play()
        fake_time.now = 0.1
        clock.pause()
        fake_time.now = 0.9
        assert clock.tick() == pytest.approx(100.0)

    def test_seek_is_clamped(self, clock):
        clock.seek(-10)
        assert clock.time == 0.0
        clock.seek(5000)
        assert clock.time == 1000.0

    def test_toggle(self, clock):
        assert clock.toggle() is True
        assert clock.toggle() is False
