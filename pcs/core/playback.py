# File: pcs/core/playback.py
# Project: PolyCurveStudio (PCS)
# Version: 0.1.0
# Status: stable
# Date: 2026-10-18
# Purpose: Reloj virtual de la timeline (play/pause/seek) a partir de deltas de pared.
# Notes: Independiente del pipeline de edición; add_keyframe lee `time` para elegir el slot.
from __future__ import annotations

import time as _time
from typing import Callable, Optional

from pcs.core.version import DEFAULT_TIMELINE_MS


class PlaybackClock:
    """Tiempo virtual en ms, monótono mientras reproduce, con loop sobre `duration`.

    `tick()` se llama desde el loop de UI (timer/frame); el reloj suma el delta
    de pared desde el último tick. `now` es inyectable para tests.
    """

    def __init__(
        self,
        duration: float = DEFAULT_TIMELINE_MS,
        *,
        loop: bool = True,
        now: Callable[[], float] = _time.monotonic,
    ) -> None:
        self.duration = max(1.0, float(duration))
        self.loop = loop
        self._now = now
        self._time = 0.0
        self._playing = False
        self._last: Optional[float] = None

    @property
    def time(self) -> float:
        return self._time

    @property
    def playing(self) -> bool:
        return self._playing

    def play(self) -> None:
        if not self._playing:
            self._playing = True
            self._last = self._now()

    def pause(self) -> None:
        if self._playing:
            self.tick()
            self._playing = False
            self._last = None

    def toggle(self) -> bool:
        if self._playing:
            self.pause()
        else:
            self.play()
        return self._playing

    def seek(self, t: float) -> None:
        self._time = max(0.0, min(self.duration, float(t)))
        if self._playing:
            self._last = self._now()

    def tick(self) -> float:
        """Avanza según el tiempo de pared transcurrido y devuelve el tiempo virtual."""
        if not self._playing or self._last is None:
            return self._time
        now = self._now()
        delta_ms = max(0.0, (now - self._last) * 1000.0)
        self._last = now
        t = self._time + delta_ms
        if t > self.duration:
            if self.loop:
                t = t % self.duration
            else:
                t = self.duration
                self._playing = False
                self._last = None
        self._time = t
        return self._time
