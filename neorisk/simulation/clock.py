"""
Simulation clock: a virtual instant advanced at a rate multiplier.

States:
    PAUSED  - not advancing
    PLAYING - tick() advances current_ms by real_elapsed_ms * rate_multiplier
    AT_END  - paused with current_ms at range_end_ms (playback exhausted or seek-to-end)

Instants are Unix-epoch milliseconds. The clock is agnostic to tick cadence;
callers pass the measured wall-clock delta (tick) or let the clock measure it
against its time source (tick_wall).
"""
from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional

from neorisk.config.preferences import ClockSettings
from neorisk.errors import InvalidParameterError, OutOfRangeSeekError

logger = logging.getLogger(__name__)


class ClockState(str, Enum):
    PAUSED = "paused"
    PLAYING = "playing"
    AT_END = "at_end"


@dataclass(frozen=True)
class ClockSnapshot:
    """Read-only view of the clock taken once per tick/command."""
    current_ms: float
    range_start_ms: Optional[float]
    range_end_ms: Optional[float]
    rate_multiplier: float
    is_playing: bool
    state: ClockState
    progress: Optional[float]


def _monotonic_ms() -> float:
    return time.monotonic() * 1000.0


class SimulationClock:
    def __init__(
        self,
        settings: Optional[ClockSettings] = None,
        initial_ms: Optional[float] = None,
        range_start_ms: Optional[float] = None,
        range_end_ms: Optional[float] = None,
        is_playing: bool = False,
        persist_rate: Optional[Callable[[float], None]] = None,
        time_source: Optional[Callable[[], float]] = None,
    ):
        settings = settings or ClockSettings()
        self._now = time_source or _monotonic_ms
        self._persist_rate = persist_rate
        self._observers: List[Callable[[ClockSnapshot], None]] = []

        self.rate_multiplier = self._check_rate(settings.rate_multiplier)
        self.range_start_ms: Optional[float] = None
        self.range_end_ms: Optional[float] = None
        self.is_playing = bool(is_playing)
        self.last_real_tick_ms = self._now()

        if initial_ms is None:
            initial_ms = range_start_ms if range_start_ms is not None else time.time() * 1000.0
        self._initial_ms = float(initial_ms)
        self.current_ms = float(initial_ms)

        if range_start_ms is not None and range_end_ms is not None:
            self.set_range(range_start_ms, range_end_ms, notify=False)

    # -----------------------
    # Queries
    # -----------------------
    @property
    def has_range(self) -> bool:
        return self.range_start_ms is not None and self.range_end_ms is not None

    @property
    def state(self) -> ClockState:
        if self.is_playing:
            return ClockState.PLAYING
        if self.has_range and self.current_ms >= self.range_end_ms:
            return ClockState.AT_END
        return ClockState.PAUSED

    @property
    def progress(self) -> Optional[float]:
        """Fraction of the data range elapsed, clamped to [0, 1]."""
        if not self.has_range:
            return None
        span = self.range_end_ms - self.range_start_ms
        if span <= 0:
            return 1.0
        frac = (self.current_ms - self.range_start_ms) / span
        return min(1.0, max(0.0, frac))

    def in_range(self, instant_ms: float) -> bool:
        return self.has_range and self.range_start_ms <= instant_ms <= self.range_end_ms

    def snapshot(self) -> ClockSnapshot:
        return ClockSnapshot(
            current_ms=self.current_ms,
            range_start_ms=self.range_start_ms,
            range_end_ms=self.range_end_ms,
            rate_multiplier=self.rate_multiplier,
            is_playing=self.is_playing,
            state=self.state,
            progress=self.progress,
        )

    # -----------------------
    # Observers
    # -----------------------
    def subscribe(self, callback: Callable[[ClockSnapshot], None]) -> Callable[[], None]:
        """Register a snapshot callback; returns an unsubscribe function."""
        self._observers.append(callback)

        def _unsubscribe():
            if callback in self._observers:
                self._observers.remove(callback)
        return _unsubscribe

    def _notify(self) -> None:
        if not self._observers:
            return
        snap = self.snapshot()
        for cb in list(self._observers):
            cb(snap)

    # -----------------------
    # Commands
    # -----------------------
    @staticmethod
    def _check_rate(rate) -> float:
        try:
            out = float(rate)
        except (TypeError, ValueError):
            raise InvalidParameterError(f"rate multiplier must be a number, got {rate!r}")
        if not math.isfinite(out) or out <= 0.0:
            raise InvalidParameterError(f"rate multiplier must be finite and > 0, got {rate!r}")
        return out

    def set_range(self, start_ms: float, end_ms: float, notify: bool = True) -> None:
        start_ms, end_ms = float(start_ms), float(end_ms)
        if end_ms < start_ms:
            raise ValueError("range end must be >= range start")
        self.range_start_ms = start_ms
        self.range_end_ms = end_ms
        self.current_ms = min(end_ms, max(start_ms, self.current_ms))
        if notify:
            self._notify()

    def play(self) -> None:
        if self.state is ClockState.AT_END:
            self.current_ms = self.range_start_ms
        self.is_playing = True
        # avoid a jump from the time spent paused
        self.last_real_tick_ms = self._now()
        self._notify()

    def pause(self) -> None:
        self.is_playing = False
        self._notify()

    def toggle(self) -> None:
        if self.is_playing:
            self.pause()
        else:
            self.play()

    def reset(self) -> None:
        """Back to the range start and resume playback."""
        self.current_ms = self.range_start_ms if self.range_start_ms is not None else self._initial_ms
        self.is_playing = True
        self.last_real_tick_ms = self._now()
        self._notify()

    def seek(self, target_ms: float) -> bool:
        """
        Jump to target_ms without changing play state.
        Returns False (and leaves state unchanged) when outside the data range.
        """
        try:
            self.seek_strict(target_ms)
        except OutOfRangeSeekError as e:
            logger.warning("%s", e)
            return False
        return True

    def seek_strict(self, target_ms: float) -> None:
        target_ms = float(target_ms)
        if not self.in_range(target_ms):
            raise OutOfRangeSeekError(target_ms, self.range_start_ms, self.range_end_ms)
        self.current_ms = target_ms
        self._notify()

    def set_rate(self, multiplier: float) -> None:
        self.rate_multiplier = self._check_rate(multiplier)
        if self._persist_rate is not None:
            self._persist_rate(self.rate_multiplier)
        self._notify()

    def tick(self, real_elapsed_ms: float) -> None:
        """Advance by real_elapsed_ms * rate_multiplier while playing."""
        if not self.is_playing:
            return
        elapsed = max(0.0, float(real_elapsed_ms))
        new_ms = self.current_ms + elapsed * self.rate_multiplier

        if self.range_end_ms is not None and new_ms >= self.range_end_ms:
            self.current_ms = self.range_end_ms
            self.is_playing = False
            logger.info("Playback reached end of data range")
        else:
            self.current_ms = new_ms
        self._notify()

    def mark_real_time(self) -> None:
        """Restart wall-delta measurement from now."""
        self.last_real_tick_ms = self._now()

    def tick_wall(self, now_ms: Optional[float] = None) -> float:
        """Measure the wall delta since the previous tick and apply it. Returns the delta."""
        now_ms = self._now() if now_ms is None else float(now_ms)
        delta = now_ms - self.last_real_tick_ms
        self.last_real_tick_ms = now_ms
        self.tick(delta)
        return delta
