"""
Simulation session: Earth + asteroid position sources driven by one clock.

The Earth ephemeris defines the data range. The asteroid position comes from
its sampled ephemeris when one is loaded, otherwise from Keplerian elements
propagated over the clock's elapsed time since the range start.
"""
from __future__ import annotations

import logging
import time
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, List, Optional

import numpy as np

from neorisk.config.preferences import ClockSettings
from neorisk.config.settings import AU_KM, TICK_HZ, TRAIL_LENGTH
from neorisk.models.asteroid import AsteroidRecord, CloseApproach
from neorisk.models.ephemeris import EphemerisSeries
from neorisk.physics.impact import ImpactEstimate, estimate_for_approach
from neorisk.physics.interpolation import position_at, to_scene
from neorisk.physics.kepler import position_at_elapsed
from neorisk.physics.timeconv import datetime_to_unix_ms, jd_to_unix_ms
from neorisk.simulation.clock import ClockSnapshot, SimulationClock

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Frame:
    clock: ClockSnapshot
    earth_km: Optional[np.ndarray]
    asteroid_km: Optional[np.ndarray]
    earth_scene: Optional[np.ndarray]
    asteroid_scene: Optional[np.ndarray]
    trail: List[np.ndarray] = field(default_factory=list)


class SimulationSession:
    def __init__(
        self,
        earth_series: Optional[EphemerisSeries] = None,
        asteroid_series: Optional[EphemerisSeries] = None,
        asteroid: Optional[AsteroidRecord] = None,
        clock_settings: Optional[ClockSettings] = None,
        persist_rate: Optional[Callable[[float], None]] = None,
        target_date: Optional[datetime] = None,
        autoplay: bool = True,
        time_source: Optional[Callable[[], float]] = None,
    ):
        self.asteroid = asteroid
        self.earth_series = EphemerisSeries(name="earth")
        self.asteroid_series = EphemerisSeries(name="asteroid")
        self.target_ms = datetime_to_unix_ms(target_date) if target_date is not None else None
        self.trail = deque(maxlen=TRAIL_LENGTH)

        self.clock = SimulationClock(
            settings=clock_settings,
            initial_ms=self.target_ms,
            is_playing=autoplay,
            persist_rate=persist_rate,
            time_source=time_source,
        )

        if earth_series is not None:
            self.load_earth(earth_series)
        if asteroid_series is not None:
            self.load_asteroid(asteroid_series)

    # -----------------------
    # Loading
    # -----------------------
    def load_earth(self, series: EphemerisSeries) -> None:
        """Adopt the Earth series and take its first/last samples as the data range."""
        self.earth_series = series
        if not series:
            logger.warning("Earth ephemeris empty; data range unknown")
            return

        start = jd_to_unix_ms(series.first.julian_date)
        end = jd_to_unix_ms(series.last.julian_date)
        self.clock.set_range(start, end)

        if self.target_ms is not None and start <= self.target_ms <= end:
            self.clock.seek(self.target_ms)
        else:
            self.clock.seek(start)
        logger.info("Earth ephemeris: %d points", len(series))

    def load_asteroid(self, series: EphemerisSeries) -> None:
        self.asteroid_series = series
        logger.info("Asteroid ephemeris: %d points", len(series))

    @property
    def is_loaded(self) -> bool:
        return bool(self.earth_series)

    # -----------------------
    # Positions
    # -----------------------
    def earth_position_km(self) -> Optional[np.ndarray]:
        return position_at(self.earth_series, self.clock.current_ms)

    def asteroid_position_km(self) -> Optional[np.ndarray]:
        if self.asteroid_series:
            return position_at(self.asteroid_series, self.clock.current_ms)

        elements = self.asteroid.elements if self.asteroid is not None else None
        if elements is None:
            return None
        origin = self.clock.range_start_ms
        if origin is None:
            return None
        elapsed_s = (self.clock.current_ms - origin) / 1000.0
        return position_at_elapsed(elements, elapsed_s) * AU_KM

    def frame(self, record_trail: Optional[bool] = None) -> Frame:
        """
        Positions at the current instant. The asteroid joins the trail when
        `record_trail` is true (default: the clock is playing).
        """
        if record_trail is None:
            record_trail = self.clock.is_playing
        earth = self.earth_position_km()
        ast = self.asteroid_position_km()
        ast_scene = to_scene(ast) if ast is not None else None

        if ast_scene is not None and record_trail:
            self.trail.appendleft(ast_scene)

        return Frame(
            clock=self.clock.snapshot(),
            earth_km=earth,
            asteroid_km=ast,
            earth_scene=to_scene(earth) if earth is not None else None,
            asteroid_scene=ast_scene,
            trail=list(self.trail),
        )

    def step(self, now_ms: Optional[float] = None) -> Frame:
        # the tick that reaches the end of data stops playback but still moves the body
        was_playing = self.clock.is_playing
        self.clock.tick_wall(now_ms)
        return self.frame(record_trail=was_playing)

    # -----------------------
    # Commands beyond the clock
    # -----------------------
    def reset_to_target(self) -> None:
        """Return to the target date (or range start) and pause."""
        target = self.target_ms
        if target is None or not self.clock.in_range(target):
            target = self.clock.range_start_ms
        if target is not None:
            self.clock.seek(target)
        self.clock.pause()

    def approaches_in_range(self) -> List[CloseApproach]:
        if self.asteroid is None:
            return []
        return [
            a for a in self.asteroid.close_approaches
            if a.in_range(self.clock.range_start_ms, self.clock.range_end_ms)
        ]

    def jump_to_approach(self, approach: CloseApproach) -> bool:
        t = approach.unix_ms
        if t is None:
            logger.warning("Close approach %r has no parseable date", approach.date_full)
            return False
        return self.clock.seek(t)

    def estimate_impact(self, approach: Optional[CloseApproach] = None, **overrides) -> ImpactEstimate:
        """Impact estimate for an approach (default: the first catalog approach)."""
        if self.asteroid is None:
            raise ValueError("No asteroid metadata loaded")
        if approach is None:
            if not self.asteroid.close_approaches:
                raise ValueError(f"{self.asteroid.name} has no close-approach data")
            approach = self.asteroid.close_approaches[0]
        return estimate_for_approach(self.asteroid, approach, **overrides)


def run_playback(session: SimulationSession, real_seconds: float, hz: float = TICK_HZ) -> List[Frame]:
    """
    Offline playback at a fixed cadence; stops early when the clock pauses
    (end of data). Returns every frame produced.
    """
    interval_ms = 1000.0 / float(hz)
    n_ticks = int(real_seconds * hz)
    frames = [session.frame()]
    for _ in range(n_ticks):
        if not session.clock.is_playing:
            break
        session.clock.tick(interval_ms)
        frames.append(session.frame(record_trail=True))
    return frames


def run_realtime(
    session: SimulationSession,
    on_frame: Callable[[Frame], None],
    max_seconds: Optional[float] = None,
    hz: float = TICK_HZ,
    sleep: Callable[[float], None] = time.sleep,
) -> int:
    """
    Wall-clock driver: tick at `hz` using measured deltas until playback stops
    or max_seconds of real time elapse. Returns the number of frames emitted.
    """
    period = 1.0 / float(hz)
    started = time.monotonic()
    session.clock.mark_real_time()
    count = 0
    while session.clock.is_playing:
        if max_seconds is not None and time.monotonic() - started >= max_seconds:
            break
        sleep(period)
        on_frame(session.step())
        count += 1
    return count
