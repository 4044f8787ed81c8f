from datetime import datetime, timezone

import numpy as np
import pytest

from neorisk.config.preferences import ClockSettings
from neorisk.config.settings import AU_KM, MS_PER_DAY, TRAIL_LENGTH
from neorisk.models.asteroid import AsteroidRecord, CloseApproach
from neorisk.models.ephemeris import EphemerisSample, EphemerisSeries
from neorisk.models.orbit import KeplerianElements
from neorisk.physics.impact import ImpactType
from neorisk.physics.timeconv import jd_to_unix_ms
from neorisk.simulation.clock import ClockState
from neorisk.simulation.runner import SimulationSession, run_playback, run_realtime

JD0 = 2460000.5                      # 2023-02-25 00:00 UTC
T0 = jd_to_unix_ms(JD0)
DAYS = 10


def _series(name, scale=1.0):
    return EphemerisSeries(
        [
            EphemerisSample(JD0 + i, "", (scale * AU_KM, i * 1000.0, 0.0), (0.0, 0.0, 0.0))
            for i in range(DAYS + 1)
        ],
        name=name,
    )


ELEMENTS = KeplerianElements(1.2, 0.1, 5.0, 30.0, 60.0, 480.0)


def _asteroid(approaches=()):
    return AsteroidRecord(
        name="Test", designation="T1", absolute_magnitude_h=20.0,
        diameter_min_m=100.0, diameter_max_m=140.0,
        is_potentially_hazardous=False, elements=ELEMENTS,
        close_approaches=list(approaches),
    )


def _approach(dt):
    return CloseApproach(dt.strftime("%Y-%b-%d %H:%M"), dt, 1e6, 15.0, 54000.0)


def _session(**kw):
    kw.setdefault("clock_settings", ClockSettings(rate_multiplier=MS_PER_DAY / 1000.0))  # 1 day / s
    kw.setdefault("time_source", lambda: 0.0)
    return SimulationSession(**kw)


# -----------------------------
# RANGE + TARGET DATE
# -----------------------------
def test_earth_series_defines_range_and_start():
    session = _session(earth_series=_series("earth"))
    assert session.is_loaded
    assert session.clock.range_start_ms == T0
    assert session.clock.range_end_ms == T0 + DAYS * MS_PER_DAY
    assert session.clock.current_ms == T0
    assert session.clock.is_playing


def test_target_date_in_range_is_initial_instant():
    target = datetime(2023, 2, 28, tzinfo=timezone.utc)
    session = _session(earth_series=_series("earth"), target_date=target, autoplay=False)
    assert session.clock.current_ms == T0 + 3 * MS_PER_DAY
    assert session.clock.progress == pytest.approx(0.3)


def test_target_date_outside_range_falls_back_to_start():
    session = _session(earth_series=_series("earth"), target_date=datetime(2030, 1, 1, tzinfo=timezone.utc))
    assert session.clock.current_ms == T0


def test_reset_to_target_pauses():
    target = datetime(2023, 2, 28, tzinfo=timezone.utc)
    session = _session(earth_series=_series("earth"), target_date=target)
    session.clock.tick(2000.0)
    session.reset_to_target()
    assert session.clock.current_ms == T0 + 3 * MS_PER_DAY
    assert not session.clock.is_playing


def test_empty_earth_series_reports_absent_positions():
    session = _session(earth_series=EphemerisSeries())
    assert not session.is_loaded
    frame = session.frame()
    assert frame.earth_km is None
    assert frame.asteroid_km is None


# -----------------------------
# POSITIONS
# -----------------------------
def test_interpolated_positions_follow_clock():
    session = _session(earth_series=_series("earth"), asteroid_series=_series("asteroid", 1.1))
    session.clock.tick(1500.0)  # 1.5 days

    frame = session.frame()
    np.testing.assert_allclose(frame.earth_km, [AU_KM, 1500.0, 0.0])
    np.testing.assert_allclose(frame.asteroid_km, [1.1 * AU_KM, 1500.0, 0.0])
    assert frame.earth_scene[0] == pytest.approx(3.0)


def test_keplerian_fallback_without_asteroid_series():
    session = _session(earth_series=_series("earth"), asteroid=_asteroid())
    pos = session.asteroid_position_km()
    assert np.linalg.norm(pos) == pytest.approx(ELEMENTS.perihelion_au * AU_KM)

    session.clock.tick(5000.0)
    assert not np.allclose(session.asteroid_position_km(), pos)


def test_trail_grows_only_while_playing_and_is_bounded():
    session = _session(earth_series=_series("earth"), asteroid=_asteroid(),
                       clock_settings=ClockSettings(rate_multiplier=1.0))
    for _ in range(TRAIL_LENGTH + 20):
        session.clock.tick(1.0)
        session.frame()
    assert len(session.trail) == TRAIL_LENGTH

    session.clock.pause()
    before = len(session.frame().trail)
    session.frame()
    assert len(session.trail) == before


def test_final_position_at_end_of_data_joins_trail():
    session = _session(earth_series=_series("earth"), asteroid=_asteroid())
    session.clock.seek(T0 + (DAYS - 0.5) * MS_PER_DAY)

    frame = session.step(now_ms=1000.0)   # 1 s of wall time = 1 simulated day
    assert frame.clock.state is ClockState.AT_END
    assert len(frame.trail) == 1
    np.testing.assert_allclose(frame.trail[0], frame.asteroid_scene)


# -----------------------------
# APPROACHES + IMPACT
# -----------------------------
def test_jump_to_approach_in_and_out_of_range():
    inside = _approach(datetime(2023, 2, 28, 12, 0, tzinfo=timezone.utc))
    outside = _approach(datetime(2029, 4, 13, 21, 46, tzinfo=timezone.utc))
    session = _session(earth_series=_series("earth"), asteroid=_asteroid([inside, outside]))

    assert session.approaches_in_range() == [inside]
    assert session.jump_to_approach(inside) is True
    assert session.clock.current_ms == inside.unix_ms

    assert session.jump_to_approach(outside) is False
    assert session.clock.current_ms == inside.unix_ms


def test_estimate_impact_defaults_to_first_approach():
    approach = _approach(datetime(2023, 2, 28, tzinfo=timezone.utc))
    session = _session(asteroid=_asteroid([approach]))
    est = session.estimate_impact()
    assert est.diameter_avg_m == 120.0
    assert est.velocity_kms == 15.0
    assert est.impact_type is ImpactType.GROUND

    with pytest.raises(ValueError):
        _session().estimate_impact()


# -----------------------------
# DRIVERS
# -----------------------------
def test_playback_runs_to_end_of_data():
    session = _session(earth_series=_series("earth"))
    frames = run_playback(session, real_seconds=60.0)

    assert frames[-1].clock.state is ClockState.AT_END
    assert frames[-1].clock.current_ms == session.clock.range_end_ms
    # 10 days at 1 day per real second, 30 Hz
    assert len(frames) <= 10 * 30 + 2


def test_realtime_driver_uses_measured_deltas():
    now = [0.0]

    def fake_sleep(sec):
        now[0] += sec * 1000.0

    session = _session(earth_series=_series("earth"), time_source=lambda: now[0])
    seen = []
    count = run_realtime(session, seen.append, hz=10.0, sleep=fake_sleep)

    assert count == len(seen)
    assert seen[-1].clock.state is ClockState.AT_END
    assert count == pytest.approx(100, abs=2)
