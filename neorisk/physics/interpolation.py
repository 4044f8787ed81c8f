# neorisk/physics/interpolation.py
"""
Continuous position from a discrete ephemeris.

Consumer convention: samples are ecliptic X/Y/Z in km. A Y-up renderer maps
(x, y, z) -> (x, z, y) and scales by KM_TO_SCENE_UNITS (1 AU = 3 units);
see to_scene(). That remap is not applied by position_at().
"""
from typing import Optional

import numpy as np

from neorisk.config.settings import KM_TO_SCENE_UNITS
from neorisk.models.ephemeris import EphemerisSeries
from neorisk.physics.timeconv import jd_to_unix_ms


def sample_times_ms(series: EphemerisSeries) -> np.ndarray:
    return np.array([jd_to_unix_ms(s.julian_date) for s in series], dtype=float)


def position_at(series: EphemerisSeries, query_ms: float) -> Optional[np.ndarray]:
    """
    Linearly interpolated position (km) at Unix-ms instant `query_ms`.

    Returns None for an empty series. Before the first sample / after the last
    sample the raw edge position is returned (no extrapolation). The bracket is
    the first pair (i, i+1) from index 0 with t_i <= query <= t_{i+1}.
    """
    if len(series) == 0:
        return None

    first, last = series[0], series[-1]
    if query_ms < jd_to_unix_ms(first.julian_date):
        return first.r
    if query_ms > jd_to_unix_ms(last.julian_date):
        return last.r

    before, after = 0, len(series) - 1
    for i in range(len(series) - 1):
        t_i = jd_to_unix_ms(series[i].julian_date)
        t_next = jd_to_unix_ms(series[i + 1].julian_date)
        if t_i <= query_ms <= t_next:
            before, after = i, i + 1
            break

    p1, p2 = series[before], series[after]
    t1 = jd_to_unix_ms(p1.julian_date)
    t2 = jd_to_unix_ms(p2.julian_date)

    # exact endpoints; also covers single-sample and duplicate-timestamp series
    if query_ms == t2 and after != before:
        return p2.r
    if t2 == t1 or query_ms == t1:
        return p1.r

    frac = (query_ms - t1) / (t2 - t1)
    r1, r2 = p1.r, p2.r
    return r1 + (r2 - r1) * frac


def to_scene(position_km) -> np.ndarray:
    """Ecliptic km -> Y-up scene units: (x, y, z) -> (x, z, y) * scale."""
    p = np.asarray(position_km, dtype=float)
    return np.array([p[0], p[2], p[1]], dtype=float) * KM_TO_SCENE_UNITS


def series_to_scene(series: EphemerisSeries) -> np.ndarray:
    """(N, 3) scene-space orbit path for a whole series."""
    pos = series.positions()
    if pos.shape[0] == 0:
        return pos
    return pos[:, [0, 2, 1]] * KM_TO_SCENE_UNITS
