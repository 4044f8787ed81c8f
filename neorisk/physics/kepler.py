# neorisk/physics/kepler.py
"""
Analytic two-body position from Keplerian elements.

Used when no sampled ephemeris is available for a body. Output is a
heliocentric ecliptic position in AU; the Y-up scene remap of
neorisk.physics.interpolation.to_scene applies after converting to km.
"""
import math
from typing import Optional

import numpy as np

from neorisk.config.settings import KEPLER_ITERATIONS
from neorisk.models.orbit import KeplerianElements

TWO_PI = 2.0 * math.pi


def mean_anomaly(elements: KeplerianElements, elapsed_sim_seconds: float) -> float:
    """M = (t * n) mod 2pi, t measured from perihelion passage."""
    return math.fmod(float(elapsed_sim_seconds) * elements.mean_motion_rad_s, TWO_PI)


def solve_eccentric_anomaly(M: float, e: float, max_iter: int = KEPLER_ITERATIONS,
                            tol: Optional[float] = None) -> float:
    """
    Solve Kepler's equation M = E - e sin(E).

    Default: fixed-iteration update E <- M + e sin(E) seeded at E = M, with no
    convergence check. Adequate for e < ~0.3; this is an approximation, not a
    convergence-guaranteed solver.

    With `tol`: Newton-Raphson, stopping once |dE| < tol or after max_iter steps.
    """
    E = M
    if tol is None:
        for _ in range(int(max_iter)):
            E = M + e * math.sin(E)
        return E

    for _ in range(int(max_iter)):
        f = E - e * math.sin(E) - M
        fp = 1.0 - e * math.cos(E)
        dE = f / fp
        E -= dE
        if abs(dE) < tol:
            break
    return E


def true_anomaly(E: float, e: float) -> float:
    return 2.0 * math.atan2(
        math.sqrt(1.0 + e) * math.sin(E / 2.0),
        math.sqrt(1.0 - e) * math.cos(E / 2.0),
    )


def _rot_z(angle: float) -> np.ndarray:
    c, s = math.cos(angle), math.sin(angle)
    return np.array([[c, -s, 0.0], [s, c, 0.0], [0.0, 0.0, 1.0]])


def _rot_x(angle: float) -> np.ndarray:
    c, s = math.cos(angle), math.sin(angle)
    return np.array([[1.0, 0.0, 0.0], [0.0, c, -s], [0.0, s, c]])


def orbital_plane_to_ecliptic(elements: KeplerianElements) -> np.ndarray:
    """Rz(node) . Rx(inclination) . Rz(arg periapsis)."""
    node = math.radians(elements.ascending_node_deg)
    inc = math.radians(elements.inclination_deg)
    argp = math.radians(elements.arg_periapsis_deg)
    return _rot_z(node) @ _rot_x(inc) @ _rot_z(argp)


def position_at_elapsed(elements: KeplerianElements, elapsed_sim_seconds: float,
                        max_iter: int = KEPLER_ITERATIONS, tol: Optional[float] = None) -> np.ndarray:
    """Heliocentric ecliptic position (AU) after `elapsed_sim_seconds`."""
    e = elements.eccentricity
    a = elements.semi_major_axis_au

    M = mean_anomaly(elements, elapsed_sim_seconds)
    E = solve_eccentric_anomaly(M, e, max_iter=max_iter, tol=tol)
    nu = true_anomaly(E, e)
    r = a * (1.0 - e * math.cos(E))

    in_plane = np.array([r * math.cos(nu), r * math.sin(nu), 0.0])
    return orbital_plane_to_ecliptic(elements) @ in_plane


def orbit_path(elements: KeplerianElements, samples: int = 360) -> np.ndarray:
    """(samples, 3) positions in AU over one full period."""
    period_s = elements.orbital_period_days * 86400.0
    ts = np.linspace(0.0, period_s, int(samples), endpoint=False)
    return np.vstack([position_at_elapsed(elements, t) for t in ts])
