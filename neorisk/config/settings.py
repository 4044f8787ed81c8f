"""
Project settings (constants + small helpers).
Units: kilometers (km) for ephemeris positions, astronomical units (AU) for
Keplerian elements, milliseconds (ms) for wall/simulated instants, SI for impact physics.
"""
from __future__ import annotations

import math
import os
from typing import Optional

# Paths
BASE_DIR = os.path.dirname(os.path.dirname(os.path.dirname(__file__)))
DATA_DIR = os.environ.get("NEORISK_DATA_DIR", os.path.join(BASE_DIR, "data"))
OUTPUT_DIR = os.environ.get("NEORISK_OUTPUT_DIR", os.path.join(BASE_DIR, "outputs"))

EARTH_EPHEMERIS_FILE = "earth-orbit.txt"
ASTEROID_EPHEMERIS_FILE = "asteroid-orbit.txt"
ASTEROID_METADATA_FILE = "asteroid.json"
PREFERENCES_FILE = "preferences.json"

VALIDATE_ON_IMPORT = False

# Time
JD_UNIX_EPOCH = 2440587.5          # Julian date of 1970-01-01T00:00:00Z
MS_PER_DAY = 86_400_000.0
SECS_PER_HOUR = 3600.0
SECS_PER_DAY = SECS_PER_HOUR * 24.0
SECS_PER_WEEK = SECS_PER_DAY * 7.0
SECS_PER_MONTH = SECS_PER_DAY * 30.4167
SECS_PER_YEAR = SECS_PER_DAY * 365.25

# Ephemeris text block markers (JPL Horizons)
EPHEMERIS_START_MARKER = "$$SOE"
EPHEMERIS_END_MARKER = "$$EOE"
EPHEMERIS_MIN_FIELDS = 8

# Distance / scene
AU_KM = 149_597_870.7
SCENE_UNITS_PER_AU = 3.0
KM_TO_SCENE_UNITS = SCENE_UNITS_PER_AU / AU_KM

# Simulation clock
TICK_HZ = 30.0
TICK_INTERVAL_MS = 1000.0 / TICK_HZ
TRAIL_LENGTH = 150

RATE_PRESETS = {
    "1s": 1.0,
    "1h": SECS_PER_HOUR,
    "1d": SECS_PER_DAY,
    "1wk": SECS_PER_WEEK,
    "1mo": SECS_PER_MONTH,
    "3mo": SECS_PER_MONTH * 3,
    "6mo": SECS_PER_MONTH * 6,
    "1yr": SECS_PER_YEAR,
}
DEFAULT_RATE = RATE_PRESETS["1wk"]
RATE_STORAGE_KEY = "asteroid-simulation-speed"

# Kepler solver
KEPLER_ITERATIONS = 10

# Impact physics
DEFAULT_DENSITY = 3000.0           # kg/m^3 (catalog default)
J_PER_MEGATON = 4.184e15
J_PER_TON = 4.184e9
BREAKUP_AIR_DENSITY = 0.4          # kg/m^3 at assumed breakup altitude

# (upper density bound kg/m^3, strength Pa); last entry covers everything above
STRENGTH_BRACKETS = (
    (1000.0, 1.0e6),
    (2000.0, 3.0e6),
    (2600.0, 5.0e6),
    (3500.0, 10.0e6),
)
STRENGTH_DEFAULT = 50.0e6

GROUND_DIAMETER_M = 100.0
FRAGMENT_DIAMETER_M = 50.0
AIRBURST_DIAMETER_M = 10.0

WEAK_SURVIVAL_RATIO = 0.5
STRONG_SURVIVAL_RATIO = 2.0
STONY_DENSITY_LIMIT = 3500.0
IRON_DENSITY = 7000.0

CRATER_COEFF = 1.8
CRATER_EXPONENT = 0.29
BLAST_COEFF = 200.0
BLAST_EXPONENT = 0.33

# energy fraction reaching the ground for fragmented bodies
FRAGMENTED_ENERGY_FRACTION = 0.5   # 50-100 m weak stony bodies
IRON_FRAGMENT_ENERGY_FRACTION = 0.3  # 10-50 m iron bodies

# airburst altitude ranges (m) and deposited energy fraction
AIRBURST_ALTITUDE_M = (5_000.0, 20_000.0)       # 10-50 m
SMALL_AIRBURST_BANDS = (
    # (upper diameter m, (min alt m, max alt m), energy fraction)
    (1.0, (50_000.0, 70_000.0), 0.1),
    (5.0, (35_000.0, 55_000.0), 0.3),
    (10.0, (20_000.0, 40_000.0), 0.5),
)
ENTRY_VELOCITY_MIN_KMS = 11.0
ENTRY_VELOCITY_MAX_KMS = 72.0

# severity thresholds (MT); first bucket whose bound the yield is below wins
SEVERITY_THRESHOLDS = (
    (0.001, "Negligible"),
    (1.0, "Minor"),
    (100.0, "Moderate"),
    (1000.0, "Major"),
)
SEVERITY_DEFAULT = "Catastrophic"

# overpressure ring scale (m per cube-root ton TNT)
OVERPRESSURE_SCALE_M = {"psi1_m": 1200.0, "psi3_m": 700.0, "psi5_m": 500.0}

# Fetcher
NEOWS_BASE_URL = "https://api.nasa.gov/neo/rest/v1"
HORIZONS_URL = "https://ssd.jpl.nasa.gov/api/horizons.api"
HTTP_TIMEOUT_SEC = 30
FETCH_CACHE_FILE = "fetch_cache.json"
FETCH_CACHE_TTL_HOURS = 6.0


def rate_label(rate: float) -> Optional[str]:
    """Return the preset label for a rate, or None for a non-preset value."""
    for label, value in RATE_PRESETS.items():
        if math.isclose(value, float(rate), rel_tol=1e-9):
            return label
    return None


def clamp_rate(val: Optional[float]) -> float:
    """Fall back to DEFAULT_RATE for missing, non-finite or non-positive rates."""
    if val is None:
        return DEFAULT_RATE
    try:
        out = float(val)
    except (TypeError, ValueError):
        return DEFAULT_RATE
    if not math.isfinite(out) or out <= 0.0:
        return DEFAULT_RATE
    return out


def data_path(name: str) -> str:
    return os.path.join(DATA_DIR, name)


def output_path(name: str) -> str:
    return os.path.join(OUTPUT_DIR, name)


def validate_settings() -> None:
    if TICK_HZ <= 0:
        raise ValueError("TICK_HZ must be > 0")
    if TRAIL_LENGTH <= 0:
        raise ValueError("TRAIL_LENGTH must be > 0")
    if DEFAULT_RATE <= 0:
        raise ValueError("DEFAULT_RATE must be > 0")
    if any(v <= 0 for v in RATE_PRESETS.values()):
        raise ValueError("RATE_PRESETS values must be > 0")
    if KEPLER_ITERATIONS <= 0:
        raise ValueError("KEPLER_ITERATIONS must be > 0")
    if DEFAULT_DENSITY <= 0:
        raise ValueError("DEFAULT_DENSITY must be > 0")
    if BREAKUP_AIR_DENSITY <= 0:
        raise ValueError("BREAKUP_AIR_DENSITY must be > 0")

    bounds = [b for b, _ in STRENGTH_BRACKETS]
    if bounds != sorted(bounds):
        raise ValueError("STRENGTH_BRACKETS must be ordered by density")
    thresholds = [t for t, _ in SEVERITY_THRESHOLDS]
    if thresholds != sorted(thresholds):
        raise ValueError("SEVERITY_THRESHOLDS must be ascending")

    if not (AIRBURST_DIAMETER_M < FRAGMENT_DIAMETER_M < GROUND_DIAMETER_M):
        raise ValueError("diameter bands must be ascending")
    if ENTRY_VELOCITY_MAX_KMS <= ENTRY_VELOCITY_MIN_KMS:
        raise ValueError("ENTRY_VELOCITY_MAX_KMS must be > ENTRY_VELOCITY_MIN_KMS")
    if SMALL_AIRBURST_BANDS[-1][0] != AIRBURST_DIAMETER_M:
        raise ValueError("SMALL_AIRBURST_BANDS must end at AIRBURST_DIAMETER_M")


if VALIDATE_ON_IMPORT:
    validate_settings()
