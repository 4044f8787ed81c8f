"""
JPL Horizons vector-table parser.

Only lines between the $$SOE / $$EOE markers are read. Each data line is CSV:
    JDTDB, Calendar Date (TDB), X, Y, Z, VX, VY, VZ[, ...]
Malformed lines are skipped, never fatal.
"""
from __future__ import annotations

import logging
import math
import os
from typing import Optional, Tuple

from neorisk.config.settings import (
    EPHEMERIS_END_MARKER,
    EPHEMERIS_MIN_FIELDS,
    EPHEMERIS_START_MARKER,
)
from neorisk.errors import EmptySeriesError
from neorisk.models.ephemeris import EphemerisSample, EphemerisSeries

logger = logging.getLogger(__name__)


def _parse_float(text: str) -> Optional[float]:
    try:
        val = float(text)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(val):
        return None
    return val


def parse_line(line: str) -> Optional[EphemerisSample]:
    """
    Parse one data line. Returns None when the line has fewer than
    EPHEMERIS_MIN_FIELDS fields or any of the seven numeric fields is invalid.
    """
    parts = [p.strip() for p in line.split(",")]
    if len(parts) < EPHEMERIS_MIN_FIELDS:
        return None

    jd = _parse_float(parts[0])
    nums = [_parse_float(p) for p in parts[2:8]]
    if jd is None or any(n is None for n in nums):
        return None

    x, y, z, vx, vy, vz = nums
    return EphemerisSample(
        julian_date=jd,
        label=parts[1],
        position=(x, y, z),
        velocity=(vx, vy, vz),
    )


def parse_with_stats(text: str, name: Optional[str] = None) -> Tuple[EphemerisSeries, int]:
    """
    Parse a Horizons text block. Returns (series, skipped_line_count).
    """
    samples = []
    skipped = 0
    in_data = False
    prev_jd = None

    for line in text.splitlines():
        if EPHEMERIS_START_MARKER in line:
            in_data = True
            continue
        if EPHEMERIS_END_MARKER in line:
            break
        if not in_data or not line.strip():
            continue

        sample = parse_line(line)
        if sample is None:
            skipped += 1
            continue

        if prev_jd is not None and sample.julian_date < prev_jd:
            # kept as-is; interpolation assumes ascending order
            logger.warning(
                "Ephemeris %s out of order at JD %.6f (previous %.6f)",
                name or "<text>", sample.julian_date, prev_jd,
            )
        prev_jd = sample.julian_date
        samples.append(sample)

    if skipped:
        logger.debug("Ephemeris %s: skipped %d malformed line(s)", name or "<text>", skipped)

    return EphemerisSeries(samples, name=name), skipped


def parse(text: str, name: Optional[str] = None) -> EphemerisSeries:
    series, _ = parse_with_stats(text, name=name)
    return series


def load_ephemeris_file(path: str, name: Optional[str] = None, require_data: bool = False) -> EphemerisSeries:
    """
    Read and parse an ephemeris file. With require_data=True an empty result
    raises EmptySeriesError instead of returning an empty series.
    """
    with open(path, "r", encoding="utf-8") as f:
        text = f.read()

    series = parse(text, name=name or os.path.basename(path))
    logger.info("Loaded %s: %d points", series.name, len(series))

    if require_data and not series:
        raise EmptySeriesError(f"No ephemeris samples in {path}")
    return series
