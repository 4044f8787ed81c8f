"""
NeoWs asteroid metadata document -> AsteroidRecord.

NeoWs encodes most numbers as strings; they are coerced here. Missing
orbital fields leave `elements` as None (the session then relies on a
sampled ephemeris only).
"""
from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional

from neorisk.errors import InvalidParameterError
from neorisk.models.asteroid import AsteroidRecord, CloseApproach
from neorisk.models.orbit import KeplerianElements
from neorisk.physics.timeconv import parse_date

logger = logging.getLogger(__name__)


def _as_float(x, default: Optional[float] = None) -> Optional[float]:
    try:
        if x is None:
            return default
        return float(x)
    except (TypeError, ValueError):
        return default


def _dig(doc: Dict[str, Any], *keys, default=None):
    cur = doc
    for k in keys:
        if not isinstance(cur, dict) or k not in cur:
            return default
        cur = cur[k]
    return cur


def parse_elements(orbital_data: Optional[Dict[str, Any]]) -> Optional[KeplerianElements]:
    if not orbital_data:
        return None
    values = {
        "semi_major_axis_au": _as_float(orbital_data.get("semi_major_axis")),
        "eccentricity": _as_float(orbital_data.get("eccentricity")),
        "inclination_deg": _as_float(orbital_data.get("inclination")),
        "arg_periapsis_deg": _as_float(orbital_data.get("perihelion_argument")),
        "ascending_node_deg": _as_float(orbital_data.get("ascending_node_longitude")),
        "orbital_period_days": _as_float(orbital_data.get("orbital_period")),
    }
    missing = [k for k, v in values.items() if v is None]
    if missing:
        logger.warning("Orbital data incomplete (%s); no Keplerian elements", ", ".join(missing))
        return None
    try:
        return KeplerianElements(**values)
    except InvalidParameterError as e:
        logger.warning("Orbital data rejected: %s", e)
        return None


def parse_close_approach(rec: Dict[str, Any]) -> CloseApproach:
    date_full = rec.get("close_approach_date_full") or rec.get("close_approach_date") or ""
    return CloseApproach(
        date_full=date_full,
        date=parse_date(date_full),
        miss_distance_km=_as_float(_dig(rec, "miss_distance", "kilometers"), float("nan")),
        velocity_kms=_as_float(_dig(rec, "relative_velocity", "kilometers_per_second"), float("nan")),
        velocity_kmh=_as_float(_dig(rec, "relative_velocity", "kilometers_per_hour"), float("nan")),
        orbiting_body=rec.get("orbiting_body", "Earth"),
    )


def parse_asteroid(doc: Dict[str, Any]) -> AsteroidRecord:
    meters = _dig(doc, "estimated_diameter", "meters", default={}) or {}
    orbital = doc.get("orbital_data") or {}

    return AsteroidRecord(
        name=str(doc.get("name", "")),
        designation=str(doc.get("designation", doc.get("neo_reference_id", ""))),
        absolute_magnitude_h=_as_float(doc.get("absolute_magnitude_h")),
        diameter_min_m=_as_float(meters.get("estimated_diameter_min"), 0.0),
        diameter_max_m=_as_float(meters.get("estimated_diameter_max"), 0.0),
        is_potentially_hazardous=bool(doc.get("is_potentially_hazardous_asteroid", False)),
        elements=parse_elements(orbital),
        perihelion_distance_au=_as_float(orbital.get("perihelion_distance")),
        aphelion_distance_au=_as_float(orbital.get("aphelion_distance")),
        orbit_class_type=_dig(orbital, "orbit_class", "orbit_class_type"),
        orbit_class_description=_dig(orbital, "orbit_class", "orbit_class_description"),
        close_approaches=[parse_close_approach(r) for r in doc.get("close_approach_data") or []],
    )


def load_asteroid_file(path: str) -> AsteroidRecord:
    with open(path, "r", encoding="utf-8") as f:
        doc = json.load(f)
    record = parse_asteroid(doc)
    logger.info("Loaded asteroid %s (%d close approaches)", record.name, len(record.close_approaches))
    return record
