# neorisk/models/asteroid.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from neorisk.models.orbit import KeplerianElements
from neorisk.physics.timeconv import datetime_to_unix_ms


@dataclass(frozen=True)
class CloseApproach:
    date_full: str
    date: Optional[datetime]
    miss_distance_km: float
    velocity_kms: float
    velocity_kmh: float
    orbiting_body: str = "Earth"

    @property
    def unix_ms(self) -> Optional[float]:
        return datetime_to_unix_ms(self.date) if self.date is not None else None

    def in_range(self, start_ms: Optional[float], end_ms: Optional[float]) -> bool:
        t = self.unix_ms
        if t is None or start_ms is None or end_ms is None:
            return False
        return start_ms <= t <= end_ms


@dataclass(frozen=True)
class AsteroidRecord:
    """
    Static catalog metadata for one near-Earth object.
    """
    name: str
    designation: str
    absolute_magnitude_h: Optional[float]
    diameter_min_m: float
    diameter_max_m: float
    is_potentially_hazardous: bool
    elements: Optional[KeplerianElements]
    perihelion_distance_au: Optional[float] = None
    aphelion_distance_au: Optional[float] = None
    orbit_class_type: Optional[str] = None
    orbit_class_description: Optional[str] = None
    close_approaches: List[CloseApproach] = field(default_factory=list)

    @property
    def diameter_avg_m(self) -> float:
        return (self.diameter_min_m + self.diameter_max_m) / 2.0

    def upcoming_approaches(self, now: datetime, limit: int = 5) -> List[CloseApproach]:
        """Approaches dated at or after `now`, in catalog order."""
        out = [a for a in self.close_approaches if a.date is not None and a.date >= now]
        return out[: int(limit)]
