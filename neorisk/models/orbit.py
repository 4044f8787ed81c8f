# neorisk/models/orbit.py
from __future__ import annotations

import math
from dataclasses import dataclass

from neorisk.errors import InvalidParameterError


@dataclass(frozen=True)
class KeplerianElements:
    """
    Two-body orbital elements, heliocentric ecliptic.
    Angles in degrees, semi-major axis in AU, period in days.
    """
    semi_major_axis_au: float
    eccentricity: float
    inclination_deg: float
    arg_periapsis_deg: float
    ascending_node_deg: float
    orbital_period_days: float

    def __post_init__(self):
        for name in (
            "semi_major_axis_au",
            "eccentricity",
            "inclination_deg",
            "arg_periapsis_deg",
            "ascending_node_deg",
            "orbital_period_days",
        ):
            val = getattr(self, name)
            if not isinstance(val, (int, float)) or not math.isfinite(val):
                raise InvalidParameterError(f"{name} must be a finite number, got {val!r}")
        if self.semi_major_axis_au <= 0:
            raise InvalidParameterError("semi_major_axis_au must be > 0")
        if not (0.0 <= self.eccentricity < 1.0):
            raise InvalidParameterError("eccentricity must satisfy 0 <= e < 1")
        if self.orbital_period_days <= 0:
            raise InvalidParameterError("orbital_period_days must be > 0")

    @property
    def perihelion_au(self) -> float:
        return self.semi_major_axis_au * (1.0 - self.eccentricity)

    @property
    def aphelion_au(self) -> float:
        return self.semi_major_axis_au * (1.0 + self.eccentricity)

    @property
    def mean_motion_rad_s(self) -> float:
        return 2.0 * math.pi / (self.orbital_period_days * 86400.0)
