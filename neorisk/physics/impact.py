# neorisk/physics/impact.py
"""
Impact physics estimator.

Pipeline: mass -> kinetic energy -> TNT yield -> atmospheric survival
(material strength vs. dynamic pressure) -> impact type per diameter band ->
crater / blast / burst altitude -> severity bucket.

Scaling laws are empirical and dashboard-grade:
    crater (m) = 1.8 * Y^0.29 * 1000
    blast  (m) = 200 * Y^0.33
with Y the effective yield in megatons reaching the ground (fragmented
bodies) or deposited in the air (small airbursts).
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from numbers import Real
from typing import Dict, Optional, Tuple

from neorisk.config.settings import (
    AIRBURST_ALTITUDE_M,
    AIRBURST_DIAMETER_M,
    BLAST_COEFF,
    BLAST_EXPONENT,
    BREAKUP_AIR_DENSITY,
    CRATER_COEFF,
    CRATER_EXPONENT,
    DEFAULT_DENSITY,
    ENTRY_VELOCITY_MAX_KMS,
    ENTRY_VELOCITY_MIN_KMS,
    FRAGMENT_DIAMETER_M,
    FRAGMENTED_ENERGY_FRACTION,
    GROUND_DIAMETER_M,
    IRON_DENSITY,
    IRON_FRAGMENT_ENERGY_FRACTION,
    J_PER_MEGATON,
    J_PER_TON,
    OVERPRESSURE_SCALE_M,
    SEVERITY_DEFAULT,
    SEVERITY_THRESHOLDS,
    SMALL_AIRBURST_BANDS,
    STONY_DENSITY_LIMIT,
    STRENGTH_BRACKETS,
    STRENGTH_DEFAULT,
    STRONG_SURVIVAL_RATIO,
    WEAK_SURVIVAL_RATIO,
)
from neorisk.errors import InvalidParameterError
from neorisk.models.asteroid import AsteroidRecord, CloseApproach


class ImpactType(str, Enum):
    GROUND = "Ground"
    FRAGMENTED = "Fragmented"
    AIRBURST = "Airburst"


class Severity(str, Enum):
    NEGLIGIBLE = "Negligible"
    MINOR = "Minor"
    MODERATE = "Moderate"
    MAJOR = "Major"
    CATASTROPHIC = "Catastrophic"


@dataclass(frozen=True)
class ImpactEstimate:
    diameter_avg_m: float
    velocity_kms: float
    density_kg_m3: float
    mass_kg: float
    kinetic_energy_j: float
    yield_megatons_tnt: float
    crater_diameter_m: float
    impact_type: ImpactType
    burst_altitude_m: Optional[float]
    blast_radius_m: float
    severity: Severity
    material_strength_pa: float
    dynamic_pressure_pa: float
    survival_ratio: float
    energy_fraction: float
    overpressure_radii_m: Dict[str, float] = field(default_factory=dict)
    approach: Optional[CloseApproach] = None

    @property
    def description(self) -> str:
        return describe(self)

    def to_dict(self) -> dict:
        return {
            "diameter_avg_m": self.diameter_avg_m,
            "velocity_kms": self.velocity_kms,
            "density_kg_m3": self.density_kg_m3,
            "mass_kg": self.mass_kg,
            "kinetic_energy_j": self.kinetic_energy_j,
            "yield_megatons_tnt": self.yield_megatons_tnt,
            "crater_diameter_m": self.crater_diameter_m,
            "impact_type": self.impact_type.value,
            "burst_altitude_m": self.burst_altitude_m,
            "blast_radius_m": self.blast_radius_m,
            "severity": self.severity.value,
            "survival_ratio": self.survival_ratio,
            "energy_fraction": self.energy_fraction,
            "overpressure_radii_m": dict(self.overpressure_radii_m),
            "approach_date": self.approach.date_full if self.approach else None,
            "description": self.description,
        }


def _require_positive(name: str, value) -> float:
    if isinstance(value, bool) or not isinstance(value, Real):
        raise InvalidParameterError(f"{name} must be a number, got {value!r}")
    out = float(value)
    if not math.isfinite(out):
        raise InvalidParameterError(f"{name} must be finite, got {value!r}")
    if out <= 0.0:
        raise InvalidParameterError(f"{name} must be > 0, got {value!r}")
    return out


def sphere_mass(diameter_m: float, density_kg_m3: float) -> float:
    radius = diameter_m / 2.0
    return density_kg_m3 * (4.0 / 3.0) * math.pi * radius ** 3


def kinetic_energy(mass_kg: float, velocity_kms: float) -> float:
    v = velocity_kms * 1000.0
    return 0.5 * mass_kg * v * v


def material_strength(density_kg_m3: float) -> float:
    """Bulk strength (Pa) by density bracket; brackets are inclusive upper bounds."""
    for upper, strength in STRENGTH_BRACKETS:
        if density_kg_m3 <= upper:
            return strength
    return STRENGTH_DEFAULT


def dynamic_pressure(velocity_kms: float) -> float:
    v = velocity_kms * 1000.0
    return 0.5 * BREAKUP_AIR_DENSITY * v * v


def severity_for_yield(yield_mt: float) -> Severity:
    for bound, label in SEVERITY_THRESHOLDS:
        if yield_mt < bound:
            return Severity(label)
    return Severity(SEVERITY_DEFAULT)


def _velocity_scale(velocity_kms: float) -> float:
    """0 at the slowest entry speed, 1 at the fastest."""
    span = ENTRY_VELOCITY_MAX_KMS - ENTRY_VELOCITY_MIN_KMS
    frac = (velocity_kms - ENTRY_VELOCITY_MIN_KMS) / span
    return min(1.0, max(0.0, frac))


def _scaled_altitude(bounds: Tuple[float, float], velocity_kms: float) -> float:
    lo, hi = bounds
    return lo + (hi - lo) * _velocity_scale(velocity_kms)


def classify(diameter_m: float, density_kg_m3: float, survival_ratio: float,
             velocity_kms: float) -> Tuple[ImpactType, float, Optional[float]]:
    """
    Decision table keyed on diameter band, then survival ratio / density.
    Returns (impact type, energy fraction, burst altitude m or None).
    """
    if diameter_m >= GROUND_DIAMETER_M:
        return ImpactType.GROUND, 1.0, None

    if diameter_m >= FRAGMENT_DIAMETER_M:
        if survival_ratio <= WEAK_SURVIVAL_RATIO and density_kg_m3 < STONY_DENSITY_LIMIT:
            return ImpactType.FRAGMENTED, FRAGMENTED_ENERGY_FRACTION, None
        return ImpactType.GROUND, 1.0, None

    if diameter_m >= AIRBURST_DIAMETER_M:
        if survival_ratio > STRONG_SURVIVAL_RATIO and density_kg_m3 >= IRON_DENSITY:
            return ImpactType.FRAGMENTED, IRON_FRAGMENT_ENERGY_FRACTION, None
        return ImpactType.AIRBURST, 1.0, _scaled_altitude(AIRBURST_ALTITUDE_M, velocity_kms)

    for upper, bounds, fraction in SMALL_AIRBURST_BANDS:
        if diameter_m < upper:
            return ImpactType.AIRBURST, fraction, _scaled_altitude(bounds, velocity_kms)
    # unreachable while SMALL_AIRBURST_BANDS ends at AIRBURST_DIAMETER_M
    upper, bounds, fraction = SMALL_AIRBURST_BANDS[-1]
    return ImpactType.AIRBURST, fraction, _scaled_altitude(bounds, velocity_kms)


def crater_diameter(yield_mt: float) -> float:
    if yield_mt <= 0.0:
        return 0.0
    return CRATER_COEFF * yield_mt ** CRATER_EXPONENT * 1000.0


def blast_radius(yield_mt: float) -> float:
    if yield_mt <= 0.0:
        return 0.0
    return BLAST_COEFF * yield_mt ** BLAST_EXPONENT


def overpressure_radii(energy_j: float) -> Dict[str, float]:
    """1/3/5 psi ring radii (m), cube-root scaled on TNT tons."""
    root = math.pow(energy_j / J_PER_TON, 1.0 / 3.0)
    return {k: root * scale for k, scale in OVERPRESSURE_SCALE_M.items()}


def estimate_impact(diameter_m: float, velocity_kms: float,
                    density_kg_m3: float = DEFAULT_DENSITY,
                    approach: Optional[CloseApproach] = None) -> ImpactEstimate:
    """
    Build an ImpactEstimate. Raises InvalidParameterError for non-finite or
    non-positive inputs; no estimate is produced in that case.
    """
    d = _require_positive("diameter_m", diameter_m)
    v = _require_positive("velocity_kms", velocity_kms)
    rho = _require_positive("density_kg_m3", density_kg_m3)

    mass = sphere_mass(d, rho)
    energy = kinetic_energy(mass, v)
    yield_mt = energy / J_PER_MEGATON

    strength = material_strength(rho)
    q = dynamic_pressure(v)
    ratio = strength / q

    impact_type, fraction, burst_alt = classify(d, rho, ratio, v)
    effective = yield_mt * fraction

    crater = 0.0 if impact_type is ImpactType.AIRBURST else crater_diameter(effective)

    return ImpactEstimate(
        diameter_avg_m=d,
        velocity_kms=v,
        density_kg_m3=rho,
        mass_kg=mass,
        kinetic_energy_j=energy,
        yield_megatons_tnt=yield_mt,
        crater_diameter_m=crater,
        impact_type=impact_type,
        burst_altitude_m=burst_alt,
        blast_radius_m=blast_radius(effective),
        severity=severity_for_yield(yield_mt),
        material_strength_pa=strength,
        dynamic_pressure_pa=q,
        survival_ratio=ratio,
        energy_fraction=fraction,
        overpressure_radii_m=overpressure_radii(energy * fraction),
        approach=approach,
    )


def estimate_for_approach(asteroid: AsteroidRecord, approach: CloseApproach,
                          diameter_m: Optional[float] = None,
                          velocity_kms: Optional[float] = None,
                          density_kg_m3: Optional[float] = None) -> ImpactEstimate:
    """
    Catalog defaults (mean diameter, approach velocity, DEFAULT_DENSITY),
    each replaceable by a custom value.
    """
    return estimate_impact(
        asteroid.diameter_avg_m if diameter_m is None else diameter_m,
        approach.velocity_kms if velocity_kms is None else velocity_kms,
        DEFAULT_DENSITY if density_kg_m3 is None else density_kg_m3,
        approach=approach,
    )


def describe(est: ImpactEstimate) -> str:
    head = (
        f"{est.severity.value} {est.impact_type.value.lower()} event: "
        f"{est.yield_megatons_tnt:.3g} Mt TNT"
    )
    if est.impact_type is ImpactType.AIRBURST:
        return f"{head}, airburst at {est.burst_altitude_m / 1000.0:.1f} km, blast radius {est.blast_radius_m:.0f} m"
    return f"{head}, crater {est.crater_diameter_m:.0f} m, blast radius {est.blast_radius_m:.0f} m"


def deflection_miss_distance(dv_mps: float, lead_time_days: float) -> float:
    """Along-track displacement (m) from a velocity change applied lead_time_days ahead."""
    for name, val in (("dv_mps", dv_mps), ("lead_time_days", lead_time_days)):
        if isinstance(val, bool) or not isinstance(val, Real) or not math.isfinite(val) or val < 0:
            raise InvalidParameterError(f"{name} must be a finite number >= 0, got {val!r}")
    return float(dv_mps) * float(lead_time_days) * 86400.0
