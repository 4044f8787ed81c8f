# neorisk/cli.py
from dataclasses import dataclass
from typing import List, Optional

from neorisk.config.settings import (
    ASTEROID_METADATA_FILE,
    DEFAULT_DENSITY,
    RATE_PRESETS,
    data_path,
    rate_label,
)
from neorisk.models.asteroid import AsteroidRecord, CloseApproach

RATE_NAMES = {
    "1s": "1 second",
    "1h": "1 hour",
    "1d": "1 day",
    "1wk": "1 week",
    "1mo": "1 month",
    "3mo": "3 months",
    "6mo": "6 months",
    "1yr": "1 year",
}


@dataclass
class CliChoices:
    metadata_path: str
    neo_id: Optional[str]
    mode: str
    rate: float
    diameter_m: Optional[float] = None
    velocity_kms: Optional[float] = None
    density_kg_m3: Optional[float] = None
    approach_index: int = 0


def get_float(prompt, default=None):
    """
    Safe float input with optional default. Non-interactive (EOF) returns default.
    """
    while True:
        try:
            user = input(prompt)
        except EOFError:
            return float(default) if default is not None else None
        if user.strip() == "":
            return float(default) if default is not None else None
        try:
            return float(user)
        except (ValueError, TypeError):
            print("❌ Please enter a valid number.")


def get_int(prompt, default=None, min_val=None, max_val=None):
    """
    Safe integer input with limits. Non-interactive (EOF) returns default.
    """
    while True:
        try:
            user = input(prompt)
        except EOFError:
            return int(default) if default is not None else None
        if user.strip() == "" and default is not None:
            return int(default)
        try:
            val = int(user)
            if min_val is not None and val < min_val:
                raise ValueError
            if max_val is not None and val > max_val:
                raise ValueError
            return val
        except (ValueError, TypeError):
            print("❌ Invalid integer input.")


def get_text(prompt, default=""):
    try:
        user = input(prompt).strip()
    except EOFError:
        return default
    return user or default


def choose_mode():
    """
    Choose run mode.
      1 -> PLAYBACK (headless, writes frames summary) [recommended]
      2 -> LIVE (matplotlib orbit animation)
      3 -> IMPACT (estimate only)
    """
    print("\n⚙️  Run Mode")
    print("  1) PLAYBACK (Recommended) — headless run to end of data")
    print("  2) LIVE — animated orbit view")
    print("  3) IMPACT — impact estimate only")

    choice = get_text("Select mode [1]: ")

    if choice == "2":
        return "live"
    if choice == "3":
        return "impact"
    return "playback"


def choose_rate(current: float) -> float:
    print("\n⏱️  Time step (simulated time per real second)")
    labels = list(RATE_PRESETS.keys())
    current_label = rate_label(current)
    default_idx = labels.index(current_label) + 1 if current_label in labels else 4
    for i, label in enumerate(labels, start=1):
        mark = " *" if label == current_label else ""
        print(f"  {i}) {RATE_NAMES[label]}{mark}")

    idx = get_int(f"Select time step [{default_idx}]: ", default=default_idx, min_val=1, max_val=len(labels))
    return RATE_PRESETS[labels[idx - 1]]


def print_asteroid(asteroid: AsteroidRecord):
    print(f"\n☄️ {asteroid.name} ({asteroid.designation})")
    print(f"  Estimated diameter : {asteroid.diameter_min_m:.1f} - {asteroid.diameter_max_m:.1f} m")
    print(f"  Absolute magnitude : {asteroid.absolute_magnitude_h}")
    print(f"  Potentially hazardous: {'Yes' if asteroid.is_potentially_hazardous else 'No'}")
    if asteroid.orbit_class_type:
        print(f"  Orbit class        : {asteroid.orbit_class_type} ({asteroid.orbit_class_description})")
    el = asteroid.elements
    if el is not None:
        print(f"  Semi-major axis    : {el.semi_major_axis_au} AU")
        print(f"  Eccentricity       : {el.eccentricity:.4f}")
        print(f"  Inclination        : {el.inclination_deg:.2f}°")
        print(f"  Orbital period     : {el.orbital_period_days:.1f} days")


def choose_approach(approaches: List[CloseApproach], start_ms=None, end_ms=None) -> int:
    if not approaches:
        print("No close approaches found")
        return 0
    print("\n📍 Close approaches")
    for i, a in enumerate(approaches, start=1):
        flag = "  [in simulation range]" if a.in_range(start_ms, end_ms) else ""
        print(f"  {i}) {a.date_full}  miss {a.miss_distance_km:,.0f} km  "
              f"v {a.velocity_kms:.2f} km/s  ({a.orbiting_body}){flag}")
    return get_int("Select approach [1]: ", default=1, min_val=1, max_val=len(approaches)) - 1


def ask_impact_overrides(asteroid: Optional[AsteroidRecord], approach: Optional[CloseApproach]):
    print("\n💥 Impact parameters (Enter keeps catalog value)")
    d_default = asteroid.diameter_avg_m if asteroid is not None else None
    v_default = approach.velocity_kms if approach is not None else None

    diameter = get_float(f"Diameter (m) [{d_default:.1f}]: " if d_default else "Diameter (m): ")
    velocity = get_float(f"Velocity (km/s) [{v_default:.2f}]: " if v_default else "Velocity (km/s): ")
    density = get_float(f"Density (kg/m^3) [{DEFAULT_DENSITY:.0f}]: ")
    return diameter, velocity, density


def run_cli(current_rate: float) -> CliChoices:
    print("======================================")
    print("   NEAR-EARTH OBJECT RISK ENGINE (CLI) ")
    print("======================================")

    default_meta = data_path(ASTEROID_METADATA_FILE)
    metadata_path = get_text(f"Asteroid metadata JSON [{default_meta}]: ", default=default_meta)
    neo_id = get_text("NeoWs asteroid id to fetch (Enter to use the local file): ") or None

    mode = choose_mode()
    rate = current_rate if mode == "impact" else choose_rate(current_rate)

    print("\n✅ CLI input complete.")
    print(f"→ Mode: {mode}")
    label = rate_label(rate)
    print(f"→ Time step: {RATE_NAMES.get(label, f'{rate:g} s')} per second")

    return CliChoices(
        metadata_path=metadata_path,
        neo_id=neo_id,
        mode=mode,
        rate=float(rate),
    )


def finish_cli(choices: CliChoices, asteroid: Optional[AsteroidRecord], start_ms=None, end_ms=None) -> CliChoices:
    """Second stage, once metadata is loaded: approach and impact overrides."""
    if asteroid is None:
        return choices
    print_asteroid(asteroid)
    choices.approach_index = choose_approach(asteroid.close_approaches, start_ms, end_ms)
    approach = asteroid.close_approaches[choices.approach_index] if asteroid.close_approaches else None
    choices.diameter_m, choices.velocity_kms, choices.density_kg_m3 = ask_impact_overrides(asteroid, approach)
    return choices
