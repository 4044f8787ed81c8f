import os

import matplotlib.pyplot as plt
import numpy as np

from neorisk.config.settings import AU_KM, OUTPUT_DIR
from neorisk.physics.kepler import orbit_path


def plot_orbits(earth_series, asteroid_series=None, elements=None, name="Asteroid", out_dir=None):
    """
    Top-down (ecliptic X/Y, AU) plot of Earth and asteroid orbits.
    Falls back to the Keplerian orbit when no asteroid ephemeris is given.
    """
    out_dir = out_dir or OUTPUT_DIR
    os.makedirs(out_dir, exist_ok=True)

    plt.figure(figsize=(8, 8))
    plt.scatter([0.0], [0.0], color="#FDB813", s=120, label="Sun", zorder=3)

    if earth_series is not None and len(earth_series) > 0:
        e = earth_series.positions() / AU_KM
        plt.plot(e[:, 0], e[:, 1], color="#4DA6FF", label="Earth")

    if asteroid_series is not None and len(asteroid_series) > 0:
        a = asteroid_series.positions() / AU_KM
        plt.plot(a[:, 0], a[:, 1], color="#999999", label=name)
    elif elements is not None:
        a = orbit_path(elements)
        plt.plot(a[:, 0], a[:, 1], color="#999999", linestyle="--", label=f"{name} (Keplerian)")

    plt.xlabel("X (AU)")
    plt.ylabel("Y (AU)")
    plt.title("Heliocentric Orbits (ecliptic)")
    plt.gca().set_aspect("equal")
    plt.legend()

    save_path = os.path.join(out_dir, "orbits.png")
    plt.tight_layout()
    plt.savefig(save_path)
    plt.close()

    print(f"[OK] Saved: {save_path}")
    return save_path


def plot_impact_summary(estimate, out_dir=None):
    """
    Bar chart of crater, blast and overpressure radii for one estimate.
    """
    out_dir = out_dir or OUTPUT_DIR
    os.makedirs(out_dir, exist_ok=True)

    labels = ["crater diameter", "blast radius"] + list(estimate.overpressure_radii_m.keys())
    values = [estimate.crater_diameter_m, estimate.blast_radius_m] + list(estimate.overpressure_radii_m.values())
    values_km = np.array(values, dtype=float) / 1000.0

    plt.figure(figsize=(8, 5))
    plt.bar(labels, values_km)
    plt.xticks(rotation=30, ha="right")
    plt.ylabel("km")
    plt.title(estimate.description, fontsize=9)

    save_path = os.path.join(out_dir, "impact_summary.png")
    plt.tight_layout()
    plt.savefig(save_path)
    plt.close()

    print(f"[OK] Saved: {save_path}")
    return save_path
