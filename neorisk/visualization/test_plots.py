import os

import matplotlib

matplotlib.use("Agg")

from neorisk.models.ephemeris import EphemerisSample, EphemerisSeries  # noqa: E402
from neorisk.models.orbit import KeplerianElements  # noqa: E402
from neorisk.physics.impact import estimate_impact  # noqa: E402
from neorisk.visualization.plots import plot_impact_summary, plot_orbits  # noqa: E402

AU_KM = 149_597_870.7

EARTH = EphemerisSeries(
    [EphemerisSample(2460000.5 + i, "", (AU_KM, i * 1e6, 0.0), (0.0, 0.0, 0.0)) for i in range(5)],
    name="earth",
)


def test_plot_orbits_with_keplerian_fallback(tmp_path):
    elements = KeplerianElements(0.9224, 0.1914, 3.339, 126.67, 203.96, 323.6)
    path = plot_orbits(EARTH, None, elements=elements, name="Apophis", out_dir=str(tmp_path))

    assert path == os.path.join(str(tmp_path), "orbits.png")
    assert os.path.getsize(path) > 0


def test_plot_orbits_with_series(tmp_path):
    path = plot_orbits(EARTH, EARTH, out_dir=str(tmp_path))
    assert os.path.exists(path)


def test_plot_impact_summary(tmp_path):
    est = estimate_impact(340.0, 20.0, 2600.0)
    path = plot_impact_summary(est, out_dir=str(tmp_path))
    assert path.endswith("impact_summary.png")
    assert os.path.getsize(path) > 0
