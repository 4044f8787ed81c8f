import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402

from neorisk.config.preferences import ClockSettings  # noqa: E402
from neorisk.models.asteroid import AsteroidRecord  # noqa: E402
from neorisk.models.ephemeris import EphemerisSample, EphemerisSeries  # noqa: E402
from neorisk.models.orbit import KeplerianElements  # noqa: E402
from neorisk.simulation.runner import SimulationSession  # noqa: E402
from neorisk.visualization.animation import animate_session  # noqa: E402

AU_KM = 149_597_870.7


class SteppingTime:
    """Each read moves the wall clock forward by 100 ms."""

    def __init__(self):
        self.now = 0.0

    def __call__(self):
        self.now += 100.0
        return self.now


def _session():
    earth = EphemerisSeries(
        [EphemerisSample(2460000.5 + i, "", (AU_KM, i * 1e6, 0.0), (0.0, 0.0, 0.0)) for i in range(10)],
        name="earth",
    )
    asteroid = AsteroidRecord(
        name="Test", designation="T1", absolute_magnitude_h=20.0,
        diameter_min_m=100.0, diameter_max_m=140.0, is_potentially_hazardous=False,
        elements=KeplerianElements(1.2, 0.1, 5.0, 30.0, 60.0, 480.0),
    )
    return SimulationSession(
        earth_series=earth,
        asteroid=asteroid,
        clock_settings=ClockSettings(rate_multiplier=3600.0),
        time_source=SteppingTime(),
    )


def test_first_draw_steps_the_session():
    session = _session()
    start = session.clock.current_ms

    anim = animate_session(session, show=False)
    fig = plt.gcf()
    fig.canvas.draw()

    assert anim is not None
    assert session.clock.current_ms > start
    assert len(session.trail) >= 1
    texts = [t.get_text() for t in fig.axes[0].texts]
    assert any(t.endswith("UTC") for t in texts)
    assert any("[playing]" in t for t in texts)
    plt.close(fig)
