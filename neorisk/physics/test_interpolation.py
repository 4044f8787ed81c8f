import numpy as np
import pytest

from neorisk.config.settings import KM_TO_SCENE_UNITS, MS_PER_DAY
from neorisk.models.ephemeris import EphemerisSample, EphemerisSeries
from neorisk.physics.interpolation import position_at, sample_times_ms, series_to_scene, to_scene
from neorisk.physics.timeconv import jd_to_unix_ms


def _series(points):
    return EphemerisSeries(
        [EphemerisSample(jd, "", pos, (0.0, 0.0, 0.0)) for jd, pos in points],
        name="test",
    )


SERIES = _series([
    (2460000.5, (0.0, 0.0, 0.0)),
    (2460001.5, (100.0, -50.0, 10.0)),
    (2460002.5, (300.0, -50.0, 30.0)),
])
T0 = jd_to_unix_ms(2460000.5)


def test_empty_series_reports_absent():
    assert position_at(EphemerisSeries(), T0) is None


def test_before_and_after_range_return_edge_samples():
    np.testing.assert_array_equal(position_at(SERIES, T0 - 10 * MS_PER_DAY), [0.0, 0.0, 0.0])
    np.testing.assert_array_equal(position_at(SERIES, T0 + 10 * MS_PER_DAY), [300.0, -50.0, 30.0])


def test_exact_sample_times_return_samples():
    for i, sample in enumerate(SERIES):
        np.testing.assert_array_equal(position_at(SERIES, T0 + i * MS_PER_DAY), sample.r)


def test_midpoint_is_linear():
    mid = position_at(SERIES, T0 + 0.5 * MS_PER_DAY)
    np.testing.assert_allclose(mid, [50.0, -25.0, 5.0])

    quarter = position_at(SERIES, T0 + 1.25 * MS_PER_DAY)
    np.testing.assert_allclose(quarter, [150.0, -50.0, 15.0])


def test_single_sample_series():
    one = _series([(2460000.5, (1.0, 2.0, 3.0))])
    np.testing.assert_array_equal(position_at(one, T0), [1.0, 2.0, 3.0])
    np.testing.assert_array_equal(position_at(one, T0 + MS_PER_DAY), [1.0, 2.0, 3.0])


def test_duplicate_timestamps_do_not_divide_by_zero():
    dup = _series([
        (2460000.5, (1.0, 1.0, 1.0)),
        (2460000.5, (2.0, 2.0, 2.0)),
        (2460001.5, (3.0, 3.0, 3.0)),
    ])
    pos = position_at(dup, T0)
    assert np.all(np.isfinite(pos))


def test_sample_times_ms():
    times = sample_times_ms(SERIES)
    assert times.tolist() == [T0, T0 + MS_PER_DAY, T0 + 2 * MS_PER_DAY]


def test_to_scene_swaps_y_and_z_and_scales():
    out = to_scene([1.0, 2.0, 3.0])
    np.testing.assert_allclose(out, np.array([1.0, 3.0, 2.0]) * KM_TO_SCENE_UNITS)

    path = series_to_scene(SERIES)
    assert path.shape == (3, 3)
    np.testing.assert_allclose(path[1], np.array([100.0, 10.0, -50.0]) * KM_TO_SCENE_UNITS)


def test_one_au_is_three_scene_units():
    assert to_scene([149_597_870.7, 0.0, 0.0])[0] == pytest.approx(3.0)
