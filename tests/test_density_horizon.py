import numpy as np
import pytest

from vizengine.charting.layouts import (
    epanechnikov,
    estimate_density,
    evaluation_grid,
    horizon,
    kde,
    quartiles,
    silverman_bandwidth,
)
from vizengine.errors import ConfigurationError

SAMPLES = [1.0, 2.0, 2.5, 3.0, 4.0, 7.0]


def _trapezoid(xs, ys):
    return sum((xs[i + 1] - xs[i]) * (ys[i] + ys[i + 1]) / 2 for i in range(len(xs) - 1))


def test_kernel_support():
    assert epanechnikov(np.array([0.0]))[0] == pytest.approx(0.75)
    assert list(epanechnikov(np.array([-1.0, 1.0, 1.5, -2.0]))) == [0.0, 0.0, 0.0, 0.0]


@pytest.mark.parametrize("grid_size", [100, 250])
@pytest.mark.parametrize("bandwidth", [0.5, 1.0, 3.0])
def test_density_integrates_to_one(grid_size, bandwidth):
    grid = evaluation_grid(SAMPLES, bandwidth, grid_size)
    dens = kde(SAMPLES, grid, bandwidth)
    assert _trapezoid(list(grid), list(dens)) == pytest.approx(1.0, abs=0.02)
    assert grid[0] == pytest.approx(1.0 - bandwidth)
    assert grid[-1] == pytest.approx(7.0 + bandwidth)


def test_density_is_zero_outside_support():
    dens = kde([0.0], [-2.0, 0.0, 2.0], 1.0)
    assert list(dens) == pytest.approx([0.0, 0.75, 0.0])


def test_non_positive_bandwidth_rejected():
    with pytest.raises(ConfigurationError):
        kde(SAMPLES, [0.0], 0.0)
    with pytest.raises(ConfigurationError):
        evaluation_grid(SAMPLES, -1.0, 10)
    with pytest.raises(ConfigurationError):
        evaluation_grid(SAMPLES, 1.0, 1)


def test_silverman_bandwidth():
    assert silverman_bandwidth([5.0]) == 1.0
    assert silverman_bandwidth([3.0, 3.0, 3.0]) == 1.0
    assert silverman_bandwidth(SAMPLES) > 0


def test_quartiles():
    assert quartiles([1, 2, 3, 4, 5]) == (2.0, 3.0, 4.0)
    assert quartiles([]) == (0.0, 0.0, 0.0)


def test_estimate_density_flags_degenerate_groups():
    empty = estimate_density([], grid_size=20)
    assert empty.degenerate and empty.peak == 0.0
    flat = estimate_density([4.0, 4.0, 4.0], grid_size=20)
    assert flat.degenerate
    normal = estimate_density(SAMPLES, bandwidth=1.0, grid_size=60)
    assert not normal.degenerate
    assert len(normal.grid) == len(normal.density) == 60
    assert normal.bandwidth == 1.0


def test_nan_samples_ignored():
    est = estimate_density([1.0, float("nan"), 3.0], bandwidth=1.0, grid_size=10)
    assert est.grid[0] == pytest.approx(0.0)
    assert est.grid[-1] == pytest.approx(4.0)


def test_horizon_reconstructs_clamped_values():
    values = [-12.0, -3.0, 0.0, 2.5, 7.0, 10.0, 25.0]
    layout = horizon(values, 4, max_abs=10.0)
    assert layout.band_width == 2.5
    expected = [max(-10.0, min(10.0, v)) for v in values]
    assert list(layout.reconstruct()) == pytest.approx(expected)
    for band in layout.bands:
        assert all(abs(v) <= layout.band_width + 1e-12 for v in band)


def test_horizon_band_split():
    layout = horizon([6.0, -6.0], 3, max_abs=9.0)
    assert layout.bands == ((3.0, -3.0), (3.0, -3.0), (0.0, -0.0))
    assert layout.positive(0) == (3.0, 0.0)
    assert layout.negative(1) == (0.0, 3.0)


def test_horizon_defaults_and_flat_series():
    assert horizon([1.0, -4.0], 2).max_abs == 4.0
    flat = horizon([0.0, 0.0], 3)
    assert flat.band_width == 0.0
    assert flat.reconstruct() == (0.0, 0.0)


def test_horizon_rejects_bad_band_count():
    with pytest.raises(ConfigurationError):
        horizon([1.0], 0)
    with pytest.raises(ConfigurationError):
        horizon([1.0], 2, max_abs=-1.0)
