import math

import pytest

from resilience_radar.utils.stats import (
    PopulationStats,
    erf,
    stats,
    valid_values,
    z_normalize,
    z_percentile,
)


def test_stats_population_std_dev():
    """Std dev divides by n, not n-1."""
    s = stats([2, 4, 4, 4, 5, 5, 7, 9])
    assert s.mean == 5
    assert s.std_dev == 2
    assert s.min == 2
    assert s.max == 9


def test_stats_median_even_and_odd():
    assert stats([3, 1, 2]).median == 2
    assert stats([4, 1, 3, 2]).median == 2.5


def test_stats_quartiles_use_floor_index():
    """p25/p75 are sorted[floor(n*0.25)] and sorted[floor(n*0.75)]."""
    s = stats([10, 20, 30, 40, 50, 60, 70, 80, 90, 100])
    assert s.p25 == 30   # index 2
    assert s.p75 == 80   # index 7
    single = stats([42])
    assert single.p25 == single.p75 == single.median == 42


def test_stats_empty_is_all_zero():
    assert stats([]) == PopulationStats()
    assert stats([]).std_dev == 0


def test_valid_values_filters_sentinels():
    raw = [1.0, None, float("nan"), 0, float("inf"), "2.5", "x", 3]
    assert valid_values(raw) == [1.0, 2.5, 3.0]
    assert valid_values([0, 1], zero_is_missing=False) == [0.0, 1.0]


def test_erf_matches_reference_values():
    """Abramowitz–Stegun approximation stays within 1.5e-7 of math.erf."""
    for x in (-3, -1.2, -0.5, 0.1, 0.5, 1, 2, 3.5):
        assert erf(x) == pytest.approx(math.erf(x), abs=2e-7)
    assert erf(-0.7) == pytest.approx(-erf(0.7))


def test_z_percentile_at_mean_is_fifty():
    for sd in (0.1, 1, 12.5):
        assert round(z_percentile(50, 50, sd), 6) == 50.0


def test_z_percentile_zero_std_dev_is_fifty():
    for v in (-10, 0, 99):
        assert z_percentile(v, 3, 0) == 50


def test_z_percentile_known_points_and_bounds():
    """One sigma above the mean is ~84.13; extreme values stay in 0..100."""
    assert round(z_percentile(1, 0, 1), 2) == 84.13
    assert round(z_percentile(-1, 0, 1), 2) == 15.87
    assert round(z_percentile(1.96, 0, 1), 1) == 97.5
    assert 0 <= z_percentile(-1e6, 0, 1) <= 100
    assert 0 <= z_percentile(1e6, 0, 1) <= 100


def test_z_normalize_rounding():
    r = z_normalize(58, 50, 8)
    assert r.raw == 58
    assert r.z_score == 1.0
    assert r.percentile == 84.13
    assert r.normalized == r.percentile


def test_z_normalize_zero_std_dev():
    r = z_normalize(7, 7, 0)
    assert (r.z_score, r.percentile, r.normalized) == (0.0, 50.0, 50.0)
