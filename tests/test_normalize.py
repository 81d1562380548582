import pytest

from resilience_radar.utils.normalize import clamp, normalize


def test_normalize_domain_endpoints():
    """min maps to 0 and max maps to 100."""
    assert normalize(-2.5, -2.5, 2.5) == 0
    assert normalize(2.5, -2.5, 2.5) == 100
    assert normalize(0.0, -2.5, 2.5) == pytest.approx(50.0)


def test_normalize_invert_is_complement():
    """Inverted scores mirror the plain score for every in-range value."""
    for x in (0, 3.5, 10, 17.25, 20):
        assert normalize(x, 0, 20, True) == pytest.approx(100 - normalize(x, 0, 20, False))


def test_normalize_clamps_out_of_range():
    """Values past the domain never leave 0..100."""
    assert normalize(-40, -15, 15) == 0
    assert normalize(99, -15, 15) == 100
    assert normalize(250, 0, 120, True) == 0
    assert normalize(-5, 0, 120, True) == 100
    for x in (-1e9, -1, 0, 1e9):
        for inv in (False, True):
            assert 0 <= normalize(x, 1, 5, inv) <= 100


def test_normalize_degenerate_domain_raises():
    with pytest.raises(ValueError):
        normalize(3, 5, 5)


def test_clamp():
    assert clamp(5, 0, 3) == 3
    assert clamp(-1, 0, 3) == 0
    assert clamp(2, 0, 3) == 2
