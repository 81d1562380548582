# resilience_radar/utils/series_math.py
from __future__ import annotations

from typing import Iterable, List, NamedTuple, Optional, Sequence, Tuple
from math import isfinite


class Observation(NamedTuple):
    year: Optional[int]
    value: Optional[float]


def coerce_float(x: object) -> Optional[float]:
    if x is None or isinstance(x, bool):
        return None
    try:
        v = float(x)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None
    return v if isfinite(v) else None


def coerce_year(x: object) -> Optional[int]:
    # WB dates are "YYYY" for annual series, "YYYYQn"/"YYYYMmm" otherwise
    try:
        return int(str(x)[:4])
    except (TypeError, ValueError):
        return None


def latest_observation(observations: Iterable[Observation]) -> Optional[Observation]:
    """Most recent dated point with a value; undated points are ignored."""
    best: Optional[Observation] = None
    for obs in observations:
        if obs.value is None or obs.year is None or not isfinite(obs.value):
            continue
        if best is None or obs.year > best.year:  # type: ignore[operator]
            best = obs
    return best


def linear_fit(values: Sequence[float]) -> Tuple[float, float]:
    """OLS fit of values against index 0..n-1. Returns (intercept, slope)."""
    n = len(values)
    if n < 2:
        raise ValueError("need at least two points")
    x_mean = (n - 1) / 2
    y_mean = sum(values) / n
    num = 0.0
    den = 0.0
    for i, y in enumerate(values):
        num += (i - x_mean) * (y - y_mean)
        den += (i - x_mean) * (i - x_mean)
    slope = num / den
    return y_mean - slope * x_mean, slope


def residuals(values: Sequence[float], intercept: float, slope: float) -> List[float]:
    return [y - (intercept + slope * i) for i, y in enumerate(values)]
