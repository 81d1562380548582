# resilience_radar/utils/stats.py
"""
Cross-sectional statistics for indicator populations.

- stats(values)                     -> PopulationStats (population std dev)
- erf(x)                            -> Abramowitz–Stegun 7.1.26 approximation
- z_percentile(value, mean, sd)     -> 0..100 via the normal CDF
- z_normalize(value, mean, sd)      -> NormalizationResult (rounded for display)

Callers drop missing values with valid_values() before calling stats(); an
empty input yields an all-zero record instead of raising.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional
import math

from resilience_radar.utils.normalize import clamp

# Abramowitz & Stegun 7.1.26 (|error| <= 1.5e-7)
_A1 = 0.254829592
_A2 = -0.284496736
_A3 = 1.421413741
_A4 = -1.453152027
_A5 = 1.061405429
_P = 0.3275911


@dataclass(frozen=True)
class PopulationStats:
    mean: float = 0.0
    std_dev: float = 0.0
    median: float = 0.0
    min: float = 0.0
    max: float = 0.0
    p25: float = 0.0
    p75: float = 0.0


@dataclass(frozen=True)
class NormalizationResult:
    raw: float
    z_score: float
    percentile: float
    normalized: float


def valid_values(values: Iterable[Optional[float]], zero_is_missing: bool = True) -> List[float]:
    """Drop None, NaN/inf and (by default) zero sentinels."""
    out: List[float] = []
    for v in values:
        if v is None:
            continue
        try:
            f = float(v)
        except (TypeError, ValueError):
            continue
        if not math.isfinite(f):
            continue
        if zero_is_missing and f == 0.0:
            continue
        out.append(f)
    return out


def stats(values: List[float]) -> PopulationStats:
    n = len(values)
    if n == 0:
        return PopulationStats()

    mean = sum(values) / n
    variance = sum((v - mean) ** 2 for v in values) / n
    ordered = sorted(values)
    if n % 2 == 0:
        median = (ordered[n // 2 - 1] + ordered[n // 2]) / 2
    else:
        median = ordered[n // 2]

    return PopulationStats(
        mean=mean,
        std_dev=math.sqrt(variance),
        median=median,
        min=ordered[0],
        max=ordered[-1],
        p25=ordered[int(math.floor(n * 0.25))],
        p75=ordered[int(math.floor(n * 0.75))],
    )


def erf(x: float) -> float:
    sign = -1.0 if x < 0 else 1.0
    x = abs(x)
    t = 1.0 / (1.0 + _P * x)
    y = 1.0 - ((((_A5 * t + _A4) * t + _A3) * t + _A2) * t + _A1) * t * math.exp(-x * x)
    return sign * y


def _cdf(z: float) -> float:
    return 0.5 * (1.0 + erf(z / math.sqrt(2.0)))


def z_percentile(value: float, mean: float, std_dev: float) -> float:
    # zero variance sits at the median by convention
    if std_dev == 0:
        return 50.0
    z = (value - mean) / std_dev
    return clamp(_cdf(z) * 100.0, 0.0, 100.0)


def z_normalize(value: float, mean: float, std_dev: float) -> NormalizationResult:
    if std_dev == 0:
        return NormalizationResult(raw=value, z_score=0.0, percentile=50.0, normalized=50.0)
    z = (value - mean) / std_dev
    percentile = clamp(_cdf(z), 0.0, 1.0)
    return NormalizationResult(
        raw=value,
        z_score=round(z, 3),
        percentile=round(percentile * 100.0, 2),
        normalized=round(percentile * 100.0, 2),
    )


__all__ = [
    "PopulationStats",
    "NormalizationResult",
    "valid_values",
    "stats",
    "erf",
    "z_percentile",
    "z_normalize",
]
