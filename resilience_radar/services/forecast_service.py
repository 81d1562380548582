# resilience_radar/services/forecast_service.py
from __future__ import annotations

"""
Trend + mean-reversion forecaster shaped like BSTS+DFM output.

This is a deterministic heuristic, not a posterior sampler: an OLS trend over
the history, a damped cyclical term and a structural drift standing in for
dynamic-factor covariates, and symmetric 80%/95% bands from the residual
spread that widen with horizon. The constants (0.5, 0.1, 2.0, the factor
weights) have no econometric derivation and are kept for compatibility with
published scores.

- forecast(values, horizon, ...)          -> [ForecastPoint]  ([] when < 3 points)
- jitter_forecast(points, amplitude, rng) -> [ForecastPoint]  (display only)
- build_forecast_report(values, horizon)  -> dict for the HTTP surface
"""

from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional, Sequence
import math
import os
import random

from resilience_radar.utils.normalize import clamp
from resilience_radar.utils.series_math import linear_fit, residuals
from resilience_radar.utils.stats import stats, valid_values, z_normalize

FORECAST_BASE_YEAR = int(os.getenv("FORECAST_BASE_YEAR", "2024"))

MIN_HISTORY = 3
DEFAULT_FACTOR_WEIGHTS = (0.3, 0.25, 0.25, 0.2)
MEAN_REVERSION = 0.1
Z80 = 1.28
Z95 = 1.96


@dataclass(frozen=True)
class ForecastPoint:
    year: int
    predicted: float
    lower80: float
    upper80: float
    lower95: float
    upper95: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _score(x: float) -> float:
    return round(clamp(x, 0.0, 100.0), 2)


def forecast(
    values: Sequence[float],
    horizon: int,
    mean_reversion_target: Optional[float] = None,
    last_year: int = FORECAST_BASE_YEAR,
    factor_weights: Sequence[float] = DEFAULT_FACTOR_WEIGHTS,
) -> List[ForecastPoint]:
    n = len(values)
    if n < MIN_HISTORY:
        return []

    intercept, slope = linear_fit(values)
    rss = sum(r * r for r in residuals(values, intercept, slope))
    residual_std = math.sqrt(rss / (n - 2))

    cyclical = math.sin(n * 0.5) * 2
    structural = (values[-1] - values[0]) / n
    factor_loading = sum(factor_weights)

    out: List[ForecastPoint] = []
    for h in range(1, horizon + 1):
        trend = intercept + slope * (n + h - 1)
        adjustment = cyclical * math.exp(-h * 0.1) + structural * h * 0.5
        predicted = trend + adjustment * factor_loading

        if mean_reversion_target is not None:
            pull = min(1.0, MEAN_REVERSION * h)
            predicted += pull * (mean_reversion_target - predicted)

        se = residual_std * math.sqrt(1 + h / n)
        out.append(
            ForecastPoint(
                year=last_year + h,
                predicted=_score(predicted),
                lower80=_score(predicted - Z80 * se),
                upper80=_score(predicted + Z80 * se),
                lower95=_score(predicted - Z95 * se),
                upper95=_score(predicted + Z95 * se),
            )
        )
    return out


def jitter_forecast(
    points: Sequence[ForecastPoint],
    amplitude: float = 1.0,
    rng: Optional[random.Random] = None,
) -> List[ForecastPoint]:
    """
    Chart decoration: shift each point (and its bands) by uniform noise in
    [-amplitude/2, amplitude/2]. Never feed the result back into scoring.
    """
    rng = rng or random.Random()
    out: List[ForecastPoint] = []
    for p in points:
        d = (rng.random() - 0.5) * amplitude
        out.append(
            ForecastPoint(
                year=p.year,
                predicted=_score(p.predicted + d),
                lower80=_score(p.lower80 + d),
                upper80=_score(p.upper80 + d),
                lower95=_score(p.lower95 + d),
                upper95=_score(p.upper95 + d),
            )
        )
    return out


def build_forecast_report(
    values: Sequence[float],
    horizon: int = 6,
    last_year: int = FORECAST_BASE_YEAR,
    mean_reversion_target: Optional[float] = None,
) -> Dict[str, Any]:
    # zero is a legitimate score here; only None and NaN/inf are dropped
    values = valid_values(values, zero_is_missing=False)
    first_year = last_year - len(values) + 1
    summary = stats(values)
    normalization = z_normalize(values[-1], summary.mean, summary.std_dev) if values else None

    return {
        "historical": [{"year": first_year + i, "value": v} for i, v in enumerate(values)],
        "forecasts": [
            p.to_dict() for p in forecast(values, horizon, mean_reversion_target, last_year=last_year)
        ],
        "normalization": asdict(normalization) if normalization else None,
        "modelInfo": {
            "name": "BSTS + DFM",
            "description": "Trend + mean-reversion heuristic with BSTS/DFM-shaped uncertainty bands",
            "confidenceLevels": ["80%", "95%"],
        },
        "statistics": {
            "mean": round(summary.mean, 2),
            "stdDev": round(summary.std_dev, 2),
            "min": summary.min,
            "max": summary.max,
        },
    }
