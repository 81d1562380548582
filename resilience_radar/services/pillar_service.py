# resilience_radar/services/pillar_service.py: weighted pillar scores with coverage tracking
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Sequence
import concurrent.futures as _futures
import logging
import os
import time as _time

from resilience_radar.services.indicator_matrix import PILLARS, IndicatorDescriptor
from resilience_radar.services.indicator_service import ABSENT, IndicatorResolver, IndicatorValue
from resilience_radar.utils.normalize import normalize

logger = logging.getLogger("resilience-radar")

# "a few seconds" per external fetch before the indicator counts as missing
RESOLVE_TIMEOUT = float(os.getenv("RESOLVE_TIMEOUT", "4.0"))
# a pillar needs at most two resolve windows (population, then per-capita)
PILLAR_TIMEOUT = float(os.getenv("PILLAR_TIMEOUT", str(3 * RESOLVE_TIMEOUT)))
MAX_WORKERS = int(os.getenv("MAX_WORKERS", "8"))

DATA_SOURCE = "worldbank+wgi+gdelt"


@dataclass(frozen=True)
class ResolvedIndicator:
    value: Optional[float] = None
    year: Optional[int] = None
    normalized: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"value": self.value}
        if self.year is not None:
            out["year"] = self.year
        if self.normalized is not None:
            out["normalized"] = self.normalized
        return out


@dataclass(frozen=True)
class PillarScore:
    score: float = 0.0
    coverage: float = 0.0
    indicators: Dict[str, ResolvedIndicator] = field(default_factory=dict)

    @property
    def missing(self) -> Sequence[str]:
        return [k for k, v in self.indicators.items() if v.value is None]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": self.score,
            "coverage": self.coverage,
            "indicators": {k: v.to_dict() for k, v in self.indicators.items()},
        }


@dataclass(frozen=True)
class ModelScore:
    country: str
    code: str
    overall: float
    social: PillarScore
    economic: PillarScore
    institutional: PillarScore
    infrastructure: PillarScore
    timestamp: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "country": self.country,
            "code": self.code,
            "overall": self.overall,
            "social": self.social.to_dict(),
            "economic": self.economic.to_dict(),
            "institutional": self.institutional.to_dict(),
            "infrastructure": self.infrastructure.to_dict(),
            "timestamp": self.timestamp,
            "dataSource": DATA_SOURCE,
        }


def score_pillar(
    descriptors: Sequence[IndicatorDescriptor],
    values: Dict[str, IndicatorValue],
) -> PillarScore:
    """
    Combine already-resolved values into a pillar score.

    Missing indicators (None, NaN or inf) add nothing to either accumulator
    but stay listed with value None, so the score is the weighted mean over
    what resolved and coverage is the resolved share of configured weight.
    """
    weighted_sum = 0.0
    total_weight = 0.0
    configured_weight = 0.0
    indicators: Dict[str, ResolvedIndicator] = {}

    for d in descriptors:
        configured_weight += d.weight
        raw = values.get(d.id, ABSENT)
        if not raw.available:
            indicators[d.id] = ResolvedIndicator(value=None, year=raw.year)
            continue
        normalized = normalize(raw.value, d.min, d.max, d.invert)
        weighted_sum += d.weight * normalized
        total_weight += d.weight
        indicators[d.id] = ResolvedIndicator(value=raw.value, year=raw.year, normalized=normalized)

    score = weighted_sum / total_weight if total_weight > 0 else 0.0
    coverage = total_weight / configured_weight if configured_weight > 0 else 0.0
    return PillarScore(score=score, coverage=coverage, indicators=indicators)


class PillarAggregator:
    def __init__(
        self,
        resolver: IndicatorResolver,
        resolve_timeout: float = RESOLVE_TIMEOUT,
        max_workers: int = MAX_WORKERS,
    ) -> None:
        self.resolver = resolver
        self.resolve_timeout = resolve_timeout
        self.max_workers = max_workers

    def aggregate(
        self,
        country_code: str,
        country_name: str,
        descriptors: Sequence[IndicatorDescriptor],
    ) -> PillarScore:
        """
        Resolve every descriptor in parallel and score the pillar.

        All first-wave futures (population included) share one deadline of
        resolve_timeout; per-capita resolves start once population is known
        and get one further window. A pillar therefore finishes within
        2 * resolve_timeout no matter how many fetches hang.
        """
        started = _time.monotonic()
        needs_population = any(d.per_capita for d in descriptors)

        ex = _futures.ThreadPoolExecutor(max_workers=max(1, min(self.max_workers, len(descriptors) + 1)))
        try:
            first_deadline = started + self.resolve_timeout
            pop_future = ex.submit(self.resolver.population, country_code) if needs_population else None
            futures = {
                d.id: ex.submit(self.resolver.resolve, country_code, country_name, d)
                for d in descriptors
                if not d.per_capita
            }
            deadlines = {d_id: first_deadline for d_id in futures}

            population: Optional[float] = None
            if pop_future is not None:
                population = self._join(pop_future, "population", country_code, first_deadline)
            second_deadline = _time.monotonic() + self.resolve_timeout
            for d in descriptors:
                if d.per_capita:
                    futures[d.id] = ex.submit(self.resolver.resolve, country_code, country_name, d, population)
                    deadlines[d.id] = second_deadline

            values: Dict[str, IndicatorValue] = {}
            for d in descriptors:
                values[d.id] = self._join(futures[d.id], d.id, country_code, deadlines[d.id]) or ABSENT
        finally:
            # a hung fetch must not hold the pillar
            ex.shutdown(wait=False, cancel_futures=True)

        pillar = score_pillar(descriptors, values)
        logger.info(
            "pillar done | country=%s | score=%.2f | coverage=%.2f | elapsed=%.2fs",
            country_code, pillar.score, pillar.coverage, _time.monotonic() - started,
        )
        return pillar

    def _join(self, fut: _futures.Future, what: str, country_code: str, deadline: float) -> Any:
        try:
            return fut.result(timeout=max(0.0, deadline - _time.monotonic()))
        except _futures.TimeoutError:
            logger.warning("resolve timed out | country=%s | indicator=%s", country_code, what)
        except Exception as e:
            logger.warning("resolve failed | country=%s | indicator=%s | %r", country_code, what, e)
        fut.cancel()
        return None


def build_model_score(
    aggregator: PillarAggregator,
    country_code: str,
    country_name: str,
    pillar_timeout: float = PILLAR_TIMEOUT,
) -> ModelScore:
    """Score all four pillars in parallel; overall is their unweighted mean."""
    ex = _futures.ThreadPoolExecutor(max_workers=len(PILLARS))
    deadline = _time.monotonic() + pillar_timeout
    try:
        futures = {
            name: ex.submit(aggregator.aggregate, country_code, country_name, descriptors)
            for name, descriptors in PILLARS.items()
        }
        pillars: Dict[str, PillarScore] = {}
        for name, fut in futures.items():
            try:
                pillars[name] = fut.result(timeout=max(0.0, deadline - _time.monotonic()))
            except Exception as e:
                logger.warning("pillar failed | country=%s | pillar=%s | %r", country_code, name, e)
                pillars[name] = score_pillar(PILLARS[name], {})
    finally:
        ex.shutdown(wait=False, cancel_futures=True)

    overall = sum(p.score for p in pillars.values()) / len(pillars)
    return ModelScore(
        country=country_name,
        code=country_code,
        overall=overall,
        timestamp=datetime.now(timezone.utc).isoformat(),
        **pillars,
    )
