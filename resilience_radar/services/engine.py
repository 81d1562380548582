# resilience_radar/services/engine.py: the two cached entry points
from __future__ import annotations

from typing import Any, Dict, Optional, Sequence
import logging
import os

from resilience_radar.services.forecast_service import FORECAST_BASE_YEAR, build_forecast_report
from resilience_radar.services.indicator_service import IndicatorResolver
from resilience_radar.services.pillar_service import PillarAggregator, build_model_score
from resilience_radar.utils.cache import ValueCache
from resilience_radar.utils.country_codes import get_country

logger = logging.getLogger("resilience-radar")

MODEL_SCORE_TTL = float(os.getenv("MODEL_SCORE_TTL", str(6 * 60 * 60)))
FORECAST_TTL = float(os.getenv("FORECAST_TTL", str(60 * 60)))


class ResilienceEngine:
    """
    Built once at process start (see main.create_app) and handed to the routes.
    Tests build their own with fake collaborators and a private cache.
    """

    def __init__(self, resolver: IndicatorResolver, cache: Optional[ValueCache] = None) -> None:
        self.resolver = resolver
        self.aggregator = PillarAggregator(resolver)
        self.cache = cache if cache is not None else ValueCache()

    def model_score(self, country_code: str, fresh: bool = False) -> Optional[Dict[str, Any]]:
        """Model score payload for an ISO3 code, or None when the code is unknown."""
        code = (country_code or "").strip().upper()
        key = f"model-score-{code}"
        if not fresh:
            cached = self.cache.get(key)
            if cached is not None:
                logger.info("model_score cache hit | country=%s", code)
                return cached

        country = get_country(code)
        if not country:
            return None
        iso3 = country["iso_alpha_3"]

        payload = build_model_score(self.aggregator, iso3, country["name"]).to_dict()
        self.cache.set(key, payload, MODEL_SCORE_TTL)
        return payload

    def forecast(
        self,
        values: Sequence[float],
        horizon: int = 6,
        last_year: int = FORECAST_BASE_YEAR,
        mean_reversion_target: Optional[float] = None,
    ) -> Dict[str, Any]:
        key = "forecast-{}-{}-{}-{}".format(
            horizon, last_year, mean_reversion_target, ",".join(repr(float(v)) for v in values)
        )
        return self.cache.get_or_set(
            key,
            lambda: build_forecast_report(values, horizon, last_year, mean_reversion_target),
            FORECAST_TTL,
        )
