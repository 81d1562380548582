# resilience_radar/services/indicator_service.py: indicator resolution over WB / WGI / GDELT
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional
import logging
import math

from resilience_radar.services.indicator_matrix import (
    PROTEST_KEYWORDS,
    IndicatorDescriptor,
    SourceKind,
)
from resilience_radar.providers.gdelt_provider import build_query
from resilience_radar.providers.wb_provider import POPULATION_INDICATOR
from resilience_radar.utils.series_math import latest_observation

logger = logging.getLogger("resilience-radar")

PER_CAPITA_SCALE = 1_000_000


@dataclass(frozen=True)
class IndicatorValue:
    value: Optional[float] = None
    year: Optional[int] = None

    @property
    def available(self) -> bool:
        return self.value is not None and math.isfinite(self.value)


ABSENT = IndicatorValue()


class IndicatorResolver:
    """
    Resolve one (country, descriptor) pair to its latest value.

    `series` must offer fetch_series(iso3, code) -> list[Observation] | None and
    `events` fetch_events(query) -> list | None (see providers/). Any failure,
    including an exception raised by a collaborator, resolves to ABSENT.
    """

    def __init__(self, series: Any, events: Any) -> None:
        self.series = series
        self.events = events

    def population(self, iso3: str) -> Optional[float]:
        try:
            obs = latest_observation(self.series.fetch_series(iso3, POPULATION_INDICATOR) or [])
        except Exception as e:
            logger.warning("population lookup failed | country=%s | %r", iso3, e)
            return None
        if obs is None or obs.value is None or obs.value <= 0:
            return None
        return obs.value

    def resolve(
        self,
        country_code: str,
        country_name: str,
        descriptor: IndicatorDescriptor,
        population: Optional[float] = None,
    ) -> IndicatorValue:
        try:
            if descriptor.source in (SourceKind.STATISTICAL, SourceKind.GOVERNANCE):
                return self._latest_series_value(country_code, descriptor)
            if descriptor.source == SourceKind.EVENT_COUNT:
                return self._event_count(country_name, descriptor, population)
        except Exception as e:
            logger.warning(
                "indicator resolve failed | country=%s | indicator=%s | %r",
                country_code, descriptor.id, e,
            )
            return ABSENT
        return ABSENT

    def _latest_series_value(self, country_code: str, descriptor: IndicatorDescriptor) -> IndicatorValue:
        observations = self.series.fetch_series(country_code, descriptor.code)
        if not observations:
            return ABSENT
        obs = latest_observation(observations)
        if obs is None:
            return ABSENT
        return IndicatorValue(value=obs.value, year=obs.year)

    def _event_count(
        self,
        country_name: str,
        descriptor: IndicatorDescriptor,
        population: Optional[float],
    ) -> IndicatorValue:
        keywords = list(descriptor.keywords or PROTEST_KEYWORDS)
        records = self.events.fetch_events(build_query(keywords, country_name))
        if records is None:
            return ABSENT
        count = float(len(records))
        # unscaled when population is unknown
        if descriptor.per_capita and population:
            count = count * PER_CAPITA_SCALE / population
        return IndicatorValue(value=count)
