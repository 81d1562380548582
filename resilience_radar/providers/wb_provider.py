# resilience_radar/providers/wb_provider.py
from __future__ import annotations

from typing import Any, List, Optional
import logging
import os
import time
import httpx

from resilience_radar.utils.cache import RateLimiter, ValueCache
from resilience_radar.utils.series_math import (
    Observation,
    coerce_float,
    coerce_year,
)

logger = logging.getLogger("resilience-radar")

# -------------------------------------------------------------------
# CONFIG
# -------------------------------------------------------------------
WB_BASE = os.getenv("WB_BASE", "https://api.worldbank.org/v2")
WB_TIMEOUT = float(os.getenv("WB_TIMEOUT", "6.0"))
WB_RETRIES = int(os.getenv("WB_RETRIES", "2"))
WB_BACKOFF = float(os.getenv("WB_BACKOFF", "0.6"))
WB_DEBUG = os.getenv("WB_DEBUG", "0") == "1"

# WB returns newest -> oldest; a few decades is plenty for "latest non-null"
WB_PER_PAGE = int(os.getenv("WB_PER_PAGE", "60"))

WB_RATE_LIMIT = int(os.getenv("WB_RATE_LIMIT", "120"))
WB_RATE_WINDOW = float(os.getenv("WB_RATE_WINDOW", "60"))

# Raw response cache, separate from the engine's model-score cache
WB_CACHE_TTL = float(os.getenv("WB_CACHE_TTL", "900"))  # 15 minutes

POPULATION_INDICATOR = "SP.POP.TOTL"


def _timeout() -> httpx.Timeout:
    return httpx.Timeout(
        timeout=WB_TIMEOUT,
        connect=min(2.0, WB_TIMEOUT),
        read=WB_TIMEOUT,
        write=min(2.0, WB_TIMEOUT),
        pool=min(2.0, WB_TIMEOUT),
    )


def build_url(iso3: str, code: str, per_page: int = WB_PER_PAGE) -> str:
    return f"{WB_BASE}/country/{iso3}/indicator/{code}?format=json&per_page={per_page}"


# -------------------------------------------------------------------
# PARSING
# -------------------------------------------------------------------
def wb_observations_from_raw(data: Any) -> Optional[List[Observation]]:
    """
    WB answers [ {metadata}, [ {date: "2023", value: 4.3, ...}, ... ] ].

    Returns None for malformed payloads (including WB's error envelope
    [ {"message": [...]} ]) and [] when the country has no rows.
    """
    if not isinstance(data, list) or not data:
        return None
    if len(data) < 2:
        head = data[0]
        if isinstance(head, dict) and "message" in head:
            return None
        return []

    rows = data[1]
    if rows is None:
        return []
    if not isinstance(rows, list):
        return None

    out: List[Observation] = []
    for entry in rows:
        if not isinstance(entry, dict):
            continue
        out.append(Observation(year=coerce_year(entry.get("date")), value=coerce_float(entry.get("value"))))
    return out


# -------------------------------------------------------------------
# CLIENT
# -------------------------------------------------------------------
class WorldBankClient:
    """
    Statistical series collaborator over the World Bank v2 API.

    Serves WDI indicators and the WGI governance estimates (*.EST), which share
    the same endpoint. Every failure path returns None.
    """

    def __init__(
        self,
        client: Optional[httpx.Client] = None,
        limiter: Optional[RateLimiter] = None,
        cache: Optional[ValueCache] = None,
        retries: int = WB_RETRIES,
        backoff: float = WB_BACKOFF,
    ) -> None:
        self._client = client or httpx.Client(
            timeout=_timeout(),
            headers={"Accept": "application/json"},
            follow_redirects=True,
            limits=httpx.Limits(max_connections=20, max_keepalive_connections=10),
        )
        self._limiter = limiter or RateLimiter(WB_RATE_LIMIT, WB_RATE_WINDOW)
        self._cache = cache if cache is not None else ValueCache(default_ttl=WB_CACHE_TTL)
        self.retries = max(1, retries)
        self.backoff = backoff

    def close(self) -> None:
        self._client.close()

    def _get_json(self, url: str) -> Optional[Any]:
        cached = self._cache.get(url)
        if cached is not None:
            return cached

        if not self._limiter.allow("worldbank"):
            logger.warning("worldbank rate limit reached | url=%s", url)
            return None

        for attempt in range(1, self.retries + 1):
            try:
                r = self._client.get(url)
                r.raise_for_status()
                data = r.json()
                self._cache.set(url, data)
                return data
            except Exception as e:
                if WB_DEBUG:
                    logger.debug("[WB] attempt %d failed %s: %r", attempt, url, e)
                if attempt < self.retries:
                    time.sleep(self.backoff * attempt)
        logger.warning("worldbank fetch failed | url=%s", url)
        return None

    def fetch_series(self, iso3: str, code: str) -> Optional[List[Observation]]:
        data = self._get_json(build_url(iso3, code))
        if data is None:
            return None
        return wb_observations_from_raw(data)


__all__ = [
    "POPULATION_INDICATOR",
    "WorldBankClient",
    "build_url",
    "wb_observations_from_raw",
]
