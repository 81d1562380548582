# resilience_radar/providers/gdelt_provider.py
from __future__ import annotations

"""
Event search collaborator backed by the GDELT DOC 2.0 article list.

No API key. OR groups must be wrapped in parentheses or GDELT rejects the
query with a plain-text error body (HTTP 200), which we treat as a failure.
"""

from typing import Any, Dict, List, NamedTuple, Optional
import logging
import os
import httpx

from resilience_radar.utils.cache import RateLimiter

logger = logging.getLogger("resilience-radar")

GDELT_BASE = os.getenv("GDELT_BASE", "https://api.gdeltproject.org/api/v2/doc/doc")
GDELT_TIMEOUT = float(os.getenv("GDELT_TIMEOUT", "10.0"))
GDELT_MAX_RECORDS = int(os.getenv("GDELT_MAX_RECORDS", "75"))
GDELT_TIMESPAN = os.getenv("GDELT_TIMESPAN", "3months")
GDELT_DEBUG = os.getenv("GDELT_DEBUG", "0") == "1"

# GDELT asks for no more than one request every few seconds
GDELT_RATE_LIMIT = int(os.getenv("GDELT_RATE_LIMIT", "20"))
GDELT_RATE_WINDOW = float(os.getenv("GDELT_RATE_WINDOW", "60"))


class EventRecord(NamedTuple):
    url: Optional[str]
    title: Optional[str]
    seen_date: Optional[str]
    source_country: Optional[str]


def _str_or_none(x: Any) -> Optional[str]:
    if x is None:
        return None
    s = str(x).strip()
    return s or None


def events_from_payload(data: Any) -> Optional[List[EventRecord]]:
    """{"articles": [...]} -> records; {} (no matches) -> []; anything else -> None."""
    if not isinstance(data, dict):
        return None
    articles = data.get("articles")
    if articles is None:
        return []
    if not isinstance(articles, list):
        return None
    out: List[EventRecord] = []
    for a in articles:
        if not isinstance(a, dict):
            continue
        out.append(
            EventRecord(
                url=_str_or_none(a.get("url")),
                title=_str_or_none(a.get("title")),
                seen_date=_str_or_none(a.get("seendate")),
                source_country=_str_or_none(a.get("sourcecountry")),
            )
        )
    return out


def build_query(keywords: List[str], country_name: str) -> str:
    terms = " OR ".join(keywords)
    name = f'"{country_name}"' if " " in country_name else country_name
    return f"({terms}) AND ({name})" if len(keywords) > 1 else f"{terms} AND {name}"


class GdeltClient:
    def __init__(
        self,
        client: Optional[httpx.Client] = None,
        limiter: Optional[RateLimiter] = None,
        max_records: int = GDELT_MAX_RECORDS,
        timespan: str = GDELT_TIMESPAN,
    ) -> None:
        self._client = client or httpx.Client(
            timeout=GDELT_TIMEOUT,
            headers={"Accept": "application/json", "User-Agent": "ResilienceRadar/1.0"},
            follow_redirects=True,
        )
        self._limiter = limiter or RateLimiter(GDELT_RATE_LIMIT, GDELT_RATE_WINDOW)
        self.max_records = max_records
        self.timespan = timespan

    def close(self) -> None:
        self._client.close()

    def _params(self, query: str) -> Dict[str, str]:
        return {
            "query": query,
            "mode": "artlist",
            "maxrecords": str(self.max_records),
            "format": "json",
            "sort": "datedesc",
            "timespan": self.timespan,
        }

    def fetch_events(self, query: str) -> Optional[List[EventRecord]]:
        if not self._limiter.allow("gdelt"):
            logger.warning("gdelt rate limit reached | query=%s", query)
            return None
        try:
            r = self._client.get(GDELT_BASE, params=self._params(query))
            r.raise_for_status()
            data = r.json()
        except Exception as e:
            if GDELT_DEBUG:
                logger.debug("[GDELT] %s failed: %r", query, e)
            logger.warning("gdelt fetch failed | query=%s", query)
            return None
        return events_from_payload(data)


__all__ = ["EventRecord", "GdeltClient", "build_query", "events_from_payload"]
