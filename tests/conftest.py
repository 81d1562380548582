from typing import Dict, List, Optional, Tuple
import threading

import pytest

from resilience_radar.services.indicator_service import IndicatorResolver
from resilience_radar.utils.cache import ValueCache
from resilience_radar.utils.series_math import Observation


class FakeSeries:
    """Stands in for WorldBankClient: {(iso3, code): [Observation] | None}."""

    def __init__(self, data: Optional[Dict[Tuple[str, str], Optional[List[Observation]]]] = None,
                 raise_for: Tuple[str, ...] = (), block_for: Tuple[str, ...] = ()):
        self.data = data or {}
        self.raise_for = set(raise_for)
        self.block_for = set(block_for)
        self.calls: List[Tuple[str, str]] = []
        self.release = threading.Event()
        self._lock = threading.Lock()

    def fetch_series(self, iso3, code):
        with self._lock:
            self.calls.append((iso3, code))
        if code in self.raise_for:
            raise RuntimeError(f"boom {code}")
        if code in self.block_for:
            self.release.wait(5)
            return None
        return self.data.get((iso3, code))


class FakeEvents:
    def __init__(self, count: Optional[int] = 0, raises: bool = False):
        self.count = count
        self.raises = raises
        self.queries: List[str] = []

    def fetch_events(self, query):
        self.queries.append(query)
        if self.raises:
            raise RuntimeError("gdelt down")
        if self.count is None:
            return None
        return [object()] * self.count


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def obs(year, value):
    return Observation(year=year, value=value)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return ValueCache(default_ttl=60.0, clock=clock)


@pytest.fixture
def make_resolver():
    def _make(data=None, events=None, **kw):
        return IndicatorResolver(series=FakeSeries(data, **kw), events=events or FakeEvents(0))
    return _make
