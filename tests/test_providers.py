import httpx

from resilience_radar.providers.gdelt_provider import GdeltClient, build_query, events_from_payload
from resilience_radar.providers.wb_provider import WorldBankClient, build_url, wb_observations_from_raw
from resilience_radar.utils.cache import RateLimiter, ValueCache
from resilience_radar.utils.series_math import Observation, latest_observation

WB_PAYLOAD = [
    {"page": 1, "pages": 1, "per_page": 60, "total": 3},
    [
        {"date": "2023", "value": None},
        {"date": "2022", "value": 5.47},
        {"date": "2021", "value": "6.1"},
    ],
]


def _wb_client(handler, **kw):
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return WorldBankClient(client=client, cache=ValueCache(), backoff=0, **kw)


def test_wb_observations_from_raw_shapes():
    """Null values survive as None; the error envelope and junk are malformed."""
    out = wb_observations_from_raw(WB_PAYLOAD)
    assert out == [Observation(2023, None), Observation(2022, 5.47), Observation(2021, 6.1)]
    assert latest_observation(out) == Observation(2022, 5.47)

    assert wb_observations_from_raw([{"page": 1, "total": 0}, None]) == []
    assert wb_observations_from_raw([{"message": [{"id": "120", "value": "Invalid value"}]}]) is None
    assert wb_observations_from_raw({"oops": 1}) is None
    assert wb_observations_from_raw([{}, "not-a-list"]) is None


def test_wb_client_fetch_series_and_cache():
    """One HTTP call per URL; the second read comes from the response cache."""
    seen = []

    def handler(request):
        seen.append(str(request.url))
        return httpx.Response(200, json=WB_PAYLOAD)

    wb = _wb_client(handler)
    first = wb.fetch_series("KEN", "SL.UEM.TOTL.ZS")
    second = wb.fetch_series("KEN", "SL.UEM.TOTL.ZS")
    assert first == second
    assert len(seen) == 1
    assert "/country/KEN/indicator/SL.UEM.TOTL.ZS" in seen[0]
    assert "format=json" in seen[0]


def test_wb_client_retries_then_gives_up():
    calls = []

    def handler(request):
        calls.append(1)
        return httpx.Response(503)

    wb = _wb_client(handler, retries=3)
    assert wb.fetch_series("KEN", "GE.EST") is None
    assert len(calls) == 3


def test_wb_client_recovers_on_retry():
    calls = []

    def handler(request):
        calls.append(1)
        if len(calls) == 1:
            raise httpx.ConnectTimeout("slow")
        return httpx.Response(200, json=WB_PAYLOAD)

    wb = _wb_client(handler, retries=2)
    assert latest_observation(wb.fetch_series("KEN", "GE.EST")).value == 5.47


def test_wb_client_rate_limited_returns_none():
    def handler(request):
        return httpx.Response(200, json=WB_PAYLOAD)

    wb = _wb_client(handler, limiter=RateLimiter(max_calls=1, window=60))
    assert wb.fetch_series("KEN", "GE.EST") is not None
    assert wb.fetch_series("KEN", "RL.EST") is None


def test_build_url():
    url = build_url("BRA", "FP.CPI.TOTL.ZG", per_page=10)
    assert url.endswith("/country/BRA/indicator/FP.CPI.TOTL.ZG?format=json&per_page=10")


def test_gdelt_query_wraps_or_groups():
    q = build_query(["protest", "riot", "demonstration"], "South Africa")
    assert q == '(protest OR riot OR demonstration) AND ("South Africa")'
    assert build_query(["protest"], "Kenya") == "protest AND Kenya"


def test_gdelt_payload_parsing():
    data = {"articles": [{"url": "https://x", "title": " Riot ", "seendate": "20250101T000000Z"}, "junk"]}
    records = events_from_payload(data)
    assert len(records) == 1
    assert records[0].title == "Riot"
    assert records[0].source_country is None
    assert events_from_payload({}) == []
    assert events_from_payload("Your query was too short") is None


def test_gdelt_client_counts_and_failures():
    def ok(request):
        assert request.url.params["mode"] == "artlist"
        assert request.url.params["format"] == "json"
        return httpx.Response(200, json={"articles": [{"url": "a"}, {"url": "b"}]})

    g = GdeltClient(client=httpx.Client(transport=httpx.MockTransport(ok)))
    assert len(g.fetch_events("(protest OR riot) AND (Kenya)")) == 2

    def bad(request):
        # GDELT reports query errors as text/html with status 200
        return httpx.Response(200, text="One or more of your keywords were too short")

    g = GdeltClient(client=httpx.Client(transport=httpx.MockTransport(bad)))
    assert g.fetch_events("x") is None
