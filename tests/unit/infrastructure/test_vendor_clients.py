# tests/unit/infrastructure/test_vendor_clients.py
from __future__ import annotations

import httpx
import pytest
import respx

from screener_api.domain.exceptions.fundamentals import (
    MalformedUpstreamData,
    UpstreamUnavailable,
)
from screener_api.infrastructure.external_apis.alphavantage.client import AlphaVantageClient
from screener_api.infrastructure.external_apis.alphavantage.settings import (
    AlphaVantageSettings,
)
from screener_api.infrastructure.external_apis.insightsentry.client import InsightSentryClient
from screener_api.infrastructure.external_apis.insightsentry.settings import (
    InsightSentrySettings,
)
from screener_api.infrastructure.external_apis.roic.client import RoicClient
from screener_api.infrastructure.external_apis.roic.settings import RoicSettings
from screener_api.infrastructure.external_apis.transport import RetryableUpstreamError
from screener_api.infrastructure.logging.logger import set_request_context
from screener_api.infrastructure.resilience.retry import RetryPolicy

NO_WAIT = RetryPolicy(total=1, base=0.0, cap=0.0, jitter=False)
BASE = "https://insightsentry.p.rapidapi.com"


@pytest.fixture(autouse=True)
def _no_vendor_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "RAPIDAPI_KEY",
        "INSIGHTSENTRY_API_KEY",
        "ROIC_API_KEY",
        "ALPHA_VANTAGE_KEY",
        "ALPHA_VANTAGE_API_KEY",
    ):
        monkeypatch.delenv(name, raising=False)


def _settings() -> InsightSentrySettings:
    return InsightSentrySettings(RAPIDAPI_KEY="secret")  # type: ignore[call-arg]


def test_settings_report_configuration() -> None:
    assert _settings().configured
    assert not InsightSentrySettings().configured
    assert RoicSettings(api_key="k").configured  # type: ignore[arg-type]
    assert not AlphaVantageSettings().configured


@pytest.mark.asyncio
@respx.mock
async def test_fundamentals_sends_rapidapi_headers_and_request_id() -> None:
    set_request_context(request_id="req-123")
    async with httpx.AsyncClient() as http:
        client = InsightSentryClient(_settings(), http=http, retry_policy=NO_WAIT)
        route = respx.get(f"{BASE}/v3/symbols/NSE:TCS/fundamentals").mock(
            return_value=httpx.Response(200, json={"data": [{"id": "close", "value": 1}]})
        )

        payload = await client.fundamentals("NSE:TCS")
        assert http.headers["Accept"] == "*/*"

    assert payload == {"data": [{"id": "close", "value": 1}]}
    request = route.calls.last.request
    assert request.headers["X-RapidAPI-Key"] == "secret"
    assert request.headers["X-RapidAPI-Host"] == "insightsentry.p.rapidapi.com"
    assert request.headers["X-Request-ID"] == "req-123"
    assert request.headers["Accept"] == "application/json"
    assert request.headers["User-Agent"].startswith("screener-api/")
    set_request_context(request_id=None)


@pytest.mark.asyncio
@respx.mock
async def test_history_builds_params() -> None:
    async with httpx.AsyncClient() as http:
        client = InsightSentryClient(_settings(), http=http, retry_policy=NO_WAIT)
        route = respx.get(f"{BASE}/v2/symbols/NSE:TCS/history").mock(
            return_value=httpx.Response(200, json={"series": []})
        )
        await client.history("NSE:TCS", bar_type="week", start=100, end=200)

    params = route.calls.last.request.url.params
    assert params["bar_type"] == "week"
    assert params["bar_interval"] == "1"
    assert params["from"] == "100"
    assert params["to"] == "200"
    assert params["badj"] == "true"


@pytest.mark.asyncio
@respx.mock
async def test_fundamentals_series_joins_ids() -> None:
    async with httpx.AsyncClient() as http:
        client = InsightSentryClient(_settings(), http=http, retry_policy=NO_WAIT)
        route = respx.get(f"{BASE}/v3/symbols/NSE:TCS/fundamentals/series").mock(
            return_value=httpx.Response(200, json={"data": []})
        )
        await client.fundamentals_series("NSE:TCS", ["a", "b"])

    assert route.calls.last.request.url.params["ids"] == "a,b"


@pytest.mark.asyncio
@respx.mock
async def test_server_errors_are_retried_then_succeed() -> None:
    async with httpx.AsyncClient() as http:
        client = InsightSentryClient(_settings(), http=http, retry_policy=NO_WAIT)
        route = respx.get(f"{BASE}/v3/symbols/NSE:TCS/fundamentals").mock(
            side_effect=[
                httpx.Response(503, json={}),
                httpx.Response(200, json={"data": []}),
            ]
        )
        payload = await client.fundamentals("NSE:TCS")

    assert payload == {"data": []}
    assert route.call_count == 2


@pytest.mark.asyncio
@respx.mock
async def test_rate_limit_exhausts_retries() -> None:
    async with httpx.AsyncClient() as http:
        client = InsightSentryClient(_settings(), http=http, retry_policy=NO_WAIT)
        route = respx.get(f"{BASE}/v3/symbols/NSE:TCS/fundamentals").mock(
            return_value=httpx.Response(429, json={})
        )
        with pytest.raises(RetryableUpstreamError) as ei:
            await client.fundamentals("NSE:TCS")

    assert ei.value.details["status"] == 429
    assert route.call_count == 2


@pytest.mark.asyncio
@respx.mock
async def test_client_errors_are_not_retried() -> None:
    async with httpx.AsyncClient() as http:
        client = InsightSentryClient(_settings(), http=http, retry_policy=NO_WAIT)
        route = respx.get(f"{BASE}/v3/symbols/NSE:TCS/fundamentals").mock(
            return_value=httpx.Response(403, json={"message": "forbidden"})
        )
        with pytest.raises(UpstreamUnavailable) as ei:
            await client.fundamentals("NSE:TCS")

    assert not isinstance(ei.value, RetryableUpstreamError)
    assert ei.value.details == {"endpoint": "fundamentals", "status": 403}
    assert route.call_count == 1


@pytest.mark.asyncio
@respx.mock
async def test_network_errors_map_to_upstream_unavailable() -> None:
    async with httpx.AsyncClient() as http:
        client = InsightSentryClient(_settings(), http=http, retry_policy=NO_WAIT)
        respx.get(f"{BASE}/v3/symbols/NSE:TCS/fundamentals").mock(
            side_effect=httpx.ConnectError("refused")
        )
        with pytest.raises(UpstreamUnavailable):
            await client.fundamentals("NSE:TCS")


@pytest.mark.asyncio
@respx.mock
async def test_non_json_and_non_object_bodies_are_malformed() -> None:
    async with httpx.AsyncClient() as http:
        client = InsightSentryClient(_settings(), http=http, retry_policy=NO_WAIT)
        respx.get(f"{BASE}/v3/symbols/NSE:TCS/fundamentals").mock(
            return_value=httpx.Response(200, text="<html>")
        )
        with pytest.raises(MalformedUpstreamData):
            await client.fundamentals("NSE:TCS")

        respx.get(f"{BASE}/v3/symbols/NSE:INFY/fundamentals").mock(
            return_value=httpx.Response(200, json=[1, 2])
        )
        with pytest.raises(MalformedUpstreamData):
            await client.fundamentals("NSE:INFY")


@pytest.mark.asyncio
@respx.mock
async def test_roic_balance_sheet_uses_listing_suffix() -> None:
    cfg = RoicSettings(api_key="k")  # type: ignore[arg-type]
    async with httpx.AsyncClient() as http:
        client = RoicClient(cfg, http=http, retry_policy=NO_WAIT)
        route = respx.get(f"{cfg.base_url}/fundamental/balance-sheet/TCS.NS").mock(
            return_value=httpx.Response(200, json=[{"fiscal_year": 2025, "bs_tot_asset": 1}])
        )
        records = await client.balance_sheet("tcs")

    assert records == [{"fiscal_year": 2025, "bs_tot_asset": 1}]
    assert route.calls.last.request.url.params["apikey"] == "k"


@pytest.mark.asyncio
@respx.mock
async def test_roic_rejects_non_list_payloads() -> None:
    cfg = RoicSettings(api_key="k")  # type: ignore[arg-type]
    async with httpx.AsyncClient() as http:
        client = RoicClient(cfg, http=http, retry_policy=NO_WAIT)
        respx.get(f"{cfg.base_url}/fundamental/balance-sheet/TCS.NS").mock(
            return_value=httpx.Response(200, json={"error": "plan"})
        )
        with pytest.raises(MalformedUpstreamData):
            await client.balance_sheet("TCS")


@pytest.mark.asyncio
async def test_owned_client_is_closed() -> None:
    client = InsightSentryClient(_settings(), retry_policy=NO_WAIT)
    await client.aclose()
    await client.aclose()


def test_alphavantage_reads_the_short_key_name(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ALPHA_VANTAGE_KEY", "av-key")
    cfg = AlphaVantageSettings()
    assert cfg.configured
    assert cfg.api_key is not None
    assert cfg.api_key.get_secret_value() == "av-key"


@pytest.mark.asyncio
@respx.mock
async def test_alphavantage_daily_series_params() -> None:
    cfg = AlphaVantageSettings(api_key="k")  # type: ignore[arg-type]
    async with httpx.AsyncClient() as http:
        client = AlphaVantageClient(cfg, http=http, retry_policy=NO_WAIT)
        route = respx.get(f"{cfg.base_url}/query").mock(
            return_value=httpx.Response(200, json={"Time Series (Daily)": {}})
        )
        payload = await client.daily_series("tcs", full=True)

    assert payload == {"Time Series (Daily)": {}}
    params = route.calls.last.request.url.params
    assert params["function"] == "TIME_SERIES_DAILY"
    assert params["symbol"] == "TCS.BSE"
    assert params["outputsize"] == "full"
    assert params["apikey"] == "k"


@pytest.mark.asyncio
@respx.mock
@pytest.mark.parametrize("key", ["Error Message", "Note", "Information"])
async def test_alphavantage_in_band_refusals_are_unavailable(key: str) -> None:
    cfg = AlphaVantageSettings(api_key="k")  # type: ignore[arg-type]
    async with httpx.AsyncClient() as http:
        client = AlphaVantageClient(cfg, http=http, retry_policy=NO_WAIT)
        respx.get(f"{cfg.base_url}/query").mock(
            return_value=httpx.Response(200, json={key: "call frequency exceeded"})
        )
        with pytest.raises(UpstreamUnavailable) as ei:
            await client.daily_series("TCS")

    assert ei.value.details["reason"] == key


@pytest.mark.asyncio
@respx.mock
async def test_alphavantage_rejects_non_object_payloads() -> None:
    cfg = AlphaVantageSettings(api_key="k")  # type: ignore[arg-type]
    async with httpx.AsyncClient() as http:
        client = AlphaVantageClient(cfg, http=http, retry_policy=NO_WAIT)
        respx.get(f"{cfg.base_url}/query").mock(return_value=httpx.Response(200, json=[1]))
        with pytest.raises(MalformedUpstreamData):
            await client.daily_series("TCS")
