"""
Tests for the Graph API client: pagination, retries and error mapping.
"""
import json
from datetime import date

import httpx
import pytest

from metaextract.core.exceptions import UpstreamApiError, UpstreamRateLimitError
from metaextract.models.enums import ExtractionPhase, ReportLevel
from metaextract.schemas.extraction import ResolvedDateRange
from metaextract.services.facebook.fb_api import normalize_account_id

GRAPH_URL = "https://graph.test/v19.0"

WINDOW = ResolvedDateRange(start_date=date(2025, 3, 9), end_date=date(2025, 3, 15))
RATE_LIMITED = {"error": {"message": "User request limit reached", "code": 17}}
INVALID_PARAM = {"error": {"message": "Invalid parameter", "code": 100}}


def fetch(api, **kwargs):
    options = {
        "ad_account_id": "act_123",
        "level": ReportLevel.CAMPAIGN,
        "fields": ("campaign_id", "campaign_name", "spend"),
        "breakdowns": (),
        "date_range": WINDOW,
    }
    options.update(kwargs)
    return api.fetch_insights(**options)


def test_normalize_account_id():
    assert normalize_account_id("123") == "act_123"
    assert normalize_account_id("act_123") == "act_123"


class TestFetchInsights:
    """Request shape and pagination."""

    @pytest.mark.asyncio
    async def test_request_params(self, make_api):
        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(200, json={"data": []})

        await fetch(make_api(handler), ad_account_id="123", breakdowns=("age",), limit=50)

        request = requests[0]
        assert request.url.path == "/v19.0/act_123/insights"
        params = request.url.params
        assert params["level"] == "campaign"
        assert params["fields"] == "campaign_id,campaign_name,spend"
        assert json.loads(params["time_range"]) == {"since": "2025-03-09", "until": "2025-03-15"}
        assert params["time_increment"] == "1"
        assert params["access_token"] == "test-token"
        assert params["breakdowns"] == "age"
        assert params["limit"] == "50"

    @pytest.mark.asyncio
    async def test_optional_params_omitted(self, make_api):
        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(200, json={"data": []})

        await fetch(make_api(handler), limit=0)

        assert "breakdowns" not in requests[0].url.params
        assert "limit" not in requests[0].url.params

    @pytest.mark.asyncio
    async def test_follows_paging_next(self, make_api, sleeps):
        requests = []
        next_url = f"{GRAPH_URL}/act_123/insights?after=cursor1&access_token=test-token"

        def handler(request):
            requests.append(request)
            if request.url.params.get("after") == "cursor1":
                return httpx.Response(200, json={"data": [{"spend": "3"}]})
            return httpx.Response(
                200,
                json={"data": [{"spend": "1"}, {"spend": "2"}], "paging": {"next": next_url}},
            )

        rows = await fetch(make_api(handler))

        assert len(requests) == 2
        assert [r["spend"] for r in rows] == ["1", "2", "3"]
        assert str(requests[1].url) == next_url
        assert sleeps.calls == [0.5, 0.5]

    @pytest.mark.asyncio
    async def test_max_pages(self, make_api):
        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(
                200,
                json={"data": [{"spend": "1"}], "paging": {"next": f"{GRAPH_URL}/act_123/insights?after=x"}},
            )

        rows = await fetch(make_api(handler), max_pages=1)

        assert len(requests) == 1
        assert len(rows) == 1

    @pytest.mark.asyncio
    async def test_progress_per_page(self, make_api):
        events = []

        def handler(request):
            return httpx.Response(200, json={"data": [{"spend": "1"}, {"spend": "2"}]})

        await fetch(make_api(handler), on_progress=lambda *event: events.append(event))

        assert events == [
            (ExtractionPhase.FETCHING_DATA, 2, 2, "Fetching data... 2 records (page 1)"),
        ]


class TestRetryPolicy:
    """Rate limits, transport failures and business errors."""

    @pytest.mark.asyncio
    async def test_rate_limit_then_success(self, make_api, sleeps):
        responses = [
            httpx.Response(400, json=RATE_LIMITED),
            httpx.Response(200, json={"data": [{"spend": "1"}]}),
        ]
        requests = []

        def handler(request):
            requests.append(request)
            return responses.pop(0)

        events = []
        rows = await fetch(make_api(handler), on_progress=lambda *event: events.append(event))

        assert len(requests) == 2
        assert rows == [{"spend": "1"}]
        # pre-request delay, backoff, pre-request delay
        assert sleeps.calls == [0.5, 2.0, 0.5]
        assert events[0][3] == "Waiting 2s (API rate limit)..."

    @pytest.mark.asyncio
    async def test_rate_limit_backoff_grows_linearly(self, make_api, sleeps):
        def handler(request):
            return httpx.Response(400, json={"error": {"message": "Too many calls", "code": 4}})

        with pytest.raises(UpstreamApiError) as exc_info:
            await fetch(make_api(handler))

        assert "rate limit retries exhausted" in exc_info.value.message
        assert exc_info.value.code == 4
        assert not isinstance(exc_info.value, UpstreamRateLimitError)
        backoffs = [s for s in sleeps.calls if s != 0.5]
        assert backoffs == [2.0, 4.0, 6.0]

    @pytest.mark.asyncio
    async def test_rate_limit_budget(self, make_api):
        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(400, json=RATE_LIMITED)

        with pytest.raises(UpstreamApiError):
            await fetch(make_api(handler, max_retries=2))

        assert len(requests) == 3

    @pytest.mark.asyncio
    async def test_business_error_not_retried(self, make_api, sleeps):
        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(400, json=INVALID_PARAM)

        with pytest.raises(UpstreamApiError) as exc_info:
            await fetch(make_api(handler))

        assert len(requests) == 1
        assert exc_info.value.message == "Meta API Error: Invalid parameter"
        assert exc_info.value.code == 100
        assert sleeps.calls == [0.5]

    @pytest.mark.asyncio
    async def test_custom_rate_limit_codes(self, make_api):
        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(400, json=RATE_LIMITED)

        with pytest.raises(UpstreamApiError):
            await fetch(make_api(handler, rate_limit_codes=[4]))

        assert len(requests) == 1

    @pytest.mark.asyncio
    async def test_transport_error_retried(self, make_api, sleeps):
        calls = []

        def handler(request):
            calls.append(request)
            if len(calls) == 1:
                raise httpx.ConnectError("connection refused", request=request)
            return httpx.Response(200, json={"data": [{"spend": "1"}]})

        rows = await fetch(make_api(handler))

        assert len(calls) == 2
        assert rows == [{"spend": "1"}]
        assert sleeps.calls == [0.5, 2.0, 0.5]

    @pytest.mark.asyncio
    async def test_transport_error_exhausted(self, make_api):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(UpstreamApiError, match="request failed"):
            await fetch(make_api(handler, max_retries=1))

    @pytest.mark.asyncio
    async def test_server_error_page_retried(self, make_api):
        responses = [
            httpx.Response(502, text="<html>Bad Gateway</html>"),
            httpx.Response(200, json={"data": []}),
        ]

        def handler(request):
            return responses.pop(0)

        assert await fetch(make_api(handler)) == []
        assert responses == []

    @pytest.mark.asyncio
    async def test_client_error_page_not_retried(self, make_api):
        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(404, text="Not Found")

        with pytest.raises(UpstreamApiError, match="non-JSON"):
            await fetch(make_api(handler))

        assert len(requests) == 1


class TestAccountsAndConversions:
    """Account and conversion discovery."""

    @pytest.mark.asyncio
    async def test_fetch_ad_accounts(self, make_api):
        def handler(request):
            assert request.url.path == "/v19.0/me/adaccounts"
            return httpx.Response(200, json={"data": [{"id": "act_1", "name": "Main"}]})

        accounts = await make_api(handler).fetch_ad_accounts()

        assert accounts == [{"id": "act_1", "name": "Main"}]

    @pytest.mark.asyncio
    async def test_fetch_custom_conversions(self, make_api):
        def handler(request):
            assert request.url.path == "/v19.0/act_9/customconversions"
            return httpx.Response(
                200,
                json={"data": [{"id": "55", "name": "Signup", "custom_event_type": "LEAD", "rule": "{}"}]},
            )

        conversions = await make_api(handler).fetch_custom_conversions("9")

        assert conversions == [{"id": "55", "name": "Signup", "custom_event_type": "LEAD"}]

    @pytest.mark.asyncio
    async def test_detect_available_conversions(self, make_api):
        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(
                200,
                json={
                    "data": [
                        {"actions": [{"action_type": "purchase"}, {"action_type": "lead"}]},
                        {"actions": [{"action_type": "lead"}, {"action_type": "add_to_cart"}]},
                        {},
                    ]
                },
            )

        action_types = await make_api(handler).detect_available_conversions(
            "act_1", today=date(2025, 3, 15)
        )

        assert action_types == ["purchase", "lead", "add_to_cart"]
        time_range = json.loads(requests[0].url.params["time_range"])
        assert time_range == {"since": "2025-03-08", "until": "2025-03-15"}
