"""
Facebook Graph API Client
Insights reporting with pagination and rate-limit retries
"""
import asyncio
import json
import logging
from datetime import date, timedelta
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence

import httpx

from metaextract.core.config import settings
from metaextract.core.exceptions import UpstreamApiError, UpstreamRateLimitError
from metaextract.models.enums import ExtractionPhase, ReportLevel
from metaextract.schemas.extraction import ResolvedDateRange

logger = logging.getLogger(__name__)

# (phase, current, total, message)
FetchProgressCallback = Callable[[ExtractionPhase, int, int, str], None]
SleepFunc = Callable[[float], Awaitable[None]]


def normalize_account_id(ad_account_id: str) -> str:
    """Ensure act_ prefix"""
    if not ad_account_id.startswith("act_"):
        return f"act_{ad_account_id}"
    return ad_account_id


class FacebookAPI:
    """
    Facebook Graph API Client for ad accounts, insights and conversions.

    Every request is preceded by a fixed delay. Throttling errors are retried
    with a linear backoff, transport failures with a flat delay; anything else
    the API reports fails at once.
    """

    def __init__(
        self,
        access_token: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        base_url: Optional[str] = None,
        request_delay: Optional[float] = None,
        retry_delay: Optional[float] = None,
        max_retries: Optional[int] = None,
        rate_limit_codes: Optional[Sequence[int]] = None,
        sleep: SleepFunc = asyncio.sleep,
    ):
        self.access_token = access_token or settings.FACEBOOK_ACCESS_TOKEN
        self.base_url = base_url or settings.facebook_api_url
        self.request_delay = (
            settings.EXTRACTION_REQUEST_DELAY_SECONDS if request_delay is None else request_delay
        )
        self.retry_delay = (
            settings.EXTRACTION_RETRY_DELAY_SECONDS if retry_delay is None else retry_delay
        )
        self.max_retries = settings.EXTRACTION_MAX_RETRIES if max_retries is None else max_retries
        self.rate_limit_codes = frozenset(
            settings.EXTRACTION_RATE_LIMIT_CODES if rate_limit_codes is None else rate_limit_codes
        )
        self._sleep = sleep
        self._client = client
        self._owns_client = client is None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=settings.FACEBOOK_HTTP_TIMEOUT)
        return self._client

    async def close(self):
        """Close the HTTP client"""
        if self._client and self._owns_client:
            await self._client.aclose()
            self._client = None

    # ========================================
    # Request / Retry
    # ========================================

    async def _get_once(self, url: str, params: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        """
        One GET, classified.

        Raises:
            UpstreamRateLimitError: throttling code in the error payload
            UpstreamApiError: any other error payload
            httpx.TransportError / httpx.HTTPStatusError: transport-level failure
        """
        response = await self.client.get(url, params=params)

        try:
            data = response.json()
        except ValueError:
            # Not a Graph API payload: 5xx is transient, anything else is final
            if response.status_code >= 500:
                response.raise_for_status()
            raise UpstreamApiError(f"Unexpected non-JSON response (HTTP {response.status_code})")

        error = data.get("error") if isinstance(data, dict) else None
        if error:
            message = error.get("message") or "Unknown error"
            code = error.get("code")
            if code in self.rate_limit_codes:
                raise UpstreamRateLimitError(message, code)
            raise UpstreamApiError(message, code)

        if response.status_code >= 500:
            response.raise_for_status()

        if not isinstance(data, dict):
            raise UpstreamApiError("Unexpected response shape from Graph API")

        return data

    async def _get_with_retry(
        self,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        on_progress: Optional[FetchProgressCallback] = None,
    ) -> Dict[str, Any]:
        """GET with the fixed pre-request delay and the retry policy"""
        attempt = 0
        while True:
            await self._sleep(self.request_delay)
            try:
                return await self._get_once(url, params)

            except UpstreamRateLimitError as e:
                if attempt >= self.max_retries:
                    raise UpstreamApiError(
                        f"Meta API Error: {e.message} (rate limit retries exhausted)", e.code
                    ) from e
                attempt += 1
                wait = self.retry_delay * attempt
                logger.warning(
                    f"Rate limit hit (code {e.code}), waiting {wait:.1f}s "
                    f"(retry {attempt}/{self.max_retries})"
                )
                if on_progress:
                    on_progress(
                        ExtractionPhase.FETCHING_DATA, 0, 0,
                        f"Waiting {wait:.0f}s (API rate limit)...",
                    )
                await self._sleep(wait)

            except UpstreamApiError as e:
                raise UpstreamApiError(f"Meta API Error: {e.message}", e.code) from e

            except (httpx.TransportError, httpx.HTTPStatusError) as e:
                if attempt >= self.max_retries:
                    raise UpstreamApiError(f"Meta API request failed: {e}") from e
                attempt += 1
                logger.warning(
                    f"Request failed ({e}), retrying in {self.retry_delay:.1f}s "
                    f"(retry {attempt}/{self.max_retries})"
                )
                await self._sleep(self.retry_delay)

    # ========================================
    # Insights API
    # ========================================

    async def fetch_insights(
        self,
        ad_account_id: str,
        level: ReportLevel,
        fields: Sequence[str],
        breakdowns: Sequence[str],
        date_range: ResolvedDateRange,
        limit: Optional[int] = None,
        on_progress: Optional[FetchProgressCallback] = None,
        max_pages: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """
        Fetch daily insights rows for an ad account, following every page.

        Args:
            ad_account_id: Ad account id, with or without act_ prefix
            level: Aggregation level
            fields: Graph API field names
            breakdowns: Graph API breakdown names
            date_range: Resolved window (inclusive)
            limit: Page size, omitted when None or 0
            on_progress: Receives (phase, current, total, message) per page
            max_pages: Stop after this many pages (None = all)

        Returns:
            Rows in the order the API returned them, across pages
        """
        url = f"{self.base_url}/{normalize_account_id(ad_account_id)}/insights"
        params: Optional[Dict[str, Any]] = {
            "level": level.value,
            "fields": ",".join(fields),
            "time_range": json.dumps(
                {"since": date_range.start_date.isoformat(), "until": date_range.end_date.isoformat()}
            ),
            "time_increment": 1,
            "access_token": self.access_token,
        }
        if breakdowns:
            params["breakdowns"] = ",".join(breakdowns)
        if limit:
            params["limit"] = limit

        logger.info(
            f"Requesting insights for {ad_account_id}: level={level.value} "
            f"fields={len(fields)} breakdowns={len(breakdowns)} "
            f"range={date_range.start_date}..{date_range.end_date}"
        )

        all_rows: List[Dict[str, Any]] = []
        page_count = 0

        while url:
            data = await self._get_with_retry(url, params, on_progress)

            rows = data.get("data")
            if isinstance(rows, list):
                all_rows.extend(rows)
            page_count += 1

            if on_progress:
                on_progress(
                    ExtractionPhase.FETCHING_DATA, len(all_rows), len(all_rows),
                    f"Fetching data... {len(all_rows)} records (page {page_count})",
                )

            if max_pages is not None and page_count >= max_pages:
                break

            # Next URL contains all params
            url = (data.get("paging") or {}).get("next")
            params = None

        logger.info(f"Fetched {len(all_rows)} insights rows in {page_count} page(s)")
        return all_rows

    # ========================================
    # Accounts / Conversions
    # ========================================

    async def fetch_ad_accounts(self) -> List[Dict[str, Any]]:
        """Fetch ad accounts visible to the token"""
        url = f"{self.base_url}/me/adaccounts"
        params = {
            "fields": "id,name,account_status,currency,timezone_name",
            "access_token": self.access_token,
        }
        data = await self._get_with_retry(url, params)
        return data.get("data", [])

    async def fetch_custom_conversions(self, ad_account_id: str) -> List[Dict[str, Any]]:
        """Fetch custom conversions defined on an ad account"""
        url = f"{self.base_url}/{normalize_account_id(ad_account_id)}/customconversions"
        params = {
            "fields": "id,name,custom_event_type,rule",
            "access_token": self.access_token,
        }
        data = await self._get_with_retry(url, params)
        return [
            {
                "id": item.get("id"),
                "name": item.get("name"),
                "custom_event_type": item.get("custom_event_type"),
            }
            for item in data.get("data", [])
        ]

    async def detect_available_conversions(
        self,
        ad_account_id: str,
        today: Optional[date] = None,
    ) -> List[str]:
        """Distinct action types reported on the account over the last 7 days"""
        today = today or date.today()
        window = ResolvedDateRange(start_date=today - timedelta(days=7), end_date=today)
        url = f"{self.base_url}/{normalize_account_id(ad_account_id)}/insights"
        params = {
            "fields": "actions",
            "time_range": json.dumps(
                {"since": window.start_date.isoformat(), "until": window.end_date.isoformat()}
            ),
            "access_token": self.access_token,
        }
        data = await self._get_with_retry(url, params)

        action_types: Dict[str, None] = {}
        for row in data.get("data", []):
            for action in row.get("actions") or []:
                action_type = action.get("action_type")
                if action_type:
                    action_types.setdefault(action_type)
        return list(action_types)
