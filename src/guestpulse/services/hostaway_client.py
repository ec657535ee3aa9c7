"""Hostaway review data collection service for GuestPulse."""

import logging
from typing import Any, Dict, List, Optional

import requests
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from ..core.config import Settings
from ..core.errors import SourceUnavailable
from ..core.models import ConnectivityResult

logger = logging.getLogger(__name__)


class HostawayClient:
    """Hostaway property-management API client."""

    source = "hostaway"

    def __init__(self, base_url: str, account_id: str, api_key: str, timeout: float = 15.0,
                 page_limit: int = 100, max_retries: int = 3, retry_delay: float = 1.0,
                 retry_backoff: float = 2.0, session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.account_id = account_id
        self.timeout = timeout
        self.page_limit = page_limit
        self.max_retries = max(1, max_retries)
        self.retry_delay = retry_delay
        self.retry_backoff = retry_backoff
        self.session = session or requests.Session()
        self.headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
            "Cache-control": "no-cache",
        }

    @classmethod
    def from_settings(cls, settings: Settings, session: Optional[requests.Session] = None) -> "HostawayClient":
        return cls(
            base_url=settings.hostaway_base_url,
            account_id=settings.hostaway_account_id,
            api_key=settings.hostaway_api_key,
            timeout=settings.hostaway_timeout,
            page_limit=settings.hostaway_page_limit,
            max_retries=settings.max_retries,
            retry_delay=settings.retry_delay,
            retry_backoff=settings.retry_backoff,
            session=session,
        )

    def _retrying(self) -> Retrying:
        # waits retry_delay * retry_backoff ** (attempt - 1) between attempts
        return Retrying(
            stop=stop_after_attempt(self.max_retries),
            wait=wait_exponential(multiplier=self.retry_delay, exp_base=self.retry_backoff),
            retry=retry_if_exception_type((requests.ConnectionError, requests.Timeout)),
            reraise=True,
        )

    def _get(self, path: str, params: Dict[str, Any], timeout: Optional[float] = None) -> Dict[str, Any]:
        """GET with retries on transport errors; raises requests exceptions."""
        for attempt in self._retrying():
            with attempt:
                response = self.session.get(
                    f"{self.base_url}{path}",
                    headers=self.headers,
                    params=params,
                    timeout=timeout or self.timeout,
                )
                response.raise_for_status()
                return response.json()

    def fetch_raw(self) -> List[Dict[str, Any]]:
        """Fetch raw review records.

        Returns an empty list when the API answers without reviews. Transport,
        HTTP and payload errors raise SourceUnavailable.
        """
        logger.info("Attempting to fetch reviews from Hostaway API...")
        try:
            data = self._get("/reviews", {"accountId": self.account_id, "limit": self.page_limit, "offset": 0})
        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else "?"
            logger.error(f"Hostaway reviews fetch failed: {status}")
            raise SourceUnavailable(self.source, f"HTTP {status}") from e
        except (requests.RequestException, ValueError) as e:
            logger.error(f"Hostaway reviews error: {e}")
            raise SourceUnavailable(self.source, str(e)) from e

        if not isinstance(data, dict):
            raise SourceUnavailable(self.source, "unexpected response payload")

        result = data.get("result")
        if data.get("status") != "success" or not isinstance(result, list):
            logger.warning(f"Hostaway returned status {data.get('status')!r} without reviews")
            return []

        logger.info(f"Fetched {len(result)} reviews from Hostaway API")
        return result

    def test_connection(self) -> ConnectivityResult:
        """Probe the listings endpoint with a single-item request."""
        logger.info("Testing Hostaway API connection...")
        try:
            data = self._get("/listings", {"accountId": self.account_id, "limit": 1}, timeout=min(self.timeout, 10))
        except requests.HTTPError as e:
            response = e.response
            status = f"{response.status_code} {response.reason}" if response is not None else "unknown"
            return ConnectivityResult(source=self.source, ok=False, detail=f"Hostaway API Error: {status}")
        except (requests.RequestException, ValueError) as e:
            return ConnectivityResult(source=self.source, ok=False, detail=str(e))

        result = data.get("result") if isinstance(data, dict) else None
        return ConnectivityResult(
            source=self.source,
            ok=True,
            detail="Successfully connected to Hostaway API",
            data={
                "status": data.get("status") if isinstance(data, dict) else None,
                "listingCount": len(result) if isinstance(result, list) else 0,
            },
        )
