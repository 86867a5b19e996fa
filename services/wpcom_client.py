"""
WordPress.com Stats Client Module

This module talks to the Jetpack Stats endpoints of the WordPress.com REST
API. It returns raw payloads; shape normalization lives in the stats service.
"""

from typing import Any, Dict, Optional

import requests

from config import settings
from utils.exceptions import BackendQueryError
from utils.logger import get_logger

logger = get_logger(__name__)


class WPComStatsClient:
    """Client for the Jetpack Stats endpoints of the WordPress.com REST API."""

    def __init__(self, site_id: Optional[str] = None, access_token: Optional[str] = None,
                 session: Optional[requests.Session] = None):
        """
        Initialize the stats client.

        Args:
            site_id: WordPress.com site ID or domain; defaults to settings.WPCOM_SITE_ID.
            access_token: OAuth2 bearer token; defaults to settings.WPCOM_ACCESS_TOKEN.
            session: Optional requests session, mainly for tests.
        """
        self.site_id = site_id if site_id is not None else settings.WPCOM_SITE_ID
        self.access_token = access_token if access_token is not None else settings.WPCOM_ACCESS_TOKEN
        self.session = session or requests.Session()

    def is_connected(self) -> bool:
        """Return True when the site is linked to WordPress.com with a token."""
        return bool(self.site_id and self.access_token)

    def is_stats_available(self) -> bool:
        """Return True when the Jetpack Stats module is enabled for the site."""
        return bool(settings.JETPACK_STATS_ENABLED)

    def get_top_posts(self, period_days: int, limit: int) -> Dict[str, Any]:
        return self._get("stats/top-posts", {
            "period": "day",
            "num": period_days,
            "max": fetch_window(limit),
            "summarize": 1,
        })

    def get_search_terms(self, period_days: int, limit: int) -> Dict[str, Any]:
        return self._get("stats/search-terms", {
            "period": "day",
            "num": period_days,
            "max": fetch_window(limit),
            "summarize": 1,
        })

    def get_post_views(self, post_id: int, period_days: int) -> Dict[str, Any]:
        return self._get(f"stats/post/{int(post_id)}", {
            "num": period_days,
            "summarize": 1,
        })

    def _get(self, path: str, params: Dict[str, Any]) -> Dict[str, Any]:
        """
        Issue a GET request against the site's REST namespace.

        Raises:
            BackendQueryError: On transport failures, non-2xx answers and non-JSON bodies.
        """
        url = f"{settings.WPCOM_API_BASE}/sites/{self.site_id}/{path}"
        headers = {"Authorization": f"Bearer {self.access_token}"}

        try:
            response = self.session.get(url, params=params, headers=headers,
                                        timeout=settings.WPCOM_REQUEST_TIMEOUT)
        except requests.exceptions.RequestException as e:
            logger.error(f"Stats request to {path} failed: {e}")
            raise BackendQueryError(f"Could not reach WordPress.com Stats: {e}",
                                    code="stats_request_failed", status=502) from e

        if not response.ok:
            code, message = _error_details(response)
            logger.error(f"Stats request to {path} returned {response.status_code}: {code}")
            raise BackendQueryError(message, code=code, status=response.status_code)

        try:
            return response.json()
        except ValueError as e:
            logger.error(f"Stats response from {path} is not JSON: {e}")
            raise BackendQueryError("WordPress.com Stats returned an unreadable response.",
                                    code="stats_invalid_response", status=502) from e


def fetch_window(limit: int) -> int:
    """
    Number of ranked records to request for a caller limit.

    Redacted terms and missing or unpublished posts are dropped after the
    response arrives, so more than `limit` records are asked for.
    """
    window = int(limit) * settings.STATS_OVERFETCH_FACTOR
    return max(int(limit), min(window, settings.WPCOM_STATS_MAX_RESULTS))


def _error_details(response: requests.Response) -> tuple:
    """Extract the WordPress.com error code and message from a failed response."""
    try:
        data = response.json()
    except ValueError:
        data = None

    if isinstance(data, dict):
        code = data.get("error") or data.get("code") or "stats_request_failed"
        message = data.get("message") or f"WordPress.com Stats returned HTTP {response.status_code}"
        return str(code), str(message)

    return "stats_request_failed", f"WordPress.com Stats returned HTTP {response.status_code}"
