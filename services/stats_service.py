"""
Stats Service Module

This module handles the abilities backed by Jetpack Stats data:
- get-top-posts: the site's top performing posts by views
- get-search-terms: what people searched for to find the site

It also provides the cached per-post view lookup used by the content audit
abilities, and the single place where the varying Stats payload shapes are
normalized.
"""

from datetime import datetime
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple

from config import settings
from data.cache import make_cache_key
from data.models import TopPost, SearchTerm
from data.protocols import CacheBackend, ContentStore
from services.protocols import AnalyticsSource
from utils.exceptions import AnalyticsUnavailableError, BackendQueryError
from utils.helpers import (
    format_iso8601, resolve_post_timestamp, resolve_timezone, safe_get, to_non_negative_int, utc_now
)
from utils.logger import get_logger

logger = get_logger(__name__)

# Known payload locations, in priority order. The first path holding a list wins.
TOP_POSTS_PATHS = (("summary", "postviews"), ("posts",))
SEARCH_TERMS_PATHS = (("summary", "search_terms"), ("search_terms",))


# =============================================================================
# Payload Normalization
# =============================================================================

def _first_list(payload: Any, paths: Tuple[Tuple[str, ...], ...]) -> List[Any]:
    if isinstance(payload, list):
        return payload
    for path in paths:
        value = safe_get(payload, *path)
        if isinstance(value, list):
            return value
    return []


def normalize_top_posts(payload: Any) -> List[Tuple[int, int]]:
    """
    Extract ranked (post_id, views) pairs from a top-posts payload.

    Shapes tried in order: summary.postviews, posts, a bare list. Each item
    takes its ID from 'id' then 'post_id'. Items without a usable ID are
    dropped; backend order is kept.
    """
    ranked = []
    for item in _first_list(payload, TOP_POSTS_PATHS):
        if not isinstance(item, dict):
            continue
        post_id = to_non_negative_int(item.get("id") or item.get("post_id"))
        if not post_id:
            continue
        ranked.append((post_id, to_non_negative_int(item.get("views"))))
    return ranked


def normalize_search_terms(payload: Any) -> List[Tuple[str, int]]:
    """
    Extract (term, views) pairs from a search-terms payload.

    Shapes tried in order: summary.search_terms, search_terms, a bare list.
    Items are either {'term': ..., 'views': ...} mappings or [term, views]
    pairs. Backend order is kept; filtering happens in the ability.
    """
    terms = []
    for item in _first_list(payload, SEARCH_TERMS_PATHS):
        if isinstance(item, dict):
            term, views = item.get("term"), item.get("views")
        elif isinstance(item, (list, tuple)) and item:
            term = item[0]
            views = item[1] if len(item) > 1 else 0
        else:
            continue
        terms.append(("" if term is None else str(term), to_non_negative_int(views)))
    return terms


def normalize_post_views(payload: Any) -> int:
    """Extract the view count from a single-post stats payload."""
    if isinstance(payload, dict):
        return to_non_negative_int(payload.get("views"))
    return 0


# =============================================================================
# Stats Service
# =============================================================================

class StatsService:
    """Service for the Jetpack Stats backed abilities and view lookups."""

    def __init__(self, analytics: AnalyticsSource, content_store: ContentStore, cache: CacheBackend,
                 clock: Optional[Callable[[], datetime]] = None):
        """
        Initialize the stats service.

        Args:
            analytics: The Jetpack Stats source.
            content_store: Used to resolve ranked post IDs to published posts.
            cache: Transient cache shared by all abilities.
            clock: Returns the current aware UTC time; defaults to utc_now.
        """
        self.analytics = analytics
        self.content_store = content_store
        self.cache = cache
        self.clock = clock or utc_now

    def is_available(self) -> bool:
        """Return True when Jetpack is connected and the Stats module is present."""
        return self.analytics.is_connected() and self.analytics.is_stats_available()

    def get_top_posts(self, days: int = 30, limit: int = 10) -> List[Dict[str, Any]]:
        """
        Return the site's top posts by views over the last `days` days.

        Posts are kept in the backend's ranking order. Ranked IDs that no
        longer exist or are not published are skipped without counting
        against the limit.

        Raises:
            AnalyticsUnavailableError: If Jetpack Stats is not available.
            BackendQueryError: If the Stats request fails; nothing is cached.
        """
        if not self.is_available():
            raise AnalyticsUnavailableError()

        cache_key = make_cache_key("top_posts", days=days, limit=limit)
        cached = self.cache.get(cache_key)
        if cached is not None:
            logger.debug(f"Cache hit for {cache_key}")
            return cached

        payload = self.analytics.get_top_posts(period_days=days, limit=limit)
        result = [post.to_dict() for post in self._resolve_top_posts(normalize_top_posts(payload), limit)]

        self.cache.put(cache_key, result, settings.CACHE_EXPIRATION)
        logger.info(f"Fetched {len(result)} top posts for the last {days} days")
        return result

    def _resolve_top_posts(self, ranked: List[Tuple[int, int]], limit: int) -> Iterator[TopPost]:
        site_tz = resolve_timezone(settings.SITE_TIMEZONE)
        now = self.clock()
        emitted = 0

        for post_id, views in ranked:
            if emitted >= limit:
                break

            post = self.content_store.get_post(post_id)
            if post is None or post.status != "publish":
                logger.debug(f"Skipping ranked post {post_id}: missing or not published")
                continue

            published = resolve_post_timestamp(post.date_gmt, post.date, site_tz, now)
            yield TopPost(
                post_id=post.id,
                title=post.title,
                url=self.content_store.get_permalink(post.id),
                date_published=format_iso8601(published),
                categories=list(self.content_store.get_categories(post.id)),
                views=views,
            )
            emitted += 1

    def get_search_terms(self, days: int = 30, limit: int = 20) -> List[Dict[str, Any]]:
        """
        Return search terms people used to find the site.

        Empty terms and the redacted "Unknown Search Terms" bucket are skipped
        and do not count against the limit.

        Raises:
            AnalyticsUnavailableError: If Jetpack Stats is not available.
            BackendQueryError: If the Stats request fails; nothing is cached.
        """
        if not self.is_available():
            raise AnalyticsUnavailableError()

        cache_key = make_cache_key("search_terms", days=days, limit=limit)
        cached = self.cache.get(cache_key)
        if cached is not None:
            logger.debug(f"Cache hit for {cache_key}")
            return cached

        payload = self.analytics.get_search_terms(period_days=days, limit=limit)

        result = []
        for term, views in normalize_search_terms(payload):
            if len(result) >= limit:
                break
            # Encrypted terms are reported under a placeholder
            if not term or term == settings.REDACTED_SEARCH_TERM:
                continue
            result.append(SearchTerm(term=term, count=views).to_dict())

        self.cache.put(cache_key, result, settings.CACHE_EXPIRATION)
        logger.info(f"Fetched {len(result)} search terms for the last {days} days")
        return result

    def get_post_views(self, post_id: int, days: int = 90) -> int:
        """
        Get the view count of one post over the last `days` days.

        Returns 0 when Stats is unavailable or the request fails, so a single
        failing lookup cannot abort a multi-post audit. Successful lookups are
        cached per (post_id, days).
        """
        if not self.is_available():
            return 0

        cache_key = make_cache_key("post_views", post_id=post_id, days=days)
        cached = self.cache.get(cache_key)
        if cached is not None:
            return to_non_negative_int(cached)

        try:
            payload = self.analytics.get_post_views(post_id=post_id, period_days=days)
        except BackendQueryError as e:
            logger.warning(f"View lookup failed for post {post_id}: {e.code}: {e.message}")
            return 0
        except Exception as e:
            logger.error(f"Unexpected error looking up views for post {post_id}: {e}", exc_info=True)
            return 0

        views = normalize_post_views(payload)
        self.cache.put(cache_key, views, settings.CACHE_EXPIRATION)
        return views
