"""
Content Service Module

This module handles the content audit abilities:
- get-stale-drafts: drafts that have been sitting unfinished
- get-underperforming-posts: old published posts with little traffic

Both read the WordPress database directly; the second combines it with
Jetpack Stats view counts.
"""

from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Optional

from config import settings
from data.models import PostRecord, StaleDraft, UnderperformingPost
from data.protocols import ContentStore
from services.stats_service import StatsService
from utils.exceptions import AnalyticsRequiredError
from utils.helpers import (
    count_words, format_iso8601, format_wp_datetime, generate_excerpt,
    resolve_post_timestamp, resolve_timezone, utc_now, whole_days_between
)
from utils.logger import get_logger

logger = get_logger(__name__)


class ContentService:
    """Service for content audit abilities."""

    def __init__(self, content_store: ContentStore, stats_service: StatsService,
                 clock: Optional[Callable[[], datetime]] = None):
        """
        Initialize the content service.

        Args:
            content_store: WordPress content store.
            stats_service: Source of per-post view counts.
            clock: Returns the current aware UTC time; defaults to utc_now.
        """
        self.content_store = content_store
        self.stats_service = stats_service
        self.clock = clock or utc_now

    def get_stale_drafts(self, days_old: int = 180, limit: int = 20) -> List[Dict[str, Any]]:
        """
        Find drafts not modified in the last `days_old` days, oldest first.

        Results are never cached: days_since_modified is relative to the
        time of the call.

        Args:
            days_old: Minimum age in days since the last modification.
            limit: Maximum number of drafts to return.

        Returns:
            List of stale draft dictionaries.
        """
        now = self.clock()
        cutoff = format_wp_datetime(now - timedelta(days=days_old))
        site_tz = resolve_timezone(settings.SITE_TIMEZONE)

        posts = self.content_store.query_posts(
            status="draft",
            date_column="post_modified_gmt",
            before=cutoff,
            order_by="modified",
            order="ASC",
            limit=limit
        )

        result = []
        for post in posts[:limit]:
            created = resolve_post_timestamp(post.date_gmt, post.date, site_tz, now)
            modified = resolve_post_timestamp(post.modified_gmt, post.modified, site_tz, now)

            result.append(StaleDraft(
                post_id=post.id,
                title=post.title or settings.UNTITLED_TITLE,
                excerpt=generate_excerpt(post.content, settings.EXCERPT_LENGTH, settings.EXCERPT_BOUNDARY_RATIO),
                date_created=format_iso8601(created),
                date_modified=format_iso8601(modified),
                days_since_modified=whole_days_between(modified, now),
                categories=list(self.content_store.get_categories(post.id)),
                word_count=count_words(post.content),
            ).to_dict())

        logger.info(f"Found {len(result)} drafts not modified in {days_old} days")
        return result

    def get_underperforming_posts(self, days_published: int = 90, max_views: int = 100,
                                  limit: int = 20) -> List[Dict[str, Any]]:
        """
        Find posts published at least `days_published` days ago with fewer
        than `max_views` views in that window.

        Candidates are fetched oldest first with room for filtering, checked
        one by one against Stats, and the collected posts are returned sorted
        by views ascending. When too few candidates qualify the result is
        simply shorter than `limit`.

        Raises:
            AnalyticsRequiredError: If Jetpack Stats is not available.
        """
        if not self.stats_service.is_available():
            raise AnalyticsRequiredError()

        now = self.clock()
        cutoff = format_wp_datetime(now - timedelta(days=days_published))
        site_tz = resolve_timezone(settings.SITE_TIMEZONE)

        candidates = self.content_store.query_posts(
            status="publish",
            date_column="post_date_gmt",
            before=cutoff,
            order_by="date",
            order="ASC",
            limit=limit * settings.UNDERPERFORMING_OVERFETCH_FACTOR
        )

        collected: List[UnderperformingPost] = []
        for post in candidates:
            if len(collected) >= limit:
                break

            views = self.stats_service.get_post_views(post.id, days_published)
            if views >= max_views:
                logger.debug(f"Skipping post {post.id}: {views} views is not under {max_views}")
                continue

            collected.append(self._build_underperforming(post, views, site_tz, now))

        collected.sort(key=lambda item: item.views)
        logger.info(f"Found {len(collected)} underperforming posts out of {len(candidates)} candidates")
        return [item.to_dict() for item in collected]

    def _build_underperforming(self, post: PostRecord, views: int, site_tz, now: datetime) -> UnderperformingPost:
        published = resolve_post_timestamp(post.date_gmt, post.date, site_tz, now)
        return UnderperformingPost(
            post_id=post.id,
            title=post.title,
            url=self.content_store.get_permalink(post.id),
            date_published=format_iso8601(published),
            categories=list(self.content_store.get_categories(post.id)),
            views=views,
            word_count=count_words(post.content),
        )
