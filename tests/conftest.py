"""
Shared Test Fixtures for Content Strategist

This module provides common fixtures used across all test modules.
Fixtures include settings overrides, a mocked database connection, a fixed
clock, in-memory fakes for the content store and the Stats source, and data
factories for post records.
"""

import pytest
from unittest.mock import MagicMock, patch
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config import settings
from data.cache import TransientCache
from data.models import PostRecord
from utils.exceptions import BackendQueryError
from utils.helpers import ZERO_DATE

FIXED_NOW = datetime(2025, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


# =============================================================================
# Settings Fixtures
# =============================================================================

@pytest.fixture(autouse=True)
def site_settings(monkeypatch):
    """
    Pin the settings every test relies on to safe, predictable values.

    Modules read settings at call time, so patching the module attributes
    is enough. Individual tests can override any value with monkeypatch.

    Returns:
        module: The patched settings module.
    """
    monkeypatch.setattr(settings, "SITE_URL", "https://example.com")
    monkeypatch.setattr(settings, "SITE_TIMEZONE", "UTC")
    monkeypatch.setattr(settings, "PERMALINK_STRUCTURE", "")
    monkeypatch.setattr(settings, "DB_TABLE_PREFIX", "wp_")
    monkeypatch.setattr(settings, "DB_CONNECTION_STRING", "DRIVER={Test};SERVER=test-server;DATABASE=test-db;")
    monkeypatch.setattr(settings, "WPCOM_SITE_ID", "12345")
    monkeypatch.setattr(settings, "WPCOM_ACCESS_TOKEN", "test-token")
    monkeypatch.setattr(settings, "JETPACK_STATS_ENABLED", True)
    monkeypatch.setattr(settings, "CACHE_EXPIRATION", 900)
    monkeypatch.setattr(settings, "MCP_USER_CAPABILITIES", ["edit_posts"])
    return settings


# =============================================================================
# Database Fixtures
# =============================================================================

@pytest.fixture
def mock_db_connection():
    """
    Mock pyodbc database connection and cursor.

    Usage:
        def test_database(mock_db_connection):
            conn, cursor = mock_db_connection
            cursor.fetchall.return_value = [('row1',), ('row2',)]

    Returns:
        tuple: A tuple of (mock_connection, mock_cursor).
    """
    mock_cursor = MagicMock()
    mock_cursor.description = [('column1',), ('column2',)]
    mock_cursor.fetchall.return_value = []
    mock_cursor.fetchone.return_value = None

    mock_conn = MagicMock()
    mock_conn.cursor.return_value = mock_cursor

    with patch('pyodbc.connect', return_value=mock_conn):
        yield mock_conn, mock_cursor


# =============================================================================
# Clock Fixtures
# =============================================================================

class FakeMonotonic:
    """Manually advanced clock for cache expiry tests."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fixed_clock():
    """Service clock frozen at FIXED_NOW (2025-06-01 12:00 UTC)."""
    return lambda: FIXED_NOW


@pytest.fixture
def cache_clock():
    """Monotonic clock for the transient cache that tests can advance."""
    return FakeMonotonic()


@pytest.fixture
def cache(cache_clock):
    """An empty transient cache driven by cache_clock."""
    return TransientCache(clock=cache_clock)


# =============================================================================
# Content Store Fake
# =============================================================================

class FakeContentStore:
    """In-memory content store that honors the query contract and counts calls."""

    def __init__(self):
        self.posts: Dict[int, PostRecord] = {}
        self.categories: Dict[int, List[str]] = {}
        self.query_calls: List[Dict[str, Any]] = []
        self.get_post_calls: List[int] = []

    def add(self, post: PostRecord, categories: Optional[List[str]] = None) -> PostRecord:
        self.posts[post.id] = post
        self.categories[post.id] = list(categories or [])
        return post

    def query_posts(self, status, date_column, before, order_by="date", order="ASC", limit=10):
        self.query_calls.append({
            "status": status, "date_column": date_column, "before": before,
            "order_by": order_by, "order": order, "limit": limit,
        })
        field = {
            "post_date": "date", "post_date_gmt": "date_gmt",
            "post_modified": "modified", "post_modified_gmt": "modified_gmt",
        }[date_column]
        sort_field = "date" if order_by == "date" else "modified"

        matches = [
            post for post in self.posts.values()
            if post.status == status and (getattr(post, field) or ZERO_DATE) < before
        ]
        matches.sort(key=lambda p: (getattr(p, sort_field) or ZERO_DATE, p.id), reverse=(order == "DESC"))
        return matches[:limit]

    def get_post(self, post_id):
        self.get_post_calls.append(post_id)
        return self.posts.get(post_id)

    def get_categories(self, post_id):
        return list(self.categories.get(post_id, []))

    def get_permalink(self, post_id):
        return f"https://example.com/?p={post_id}"


@pytest.fixture
def content_store():
    """An empty FakeContentStore."""
    return FakeContentStore()


# =============================================================================
# Analytics Source Fake
# =============================================================================

class FakeAnalyticsSource:
    """In-memory Jetpack Stats source with configurable payloads and call counts."""

    def __init__(self):
        self.connected = True
        self.stats_available = True
        self.top_posts_payload: Any = {"summary": {"postviews": []}}
        self.search_terms_payload: Any = {"summary": {"search_terms": []}}
        self.post_views: Dict[int, Any] = {}
        self.error: Optional[Exception] = None
        self.post_view_errors: Dict[int, Exception] = {}
        self.calls: List[tuple] = []

    def is_connected(self):
        return self.connected

    def is_stats_available(self):
        return self.stats_available

    def get_top_posts(self, period_days, limit):
        self.calls.append(("top_posts", period_days, limit))
        if self.error:
            raise self.error
        return self.top_posts_payload

    def get_search_terms(self, period_days, limit):
        self.calls.append(("search_terms", period_days, limit))
        if self.error:
            raise self.error
        return self.search_terms_payload

    def get_post_views(self, post_id, period_days):
        self.calls.append(("post_views", post_id, period_days))
        if post_id in self.post_view_errors:
            raise self.post_view_errors[post_id]
        return {"views": self.post_views.get(post_id, 0)}

    def count(self, kind: str) -> int:
        return sum(1 for call in self.calls if call[0] == kind)


@pytest.fixture
def analytics():
    """A connected FakeAnalyticsSource with empty payloads."""
    return FakeAnalyticsSource()


@pytest.fixture
def backend_error():
    """A typical upstream Stats failure."""
    return BackendQueryError("Unauthorized", code="unauthorized", status=403)


# =============================================================================
# Data Model Factories
# =============================================================================

@pytest.fixture
def post_factory():
    """
    Factory fixture for creating PostRecord test objects.

    Usage:
        def test_post(post_factory):
            post = post_factory(1, status='draft', modified_gmt='2024-01-01 10:00:00')

    Returns:
        callable: A factory function for creating PostRecord objects.
    """
    def _create_post(
        id: int,
        title: Optional[str] = None,
        content: str = "Some post content for testing.",
        status: str = "publish",
        date: Optional[str] = "2024-01-01 10:00:00",
        date_gmt: Optional[str] = None,
        modified: Optional[str] = None,
        modified_gmt: Optional[str] = None,
        slug: Optional[str] = None,
    ) -> PostRecord:
        return PostRecord(
            id=id,
            title=f"Post {id}" if title is None else title,
            content=content,
            status=status,
            slug=slug if slug is not None else f"post-{id}",
            date=date,
            date_gmt=date if date_gmt is None else date_gmt,
            modified=modified or date,
            modified_gmt=modified_gmt or modified or date,
        )

    return _create_post


# =============================================================================
# Application Fixtures
# =============================================================================

@pytest.fixture
def app(content_store, analytics, cache, fixed_clock):
    """A ContentStrategist wired to the fakes, without settings validation."""
    from main import ContentStrategist
    return ContentStrategist(
        content_store=content_store,
        analytics=analytics,
        cache=cache,
        clock=fixed_clock,
        validate=False
    )


@pytest.fixture
def editor():
    """A caller holding edit_posts."""
    from services.registry import User
    return User.with_capabilities("editor", ["edit_posts", "read"])


@pytest.fixture
def subscriber():
    """A caller without edit_posts."""
    from services.registry import User
    return User.with_capabilities("subscriber", ["read"])
