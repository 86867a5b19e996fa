"""
Data Models for Content Strategist

This module contains the data classes produced by the ability handlers and
the raw post record read from the content store.
"""

from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class PostRecord:
    """A raw post row as stored by WordPress. Dates are "Y-m-d H:i:s" strings."""
    id: int
    title: str = ""
    content: str = ""
    status: str = "publish"
    post_type: str = "post"
    slug: str = ""
    date: Optional[str] = None           # post_date (site local)
    date_gmt: Optional[str] = None       # post_date_gmt
    modified: Optional[str] = None       # post_modified (site local)
    modified_gmt: Optional[str] = None   # post_modified_gmt

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "PostRecord":
        """Build a record from a database row keyed by WordPress column names."""
        def text(key: str) -> str:
            value = row.get(key)
            # pandas hands back NaN for NULL columns
            if value is None or value != value:
                return ""
            return str(value)

        def date(key: str) -> Optional[str]:
            return text(key) or None

        return cls(
            id=int(row.get("ID") or row.get("id") or 0),
            title=text("post_title"),
            content=text("post_content"),
            status=text("post_status"),
            post_type=text("post_type") or "post",
            slug=text("post_name"),
            date=date("post_date"),
            date_gmt=date("post_date_gmt"),
            modified=date("post_modified"),
            modified_gmt=date("post_modified_gmt"),
        )


@dataclass(frozen=True)
class PostSummary:
    """Published post enriched with its permalink and category names."""
    post_id: int
    title: str
    url: str
    date_published: str                  # ISO 8601
    categories: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class TopPost(PostSummary):
    """A post ranked by Jetpack Stats views."""
    views: int = 0


@dataclass(frozen=True)
class UnderperformingPost(PostSummary):
    """An old published post with fewer views than the requested threshold."""
    views: int = 0
    word_count: int = 0


@dataclass(frozen=True)
class SearchTerm:
    """A search term people used to find the site."""
    term: str
    count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class StaleDraft:
    """A draft that has not been modified for a while."""
    post_id: int
    title: str
    excerpt: str
    date_created: str                    # ISO 8601
    date_modified: str                   # ISO 8601
    days_since_modified: int
    categories: List[str] = field(default_factory=list)
    word_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
