"""
Data Layer Protocol Definitions

This module defines typing.Protocol interfaces for data layer operations.
These protocols enable dependency injection for the content store and the
cache, making the ability handlers testable without a real database.

Protocols defined:
- ContentStore: Interface for reading posts, categories and permalinks
- CacheBackend: Interface for the expiring key-value cache
"""

from typing import Any, List, Optional, Protocol

from data.models import PostRecord


class ContentStore(Protocol):
    """Protocol defining the interface for content store reads.

    Implementations should provide methods for:
    - Querying posts by status with a date cutoff and ordering
    - Looking up a single post
    - Resolving category names and permalinks
    """

    def query_posts(
        self,
        status: str,
        date_column: str,
        before: str,
        order_by: str = "date",
        order: str = "ASC",
        limit: int = 10
    ) -> List[PostRecord]:
        """Query posts of one status whose date column is before a cutoff.

        Args:
            status: Post status, e.g. 'draft' or 'publish'.
            date_column: One of post_date, post_date_gmt, post_modified, post_modified_gmt.
            before: Exclusive cutoff as a "Y-m-d H:i:s" GMT string.
            order_by: 'date' or 'modified'.
            order: 'ASC' or 'DESC'.
            limit: Maximum number of posts to return.

        Returns:
            Ordered list of matching post records.
        """
        ...

    def get_post(self, post_id: int) -> Optional[PostRecord]:
        """Retrieve a post by ID.

        Returns:
            The post record, or None if it does not exist.
        """
        ...

    def get_categories(self, post_id: int) -> List[str]:
        """Return the category names of a post, ordered by name."""
        ...

    def get_permalink(self, post_id: int) -> str:
        """Return the public URL of a post."""
        ...


class CacheBackend(Protocol):
    """Protocol defining the interface for an expiring key-value cache."""

    def get(self, key: str) -> Optional[Any]:
        """Return the cached value, or None on a miss or after expiry."""
        ...

    def put(self, key: str, value: Any, ttl_seconds: int) -> None:
        """Store a JSON-serializable value for ttl_seconds."""
        ...

    def clear(self, prefix: str = "") -> int:
        """Remove every entry whose key starts with prefix and return how many were removed."""
        ...
