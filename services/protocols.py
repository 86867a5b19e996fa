"""
Service Protocol Definitions

This module defines typing.Protocol interfaces for the services behind the
abilities. These protocols enable loose coupling, dependency injection, and
easier testing.

Protocols defined:
- AnalyticsSource: Interface for the Jetpack Stats backend
"""

from typing import Any, Dict, Protocol


class AnalyticsSource(Protocol):
    """Protocol defining the interface for an analytics backend.

    Implementations should provide:
    - Two availability predicates (connection and stats capability)
    - Raw payloads for top posts, search terms and single-post views

    Data methods return the backend payload unchanged and raise
    BackendQueryError when the backend answers with an error. Payload shapes
    vary by endpoint and version; callers normalize them.
    """

    def is_connected(self) -> bool:
        """Return True when a connection to the backend is established."""
        ...

    def is_stats_available(self) -> bool:
        """Return True when the stats capability is present on the site."""
        ...

    def get_top_posts(self, period_days: int, limit: int) -> Dict[str, Any]:
        """Fetch the most viewed posts over the last period_days days.

        Args:
            period_days: Length of the reporting window in days.
            limit: Maximum number of posts the backend should return.

        Returns:
            The raw backend payload.
        """
        ...

    def get_search_terms(self, period_days: int, limit: int) -> Dict[str, Any]:
        """Fetch search terms used to find the site over the last period_days days."""
        ...

    def get_post_views(self, post_id: int, period_days: int) -> Dict[str, Any]:
        """Fetch view statistics for a single post."""
        ...
