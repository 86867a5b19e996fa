"""
Cache Module for Content Strategist

An in-process replacement for WordPress transients. Values are stored in
their serialized JSON form with an absolute expiry, so a cached result is
returned byte-identical to what was written and callers can never mutate a
stored entry.
"""

import json
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from config import settings
from utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class CacheEntry:
    """
    Entry in the transient cache.

    Attributes:
        key: Namespaced cache key
        value: JSON-serialized payload
        expires_at: Clock reading after which the entry is a miss
    """
    key: str
    value: str
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


def make_cache_key(operation: str, **params: Any) -> str:
    """
    Build a cache key from the operation name and its parameters.

    Parameter values are appended in parameter-name order so identical
    parameter sets always produce the same key, e.g.
    make_cache_key("top_posts", limit=10, days=30) -> "ai_cs_top_posts_30_10".
    """
    parts = [settings.CACHE_PREFIX + operation]
    parts.extend(str(params[name]) for name in sorted(params))
    return "_".join(parts)


class TransientCache:
    """Expiring key-value cache held in process memory."""

    def __init__(self, clock: Optional[Callable[[], float]] = None):
        """
        Initialize the cache.

        Args:
            clock: Returns the current time in seconds; defaults to time.monotonic.
        """
        self._clock = clock or time.monotonic
        self._entries: Dict[str, CacheEntry] = {}

    def get(self, key: str) -> Optional[Any]:
        entry = self._entries.get(key)
        if entry is None:
            return None

        if entry.is_expired(self._clock()):
            del self._entries[key]
            logger.debug(f"Cache entry expired: {key}")
            return None

        return json.loads(entry.value)

    def put(self, key: str, value: Any, ttl_seconds: int) -> None:
        self._entries[key] = CacheEntry(
            key=key,
            value=json.dumps(value),
            expires_at=self._clock() + ttl_seconds
        )

    def clear(self, prefix: str = "") -> int:
        keys = [key for key in self._entries if key.startswith(prefix)]
        for key in keys:
            del self._entries[key]
        if keys:
            logger.info(f"Cleared {len(keys)} cache entries with prefix '{prefix}'")
        return len(keys)

    def __len__(self) -> int:
        return len(self._entries)
