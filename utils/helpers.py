"""
Helper Utility Module

This module provides various helper functions used throughout the Content
Strategist service: markup stripping, excerpts, word counts, number
normalization and WordPress date handling.
"""

import re
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Any, Dict, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

ZERO_DATE = "0000-00-00 00:00:00"
WP_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
DAY_IN_SECONDS = 86400

_SCRIPT_STYLE = re.compile(r'<(script|style)[^>]*?>.*?</\1>', re.IGNORECASE | re.DOTALL)
_HTML_COMMENT = re.compile(r'<!--.*?-->', re.DOTALL)
_HTML_TAG = re.compile(r'<[^>]*>')
_ENCLOSING_SHORTCODE = re.compile(r'\[([A-Za-z][\w-]*)(?:\s[^\]]*)?\].*?\[/\1\]', re.DOTALL)
_SELF_CLOSING_SHORTCODE = re.compile(r'\[/?[A-Za-z][\w-]*(?:\s[^\]]*)?/?\]')
_OFFSET = re.compile(r'^(?:UTC)?([+-])(\d{1,2})(?::?(\d{2}))?$')


def utc_now() -> datetime:
    """Return the current time as an aware UTC datetime without microseconds."""
    return datetime.now(timezone.utc).replace(microsecond=0)


def strip_html_tags(text: str) -> str:
    """
    Remove HTML tags, comments, and script/style bodies from text.

    Args:
        text: The text to clean

    Returns:
        str: Text with markup removed
    """
    text = _SCRIPT_STYLE.sub('', text)
    text = _HTML_COMMENT.sub('', text)
    return _HTML_TAG.sub('', text)


def strip_shortcodes(text: str) -> str:
    """
    Remove shortcode syntax such as [gallery ids="1,2"] or [caption]...[/caption].

    Enclosing shortcodes are removed together with their content.
    """
    text = _ENCLOSING_SHORTCODE.sub('', text)
    return _SELF_CLOSING_SHORTCODE.sub('', text)


def strip_markup(content: Optional[str]) -> str:
    """Strip shortcodes and then HTML from post content."""
    if not content:
        return ""
    return strip_html_tags(strip_shortcodes(content))


def count_words(content: Optional[str]) -> int:
    """
    Count whitespace-delimited words in post content after stripping markup.

    Args:
        content: Raw post content

    Returns:
        int: Number of words
    """
    return len(strip_markup(content).split())


def generate_excerpt(content: Optional[str], length: int = 150, boundary_ratio: float = 0.8) -> str:
    """
    Build a plain-text excerpt from post content.

    Text longer than `length` is cut to `length` characters. When the last
    whitespace in the cut text sits at or past `length * boundary_ratio`, the
    cut moves back to it. Truncated excerpts always end in "...".

    Args:
        content: Raw post content
        length: Maximum number of characters kept
        boundary_ratio: Share of `length` after which a word break is preferred

    Returns:
        str: The excerpt, or an empty string for empty content
    """
    text = strip_markup(content).strip()
    if not text:
        return ""

    if len(text) <= length:
        return text

    truncated = text[:length]
    last_space = max(truncated.rfind(ch) for ch in (' ', '\t', '\n', '\r'))
    if last_space >= length * boundary_ratio:
        truncated = truncated[:last_space]

    return truncated.rstrip() + "..."


def to_non_negative_int(value: Any) -> int:
    """
    Normalize a backend count to a non-negative integer.

    Non-numeric, missing and negative values become 0.
    """
    if isinstance(value, bool) or value is None:
        return 0
    try:
        number = int(float(value))
    except (TypeError, ValueError, OverflowError):
        return 0
    return max(number, 0)


def safe_get(data: Dict[str, Any], *keys, default: Any = None) -> Any:
    """
    Safely get a value from a nested dictionary.

    Args:
        data: The dictionary to search
        *keys: The keys to follow
        default: Default value if key doesn't exist

    Returns:
        The value at the specified keys or the default value
    """
    for key in keys:
        try:
            data = data[key]
        except (KeyError, TypeError, IndexError):
            return default
    return data


def resolve_timezone(name: Optional[str]) -> tzinfo:
    """
    Resolve a site timezone setting to a tzinfo.

    Accepts IANA names ("Europe/Berlin") and fixed offsets ("+02:00", "UTC-5").

    Raises:
        ValueError: If the value is neither.
    """
    if not name or name.upper() == "UTC":
        return timezone.utc

    match = _OFFSET.match(name.strip())
    if match:
        sign, hours, minutes = match.groups()
        offset = timedelta(hours=int(hours), minutes=int(minutes or 0))
        return timezone(-offset if sign == '-' else offset)

    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValueError(f"Unknown SITE_TIMEZONE: {name!r}")


def is_zero_date(value: Any) -> bool:
    """Return True for unset WordPress dates (None, empty, or the zeroed sentinel)."""
    if value is None:
        return True
    if isinstance(value, datetime):
        return False
    text = str(value).strip()
    return not text or text == ZERO_DATE or text.startswith("0000-00-00")


def parse_wp_datetime(value: Any, tz: tzinfo = timezone.utc) -> Optional[datetime]:
    """
    Parse a WordPress "Y-m-d H:i:s" value as a time in `tz`.

    Returns:
        An aware datetime in UTC, or None for unset or unparseable values.
    """
    if is_zero_date(value):
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = datetime.strptime(str(value).strip()[:19], WP_DATE_FORMAT)
        except ValueError:
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=tz)
    return parsed.astimezone(timezone.utc)


def resolve_post_timestamp(gmt_value: Any, local_value: Any, site_tz: tzinfo, now: datetime) -> datetime:
    """
    Resolve a post timestamp, falling back to local time if GMT is zeroed.

    Drafts often carry a zeroed GMT date because they were never published.
    The site-local date is then converted with the site timezone, and when
    both are unset the current time is used.
    """
    resolved = parse_wp_datetime(gmt_value)
    if resolved is not None:
        return resolved

    resolved = parse_wp_datetime(local_value, site_tz)
    if resolved is not None:
        return resolved

    return now


def format_iso8601(value: datetime) -> str:
    """Format an aware datetime as ISO 8601 in UTC, e.g. 2024-01-15T10:30:00+00:00."""
    return value.astimezone(timezone.utc).replace(microsecond=0).isoformat()


def format_wp_datetime(value: datetime) -> str:
    """Format an aware datetime as a WordPress GMT column value."""
    return value.astimezone(timezone.utc).strftime(WP_DATE_FORMAT)


def whole_days_between(earlier: datetime, later: datetime) -> int:
    """Floor of the number of days from `earlier` to `later`, never negative."""
    seconds = (later - earlier).total_seconds()
    return max(int(seconds // DAY_IN_SECONDS), 0)
