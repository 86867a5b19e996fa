"""
Ability Definitions for Content Strategist

Declares the four content abilities (labels, descriptions, input and output
schemas) and binds them to the stats and content services:
- content-strategist/get-top-posts
- content-strategist/get-search-terms
- content-strategist/get-stale-drafts
- content-strategist/get-underperforming-posts
"""

from typing import Any, Dict

from config import settings
from services.content_service import ContentService
from services.registry import Ability, AbilityRegistry, require_capability
from services.stats_service import StatsService

# Output item properties shared by several abilities
POST_ID = {"type": "integer", "description": "The WordPress post ID"}
TITLE = {"type": "string", "description": "The post title"}
URL = {"type": "string", "description": "The post permalink"}
DATE_PUBLISHED = {"type": "string", "description": "Publication date in ISO 8601 format"}
CATEGORIES = {"type": "array", "items": {"type": "string"}, "description": "List of category names"}
WORD_COUNT = {"type": "integer", "description": "Approximate word count of the content"}


def _limit(default: int, maximum: int, noun: str) -> Dict[str, Any]:
    return {
        "type": "integer",
        "description": f"Maximum number of {noun} to return (1-{maximum})",
        "default": default,
        "minimum": 1,
        "maximum": maximum,
    }


def _array_of(properties: Dict[str, Any]) -> Dict[str, Any]:
    return {"type": "array", "items": {"type": "object", "properties": properties}}


TOP_POSTS_INPUT = {
    "type": "object",
    "additionalProperties": False,
    "properties": {
        "days": {
            "type": "integer",
            "description": "Number of days to analyze (7, 30, or 90)",
            "default": 30,
            "enum": [7, 30, 90],
        },
        "limit": _limit(10, 50, "posts"),
    },
}

TOP_POSTS_OUTPUT = _array_of({
    "post_id": POST_ID,
    "title": TITLE,
    "url": URL,
    "views": {"type": "integer", "description": "Total views in the period"},
    "date_published": DATE_PUBLISHED,
    "categories": CATEGORIES,
})

SEARCH_TERMS_INPUT = {
    "type": "object",
    "additionalProperties": False,
    "properties": {
        "days": {
            "type": "integer",
            "description": "Number of days to analyze",
            "default": 30,
            "minimum": 1,
            "maximum": 365,
        },
        "limit": _limit(20, 100, "terms"),
    },
}

SEARCH_TERMS_OUTPUT = _array_of({
    "term": {"type": "string", "description": "The search term"},
    "count": {"type": "integer", "description": "Number of times this term was searched"},
})

STALE_DRAFTS_INPUT = {
    "type": "object",
    "properties": {
        "days_old": {
            "type": "integer",
            "description": "Find drafts not modified in this many days",
            "default": 180,
            "minimum": 7,
            "maximum": 730,
        },
        "limit": _limit(20, 50, "drafts"),
    },
}

STALE_DRAFTS_OUTPUT = _array_of({
    "post_id": POST_ID,
    "title": {"type": "string", "description": 'The draft title (or "Untitled" if empty)'},
    "excerpt": {"type": "string", "description": "First 150 characters of content"},
    "date_created": {"type": "string", "description": "Creation date in ISO 8601 format"},
    "date_modified": {"type": "string", "description": "Last modified date in ISO 8601 format"},
    "days_since_modified": {"type": "integer", "description": "Number of days since last modification"},
    "categories": CATEGORIES,
    "word_count": WORD_COUNT,
})

UNDERPERFORMING_INPUT = {
    "type": "object",
    "properties": {
        "days_published": {
            "type": "integer",
            "description": "Only include posts published at least this many days ago "
                           "(to give them time to get traffic)",
            "default": 90,
            "minimum": 30,
            "maximum": 730,
        },
        "max_views": {
            "type": "integer",
            "description": 'Consider "underperforming" if fewer than this many views',
            "default": 100,
            "minimum": 0,
            "maximum": 10000,
        },
        "limit": _limit(20, 50, "posts"),
    },
}

UNDERPERFORMING_OUTPUT = _array_of({
    "post_id": POST_ID,
    "title": TITLE,
    "url": URL,
    "date_published": DATE_PUBLISHED,
    "views": {"type": "integer", "description": "Total views (requires Jetpack, 0 if unavailable)"},
    "categories": CATEGORIES,
    "word_count": WORD_COUNT,
})


def ability_name(slug: str) -> str:
    return f"{settings.ABILITY_NAMESPACE}/{slug}"


def register_ability_category(registry: AbilityRegistry) -> None:
    """Register the 'content' category the abilities are filed under."""
    registry.register_category(
        settings.ABILITY_CATEGORY,
        label="Content",
        description="Abilities for content analysis, auditing, and strategy.",
    )


def register_abilities(registry: AbilityRegistry, stats_service: StatsService,
                       content_service: ContentService) -> None:
    """
    Register all content strategist abilities.

    Stats abilities come first, then the content audit abilities. All four
    share one permission predicate.
    """
    can_edit_posts = require_capability(settings.REQUIRED_CAPABILITY)
    meta = {"show_in_rest": True}

    registry.register(Ability(
        name=ability_name("get-top-posts"),
        label="Get Top Posts",
        description="Returns the site's top performing posts by views. Useful for "
                    "understanding what content resonates with your audience.",
        category=settings.ABILITY_CATEGORY,
        input_schema=TOP_POSTS_INPUT,
        output_schema=TOP_POSTS_OUTPUT,
        execute_callback=stats_service.get_top_posts,
        permission_callback=can_edit_posts,
        meta=dict(meta),
    ))

    registry.register(Ability(
        name=ability_name("get-search-terms"),
        label="Get Search Terms",
        description="Returns search terms people used to find your site. Useful for "
                    "identifying content opportunities and SEO gaps.",
        category=settings.ABILITY_CATEGORY,
        input_schema=SEARCH_TERMS_INPUT,
        output_schema=SEARCH_TERMS_OUTPUT,
        execute_callback=stats_service.get_search_terms,
        permission_callback=can_edit_posts,
        meta=dict(meta),
    ))

    registry.register(Ability(
        name=ability_name("get-stale-drafts"),
        label="Get Stale Drafts",
        description="Finds draft posts that have been sitting unfinished for a specified "
                    "period. Useful for identifying content to complete or delete.",
        category=settings.ABILITY_CATEGORY,
        input_schema=STALE_DRAFTS_INPUT,
        output_schema=STALE_DRAFTS_OUTPUT,
        execute_callback=content_service.get_stale_drafts,
        permission_callback=can_edit_posts,
        meta=dict(meta),
    ))

    registry.register(Ability(
        name=ability_name("get-underperforming-posts"),
        label="Get Underperforming Posts",
        description="Finds published posts with low traffic. Useful for identifying content "
                    "to refresh, promote, or remove. Requires Jetpack for view data.",
        category=settings.ABILITY_CATEGORY,
        input_schema=UNDERPERFORMING_INPUT,
        output_schema=UNDERPERFORMING_OUTPUT,
        execute_callback=content_service.get_underperforming_posts,
        permission_callback=can_edit_posts,
        meta=dict(meta),
    ))
