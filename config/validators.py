"""
Configuration Validation for Content Strategist

This module contains configuration validation logic and a startup summary
of the active configuration.
"""

import logging

from utils.exceptions import ConfigurationError
from utils.helpers import resolve_timezone


def validate_settings():
    """
    Validate that all required settings are properly configured.

    Raises:
        ConfigurationError: If required settings are missing or invalid.
    """
    # Import settings here to avoid circular imports
    from config import settings

    logger = logging.getLogger(__name__)
    errors = []

    # Required environment variables
    required_vars = [
        ("DB_SERVER", settings.DB_SERVER),
        ("DB_NAME", settings.DB_NAME),
        ("DB_USER", settings.DB_USER),
        ("DB_PASSWORD", settings.DB_PASSWORD),
        ("SITE_URL", settings.SITE_URL),
    ]

    for var_name, var_value in required_vars:
        if not var_value:
            errors.append(f"Missing required environment variable: {var_name}")

    # Verify database connection string was built successfully
    if not settings.DB_CONNECTION_STRING:
        errors.append("Database connection string could not be built. Check DB_SERVER, DB_NAME, DB_USER, DB_PASSWORD.")

    if not settings.DB_TABLE_PREFIX.replace("_", "").isalnum():
        errors.append(f"DB_TABLE_PREFIX must be alphanumeric with underscores, got {settings.DB_TABLE_PREFIX!r}")

    # Stats credentials are optional; abilities that need them answer 503
    if not (settings.WPCOM_SITE_ID and settings.WPCOM_ACCESS_TOKEN):
        logger.warning("WPCOM_SITE_ID or WPCOM_ACCESS_TOKEN not set. "
                       "Stats-related abilities will report Jetpack as not connected.")

    try:
        resolve_timezone(settings.SITE_TIMEZONE)
    except ValueError as e:
        errors.append(str(e))

    # Validate numeric settings are within reasonable bounds
    numeric_validations = [
        ("CACHE_EXPIRATION", settings.CACHE_EXPIRATION, 1, 86400),
        ("EXCERPT_LENGTH", settings.EXCERPT_LENGTH, 10, 1000),
        ("EXCERPT_BOUNDARY_RATIO", settings.EXCERPT_BOUNDARY_RATIO, 0.0, 1.0),
        ("UNDERPERFORMING_OVERFETCH_FACTOR", settings.UNDERPERFORMING_OVERFETCH_FACTOR, 1, 20),
        ("WPCOM_REQUEST_TIMEOUT", settings.WPCOM_REQUEST_TIMEOUT, 1, 120),
        ("STATS_OVERFETCH_FACTOR", settings.STATS_OVERFETCH_FACTOR, 1, 20),
        ("WPCOM_STATS_MAX_RESULTS", settings.WPCOM_STATS_MAX_RESULTS, 1, 10000),
    ]

    for name, value, min_val, max_val in numeric_validations:
        if value < min_val or value > max_val:
            errors.append(f"{name} must be between {min_val} and {max_val}, got {value}")

    # Raise all errors at once
    if errors:
        error_msg = "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
        raise ConfigurationError(error_msg)

    return True


def get_config_summary() -> dict:
    """
    Returns a summary of current configuration (without sensitive values).
    Useful for logging startup state.
    """
    from config import settings

    return {
        "site": {
            "url": settings.SITE_URL,
            "timezone": settings.SITE_TIMEZONE,
            "permalinks": settings.PERMALINK_STRUCTURE or "plain",
        },
        "database": {
            "server": settings.DB_SERVER[:20] + "..." if settings.DB_SERVER and len(settings.DB_SERVER) > 20 else settings.DB_SERVER,
            "database": settings.DB_NAME,
            "table_prefix": settings.DB_TABLE_PREFIX,
        },
        "stats": {
            "site_id": settings.WPCOM_SITE_ID,
            "token_configured": bool(settings.WPCOM_ACCESS_TOKEN),
            "enabled": settings.JETPACK_STATS_ENABLED,
        },
        "cache": {
            "prefix": settings.CACHE_PREFIX,
            "expiration_seconds": settings.CACHE_EXPIRATION,
        },
    }
