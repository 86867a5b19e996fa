"""
Configuration Settings for Content Strategist

This module centralizes all configuration settings for the Content Strategist
service, including environment variables, API credentials, and application
constants.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

# Determine the application root directory
APP_ROOT = Path(__file__).resolve().parent.parent

# Load environment variables from .env file
load_dotenv(dotenv_path=os.path.join(APP_ROOT, '.env'))


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


# =============================================================================
# Site Settings
# =============================================================================

SITE_URL = os.getenv("SITE_URL", "").rstrip("/")
SITE_TIMEZONE = os.getenv("SITE_TIMEZONE", "UTC")       # IANA name or +HH:MM offset
PERMALINK_STRUCTURE = os.getenv("PERMALINK_STRUCTURE", "")  # Empty means plain ?p=ID links

# =============================================================================
# Database Settings (WordPress MySQL database)
# =============================================================================

DB_DRIVER = os.getenv("DB_DRIVER", "MySQL ODBC 8.0 Unicode Driver")
DB_SERVER = os.getenv("DB_SERVER", "")
DB_PORT = int(os.getenv("DB_PORT", "3306"))
DB_NAME = os.getenv("DB_NAME", "")
DB_USER = os.getenv("DB_USER", "")
DB_PASSWORD = os.getenv("DB_PASSWORD", "")
DB_TABLE_PREFIX = os.getenv("DB_TABLE_PREFIX", "wp_")

# Build connection string safely (validation happens in validate_settings())
DB_CONNECTION_STRING = (
    f"DRIVER={{{DB_DRIVER}}}; "
    f"SERVER={DB_SERVER}; "
    f"PORT={DB_PORT}; "
    f"DATABASE={DB_NAME}; "
    f"UID={DB_USER}; "
    f"PWD={DB_PASSWORD}; "
    f"CHARSET=utf8mb4;"
) if all([DB_SERVER, DB_NAME, DB_USER, DB_PASSWORD]) else ""

# =============================================================================
# Jetpack Stats (WordPress.com REST API) Settings
# =============================================================================

WPCOM_API_BASE = "https://public-api.wordpress.com/rest/v1.1"
WPCOM_SITE_ID = os.getenv("WPCOM_SITE_ID")
WPCOM_ACCESS_TOKEN = os.getenv("WPCOM_ACCESS_TOKEN")
JETPACK_STATS_ENABLED = _env_bool("JETPACK_STATS_ENABLED", True)
WPCOM_REQUEST_TIMEOUT = 10           # Seconds timeout for stats requests
STATS_OVERFETCH_FACTOR = 3           # Ranked records requested per result, excluded entries are skipped locally
WPCOM_STATS_MAX_RESULTS = 500        # Upper bound for the "max" parameter of ranked Stats endpoints

# =============================================================================
# Cache Settings
# =============================================================================

CACHE_PREFIX = "ai_cs_"
CACHE_EXPIRATION = 900               # 15 minutes for every analytics-backed result

# =============================================================================
# Ability Settings
# =============================================================================

ABILITY_NAMESPACE = "content-strategist"
ABILITY_CATEGORY = "content"
REQUIRED_CAPABILITY = "edit_posts"

MCP_SERVER_NAME = os.getenv("MCP_SERVER_NAME", "content-strategist")
MCP_USER_CAPABILITIES = [
    cap.strip() for cap in os.getenv("MCP_USER_CAPABILITIES", "edit_posts").split(",") if cap.strip()
]

# =============================================================================
# Content Processing Settings
# =============================================================================

EXCERPT_LENGTH = 150                 # Max excerpt length (before "...")
EXCERPT_BOUNDARY_RATIO = 0.8         # Only break at a space past this share of EXCERPT_LENGTH
UNDERPERFORMING_OVERFETCH_FACTOR = 3 # Candidates fetched per requested underperforming post
REDACTED_SEARCH_TERM = "Unknown Search Terms"
UNTITLED_TITLE = "Untitled"
