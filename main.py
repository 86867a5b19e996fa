"""
Content Strategist Application

This is the main entry point for the Content Strategist service.
It wires the WordPress content store, the Jetpack Stats source and the
transient cache into four content abilities, and exposes them to AI
assistants over MCP or runs a single ability from the command line.
"""

import sys
import json
import argparse
import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Union

from config import settings
from config.validators import validate_settings, get_config_summary
from utils.logger import get_logger, setup_file_logging
from utils.exceptions import ContentStrategistError
from data.cache import TransientCache
from data.database import DatabaseConnection, WordPressContentStore
from data.protocols import CacheBackend, ContentStore
from services.protocols import AnalyticsSource
from services.wpcom_client import WPComStatsClient
from services.stats_service import StatsService
from services.content_service import ContentService
from services.registry import AbilityRegistry, User, is_error
from services.abilities import register_ability_category, register_abilities

# Set up logging
logger = get_logger(__name__)


class ContentStrategist:
    """
    Application context for the Content Strategist.

    Constructed once at startup and passed to whatever transport serves the
    abilities. Categories are registered before abilities.
    """

    def __init__(
        self,
        content_store: Optional[ContentStore] = None,
        analytics: Optional[AnalyticsSource] = None,
        cache: Optional[CacheBackend] = None,
        clock: Optional[Callable[[], datetime]] = None,
        validate: bool = True
    ):
        """
        Initialize the application context.

        Args:
            content_store: Content store (creates a WordPressContentStore if None).
            analytics: Stats source (creates a WPComStatsClient if None).
            cache: Cache backend (creates a TransientCache if None).
            clock: Current-time provider shared by the services.
            validate: Whether to validate settings on init.
        """
        if validate:
            validate_settings()

        self.db = None
        if content_store is None:
            self.db = DatabaseConnection()
            content_store = WordPressContentStore(self.db)

        self.content_store = content_store
        self.analytics = analytics or WPComStatsClient()
        self.cache = cache if cache is not None else TransientCache()

        self.stats_service = StatsService(self.analytics, self.content_store, self.cache, clock)
        self.content_service = ContentService(self.content_store, self.stats_service, clock)

        self.registry = AbilityRegistry()
        register_ability_category(self.registry)
        register_abilities(self.registry, self.stats_service, self.content_service)

    def check_stats_connection(self) -> bool:
        """
        Log a warning when Jetpack Stats is not usable.

        Returns:
            bool: True if the stats abilities can run.
        """
        if self.stats_service.is_available():
            return True

        logger.warning(
            "Jetpack is not connected. Stats-related abilities (top posts, search terms, "
            "underperforming posts) will not be available until Jetpack is connected to WordPress.com."
        )
        return False

    def execute(self, name: str, input: Optional[Dict[str, Any]] = None,
                user: Optional[User] = None) -> Union[List[Any], Dict[str, Any]]:
        """Invoke an ability through the registry."""
        return self.registry.execute(name, input, user)

    def describe_abilities(self) -> List[Dict[str, Any]]:
        """Return the discoverable abilities with their schemas."""
        return [ability.to_dict() for ability in self.registry.list_abilities(show_in_rest_only=True)]

    def deactivate(self) -> int:
        """
        Clean up on shutdown: drop every cached result and close the database.

        Returns:
            int: Number of cache entries removed.
        """
        removed = self.cache.clear(settings.CACHE_PREFIX)
        if self.db is not None:
            self.db.close()
        logger.info(f"Content Strategist deactivated, removed {removed} cache entries")
        return removed


def create_content_strategist(**kwargs) -> ContentStrategist:
    """
    Factory function to create a ContentStrategist with default dependencies.

    Args:
        **kwargs: Optional overrides passed to ContentStrategist.

    Returns:
        ContentStrategist: A configured application context.
    """
    return ContentStrategist(**kwargs)


def parse_arguments(argv: Optional[List[str]] = None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description='Content Strategist')
    mode = parser.add_mutually_exclusive_group(required=True)
    mode.add_argument('--serve', action='store_true', help='Serve the abilities over MCP (stdio)')
    mode.add_argument('--list', action='store_true', help='List the registered abilities as JSON')
    mode.add_argument('--ability', type=str, help='Run one ability, e.g. content-strategist/get-top-posts')
    parser.add_argument('--input', type=str, default='{}', help='Ability input as a JSON object')
    parser.add_argument('--capabilities', type=str, default=None,
                        help='Comma-separated capabilities of the calling user (defaults to MCP_USER_CAPABILITIES)')
    parser.add_argument('--log-file', type=str, default=None, help='Log file path')
    parser.add_argument('--log-level', type=str, choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        default='INFO', help='Logging level')
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the application."""
    args = parse_arguments(argv)

    # Set up logging
    setup_file_logging(args.log_file, getattr(logging, args.log_level))

    capabilities = settings.MCP_USER_CAPABILITIES
    if args.capabilities is not None:
        capabilities = [c.strip() for c in args.capabilities.split(',') if c.strip()]
    user = User.with_capabilities("cli", capabilities)

    logger.info("Starting Content Strategist")
    app = None

    try:
        app = create_content_strategist()
        logger.debug(f"Configuration: {get_config_summary()}")
        app.check_stats_connection()

        if args.list:
            print(json.dumps(app.describe_abilities(), indent=2))
            exit_code = 0
        elif args.ability:
            try:
                ability_input = json.loads(args.input)
            except json.JSONDecodeError as e:
                logger.error(f"--input is not valid JSON: {e}")
                exit_code = 1
            else:
                result = app.execute(args.ability, ability_input, user)
                print(json.dumps(result, indent=2))
                exit_code = 1 if is_error(result) else 0
        else:
            from mcp_server import build_mcp_server
            build_mcp_server(app, user).run()
            exit_code = 0

    except ContentStrategistError as e:
        logger.error(f"Content Strategist error: {e}")
        exit_code = 2
    except Exception as e:
        logger.error(f"Unhandled exception in Content Strategist: {e}", exc_info=True)
        exit_code = 2
    finally:
        if app is not None:
            app.deactivate()

    logger.info(f"Content Strategist finished with exit code {exit_code}")
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
