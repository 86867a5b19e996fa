"""
MCP Server for Content Strategist

Exposes the registered abilities as Model Context Protocol tools so AI
assistants can call them. Every call goes through the ability registry, so
permission checks, input validation and error shaping are identical to any
other transport.
"""

from typing import Any, Dict, List, Optional, Union

from mcp.server.fastmcp import FastMCP

from config import settings
from services.abilities import ability_name
from services.registry import User
from utils.logger import get_logger

logger = get_logger(__name__)

Result = Union[List[Dict[str, Any]], Dict[str, Any]]


def build_mcp_server(app, user: Optional[User] = None) -> FastMCP:
    """
    Build a FastMCP server bound to an application context.

    Args:
        app: The ContentStrategist application context.
        user: Caller the tools run as; defaults to a user holding
            settings.MCP_USER_CAPABILITIES.

    Returns:
        FastMCP: The configured server, ready for run().
    """
    mcp = FastMCP(settings.MCP_SERVER_NAME)
    caller = user or User.with_capabilities("mcp", settings.MCP_USER_CAPABILITIES)

    def invoke(slug: str, **arguments: Any) -> Result:
        logger.info(f"MCP call {slug} {arguments}")
        return app.registry.execute(ability_name(slug), arguments, user=caller)

    def describe(slug: str) -> str:
        return app.registry.get(ability_name(slug)).description

    @mcp.tool(name="get-top-posts", description=describe("get-top-posts"))
    def get_top_posts(days: int = 30, limit: int = 10) -> Result:
        return invoke("get-top-posts", days=days, limit=limit)

    @mcp.tool(name="get-search-terms", description=describe("get-search-terms"))
    def get_search_terms(days: int = 30, limit: int = 20) -> Result:
        return invoke("get-search-terms", days=days, limit=limit)

    @mcp.tool(name="get-stale-drafts", description=describe("get-stale-drafts"))
    def get_stale_drafts(days_old: int = 180, limit: int = 20) -> Result:
        return invoke("get-stale-drafts", days_old=days_old, limit=limit)

    @mcp.tool(name="get-underperforming-posts", description=describe("get-underperforming-posts"))
    def get_underperforming_posts(days_published: int = 90, max_views: int = 100, limit: int = 20) -> Result:
        return invoke("get-underperforming-posts", days_published=days_published,
                      max_views=max_views, limit=limit)

    return mcp
