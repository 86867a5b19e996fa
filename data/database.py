"""
Database Module for Content Strategist

This module handles the connection to the WordPress database and the content
store queries the abilities need: posts by status and date, single posts,
category names and permalinks.
"""

import re
from datetime import datetime
from typing import Optional, List, Dict, Any

import pyodbc
import pandas as pd

from config import settings
from data.models import PostRecord
from utils.exceptions import QueryError
from utils.helpers import parse_wp_datetime, resolve_timezone
from utils.logger import get_logger

logger = get_logger(__name__)

DATE_COLUMNS = ("post_date", "post_date_gmt", "post_modified", "post_modified_gmt")
ORDER_COLUMNS = {"date": "post_date", "modified": "post_modified"}
ORDER_DIRECTIONS = ("ASC", "DESC")

_PERMALINK_TAG = re.compile(r'%([a-z_]+)%')


class DatabaseConnection:
    """Database connection manager for the WordPress database."""

    def __init__(self):
        """Initialize the database connection."""
        self.conn = None
        pyodbc.pooling = False

    def connect(self) -> bool:
        """
        Establish a connection to the database.

        Returns:
            bool: True if connection was successful, False otherwise.
        """
        try:
            self.conn = pyodbc.connect(settings.DB_CONNECTION_STRING)
            self.conn.setdecoding(pyodbc.SQL_CHAR, encoding='utf-8')
            self.conn.setdecoding(pyodbc.SQL_WCHAR, encoding='utf-8')
            self.conn.setencoding(encoding='utf-8')
            logger.info("Successfully connected to database")
            return True
        except Exception as e:
            logger.error(f"Failed to connect to database: {e}")
            self.conn = None
            return False

    def close(self) -> None:
        """Close the database connection."""
        try:
            if self.conn:
                self.conn.close()
                logger.info("Database connection closed")
        except Exception as e:
            logger.error(f"Error closing database connection: {e}")
        finally:
            self.conn = None

    def execute_query(self, query: str, params: Optional[tuple] = None) -> List[Dict[str, Any]]:
        """
        Execute a read query and return the results.

        Args:
            query: The SQL query to execute.
            params: Query parameters (optional).

        Returns:
            List[Dict]: Query results as a list of dictionaries.

        Raises:
            QueryError: If there is no connection or the query fails.
        """
        if not self.conn and not self.connect():
            raise QueryError("No database connection available")

        try:
            cursor = self.conn.cursor()
            if params:
                cursor.execute(query, params)
            else:
                cursor.execute(query)

            if not cursor.description:
                return []

            columns = [column[0] for column in cursor.description]
            return [dict(zip(columns, row)) for row in cursor.fetchall()]

        except QueryError:
            raise
        except Exception as e:
            logger.error(f"Error executing query: {e}")
            raise QueryError(f"Query failed: {e}") from e

    def read_frame(self, query: str, params: Optional[list] = None) -> pd.DataFrame:
        """
        Execute a read query through pandas.

        Raises:
            QueryError: If there is no connection or the query fails.
        """
        if not self.conn and not self.connect():
            raise QueryError("No database connection available")

        try:
            return pd.read_sql(query, self.conn, params=params)
        except Exception as e:
            logger.error(f"Error reading query into DataFrame: {e}")
            raise QueryError(f"Query failed: {e}") from e


class WordPressContentStore:
    """Content store backed by the WordPress posts and taxonomy tables."""

    # Dates are selected as text so zeroed dates reach the caller unchanged
    POST_COLUMNS = """
        ID, post_title, post_content, post_status, post_type, post_name,
        CAST(post_date AS CHAR) AS post_date,
        CAST(post_date_gmt AS CHAR) AS post_date_gmt,
        CAST(post_modified AS CHAR) AS post_modified,
        CAST(post_modified_gmt AS CHAR) AS post_modified_gmt
    """

    def __init__(self, connection: Optional[DatabaseConnection] = None, table_prefix: Optional[str] = None):
        """
        Initialize the content store.

        Args:
            connection: Database connection; a new one is created when omitted.
            table_prefix: WordPress table prefix; defaults to settings.DB_TABLE_PREFIX.
        """
        self.connection = connection or DatabaseConnection()
        self.prefix = table_prefix if table_prefix is not None else settings.DB_TABLE_PREFIX

    def _table(self, name: str) -> str:
        return f"{self.prefix}{name}"

    def query_posts(self, status: str, date_column: str, before: str,
                    order_by: str = "date", order: str = "ASC", limit: int = 10) -> List[PostRecord]:
        """
        Query posts of one status whose date column is before a cutoff.

        Args:
            status: Post status, e.g. 'draft' or 'publish'.
            date_column: Date column compared with the cutoff.
            before: Exclusive cutoff as a "Y-m-d H:i:s" value.
            order_by: 'date' or 'modified'.
            order: 'ASC' or 'DESC'.
            limit: Maximum number of posts.

        Returns:
            List[PostRecord]: Matching posts in the requested order.
        """
        if date_column not in DATE_COLUMNS:
            raise ValueError(f"Unsupported date column: {date_column}")
        if order_by not in ORDER_COLUMNS:
            raise ValueError(f"Unsupported order_by: {order_by}")
        order = order.upper()
        if order not in ORDER_DIRECTIONS:
            raise ValueError(f"Unsupported order: {order}")

        query = f"""
        SELECT {self.POST_COLUMNS}
        FROM {self._table('posts')}
        WHERE post_type = ?
        AND post_status = ?
        AND {date_column} < ?
        ORDER BY {ORDER_COLUMNS[order_by]} {order}, ID {order}
        LIMIT ?
        """

        frame = self.connection.read_frame(query, params=["post", status, before, int(limit)])
        posts = [PostRecord.from_row(row) for row in frame.to_dict(orient="records")]
        logger.debug(f"Fetched {len(posts)} '{status}' posts with {date_column} before {before}")
        return posts

    def get_post(self, post_id: int) -> Optional[PostRecord]:
        """Retrieve a single post by ID, or None if it does not exist."""
        query = f"SELECT {self.POST_COLUMNS} FROM {self._table('posts')} WHERE ID = ?"
        rows = self.connection.execute_query(query, (int(post_id),))
        if not rows:
            return None
        return PostRecord.from_row(rows[0])

    def get_categories(self, post_id: int) -> List[str]:
        """Return the category names assigned to a post, ordered by name."""
        query = f"""
        SELECT t.name
        FROM {self._table('terms')} t
        INNER JOIN {self._table('term_taxonomy')} tt ON tt.term_id = t.term_id
        INNER JOIN {self._table('term_relationships')} tr ON tr.term_taxonomy_id = tt.term_taxonomy_id
        WHERE tt.taxonomy = 'category'
        AND tr.object_id = ?
        ORDER BY t.name ASC
        """
        rows = self.connection.execute_query(query, (int(post_id),))
        return [str(row["name"]) for row in rows]

    def get_permalink(self, post_id: int) -> str:
        """
        Return the public URL of a post.

        Uses settings.PERMALINK_STRUCTURE when every tag in it can be filled,
        otherwise the plain ?p=ID form WordPress always resolves.
        """
        plain = f"{settings.SITE_URL}/?p={int(post_id)}"
        structure = settings.PERMALINK_STRUCTURE
        if not structure:
            return plain

        post = self.get_post(post_id)
        if post is None or not post.slug:
            return plain

        return build_permalink(settings.SITE_URL, structure, post) or plain


def build_permalink(site_url: str, structure: str, post: PostRecord) -> Optional[str]:
    """
    Fill a WordPress permalink structure for a post.

    Returns:
        The URL, or None if the structure uses a tag that cannot be filled.
    """
    local_date = parse_wp_datetime(post.date, resolve_timezone(settings.SITE_TIMEZONE))
    if local_date is not None:
        local_date = local_date.astimezone(resolve_timezone(settings.SITE_TIMEZONE))

    def date_part(fmt: str) -> Optional[str]:
        return local_date.strftime(fmt) if isinstance(local_date, datetime) else None

    values = {
        "year": date_part("%Y"),
        "monthnum": date_part("%m"),
        "day": date_part("%d"),
        "hour": date_part("%H"),
        "minute": date_part("%M"),
        "second": date_part("%S"),
        "postname": post.slug,
        "post_id": str(post.id),
    }

    missing = [tag for tag in _PERMALINK_TAG.findall(structure) if not values.get(tag)]
    if missing:
        logger.debug(f"Permalink tags {missing} unavailable for post {post.id}, using plain link")
        return None

    path = _PERMALINK_TAG.sub(lambda m: values[m.group(1)], structure)
    return f"{site_url}/{path.lstrip('/')}"
