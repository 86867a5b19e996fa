"""
Tests for the Database Module

Tests for DatabaseConnection (connection management and query execution)
and WordPressContentStore (post queries, categories and permalinks).
"""

import pytest
from unittest.mock import MagicMock, patch
import pandas as pd
import pyodbc
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from data.database import DatabaseConnection, WordPressContentStore, build_permalink
from data.models import PostRecord
from utils.exceptions import QueryError


def post_row(post_id=1, **overrides):
    row = {
        "ID": post_id,
        "post_title": f"Post {post_id}",
        "post_content": "Body text",
        "post_status": "publish",
        "post_type": "post",
        "post_name": f"post-{post_id}",
        "post_date": "2024-01-15 12:30:00",
        "post_date_gmt": "2024-01-15 10:30:00",
        "post_modified": "2024-02-01 09:00:00",
        "post_modified_gmt": "2024-02-01 07:00:00",
    }
    row.update(overrides)
    return row


@pytest.fixture
def connection():
    """A mocked DatabaseConnection."""
    return MagicMock(spec=DatabaseConnection)


@pytest.fixture
def store(connection):
    """WordPressContentStore on the mocked connection."""
    return WordPressContentStore(connection, table_prefix="wp_")


class TestConnectionManagement:
    """Tests for database connection management."""

    def test_connect_success(self, mock_db_connection):
        """
        Test successful database connection establishment.

        Verifies that connect() returns True and sets UTF-8 decoding
        when pyodbc.connect() succeeds.
        """
        mock_conn, mock_cursor = mock_db_connection

        db = DatabaseConnection()
        result = db.connect()

        assert result is True
        assert db.conn is mock_conn
        mock_conn.setencoding.assert_called_once_with(encoding='utf-8')

    def test_connect_failure(self):
        """
        Test connection failure handling.

        Verifies that connect() returns False and conn remains None
        when pyodbc.connect() raises an exception.
        """
        with patch('pyodbc.connect') as mock_connect:
            mock_connect.side_effect = Exception("Connection failed")

            db = DatabaseConnection()
            result = db.connect()

            assert result is False
            assert db.conn is None

    def test_connect_driver_error(self):
        """Driver errors are handled like any other connection failure."""
        with patch('pyodbc.connect') as mock_connect:
            mock_connect.side_effect = pyodbc.Error("08001", "Can't connect to MySQL server")

            db = DatabaseConnection()

            assert db.connect() is False
            assert db.conn is None

    def test_close_success(self, mock_db_connection):
        """close() closes the connection and clears it."""
        mock_conn, mock_cursor = mock_db_connection

        db = DatabaseConnection()
        db.connect()
        db.close()

        mock_conn.close.assert_called_once()
        assert db.conn is None

    def test_close_when_not_connected(self):
        """close() without a connection does nothing."""
        db = DatabaseConnection()
        db.close()

        assert db.conn is None

    def test_close_handles_exception(self, mock_db_connection):
        """Errors while closing are logged, not raised."""
        mock_conn, mock_cursor = mock_db_connection
        mock_conn.close.side_effect = Exception("Close failed")

        db = DatabaseConnection()
        db.connect()
        db.close()

        assert db.conn is None


class TestQueryExecution:
    """Tests for query execution functionality."""

    def test_execute_query_success(self, mock_db_connection):
        """
        Test successful query execution.

        Verifies that execute_query() returns results as a list of
        dictionaries keyed by column name.
        """
        mock_conn, mock_cursor = mock_db_connection
        mock_cursor.description = [('ID',), ('name',)]
        mock_cursor.fetchall.return_value = [(1, 'News'), (2, 'Tech')]

        db = DatabaseConnection()
        result = db.execute_query("SELECT ID, name FROM wp_terms")

        assert result == [{'ID': 1, 'name': 'News'}, {'ID': 2, 'name': 'Tech'}]

    def test_execute_query_with_params(self, mock_db_connection):
        """Parameters are passed to cursor.execute()."""
        mock_conn, mock_cursor = mock_db_connection
        mock_cursor.description = [('ID',)]
        mock_cursor.fetchall.return_value = [(1,)]

        db = DatabaseConnection()
        db.execute_query("SELECT ID FROM wp_posts WHERE ID = ?", (1,))

        mock_cursor.execute.assert_called_with("SELECT ID FROM wp_posts WHERE ID = ?", (1,))

    def test_execute_query_without_result_set(self, mock_db_connection):
        """Statements without a result set return an empty list."""
        mock_conn, mock_cursor = mock_db_connection
        mock_cursor.description = None

        db = DatabaseConnection()

        assert db.execute_query("SET NAMES utf8mb4") == []

    def test_execute_query_failure(self, mock_db_connection):
        """Driver errors are raised as QueryError."""
        mock_conn, mock_cursor = mock_db_connection
        mock_cursor.execute.side_effect = Exception("SQL Error")

        db = DatabaseConnection()
        with pytest.raises(QueryError):
            db.execute_query("SELECT * FROM invalid_table")

    def test_execute_query_without_connection(self):
        """A failed connect raises QueryError."""
        with patch('pyodbc.connect', side_effect=Exception("down")):
            db = DatabaseConnection()
            with pytest.raises(QueryError):
                db.execute_query("SELECT 1")

    def test_read_frame(self, mock_db_connection):
        """read_frame runs the query through pandas on the open connection."""
        mock_conn, mock_cursor = mock_db_connection
        frame = pd.DataFrame([{"ID": 1}])

        with patch('data.database.pd.read_sql', return_value=frame) as mock_read_sql:
            db = DatabaseConnection()
            result = db.read_frame("SELECT ID FROM wp_posts WHERE ID = ?", params=[1])

        assert result is frame
        mock_read_sql.assert_called_once_with("SELECT ID FROM wp_posts WHERE ID = ?", mock_conn, params=[1])

    def test_read_frame_failure(self, mock_db_connection):
        """pandas errors are raised as QueryError."""
        with patch('data.database.pd.read_sql', side_effect=Exception("bad SQL")):
            db = DatabaseConnection()
            with pytest.raises(QueryError):
                db.read_frame("SELECT")


class TestQueryPosts:
    """Tests for WordPressContentStore.query_posts."""

    def test_builds_records_from_frame(self, store, connection):
        """Rows become PostRecords with dates kept as text."""
        connection.read_frame.return_value = pd.DataFrame([post_row(1), post_row(2, post_title="")])

        posts = store.query_posts("publish", "post_date_gmt", "2025-03-03 12:00:00", limit=30)

        assert [p.id for p in posts] == [1, 2]
        assert posts[0].date_gmt == "2024-01-15 10:30:00"
        assert posts[0].slug == "post-1"
        assert posts[1].title == ""

    def test_query_parameters(self, store, connection):
        """Status, cutoff and limit are bound; the column and order are in the SQL."""
        connection.read_frame.return_value = pd.DataFrame([])

        store.query_posts("draft", "post_modified_gmt", "2024-12-03 12:00:00",
                          order_by="modified", order="asc", limit=20)

        query = connection.read_frame.call_args[0][0]
        params = connection.read_frame.call_args[1]["params"]
        assert "FROM wp_posts" in query
        assert "post_modified_gmt < ?" in query
        assert "ORDER BY post_modified ASC" in query
        assert params == ["post", "draft", "2024-12-03 12:00:00", 20]

    def test_zeroed_dates_pass_through(self, store, connection):
        """Zeroed GMT values reach the caller unchanged."""
        connection.read_frame.return_value = pd.DataFrame(
            [post_row(1, post_status="draft", post_date_gmt="0000-00-00 00:00:00")]
        )

        posts = store.query_posts("draft", "post_modified_gmt", "2025-01-01 00:00:00")

        assert posts[0].date_gmt == "0000-00-00 00:00:00"

    @pytest.mark.parametrize("kwargs", [
        {"date_column": "post_title"},
        {"order_by": "title"},
        {"order": "SIDEWAYS"},
    ])
    def test_rejects_unknown_columns(self, store, connection, kwargs):
        """Only known columns and directions are interpolated."""
        args = {"status": "publish", "date_column": "post_date_gmt", "before": "2025-01-01 00:00:00"}
        args.update(kwargs)

        with pytest.raises(ValueError):
            store.query_posts(**args)
        connection.read_frame.assert_not_called()

    def test_table_prefix(self, connection, site_settings, monkeypatch):
        """The configured table prefix is used when none is passed."""
        monkeypatch.setattr(site_settings, "DB_TABLE_PREFIX", "blog_")
        connection.read_frame.return_value = pd.DataFrame([])

        WordPressContentStore(connection).query_posts("publish", "post_date_gmt", "2025-01-01 00:00:00")

        assert "FROM blog_posts" in connection.read_frame.call_args[0][0]


class TestPostLookups:
    """Tests for get_post, get_categories and get_permalink."""

    def test_get_post(self, store, connection):
        """A single row becomes a PostRecord."""
        connection.execute_query.return_value = [post_row(5, post_status="draft")]

        post = store.get_post(5)

        assert post.id == 5
        assert post.status == "draft"
        assert connection.execute_query.call_args[0][1] == (5,)

    def test_get_post_missing(self, store, connection):
        """Unknown IDs give None."""
        connection.execute_query.return_value = []
        assert store.get_post(99) is None

    def test_get_categories(self, store, connection):
        """Category names are returned in query order."""
        connection.execute_query.return_value = [{"name": "News"}, {"name": "Tech"}]

        assert store.get_categories(1) == ["News", "Tech"]
        query = connection.execute_query.call_args[0][0]
        assert "tt.taxonomy = 'category'" in query
        assert "ORDER BY t.name ASC" in query

    def test_plain_permalink(self, store, connection):
        """Without a structure the ?p=ID form is used and no query runs."""
        assert store.get_permalink(7) == "https://example.com/?p=7"
        connection.execute_query.assert_not_called()

    def test_structured_permalink(self, store, connection, site_settings, monkeypatch):
        """Structure tags are filled from the post's local date and slug."""
        monkeypatch.setattr(site_settings, "PERMALINK_STRUCTURE", "/%year%/%monthnum%/%postname%/")
        connection.execute_query.return_value = [post_row(7, post_name="hello-world")]

        assert store.get_permalink(7) == "https://example.com/2024/01/hello-world/"

    def test_structured_permalink_falls_back_without_slug(self, store, connection, site_settings, monkeypatch):
        """Posts without a slug use the plain form."""
        monkeypatch.setattr(site_settings, "PERMALINK_STRUCTURE", "/%postname%/")
        connection.execute_query.return_value = [post_row(7, post_name="")]

        assert store.get_permalink(7) == "https://example.com/?p=7"


class TestBuildPermalink:
    """Tests for build_permalink."""

    def test_uses_site_local_date(self, site_settings, monkeypatch):
        """Date tags use the site-local date, not GMT."""
        monkeypatch.setattr(site_settings, "SITE_TIMEZONE", "+02:00")
        post = PostRecord(id=3, slug="late-post", date="2024-01-01 01:00:00", date_gmt="2023-12-31 23:00:00")

        url = build_permalink("https://example.com", "/%year%/%monthnum%/%day%/%postname%/", post)

        assert url == "https://example.com/2024/01/01/late-post/"

    def test_post_id_tag(self):
        """%post_id% is filled from the record."""
        post = PostRecord(id=3, slug="x", date="2024-01-01 01:00:00")
        assert build_permalink("https://example.com", "/archives/%post_id%", post) == "https://example.com/archives/3"

    def test_unfillable_tag(self):
        """Unknown tags make the structure unusable."""
        post = PostRecord(id=3, slug="x", date="2024-01-01 01:00:00")
        assert build_permalink("https://example.com", "/%category%/%postname%/", post) is None
