"""
Unit tests for database operations
"""
import pytest
from unittest.mock import patch, MagicMock
from mindwave.database import Database, test_supabase_connection as check_connection


@pytest.fixture
def mock_client():
    client = MagicMock()
    with patch("mindwave.database.get_supabase_admin_client", return_value=client):
        yield client


class TestDatabase:
    """Test cases for Database class"""

    def test_insert_returns_first_row(self, mock_client):
        mock_data = {"id": "test-id", "name": "Test Record"}
        mock_client.table.return_value.insert.return_value.execute.return_value.data = [mock_data]

        result = Database.insert("test_table", {"name": "Test Record"})

        assert result == mock_data
        mock_client.table.assert_called_with("test_table")

    def test_insert_failure_propagates(self, mock_client):
        mock_client.table.return_value.insert.return_value.execute.side_effect = Exception("Database error")

        with pytest.raises(Exception):
            Database.insert("test_table", {"name": "Test Record"})

    def test_select_with_filters_order_and_limit(self, mock_client):
        mock_data = [{"id": "test-id"}]
        query = mock_client.table.return_value.select.return_value
        query.eq.return_value = query
        query.in_.return_value = query
        query.order.return_value = query
        query.limit.return_value = query
        query.execute.return_value.data = mock_data

        result = Database.select(
            "test_table",
            filters={"published": True},
            in_filters={"id": {"a"}},
            order_by=[("score", True), ("time_taken_ms", False)],
            limit=10,
        )

        assert result == mock_data
        query.eq.assert_called_once_with("published", True)
        query.in_.assert_called_once_with("id", ["a"])
        assert [c.args for c in query.order.call_args_list] == [("score",), ("time_taken_ms",)]
        assert [c.kwargs for c in query.order.call_args_list] == [{"desc": True}, {"desc": False}]
        query.limit.assert_called_once_with(10)

    def test_update_returns_none_when_nothing_matched(self, mock_client):
        query = mock_client.table.return_value.update.return_value
        query.eq.return_value = query
        query.execute.return_value.data = []

        result = Database.update("sessions", {"score": 10}, {"id": "s1", "current_question_index": 0})

        assert result is None
        assert query.eq.call_count == 2

    def test_update_returns_updated_row(self, mock_client):
        query = mock_client.table.return_value.update.return_value
        query.eq.return_value = query
        query.execute.return_value.data = [{"id": "s1", "score": 10}]

        assert Database.update("sessions", {"score": 10}, {"id": "s1"}) == {"id": "s1", "score": 10}

    def test_delete(self, mock_client):
        query = mock_client.table.return_value.delete.return_value
        query.eq.return_value = query
        query.execute.return_value.data = [{"id": "m1"}]

        assert Database.delete("materials", {"id": "m1"}) == [{"id": "m1"}]

    def test_connection_check(self, mock_client):
        assert check_connection() is True
        mock_client.table.return_value.select.return_value.limit.return_value.execute.side_effect = Exception("down")
        assert check_connection() is False
