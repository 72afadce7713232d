from functools import lru_cache
from typing import Any, Dict, Iterable, List, Optional, Tuple
from supabase import create_client, Client
from mindwave.config import settings
import logging

logger = logging.getLogger(__name__)

# Supabase Client Setup
@lru_cache(maxsize=1)
def get_supabase_admin_client() -> Client:
    """Get Supabase service-role client for table operations"""
    return create_client(
        settings.supabase_url,
        settings.supabase_service_role_key.get_secret_value()
    )

def test_supabase_connection() -> bool:
    """Test Supabase connection"""
    try:
        get_supabase_admin_client().table("subjects").select("id").limit(1).execute()
        return True
    except Exception as e:
        logger.error(f"Supabase connection test failed: {e}")
        return False

# Database operations using Supabase REST API
class Database:
    """Database operations using Supabase REST API.

    Every method targets a single table. ``filters`` are equality matches,
    ``in_filters`` match a column against a list of values and ``order_by``
    is a sequence of ``(column, descending)`` pairs applied in order.
    """

    @staticmethod
    def _apply_filters(query, filters: Optional[Dict[str, Any]], in_filters: Optional[Dict[str, Iterable]] = None):
        if filters:
            for key, value in filters.items():
                query = query.eq(key, value)
        if in_filters:
            for key, values in in_filters.items():
                query = query.in_(key, list(values))
        return query

    @staticmethod
    def insert(table: str, data: dict) -> Optional[dict]:
        """Insert data into table"""
        try:
            result = get_supabase_admin_client().table(table).insert(data).execute()
            return result.data[0] if result.data else None
        except Exception as e:
            logger.error(f"Insert error in {table}: {e}")
            raise e

    @staticmethod
    def select(
        table: str,
        columns: str = "*",
        filters: Optional[Dict[str, Any]] = None,
        limit: Optional[int] = None,
        order_by: Optional[List[Tuple[str, bool]]] = None,
        in_filters: Optional[Dict[str, Iterable]] = None,
    ) -> List[dict]:
        """Select data from table"""
        try:
            query = get_supabase_admin_client().table(table).select(columns)
            query = Database._apply_filters(query, filters, in_filters)

            for column, descending in order_by or []:
                query = query.order(column, desc=descending)

            if limit:
                query = query.limit(limit)

            result = query.execute()
            return result.data
        except Exception as e:
            logger.error(f"Select error in {table}: {e}")
            raise e

    @staticmethod
    def update(table: str, data: dict, filters: Dict[str, Any]) -> Optional[dict]:
        """Update rows matching all filters; returns the first updated row or None.

        Passing the expected current value of a column in ``filters`` turns
        the call into a compare-and-swap: no row matches once another writer
        has moved the value on.
        """
        try:
            query = get_supabase_admin_client().table(table).update(data)
            query = Database._apply_filters(query, filters)
            result = query.execute()
            return result.data[0] if result.data else None
        except Exception as e:
            logger.error(f"Update error in {table}: {e}")
            raise e

    @staticmethod
    def delete(table: str, filters: Dict[str, Any]) -> List[dict]:
        """Delete data from table"""
        try:
            query = get_supabase_admin_client().table(table).delete()
            query = Database._apply_filters(query, filters)
            result = query.execute()
            return result.data
        except Exception as e:
            logger.error(f"Delete error in {table}: {e}")
            raise e

# Global database instance
db = Database()

def get_db() -> Database:
    """FastAPI dependency returning the database handle"""
    return db
