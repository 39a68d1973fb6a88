"""
Database connection management.

Provides the Supabase client singleton used by the supabase store backend.
"""

from supabase import create_client, Client
from functools import lru_cache
import structlog

from config.settings import settings

logger = structlog.get_logger(__name__)


class DatabaseConfigError(Exception):
    """Supabase backend selected without credentials."""
    pass


class ConnectionError(Exception):
    """Failed to connect to database."""
    pass


@lru_cache()
def get_supabase_client() -> Client:
    """
    Get cached Supabase client instance.

    Uses lru_cache to ensure only one client is created.
    Call get_supabase_client.cache_clear() to reconnect.

    Returns:
        Client: Supabase client

    Raises:
        DatabaseConfigError: If URL or key are missing
        ConnectionError: If the client cannot be created
    """
    if not settings.supabase_configured:
        raise DatabaseConfigError(
            "SUPABASE_URL and SUPABASE_KEY are required for the supabase storage backend"
        )

    try:
        logger.info(
            "connecting_to_supabase",
            url=settings.supabase_url[:30] + "..."  # Log partial URL only
        )

        client = create_client(
            settings.supabase_url,
            settings.supabase_key
        )

        logger.info("supabase_connected", status="success")
        return client

    except Exception as e:
        logger.error(
            "supabase_connection_failed",
            error=str(e),
            error_type=type(e).__name__
        )
        raise ConnectionError(f"Failed to connect to Supabase: {e}") from e


# ===================
# HELPER FUNCTIONS
# ===================

def check_connection() -> dict:
    """
    Check storage health.

    Returns:
        dict: Backend name and status with details
    """
    if settings.storage_backend == "memory":
        return {"status": "healthy", "backend": "memory"}

    try:
        client = get_supabase_client()
        table = settings.database_name.replace("-", "_") + "_snapshots"
        result = client.table(table).select("key", count="exact").limit(1).execute()

        return {
            "status": "healthy",
            "backend": "supabase",
            "snapshots_count": result.count,
        }

    except Exception as e:
        return {
            "status": "unhealthy",
            "backend": "supabase",
            "error": str(e)
        }


def reset_connection():
    """
    Reset the cached database connection.

    Call this if connection becomes stale or after config changes.
    """
    get_supabase_client.cache_clear()
    logger.info("database_connection_reset")
