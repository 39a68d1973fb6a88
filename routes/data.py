"""
Data maintenance routes.
"""

from fastapi import APIRouter
import structlog

from routes.errors import handle_error
from services.tracker_service import get_tracker_service

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.delete("")
async def clear_data():
    """Delete all records and snapshots. Preferences are kept."""
    try:
        await get_tracker_service().clear_all()
        logger.info("data_cleared_via_api")
        return {"status": "cleared"}

    except Exception as e:
        return handle_error(e)
