"""
API route modules.

Each module defines routes for one area of the tracker.
"""

from routes.uploads import router as uploads_router
from routes.snapshots import router as snapshots_router
from routes.records import router as records_router
from routes.settings import router as settings_router
from routes.data import router as data_router

__all__ = [
    "uploads_router",
    "snapshots_router",
    "records_router",
    "settings_router",
    "data_router",
]
