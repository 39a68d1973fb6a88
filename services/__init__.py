"""
Business logic services.

Each service handles one concern of the tracker; TrackerService ties
them together for callers.
"""

from services.storage import TrackerDatabase, create_database, get_database
from services.events import EventBus, SNAPSHOT_INGESTED, DATA_CLEARED
from services.record_service import RecordService
from services.snapshot_service import SnapshotService
from services.reconciliation_service import ReconciliationService
from services.comparison_service import ComparisonService
from services.query_service import QueryService
from services.settings_service import SettingsService, get_settings_service
from services.tracker_service import TrackerService, get_tracker_service

__all__ = [
    "TrackerDatabase",
    "create_database",
    "get_database",
    "EventBus",
    "SNAPSHOT_INGESTED",
    "DATA_CLEARED",
    "RecordService",
    "SnapshotService",
    "ReconciliationService",
    "ComparisonService",
    "QueryService",
    "SettingsService",
    "get_settings_service",
    "TrackerService",
    "get_tracker_service",
]
