"""
Snapshot API routes.

Browse uploads, the records each one wrote, and diffs between them.
"""

from fastapi import APIRouter, Query
import structlog

from exceptions import SnapshotNotFoundError
from models.comparison import ComparisonResult, SnapshotChange
from models.query import RecordListResponse
from models.snapshot import LatestData, Snapshot, SnapshotListResponse
from routes.errors import handle_error
from services.tracker_service import get_tracker_service

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.get("", response_model=SnapshotListResponse)
async def list_snapshots():
    """List all snapshots, newest first."""
    try:
        snapshots = await get_tracker_service().list_snapshots()
        return SnapshotListResponse(data=snapshots, total=len(snapshots))

    except Exception as e:
        return handle_error(e)


@router.get("/latest", response_model=LatestData)
async def latest_snapshot():
    """Most recent snapshot with its records."""
    try:
        return await get_tracker_service().latest()

    except Exception as e:
        return handle_error(e)


@router.get("/history", response_model=list[SnapshotChange])
async def snapshot_history():
    """Row count and new/removed counts per upload, oldest first."""
    try:
        return await get_tracker_service().change_history()

    except Exception as e:
        return handle_error(e)


@router.get("/compare", response_model=ComparisonResult)
async def compare_snapshots(
    base: str = Query(..., description="Older snapshot id"),
    target: str = Query(..., description="Newer snapshot id"),
):
    """New, removed and modified records between two snapshots."""
    try:
        service = get_tracker_service()
        for snapshot_id in (base, target):
            if await service.get_snapshot(snapshot_id) is None:
                raise SnapshotNotFoundError(snapshot_id)

        return await service.compare(base, target)

    except Exception as e:
        return handle_error(e)


@router.get("/{snapshot_id}", response_model=Snapshot)
async def get_snapshot(snapshot_id: str):
    """Get one snapshot."""
    try:
        snapshot = await get_tracker_service().get_snapshot(snapshot_id)
        if snapshot is None:
            raise SnapshotNotFoundError(snapshot_id)
        return snapshot

    except Exception as e:
        return handle_error(e)


@router.get("/{snapshot_id}/records", response_model=RecordListResponse)
async def snapshot_records(snapshot_id: str):
    """Records as the snapshot wrote them."""
    try:
        service = get_tracker_service()
        if await service.get_snapshot(snapshot_id) is None:
            raise SnapshotNotFoundError(snapshot_id)

        records = await service.records_of(snapshot_id)
        return RecordListResponse(data=records, total=len(records))

    except Exception as e:
        return handle_error(e)
