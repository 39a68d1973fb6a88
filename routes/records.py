"""
Record API routes.

Filter, search and break down records, current or per snapshot.
"""

from fastapi import APIRouter, Query
from typing import Optional
import structlog

from exceptions import RecordNotFoundError
from models.query import (
    FilterRequest,
    GroupCount,
    LocationDetail,
    RecordListResponse,
    SummaryMetrics,
)
from models.record import Record
from routes.errors import handle_error
from services.tracker_service import get_tracker_service

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.post("/filter", response_model=RecordListResponse)
async def filter_records(request: FilterRequest):
    """
    Filter records.

    List values match membership, strings match case-insensitively as
    substrings, other values must be equal. All criteria must hold.
    """
    try:
        records = await get_tracker_service().filtered(request.criteria, request.snapshot_id)
        return RecordListResponse(data=records, total=len(records))

    except Exception as e:
        return handle_error(e)


@router.get("/search", response_model=RecordListResponse)
async def search_records(
    q: str = Query("", description="Text to look for in any field"),
    snapshot_id: Optional[str] = Query(None, description="Restrict to one snapshot"),
):
    """Free-text search across all fields."""
    try:
        records = await get_tracker_service().search(q, snapshot_id)
        return RecordListResponse(data=records, total=len(records))

    except Exception as e:
        return handle_error(e)


@router.get("/distinct/{field}")
async def distinct_values(
    field: str,
    snapshot_id: Optional[str] = Query(None, description="Restrict to one snapshot"),
):
    """Sorted unique values of a field."""
    try:
        values = await get_tracker_service().distinct(field, snapshot_id)
        return {"field": field, "values": values}

    except Exception as e:
        return handle_error(e)


@router.get("/grouped/{field}", response_model=list[GroupCount])
async def grouped_counts(
    field: str,
    snapshot_id: Optional[str] = Query(None, description="Restrict to one snapshot"),
):
    """Record counts per value of a field, most common first."""
    try:
        return await get_tracker_service().grouped(field, snapshot_id)

    except Exception as e:
        return handle_error(e)


@router.get("/summary", response_model=SummaryMetrics)
async def summary_metrics(
    snapshot_id: Optional[str] = Query(None, description="Restrict to one snapshot"),
):
    """Total records and distinct locations, GPU models and fabric types."""
    try:
        return await get_tracker_service().summary(snapshot_id)

    except Exception as e:
        return handle_error(e)


@router.get("/locations/{location_code}", response_model=LocationDetail)
async def location_detail(
    location_code: str,
    snapshot_id: Optional[str] = Query(None, description="Restrict to one snapshot"),
):
    """Records at one location with customer and breakdown details."""
    try:
        return await get_tracker_service().location_detail(location_code, snapshot_id)

    except Exception as e:
        return handle_error(e)


@router.get("/{identifier}", response_model=Record)
async def get_record(identifier: str):
    """Current state of one record."""
    try:
        record = await get_tracker_service().get_record(identifier)
        if record is None:
            raise RecordNotFoundError(identifier)
        return record

    except Exception as e:
        return handle_error(e)


@router.get("/{identifier}/history", response_model=RecordListResponse)
async def record_history(identifier: str):
    """Every stored version of one record, oldest first."""
    try:
        versions = await get_tracker_service().record_history(identifier)
        if not versions:
            raise RecordNotFoundError(identifier)
        return RecordListResponse(data=versions, total=len(versions))

    except Exception as e:
        return handle_error(e)
