"""
Upload API routes.

Accepts CSV and spreadsheet files and turns each into a new snapshot.
"""

from fastapi import APIRouter, UploadFile, File
import structlog

from models.snapshot import SnapshotSummary
from routes.errors import handle_error
from services.tracker_service import get_tracker_service

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.post("", response_model=SnapshotSummary, status_code=201)
async def upload_file(
    file: UploadFile = File(..., description="CSV, XLSX or XLS file")
):
    """
    Upload a file and reconcile it as a new snapshot.

    Fails with 422 when the file is empty, lacks required columns or has
    rows without an identifier; nothing is stored in that case.
    """
    try:
        content = await file.read()
        service = get_tracker_service()
        summary = await service.ingest_file(file.filename or "upload.csv", content)

        logger.info(
            "upload_completed",
            filename=file.filename,
            snapshot_id=summary.snapshot_id,
            new=summary.new_count,
            updated=summary.updated_count
        )
        return summary

    except Exception as e:
        logger.warning("upload_failed", filename=file.filename, error=str(e))
        return handle_error(e)


@router.post("/sample", response_model=SnapshotSummary, status_code=201)
async def load_sample():
    """Load the built-in sample dataset (7 orders)."""
    try:
        service = get_tracker_service()
        return await service.load_sample_data()

    except Exception as e:
        return handle_error(e)
