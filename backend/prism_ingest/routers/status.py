"""
Status Router - health/status, one-off folder import and quarantine retries.
"""
from fastapi import APIRouter, HTTPException

from .dependencies import get_analysis_queue, get_pipeline, get_store, get_watcher_manager
from ..api.dto import ImportRequest, IngestionSummaryDTO
from ..api.mappers import FolderStatusMapper, IngestionResultMapper
from ..core.config import EMAIL_FOLDER, WATCH_FOLDER
from ..core.logging_config import get_logger
from ..domain.value_objects import ROLE_EMAIL, ROLE_TRANSCRIPTS
from ..utils.validators import validate_watch_folder

logger = get_logger(__name__)

router = APIRouter()


@router.get("/api/status")
async def get_status():
    """
    Folder state (existence, allow-listed file counts), watcher state,
    analysis queue stats and record count.
    """
    manager = get_watcher_manager()
    pipeline = get_pipeline()
    watch_folder = manager.folder_for(ROLE_TRANSCRIPTS) or WATCH_FOLDER
    email_folder = manager.folder_for(ROLE_EMAIL) or EMAIL_FOLDER
    
    return {
        "status": "ok",
        "watch_folder": FolderStatusMapper.to_dto(watch_folder).model_dump(),
        "email_folder": FolderStatusMapper.to_dto(email_folder).model_dump(),
        "watchers": manager.status(),
        "analysis": get_analysis_queue().get_stats(),
        "quarantined": len(pipeline.quarantine) if pipeline.quarantine is not None else 0,
        "record_count": await get_store().count(),
    }


@router.post("/api/import", response_model=IngestionSummaryDTO)
async def import_folder(request: ImportRequest):
    """One-time import of the files directly inside a folder."""
    try:
        folder = validate_watch_folder(request.folder)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    
    results = await get_pipeline().import_folder(folder)
    summary = IngestionResultMapper.to_summary(results)
    logger.info(f"Import of {folder}: {summary.created} created, {summary.duplicates} duplicates, {summary.failed} failed")
    return summary


@router.post("/api/quarantine/retry", response_model=IngestionSummaryDTO)
async def retry_quarantined():
    """Re-run quarantined files whose backoff has elapsed."""
    results = await get_pipeline().retry_quarantined()
    return IngestionResultMapper.to_summary(results)
