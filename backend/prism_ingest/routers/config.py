"""
Config Router - runtime reconfiguration of the watched folders.
"""
from fastapi import APIRouter, HTTPException

from .dependencies import get_watcher_manager
from ..api.dto import EmailFolderRequest, FolderConfigDTO, WatchFolderRequest
from ..core.config import EMAIL_FOLDER, WATCH_FOLDER
from ..core.logging_config import get_logger
from ..domain.value_objects import ROLE_EMAIL, ROLE_TRANSCRIPTS
from ..utils.validators import validate_watch_folder

logger = get_logger(__name__)

router = APIRouter()


def _current(role: str, default: str) -> FolderConfigDTO:
    manager = get_watcher_manager()
    folder = manager.folder_for(role)
    return FolderConfigDTO(role=role, folder=folder or default or None, running=folder is not None)


async def _reconfigure(role: str, folder: str) -> FolderConfigDTO:
    try:
        path = validate_watch_folder(folder)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    
    manager = get_watcher_manager()
    if not await manager.reconfigure(role, path):
        raise HTTPException(
            status_code=500,
            detail=manager.errors.get(role, f"Could not start {role} watcher"),
        )
    logger.info(f"{role} watcher now watching {path}")
    return FolderConfigDTO(role=role, folder=str(path), running=True)


@router.get("/api/config/watch-folder", response_model=FolderConfigDTO)
async def get_watch_folder():
    return _current(ROLE_TRANSCRIPTS, WATCH_FOLDER)


@router.put("/api/config/watch-folder", response_model=FolderConfigDTO)
async def update_watch_folder(request: WatchFolderRequest):
    """
    Point the transcripts watcher at another folder.
    Files already being processed from the old folder finish normally.
    """
    return await _reconfigure(ROLE_TRANSCRIPTS, request.watch_folder)


@router.get("/api/config/email-folder", response_model=FolderConfigDTO)
async def get_email_folder():
    return _current(ROLE_EMAIL, EMAIL_FOLDER)


@router.put("/api/config/email-folder", response_model=FolderConfigDTO)
async def update_email_folder(request: EmailFolderRequest):
    return await _reconfigure(ROLE_EMAIL, request.email_folder)
