"""
Data Transfer Objects (DTOs) for the API layer.
Separates API contracts from domain entities.
"""
from pydantic import BaseModel
from typing import Any, Dict, List, Optional


class WatchFolderRequest(BaseModel):
    """Body of PUT /api/config/watch-folder."""
    watch_folder: str


class EmailFolderRequest(BaseModel):
    """Body of PUT /api/config/email-folder."""
    email_folder: str


class ImportRequest(BaseModel):
    """Body of POST /api/import."""
    folder: str


class FolderConfigDTO(BaseModel):
    role: str
    folder: Optional[str]
    running: bool = False


class FolderStatusDTO(BaseModel):
    """Watched folder as seen from the API."""
    folder: Optional[str]
    exists: bool
    file_count: int


class IngestionSummaryDTO(BaseModel):
    """Response DTO for folder import and quarantine retry."""
    total_files: int
    created: int
    duplicates: int
    skipped: int
    failed: int
    record_ids: List[str]
    results: List[Dict[str, Any]]
