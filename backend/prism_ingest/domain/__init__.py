"""
Domain layer - Core ingestion objects.
This layer has no dependencies on infrastructure.
"""
from .entities import (
    StableFileEvent,
    ExtractedDocument,
    TranscriptRecord,
    EmailAttachment,
    StagedAttachment,
    EmailDecomposition,
    FilenameMetadata,
    NewRecordEvent,
    IngestionStatus,
    IngestionResult,
)
from .value_objects import FilePath, RecordId, SUPPORTED_EXTENSIONS, ATTACHMENT_EXTENSIONS

__all__ = [
    "StableFileEvent",
    "ExtractedDocument",
    "TranscriptRecord",
    "EmailAttachment",
    "StagedAttachment",
    "EmailDecomposition",
    "FilenameMetadata",
    "NewRecordEvent",
    "IngestionStatus",
    "IngestionResult",
    "FilePath",
    "RecordId",
    "SUPPORTED_EXTENSIONS",
    "ATTACHMENT_EXTENSIONS",
]
