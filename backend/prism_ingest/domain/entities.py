"""
Domain entities - Core ingestion objects.
These represent the business concepts, not storage models.
"""
from dataclasses import dataclass, field, asdict
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from .value_objects import FilePath, RecordId


@dataclass(frozen=True)
class StableFileEvent:
    """A file that has stayed unmodified for the whole stability window."""
    path: FilePath
    detected_at: datetime


@dataclass
class ExtractedDocument:
    """
    Result of format extraction for one file.
    Lives only for the duration of one pipeline pass.
    """
    source_path: FilePath
    derived_filename: str
    text_content: str
    suggested_date: Optional[str] = None
    suggested_context: Optional[str] = None
    duration_minutes: Optional[int] = None


@dataclass
class TranscriptRecord:
    """
    Canonical persisted unit. ``filepath`` is the unique key.
    """
    id: RecordId
    filename: str
    filepath: FilePath
    raw_content: str
    call_date: str
    context: str
    duration_minutes: Optional[int] = None
    created_at: Optional[str] = None

    def to_dict(self) -> Dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict) -> "TranscriptRecord":
        return cls(
            id=data["id"],
            filename=data["filename"],
            filepath=data["filepath"],
            raw_content=data["raw_content"],
            call_date=data["call_date"],
            context=data["context"],
            duration_minutes=data.get("duration_minutes"),
            created_at=data.get("created_at"),
        )


@dataclass
class EmailAttachment:
    """One retained attachment of an email."""
    filename: str
    content_type: str
    size: int
    content: bytes = field(repr=False)


@dataclass
class StagedAttachment:
    """An attachment written to the per-email staging directory."""
    filename: str
    filepath: FilePath
    content_type: str
    size: int


@dataclass
class EmailDecomposition:
    """Structured view of one .eml file."""
    filepath: FilePath
    filename: str
    subject: str
    sender: str
    to: List[str]
    cc: List[str]
    date: Optional[datetime]
    message_id: Optional[str]
    in_reply_to: Optional[str]
    body_text: str
    full_content: str
    attachments: List[EmailAttachment] = field(default_factory=list)

    @property
    def has_attachments(self) -> bool:
        return len(self.attachments) > 0

    @property
    def date_iso(self) -> Optional[str]:
        return self.date.isoformat() if self.date else None


@dataclass(frozen=True)
class FilenameMetadata:
    """Hints inferred from a filename. Either field may be missing."""
    date: Optional[str] = None
    call_type: Optional[str] = None

    def is_empty(self) -> bool:
        return self.date is None and self.call_type is None


@dataclass(frozen=True)
class NewRecordEvent:
    """Payload of the new-record observer callback."""
    record_id: RecordId
    filepath: FilePath


class IngestionStatus(Enum):
    """Outcome of running one file through the pipeline."""
    CREATED = "created"
    DUPLICATE = "duplicate"
    IGNORED = "ignored"
    EMPTY = "empty"
    FAILED = "failed"


@dataclass
class IngestionResult:
    """Outcome for one materialized (or dropped) document."""
    filepath: FilePath
    status: IngestionStatus
    record_id: Optional[RecordId] = None
    error: Optional[str] = None
    children: List["IngestionResult"] = field(default_factory=list)

    @property
    def created(self) -> bool:
        return self.status == IngestionStatus.CREATED

    def created_ids(self) -> List[RecordId]:
        """Record ids created by this result and any attachment results."""
        ids = [self.record_id] if self.created and self.record_id else []
        for child in self.children:
            ids.extend(child.created_ids())
        return ids

    def to_dict(self) -> Dict:
        return {
            "filepath": self.filepath,
            "status": self.status.value,
            "record_id": self.record_id,
            "error": self.error,
            "children": [child.to_dict() for child in self.children],
        }
