"""
In-memory adapter implementing TranscriptStore.
Perfect for demos and testing - data is lost on restart.
"""
from typing import Dict, List, Optional
from datetime import datetime, timezone
import copy

from .base import TranscriptStore
from ...core.exceptions import DuplicateFilepathError
from ...domain.entities import TranscriptRecord
from ...domain.value_objects import RecordId


class MemoryStore(TranscriptStore):
    """
    In-memory store using Python dictionaries.
    Data is lost when the application restarts.
    """
    
    def __init__(self):
        self._records: Dict[str, Dict] = {}
        
        # Index for fast lookups
        self._filepath_index: Dict[str, str] = {}  # filepath -> record id
    
    async def initialize(self):
        """Initialize store (clears any existing data)."""
        self._records.clear()
        self._filepath_index.clear()
    
    async def close(self):
        """Close store (no-op for in-memory)."""
        pass
    
    async def exists(self, filepath: str) -> bool:
        return filepath in self._filepath_index
    
    async def create_transcript(self, record: TranscriptRecord) -> RecordId:
        if not record.id:
            raise ValueError("Record must have an 'id' field")
        if record.filepath in self._filepath_index:
            raise DuplicateFilepathError(
                f"Record already exists for {record.filepath}", filepath=record.filepath
            )
        
        data = record.to_dict()
        if not data.get("created_at"):
            data["created_at"] = datetime.now(timezone.utc).isoformat()
        
        # Store record (deep copy to avoid reference issues)
        self._records[record.id] = copy.deepcopy(data)
        self._filepath_index[record.filepath] = record.id
        return record.id
    
    async def get_transcript(self, record_id: str) -> Optional[TranscriptRecord]:
        data = self._records.get(record_id)
        return TranscriptRecord.from_dict(copy.deepcopy(data)) if data else None
    
    async def find_by_filepath(self, filepath: str) -> Optional[TranscriptRecord]:
        record_id = self._filepath_index.get(filepath)
        return await self.get_transcript(record_id) if record_id else None
    
    async def get_all_transcripts(self) -> List[TranscriptRecord]:
        return [TranscriptRecord.from_dict(copy.deepcopy(data)) for data in self._records.values()]
    
    async def count(self) -> int:
        return len(self._records)
    