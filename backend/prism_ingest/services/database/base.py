"""
Abstract base class for transcript stores.
All store implementations must inherit from this class.
"""
from abc import ABC, abstractmethod
from typing import List, Optional

from ...domain.entities import TranscriptRecord
from ...domain.value_objects import RecordId


class TranscriptStore(ABC):
    """
    Abstract interface for the transcript store.
    
    Ingestion only ever calls ``exists`` and ``create_transcript``; the read
    operations serve the API and tests. ``filepath`` is the unique key and
    ``create_transcript`` must reject a second record for the same path.
    """
    
    @abstractmethod
    async def exists(self, filepath: str) -> bool:
        """Whether a record already exists for this exact filepath."""
        pass
    
    @abstractmethod
    async def create_transcript(self, record: TranscriptRecord) -> RecordId:
        """
        Persist a new record.
        
        Raises:
            DuplicateFilepathError: If a record with the same filepath exists
        """
        pass
    
    @abstractmethod
    async def get_transcript(self, record_id: str) -> Optional[TranscriptRecord]:
        """Get a record by ID."""
        pass
    
    @abstractmethod
    async def find_by_filepath(self, filepath: str) -> Optional[TranscriptRecord]:
        """Get the record for a filepath, if any."""
        pass
    
    @abstractmethod
    async def get_all_transcripts(self) -> List[TranscriptRecord]:
        """Get all records, oldest first."""
        pass
    
    @abstractmethod
    async def count(self) -> int:
        """Number of records."""
        pass
    
    @abstractmethod
    async def initialize(self):
        """Initialize the store (load files, create indexes, etc.)."""
        pass
    
    @abstractmethod
    async def close(self):
        """Flush and release resources."""
        pass
