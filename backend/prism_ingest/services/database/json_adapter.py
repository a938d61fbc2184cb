"""
JSON file-based adapter implementing TranscriptStore.
Stores all records in one JSON file so the dedup gate survives restarts.
"""
import json
import asyncio
import os
import copy
from pathlib import Path
from typing import Dict, List, Optional
from datetime import datetime, timezone

from .base import TranscriptStore
from ...core.exceptions import DuplicateFilepathError
from ...core.logging_config import get_logger
from ...domain.entities import TranscriptRecord
from ...domain.value_objects import RecordId

logger = get_logger(__name__)


class JSONStore(TranscriptStore):
    """
    JSON file-based store.
    Records are kept in memory and rewritten atomically on every create.
    """
    
    def __init__(self, data_dir: Optional[Path] = None):
        """
        Initialize JSON store.
        
        Args:
            data_dir: Directory to store JSON files (defaults to backend/data/json_db)
        """
        if data_dir is None:
            base_dir = Path(__file__).resolve().parent.parent.parent.parent
            data_dir = base_dir / "data" / "json_db"
        
        self.data_dir = Path(data_dir)
        self.records_file = self.data_dir / "transcripts.json"
        
        self._records: Dict[str, Dict] = {}
        self._filepath_index: Dict[str, str] = {}
        
        # Serialises create + rewrite so the snapshot and the file stay in step
        self._write_lock = asyncio.Lock()
    
    async def initialize(self):
        """Initialize store - load records from the JSON file."""
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self._load_data()
        logger.info(f"JSON store loaded {len(self._records)} records from {self.records_file}")
    
    async def close(self):
        """Close store - save records to the JSON file."""
        async with self._write_lock:
            await self._save_data()
    
    def _load_data(self):
        """Load records from the JSON file into memory."""
        self._records = {}
        if self.records_file.exists():
            try:
                with open(self.records_file, 'r', encoding='utf-8') as f:
                    self._records = json.load(f)
            except (json.JSONDecodeError, IOError) as e:
                logger.warning(f"Could not load {self.records_file.name}: {e}")
                self._records = {}
        
        self._rebuild_indexes()
    
    def _rebuild_indexes(self):
        """Rebuild indexes from loaded data."""
        self._filepath_index = {
            data["filepath"]: record_id for record_id, data in self._records.items() if data.get("filepath")
        }
    
    def _write_file(self, payload: str):
        tmp_file = self.records_file.with_suffix(".json.tmp")
        with open(tmp_file, 'w', encoding='utf-8') as f:
            f.write(payload)
        os.replace(tmp_file, self.records_file)
    
    async def _save_data(self):
        """Save records from memory to the JSON file."""
        # Snapshot on the loop; only the file I/O runs in the worker thread
        payload = json.dumps(self._records, indent=2, ensure_ascii=False)
        await asyncio.to_thread(self._write_file, payload)
    
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
        
        # Claim the filepath before yielding to the writer thread
        self._records[record.id] = data
        self._filepath_index[record.filepath] = record.id
        try:
            async with self._write_lock:
                await self._save_data()
        except Exception:
            self._records.pop(record.id, None)
            self._filepath_index.pop(record.filepath, None)
            raise
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
