"""
Dedup gate and record materialization.

The existence check against the store is the single idempotency guarantee
of ingestion: a filepath that already has a record is skipped without side
effects. Check and create are serialised per filepath so two events for the
same path can never both pass the gate.
"""
import asyncio
import inspect
import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Callable, Dict, Optional, Set

from .analysis_queue import AnalysisQueue
from .database.base import TranscriptStore
from ..core.exceptions import DuplicateFilepathError
from ..core.logging_config import get_logger
from ..domain.entities import ExtractedDocument, NewRecordEvent, TranscriptRecord
from ..domain.value_objects import RecordId

logger = get_logger(__name__)

NewRecordCallback = Callable[[NewRecordEvent], object]


def default_context(filename: str) -> str:
    return f"Watched file: {filename}"


class RecordMaterializer:
    """
    Turns extracted documents into transcript records exactly once per filepath,
    then hands the new record id to analysis and to the observer callback.
    """
    
    def __init__(
        self,
        store: TranscriptStore,
        analysis_queue: Optional[AnalysisQueue] = None,
        on_new_record: Optional[NewRecordCallback] = None,
        analyze_immediately: bool = True,
    ):
        """
        Args:
            store: Transcript store providing exists/create
            analysis_queue: Where new record ids are dispatched (None disables dispatch)
            on_new_record: Fire-and-forget observer for new records
            analyze_immediately: Whether to dispatch new records to analysis
        """
        self.store = store
        self.analysis_queue = analysis_queue
        self.on_new_record = on_new_record
        self.analyze_immediately = analyze_immediately
        self._locks: Dict[str, asyncio.Lock] = {}
        self._lock_users: Dict[str, int] = {}
        self._callback_tasks: Set[asyncio.Task] = set()
    
    @asynccontextmanager
    async def _path_lock(self, filepath: str):
        lock = self._locks.setdefault(filepath, asyncio.Lock())
        self._lock_users[filepath] = self._lock_users.get(filepath, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[filepath] -= 1
            if self._lock_users[filepath] == 0:
                del self._lock_users[filepath]
                del self._locks[filepath]
    
    async def is_known(self, filepath: str) -> bool:
        """Cheap pre-check so callers can skip extraction for known paths."""
        return await self.store.exists(filepath)
    
    async def materialize(self, document: ExtractedDocument) -> Optional[RecordId]:
        """
        Create the record for a document unless its filepath is already recorded.
        
        Args:
            document: Extracted document with date/context already resolved
        
        Returns:
            The new record id, or None if the filepath was already recorded
        """
        filepath = document.source_path
        async with self._path_lock(filepath):
            if await self.store.exists(filepath):
                logger.info(f"Already processed: {filepath}")
                return None
            
            record = TranscriptRecord(
                id=RecordId(str(uuid.uuid4())),
                filename=document.derived_filename,
                filepath=filepath,
                raw_content=document.text_content,
                duration_minutes=document.duration_minutes,
                call_date=document.suggested_date or datetime.now(timezone.utc).isoformat(),
                context=document.suggested_context or default_context(document.derived_filename),
            )
            try:
                record_id = await self.store.create_transcript(record)
            except DuplicateFilepathError:
                # Another process won the race; the store's key constraint held
                logger.info(f"Already processed (store conflict): {filepath}")
                return None
        
        logger.info(f"Transcript saved: {record_id} ({document.derived_filename})")
        self._dispatch(record_id, filepath)
        self._notify(NewRecordEvent(record_id=record_id, filepath=filepath))
        return record_id
    
    def _dispatch(self, record_id: RecordId, filepath: str):
        if not self.analyze_immediately or self.analysis_queue is None:
            return
        try:
            self.analysis_queue.submit(record_id, filepath=filepath)
        except Exception as e:
            # The record stays; analysis can be retried against its id
            logger.error(f"Could not queue analysis for {record_id}: {e}", exc_info=True)
    
    def _notify(self, event: NewRecordEvent):
        if self.on_new_record is None:
            return
        try:
            result = self.on_new_record(event)
        except Exception as e:
            logger.error(f"New-record callback failed for {event.record_id}: {e}", exc_info=True)
            return
        if inspect.isawaitable(result):
            task = asyncio.ensure_future(result)
            self._callback_tasks.add(task)
            task.add_done_callback(self._callback_done)
    
    def _callback_done(self, task: asyncio.Task):
        self._callback_tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error(f"New-record callback failed: {task.exception()}")
