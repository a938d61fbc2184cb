"""
Watcher manager - owns one FolderWatcher per role and swaps them on reconfiguration.
"""
import asyncio
from pathlib import Path
from typing import Dict, Optional, Set

from .folder_watcher import FolderWatcher
from ..ingestion_pipeline import IngestionPipeline
from ...core.config import STABILITY_POLL_INTERVAL_SECONDS, STABILITY_THRESHOLD_SECONDS, WATCH_DEPTH
from ...core.logging_config import get_logger
from ...domain.entities import StableFileEvent

logger = get_logger(__name__)


class WatcherManager:
    """
    Keeps at most one active watcher per role ("transcripts", "email").
    
    Reconfiguring a role stops the old watcher before the new one starts.
    Files the old watcher already handed to the pipeline keep processing.
    """
    
    def __init__(
        self,
        pipeline: IngestionPipeline,
        stability_threshold: float = STABILITY_THRESHOLD_SECONDS,
        poll_interval: float = STABILITY_POLL_INTERVAL_SECONDS,
        depth: int = WATCH_DEPTH,
    ):
        self.pipeline = pipeline
        self.stability_threshold = stability_threshold
        self.poll_interval = poll_interval
        self.depth = depth
        self.watchers: Dict[str, FolderWatcher] = {}
        self.errors: Dict[str, str] = {}
        self._retired: Set[FolderWatcher] = set()
        self._lock = asyncio.Lock()
    
    async def _handle_file(self, event: StableFileEvent):
        return await self.pipeline.process(event.path)
    
    def _error_handler(self, role: str):
        def on_error(error: Exception, path: Optional[str]):
            self.errors[role] = str(error)
        return on_error
    
    async def _start_locked(self, role: str, folder) -> bool:
        watcher = FolderWatcher(
            folder,
            on_file=self._handle_file,
            on_error=self._error_handler(role),
            stability_threshold=self.stability_threshold,
            poll_interval=self.poll_interval,
            depth=self.depth,
            role=role,
        )
        started = await watcher.start()
        if started:
            self.watchers[role] = watcher
            self.errors.pop(role, None)
        return started
    
    async def _stop_locked(self, role: str):
        watcher = self.watchers.pop(role, None)
        if watcher is None:
            return
        await watcher.stop()
        if watcher.in_flight:
            self._retired.add(watcher)
    
    async def start(self, role: str, folder) -> bool:
        """Start watching ``folder`` for ``role``; a running watcher for the role is replaced."""
        async with self._lock:
            await self._stop_locked(role)
            return await self._start_locked(role, folder)
    
    async def reconfigure(self, role: str, folder) -> bool:
        """
        Point ``role`` at a new folder.
        
        Returns:
            True if the new watcher is running
        """
        current = self.watchers.get(role)
        logger.info(
            f"Reconfiguring {role} watcher: {current.folder if current else None} -> {Path(folder).expanduser()}"
        )
        return await self.start(role, folder)
    
    async def stop(self, role: str):
        async with self._lock:
            await self._stop_locked(role)
    
    async def stop_all(self):
        async with self._lock:
            for role in list(self.watchers):
                await self._stop_locked(role)
    
    async def drain(self):
        """Wait for all processing started by current and retired watchers."""
        watchers = list(self.watchers.values()) + list(self._retired)
        await asyncio.gather(*(w.drain() for w in watchers))
        self._retired = {w for w in self._retired if w.in_flight}
    
    def folder_for(self, role: str) -> Optional[str]:
        watcher = self.watchers.get(role)
        return str(watcher.folder) if watcher else None
    
    def status(self) -> Dict:
        return {
            "watchers": {role: w.status() for role, w in self.watchers.items()},
            "errors": dict(self.errors),
            "draining": sum(len(w.in_flight) for w in self._retired),
        }
