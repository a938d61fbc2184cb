"""
Folder watcher - stable-file events for one watched folder.

Uses the watchdog library for cross-platform file system notifications and
bridges them onto the asyncio loop. Every candidate goes through the ignore
rules, the depth bound and the extension allow-list, then waits out the
stability window before it is emitted.
"""
import asyncio
import inspect
import os
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Awaitable, Callable, Dict, Iterable, Optional, Set, Union

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from .stability import StabilityTracker
from ...core.config import STABILITY_POLL_INTERVAL_SECONDS, STABILITY_THRESHOLD_SECONDS, WATCH_DEPTH
from ...core.exceptions import WatcherFaultError
from ...core.logging_config import get_logger
from ...domain.entities import StableFileEvent
from ...domain.value_objects import SUPPORTED_EXTENSIONS, FilePath
from ...utils.ignore_rules import should_ignore

logger = get_logger(__name__)

FileCallback = Callable[[StableFileEvent], Union[Awaitable[object], object]]
ErrorCallback = Callable[[Exception, Optional[str]], object]


class _ObserverBridge(FileSystemEventHandler):
    """Forwards watchdog events (observer thread) to the watcher's event loop."""
    
    def __init__(self, watcher: "FolderWatcher", loop: asyncio.AbstractEventLoop):
        super().__init__()
        self.watcher = watcher
        self.loop = loop
    
    def _forward(self, raw_path: str, is_directory: bool):
        try:
            self.loop.call_soon_threadsafe(self.watcher._on_fs_event, Path(raw_path), is_directory)
        except RuntimeError:
            # Loop already closed during shutdown
            pass
    
    def on_created(self, event: FileSystemEvent):
        self._forward(event.src_path, event.is_directory)
    
    def on_modified(self, event: FileSystemEvent):
        # Directory modifications are too noisy to be useful
        if not event.is_directory:
            self._forward(event.src_path, False)
    
    def on_moved(self, event: FileSystemEvent):
        self._forward(event.dest_path, event.is_directory)
    
    def on_closed(self, event: FileSystemEvent):
        self._forward(event.src_path, False)


class FolderWatcher:
    """
    Watches one folder (recursively, up to ``depth`` levels) and emits a
    StableFileEvent per file that has stopped changing.
    
    Pre-existing files are scanned on start so a restart recovers any backlog.
    Filesystem faults go to ``on_error`` and never stop the watcher.
    """
    
    def __init__(
        self,
        folder,
        on_file: FileCallback,
        on_error: Optional[ErrorCallback] = None,
        stability_threshold: float = STABILITY_THRESHOLD_SECONDS,
        poll_interval: float = STABILITY_POLL_INTERVAL_SECONDS,
        depth: int = WATCH_DEPTH,
        allowed_extensions: Iterable[str] = SUPPORTED_EXTENSIONS,
        role: str = "transcripts",
    ):
        """
        Args:
            folder: Folder to watch (created if missing)
            on_file: Called once per stable file; coroutines are run as tasks
            on_error: Called with (error, path) for filesystem-level faults
            stability_threshold: Seconds a file must stay unchanged
            poll_interval: Seconds between stability checks
            depth: Maximum directory depth below the folder
            allowed_extensions: Extension allow-list (lower case, with dot)
            role: Label used in logs and status
        """
        self.folder = Path(folder).expanduser().resolve()
        self.on_file = on_file
        self.on_error = on_error
        self.poll_interval = poll_interval
        self.depth = depth
        self.allowed_extensions = frozenset(ext.lower() for ext in allowed_extensions)
        self.role = role
        
        self.tracker = StabilityTracker(stability_threshold)
        self.in_flight: Set[asyncio.Task] = set()
        self.events_emitted = 0
        self.is_running = False
        
        self._observer: Optional[Observer] = None
        self._poll_task: Optional[asyncio.Task] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._healthy = True
        self._scans: Set[asyncio.Future] = set()
    
    # Lifecycle -----------------------------------------------------------------
    
    async def start(self) -> bool:
        """
        Start observing. Returns False (after signalling on_error) if the
        folder cannot be watched.
        """
        if self.is_running:
            return True
        self._loop = asyncio.get_running_loop()
        
        try:
            if not self.folder.exists():
                self.folder.mkdir(parents=True, exist_ok=True)
                logger.info(f"Created watch folder: {self.folder}")
            observer = self._start_observer()
        except OSError as e:
            self._report(WatcherFaultError(f"Cannot watch {self.folder}: {e}", filepath=str(self.folder)))
            return False
        
        self._observer = observer
        self.is_running = True
        logger.info(f"Watching for {self.role} in: {self.folder}")
        
        await self._initial_scan()
        self._poll_task = asyncio.create_task(self._stability_loop())
        return True
    
    def _start_observer(self) -> Observer:
        observer = Observer()
        observer.schedule(_ObserverBridge(self, self._loop), str(self.folder), recursive=True)
        observer.daemon = True
        observer.start()
        return observer
    
    async def _stop_observer(self, observer: Optional[Observer]):
        if observer is None:
            return
        observer.stop()
        await asyncio.to_thread(observer.join)
    
    async def stop(self):
        """
        Stop sourcing events. Processing already started for detected files
        is left to finish on its own.
        """
        if not self.is_running:
            return
        self.is_running = False
        
        if self._poll_task is not None:
            self._poll_task.cancel()
            await asyncio.gather(self._poll_task, return_exceptions=True)
            self._poll_task = None
        
        observer, self._observer = self._observer, None
        await self._stop_observer(observer)
        logger.info(f"Stopped watching {self.folder} ({len(self.in_flight)} file(s) still processing)")
    
    async def drain(self):
        """Wait for every processing task this watcher started."""
        while self.in_flight:
            await asyncio.gather(*list(self.in_flight), return_exceptions=True)
    
    # Filtering -----------------------------------------------------------------
    
    def _within_depth(self, path: Path) -> bool:
        try:
            relative = path.relative_to(self.folder)
        except ValueError:
            return False
        return len(relative.parts) - 1 <= self.depth
    
    def accepts(self, path: Path) -> bool:
        """Ignore rules, depth bound and extension allow-list."""
        if not self._within_depth(path):
            return False
        if should_ignore(path, self.folder):
            logger.debug(f"Skipping ignored file: {path}")
            return False
        if path.suffix.lower() not in self.allowed_extensions:
            logger.debug(f"Skipping unsupported file: {path}")
            return False
        return True
    
    # Event intake --------------------------------------------------------------
    
    def _on_fs_event(self, path: Path, is_directory: bool):
        if not self.is_running:
            return
        if is_directory:
            # A folder moved in wholesale only produces one directory event
            if self._within_depth(path) and not should_ignore(path, self.folder):
                self._track_scan(self._scan(path))
            return
        if self.accepts(path):
            self.tracker.touch(path, time.monotonic())
    
    def _track_scan(self, coro):
        scan = asyncio.ensure_future(coro)
        self._scans.add(scan)
        scan.add_done_callback(self._scans.discard)
    
    def _walk(self, root: Path):
        candidates = []
        for dirpath, dirnames, filenames in os.walk(root, onerror=self._walk_error):
            current = Path(dirpath)
            rel_depth = len(current.relative_to(self.folder).parts) if current != self.folder else 0
            # Prune hidden directories and anything beyond the depth bound
            dirnames[:] = [
                d for d in dirnames
                if not d.startswith(".") and rel_depth + 1 <= self.depth
            ]
            for name in filenames:
                path = current / name
                if self.accepts(path):
                    candidates.append(path)
        return candidates
    
    def _walk_error(self, error: OSError):
        self._report_threadsafe(WatcherFaultError(f"Cannot read {error.filename}: {error}", filepath=error.filename))
    
    async def _scan(self, root: Path):
        candidates = await asyncio.to_thread(self._walk, root)
        now = time.monotonic()
        for path in candidates:
            self.tracker.touch(path, now)
        return candidates
    
    async def _initial_scan(self):
        candidates = await self._scan(self.folder)
        logger.info(f"Initial scan of {self.folder}: {len(candidates)} candidate file(s)")
    
    # Stability loop ------------------------------------------------------------
    
    async def _stability_loop(self):
        while self.is_running:
            await asyncio.sleep(self.poll_interval)
            self._check_health()
            ready, faults = self.tracker.poll(time.monotonic())
            for path, error in faults:
                self._report(WatcherFaultError(f"Cannot read {path}: {error}", filepath=str(path)))
            for path in ready:
                self._emit(StableFileEvent(path=FilePath(str(path)), detected_at=datetime.now(timezone.utc)))
    
    def _check_health(self):
        healthy = self.folder.is_dir() and os.access(self.folder, os.R_OK | os.X_OK)
        if not healthy and self._healthy:
            self._report(WatcherFaultError(f"Watch folder unavailable: {self.folder}", filepath=str(self.folder)))
        elif healthy and not self._healthy:
            logger.info(f"Watch folder available again: {self.folder}")
            self._track_scan(self._recover())
        self._healthy = healthy
    
    async def _recover(self):
        """Re-arm the observer on the recreated folder and pick up its files."""
        stale, self._observer = self._observer, None
        await self._stop_observer(stale)
        if not self.is_running:
            return
        try:
            self._observer = self._start_observer()
        except OSError as e:
            self._healthy = False
            self._report(WatcherFaultError(f"Cannot watch {self.folder}: {e}", filepath=str(self.folder)))
            return
        candidates = await self._scan(self.folder)
        logger.info(f"Rescan of {self.folder}: {len(candidates)} candidate file(s)")
    
    def _emit(self, event: StableFileEvent):
        self.events_emitted += 1
        try:
            result = self.on_file(event)
        except Exception as e:
            logger.error(f"File handler failed for {event.path}: {e}", exc_info=True)
            return
        if inspect.isawaitable(result):
            task = asyncio.ensure_future(result)
            self.in_flight.add(task)
            task.add_done_callback(self._task_done)
    
    def _task_done(self, task: asyncio.Task):
        self.in_flight.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error(f"Processing task failed: {task.exception()}")
    
    # Errors and status -----------------------------------------------------------
    
    def _report(self, error: Exception):
        logger.error(f"Watcher error ({self.role}): {error}")
        if self.on_error is None:
            return
        try:
            self.on_error(error, getattr(error, "filepath", None))
        except Exception as e:
            logger.error(f"Watcher error callback failed: {e}", exc_info=True)
    
    def _report_threadsafe(self, error: Exception):
        if self._loop is not None and self._loop.is_running():
            self._loop.call_soon_threadsafe(self._report, error)
        else:
            self._report(error)
    
    def status(self) -> Dict:
        return {
            "role": self.role,
            "folder": str(self.folder),
            "running": self.is_running,
            "healthy": self._healthy,
            "pending": len(self.tracker),
            "in_flight": len(self.in_flight),
            "events_emitted": self.events_emitted,
        }
