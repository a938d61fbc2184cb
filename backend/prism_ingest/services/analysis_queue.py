"""
Analysis Queue with Worker Pool, Retry Logic and Dead-Letter Log.

New records are handed off here without blocking ingestion. Workers call
the configured analyzer; failures are retried with exponential backoff and
finally written to a dead-letter log. A failed analysis never rolls back or
deletes the record it was about.
"""
import asyncio
import json
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional

from .analysis.base import Analyzer
from ..core.logging_config import get_logger

logger = get_logger(__name__)


class AnalysisStatus(Enum):
    """Analysis task status."""
    PENDING = "pending"
    PROCESSING = "processing"
    SUCCESS = "success"
    RETRYING = "retrying"
    DEAD_LETTERED = "dead_lettered"


@dataclass
class AnalysisTask:
    """One record waiting for analysis."""
    record_id: str
    filepath: Optional[str] = None
    status: AnalysisStatus = AnalysisStatus.PENDING
    retry_count: int = 0
    max_retries: int = 3
    error: Optional[str] = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    completed_at: Optional[datetime] = None
    
    def can_retry(self) -> bool:
        return self.retry_count < self.max_retries
    
    def mark_processing(self):
        self.status = AnalysisStatus.PROCESSING
    
    def mark_success(self):
        self.status = AnalysisStatus.SUCCESS
        self.completed_at = datetime.now(timezone.utc)
    
    def mark_retrying(self, error: str):
        self.status = AnalysisStatus.RETRYING
        self.error = error
        self.retry_count += 1
    
    def mark_dead_lettered(self, error: str):
        self.status = AnalysisStatus.DEAD_LETTERED
        self.error = error
        self.completed_at = datetime.now(timezone.utc)


class DeadLetterLog:
    """
    Append-only record of analyses that exhausted their retries.
    
    Entries are kept in memory and, when a path is given, appended to a
    JSON-lines file so they can be replayed later.
    """
    
    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path else None
        self.entries: List[Dict] = []
    
    def append(self, task: AnalysisTask) -> Dict:
        entry = {
            "record_id": task.record_id,
            "filepath": task.filepath,
            "error": task.error,
            "attempts": task.retry_count + 1,
            "failed_at": datetime.now(timezone.utc).isoformat(),
        }
        self.entries.append(entry)
        if self.path is not None:
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                with open(self.path, "a", encoding="utf-8") as f:
                    f.write(json.dumps(entry, ensure_ascii=False) + "\n")
            except OSError as e:
                logger.error(f"Could not write dead-letter entry for {task.record_id}: {e}")
        return entry


class AnalysisQueue:
    """
    Worker pool that feeds new record ids to an Analyzer.
    
    ``submit`` never blocks and never raises for analysis failures, so the
    ingestion path is decoupled from analysis latency.
    """
    
    def __init__(
        self,
        analyzer: Analyzer,
        workers: int = 2,
        max_retries: int = 3,
        retry_delays: Optional[List[float]] = None,
        dead_letter: Optional[DeadLetterLog] = None,
        history_size: int = 1000,
    ):
        """
        Initialize analysis queue.
        
        Args:
            analyzer: Analyzer that performs (or hands off) the analysis
            workers: Number of worker coroutines
            max_retries: Retries per record before dead-lettering
            retry_delays: Backoff delays in seconds, last value repeats
            dead_letter: Where exhausted tasks are recorded
            history_size: How many finished tasks stay available to get_task
        """
        self.analyzer = analyzer
        self.worker_count = max(1, workers)
        self.max_retries = max_retries
        
        # Retry delays with exponential backoff: [1s, 2s, 4s, 8s]
        self.retry_delays = retry_delays or [1.0, 2.0, 4.0, 8.0]
        self.dead_letter = dead_letter or DeadLetterLog()
        
        self.task_queue: asyncio.Queue = asyncio.Queue()
        self.tasks: Dict[str, AnalysisTask] = {}
        self.history: "OrderedDict[str, AnalysisTask]" = OrderedDict()
        self.history_size = max(0, history_size)
        self.workers: List[asyncio.Task] = []
        self.is_running = False
        
        self.stats = {
            "total_tasks": 0,
            "completed": 0,
            "dead_lettered": 0,
            "retries": 0,
        }
    
    def submit(self, record_id: str, filepath: Optional[str] = None) -> AnalysisTask:
        """Enqueue a record for analysis and return immediately."""
        task = AnalysisTask(record_id=record_id, filepath=filepath, max_retries=self.max_retries)
        self.tasks[record_id] = task
        self.task_queue.put_nowait(task)
        self.stats["total_tasks"] += 1
        logger.debug(f"Queued analysis for {record_id} (queue size: {self.task_queue.qsize()})")
        return task
    
    async def start(self):
        """Start the worker pool."""
        if self.is_running:
            logger.warning("Analysis workers already running, skipping start")
            return
        
        self.is_running = True
        for _ in range(self.worker_count):
            self.workers.append(asyncio.create_task(self._worker()))
        logger.info(f"Analysis queue started with {self.worker_count} workers")
    
    async def _worker(self):
        """Worker coroutine that processes tasks from the queue."""
        while True:
            task = await self.task_queue.get()
            try:
                await self._process_task(task)
            except Exception as e:
                logger.error(f"Analysis worker error for {task.record_id}: {e}", exc_info=True)
            finally:
                self._retire(task)
                self.task_queue.task_done()
    
    def _retire(self, task: AnalysisTask):
        """Move a finished task out of the active map into the bounded history."""
        if self.tasks.get(task.record_id) is task:
            del self.tasks[task.record_id]
        if self.history_size == 0:
            return
        self.history[task.record_id] = task
        self.history.move_to_end(task.record_id)
        while len(self.history) > self.history_size:
            self.history.popitem(last=False)
    
    def _delay_for(self, retry_count: int) -> float:
        return self.retry_delays[min(retry_count - 1, len(self.retry_delays) - 1)]
    
    async def _process_task(self, task: AnalysisTask):
        """Run one task with retry and dead-letter handling."""
        task.mark_processing()
        while True:
            try:
                await self.analyzer.analyze(task.record_id)
                task.mark_success()
                self.stats["completed"] += 1
                logger.info(f"Analysis completed for record {task.record_id}")
                return
            except asyncio.CancelledError:
                raise
            except Exception as e:
                error_msg = f"{type(e).__name__}: {e}"
                if task.can_retry():
                    task.mark_retrying(error_msg)
                    self.stats["retries"] += 1
                    delay = self._delay_for(task.retry_count)
                    logger.warning(
                        f"Analysis failed for {task.record_id}, retrying in {delay}s "
                        f"(attempt {task.retry_count + 1}/{task.max_retries + 1}): {error_msg}"
                    )
                    await asyncio.sleep(delay)
                    continue
                
                task.mark_dead_lettered(error_msg)
                self.stats["dead_lettered"] += 1
                self.dead_letter.append(task)
                logger.error(
                    f"Analysis for {task.record_id} dead-lettered after {task.retry_count + 1} attempts: {error_msg}"
                )
                return
    
    async def join(self):
        """Wait until every submitted task has finished."""
        await self.task_queue.join()
    
    def get_stats(self) -> Dict:
        """Get current statistics."""
        return {
            **self.stats,
            "pending": sum(1 for t in self.tasks.values() if t.status == AnalysisStatus.PENDING),
            "retrying": sum(1 for t in self.tasks.values() if t.status == AnalysisStatus.RETRYING),
            "queue_size": self.task_queue.qsize(),
            "worker_count": len(self.workers),
        }
    
    def get_task(self, record_id: str) -> Optional[AnalysisTask]:
        return self.tasks.get(record_id) or self.history.get(record_id)
    
    async def stop(self, drain: bool = True):
        """Stop all workers, optionally letting queued tasks finish first."""
        logger.info(f"Stopping analysis queue ({len(self.workers)} workers, {self.task_queue.qsize()} queued)")
        if drain and self.workers:
            await self.task_queue.join()
        
        self.is_running = False
        for worker in self.workers:
            worker.cancel()
        await asyncio.gather(*self.workers, return_exceptions=True)
        self.workers.clear()
        await self.analyzer.close()
        logger.info("Analysis queue stopped")
