"""
Celery Analyzer.

Hands record ids to an external analysis worker through the Celery broker.
The worker owns the ``prism.analyze_transcript`` task; this process only
publishes it.
"""
import asyncio
from typing import Any, Dict, Optional

from celery import Celery

from .base import Analyzer
from ..message_queue import ANALYZE_TASK_NAME, ANALYSIS_QUEUE, celery_app as default_app
from ...core.logging_config import get_logger

logger = get_logger(__name__)


class CeleryAnalyzer(Analyzer):
    """Publishes one Celery task per new record."""
    
    def __init__(self, app: Optional[Celery] = None):
        self.app = app or default_app
    
    async def analyze(self, record_id: str) -> Dict[str, Any]:
        # send_task blocks on the broker connection
        result = await asyncio.to_thread(
            self.app.send_task,
            ANALYZE_TASK_NAME,
            args=[record_id],
            queue=ANALYSIS_QUEUE,
        )
        logger.info(f"Queued analysis task {result.id} for record {record_id}")
        return {"status": "queued", "record_id": record_id, "task_id": result.id}
