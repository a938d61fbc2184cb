"""
Mock Analyzers.

Provide in-process analyzers for development and tests. They make no
external calls.
"""
from typing import Any, Dict, List

from .base import Analyzer
from ...core.logging_config import get_logger

logger = get_logger(__name__)


class MockAnalyzer(Analyzer):
    """
    Records every id it was asked to analyze.
    
    Useful for:
    - Development without an analysis backend
    - Tests asserting that new records were dispatched
    """
    
    def __init__(self):
        self.analyzed: List[str] = []
    
    async def analyze(self, record_id: str) -> Dict[str, Any]:
        self.analyzed.append(record_id)
        logger.info(f"MOCK analysis completed for record {record_id}")
        return {"status": "completed", "record_id": record_id, "mock": True}


class NullAnalyzer(Analyzer):
    """Analysis disabled: accepts every id and does nothing."""
    
    async def analyze(self, record_id: str) -> Dict[str, Any]:
        return {"status": "skipped", "record_id": record_id}
