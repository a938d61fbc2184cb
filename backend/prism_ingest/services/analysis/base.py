"""
Base Analyzer Interface.

The analysis step lives outside ingestion. An analyzer only has to accept
a record id; it is called from the analysis queue and never awaited by
ingestion itself.
"""
from abc import ABC, abstractmethod
from typing import Any, Dict


class Analyzer(ABC):
    """
    Abstract base class for analysis dispatchers.
    
    ``analyze`` may raise; the analysis queue retries and eventually
    dead-letters the record id. The record itself is never touched.
    """
    
    @abstractmethod
    async def analyze(self, record_id: str) -> Dict[str, Any]:
        """
        Run (or hand off) analysis for one record.
        
        Args:
            record_id: Id of an already-persisted transcript record
            
        Returns:
            Result dictionary (shape is analyzer-specific)
        """
        pass
    
    async def close(self) -> None:
        """Release any connections held by the analyzer."""
        pass
