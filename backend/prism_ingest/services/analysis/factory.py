"""
Analyzer Factory.

Selects the analyzer implementation from ANALYZER_TYPE.
"""
from typing import Optional

from .base import Analyzer
from .mock_analyzer import MockAnalyzer, NullAnalyzer
from ...core.config import ANALYZER_TYPE
from ...core.logging_config import get_logger

logger = get_logger(__name__)


class AnalyzerFactory:
    """
    Factory for creating analyzer instances.
    
    Unknown types fall back to MockAnalyzer with a warning.
    """
    
    @staticmethod
    def get_analyzer(analyzer_type: Optional[str] = None) -> Analyzer:
        analyzer_type = (analyzer_type or ANALYZER_TYPE).lower()
        
        if analyzer_type == "celery":
            # Imported lazily so the broker config is only read when used
            from .celery_analyzer import CeleryAnalyzer
            logger.info("Using CeleryAnalyzer")
            return CeleryAnalyzer()
        elif analyzer_type == "none":
            logger.info("Analysis disabled (NullAnalyzer)")
            return NullAnalyzer()
        elif analyzer_type == "mock":
            logger.info("Using MockAnalyzer (configured)")
            return MockAnalyzer()
        else:
            logger.warning(f"Unknown analyzer '{analyzer_type}', using MockAnalyzer")
            return MockAnalyzer()
