"""
Analysis dispatchers.

Supports:
- MockAnalyzer (in-process, for development and tests)
- CeleryAnalyzer (publishes to an external analysis worker)
- NullAnalyzer (analysis disabled)
"""
from .base import Analyzer
from .mock_analyzer import MockAnalyzer, NullAnalyzer
from .factory import AnalyzerFactory

__all__ = [
    "Analyzer",
    "MockAnalyzer",
    "NullAnalyzer",
    "AnalyzerFactory",
]
