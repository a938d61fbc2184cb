"""
Store abstraction layer for plug-and-play persistence.
Supports JSON (file-based) and Memory (in-memory) backends.
"""
from .base import TranscriptStore
from .memory_adapter import MemoryStore
from .json_adapter import JSONStore
from .factory import StoreFactory

__all__ = [
    "TranscriptStore",
    "MemoryStore",
    "JSONStore",
    "StoreFactory",
]
