"""
Store Factory for creating transcript store adapters.
Implements Factory Pattern for plug-and-play store support.
"""
import os
from pathlib import Path
from typing import Optional

from .base import TranscriptStore
from .memory_adapter import MemoryStore
from .json_adapter import JSONStore


class StoreFactory:
    """
    Factory for creating transcript stores.
    Supports JSON (file-based) and Memory (in-memory) backends.
    """
    
    @staticmethod
    def create(database_type: Optional[str] = None, **kwargs) -> TranscriptStore:
        """
        Create a store instance.
        
        Args:
            database_type: 'json', 'memory', or None to read DATABASE_TYPE
            **kwargs: Additional arguments for specific adapters
        
        Examples:
            store = StoreFactory.create('json', data_dir=Path('data/json_db'))
            store = StoreFactory.create('memory')
        """
        if database_type is None:
            database_type = os.getenv("DATABASE_TYPE", "json")
        
        database_type = database_type.lower()
        
        if database_type == "json":
            data_dir = kwargs.get("data_dir")
            return JSONStore(data_dir=Path(data_dir) if data_dir else None)
        elif database_type == "memory":
            return MemoryStore()
        else:
            raise ValueError(
                f"Unsupported database type: {database_type}. "
                f"Supported types: 'json', 'memory'"
            )
    
    @staticmethod
    async def create_and_initialize(database_type: Optional[str] = None, **kwargs) -> TranscriptStore:
        """Create a store and initialize it."""
        store = StoreFactory.create(database_type, **kwargs)
        await store.initialize()
        return store
