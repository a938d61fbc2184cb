"""
Quarantine Ledger

Keeps track of files whose extraction failed so they can be retried with
exponential backoff instead of waiting for the next full re-scan.
Empty files and ignored inputs are never quarantined.
"""
import json
import os
from datetime import datetime, timedelta, timezone
from pathlib import Path
from threading import Lock
from typing import Any, Dict, List, Optional

from ..core.logging_config import get_logger

logger = get_logger(__name__)


class QuarantineLedger:
    """
    Records extraction failures per filepath.
    
    Features:
    - Exponential backoff between retries
    - Maximum retry attempts, after which the entry is marked permanent
    - Optional JSON persistence so the ledger survives restarts
    """
    
    def __init__(
        self,
        path: Optional[Path] = None,
        max_attempts: int = 3,
        base_delay: int = 60,  # 1 minute
        max_delay: int = 3600,  # 1 hour
        backoff_multiplier: float = 2.0
    ):
        """
        Initialize quarantine ledger.
        
        Args:
            path: JSON file to persist entries to (None keeps them in memory)
            max_attempts: Failed attempts after which a file is given up
            base_delay: Base delay in seconds before first retry
            max_delay: Maximum delay in seconds between retries
            backoff_multiplier: Multiplier for exponential backoff
        """
        self.path = Path(path) if path else None
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.backoff_multiplier = backoff_multiplier
        self._entries: Dict[str, Dict[str, Any]] = {}
        self._lock = Lock()
        self._load()
    
    def _load(self):
        if self.path is None or not self.path.exists():
            return
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                self._entries = json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            logger.warning(f"Could not load quarantine ledger {self.path}: {e}")
            self._entries = {}
    
    def _save(self):
        if self.path is None:
            return
        with self._lock:
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                tmp = self.path.with_suffix(".tmp")
                with open(tmp, "w", encoding="utf-8") as f:
                    json.dump(self._entries, f, indent=2, ensure_ascii=False)
                os.replace(tmp, self.path)
            except OSError as e:
                logger.error(f"Could not save quarantine ledger {self.path}: {e}")
    
    def calculate_retry_delay(self, attempts: int) -> int:
        """
        Delay before the next retry using exponential backoff.
        
        Args:
            attempts: Failed attempts so far (1 after the first failure)
        """
        delay = int(self.base_delay * (self.backoff_multiplier ** max(attempts - 1, 0)))
        return min(delay, self.max_delay)
    
    def record_failure(self, filepath: str, error: str, now: Optional[datetime] = None) -> Dict[str, Any]:
        """Add or update the entry for a file that failed extraction."""
        now = now or datetime.now(timezone.utc)
        entry = self._entries.get(filepath, {"filepath": filepath, "attempts": 0})
        entry["attempts"] += 1
        entry["error"] = error
        entry["last_failed_at"] = now.isoformat()
        
        if entry["attempts"] >= self.max_attempts:
            entry["permanent"] = True
            entry["next_retry_at"] = None
            logger.warning(f"Giving up on {filepath} after {entry['attempts']} failed attempts")
        else:
            entry["permanent"] = False
            entry["next_retry_at"] = (now + timedelta(seconds=self.calculate_retry_delay(entry["attempts"]))).isoformat()
        
        self._entries[filepath] = entry
        self._save()
        return dict(entry)
    
    def clear(self, filepath: str) -> bool:
        """Drop the entry for a file (after it finally succeeded)."""
        if self._entries.pop(filepath, None) is None:
            return False
        self._save()
        return True
    
    def get(self, filepath: str) -> Optional[Dict[str, Any]]:
        entry = self._entries.get(filepath)
        return dict(entry) if entry else None
    
    def due(self, now: Optional[datetime] = None) -> List[str]:
        """Filepaths whose backoff has elapsed and that are not permanent failures."""
        now = now or datetime.now(timezone.utc)
        ready = []
        for filepath, entry in self._entries.items():
            if entry.get("permanent") or not entry.get("next_retry_at"):
                continue
            if datetime.fromisoformat(entry["next_retry_at"]) <= now:
                ready.append(filepath)
        return ready
    
    def entries(self) -> List[Dict[str, Any]]:
        return [dict(entry) for entry in self._entries.values()]
    
    def __len__(self) -> int:
        return len(self._entries)
