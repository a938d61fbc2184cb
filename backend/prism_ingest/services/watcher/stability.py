"""
Stability tracking for watched files.

A file is only reported once its size and modification time have stayed
the same for the whole stability window. This absorbs slow network and
cloud-sync writes so extraction never sees a half-written file.
"""
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple


@dataclass
class _Pending:
    signature: Optional[Tuple[int, int]]
    last_change: float


class StabilityTracker:
    """
    Pending-file bookkeeping, driven by an external clock.
    
    Not thread-safe: touch() and poll() must be called from the same thread
    (the watcher's event loop).
    """
    
    def __init__(self, window: float, stat: Callable[[Path], os.stat_result] = os.stat):
        self.window = window
        self._stat = stat
        self._pending: Dict[Path, _Pending] = {}
    
    def _signature(self, path: Path) -> Optional[Tuple[int, int]]:
        st = self._stat(path)
        return (st.st_size, st.st_mtime_ns)
    
    def touch(self, path: Path, now: float) -> None:
        """Register activity on a path; restarts its stability window."""
        try:
            signature = self._signature(path)
        except OSError:
            signature = None
        self._pending[Path(path)] = _Pending(signature=signature, last_change=now)
    
    def poll(self, now: float) -> Tuple[List[Path], List[Tuple[Path, OSError]]]:
        """
        Re-stat every pending file.
        
        Returns:
            (paths that became stable, (path, error) pairs for unreadable files)
        """
        ready: List[Path] = []
        faults: List[Tuple[Path, OSError]] = []
        for path, pending in list(self._pending.items()):
            try:
                signature = self._signature(path)
            except FileNotFoundError:
                # Deleted or renamed before it settled
                del self._pending[path]
                continue
            except OSError as e:
                del self._pending[path]
                faults.append((path, e))
                continue
            
            if signature != pending.signature:
                pending.signature = signature
                pending.last_change = now
            elif now - pending.last_change >= self.window:
                del self._pending[path]
                ready.append(path)
        return ready, faults
    
    def __contains__(self, path) -> bool:
        return Path(path) in self._pending
    
    def __len__(self) -> int:
        return len(self._pending)
