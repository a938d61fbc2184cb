from .folder_watcher import FolderWatcher
from .manager import WatcherManager
from .stability import StabilityTracker

__all__ = ["FolderWatcher", "StabilityTracker", "WatcherManager"]
