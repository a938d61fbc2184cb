"""
Validation utilities - Pure validation functions.
"""
import re
from pathlib import Path

_UNSAFE_FILENAME_CHARS = re.compile(r'[/\\:*?"<>|\x00-\x1f]')
MAX_FILENAME_LENGTH = 200


def sanitize_filename(filename: str, fallback: str = "attachment") -> str:
    """
    Make an untrusted filename safe to write inside a staging directory.

    Path separators and characters rejected by common filesystems become
    underscores; the result is capped at MAX_FILENAME_LENGTH while keeping
    the extension.
    """
    name = _UNSAFE_FILENAME_CHARS.sub("_", filename or "").strip().strip(".")
    if not name:
        return fallback
    if len(name) > MAX_FILENAME_LENGTH:
        suffix = Path(name).suffix[:20]
        name = name[:MAX_FILENAME_LENGTH - len(suffix)] + suffix
    return name


def validate_watch_folder(folder: str) -> Path:
    """
    Validate a folder supplied at runtime (e.g. through the API).
    
    Raises:
        ValueError: If folder is empty, missing or not a directory
    """
    if not folder or not folder.strip():
        raise ValueError("Folder path cannot be empty")
    
    path = Path(folder.strip()).expanduser()
    if not path.exists():
        raise ValueError(f"Folder does not exist: {path}")
    if not path.is_dir():
        raise ValueError(f"Not a directory: {path}")
    return path.resolve()
