"""
Ignore rules for watched folders.

Matches the noise that sync tools and editors leave behind: dotfiles,
temp files, Google Drive placeholders, Office lock files and partial
downloads.
"""
import re
from pathlib import Path
from typing import Optional, Tuple

IGNORED_NAME_PATTERNS: Tuple[re.Pattern, ...] = (
    re.compile(r"\.tmp$", re.IGNORECASE),          # temp files
    re.compile(r"\.g(sheet|doc|slides)$", re.IGNORECASE),  # Google Drive placeholders
    re.compile(r"^~\$"),                           # Office lock files
    re.compile(r"\.crdownload$", re.IGNORECASE),   # Chrome downloads
    re.compile(r"\.part$", re.IGNORECASE),         # partial downloads
)


def _is_hidden(part: str) -> bool:
    return part.startswith(".") and part not in (".", "..")


def should_ignore(path: Path, root: Optional[Path] = None) -> bool:
    """
    Whether a candidate file is sync/editor noise.
    
    Args:
        path: Candidate file path
        root: Watched folder; when given, every path component below it is
            checked for dotfile names (so staging dirs are skipped), otherwise
            only the filename is
    """
    path = Path(path)
    if root is not None:
        try:
            parts = path.relative_to(root).parts
        except ValueError:
            parts = (path.name,)
    else:
        parts = (path.name,)
    
    if any(_is_hidden(part) for part in parts):
        return True
    return any(pattern.search(path.name) for pattern in IGNORED_NAME_PATTERNS)
