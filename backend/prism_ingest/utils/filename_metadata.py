"""
Filename metadata parser.

Infers a call date and a call type from naming conventions such as
``2024-03-15_Acme_discovery.txt`` or ``Acme QBR 03.15.2024.pdf``. Values
found here win over anything derived from file content.
"""
import re
from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional, Tuple

from ..domain.entities import FilenameMetadata

# (pattern, group order) - first valid calendar date wins
_DATE_PATTERNS: Tuple[Tuple[re.Pattern, str], ...] = (
    (re.compile(r"(?<!\d)((?:19|20)\d{2})[-_.](\d{1,2})[-_.](\d{1,2})(?!\d)"), "ymd"),
    (re.compile(r"(?<!\d)((?:19|20)\d{2})(\d{2})(\d{2})(?!\d)"), "ymd"),
    (re.compile(r"(?<!\d)(\d{1,2})[-_.](\d{1,2})[-_.]((?:19|20)\d{2})(?!\d)"), "mdy"),
)

_CALL_TYPES: Tuple[Tuple[str, str], ...] = (
    (r"discovery", "Discovery Call"),
    (r"demo", "Demo"),
    (r"follow[-_ ]?up", "Follow-up"),
    (r"negotiation", "Negotiation"),
    (r"kick[-_ ]?off", "Kickoff"),
    (r"check[-_ ]?in", "Check-in"),
    (r"qbr", "QBR"),
    (r"renewal", "Renewal"),
    (r"onboarding", "Onboarding"),
    (r"interview", "Interview"),
    (r"stand[-_ ]?up", "Standup"),
    (r"1[-_ ]?on[-_ ]?1|one[-_ ]on[-_ ]one", "1:1"),
    (r"pitch", "Pitch"),
    (r"internal", "Internal Meeting"),
)

_CALL_TYPE_PATTERNS = tuple(
    (re.compile(rf"(?<![a-z0-9])(?:{pattern})(?![a-z])"), label)
    for pattern, label in _CALL_TYPES
)


def _first_valid_date(stem: str) -> Optional[str]:
    for pattern, order in _DATE_PATTERNS:
        for match in pattern.finditer(stem):
            a, b, c = (int(g) for g in match.groups())
            year, month, day = (a, b, c) if order == "ymd" else (c, a, b)
            try:
                return datetime(year, month, day).isoformat()
            except ValueError:
                continue
    return None


def _first_call_type(stem: str, patterns: Iterable = _CALL_TYPE_PATTERNS) -> Optional[str]:
    lowered = stem.lower()
    for pattern, label in patterns:
        if pattern.search(lowered):
            return label
    return None


def parse_filename_metadata(filename: str) -> FilenameMetadata:
    """
    Parse date and call-type hints out of a filename.

    Args:
        filename: Bare filename or path; only the final component's stem is used

    Returns:
        FilenameMetadata with whichever fields could be inferred
    """
    stem = Path(filename).stem
    return FilenameMetadata(date=_first_valid_date(stem), call_type=_first_call_type(stem))
