"""
Lightweight transcript-shape parser.

Recovers the content string plus whatever duration / date / title hints a
plain-text family file carries. Nothing here interprets what was said.
"""
import json
import math
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from ...core.exceptions import ExtractionError

_SRT_TIMING = re.compile(
    r"^\s*(\d{1,2}):(\d{2}):(\d{2})[,.](\d{1,3})\s*-->\s*(\d{1,2}):(\d{2}):(\d{2})[,.](\d{1,3})"
)
_SRT_INDEX = re.compile(r"^\s*\d+\s*$")
_BRACKET_TIMESTAMP = re.compile(r"\[(?:(\d{1,2}):)?(\d{1,2}):(\d{2})\]")
_HEADER_LINE = re.compile(r"^\s*(date|duration|title|subject|topic)\s*:\s*(.+?)\s*$", re.IGNORECASE)
_DURATION_VALUE = re.compile(r"(\d+(?:\.\d+)?)\s*(h|hr|hrs|hours?|m|min|mins|minutes?|s|sec|secs|seconds?)?", re.IGNORECASE)

HEADER_SCAN_LINES = 20

_TEXT_KEYS = ("transcript", "text", "content", "body")
_SEGMENT_KEYS = ("segments", "utterances", "transcript", "entries")
_DATE_KEYS = ("date", "call_date", "callDate", "created_at", "start_time", "startTime")
_CONTEXT_KEYS = ("title", "context", "meeting_title", "topic", "subject")


@dataclass
class ParsedTranscript:
    """Content plus optional hints recovered from the file's own structure."""
    raw_content: str
    duration_minutes: Optional[int] = None
    call_date: Optional[str] = None
    context: Optional[str] = None


def _finite(value: Any) -> Optional[float]:
    """Numeric JSON value, or None for non-numbers, NaN and infinities."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value) if math.isfinite(value) else None


def _minutes(seconds: float) -> Optional[int]:
    if not math.isfinite(seconds) or seconds <= 0:
        return None
    return int(math.ceil(seconds / 60.0))


def parse_srt(text: str) -> ParsedTranscript:
    """Drop cue numbers and timing lines, keep the spoken text."""
    lines: List[str] = []
    last_end = 0.0
    for line in text.splitlines():
        timing = _SRT_TIMING.match(line)
        if timing:
            h, m, s, ms = (int(g) for g in timing.groups()[4:])
            last_end = max(last_end, h * 3600 + m * 60 + s + ms / 1000.0)
            continue
        if _SRT_INDEX.match(line) or not line.strip():
            continue
        lines.append(line.strip())
    return ParsedTranscript(raw_content="\n".join(lines), duration_minutes=_minutes(last_end))


def _first_str(data: Dict[str, Any], keys) -> Optional[str]:
    for key in keys:
        value = data.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def _render_segments(segments: List[Any]) -> ParsedTranscript:
    lines: List[str] = []
    last_end = 0.0
    for segment in segments:
        if isinstance(segment, str):
            lines.append(segment)
            continue
        if not isinstance(segment, dict):
            continue
        text = segment.get("text") or segment.get("content") or ""
        if not isinstance(text, str) or not text.strip():
            continue
        speaker = segment.get("speaker") or segment.get("name")
        lines.append(f"{speaker}: {text.strip()}" if speaker else text.strip())
        end = _finite(segment.get("end") or segment.get("end_time"))
        if end is not None:
            last_end = max(last_end, end)
    return ParsedTranscript(raw_content="\n".join(lines), duration_minutes=_minutes(last_end))


def parse_json(text: str) -> ParsedTranscript:
    """
    Parse a JSON transcript export.

    Accepts an object carrying a text field or a segment list, or a bare
    segment list.

    Raises:
        ExtractionError: If the file is not valid JSON or has no recognisable shape
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ExtractionError(f"Invalid JSON transcript: {e}") from e

    if isinstance(data, list):
        return _render_segments(data)
    if not isinstance(data, dict):
        raise ExtractionError(f"Unsupported JSON transcript shape: {type(data).__name__}")

    parsed = None
    for key in _SEGMENT_KEYS:
        if isinstance(data.get(key), list):
            parsed = _render_segments(data[key])
            break
    if parsed is None:
        parsed = ParsedTranscript(raw_content=_first_str(data, _TEXT_KEYS) or "")

    minutes = _finite(data.get("duration_minutes"))
    seconds = _finite(data.get("duration"))
    if minutes is not None:
        parsed.duration_minutes = int(math.ceil(minutes)) if minutes > 0 else None
    elif seconds is not None:
        parsed.duration_minutes = _minutes(seconds)

    parsed.call_date = _first_str(data, _DATE_KEYS)
    parsed.context = _first_str(data, _CONTEXT_KEYS)
    return parsed


def _parse_duration(value: str) -> Optional[int]:
    clock = re.match(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?$", value.strip())
    if clock:
        a, b, c = clock.groups()
        seconds = int(a) * 3600 + int(b) * 60 + int(c) if c else int(a) * 60 + int(b)
        return _minutes(seconds)
    match = _DURATION_VALUE.match(value.strip())
    if not match:
        return None
    amount, unit = float(match.group(1)), (match.group(2) or "m").lower()
    if unit.startswith("h"):
        return _minutes(amount * 3600)
    if unit.startswith("s"):
        return _minutes(amount)
    return _minutes(amount * 60)


def parse_plain(text: str) -> ParsedTranscript:
    """Plain text / markdown: content as-is, hints from header lines or timestamps."""
    parsed = ParsedTranscript(raw_content=text)
    for line in text.splitlines()[:HEADER_SCAN_LINES]:
        header = _HEADER_LINE.match(line.lstrip("#*- "))
        if not header:
            continue
        key, value = header.group(1).lower(), header.group(2).strip("* ")
        if key == "date" and parsed.call_date is None:
            parsed.call_date = value
        elif key == "duration" and parsed.duration_minutes is None:
            parsed.duration_minutes = _parse_duration(value)
        elif key in ("title", "subject", "topic") and parsed.context is None:
            parsed.context = value

    if parsed.duration_minutes is None:
        last_seconds = 0
        for match in _BRACKET_TIMESTAMP.finditer(text):
            h, m, s = match.groups()
            last_seconds = max(last_seconds, int(h or 0) * 3600 + int(m) * 60 + int(s))
        parsed.duration_minutes = _minutes(last_seconds)
    return parsed


def parse_transcript(text: str, extension: str) -> ParsedTranscript:
    """
    Dispatch on extension to the matching shape parser.

    Args:
        text: Decoded file content
        extension: Lower-case extension including the dot

    Returns:
        ParsedTranscript with raw content and any recovered hints
    """
    if extension == ".srt":
        return parse_srt(text)
    if extension == ".json":
        return parse_json(text)
    return parse_plain(text)
