import json

import pytest

from prism_ingest.core.exceptions import ExtractionError
from prism_ingest.services.text_extractors.transcript_parser import (
    parse_json,
    parse_plain,
    parse_srt,
    parse_transcript,
)

SRT = """1
00:00:01,000 --> 00:00:04,000
Hello and welcome.

2
00:02:58,500 --> 00:03:10,250
Thanks for joining.
"""


def test_srt_drops_cues_and_timings():
    parsed = parse_srt(SRT)
    assert parsed.raw_content == "Hello and welcome.\nThanks for joining."
    assert parsed.duration_minutes == 4


def test_json_segments_with_speakers():
    data = {
        "title": "Acme renewal",
        "date": "2024-05-01",
        "segments": [
            {"speaker": "Ana", "text": "Hi", "end": 30},
            {"speaker": "Ben", "text": "Hello", "end": 125.5},
        ],
    }
    parsed = parse_json(json.dumps(data))
    assert parsed.raw_content == "Ana: Hi\nBen: Hello"
    assert parsed.duration_minutes == 3
    assert parsed.call_date == "2024-05-01"
    assert parsed.context == "Acme renewal"


def test_json_plain_text_field():
    parsed = parse_json(json.dumps({"transcript": "just text", "duration_minutes": 12}))
    assert parsed.raw_content == "just text"
    assert parsed.duration_minutes == 12


def test_json_bare_list():
    parsed = parse_json(json.dumps(["one", "two"]))
    assert parsed.raw_content == "one\ntwo"


@pytest.mark.parametrize("payload", [
    '{"transcript": "hi", "duration_minutes": NaN}',
    '{"transcript": "hi", "duration": Infinity}',
    '{"segments": [{"text": "hi", "end": -Infinity}]}',
])
def test_json_non_finite_durations_are_dropped(payload):
    parsed = parse_json(payload)
    assert parsed.raw_content == "hi"
    assert parsed.duration_minutes is None


def test_invalid_json_raises():
    with pytest.raises(ExtractionError):
        parse_json("{not json")


def test_unsupported_json_shape_raises():
    with pytest.raises(ExtractionError):
        parse_json("42")


def test_plain_header_lines():
    text = "# Title: Weekly sync\n**Date:** 2024-02-02\nDuration: 45 min\n\nBody text"
    parsed = parse_plain(text)
    assert parsed.raw_content == text
    assert parsed.context == "Weekly sync"
    assert parsed.call_date == "2024-02-02"
    assert parsed.duration_minutes == 45


def test_plain_duration_from_bracket_timestamps():
    parsed = parse_plain("[00:00:05] Ana: hi\n[00:10:01] Ben: bye")
    assert parsed.duration_minutes == 11


def test_dispatch_by_extension():
    assert parse_transcript(SRT, ".srt").raw_content.startswith("Hello")
    assert parse_transcript("plain", ".md").raw_content == "plain"
