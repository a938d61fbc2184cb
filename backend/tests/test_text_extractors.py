import json

import pytest

from prism_ingest.core.exceptions import EmptyContentError, ExtractionError, IgnorableInputError
from prism_ingest.services.text_extractors import TextExtractorFactory
from prism_ingest.services.text_extractors.text_extractor import decode_text

from conftest import build_docx, build_pdf


def test_registry_covers_watched_formats():
    extensions = TextExtractorFactory.get_supported_extensions()
    for ext in (".txt", ".md", ".json", ".srt", ".pdf", ".docx", ".csv"):
        assert ext in extensions
    assert ".eml" not in extensions


def test_lookup_accepts_extension_without_dot():
    assert TextExtractorFactory.get_extractor_by_extension("PDF").format_name == "PDF"


def test_plain_text_is_trimmed(tmp_path):
    path = tmp_path / "call.txt"
    path.write_text("\n\n  Hello world  \n\n", encoding="utf-8")
    document = TextExtractorFactory.extract_document(path)
    assert document.text_content == "Hello world"
    assert document.source_path == str(path)
    assert document.derived_filename == "call.txt"


def test_json_transcript_hints(tmp_path):
    path = tmp_path / "call.json"
    path.write_text(json.dumps({"title": "Acme sync", "text": "We talked.", "duration": 600}))
    document = TextExtractorFactory.extract_document(path)
    assert document.text_content == "We talked."
    assert document.suggested_context == "Acme sync"
    assert document.duration_minutes == 10


def test_docx_paragraphs_and_tables(tmp_path):
    path = tmp_path / "notes.docx"
    path.write_bytes(build_docx("Agenda", "Pricing review", table=[["Item", "Owner"], ["Quote", "Ana"]]))
    document = TextExtractorFactory.extract_document(path)
    assert "Agenda\nPricing review" in document.text_content
    assert "Quote | Ana" in document.text_content


def test_pdf_pages_joined_in_order(tmp_path):
    path = tmp_path / "deck.pdf"
    path.write_bytes(build_pdf("Page one", "Page two"))
    document = TextExtractorFactory.extract_document(path)
    assert "Page one\nPage two" in document.text_content
    assert document.derived_filename == "deck.pdf"


def test_corrupt_pdf_raises_extraction_error(tmp_path):
    path = tmp_path / "broken.pdf"
    path.write_bytes(b"this is not a pdf")
    with pytest.raises(ExtractionError) as exc_info:
        TextExtractorFactory.extract_document(path)
    assert exc_info.value.filepath == str(path)


def test_corrupt_docx_raises_extraction_error(tmp_path):
    path = tmp_path / "broken.docx"
    path.write_bytes(b"PK not really a zip")
    with pytest.raises(ExtractionError):
        TextExtractorFactory.extract_document(path)


def test_whitespace_only_is_empty(tmp_path):
    path = tmp_path / "blank.md"
    path.write_text("   \n\t\n")
    with pytest.raises(EmptyContentError):
        TextExtractorFactory.extract_document(path)


def test_unknown_extension_is_ignorable(tmp_path):
    path = tmp_path / "image.png"
    path.write_bytes(b"\x89PNG")
    with pytest.raises(IgnorableInputError):
        TextExtractorFactory.extract_document(path)


def test_missing_file_is_extraction_error(tmp_path):
    with pytest.raises(ExtractionError):
        TextExtractorFactory.extract_document(tmp_path / "gone.txt")


def test_decode_falls_back_to_latin1():
    assert decode_text("café".encode("latin-1")) == "café"
    assert decode_text("﻿hello".encode("utf-8")) == "hello"
