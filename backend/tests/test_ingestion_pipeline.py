import json
import time

import pytest

from prism_ingest.domain.entities import IngestionStatus
from prism_ingest.services.database import StoreFactory
from prism_ingest.services.ingestion_pipeline import IngestionPipeline
from prism_ingest.services.quarantine import QuarantineLedger
from prism_ingest.services.record_materializer import RecordMaterializer
from prism_ingest.services.text_extractors import TextExtractorFactory

from conftest import build_docx, build_email, build_pdf


@pytest.mark.asyncio
async def test_plain_file_becomes_one_record(pipeline, store, watch_dir):
    path = watch_dir / "notes.txt"
    path.write_text("Hello world")
    
    result = await pipeline.process(path)
    
    assert result.status == IngestionStatus.CREATED
    record = await store.get_transcript(result.record_id)
    assert record.raw_content == "Hello world"
    assert record.filename == "notes.txt"
    assert record.context == "Watched file: notes.txt"


@pytest.mark.asyncio
async def test_second_pass_is_a_duplicate(pipeline, store, watch_dir):
    path = watch_dir / "notes.txt"
    path.write_text("Hello world")
    await pipeline.process(path)
    path.write_text("Edited later")
    
    result = await pipeline.process(path)
    
    assert result.status == IngestionStatus.DUPLICATE
    assert await store.count() == 1


@pytest.mark.asyncio
async def test_filename_hints_win_over_content(pipeline, store, watch_dir):
    path = watch_dir / "2024-03-15_Acme_discovery.md"
    path.write_text("Title: Something else\nDate: 2020-01-01\n\nWe met.")
    
    result = await pipeline.process(path)
    record = await store.get_transcript(result.record_id)
    
    assert record.call_date == "2024-03-15T00:00:00"
    assert record.context == "Discovery Call"


@pytest.mark.asyncio
async def test_content_hints_used_when_filename_has_none(pipeline, store, watch_dir):
    path = watch_dir / "call.json"
    path.write_text(json.dumps({"title": "Acme sync", "date": "2024-06-01", "text": "We met."}))
    
    record = await store.get_transcript((await pipeline.process(path)).record_id)
    
    assert record.call_date == "2024-06-01"
    assert record.context == "Acme sync"


@pytest.mark.asyncio
async def test_docx_is_extracted(pipeline, store, watch_dir):
    path = watch_dir / "brief.docx"
    path.write_bytes(build_docx("Quarterly plan"))
    record = await store.get_transcript((await pipeline.process(path)).record_id)
    assert record.raw_content == "Quarterly plan"


@pytest.mark.asyncio
async def test_empty_file_creates_nothing(pipeline, store, quarantine, watch_dir):
    path = watch_dir / "empty.txt"
    path.write_text("  \n ")
    
    result = await pipeline.process(path)
    
    assert result.status == IngestionStatus.EMPTY
    assert await store.count() == 0
    assert len(quarantine) == 0


@pytest.mark.asyncio
async def test_ignored_and_unsupported_files(pipeline, store, watch_dir):
    lock = watch_dir / "~$draft.docx"
    lock.write_text("lock")
    image = watch_dir / "photo.png"
    image.write_bytes(b"\x89PNG")
    
    assert (await pipeline.process(lock)).status == IngestionStatus.IGNORED
    assert (await pipeline.process(image)).status == IngestionStatus.IGNORED
    assert await store.count() == 0


@pytest.mark.asyncio
async def test_extraction_failure_is_quarantined(pipeline, store, quarantine, watch_dir):
    path = watch_dir / "broken.pdf"
    path.write_bytes(b"not a pdf")
    
    result = await pipeline.process(path)
    
    assert result.status == IngestionStatus.FAILED
    assert await store.count() == 0
    assert quarantine.get(str(path))["attempts"] == 1


@pytest.mark.asyncio
async def test_quarantined_file_is_retried_after_fix(store, materializer, tmp_path, watch_dir):
    ledger = QuarantineLedger(tmp_path / "q.json", base_delay=0)
    pipeline = IngestionPipeline(materializer, quarantine=ledger)
    path = watch_dir / "call.json"
    path.write_text("{broken")
    assert (await pipeline.process(path)).status == IngestionStatus.FAILED
    
    path.write_text(json.dumps({"text": "fixed"}))
    results = await pipeline.retry_quarantined()
    
    assert [r.status for r in results] == [IngestionStatus.CREATED]
    assert len(ledger) == 0


@pytest.mark.asyncio
async def test_extraction_timeout(materializer, watch_dir, monkeypatch):
    def slow_extract(path, extension=None):
        time.sleep(0.5)
    
    monkeypatch.setattr(TextExtractorFactory, "extract_document", slow_extract)
    pipeline = IngestionPipeline(materializer, extraction_timeout=0.05)
    path = watch_dir / "slow.txt"
    path.write_text("text")
    
    result = await pipeline.process(path)
    
    assert result.status == IngestionStatus.FAILED
    assert "exceeded" in result.error


@pytest.mark.asyncio
async def test_email_body_and_attachments(pipeline, store, watch_dir):
    path = watch_dir / "renewal.eml"
    path.write_bytes(build_email(attachments=[
        ("pricing.txt", "text", "plain", b"Seat price: 40"),
        ("logo.gif", "image", "gif", b"GIF89a" + b"0" * 20000),
    ]))
    
    result = await pipeline.process(path)
    
    assert result.status == IngestionStatus.CREATED
    body = await store.get_transcript(result.record_id)
    assert body.context == "Email: Q3 Renewal"
    assert body.call_date == "2024-07-02T14:30:00+00:00"
    assert body.raw_content.startswith("From: Ana Lopez <ana@acme.com>")
    
    statuses = {child.status for child in result.children}
    assert statuses == {IngestionStatus.CREATED, IngestionStatus.IGNORED}
    created = next(c for c in result.children if c.created)
    attachment = await store.get_transcript(created.record_id)
    assert attachment.context == 'Attachment: pricing.txt (from "Q3 Renewal")'
    assert attachment.raw_content.startswith("[Attachment from email]\nEmail Subject: Q3 Renewal")
    assert attachment.raw_content.endswith("Seat price: 40")
    assert attachment.call_date == body.call_date
    assert ".prism-attachments" in attachment.filepath
    assert await store.count() == 2


@pytest.mark.asyncio
async def test_same_named_attachments_yield_distinct_records(pipeline, store, watch_dir):
    path = watch_dir / "thread.eml"
    path.write_bytes(build_email(attachments=[
        ("notes.txt", "text", "plain", b"first notes"),
        ("notes.txt", "text", "plain", b"second notes"),
    ]))
    
    result = await pipeline.process(path)
    
    assert len(result.created_ids()) == 3
    filepaths = {(await store.get_transcript(rid)).filepath for rid in result.created_ids()}
    assert len(filepaths) == 3


@pytest.mark.asyncio
async def test_reprocessing_an_email_creates_nothing(pipeline, store, watch_dir):
    path = watch_dir / "thread.eml"
    path.write_bytes(build_email(attachments=[("notes.txt", "text", "plain", b"notes")]))
    await pipeline.process(path)
    
    again = await pipeline.process(path)
    
    assert again.status == IngestionStatus.DUPLICATE
    assert await store.count() == 2


@pytest.mark.asyncio
async def test_email_without_content_is_skipped(pipeline, store, watch_dir):
    path = watch_dir / "blank.eml"
    path.write_bytes(build_email(body="   "))
    assert (await pipeline.process(path)).status == IngestionStatus.EMPTY
    assert await store.count() == 0


@pytest.mark.asyncio
async def test_broken_attachment_does_not_sink_the_email(pipeline, store, watch_dir):
    path = watch_dir / "deck.eml"
    path.write_bytes(build_email(attachments=[("deck.pdf", "application", "pdf", b"garbage")]))
    
    result = await pipeline.process(path)
    
    assert result.status == IngestionStatus.CREATED
    assert result.children[0].status == IngestionStatus.FAILED
    assert await store.count() == 1


@pytest.mark.asyncio
async def test_pdf_becomes_one_record(pipeline, store, watch_dir):
    path = watch_dir / "2024-03-05_demo.pdf"
    path.write_bytes(build_pdf("Page one", "Page two"))
    
    result = await pipeline.process(path)
    
    assert result.status == IngestionStatus.CREATED
    record = await store.get_transcript(result.record_id)
    assert "Page one\nPage two" in record.raw_content
    assert record.call_date.startswith("2024-03-05")


@pytest.mark.asyncio
async def test_pdf_attachment_links_back_to_its_email(pipeline, store, watch_dir):
    path = watch_dir / "renewal.eml"
    path.write_bytes(build_email(attachments=[
        ("contract.pdf", "application", "pdf", build_pdf("Term: 12 months", "Signed by Ana")),
    ]))
    
    result = await pipeline.process(path)
    
    assert result.status == IngestionStatus.CREATED
    assert [child.status for child in result.children] == [IngestionStatus.CREATED]
    attachment = await store.get_transcript(result.children[0].record_id)
    assert 'from "Q3 Renewal"' in attachment.context
    assert attachment.filename == "contract.pdf"
    assert "Attachment: contract.pdf (application/pdf)" in attachment.raw_content
    assert "Term: 12 months\nSigned by Ana" in attachment.raw_content
    assert await store.count() == 2


@pytest.mark.asyncio
async def test_malformed_message_id_still_ingests(pipeline, store, quarantine, watch_dir):
    path = watch_dir / "odd.eml"
    path.write_bytes(build_email().replace(b"Message-ID: <abc123@acme.com>", b"Message-ID: <"))
    
    result = await pipeline.process(path)
    
    assert result.status == IngestionStatus.CREATED
    assert await store.count() == 1
    assert len(quarantine) == 0


@pytest.mark.asyncio
async def test_import_folder_is_idempotent(pipeline, store, watch_dir):
    (watch_dir / "a.txt").write_text("alpha")
    (watch_dir / "b.md").write_text("beta")
    (watch_dir / ".hidden.txt").write_text("hidden")
    (watch_dir / "ignored.csv").write_text("x,y")
    nested = watch_dir / "nested"
    nested.mkdir()
    (nested / "c.txt").write_text("not imported")
    
    first = await pipeline.import_folder(watch_dir)
    second = await pipeline.import_folder(watch_dir)
    
    assert [r.status for r in first] == [IngestionStatus.CREATED, IngestionStatus.CREATED]
    assert [r.status for r in second] == [IngestionStatus.DUPLICATE, IngestionStatus.DUPLICATE]
    assert await store.count() == 2


@pytest.mark.asyncio
async def test_json_store_survives_restart(tmp_path, watch_dir):
    data_dir = tmp_path / "db"
    path = watch_dir / "call.txt"
    path.write_text("Hello world")
    
    store = await StoreFactory.create_and_initialize("json", data_dir=data_dir)
    await IngestionPipeline(RecordMaterializer(store)).process(path)
    await store.close()
    
    reopened = await StoreFactory.create_and_initialize("json", data_dir=data_dir)
    result = await IngestionPipeline(RecordMaterializer(reopened)).process(path)
    
    assert result.status == IngestionStatus.DUPLICATE
    assert await reopened.count() == 1
