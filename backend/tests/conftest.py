"""Shared fixtures: stores, pipelines and sample files."""
import io
from email.message import EmailMessage

import pytest
from docx import Document as DocxDocument
from pypdf import PdfWriter
from pypdf.generic import DecodedStreamObject, DictionaryObject, NameObject

from prism_ingest.services.analysis import MockAnalyzer
from prism_ingest.services.analysis_queue import AnalysisQueue, DeadLetterLog
from prism_ingest.services.database import MemoryStore
from prism_ingest.services.ingestion_pipeline import IngestionPipeline
from prism_ingest.services.quarantine import QuarantineLedger
from prism_ingest.services.record_materializer import RecordMaterializer


def build_email(
    subject="Q3 Renewal",
    sender="Ana Lopez <ana@acme.com>",
    to="sales@prism.dev",
    cc=None,
    date="Tue, 02 Jul 2024 14:30:00 +0000",
    body="Please see the attached notes.",
    html=None,
    attachments=(),
) -> bytes:
    """
    Build an RFC 5322 message.

    attachments: iterable of (filename, maintype, subtype, data[, disposition])
    """
    msg = EmailMessage()
    if subject is not None:
        msg["Subject"] = subject
    if sender is not None:
        msg["From"] = sender
    msg["To"] = to
    if cc:
        msg["Cc"] = cc
    if date is not None:
        msg["Date"] = date
    msg["Message-ID"] = "<abc123@acme.com>"
    if body is not None:
        msg.set_content(body)
    if html is not None:
        if body is None:
            msg.set_content(html, subtype="html")
        else:
            msg.add_alternative(html, subtype="html")
    for attachment in attachments:
        filename, maintype, subtype, data = attachment[:4]
        disposition = attachment[4] if len(attachment) > 4 else "attachment"
        msg.add_attachment(data, maintype=maintype, subtype=subtype, filename=filename, disposition=disposition)
    return msg.as_bytes()


def build_docx(*paragraphs, table=None) -> bytes:
    doc = DocxDocument()
    for text in paragraphs:
        doc.add_paragraph(text)
    if table:
        grid = doc.add_table(rows=len(table), cols=len(table[0]))
        for r, row in enumerate(table):
            for c, value in enumerate(row):
                grid.cell(r, c).text = value
    buffer = io.BytesIO()
    doc.save(buffer)
    return buffer.getvalue()


def build_pdf(*pages) -> bytes:
    """One Helvetica text line per page."""
    writer = PdfWriter()
    font = writer._add_object(DictionaryObject({
        NameObject("/Type"): NameObject("/Font"),
        NameObject("/Subtype"): NameObject("/Type1"),
        NameObject("/BaseFont"): NameObject("/Helvetica"),
    }))
    for text in pages:
        page = writer.add_blank_page(width=612, height=792)
        stream = DecodedStreamObject()
        stream.set_data(f"BT /F1 12 Tf 72 720 Td ({text}) Tj ET".encode("latin-1"))
        page[NameObject("/Contents")] = writer._add_object(stream)
        page[NameObject("/Resources")] = DictionaryObject({
            NameObject("/Font"): DictionaryObject({NameObject("/F1"): font}),
        })
    buffer = io.BytesIO()
    writer.write(buffer)
    return buffer.getvalue()

@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def analyzer():
    return MockAnalyzer()


@pytest.fixture
def analysis_queue(analyzer, tmp_path):
    return AnalysisQueue(
        analyzer,
        workers=1,
        max_retries=2,
        retry_delays=[0.01],
        dead_letter=DeadLetterLog(tmp_path / "dead_letter.jsonl"),
    )


@pytest.fixture
def materializer(store, analysis_queue):
    return RecordMaterializer(store, analysis_queue=analysis_queue)


@pytest.fixture
def quarantine(tmp_path):
    return QuarantineLedger(tmp_path / "quarantine.json")


@pytest.fixture
def pipeline(materializer, quarantine):
    return IngestionPipeline(materializer, quarantine=quarantine, extraction_timeout=10)


@pytest.fixture
def watch_dir(tmp_path):
    folder = tmp_path / "watch"
    folder.mkdir()
    return folder
