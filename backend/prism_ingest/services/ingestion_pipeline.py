"""
Ingestion Pipeline - one stable file in, zero or more transcript records out.

Classifies by extension, extracts text (bounded by a timeout), expands
emails into body + attachment documents, applies filename metadata and
passes every document through the dedup gate. All per-file failures are
contained here and reported as an IngestionResult.
"""
import asyncio
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from .mail import parse_email, stage_attachment, staging_dir_for
from .quarantine import QuarantineLedger
from .record_materializer import RecordMaterializer, default_context
from .text_extractors import TextExtractorFactory
from ..core.config import (
    ATTACHMENT_STAGING_DIR,
    EXTRACTION_TIMEOUT_SECONDS,
    INLINE_ATTACHMENT_MIN_BYTES,
)
from ..core.exceptions import (
    EmptyContentError,
    ExtractionError,
    ExtractionTimeoutError,
    IgnorableInputError,
)
from ..core.logging_config import get_logger
from ..domain.entities import (
    EmailAttachment,
    EmailDecomposition,
    ExtractedDocument,
    IngestionResult,
    IngestionStatus,
)
from ..domain.value_objects import ATTACHMENT_EXTENSIONS, SUPPORTED_EXTENSIONS, FilePath
from ..utils.filename_metadata import parse_filename_metadata
from ..utils.ignore_rules import should_ignore

logger = get_logger(__name__)


def attachment_header(email: EmailDecomposition, filename: str, content_type: str) -> str:
    """Provenance block prepended to every attachment record."""
    return "\n".join([
        "[Attachment from email]",
        f"Email Subject: {email.subject}",
        f"Email From: {email.sender}",
        f"Email Date: {email.date_iso or 'Unknown'}",
        f"Attachment: {filename} ({content_type})",
        "---",
        "",
    ])


def attachment_context(filename: str, subject: str) -> str:
    return f'Attachment: {filename} (from "{subject}")'


def _file_mtime_iso(path: Path) -> str:
    try:
        return datetime.fromtimestamp(path.stat().st_mtime, tz=timezone.utc).isoformat()
    except OSError:
        return datetime.now(timezone.utc).isoformat()


class IngestionPipeline:
    """
    Processing routine for one file at a time.
    
    Distinct files may be processed concurrently; attachments of one email
    are processed strictly one after another.
    """
    
    def __init__(
        self,
        materializer: RecordMaterializer,
        quarantine: Optional[QuarantineLedger] = None,
        extraction_timeout: float = EXTRACTION_TIMEOUT_SECONDS,
        staging_dir_name: str = ATTACHMENT_STAGING_DIR,
        inline_attachment_min_bytes: int = INLINE_ATTACHMENT_MIN_BYTES,
    ):
        """
        Args:
            materializer: Dedup gate + record creation + dispatch
            quarantine: Ledger for files whose extraction failed (None disables it)
            extraction_timeout: Seconds one extraction call may take
            staging_dir_name: Directory created next to an .eml for its attachments
            inline_attachment_min_bytes: Inline email parts below this size are dropped
        """
        self.materializer = materializer
        self.quarantine = quarantine
        self.extraction_timeout = extraction_timeout
        self.staging_dir_name = staging_dir_name
        self.inline_attachment_min_bytes = inline_attachment_min_bytes
    
    async def _run_bounded(self, func, *args):
        """Run a blocking decoder in a thread, bounded by the extraction timeout."""
        try:
            return await asyncio.wait_for(asyncio.to_thread(func, *args), timeout=self.extraction_timeout)
        except asyncio.TimeoutError as e:
            raise ExtractionTimeoutError(
                f"Extraction exceeded {self.extraction_timeout}s", filepath=str(args[0])
            ) from e
    
    async def extract(self, path: Path, extension: Optional[str] = None) -> ExtractedDocument:
        """Classify by extension and extract one non-email file."""
        return await self._run_bounded(TextExtractorFactory.extract_document, path, extension)
    
    async def process(self, filepath) -> IngestionResult:
        """
        Ingest one file. Never raises for per-file failures.
        
        Args:
            filepath: Path of a file that has been stable for the stability window
        
        Returns:
            IngestionResult (with child results for email attachments)
        """
        path = Path(filepath)
        fp = FilePath(str(path))
        ext = path.suffix.lower()
        
        if should_ignore(path):
            logger.debug(f"Skipping ignored file: {path}")
            return IngestionResult(filepath=fp, status=IngestionStatus.IGNORED, error="ignore pattern")
        if ext not in SUPPORTED_EXTENSIONS:
            logger.debug(f"Skipping unsupported file: {path}")
            return IngestionResult(filepath=fp, status=IngestionStatus.IGNORED, error=f"unsupported extension '{ext}'")
        
        try:
            if await self.materializer.is_known(fp):
                logger.info(f"Already processed: {path}")
                return IngestionResult(filepath=fp, status=IngestionStatus.DUPLICATE)
            
            logger.info(f"New transcript detected: {path}")
            if ext == ".eml":
                result = await self._process_email(path)
            else:
                result = await self._process_document(path, ext)
        except IgnorableInputError as e:
            logger.info(f"Skipping {path}: {e}")
            result = IngestionResult(filepath=fp, status=IngestionStatus.IGNORED, error=str(e))
        except EmptyContentError as e:
            logger.info(f"Empty content from {path}, skipping: {e}")
            result = IngestionResult(filepath=fp, status=IngestionStatus.EMPTY, error=str(e))
        except ExtractionError as e:
            logger.error(f"Text extraction failed for {path}: {e}")
            if self.quarantine is not None:
                self.quarantine.record_failure(fp, str(e))
            return IngestionResult(filepath=fp, status=IngestionStatus.FAILED, error=str(e))
        except Exception as e:
            logger.error(f"Error processing file {path}: {e}", exc_info=True)
            return IngestionResult(filepath=fp, status=IngestionStatus.FAILED, error=f"{type(e).__name__}: {e}")
        
        if self.quarantine is not None:
            self.quarantine.clear(fp)
        return result
    
    async def _process_document(self, path: Path, ext: str) -> IngestionResult:
        document = await self.extract(path, ext)
        
        # Filename hints outrank anything found in the content
        meta = parse_filename_metadata(path.name)
        document.suggested_date = meta.date or document.suggested_date or _file_mtime_iso(path)
        document.suggested_context = meta.call_type or document.suggested_context or default_context(path.name)
        
        record_id = await self.materializer.materialize(document)
        status = IngestionStatus.CREATED if record_id else IngestionStatus.DUPLICATE
        return IngestionResult(filepath=document.source_path, status=status, record_id=record_id)
    
    async def _process_email(self, path: Path) -> IngestionResult:
        email = await self._run_bounded(parse_email, path, self.inline_attachment_min_bytes)
        
        if not email.body_text.strip() and not email.has_attachments:
            raise EmptyContentError(f"Empty email content from {path.name}", filepath=str(path))
        
        body = ExtractedDocument(
            source_path=email.filepath,
            derived_filename=email.filename,
            text_content=email.full_content,
            suggested_date=email.date_iso,
            suggested_context=f"Email: {email.subject}",
        )
        record_id = await self.materializer.materialize(body)
        if record_id is None:
            return IngestionResult(filepath=email.filepath, status=IngestionStatus.DUPLICATE)
        
        logger.info(f"Email ingested: {record_id} - \"{email.subject}\" from {email.sender}")
        result = IngestionResult(filepath=email.filepath, status=IngestionStatus.CREATED, record_id=record_id)
        
        if email.has_attachments:
            staging = staging_dir_for(path, self.staging_dir_name)
            # One attachment at a time bounds memory and keeps log order per email
            for attachment in email.attachments:
                result.children.append(await self._process_attachment(email, attachment, staging))
        return result
    
    async def _process_attachment(
        self,
        email: EmailDecomposition,
        attachment: EmailAttachment,
        staging: Path,
    ) -> IngestionResult:
        ext = Path(attachment.filename).suffix.lower()
        pseudo_path = FilePath(f"{email.filepath}::{attachment.filename}")
        if ext not in ATTACHMENT_EXTENSIONS:
            logger.info(f"Skipping unsupported attachment: {attachment.filename} ({attachment.content_type})")
            return IngestionResult(
                filepath=pseudo_path, status=IngestionStatus.IGNORED, error=f"unsupported attachment type '{ext}'"
            )
        
        try:
            staged = await asyncio.to_thread(stage_attachment, attachment, staging)
            document = await self.extract(Path(staged.filepath), ext)
        except EmptyContentError as e:
            logger.info(f"Empty attachment content: {attachment.filename}, skipping")
            return IngestionResult(filepath=pseudo_path, status=IngestionStatus.EMPTY, error=str(e))
        except (ExtractionError, OSError) as e:
            logger.error(f"Failed to process attachment {attachment.filename} of {email.filepath}: {e}")
            return IngestionResult(filepath=pseudo_path, status=IngestionStatus.FAILED, error=str(e))
        
        document.text_content = attachment_header(email, staged.filename, staged.content_type) + document.text_content
        document.suggested_date = email.date_iso
        document.suggested_context = attachment_context(staged.filename, email.subject)
        document.duration_minutes = None
        
        record_id = await self.materializer.materialize(document)
        if record_id is None:
            return IngestionResult(filepath=staged.filepath, status=IngestionStatus.DUPLICATE)
        
        logger.info(f"  Attachment ingested: {record_id} - {staged.filename}")
        return IngestionResult(filepath=staged.filepath, status=IngestionStatus.CREATED, record_id=record_id)
    
    async def import_folder(self, folder) -> List[IngestionResult]:
        """
        One-time import of every candidate file directly inside a folder.
        
        Skips the stability window; shares the dedup gate with the watcher,
        so importing twice creates nothing new.
        """
        folder = Path(folder)
        results = []
        for path in sorted(p for p in folder.iterdir() if p.is_file()):
            if should_ignore(path) or path.suffix.lower() not in SUPPORTED_EXTENSIONS:
                continue
            result = await self.process(path)
            results.append(result)
            logger.info(f"Imported {path.name}: {result.status.value}")
        return results
    
    async def retry_quarantined(self) -> List[IngestionResult]:
        """Re-run every quarantined file whose backoff has elapsed."""
        if self.quarantine is None:
            return []
        results = []
        for filepath in self.quarantine.due():
            if not Path(filepath).exists():
                logger.info(f"Quarantined file no longer exists: {filepath}")
                self.quarantine.clear(filepath)
                continue
            results.append(await self.process(filepath))
        return results
