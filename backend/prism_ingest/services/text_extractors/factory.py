"""
Text Extractor Factory.

Manages registration and retrieval of text extractors for different file formats.
Uses the Factory pattern to provide plug-and-play text extraction.
"""
from pathlib import Path
from typing import Dict, List, Optional

from .base import BaseTextExtractor
from .pdf_extractor import PDFExtractor
from .docx_extractor import DOCXExtractor
from .text_extractor import TextExtractor, TranscriptExtractor
from ...core.exceptions import ExtractionError, IgnorableInputError
from ...core.logging_config import get_logger
from ...domain.entities import ExtractedDocument
from ...domain.value_objects import FilePath

logger = get_logger(__name__)


class TextExtractorFactory:
    """
    Factory for managing text extractors.
    
    Provides a centralized registry of extractors keyed by extension.
    ``.eml`` is deliberately absent: email goes through the email decomposer.
    """
    
    _extractors: Dict[str, BaseTextExtractor] = {}
    _initialized = False
    
    @classmethod
    def _initialize(cls):
        """Initialize default extractors."""
        if cls._initialized:
            return
        
        cls.register(PDFExtractor(), skip_init=True)
        cls.register(DOCXExtractor(), skip_init=True)
        
        cls.register(TranscriptExtractor(".txt", "TXT"), skip_init=True)
        cls.register(TranscriptExtractor(".md", "Markdown"), skip_init=True)
        cls.register(TranscriptExtractor(".json", "JSON"), skip_init=True)
        cls.register(TranscriptExtractor(".srt", "SubRip"), skip_init=True)
        
        # Only reachable as an email attachment
        cls.register(TextExtractor(".csv", "CSV"), skip_init=True)
        
        cls._initialized = True
        logger.debug(f"TextExtractorFactory initialized with {len(cls._extractors)} extractors")
    
    @classmethod
    def register(cls, extractor: BaseTextExtractor, skip_init: bool = False):
        """
        Register a text extractor.
        
        Args:
            extractor: Text extractor instance to register
            skip_init: If True, skip initialization check (used internally)
        """
        if not skip_init:
            cls._initialize()
        extension = extractor.file_extension
        
        if extension in cls._extractors:
            logger.warning(f"Overriding existing extractor for {extension}")
        
        cls._extractors[extension] = extractor
    
    @classmethod
    def get_extractor_by_extension(cls, extension: str) -> Optional[BaseTextExtractor]:
        """
        Get extractor by file extension.
        
        Args:
            extension: File extension (e.g., '.pdf', 'docx')
            
        Returns:
            Text extractor instance or None if not found
        """
        cls._initialize()
        extension = extension.lower()
        if not extension.startswith('.'):
            extension = f'.{extension}'
        return cls._extractors.get(extension)
    
    @classmethod
    def extract_document(cls, file_path: Path, extension: Optional[str] = None) -> ExtractedDocument:
        """
        Read a file and turn it into an ExtractedDocument.
        
        Args:
            file_path: Path to the file
            extension: Override for the dispatch key (defaults to the file suffix)
            
        Returns:
            ExtractedDocument carrying text plus content-derived hints
            
        Raises:
            IgnorableInputError: If no extractor is registered for the extension
            ExtractionError: If reading or decoding fails
            EmptyContentError: If no usable text remains after trimming
        """
        file_path = Path(file_path)
        file_ext = (extension or file_path.suffix).lower()
        extractor = cls.get_extractor_by_extension(file_ext)
        
        if extractor is None:
            raise IgnorableInputError(
                f"File format '{file_ext}' is not supported for text extraction",
                filepath=str(file_path),
            )
        
        try:
            file_bytes = file_path.read_bytes()
        except OSError as e:
            raise ExtractionError(f"Could not read {file_path.name}: {e}", filepath=str(file_path)) from e
        
        logger.debug(f"Extracting text from {file_path.name} using {extractor.format_name} extractor")
        try:
            text_content = extractor.extract(file_bytes)
            parsed = extractor.parse(text_content)
        except ExtractionError as e:
            e.filepath = str(file_path)
            raise
        extractor.validate_content(parsed.raw_content)
        
        logger.info(
            f"Extracted {len(parsed.raw_content)} characters from {file_path.name} ({extractor.format_name})"
        )
        return ExtractedDocument(
            source_path=FilePath(str(file_path)),
            derived_filename=file_path.name,
            text_content=parsed.raw_content.strip(),
            suggested_date=parsed.call_date,
            suggested_context=parsed.context,
            duration_minutes=parsed.duration_minutes,
        )
    
    @classmethod
    def get_supported_extensions(cls) -> List[str]:
        cls._initialize()
        return sorted(cls._extractors.keys())
    