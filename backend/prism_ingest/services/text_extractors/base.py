"""
Base Text Extractor Interface.

All text extractors must inherit from this base class and implement
the extract() method.
"""
from abc import ABC, abstractmethod

from ...core.exceptions import EmptyContentError
from .transcript_parser import ParsedTranscript


class BaseTextExtractor(ABC):
    """
    Abstract base class for text extractors.
    
    Each file format should have its own extractor class that inherits
    from this base class and implements the extract() method.
    """
    
    def __init__(self, file_extension: str, format_name: str):
        """
        Initialize the extractor.
        
        Args:
            file_extension: File extension (e.g., '.pdf', '.docx')
            format_name: Human-readable format name (e.g., 'PDF', 'DOCX')
        """
        self.file_extension = file_extension.lower()
        self.format_name = format_name
    
    @abstractmethod
    def extract(self, file_bytes: bytes) -> str:
        """
        Extract text from file bytes.
        
        Args:
            file_bytes: Raw file content as bytes
            
        Returns:
            Extracted text content
            
        Raises:
            ExtractionError: If the content cannot be decoded
        """
        pass
    
    def parse(self, text_content: str) -> ParsedTranscript:
        """
        Recover content and hints from extracted text.
        
        Binary formats carry no transcript shape, so the default keeps the
        text as-is. Plain-text family extractors override this.
        """
        return ParsedTranscript(raw_content=text_content)
    
    def validate_content(self, text_content: str) -> None:
        """
        Validate that extracted content is not empty.
        
        Raises:
            EmptyContentError: If content is empty or whitespace-only
        """
        if not text_content or not text_content.strip():
            raise EmptyContentError(
                f"{self.format_name} file appears to be empty or contains no extractable text"
            )
