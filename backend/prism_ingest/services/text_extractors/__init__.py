"""
Text Extractors Module - Modular file format handlers.

This module provides a plug-and-play architecture for text extraction
from various file formats using the Strategy pattern.

To add support for a new file format:
1. Create a new extractor class inheriting from BaseTextExtractor
2. Implement the extract() method (and parse() if the format carries hints)
3. Register it in TextExtractorFactory
"""
from .base import BaseTextExtractor
from .factory import TextExtractorFactory
from .pdf_extractor import PDFExtractor
from .docx_extractor import DOCXExtractor
from .text_extractor import TextExtractor, TranscriptExtractor
from .transcript_parser import ParsedTranscript, parse_transcript

__all__ = [
    "BaseTextExtractor",
    "TextExtractorFactory",
    "PDFExtractor",
    "DOCXExtractor",
    "TextExtractor",
    "TranscriptExtractor",
    "ParsedTranscript",
    "parse_transcript",
]
