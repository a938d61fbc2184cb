"""
Plain Text Extractors.

Reads the plain-text family (TXT, MD, JSON, SRT, CSV). Transcript formats
also pass through the transcript-shape parser.
"""
from .base import BaseTextExtractor
from .transcript_parser import ParsedTranscript, parse_transcript


def decode_text(file_bytes: bytes) -> str:
    """Decode as UTF-8 (BOM tolerated), falling back to Latin-1."""
    try:
        return file_bytes.decode("utf-8-sig")
    except UnicodeDecodeError:
        return file_bytes.decode("latin-1")


class TextExtractor(BaseTextExtractor):
    """Extractor for plain text files with no transcript structure (CSV)."""
    
    def extract(self, file_bytes: bytes) -> str:
        return decode_text(file_bytes)


class TranscriptExtractor(TextExtractor):
    """Extractor for transcript exports (TXT, Markdown, JSON, SRT)."""
    
    def parse(self, text_content: str) -> ParsedTranscript:
        return parse_transcript(text_content, self.file_extension)
