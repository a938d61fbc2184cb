"""
DOCX Text Extractor.

Extracts raw paragraph text from DOCX files using python-docx library.
"""
import io

from docx import Document as DocxDocument

from .base import BaseTextExtractor
from ...core.exceptions import ExtractionError


class DOCXExtractor(BaseTextExtractor):
    """Extractor for DOCX files."""
    
    def __init__(self):
        super().__init__(".docx", "DOCX")
    
    def extract(self, file_bytes: bytes) -> str:
        """
        Extract paragraph and table text, discarding styling.
        
        Raises:
            ExtractionError: If the DOCX container cannot be opened
        """
        try:
            doc = DocxDocument(io.BytesIO(file_bytes))
        except Exception as e:
            raise ExtractionError(f"Error extracting text from DOCX: {e}") from e
        
        lines = [paragraph.text for paragraph in doc.paragraphs]
        
        for table in doc.tables:
            for row in table.rows:
                row_text = [cell.text.strip() for cell in row.cells if cell.text.strip()]
                if row_text:
                    lines.append(" | ".join(row_text))
        
        return "\n".join(lines)
