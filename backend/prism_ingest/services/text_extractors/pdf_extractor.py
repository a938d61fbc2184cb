"""
PDF Text Extractor.

Extracts text from PDF files using pypdf library.
"""
import io

from pypdf import PdfReader

from .base import BaseTextExtractor
from ...core.exceptions import ExtractionError
from ...core.logging_config import get_logger

logger = get_logger(__name__)


class PDFExtractor(BaseTextExtractor):
    """Extractor for PDF files."""
    
    def __init__(self):
        super().__init__(".pdf", "PDF")
    
    def extract(self, file_bytes: bytes) -> str:
        """
        Extract text page by page, joined in page order.
        
        Raises:
            ExtractionError: If the PDF structure cannot be read
        """
        try:
            reader = PdfReader(io.BytesIO(file_bytes))
            pages = [page.extract_text() or "" for page in reader.pages]
        except Exception as e:
            logger.debug(f"pypdf failed: {e}", exc_info=True)
            raise ExtractionError(f"Error extracting text from PDF: {e}") from e
        
        logger.debug(f"Extracted {len(pages)} PDF pages")
        return "\n".join(pages)
