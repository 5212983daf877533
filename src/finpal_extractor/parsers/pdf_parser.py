"""PDF text extractor using pdfplumber."""

from pathlib import Path

from finpal_extractor.parsers.base import BaseExtractor, ParseError, TextDocument
from finpal_extractor.utils.logging_config import get_logger

logger = get_logger(__name__)

# Import pdfplumber - handle import error gracefully
try:
    import pdfplumber

    PDFPLUMBER_AVAILABLE = True
except ImportError:
    PDFPLUMBER_AVAILABLE = False
    pdfplumber = None  # type: ignore

# Maximum number of pages to process to prevent resource exhaustion
MAX_PDF_PAGES = 500


class PDFExtractor(BaseExtractor):
    """Linearizes PDF statements into text lines.

    Only the text layer is read; scanned statements without one yield
    an empty document.
    """

    @property
    def supported_extensions(self) -> list[str]:
        """Return supported file extensions."""
        return [".pdf"]

    def extract(self, file_path: Path) -> TextDocument:
        """Extract the text of every page.

        Args:
            file_path: Path to the PDF file.

        Returns:
            TextDocument with trimmed lines and the full text.

        Raises:
            ParseError: If the PDF is corrupt or has too many pages.
        """
        if not PDFPLUMBER_AVAILABLE:
            raise ParseError("pdfplumber library not installed", file_path)

        if not file_path.exists():
            raise FileNotFoundError(f"File not found: {file_path}")

        logger.info(f"Reading PDF file: {file_path.name}")

        try:
            with pdfplumber.open(file_path) as pdf:
                page_count = len(pdf.pages)
                if page_count > MAX_PDF_PAGES:
                    raise ParseError(
                        f"PDF has too many pages ({page_count}). "
                        f"Maximum allowed is {MAX_PDF_PAGES}",
                        file_path,
                    )
                page_texts = [page.extract_text() or "" for page in pdf.pages]
        except ParseError:
            raise
        except Exception as e:
            raise ParseError(f"Failed to read PDF file: {e}", file_path) from e

        document = TextDocument.from_text("\n".join(page_texts), unit_count=page_count)
        if not document.lines:
            logger.warning(f"No text layer found in {file_path.name}")
        logger.info(f"Extracted {len(document.lines)} lines from {page_count} page(s) of {file_path.name}")
        return document
