"""Base classes and raw-record containers for format extractors."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

from finpal_extractor.utils.logging_config import get_logger

logger = get_logger(__name__)


class ParseError(Exception):
    """Exception raised when a file cannot be read or decoded."""

    def __init__(self, message: str, file_path: Optional[Path] = None):
        """Initialize ParseError.

        Args:
            message: Error message.
            file_path: Optional path to the file that failed to parse.
        """
        self.file_path = file_path
        super().__init__(message)


class UnsupportedFileTypeError(ParseError):
    """Raised for file extensions no extractor handles."""


class FileTooLargeError(ParseError):
    """Raised when a file exceeds the configured upload size limit."""


@dataclass
class TextDocument:
    """Linearized text of a document.

    Attributes:
        lines: Trimmed, non-empty lines in document order.
        full_text: Concatenated text, kept for scans that cross line breaks.
        unit_count: Pages (PDF) or rows (tabular) the text came from.
    """

    lines: list[str]
    full_text: str
    unit_count: int = 0

    @classmethod
    def from_text(cls, text: str, unit_count: int = 0) -> "TextDocument":
        """Split text into trimmed, non-empty lines.

        Args:
            text: Full document text.
            unit_count: Pages or rows the text came from.

        Returns:
            A new TextDocument.
        """
        lines = [line.strip() for line in text.splitlines()]
        return cls(lines=[line for line in lines if line], full_text=text, unit_count=unit_count)


@dataclass
class TabularData:
    """Rows read from a CSV file or workbook.

    Attributes:
        headers: Header strings as they appear in the file.
        rows: One mapping of header to cell value per data row.
        warnings: Problems with individual rows that were skipped.
    """

    headers: list[str]
    rows: list[dict[str, object]] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def row_text(self, row: dict[str, object]) -> str:
        """Join a row's non-empty cell values with spaces."""
        return " ".join(str(v).strip() for v in row.values() if v is not None and str(v).strip())

    def to_text_document(self) -> TextDocument:
        """Render the table as text lines (header line first) for text strategies."""
        lines = [" ".join(h for h in self.headers if h)] if self.headers else []
        lines.extend(self.row_text(row) for row in self.rows)
        lines = [line for line in lines if line]
        return TextDocument(lines=lines, full_text="\n".join(lines), unit_count=len(self.rows))


ExtractedData = Union[TabularData, TextDocument]


class BaseExtractor(ABC):
    """Abstract base class for container format extractors.

    Subclasses must implement:
    - supported_extensions: List of file extensions handled
    - extract(): Read a file into TabularData or a TextDocument
    """

    @property
    @abstractmethod
    def supported_extensions(self) -> list[str]:
        """Return list of file extensions this extractor supports.

        Returns:
            List of extensions like ['.csv'].
        """

    @property
    def name(self) -> str:
        """Return extractor name for logging."""
        return self.__class__.__name__

    def can_parse(self, file_path: Path) -> bool:
        """Check if this extractor handles the file's extension.

        Args:
            file_path: Path to the file to check.

        Returns:
            True if the extension is supported.
        """
        return file_path.suffix.lower() in self.supported_extensions

    @abstractmethod
    def extract(self, file_path: Path) -> ExtractedData:
        """Read a file into raw records.

        Args:
            file_path: Path to the file.

        Returns:
            TabularData or TextDocument.

        Raises:
            ParseError: If the container is corrupt or unreadable.
            FileNotFoundError: If file doesn't exist.
        """
