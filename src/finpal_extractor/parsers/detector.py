"""Source detection, extractor selection and file discovery."""

from pathlib import Path

from finpal_extractor.models.transaction import SourceTag
from finpal_extractor.parsers.base import (
    BaseExtractor,
    ExtractedData,
    FileTooLargeError,
    UnsupportedFileTypeError,
)
from finpal_extractor.parsers.csv_parser import CSVExtractor
from finpal_extractor.parsers.excel_parser import ExcelExtractor
from finpal_extractor.parsers.pdf_parser import PDFExtractor
from finpal_extractor.tables import SOURCE_FINGERPRINTS
from finpal_extractor.utils.logging_config import get_logger

logger = get_logger(__name__)


def detect_source(file_name: str, content: str = "") -> SourceTag:
    """Infer the payment provider from a file name and optional text.

    Fingerprints are checked in priority order against the lowercased
    file name and then the lowercased content; the first match wins.

    Args:
        file_name: Original file name.
        content: Extracted document text, if available.

    Returns:
        The detected SourceTag, Unknown when nothing matches.
    """
    name = (file_name or "").lower()
    content_lower = (content or "").lower()

    for tag, name_markers, content_markers in SOURCE_FINGERPRINTS:
        if any(marker in name for marker in name_markers):
            return SourceTag(tag)
        if content_lower and any(marker in content_lower for marker in content_markers):
            return SourceTag(tag)

    return SourceTag.UNKNOWN


class FileDetector:
    """Selects extractors by extension and discovers statement files.

    This class provides:
    - File discovery in a directory
    - Extractor selection with a fast failure for unsupported types
    - Upload size enforcement
    """

    def __init__(self):
        """Initialize with all available extractors."""
        self.extractors: list[BaseExtractor] = [
            CSVExtractor(),
            ExcelExtractor(),
            PDFExtractor(),
        ]

    @property
    def supported_extensions(self) -> list[str]:
        """Get all supported file extensions.

        Returns:
            List of supported extensions.
        """
        extensions: set[str] = set()
        for extractor in self.extractors:
            extensions.update(extractor.supported_extensions)
        return sorted(extensions)

    def discover_files(self, directory: Path) -> list[Path]:
        """Discover all supported statement files in a directory.

        Args:
            directory: Directory to search.

        Returns:
            List of file paths with supported extensions.
        """
        if not directory.exists() or not directory.is_dir():
            logger.warning(f"Directory not found or not a directory: {directory}")
            return []

        files: list[Path] = []
        supported = set(self.supported_extensions)

        # Resolve the target directory to get its real path
        resolved_directory = directory.resolve()

        for file_path in directory.rglob("*"):
            if file_path.is_file() and file_path.suffix.lower() in supported:
                # Symlinks must not lead outside the target directory
                try:
                    file_path.resolve().relative_to(resolved_directory)
                except ValueError:
                    logger.warning(
                        f"Skipping file outside target directory (symlink traversal): {file_path}"
                    )
                    continue
                except OSError as e:
                    logger.warning(f"Skipping file with invalid path: {file_path}: {e}")
                    continue
                files.append(file_path)

        # Sort by name for consistent ordering
        files.sort(key=lambda p: p.name.lower())

        logger.info(f"Discovered {len(files)} statement files in {directory}")
        return files

    def detect_extractor(self, file_path: Path) -> BaseExtractor:
        """Select the extractor for a file by its extension.

        Args:
            file_path: Path to the file.

        Returns:
            Extractor that handles the file.

        Raises:
            UnsupportedFileTypeError: If no extractor handles the extension.
        """
        for extractor in self.extractors:
            if extractor.can_parse(file_path):
                logger.debug(f"File {file_path.name} matched by {extractor.name}")
                return extractor

        suffix = file_path.suffix.lower() or "(none)"
        raise UnsupportedFileTypeError(
            f"Unsupported file type: {suffix}. "
            f"Supported types: {', '.join(self.supported_extensions)}",
            file_path,
        )

    def check_size(self, file_path: Path, max_bytes: int) -> None:
        """Reject files above the upload size limit.

        Args:
            file_path: Path to the file.
            max_bytes: Maximum allowed size in bytes.

        Raises:
            FileTooLargeError: If the file is larger than max_bytes.
        """
        file_size = file_path.stat().st_size
        if file_size > max_bytes:
            raise FileTooLargeError(
                f"File too large ({file_size / 1024 / 1024:.1f} MB). "
                f"Maximum allowed is {max_bytes / 1024 / 1024:.0f} MB",
                file_path,
            )

    def extract_file(self, file_path: Path) -> ExtractedData:
        """Read a file with the matching extractor.

        Args:
            file_path: Path to the file.

        Returns:
            TabularData or TextDocument.

        Raises:
            UnsupportedFileTypeError: If the extension is not supported.
            ParseError: If extraction fails.
        """
        return self.detect_extractor(file_path).extract(file_path)


# Singleton instance for convenience
_detector: FileDetector | None = None


def get_detector() -> FileDetector:
    """Get or create the shared FileDetector instance.

    Returns:
        FileDetector instance.
    """
    global _detector
    if _detector is None:
        _detector = FileDetector()
    return _detector


def discover_files(directory: Path) -> list[Path]:
    """Convenience function to discover files in a directory.

    Args:
        directory: Directory to search.

    Returns:
        List of file paths.
    """
    return get_detector().discover_files(directory)
