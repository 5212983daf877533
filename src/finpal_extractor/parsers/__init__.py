"""Format extractors and source detection for statement files."""

from finpal_extractor.parsers.base import (
    BaseExtractor,
    ExtractedData,
    FileTooLargeError,
    ParseError,
    TabularData,
    TextDocument,
    UnsupportedFileTypeError,
)
from finpal_extractor.parsers.csv_parser import CSVExtractor
from finpal_extractor.parsers.detector import (
    FileDetector,
    detect_source,
    discover_files,
    get_detector,
)
from finpal_extractor.parsers.excel_parser import ExcelExtractor
from finpal_extractor.parsers.pdf_parser import PDFExtractor

__all__ = [
    "BaseExtractor",
    "ExtractedData",
    "ParseError",
    "UnsupportedFileTypeError",
    "FileTooLargeError",
    "TabularData",
    "TextDocument",
    "CSVExtractor",
    "ExcelExtractor",
    "PDFExtractor",
    "FileDetector",
    "get_detector",
    "detect_source",
    "discover_files",
]
