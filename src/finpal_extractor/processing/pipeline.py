"""Statement processing pipeline: extract, detect, parse, dedupe, categorize."""

import os
import re
import tempfile
from collections import Counter
from datetime import date
from pathlib import Path
from typing import Optional

from finpal_extractor.config import Config
from finpal_extractor.models.report import InspectionReport, ProcessingResult
from finpal_extractor.models.transaction import Confidence, SourceTag, Transaction
from finpal_extractor.parsers.base import ExtractedData, TabularData, TextDocument
from finpal_extractor.parsers.detector import FileDetector, detect_source, get_detector
from finpal_extractor.processing.ai.classifier import AIClassifier
from finpal_extractor.processing.categorizer import Categorizer
from finpal_extractor.processing.deduplicator import Deduplicator
from finpal_extractor.processing.normalizer import Normalizer, SkipReason
from finpal_extractor.processing.report_generator import calculate_confidence, generate_summary
from finpal_extractor.processing.statement_groups import StatementGroupStrategy
from finpal_extractor.processing.strategy import ExtractionStrategy, StrategyOutput
from finpal_extractor.processing.tabular import GenericColumnStrategy, ProviderColumnStrategy
from finpal_extractor.processing.text_mining import (
    AmountContextStrategy,
    EmergencyNumberStrategy,
    LinePatternStrategy,
)
from finpal_extractor.utils.date_utils import search_date
from finpal_extractor.utils.logging_config import LogContext, get_logger

logger = get_logger(__name__)

NO_TRANSACTIONS_WARNING = "No transactions found; the statement format may be unsupported."

INSPECT_LINES = 50
_AMOUNT_SHAPE = re.compile(r"(?:₹|Rs\.?|INR)\s*\d|\b\d{1,3}(?:,\d{2,3})*\.\d{2}\b", re.IGNORECASE)


def default_strategies(config: Config, today: Optional[date] = None) -> list[ExtractionStrategy]:
    """Build the strategies in their fixed priority order.

    Args:
        config: Configuration with extraction thresholds.
        today: Anchor date for synthetic emergency dates (default: today).

    Returns:
        Strategies, most reliable first.
    """
    settings = config.extraction
    return [
        ProviderColumnStrategy(settings),
        GenericColumnStrategy(settings),
        StatementGroupStrategy(settings),
        LinePatternStrategy(settings),
        AmountContextStrategy(settings),
        EmergencyNumberStrategy(settings, today=today),
    ]


def _as_text(data: ExtractedData) -> TextDocument:
    if isinstance(data, TabularData):
        return data.to_text_document()
    return data



def _detect_source(file_name: str, data: ExtractedData) -> SourceTag:
    """Detect the provider from the file name, and from the text of text documents only."""
    if isinstance(data, TabularData):
        return detect_source(file_name)
    return detect_source(file_name, data.full_text)


class StatementPipeline:
    """Runs one statement file through the whole ingest pipeline.

    Strategies are tried in priority order and the first one yielding at
    least one valid transaction wins. A tabular strategy that recognizes
    the column layout is decisive: its result stands even if every row
    was rejected. Instances hold no per-file state beyond the AI call
    budget, so one pipeline can process many files in turn.
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        classifier: Optional[AIClassifier] = None,
        use_ai: bool = True,
        detector: Optional[FileDetector] = None,
        today: Optional[date] = None,
    ):
        """Initialize pipeline.

        Args:
            config: Configuration (default: built-in defaults).
            classifier: AI classifier; created from config.ai when omitted.
            use_ai: Set False to disable the AI tier entirely.
            detector: File detector (default: shared instance).
            today: Anchor date for synthetic emergency dates.
        """
        self.config = config or Config()
        self.detector = detector or get_detector()

        if classifier is None and use_ai and self.config.ai.enabled:
            classifier = AIClassifier.create(self.config.ai, self.config.taxonomy)
        self.classifier = classifier if use_ai else None

        self.categorizer = Categorizer(
            self.config.taxonomy,
            classifier=self.classifier,
            timeout_seconds=self.config.ai.timeout_seconds,
            max_concurrency=self.config.ai.max_concurrency,
        )
        self.deduplicator = Deduplicator()
        self.strategies = default_strategies(self.config, today=today)

    def process_file(self, file_path: Path, file_name: Optional[str] = None) -> ProcessingResult:
        """Process a statement file on disk.

        Args:
            file_path: Path to the statement.
            file_name: Original name used for source detection (default: path name).

        Returns:
            ProcessingResult; empty with confidence None if nothing was found.

        Raises:
            UnsupportedFileTypeError: If the extension is not supported.
            ParseError: If the file cannot be read.
        """
        file_name = file_name or file_path.name
        with LogContext(logger, "statement processing", file=file_name):
            data = self.detector.extract_file(file_path)
            source = _detect_source(file_name, data)
            logger.info(f"Processing {file_name} as {source.value}")
            return self.process_data(data, source, file_name)

    def process_bytes(self, content: bytes, file_name: str) -> ProcessingResult:
        """Process an in-memory upload.

        The extension is checked before anything is written to disk.

        Args:
            content: Uploaded file bytes.
            file_name: Original file name.

        Returns:
            ProcessingResult.
        """
        suffix = Path(file_name).suffix.lower()
        self.detector.detect_extractor(Path(file_name))

        fd, temp_name = tempfile.mkstemp(suffix=suffix, prefix="finpal-")
        temp_path = Path(temp_name)
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(content)
            return self.process_file(temp_path, file_name=file_name)
        finally:
            temp_path.unlink(missing_ok=True)

    def process_data(self, data: ExtractedData, source: SourceTag, file_name: str) -> ProcessingResult:
        """Run strategies, normalization, dedup and categorization over raw records.

        Args:
            data: Raw records from a format extractor.
            source: Detected provider.
            file_name: Original file name.

        Returns:
            ProcessingResult.
        """
        warnings: list[str] = []
        if isinstance(data, TabularData):
            warnings.extend(data.warnings)

        normalizer = Normalizer(source, self.config.extraction.description_max_length)
        winner: Optional[ExtractionStrategy] = None
        output = StrategyOutput()
        transactions: list[Transaction] = []
        skipped: Counter = Counter()

        for strategy in self.strategies:
            output = strategy.extract(data, source)
            skipped = Counter(output.skipped)
            transactions = []
            if output.candidates:
                transactions, rejected = normalizer.normalize_all(output.candidates, strategy.name)
                skipped.update(rejected)

            if transactions:
                winner = strategy
                logger.info(f"{strategy.name} extracted {len(transactions)} transactions")
                break
            if output.decisive:
                logger.info(f"{strategy.name} recognized the layout but every row was rejected")
                break
            logger.debug(f"{strategy.name} found nothing")

        if winner is None:
            logger.warning(f"No transactions found in {file_name}")
            warnings.append(NO_TRANSACTIONS_WARNING)
            return ProcessingResult(
                file_name=file_name,
                source=source.provenance,
                confidence=Confidence.NONE,
                warnings=warnings,
                skipped={reason.value: count for reason, count in skipped.items()},
            )

        warnings.extend(output.warnings)

        if self.config.extraction.deduplicate:
            before = len(transactions)
            transactions = self.deduplicator.dedupe(transactions)
            if before > len(transactions):
                skipped[SkipReason.DUPLICATE] += before - len(transactions)

        if skipped:
            total = sum(skipped.values())
            logger.warning(f"Skipped {total} rows or candidates in {file_name}")

        if self.classifier is not None:
            self.classifier.reset_budget()
        self.categorizer.categorize_all(transactions)

        result = ProcessingResult(
            file_name=file_name,
            source=source.provenance,
            strategy=winner.name,
            confidence=calculate_confidence(transactions, winner.ceiling),
            transactions=transactions,
            summary=generate_summary(transactions),
            warnings=warnings,
            metadata=output.metadata,
            skipped={reason.value: count for reason, count in skipped.items()},
        )
        logger.info(
            f"{file_name}: {len(transactions)} transactions, "
            f"confidence {result.confidence.value}, strategy {winner.name}"
        )
        return result

    def inspect_file(self, file_path: Path) -> InspectionReport:
        """Extract a file's text and report what it looks like.

        Args:
            file_path: Path to the statement.

        Returns:
            InspectionReport for format debugging.
        """
        data = self.detector.extract_file(file_path)
        document = _as_text(data)
        text = document.full_text
        return InspectionReport(
            file_name=file_path.name,
            source=_detect_source(file_path.name, data).provenance,
            unit_count=document.unit_count,
            text_length=len(text),
            first_lines=document.lines[:INSPECT_LINES],
            has_rupee_symbol="₹" in text,
            has_date_pattern=search_date(text) is not None,
            has_amount_pattern=_AMOUNT_SHAPE.search(text) is not None,
        )
