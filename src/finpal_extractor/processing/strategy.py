"""Extraction strategy interface shared by the tabular and text strategies."""

from abc import ABC, abstractmethod
from collections import Counter
from dataclasses import dataclass, field
from typing import Optional

from finpal_extractor.config import ExtractionSettings
from finpal_extractor.models.report import StatementMetadata
from finpal_extractor.models.transaction import Candidate, Confidence, SourceTag
from finpal_extractor.parsers.base import ExtractedData, TabularData, TextDocument
from finpal_extractor.processing.normalizer import SkipReason


@dataclass
class StrategyOutput:
    """Candidates produced by one strategy run.

    Attributes:
        candidates: Provisional transactions in document order.
        skipped: Rows or lines rejected by the strategy, per reason.
        warnings: Messages for the caller (e.g. unsupported layout).
        metadata: Statement metadata the strategy recognized.
        decisive: The strategy recognized the layout, so its result stands
            even when every row was rejected.
    """

    candidates: list[Candidate] = field(default_factory=list)
    skipped: Counter = field(default_factory=Counter)
    warnings: list[str] = field(default_factory=list)
    metadata: Optional[StatementMetadata] = None
    decisive: bool = False

    def skip(self, reason: SkipReason) -> None:
        self.skipped[reason] += 1


class ExtractionStrategy(ABC):
    """One parsing algorithm in the fixed priority order.

    Subclasses must implement:
    - name: Strategy name reported in results
    - ceiling: Highest overall confidence a result from it can earn
    - run(): Produce candidates from raw records
    """

    name: str = ""
    ceiling: Confidence = Confidence.HIGH
    tabular_only: bool = False

    def __init__(self, settings: Optional[ExtractionSettings] = None):
        self.settings = settings or ExtractionSettings()

    def extract(self, data: ExtractedData, source: SourceTag) -> StrategyOutput:
        """Run the strategy, adapting tabular input for text strategies.

        Args:
            data: Raw records from a format extractor.
            source: Detected provider.

        Returns:
            StrategyOutput, empty when the strategy does not apply.
        """
        if self.tabular_only:
            if not isinstance(data, TabularData):
                return StrategyOutput()
            return self.run(data, source)
        if isinstance(data, TabularData):
            data = data.to_text_document()
        return self.run(data, source)

    @abstractmethod
    def run(self, data: TabularData | TextDocument, source: SourceTag) -> StrategyOutput:
        """Produce candidates.

        Args:
            data: TabularData for tabular strategies, else a TextDocument.
            source: Detected provider.

        Returns:
            StrategyOutput.
        """
