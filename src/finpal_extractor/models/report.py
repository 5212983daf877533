"""Result and summary models returned by the pipeline."""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from finpal_extractor.models.transaction import Confidence, SourceTag, Transaction


@dataclass
class ProcessingSummary:
    """Totals derived from one file's transactions.

    Attributes:
        total_transactions: Number of output transactions.
        total_debits: Sum of debit amounts.
        total_credits: Sum of credit amounts.
        period_start: Earliest transaction day (None if no data).
        period_end: Latest transaction day (None if no data).
        category_debits: Summed debit amount per category.
    """

    total_transactions: int = 0
    total_debits: Decimal = Decimal("0")
    total_credits: Decimal = Decimal("0")
    period_start: date | None = None
    period_end: date | None = None
    category_debits: dict[str, Decimal] = field(default_factory=dict)

    @property
    def net_flow(self) -> Decimal:
        """Credits minus debits."""
        return self.total_credits - self.total_debits

    @property
    def period_display(self) -> str:
        """Formatted date range string."""
        if self.period_start is None or self.period_end is None:
            return "No data"
        return f"{self.period_start.isoformat()} to {self.period_end.isoformat()}"

    def to_dict(self) -> dict[str, object]:
        return {
            "totalTransactions": self.total_transactions,
            "totalDebits": float(self.total_debits),
            "totalCredits": float(self.total_credits),
            "dateRange": {
                "from": self.period_start.isoformat() if self.period_start else None,
                "to": self.period_end.isoformat() if self.period_end else None,
            },
            "categories": {name: float(total) for name, total in self.category_debits.items()},
        }


@dataclass
class StatementMetadata:
    """Statement-level details found in the document text.

    Attributes:
        account_number: Account or phone number the statement is for.
        period: Statement period as printed, e.g. "01 Jun, 2025 - 30 Jun, 2025".
        page_count: Number of "Page N of M" markers found.
    """

    account_number: Optional[str] = None
    period: Optional[str] = None
    page_count: int = 0

    def to_dict(self) -> dict[str, object]:
        return {
            "accountNumber": self.account_number,
            "period": self.period,
            "pages": self.page_count,
        }


@dataclass
class ProcessingResult:
    """Outcome of running the pipeline over one file.

    An empty transaction list with confidence None means the file was read
    but no strategy recognized its layout. Extraction failures raise instead.

    Attributes:
        file_name: Original file name.
        source: Detected provider.
        strategy: Name of the strategy that produced the transactions.
        confidence: Overall extraction confidence.
        transactions: Normalized, categorized transactions.
        summary: Totals over the transactions.
        warnings: Non-fatal problems (skipped rows, unsupported layout).
        metadata: Statement metadata, when recognized.
        skipped: Count of discarded candidates per skip reason.
        processed_at: When processing finished.
    """

    file_name: str
    source: SourceTag
    strategy: Optional[str] = None
    confidence: Confidence = Confidence.NONE
    transactions: list[Transaction] = field(default_factory=list)
    summary: ProcessingSummary = field(default_factory=ProcessingSummary)
    warnings: list[str] = field(default_factory=list)
    metadata: Optional[StatementMetadata] = None
    skipped: dict[str, int] = field(default_factory=dict)
    processed_at: datetime = field(default_factory=datetime.now)

    @property
    def is_empty(self) -> bool:
        return not self.transactions

    def to_dict(self) -> dict[str, object]:
        """Serialize to the JSON shape returned to upload callers."""
        return {
            "fileName": self.file_name,
            "source": self.source.value,
            "strategy": self.strategy,
            "confidence": self.confidence.value,
            "transactions": [t.to_dict() for t in self.transactions],
            "summary": self.summary.to_dict(),
            "warnings": list(self.warnings),
            "metadata": self.metadata.to_dict() if self.metadata else None,
            "skipped": dict(self.skipped),
            "processedAt": self.processed_at.replace(microsecond=0).isoformat(),
        }


@dataclass
class InspectionReport:
    """Quick look at a statement's extracted text, for format debugging.

    Attributes:
        file_name: Original file name.
        source: Detected provider.
        unit_count: Pages for PDFs, data rows for tabular files.
        text_length: Characters of extracted text.
        first_lines: Leading lines of extracted text.
        has_rupee_symbol: Whether a ₹ glyph appears.
        has_date_pattern: Whether a date-shaped token appears.
        has_amount_pattern: Whether an amount-shaped token appears.
    """

    file_name: str
    source: SourceTag
    unit_count: int
    text_length: int
    first_lines: list[str]
    has_rupee_symbol: bool
    has_date_pattern: bool
    has_amount_pattern: bool
