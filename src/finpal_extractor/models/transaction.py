"""Transaction data models for statement records."""

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from finpal_extractor.utils.date_utils import DateValue, format_date, to_day

UNKNOWN_MERCHANT = "Unknown"


class TransactionType(Enum):
    """Type of transaction (credit or debit)."""

    CREDIT = "credit"  # Money in
    DEBIT = "debit"  # Money out


class SourceTag(Enum):
    """Payment provider that produced a statement."""

    GPAY = "GPay"
    PHONEPE = "PhonePe"
    PAYTM = "Paytm"
    BANK = "Bank"
    UPI = "UPI"  # Generic UPI export, no provider fingerprint
    UNKNOWN = "Unknown"

    @property
    def provenance(self) -> "SourceTag":
        """Tag stamped on transactions; the generic UPI bucket reads as Unknown."""
        if self is SourceTag.UPI:
            return SourceTag.UNKNOWN
        return self


class Confidence(Enum):
    """Coarse reliability tag for extraction and categorization results."""

    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"
    NONE = "None"

    @property
    def rank(self) -> int:
        return _CONFIDENCE_RANK[self]

    def cap(self, ceiling: "Confidence") -> "Confidence":
        """Return the lower of this confidence and the ceiling."""
        return self if self.rank <= ceiling.rank else ceiling


_CONFIDENCE_RANK = {
    Confidence.NONE: 0,
    Confidence.LOW: 1,
    Confidence.MEDIUM: 2,
    Confidence.HIGH: 3,
}


class CategoryMethod(Enum):
    """How a category was assigned."""

    RULE = "Rule"
    AI = "AI"
    DEFAULT = "Default"


@dataclass
class Candidate:
    """Provisional transaction produced by an extraction strategy.

    Strategies fill in what they found; the normalizer validates the
    candidate and turns it into a Transaction or drops it.

    Attributes:
        date: Parsed date/datetime, or a raw value still to be parsed.
        description: Raw description text.
        amount: Non-negative magnitude; sign is carried by transaction_type.
        transaction_type: Debit or credit.
        merchant: Counterparty if the strategy resolved one.
        confidence: Extraction confidence for this candidate.
        reference_id: Provider transaction ID, if present.
        utr: Bank settlement reference, if present.
        raw_data: Originating row or line(s).
    """

    date: object
    description: str
    amount: Decimal
    transaction_type: TransactionType
    merchant: Optional[str] = None
    confidence: Confidence = Confidence.MEDIUM
    reference_id: Optional[str] = None
    utr: Optional[str] = None
    raw_data: dict[str, object] = field(default_factory=dict)


@dataclass
class Transaction:
    """Normalized transaction with category assignment.

    Attributes:
        date: Calendar date, or datetime when the source carried a time.
        description: Trimmed, length-capped description.
        amount: Non-negative magnitude (Decimal).
        transaction_type: Debit or credit; absorbs the original sign.
        source: Provider tag from source detection.
        merchant: Counterparty name, "Unknown" when unresolvable.
        id: Unique identifier (UUID).
        category: Assigned category name.
        category_confidence: Confidence of the category assignment.
        category_method: Rule, AI or Default.
        category_icon: Display glyph of the assigned category.
        category_color: Display colour of the assigned category.
        extraction_confidence: How directly the record matched a known layout.
        strategy: Name of the strategy that produced the record.
        reference_id: Provider transaction ID, if any.
        utr: Bank settlement reference, if any.
        raw_data: Originating row or line(s), kept for debugging.
    """

    date: DateValue
    description: str
    amount: Decimal
    transaction_type: TransactionType
    source: SourceTag
    merchant: str = UNKNOWN_MERCHANT

    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    # Categorization
    category: Optional[str] = None
    category_confidence: Optional[Confidence] = None
    category_method: Optional[CategoryMethod] = None
    category_icon: Optional[str] = None
    category_color: Optional[str] = None

    # Extraction metadata
    extraction_confidence: Confidence = Confidence.MEDIUM
    strategy: str = ""
    reference_id: Optional[str] = None
    utr: Optional[str] = None
    raw_data: dict[str, object] = field(default_factory=dict)

    @property
    def day(self) -> date:
        """Calendar day of the transaction."""
        return to_day(self.date)

    @property
    def date_iso(self) -> str:
        """Canonical ISO 8601 form of the date."""
        return format_date(self.date)

    @property
    def signed_amount(self) -> Decimal:
        """Amount with sign restored: negative for debits."""
        if self.transaction_type == TransactionType.DEBIT:
            return -self.amount
        return self.amount

    def assign_category(
        self,
        category: str,
        confidence: Confidence,
        method: CategoryMethod,
        icon: Optional[str] = None,
        color: Optional[str] = None,
    ) -> None:
        """Assign a category to this transaction.

        Args:
            category: Category name.
            confidence: Confidence of the assignment.
            method: How the category was assigned.
            icon: Display glyph.
            color: Display colour.
        """
        self.category = category
        self.category_confidence = confidence
        self.category_method = method
        self.category_icon = icon
        self.category_color = color

    def to_dict(self) -> dict[str, object]:
        """Serialize to the JSON shape returned to callers."""
        return {
            "id": self.id,
            "date": self.date_iso,
            "description": self.description,
            "amount": float(self.amount),
            "type": self.transaction_type.value,
            "source": self.source.value,
            "merchant": self.merchant,
            "category": self.category,
            "categoryConfidence": self.category_confidence.value if self.category_confidence else None,
            "categoryMethod": self.category_method.value if self.category_method else None,
            "categoryIcon": self.category_icon,
            "categoryColor": self.category_color,
            "confidence": self.extraction_confidence.value,
            "strategy": self.strategy,
            "referenceId": self.reference_id,
            "utr": self.utr,
            "rawData": {k: _jsonable(v) for k, v in self.raw_data.items()},
        }

    def __repr__(self) -> str:
        return (
            f"Transaction(date={self.date_iso}, "
            f"description={self.description[:30]!r}, "
            f"amount={self.signed_amount}, "
            f"source={self.source.value})"
        )


def _jsonable(value: object) -> object:
    """Coerce raw cell values into JSON-safe primitives."""
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    if isinstance(value, dict):
        return {str(k): _jsonable(v) for k, v in value.items()}
    return str(value)
