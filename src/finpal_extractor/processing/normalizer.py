"""Validation of strategy candidates into normalized transactions."""

from collections import Counter
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Optional

from finpal_extractor.models.transaction import (
    Candidate,
    SourceTag,
    Transaction,
    TransactionType,
)
from finpal_extractor.utils.date_utils import parse_date
from finpal_extractor.utils.logging_config import get_logger
from finpal_extractor.utils.merchant import UNKNOWN_MERCHANT, extract_merchant
from finpal_extractor.utils.sanitize import DEFAULT_MAX_DESCRIPTION_LENGTH, clean_description

logger = get_logger(__name__)

# Amounts keep at least two fractional digits
CENTS = Decimal("0.01")


class SkipReason(Enum):
    """Why a row, line or candidate produced no transaction."""

    MISSING_DATE = "missing_date"
    INVALID_DATE = "invalid_date"
    MISSING_DESCRIPTION = "missing_description"
    ZERO_AMOUNT = "zero_amount"
    INVALID_AMOUNT = "invalid_amount"
    FAILED_STATUS = "failed_status"
    DUPLICATE = "duplicate"


@dataclass(frozen=True)
class NormalizationResult:
    """Either a transaction or the reason the candidate was dropped."""

    transaction: Optional[Transaction] = None
    skip_reason: Optional[SkipReason] = None

    @property
    def ok(self) -> bool:
        return self.transaction is not None


class Normalizer:
    """Turns candidates into transactions, enforcing the output invariants.

    The normalizer:
    - Parses raw dates and rejects missing or invalid ones
    - Trims and caps descriptions, rejecting empty ones
    - Absorbs any sign into the transaction type and rejects zero amounts
    - Resolves a merchant, defaulting to "Unknown"
    """

    def __init__(self, source: SourceTag, max_description_length: int = DEFAULT_MAX_DESCRIPTION_LENGTH):
        """Initialize normalizer.

        Args:
            source: Detected provider; transactions carry its provenance tag.
            max_description_length: Description length cap.
        """
        self.source = source
        self.max_description_length = max_description_length

    def normalize(self, candidate: Candidate, strategy: str = "") -> NormalizationResult:
        """Validate one candidate.

        Args:
            candidate: Candidate from a strategy.
            strategy: Name of the producing strategy.

        Returns:
            NormalizationResult with a transaction or a skip reason.
        """
        if candidate.date is None or (isinstance(candidate.date, str) and not candidate.date.strip()):
            return NormalizationResult(skip_reason=SkipReason.MISSING_DATE)

        txn_date = parse_date(candidate.date)
        if txn_date is None:
            return NormalizationResult(skip_reason=SkipReason.INVALID_DATE)

        description = clean_description(candidate.description, self.max_description_length)
        if not description:
            return NormalizationResult(skip_reason=SkipReason.MISSING_DESCRIPTION)

        try:
            amount = candidate.amount if isinstance(candidate.amount, Decimal) else Decimal(str(candidate.amount))
        except (InvalidOperation, TypeError, ValueError):
            return NormalizationResult(skip_reason=SkipReason.INVALID_AMOUNT)
        if not amount.is_finite():
            return NormalizationResult(skip_reason=SkipReason.INVALID_AMOUNT)

        transaction_type = candidate.transaction_type
        if amount < 0:
            amount = -amount
            transaction_type = TransactionType.DEBIT
        if amount == 0:
            return NormalizationResult(skip_reason=SkipReason.ZERO_AMOUNT)
        if amount.as_tuple().exponent > -2:  # type: ignore[operator]
            amount = amount.quantize(CENTS)

        merchant = (candidate.merchant or "").strip() or extract_merchant(description)

        return NormalizationResult(
            transaction=Transaction(
                date=txn_date,
                description=description,
                amount=amount,
                transaction_type=transaction_type,
                source=self.source.provenance,
                merchant=merchant or UNKNOWN_MERCHANT,
                extraction_confidence=candidate.confidence,
                strategy=strategy,
                reference_id=candidate.reference_id or None,
                utr=candidate.utr or None,
                raw_data=dict(candidate.raw_data),
            )
        )

    def normalize_all(
        self, candidates: list[Candidate], strategy: str = ""
    ) -> tuple[list[Transaction], Counter]:
        """Validate a list of candidates, preserving order.

        Args:
            candidates: Candidates from one strategy.
            strategy: Name of the producing strategy.

        Returns:
            Tuple of (transactions, skip counts per SkipReason).
        """
        transactions: list[Transaction] = []
        skipped: Counter = Counter()

        for index, candidate in enumerate(candidates):
            result = self.normalize(candidate, strategy)
            if result.ok:
                transactions.append(result.transaction)  # type: ignore[arg-type]
            else:
                skipped[result.skip_reason] += 1
                logger.debug(f"Candidate {index} dropped: {result.skip_reason.value}")  # type: ignore[union-attr]

        logger.debug(
            f"Normalized {len(transactions)}/{len(candidates)} candidates from {strategy or 'strategy'}"
        )
        return transactions, skipped

