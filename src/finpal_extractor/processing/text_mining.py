"""Degraded text strategies: line patterns, amount context and emergency numbers.

These run when no tabular layout or structured line group was found.
All of them are heuristics tuned to Indian statement text. Where a line
or window holds several candidates, the first date and the largest
amount win.
"""

import re
from datetime import date, timedelta
from decimal import Decimal
from typing import Optional

from finpal_extractor.models.transaction import Candidate, Confidence, SourceTag, TransactionType
from finpal_extractor.parsers.base import TextDocument
from finpal_extractor.processing.normalizer import SkipReason
from finpal_extractor.processing.strategy import ExtractionStrategy, StrategyOutput
from finpal_extractor.utils.date_utils import DATE_SEARCH_PATTERNS, search_date, strip_dates
from finpal_extractor.utils.decimal_utils import parse_amount
from finpal_extractor.utils.logging_config import get_logger
from finpal_extractor.utils.sanitize import clean_description

logger = get_logger(__name__)

TIME_PATTERN = re.compile(r"\b\d{1,2}:\d{2}(?::\d{2})?(?:\s*(?:am|pm)\b)?", re.IGNORECASE)

CURRENCY_AMOUNT = re.compile(r"(?:₹|Rs\.?|INR|\$)\s*(\d+(?:,\d+)*(?:\.\d{1,2})?)", re.IGNORECASE)
BARE_AMOUNT = re.compile(r"(?<![\w.,])(\d+(?:,\d+)*(?:\.\d{1,2})?)(?![\w.,]*\d)")

CREDIT_WORDS = re.compile(r"\b(?:credit|received|refund|cashback|deposit)", re.IGNORECASE)

# Amount-context token patterns in priority order
CONTEXT_AMOUNT_PATTERNS = [
    re.compile(r"[₹$]\s*(\d+(?:,\d+)*(?:\.\d{1,2})?)"),
    re.compile(r"(\d+\.\d{2})"),
    re.compile(r"(\d+,\d+)"),
    re.compile(r"(\d{3,})"),
]

EMERGENCY_NUMBER = re.compile(r"\d{2,}")

DESCRIPTION_STOP_WORDS = frozenset({
    "the", "and", "for", "to", "from", "at", "in", "on", "with", "of", "by",
})
CONTEXT_DESCRIPTION_WORDS = 4

_ANY_AMOUNT = re.compile(r"(?:₹|Rs\.?|INR|\$)?\s*\d+(?:,\d+)*(?:\.\d{1,2})?", re.IGNORECASE)
_NON_WORD = re.compile(r"[^\w\s]")


def _remove_amounts_and_dates(text: str) -> str:
    text = strip_dates(text)
    text = TIME_PATTERN.sub(" ", text)
    return _ANY_AMOUNT.sub(" ", text)


def _date_spans(text: str) -> list[tuple[int, int]]:
    spans = []
    for pattern in [*DATE_SEARCH_PATTERNS, TIME_PATTERN]:
        spans.extend(m.span() for m in pattern.finditer(text))
    return spans


def _overlaps(span: tuple[int, int], spans: list[tuple[int, int]]) -> bool:
    start, end = span
    return any(start < other_end and other_start < end for other_start, other_end in spans)


class LinePatternStrategy(ExtractionStrategy):
    """Strategy 4: a date and an amount co-occurring on a line.

    A line without a date borrows one from the line+next-line window and
    is tagged Medium; a date on the line itself is tagged High.
    """

    name = "Line Pattern Matching"
    ceiling = Confidence.MEDIUM

    def run(self, data: TextDocument, source: SourceTag) -> StrategyOutput:  # type: ignore[override]
        output = StrategyOutput()
        lines = data.lines

        for index, line in enumerate(lines):
            amount = self.line_amount(line)
            if amount is None:
                continue

            found = search_date(line)
            confidence = Confidence.HIGH
            if found is None and index + 1 < len(lines):
                found = search_date(f"{line} {lines[index + 1]}")
                confidence = Confidence.MEDIUM
            if found is None:
                output.skip(SkipReason.MISSING_DATE)
                logger.debug(f"Line {index + 1}: amount without a date")
                continue

            description = clean_description(_remove_amounts_and_dates(line))
            if len(description) < 3:
                description = f"Transaction from line {index + 1}"

            output.candidates.append(
                Candidate(
                    date=found[1],
                    description=description,
                    amount=amount,
                    transaction_type=(
                        TransactionType.CREDIT if CREDIT_WORDS.search(line) else TransactionType.DEBIT
                    ),
                    confidence=confidence,
                    raw_data={"originalLine": line, "lineIndex": index},
                )
            )

        return output

    def line_amount(self, line: str) -> Optional[Decimal]:
        """Largest plausible amount on a line, ignoring dates and times.

        Currency-prefixed amounts are preferred; bare numbers are only
        considered when none are present and must not exceed the
        amount-context ceiling (long digit runs are IDs, not amounts).

        Args:
            line: Document line.

        Returns:
            The amount, or None if the line has none above the minimum.
        """
        text = TIME_PATTERN.sub(" ", strip_dates(line))
        minimum = Decimal(str(self.settings.min_line_amount))

        amounts = [parse_amount(m.group(1)) for m in CURRENCY_AMOUNT.finditer(text)]
        if not amounts:
            maximum = Decimal(str(self.settings.max_context_amount))
            amounts = [
                a for a in (parse_amount(m.group(1)) for m in BARE_AMOUNT.finditer(text))
                if a <= maximum
            ]

        amounts = [a for a in amounts if a > minimum]
        return max(amounts) if amounts else None


class AmountContextStrategy(ExtractionStrategy):
    """Strategy 5: amount-shaped tokens anywhere in the text, with context.

    Tokens inside dates or times, or inside a token an earlier pattern
    already claimed, are ignored. Near-identical amounts (within 1 unit)
    collapse to the first seen.
    """

    name = "Amount Context Mining"
    ceiling = Confidence.LOW

    def run(self, data: TextDocument, source: SourceTag) -> StrategyOutput:  # type: ignore[override]
        output = StrategyOutput()
        text = data.full_text
        settings = self.settings
        minimum = Decimal(str(settings.min_context_amount))
        maximum = Decimal(str(settings.max_context_amount))

        blocked = _date_spans(text)
        found: list[tuple[Decimal, int]] = []
        for pattern in CONTEXT_AMOUNT_PATTERNS:
            for match in pattern.finditer(text):
                span = match.span(1)
                if _overlaps(span, blocked):
                    continue
                blocked.append(span)
                amount = parse_amount(match.group(1))
                if minimum < amount < maximum:
                    found.append((amount, match.start()))

        unique: list[tuple[Decimal, int]] = []
        for amount, position in found:
            if all(abs(amount - kept) >= 1 for kept, _ in unique):
                unique.append((amount, position))

        for number, (amount, position) in enumerate(unique[:settings.max_context_candidates], start=1):
            window = settings.context_window
            context = text[max(0, position - window):position + window]

            found_date = search_date(context)
            if found_date is None:
                output.skip(SkipReason.MISSING_DATE)
                continue

            output.candidates.append(
                Candidate(
                    date=found_date[1],
                    description=self.context_description(context) or f"Transaction {number}",
                    amount=amount,
                    transaction_type=TransactionType.DEBIT,
                    confidence=Confidence.LOW,
                    raw_data={"context": context[:200], "extractedFromAmount": True},
                )
            )

        return output

    @staticmethod
    def context_description(context: str) -> str:
        """Leading meaningful words of a context window."""
        text = _NON_WORD.sub(" ", _remove_amounts_and_dates(context))
        words = [
            word for word in text.split()
            if len(word) > 2 and word.lower() not in DESCRIPTION_STOP_WORDS and not word.isdigit()
        ]
        return " ".join(words[:CONTEXT_DESCRIPTION_WORDS])


class EmergencyNumberStrategy(ExtractionStrategy):
    """Strategy 6: last resort, any bare number in range becomes a transaction.

    Dates are synthetic (today, then one day earlier per transaction),
    confidence is None, and the result carries a warning so callers can
    tell the user the statement format is unsupported.
    """

    name = "Emergency Number Extraction"
    ceiling = Confidence.LOW

    UNSUPPORTED_WARNING = (
        "Statement layout not recognized: amounts were guessed from bare numbers "
        "and dates are synthetic. Verify these transactions manually."
    )

    def __init__(self, settings=None, today: Optional[date] = None):
        super().__init__(settings)
        self.today = today

    def run(self, data: TextDocument, source: SourceTag) -> StrategyOutput:  # type: ignore[override]
        output = StrategyOutput()
        settings = self.settings
        today = self.today or date.today()
        label = source.value if source != SourceTag.UNKNOWN else "Statement"

        amounts = [
            int(match.group(0)) for match in EMERGENCY_NUMBER.finditer(data.full_text)
        ]
        amounts = [
            n for n in amounts
            if settings.emergency_min_amount <= n <= settings.emergency_max_amount
        ][:settings.emergency_limit]

        for index, amount in enumerate(amounts):
            output.candidates.append(
                Candidate(
                    date=today - timedelta(days=index),
                    description=f"{label} Transaction {index + 1} (from number pattern)",
                    amount=Decimal(amount),
                    transaction_type=TransactionType.DEBIT,
                    merchant=label,
                    confidence=Confidence.NONE,
                    raw_data={"extractedFromNumber": True, "originalAmount": amount},
                )
            )

        if output.candidates:
            output.warnings.append(self.UNSUPPORTED_WARNING)
            logger.warning(f"Emergency extraction produced {len(output.candidates)} guessed transactions")
        return output
