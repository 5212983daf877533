"""Summary and overall-confidence generation for pipeline results."""

from decimal import Decimal

from finpal_extractor.models.report import ProcessingSummary
from finpal_extractor.models.transaction import Confidence, Transaction, TransactionType

# Share of passing field checks needed for each confidence level
HIGH_CONFIDENCE_SCORE = 0.8
MEDIUM_CONFIDENCE_SCORE = 0.5

MIN_DESCRIPTION_LENGTH = 3


def generate_summary(transactions: list[Transaction]) -> ProcessingSummary:
    """Generate totals from transactions.

    Single source of truth for the summary, used by both the JSON result
    and the CLI table.

    Args:
        transactions: Normalized, categorized transactions.

    Returns:
        ProcessingSummary with counts, debit/credit totals, date range
        and debit totals per category.
    """
    if not transactions:
        return ProcessingSummary()

    total_debits = Decimal("0")
    total_credits = Decimal("0")
    category_debits: dict[str, Decimal] = {}

    for t in transactions:
        if t.transaction_type == TransactionType.DEBIT:
            total_debits += t.amount
            name = t.category or "Uncategorized"
            category_debits[name] = category_debits.get(name, Decimal("0")) + t.amount
        else:
            total_credits += t.amount

    days = [t.day for t in transactions]

    return ProcessingSummary(
        total_transactions=len(transactions),
        total_debits=total_debits,
        total_credits=total_credits,
        period_start=min(days),
        period_end=max(days),
        category_debits=dict(sorted(category_debits.items(), key=lambda kv: kv[1], reverse=True)),
    )


def calculate_confidence(transactions: list[Transaction], ceiling: Confidence = Confidence.HIGH) -> Confidence:
    """Score how complete the extracted fields are.

    Three checks per transaction (a date, a positive amount, a description
    longer than 3 characters) are averaged into a score in [0, 1]:
    above 0.8 is High, above 0.5 is Medium, otherwise Low. The result is
    capped by the producing strategy's ceiling. No transactions is None.

    Args:
        transactions: Output transactions.
        ceiling: Highest confidence the producing strategy can earn.

    Returns:
        Overall confidence.
    """
    if not transactions:
        return Confidence.NONE

    total = len(transactions)
    with_date = sum(1 for t in transactions if t.date is not None)
    with_amount = sum(1 for t in transactions if t.amount > 0)
    with_description = sum(
        1 for t in transactions if len(t.description.strip()) > MIN_DESCRIPTION_LENGTH
    )
    score = (with_date + with_amount + with_description) / (3 * total)

    if score > HIGH_CONFIDENCE_SCORE:
        confidence = Confidence.HIGH
    elif score > MEDIUM_CONFIDENCE_SCORE:
        confidence = Confidence.MEDIUM
    else:
        confidence = Confidence.LOW

    return confidence.cap(ceiling)
