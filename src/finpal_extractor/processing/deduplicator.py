"""Duplicate transaction removal."""

from datetime import date
from decimal import Decimal

from finpal_extractor.models.transaction import Transaction
from finpal_extractor.utils.logging_config import get_logger

logger = get_logger(__name__)


class Deduplicator:
    """Collapses candidates that several strategies found more than once.

    Two transactions are duplicates when they share the exact amount and
    the same calendar day; times are ignored because the same transaction
    can be re-discovered from overlapping text windows. The first-seen
    occurrence is kept and relative order is preserved, so running the
    deduplicator on its own output changes nothing.
    """

    def dedupe(self, transactions: list[Transaction]) -> list[Transaction]:
        """Drop later occurrences of same-day, same-amount transactions.

        Args:
            transactions: Transactions in document order.

        Returns:
            New list with duplicates removed.
        """
        seen: set[tuple[Decimal, date]] = set()
        unique: list[Transaction] = []

        for txn in transactions:
            key = (txn.amount, txn.day)
            if key in seen:
                logger.debug(f"Dropping duplicate {txn.amount} on {txn.day.isoformat()}")
                continue
            seen.add(key)
            unique.append(txn)

        removed = len(transactions) - len(unique)
        if removed:
            logger.info(f"Removed {removed} duplicate transactions")
        return unique


def dedupe(transactions: list[Transaction]) -> list[Transaction]:
    """Convenience function to deduplicate transactions.

    Args:
        transactions: Transactions in document order.

    Returns:
        Deduplicated list.
    """
    return Deduplicator().dedupe(transactions)
