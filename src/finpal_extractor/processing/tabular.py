"""Tabular strategies: provider column mappings and generic column guessing.

Both strategies read header-keyed rows from CSV files and workbooks.
Header lookup goes through explicit ordered alias lists (see tables.py),
matched case-insensitively: exact header text first, then headers that
contain an alias phrase.
"""

import re
from dataclasses import dataclass
from decimal import Decimal
from typing import Collection, Mapping, Optional, Sequence, Union

from finpal_extractor.models.transaction import Candidate, Confidence, SourceTag, TransactionType
from finpal_extractor.parsers.base import TabularData
from finpal_extractor.processing.normalizer import SkipReason
from finpal_extractor.processing.strategy import ExtractionStrategy, StrategyOutput
from finpal_extractor.tables import (
    GENERIC_COLUMN_VARIANTS,
    PROVIDER_COLUMN_ALIASES,
)
from finpal_extractor.utils.date_utils import parse_date
from finpal_extractor.utils.decimal_utils import ZERO, parse_amount
from finpal_extractor.utils.logging_config import get_logger

logger = get_logger(__name__)

RowResult = Union[Candidate, SkipReason]

_DEBIT_MARKERS = frozenset({"debit", "debited", "dr", "paid", "sent", "withdraw", "withdrawal", "purchase"})
_CREDIT_MARKERS = frozenset({"credit", "credited", "cr", "received", "deposit", "refund", "cashback"})

# Description words that mark a row as money in (generic layouts)
_CREDIT_INDICATORS = ("received", "credit", "deposit", "refund", "cashback")


def _cell(row: Mapping[str, object], column: Optional[str]) -> object:
    if column is None:
        return None
    value = row.get(column)
    if isinstance(value, str):
        value = value.strip()
    return value


def _is_blank(value: object) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _text(value: object) -> str:
    return "" if value is None else str(value).strip()


def direction_from_text(value: object) -> Optional[TransactionType]:
    """Read a debit/credit direction from a type cell ("DEBIT", "Cr", "Received").

    Args:
        value: Cell value.

    Returns:
        The direction, or None if the text names neither.
    """
    words = set(re.findall(r"[a-z]+", _text(value).lower()))
    is_debit = bool(words & _DEBIT_MARKERS)
    is_credit = bool(words & _CREDIT_MARKERS)
    if is_debit == is_credit:
        return None
    return TransactionType.DEBIT if is_debit else TransactionType.CREDIT


class ColumnResolver:
    """Case-insensitive header lookup for one table.

    An exact alias match always wins. Failing that, a header containing an
    alias as a whole phrase matches, so "Withdrawal Amount (INR)" resolves
    for "Withdrawal Amount".
    """

    def __init__(self, headers: list[str]):
        self._headers: list[str] = []
        self._by_lower: dict[str, str] = {}
        for header in headers:
            key = header.strip().lower()
            if key and key not in self._by_lower:
                self._by_lower[key] = header
                self._headers.append(header)

    @staticmethod
    def _excluded(header: str, exclude: Sequence[str]) -> bool:
        lowered = header.lower()
        return any(word in lowered for word in exclude)

    def exact(self, aliases: list[str], exclude: Sequence[str] = ()) -> Optional[str]:
        """Return the original header of the first alias present verbatim."""
        for alias in aliases:
            header = self._by_lower.get(alias.strip().lower())
            if header is not None and not self._excluded(header, exclude):
                return header
        return None

    def containing(
        self,
        aliases: list[str],
        exclude: Sequence[str] = (),
        taken: Collection[str] = (),
    ) -> list[str]:
        """Return headers containing an alias, in alias order then header order.

        Args:
            aliases: Alias phrases in priority order.
            exclude: Substrings that disqualify a header.
            taken: Headers already claimed by another field.

        Returns:
            Matching original headers without repeats.
        """
        found: list[str] = []
        for alias in aliases:
            pattern = re.compile(rf"(?<![a-z0-9]){re.escape(alias.strip().lower())}(?![a-z0-9])")
            for header in self._headers:
                if header in found or header in taken or self._excluded(header, exclude):
                    continue
                if pattern.search(header.strip().lower()):
                    found.append(header)
        return found

    def first(self, aliases: list[str], exclude: Sequence[str] = ()) -> Optional[str]:
        """Return the best header for the aliases: exact first, then containing."""
        header = self.exact(aliases, exclude)
        if header is not None:
            return header
        matches = self.containing(aliases, exclude)
        return matches[0] if matches else None

    def all(self, aliases: list[str], exclude: Sequence[str] = ()) -> list[str]:
        """Return every matching header: exact matches in alias order, then containing ones."""
        found: list[str] = []
        for alias in aliases:
            header = self._by_lower.get(alias.strip().lower())
            if header is not None and header not in found and not self._excluded(header, exclude):
                found.append(header)
        found.extend(self.containing(aliases, exclude, taken=found))
        return found


_PROVIDER_FIELDS = ("date", "description", "amount", "debit", "credit", "type", "status", "reference")

# Split debit/credit columns claim "... Amount ..." headers before the bare amount field
_CONTAINING_ORDER = ("date", "description", "debit", "credit", "type", "status", "reference", "amount")

_AMOUNT_FIELDS = frozenset({"amount", "debit", "credit"})

# Running balances and value dates never hold a transaction amount
AMOUNT_HEADER_EXCLUDE = ("balance", "date")


@dataclass(frozen=True)
class ProviderColumns:
    """Headers resolved for one provider layout."""

    date: Optional[str]
    description: Optional[str]
    amount: Optional[str]
    debit: Optional[str]
    credit: Optional[str]
    type: Optional[str]
    status: Optional[str]
    reference: Optional[str]

    @property
    def usable(self) -> bool:
        has_amount = self.amount is not None or self.debit is not None or self.credit is not None
        return self.date is not None and self.description is not None and has_amount

    @classmethod
    def resolve(cls, headers: list[str], aliases: Mapping[str, list[str]]) -> "ProviderColumns":
        resolver = ColumnResolver(headers)
        resolved: dict[str, Optional[str]] = {}
        for name in _PROVIDER_FIELDS:
            exclude = AMOUNT_HEADER_EXCLUDE if name in _AMOUNT_FIELDS else ()
            resolved[name] = resolver.exact(aliases.get(name, []), exclude)

        taken = {header for header in resolved.values() if header is not None}
        for name in _CONTAINING_ORDER:
            if resolved[name] is not None:
                continue
            exclude = AMOUNT_HEADER_EXCLUDE if name in _AMOUNT_FIELDS else ()
            matches = resolver.containing(aliases.get(name, []), exclude, taken)
            if matches:
                resolved[name] = matches[0]
                taken.add(matches[0])
        return cls(**resolved)


class ProviderColumnStrategy(ExtractionStrategy):
    """Strategy 1: provider-specific column mapping.

    Applies to GPay, PhonePe, Paytm and Bank exports. Rows lacking a
    valid date or a description are dropped. PhonePe rows must carry a
    "success" status when the export has a status column. Bank and
    generic rows with a zero amount are dropped.
    """

    name = "Provider Column Mapping"
    ceiling = Confidence.HIGH
    tabular_only = True

    def run(self, data: TabularData, source: SourceTag) -> StrategyOutput:  # type: ignore[override]
        output = StrategyOutput()
        aliases = PROVIDER_COLUMN_ALIASES.get(source.value)
        if aliases is None:
            return output

        columns = ProviderColumns.resolve(data.headers, aliases)
        if not columns.usable:
            logger.debug(f"{source.value} columns not found in headers {data.headers}")
            return output
        output.decisive = True

        for index, row in enumerate(data.rows, start=1):
            result = self.parse_row(row, columns, source)
            if isinstance(result, SkipReason):
                output.skip(result)
                logger.debug(f"Row {index} skipped: {result.value}")
            else:
                output.candidates.append(result)

        return output

    def parse_row(self, row: Mapping[str, object], columns: ProviderColumns, source: SourceTag) -> RowResult:
        """Parse one row of a provider export.

        Args:
            row: Header-keyed cell values.
            columns: Resolved provider columns.
            source: Provider whose rules apply.

        Returns:
            A Candidate, or the SkipReason for dropping the row.
        """
        if source == SourceTag.PHONEPE and columns.status is not None:
            if _text(_cell(row, columns.status)).lower() != "success":
                return SkipReason.FAILED_STATUS

        raw_date = _cell(row, columns.date)
        if _is_blank(raw_date):
            return SkipReason.MISSING_DATE
        txn_date = parse_date(raw_date)
        if txn_date is None:
            return SkipReason.INVALID_DATE

        description = _text(_cell(row, columns.description))
        if not description:
            return SkipReason.MISSING_DESCRIPTION

        if source == SourceTag.BANK:
            amount, txn_type = self._bank_amount(row, columns)
            if amount == ZERO:
                return SkipReason.ZERO_AMOUNT
        else:
            amount, txn_type = self._wallet_amount(row, columns)

        reference = _text(_cell(row, columns.reference)) or None

        return Candidate(
            date=txn_date,
            description=description,
            amount=amount,
            transaction_type=txn_type,
            confidence=Confidence.HIGH,
            reference_id=reference,
            raw_data=dict(row),
        )

    def _wallet_amount(self, row: Mapping[str, object], columns: ProviderColumns) -> tuple[Decimal, TransactionType]:
        """Signed amount column: negative is money out, anything else money in."""
        signed = parse_amount(_cell(row, columns.amount))
        if signed == ZERO:
            debit = parse_amount(_cell(row, columns.debit))
            credit = parse_amount(_cell(row, columns.credit))
            if debit != ZERO:
                signed = -abs(debit)
            elif credit != ZERO:
                signed = abs(credit)

        txn_type = TransactionType.DEBIT if signed < 0 else TransactionType.CREDIT
        stated = direction_from_text(_cell(row, columns.type))
        if stated is not None:
            txn_type = stated
        return abs(signed), txn_type

    def _bank_amount(self, row: Mapping[str, object], columns: ProviderColumns) -> tuple[Decimal, TransactionType]:
        """Single Amount column when present and non-zero, else Debit/Credit columns."""
        signed = parse_amount(_cell(row, columns.amount))
        if signed != ZERO:
            txn_type = TransactionType.DEBIT if signed < 0 else TransactionType.CREDIT
            stated = direction_from_text(_cell(row, columns.type))
            if stated is not None:
                txn_type = stated
            return abs(signed), txn_type

        debit = abs(parse_amount(_cell(row, columns.debit)))
        credit = abs(parse_amount(_cell(row, columns.credit)))
        if credit > 0:
            return credit, TransactionType.CREDIT
        return debit, TransactionType.DEBIT


class GenericColumnStrategy(ExtractionStrategy):
    """Strategy 2: generic column guessing for unrecognized layouts.

    Probes ordered header variants per field and takes the first cell
    per row that yields a value. Requires a date, a description and a
    non-zero amount.
    """

    name = "Generic Column Detection"
    ceiling = Confidence.HIGH
    tabular_only = True

    def run(self, data: TabularData, source: SourceTag) -> StrategyOutput:  # type: ignore[override]
        output = StrategyOutput()
        resolver = ColumnResolver(data.headers)
        date_cols = resolver.all(GENERIC_COLUMN_VARIANTS["date"])
        desc_cols = resolver.all(GENERIC_COLUMN_VARIANTS["description"])
        amount_cols = resolver.all(GENERIC_COLUMN_VARIANTS["amount"], AMOUNT_HEADER_EXCLUDE)
        type_col = resolver.first(GENERIC_COLUMN_VARIANTS["type"])

        if not (date_cols and desc_cols and amount_cols):
            logger.debug(f"Generic columns not found in headers {data.headers}")
            return output
        output.decisive = True

        for index, row in enumerate(data.rows, start=1):
            result = self.parse_row(row, date_cols, desc_cols, amount_cols, type_col)
            if isinstance(result, SkipReason):
                output.skip(result)
                logger.debug(f"Row {index} skipped: {result.value}")
            else:
                output.candidates.append(result)

        return output

    def parse_row(
        self,
        row: Mapping[str, object],
        date_cols: list[str],
        desc_cols: list[str],
        amount_cols: list[str],
        type_col: Optional[str],
    ) -> RowResult:
        """Parse one row of an unrecognized export.

        Args:
            row: Header-keyed cell values.
            date_cols: Candidate date headers in priority order.
            desc_cols: Candidate description headers in priority order.
            amount_cols: Candidate amount headers in priority order.
            type_col: Debit/credit indicator header, if any.

        Returns:
            A Candidate, or the SkipReason for dropping the row.
        """
        txn_date = None
        saw_date = False
        for column in date_cols:
            value = _cell(row, column)
            if _is_blank(value):
                continue
            saw_date = True
            txn_date = parse_date(value)
            if txn_date is not None:
                break
        if txn_date is None:
            return SkipReason.INVALID_DATE if saw_date else SkipReason.MISSING_DATE

        description = ""
        for column in desc_cols:
            description = _text(_cell(row, column))
            if description:
                break
        if not description:
            return SkipReason.MISSING_DESCRIPTION

        signed = ZERO
        amount_col = None
        for column in amount_cols:
            signed = parse_amount(_cell(row, column))
            if signed != ZERO:
                amount_col = column
                break
        if amount_col is None:
            return SkipReason.ZERO_AMOUNT

        return Candidate(
            date=txn_date,
            description=description,
            amount=abs(signed),
            transaction_type=self._direction(signed, amount_col, _cell(row, type_col), description),
            confidence=Confidence.HIGH,
            raw_data=dict(row),
        )

    def _direction(
        self, signed: Decimal, amount_col: str, type_value: object, description: str
    ) -> TransactionType:
        if signed < 0:
            return TransactionType.DEBIT
        named = direction_from_text(amount_col)
        if named is not None:
            return named
        stated = direction_from_text(type_value)
        if stated is not None:
            return stated
        desc = description.lower()
        if any(word in desc for word in _CREDIT_INDICATORS):
            return TransactionType.CREDIT
        return TransactionType.DEBIT
