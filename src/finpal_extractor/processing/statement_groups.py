"""Strategy 3: structured transaction-group detection in statement text.

Wallet statements such as PhonePe's render each transaction as a fixed
run of lines:

    Jun 24, 2025
    03:13 pm
    Paid to RAHIM KUTUBUDDIN PINJARI DEBIT ₹20,000
    Transaction ID T2506241513224290430015
    UTR No. 498533764693
    Paid by XXXXXX3645

Each line is validated against a strict format before the detail line
is parsed, and header/footer boilerplate is never read as data.
"""

import re
from typing import Optional

from finpal_extractor.models.report import StatementMetadata
from finpal_extractor.models.transaction import Candidate, Confidence, SourceTag, TransactionType
from finpal_extractor.parsers.base import TextDocument
from finpal_extractor.processing.strategy import ExtractionStrategy, StrategyOutput
from finpal_extractor.utils.date_utils import parse_date
from finpal_extractor.utils.decimal_utils import parse_amount
from finpal_extractor.utils.logging_config import get_logger

logger = get_logger(__name__)

DATE_LINE = re.compile(r"^(Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec)\s+\d{1,2},\s+\d{4}$")
TIME_LINE = re.compile(r"^\d{1,2}:\d{2}\s+(am|pm)$", re.IGNORECASE)

_AMOUNT = r"₹([\d,]+(?:\.\d{2})?)"

# Detail line patterns in priority order: (pattern, fixed type or None)
PAID_TO = re.compile(rf"^Paid to (.+?)\s+(DEBIT)\s+{_AMOUNT}$")
RECEIVED_FROM = re.compile(rf"^Received from (.+?)\s+(CREDIT)\s+{_AMOUNT}$")
GENERIC_DETAIL = re.compile(rf"^(.+?)\s+(DEBIT|CREDIT)\s+{_AMOUNT}$")

TRANSACTION_ID = re.compile(r"Transaction ID ([A-Z0-9]+)")
UTR_NUMBER = re.compile(r"UTR No\. (\d+)")

# Lines following the detail line searched for IDs
LOOKAHEAD_LINES = 4

SKIP_PATTERNS = [
    re.compile(r"^Transaction Statement for"),
    re.compile(r"^Date Transaction Details Type Amount$"),
    re.compile(r"^Page \d+ of \d+$"),
    re.compile(r"^This is a system generated statement"),
    re.compile(r"^For any queries, contact us at"),
    re.compile(r"^terms-conditions"),
    re.compile(r"^Disclaimer"),
    re.compile(r"^etc\. through SMS"),
    re.compile(r"^https://support\.phonepe\.com"),
    re.compile(r"^XXXXXX\d+$"),
    re.compile(r"^Paid by$"),
    re.compile(r"^Credited to$"),
    re.compile(r"^\d+ \w+, \d+ - \d+ \w+, \d+$"),
]

ACCOUNT_PATTERN = re.compile(r"Transaction Statement for (\d+)")
PERIOD_PATTERN = re.compile(r"(\d{1,2} \w+, \d{4}) - (\d{1,2} \w+, \d{4})")
PAGE_MARKER = re.compile(r"Page \d+ of \d+")

# Bill keywords to utility merchant, first match wins
BILL_MERCHANTS = [
    ("electricity", "Electricity Board"),
    ("gas", "Gas Company"),
    ("water", "Water Board"),
]
DEFAULT_BILL_MERCHANT = "Utility Company"


def is_boilerplate(line: str) -> bool:
    """Whether a line is a statement header, footer or disclaimer."""
    return any(pattern.search(line) for pattern in SKIP_PATTERNS)


def bill_merchant(description: str) -> str:
    """Map a bill-payment description to a utility merchant name."""
    lowered = description.lower()
    for keyword, merchant in BILL_MERCHANTS:
        if keyword in lowered:
            return merchant
    return DEFAULT_BILL_MERCHANT


def parse_detail_line(line: str) -> Optional[tuple[str, str, TransactionType, str]]:
    """Parse a detail line into (description, merchant, type, raw amount).

    Args:
        line: Third line of a group.

    Returns:
        The parsed parts, or None if the line matches no detail pattern.
    """
    match = PAID_TO.match(line)
    if match:
        name = match.group(1).strip()
        return f"Paid to {name}", name, TransactionType.DEBIT, match.group(3)

    match = RECEIVED_FROM.match(line)
    if match:
        name = match.group(1).strip()
        return f"Received from {name}", name, TransactionType.CREDIT, match.group(3)

    match = GENERIC_DETAIL.match(line)
    if match:
        description = match.group(1).strip()
        txn_type = TransactionType(match.group(2).lower())
        return description, bill_merchant(description), txn_type, match.group(3)

    return None


def extract_metadata(text: str) -> Optional[StatementMetadata]:
    """Read account number, statement period and page count from statement text.

    Args:
        text: Full document text.

    Returns:
        StatementMetadata, or None when none of the markers are present.
    """
    account = ACCOUNT_PATTERN.search(text)
    period = PERIOD_PATTERN.search(text)
    pages = len(PAGE_MARKER.findall(text))
    if account is None and period is None and pages == 0:
        return None
    return StatementMetadata(
        account_number=account.group(1) if account else None,
        period=f"{period.group(1)} - {period.group(2)}" if period else None,
        page_count=pages,
    )


class StatementGroupStrategy(ExtractionStrategy):
    """Strategy 3: fixed multi-line transaction groups."""

    name = "Statement Line Groups"
    ceiling = Confidence.HIGH

    def run(self, data: TextDocument, source: SourceTag) -> StrategyOutput:  # type: ignore[override]
        output = StrategyOutput()
        lines = data.lines

        index = 0
        while index + 2 < len(lines):
            candidate = self.parse_group(lines, index)
            if candidate is None:
                index += 1
                continue
            output.candidates.append(candidate)
            index += 3

        if output.candidates:
            output.metadata = extract_metadata(data.full_text)
        return output

    def parse_group(self, lines: list[str], start: int) -> Optional[Candidate]:
        """Parse the group starting at a line index.

        Args:
            lines: Trimmed document lines.
            start: Index of the expected date line.

        Returns:
            Candidate, or None if the lines do not form a group.
        """
        date_line = lines[start]
        if is_boilerplate(date_line) or not DATE_LINE.match(date_line):
            return None

        time_line = lines[start + 1]
        if not TIME_LINE.match(time_line):
            return None

        detail_line = lines[start + 2]
        parsed = parse_detail_line(detail_line)
        if parsed is None:
            logger.debug(f"Line {start + 3}: detail line not recognized")
            return None
        description, merchant, txn_type, raw_amount = parsed

        txn_date = parse_date(date_line)
        if txn_date is None:
            return None

        reference_id, utr = self._lookahead_ids(lines, start + 3)

        return Candidate(
            date=txn_date,
            description=description,
            amount=parse_amount(raw_amount),
            transaction_type=txn_type,
            merchant=merchant,
            confidence=Confidence.HIGH,
            reference_id=reference_id,
            utr=utr,
            raw_data={
                "dateLine": date_line,
                "timeLine": time_line,
                "detailsLine": detail_line,
                "lineIndex": start,
            },
        )

    def _lookahead_ids(self, lines: list[str], start: int) -> tuple[Optional[str], Optional[str]]:
        reference_id = None
        utr = None
        for line in lines[start:start + LOOKAHEAD_LINES]:
            if DATE_LINE.match(line):
                break
            tid_match = TRANSACTION_ID.search(line)
            if tid_match:
                reference_id = tid_match.group(1)
            utr_match = UTR_NUMBER.search(line)
            if utr_match:
                utr = utr_match.group(1)
        return reference_id, utr
