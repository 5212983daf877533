"""Best-effort counterparty extraction from transaction descriptions."""

import re

UNKNOWN_MERCHANT = "Unknown"

MAX_MERCHANT_LENGTH = 50

# Words never taken as a merchant name on their own
STOP_WORDS = frozenset({
    "the", "and", "for", "to", "from", "at", "in", "on", "with", "of", "by",
    "upi", "payment", "transaction", "paid", "received", "sent", "txn",
})

# Name run: words until a separator, a reference number or a trailing keyword
_NAME = (
    r"(?P<name>[A-Za-z][\w&.']*(?:\s+[A-Za-z][\w&.']*){0,5}?)"
    r"(?=\s*$|\s*[-/@,|:(]|\s+\d|\s+(?:on|via|using|ref|upi|debit|credit|dr|cr|for|at)\b)"
)

# UPI-style prepositional patterns in priority order
MERCHANT_PATTERNS = [
    re.compile(r"\bto\s+" + _NAME, re.IGNORECASE),
    re.compile(r"\bfrom\s+" + _NAME, re.IGNORECASE),
    re.compile(r"\bpaid\s+to\s+" + _NAME, re.IGNORECASE),
    re.compile(r"\breceived\s+from\s+" + _NAME, re.IGNORECASE),
]

_TOKEN_SPLIT = re.compile(r"[\s\-_@/|]+")


def extract_merchant(description: str | None) -> str:
    """Extract the counterparty name from a description.

    Tries "to X" / "from X" / "paid to X" / "received from X" first, then
    the first token longer than two characters that is neither a stop
    word nor a number.

    Args:
        description: Transaction description.

    Returns:
        Merchant name, or "Unknown" when nothing usable is found.
    """
    if not description or not description.strip():
        return UNKNOWN_MERCHANT

    for pattern in MERCHANT_PATTERNS:
        match = pattern.search(description)
        if match:
            name = match.group("name").strip(" .'")
            if name and name.lower() not in STOP_WORDS:
                return name[:MAX_MERCHANT_LENGTH]

    for token in _TOKEN_SPLIT.split(description):
        word = token.strip(".,;:()[]'\"")
        if len(word) > 2 and word.lower() not in STOP_WORDS and not any(c.isdigit() for c in word):
            return word[:MAX_MERCHANT_LENGTH]

    return UNKNOWN_MERCHANT
