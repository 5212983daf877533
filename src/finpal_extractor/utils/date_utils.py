"""Date parsing and normalization utilities.

Statement dates are day-first (Indian convention). Slash, dash and dot
separated dates are always read as DD/MM/YYYY; only a leading four-digit
year switches to YYYY-MM-DD.

Two-digit years pivot at 50: ``YY > 50`` maps to 19YY, anything else to 20YY.
Accepted years are limited to [1970, current year + 1].
"""

import re
from datetime import date, datetime
from typing import Optional, Union

from openpyxl.utils.datetime import from_excel

DateValue = Union[date, datetime]

MIN_YEAR = 1970

# Largest serial Excel can represent (9999-12-31)
MAX_SPREADSHEET_SERIAL = 2958465

MONTHS = {
    "jan": 1, "feb": 2, "mar": 3, "apr": 4, "may": 5, "jun": 6,
    "jul": 7, "aug": 8, "sep": 9, "oct": 10, "nov": 11, "dec": 12,
}

_MONTH_NAME = r"(?P<mon>Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec)[a-z]*\.?"
_TIME_SUFFIX = (
    r"(?:[\sT,]+(?P<hour>\d{1,2}):(?P<minute>\d{2})(?::(?P<second>\d{2}))?"
    r"\s*(?P<ampm>[AaPp]\.?[Mm]\.?)?)?"
)

# Anchored patterns tried in priority order. Each yields named day/month/year groups.
DATE_PATTERNS = [
    # DD/MM/YYYY
    (r"^(?P<day>\d{1,2})/(?P<month>\d{1,2})/(?P<year>\d{4})" + _TIME_SUFFIX + r"$", "numeric"),
    # DD-MM-YYYY
    (r"^(?P<day>\d{1,2})-(?P<month>\d{1,2})-(?P<year>\d{4})" + _TIME_SUFFIX + r"$", "numeric"),
    # YYYY-MM-DD (also YYYY/MM/DD)
    (r"^(?P<year>\d{4})[-/](?P<month>\d{1,2})[-/](?P<day>\d{1,2})" + _TIME_SUFFIX + r"$", "numeric"),
    # DD.MM.YYYY
    (r"^(?P<day>\d{1,2})\.(?P<month>\d{1,2})\.(?P<year>\d{4})" + _TIME_SUFFIX + r"$", "numeric"),
    # Two-digit years
    (r"^(?P<day>\d{1,2})[/.-](?P<month>\d{1,2})[/.-](?P<year>\d{2})" + _TIME_SUFFIX + r"$", "numeric"),
    # Jun 24, 2025 / June 24 2025 / Jun 24, 2025 03:13 pm
    (r"^" + _MONTH_NAME + r"\s+(?P<day>\d{1,2}),?\s+(?P<year>\d{4})" + _TIME_SUFFIX + r"$", "named"),
    # 24 Jun 2025 / 24-Jun-2025 / 24-Jun-25
    (r"^(?P<day>\d{1,2})[\s-]+" + _MONTH_NAME + r"[\s,-]+(?P<year>\d{4}|\d{2})" + _TIME_SUFFIX + r"$", "named"),
]

COMPILED_PATTERNS = [(re.compile(pattern, re.IGNORECASE), kind) for pattern, kind in DATE_PATTERNS]

# Unanchored patterns used to find dates inside free text, most specific first
DATE_SEARCH_PATTERNS = [
    re.compile(
        r"\b(?:Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec)[a-z]*\.?\s+\d{1,2},?\s+\d{4}"
        r"(?:\s+\d{1,2}:\d{2}\s*(?:am|pm))?",
        re.IGNORECASE,
    ),
    re.compile(
        r"\b\d{1,2}[\s-](?:Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec)[a-z]*[\s,-]+\d{4}\b",
        re.IGNORECASE,
    ),
    re.compile(r"\b\d{4}[/-]\d{1,2}[/-]\d{1,2}\b"),
    re.compile(r"\b\d{1,2}[/.-]\d{1,2}[/.-](?:\d{4}|\d{2})\b"),
]

# Generic formats tried when no anchored pattern matches
FALLBACK_FORMATS = [
    "%Y%m%d",
    "%d %B %Y",
    "%B %d %Y",
    "%d/%m/%Y %H:%M:%S",
    "%a, %d %b %Y",
    "%a %b %d %Y",
]


def _max_year() -> int:
    return date.today().year + 1


def _year_in_range(year: int) -> bool:
    return MIN_YEAR <= year <= _max_year()


def _expand_year(year_str: str) -> int:
    year = int(year_str)
    if len(year_str) == 2:
        year = 1900 + year if year > 50 else 2000 + year
    return year


def _build_date(match: re.Match, kind: str) -> Optional[DateValue]:
    """Rebuild a date from regex groups, validating the calendar fields."""
    groups = match.groupdict()
    year = _expand_year(groups["year"])
    if kind == "named":
        month = MONTHS[groups["mon"][:3].lower()]
    else:
        month = int(groups["month"])
    day = int(groups["day"])

    if not _year_in_range(year):
        return None

    try:
        parsed_date = date(year, month, day)
    except ValueError:
        # 31/02/2024 and friends
        return None

    if groups.get("hour") is None:
        return parsed_date

    hour = int(groups["hour"])
    minute = int(groups["minute"])
    second = int(groups["second"] or 0)
    ampm = (groups.get("ampm") or "").replace(".", "").lower()
    if ampm:
        if not 1 <= hour <= 12:
            return None
        hour = hour % 12 + (12 if ampm == "pm" else 0)

    try:
        return datetime(year, month, day, hour, minute, second)
    except ValueError:
        return None


def _from_serial(serial: float) -> Optional[DateValue]:
    """Convert a spreadsheet date serial to a date or datetime.

    openpyxl applies the 1900 leap-year bug offset, so serial 60 is the
    phantom 1900-02-29 and everything after it lines up with Excel.
    """
    if serial <= 0 or serial > MAX_SPREADSHEET_SERIAL:
        return None
    try:
        converted = from_excel(serial)
    except (ValueError, OverflowError, TypeError):
        return None
    if not isinstance(converted, datetime) or not _year_in_range(converted.year):
        return None
    if converted.time() == datetime.min.time():
        return converted.date()
    return converted


def _normalize_native(value: DateValue) -> Optional[DateValue]:
    if not _year_in_range(value.year):
        return None
    if isinstance(value, datetime) and value.time() == datetime.min.time():
        return value.date()
    return value


def parse_date(raw_date: object) -> Optional[DateValue]:
    """Parse a raw statement value into a date or datetime.

    Accepts, in priority order:
    - Spreadsheet serial numbers (int/float, or a bare numeric string)
    - DD/MM/YYYY, DD-MM-YYYY, YYYY-MM-DD, DD.MM.YYYY
    - Two-digit year variants (DD/MM/YY etc.)
    - Named months: "Jun 24, 2025", "24 Jun 2025", "24-Jun-2025"
    - ISO 8601 timestamps and a few generic formats as a fallback

    Any of the numeric and named forms may carry a trailing time
    ("15/01/2024 10:30", "Jun 24, 2025 03:13 pm"); those return a datetime.

    Args:
        raw_date: String, number, date or datetime.

    Returns:
        A date (or datetime when a time was present), or None if the value
        is not a valid date. Never raises.
    """
    if raw_date is None or isinstance(raw_date, bool):
        return None

    if isinstance(raw_date, (datetime, date)):
        return _normalize_native(raw_date)

    if isinstance(raw_date, (int, float)):
        return _from_serial(float(raw_date))

    if not isinstance(raw_date, str):
        return None

    date_str = " ".join(raw_date.split())
    if not date_str:
        return None

    if re.fullmatch(r"\d{1,7}(?:\.\d+)?", date_str):
        return _from_serial(float(date_str))

    for pattern, kind in COMPILED_PATTERNS:
        match = pattern.match(date_str)
        if match:
            parsed = _build_date(match, kind)
            if parsed is not None:
                return parsed

    try:
        return _normalize_native(datetime.fromisoformat(date_str))
    except ValueError:
        pass

    for fmt in FALLBACK_FORMATS:
        try:
            return _normalize_native(datetime.strptime(date_str, fmt))
        except ValueError:
            continue

    return None


def search_date(text: str) -> Optional[tuple[str, DateValue]]:
    """Find the first valid date inside free text.

    The earliest match in the text wins; at the same position the longest
    match wins so a trailing time is kept.

    Args:
        text: Line or text window to scan.

    Returns:
        Tuple of (matched text, parsed value), or None.
    """
    candidates: list[tuple[int, int, str]] = []
    for pattern in DATE_SEARCH_PATTERNS:
        for match in pattern.finditer(text):
            candidates.append((match.start(), -len(match.group(0)), match.group(0)))

    for _, _, matched in sorted(candidates):
        parsed = parse_date(matched)
        if parsed is not None:
            return matched, parsed
    return None


def strip_dates(text: str) -> str:
    """Remove every date-shaped token from text."""
    for pattern in DATE_SEARCH_PATTERNS:
        text = pattern.sub(" ", text)
    return text


def format_date(value: DateValue) -> str:
    """Format a date in its canonical textual form.

    Dates render as ``YYYY-MM-DD``; datetimes as ``YYYY-MM-DDTHH:MM:SS``.

    Args:
        value: Date or datetime to format.

    Returns:
        ISO 8601 string.
    """
    if isinstance(value, datetime):
        return value.replace(microsecond=0).isoformat()
    return value.isoformat()


def to_day(value: DateValue) -> date:
    """Truncate a date or datetime to its calendar day."""
    if isinstance(value, datetime):
        return value.date()
    return value
