"""CSV extractor with streaming row reads."""

import csv
from pathlib import Path
from typing import Iterator, Optional

from finpal_extractor.parsers.base import BaseExtractor, ParseError, TabularData
from finpal_extractor.utils.logging_config import get_logger

logger = get_logger(__name__)

# Maximum number of rows to prevent memory exhaustion from many small rows
MAX_CSV_ROWS = 500_000

# Lines sampled for delimiter sniffing
SNIFF_LINES = 10

# Marker key used by DictReader for cells beyond the header width
_OVERFLOW_KEY = "__overflow__"


class CSVExtractor(BaseExtractor):
    """Reads CSV exports into header-keyed row mappings.

    Rows are read lazily through iter_rows(); extract() collects them.
    A malformed row is skipped with a warning rather than aborting the read.
    """

    @property
    def supported_extensions(self) -> list[str]:
        """Return supported file extensions."""
        return [".csv"]

    def extract(self, file_path: Path) -> TabularData:
        """Read every row of a CSV file.

        Args:
            file_path: Path to the CSV file.

        Returns:
            TabularData with original header strings and one mapping per row.

        Raises:
            ParseError: If the file cannot be decoded or has too many rows.
        """
        data = TabularData(headers=[])
        for row_num, row in self.iter_rows(file_path, data):
            if row_num > MAX_CSV_ROWS:
                raise ParseError(
                    f"File exceeds maximum row limit ({MAX_CSV_ROWS:,} rows)",
                    file_path,
                )
            data.rows.append(row)

        logger.info(
            f"Read {len(data.rows)} rows from {file_path.name} "
            f"({len(data.warnings)} rows skipped)"
        )
        return data

    def iter_rows(
        self, file_path: Path, data: Optional[TabularData] = None
    ) -> Iterator[tuple[int, dict[str, object]]]:
        """Yield (row number, row mapping) pairs one at a time.

        Args:
            file_path: Path to the CSV file.
            data: Optional container whose headers and warnings are filled in
                as the file is read.

        Yields:
            Tuples of 1-based data row number and header-keyed row.

        Raises:
            FileNotFoundError: If the file doesn't exist.
            ParseError: If the file cannot be read.
        """
        if not file_path.exists():
            raise FileNotFoundError(f"File not found: {file_path}")

        try:
            with open(file_path, encoding="utf-8-sig", errors="replace", newline="") as f:
                delimiter = self._detect_delimiter(f)
                reader = csv.DictReader(
                    f, delimiter=delimiter, restkey=_OVERFLOW_KEY, restval=""
                )
                headers = list(reader.fieldnames or [])
                if data is not None:
                    data.headers = headers
                if not headers:
                    logger.warning(f"{file_path.name} has no header row")
                    return

                row_num = 0
                while True:
                    try:
                        row = next(reader)
                    except StopIteration:
                        break
                    except csv.Error as e:
                        row_num += 1
                        self._warn(data, f"Row {row_num}: unreadable CSV row ({e})")
                        continue

                    row_num += 1
                    if _OVERFLOW_KEY in row:
                        self._warn(data, f"Row {row_num}: more cells than header columns")
                        continue
                    if all(not str(v).strip() for v in row.values()):
                        continue
                    yield row_num, dict(row)
        except UnicodeError as e:
            raise ParseError(f"Failed to decode CSV file: {e}", file_path) from e
        except OSError as e:
            raise ParseError(f"Failed to read CSV file: {e}", file_path) from e

    def _detect_delimiter(self, f) -> str:
        """Detect CSV delimiter from the first lines, then rewind.

        Args:
            f: Open text file positioned at the start.

        Returns:
            Detected delimiter character, ',' when undecided.
        """
        sample_lines = []
        for _ in range(SNIFF_LINES):
            line = f.readline()
            if not line:
                break
            sample_lines.append(line)
        f.seek(0)

        try:
            dialect = csv.Sniffer().sniff("".join(sample_lines), delimiters=",\t;|")
            return dialect.delimiter
        except csv.Error:
            return ","

    @staticmethod
    def _warn(data: Optional[TabularData], message: str) -> None:
        logger.debug(message)
        if data is not None:
            data.warnings.append(message)
