"""Excel extractor using openpyxl (.xlsx) and xlrd (.xls)."""

from collections.abc import Sequence
from pathlib import Path

from finpal_extractor.parsers.base import BaseExtractor, ParseError, TabularData
from finpal_extractor.utils.logging_config import get_logger

logger = get_logger(__name__)

# Import openpyxl - handle import error gracefully
try:
    from openpyxl import load_workbook

    OPENPYXL_AVAILABLE = True
except ImportError:
    OPENPYXL_AVAILABLE = False
    load_workbook = None  # type: ignore

# Import xlrd for legacy .xls workbooks
try:
    import xlrd

    XLRD_AVAILABLE = True
except ImportError:
    XLRD_AVAILABLE = False
    xlrd = None  # type: ignore


class ExcelExtractor(BaseExtractor):
    """Reads every worksheet of a workbook into header-keyed row mappings.

    The first non-empty row of each sheet is its header. Rows from all
    sheets are concatenated; the header list is the union in sheet order.
    """

    @property
    def supported_extensions(self) -> list[str]:
        """Return supported file extensions."""
        return [".xlsx", ".xls"]

    def extract(self, file_path: Path) -> TabularData:
        """Read all sheets of an Excel workbook.

        Args:
            file_path: Path to the workbook.

        Returns:
            TabularData spanning every sheet.

        Raises:
            ParseError: If the workbook is corrupt or its reader is missing.
        """
        if not file_path.exists():
            raise FileNotFoundError(f"File not found: {file_path}")

        logger.info(f"Reading Excel file: {file_path.name}")

        if file_path.suffix.lower() == ".xls":
            sheets = self._read_xls(file_path)
        else:
            sheets = self._read_xlsx(file_path)

        data = TabularData(headers=[])
        for sheet_name, rows in sheets:
            self._add_sheet(data, sheet_name, rows)

        logger.info(f"Read {len(data.rows)} rows from {len(sheets)} sheet(s) in {file_path.name}")
        return data

    def _read_xlsx(self, file_path: Path) -> list[tuple[str, list[tuple[object, ...]]]]:
        if not OPENPYXL_AVAILABLE:
            raise ParseError("openpyxl library not installed", file_path)

        try:
            wb = load_workbook(file_path, read_only=True, data_only=True)
            try:
                return [
                    (name, list(wb[name].iter_rows(values_only=True)))
                    for name in wb.sheetnames
                ]
            finally:
                wb.close()
        except Exception as e:
            raise ParseError(f"Failed to read Excel file: {e}", file_path) from e

    def _read_xls(self, file_path: Path) -> list[tuple[str, list[tuple[object, ...]]]]:
        if not XLRD_AVAILABLE:
            raise ParseError("xlrd library not installed", file_path)

        try:
            book = xlrd.open_workbook(str(file_path))
        except Exception as e:
            raise ParseError(f"Failed to read Excel file: {e}", file_path) from e

        sheets = []
        for sheet in book.sheets():
            rows = []
            for r in range(sheet.nrows):
                values: list[object] = []
                for cell in sheet.row(r):
                    if cell.ctype == xlrd.XL_CELL_DATE:
                        values.append(xlrd.xldate_as_datetime(cell.value, book.datemode))
                    else:
                        values.append(cell.value)
                rows.append(tuple(values))
            sheets.append((sheet.name, rows))
        return sheets

    def _add_sheet(
        self, data: TabularData, sheet_name: str, rows: Sequence[tuple[object, ...]]
    ) -> None:
        """Append one sheet's rows, keyed by that sheet's header row.

        Args:
            data: Container being filled.
            sheet_name: Worksheet name, for warnings.
            rows: Raw cell tuples.
        """
        header_idx = next(
            (i for i, row in enumerate(rows) if row and any(_has_value(c) for c in row)),
            None,
        )
        if header_idx is None:
            logger.debug(f"Sheet '{sheet_name}' is empty")
            return

        headers = [
            str(cell).strip() if _has_value(cell) else f"Column {i + 1}"
            for i, cell in enumerate(rows[header_idx])
        ]
        for header in headers:
            if header not in data.headers:
                data.headers.append(header)

        for offset, row in enumerate(rows[header_idx + 1:], start=header_idx + 2):
            if not row or not any(_has_value(c) for c in row):
                continue
            if len(row) > len(headers) and any(_has_value(c) for c in row[len(headers):]):
                message = f"Sheet '{sheet_name}' row {offset}: more cells than header columns"
                logger.debug(message)
                data.warnings.append(message)
                continue
            padded = list(row) + [""] * (len(headers) - len(row))
            data.rows.append(
                {header: ("" if value is None else value) for header, value in zip(headers, padded)}
            )


def _has_value(cell: object) -> bool:
    return cell is not None and str(cell).strip() != ""
