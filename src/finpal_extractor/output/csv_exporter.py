"""CSV exporter for spreadsheet import of extracted transactions."""

import csv
from pathlib import Path

from finpal_extractor.models.report import ProcessingResult
from finpal_extractor.models.transaction import Transaction
from finpal_extractor.utils.logging_config import get_logger
from finpal_extractor.utils.sanitize import sanitize_for_csv

logger = get_logger(__name__)

TRANSACTION_HEADERS = [
    "File", "Date", "Description", "Merchant", "Type", "Amount", "Source",
    "Category", "Category Confidence", "Category Method", "Extraction Confidence",
    "Strategy", "Reference ID", "UTR",
]

CATEGORY_HEADERS = ["Category", "Debit Total"]


class CSVExporter:
    """Exports processing results to CSV files.

    Creates:
    - A flat transactions file, one row per transaction across all results
    - Optionally a category summary file with summed debits per category

    Every text cell is sanitized against spreadsheet formula injection.
    """

    def export(self, output_path: Path, results: list[ProcessingResult]) -> Path:
        """Export transactions from one or more results to a single CSV.

        Args:
            output_path: Destination CSV path.
            results: Processing results, one per input file.

        Returns:
            Path to created file.
        """
        output_path.parent.mkdir(parents=True, exist_ok=True)
        count = 0

        with open(output_path, "w", newline="", encoding="utf-8") as f:
            writer = csv.writer(f)
            writer.writerow(TRANSACTION_HEADERS)

            for result in results:
                for txn in result.transactions:
                    writer.writerow(self._transaction_row(result.file_name, txn))
                    count += 1

        logger.info(f"Exported {count} transactions to {output_path}")
        return output_path

    def export_category_summary(self, output_path: Path, results: list[ProcessingResult]) -> Path:
        """Export summed debits per category across results.

        Args:
            output_path: Destination CSV path.
            results: Processing results.

        Returns:
            Path to created file.
        """
        totals: dict[str, float] = {}
        for result in results:
            for name, amount in result.summary.category_debits.items():
                totals[name] = totals.get(name, 0.0) + float(amount)

        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "w", newline="", encoding="utf-8") as f:
            writer = csv.writer(f)
            writer.writerow(CATEGORY_HEADERS)
            for name, amount in sorted(totals.items(), key=lambda kv: kv[1], reverse=True):
                writer.writerow([sanitize_for_csv(name), f"{amount:.2f}"])

        logger.info(f"Exported {len(totals)} category totals to {output_path}")
        return output_path

    @staticmethod
    def _transaction_row(file_name: str, txn: Transaction) -> list[object]:
        return [
            sanitize_for_csv(file_name),
            txn.date_iso,
            sanitize_for_csv(txn.description),
            sanitize_for_csv(txn.merchant),
            txn.transaction_type.value,
            f"{txn.amount:.2f}",
            txn.source.value,
            sanitize_for_csv(txn.category or ""),
            txn.category_confidence.value if txn.category_confidence else "",
            txn.category_method.value if txn.category_method else "",
            txn.extraction_confidence.value,
            txn.strategy,
            sanitize_for_csv(txn.reference_id or ""),
            sanitize_for_csv(txn.utr or ""),
        ]
