"""End-to-end tests for the statement pipeline."""

from datetime import date, datetime
from decimal import Decimal
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from openpyxl import Workbook

from finpal_extractor.config import Config
from finpal_extractor.models.transaction import (
    CategoryMethod,
    Confidence,
    SourceTag,
    TransactionType,
)
from finpal_extractor.parsers.base import TextDocument, UnsupportedFileTypeError
from finpal_extractor.processing.ai.models import AIClassification
from finpal_extractor.processing.pipeline import NO_TRANSACTIONS_WARNING, StatementPipeline
from finpal_extractor.processing.text_mining import EmergencyNumberStrategy

PHONEPE_TEXT = "\n".join([
    "Transaction Statement for 9876543210",
    "01 Jun, 2025 - 30 Jun, 2025",
    "Date Transaction Details Type Amount",
    "Jun 24, 2025",
    "03:13 pm",
    "Paid to RAHIM KUTUBUDDIN PINJARI DEBIT ₹20,000",
    "Transaction ID T2506241513224290430015",
    "UTR No. 498533764693",
    "Paid by",
    "XXXXXX3645",
    "Jun 26, 2025",
    "09:00 am",
    "Electricity bill payment DEBIT ₹845",
    "Page 1 of 1",
])


def write_csv(path: Path, content: str) -> Path:
    """Helper to write a CSV fixture."""
    path.write_text(content, encoding="utf-8")
    return path


def make_pipeline(**kwargs: object) -> StatementPipeline:
    """Helper to create a pipeline without the AI tier."""
    kwargs.setdefault("use_ai", False)
    kwargs.setdefault("today", date(2025, 1, 10))
    return StatementPipeline(**kwargs)  # type: ignore[arg-type]


class TestTabularFiles:
    """Pipeline runs over CSV and Excel exports."""

    def test_gpay_csv(self, tmp_path: Path) -> None:
        """Test a GPay CSV with a known merchant."""
        path = write_csv(
            tmp_path / "gpay_statement.csv",
            "Date,Description,Amount\n15/01/2024,Zomato Order,-450\n",
        )
        result = make_pipeline().process_file(path)

        assert result.source == SourceTag.GPAY
        assert result.strategy == "Provider Column Mapping"
        assert result.confidence == Confidence.HIGH
        assert len(result.transactions) == 1

        txn = result.transactions[0]
        assert txn.date == date(2024, 1, 15)
        assert txn.amount == Decimal("450.00")
        assert txn.transaction_type == TransactionType.DEBIT
        assert txn.merchant == "Zomato"
        assert txn.category == "Food & Dining"
        assert txn.category_confidence == Confidence.HIGH
        assert txn.category_method == CategoryMethod.RULE

    def test_failed_status_only(self, tmp_path: Path) -> None:
        """Test that failed PhonePe rows are not recovered by later strategies."""
        path = write_csv(
            tmp_path / "phonepe_statement.csv",
            "Date,Transaction Details,Amount,Status\n"
            "24/06/2025,Paid to Suresh,700,Failed\n"
            "25/06/2025,Paid to Mahesh,900,FAILED\n",
        )
        result = make_pipeline().process_file(path)

        assert result.transactions == []
        assert result.confidence == Confidence.NONE
        assert NO_TRANSACTIONS_WARNING in result.warnings
        assert result.skipped == {"failed_status": 2}

    def test_same_day_duplicates_collapsed(self, tmp_path: Path) -> None:
        """Test dedup across times on the same day."""
        path = write_csv(
            tmp_path / "gpay.csv",
            "Date,Description,Amount\n"
            "15/01/2024 10:00,Paid to Ramesh,-500\n"
            "15/01/2024 18:00,Paid to Ramesh,-500\n",
        )
        result = make_pipeline().process_file(path)

        assert len(result.transactions) == 1
        assert result.transactions[0].date == datetime(2024, 1, 15, 10, 0)
        assert result.skipped == {"duplicate": 1}

    def test_dedup_disabled(self, tmp_path: Path) -> None:
        """Test that deduplication can be switched off."""
        path = write_csv(
            tmp_path / "gpay.csv",
            "Date,Description,Amount\n15/01/2024,Tea,-20\n15/01/2024,Tea,-20\n",
        )
        config = Config()
        config.extraction.deduplicate = False

        result = make_pipeline(config=config).process_file(path)

        assert len(result.transactions) == 2

    def test_bank_workbook(self, tmp_path: Path) -> None:
        """Test a bank statement workbook with split amount columns."""
        wb = Workbook()
        ws = wb.active
        ws.append(["Date", "Narration", "Withdrawal", "Deposit"])
        ws.append([datetime(2024, 2, 1), "ATM CASH WDL", 2000, None])
        ws.append([datetime(2024, 2, 3), "NEFT SALARY FEB", None, 50000])
        path = tmp_path / "hdfc_bank.xlsx"
        wb.save(path)

        result = make_pipeline().process_file(path)

        assert result.source == SourceTag.BANK
        atm, salary = result.transactions
        assert atm.category == "ATM Withdrawal"
        assert salary.transaction_type == TransactionType.CREDIT
        assert salary.category == "Income"
        assert result.summary.total_debits == Decimal("2000.00")
        assert result.summary.total_credits == Decimal("50000.00")

    def test_bank_workbook_suffixed_headers(self, tmp_path: Path) -> None:
        """Test a bank workbook whose headers carry a currency suffix."""
        wb = Workbook()
        ws = wb.active
        ws.append(["Txn Date", "Narration", "Withdrawal Amount (INR)", "Deposit Amount (INR)", "Balance (INR)"])
        ws.append([datetime(2024, 2, 1), "POS SWIGGY BLR", 250, None, 48750])
        ws.append([datetime(2024, 2, 3), "NEFT SALARY FEB", None, 50000, 98750])
        path = tmp_path / "icici_bank.xlsx"
        wb.save(path)

        result = make_pipeline().process_file(path)

        assert result.strategy == "Provider Column Mapping"
        assert [(t.amount, t.transaction_type) for t in result.transactions] == [
            (Decimal("250.00"), TransactionType.DEBIT),
            (Decimal("50000.00"), TransactionType.CREDIT),
        ]

    def test_row_text_does_not_decide_source(self, tmp_path: Path) -> None:
        """Test that a provider named in a bank narration leaves the file a bank statement."""
        path = write_csv(
            tmp_path / "hdfc_statement.csv",
            "Date,Narration,Withdrawal,Deposit\n15/01/2024,UPI-GPAY-Ramesh,500,\n",
        )
        result = make_pipeline().process_file(path)

        assert result.source == SourceTag.BANK
        assert result.strategy == "Provider Column Mapping"
        assert result.transactions[0].source == SourceTag.BANK

    def test_generic_upi_reported_as_unknown(self, tmp_path: Path) -> None:
        """Test that the generic UPI bucket is tagged Unknown on the result too."""
        path = write_csv(tmp_path / "upi_export.csv", "Date,Description,Amount\n15/01/2024,Tea,-20\n")
        result = make_pipeline().process_file(path)

        assert result.source == SourceTag.UNKNOWN
        assert result.to_dict()["source"] == "Unknown"
        assert result.transactions[0].source == SourceTag.UNKNOWN

    def test_row_warnings_surface(self, tmp_path: Path) -> None:
        """Test that malformed CSV rows become result warnings."""
        path = write_csv(
            tmp_path / "gpay.csv",
            "Date,Description,Amount\n15/01/2024,Tea,-20\n16/01/2024,Coffee,-30,oops\n",
        )
        result = make_pipeline().process_file(path)

        assert len(result.transactions) == 1
        assert any("more cells" in w for w in result.warnings)


class TestTextStatements:
    """Pipeline runs over statement text."""

    def test_phonepe_groups(self) -> None:
        """Test structured PhonePe text end to end."""
        result = make_pipeline().process_data(
            TextDocument.from_text(PHONEPE_TEXT), SourceTag.PHONEPE, "phonepe.pdf"
        )

        assert result.strategy == "Statement Line Groups"
        assert result.confidence == Confidence.HIGH
        assert len(result.transactions) == 2

        transfer, bill = result.transactions
        assert transfer.amount == Decimal("20000.00")
        assert transfer.merchant == "RAHIM KUTUBUDDIN PINJARI"
        assert transfer.reference_id == "T2506241513224290430015"
        assert transfer.category == "Others"
        assert transfer.category_method == CategoryMethod.DEFAULT
        assert bill.category == "Bills & Utilities"

        assert result.metadata is not None
        assert result.metadata.account_number == "9876543210"

    def test_nothing_recognizable(self) -> None:
        """Test that text without numbers yields an empty None-confidence result."""
        result = make_pipeline().process_data(
            TextDocument.from_text("Hello world\nNothing to see"), SourceTag.UNKNOWN, "notes.pdf"
        )

        assert result.transactions == []
        assert result.strategy is None
        assert result.confidence == Confidence.NONE
        assert result.warnings == [NO_TRANSACTIONS_WARNING]

    def test_emergency_fallback(self) -> None:
        """Test that bare numbers are a last resort with a warning."""
        result = make_pipeline().process_data(
            TextDocument.from_text("Statement total 500 and 2500"), SourceTag.UNKNOWN, "scan.pdf"
        )

        assert result.strategy == "Emergency Number Extraction"
        assert result.confidence == Confidence.LOW
        assert EmergencyNumberStrategy.UNSUPPORTED_WARNING in result.warnings
        assert [t.date for t in result.transactions] == [date(2025, 1, 10), date(2025, 1, 9)]
        assert all(t.extraction_confidence == Confidence.NONE for t in result.transactions)


class TestAITier:
    """Pipeline wiring of the AI classifier."""

    def test_classifier_used_and_budget_reset(self) -> None:
        """Test that unmatched transactions reach the classifier."""
        classifier = MagicMock()
        classifier.classify.return_value = AIClassification("Money Transfer", True, "Money Transfer")
        pipeline = StatementPipeline(classifier=classifier, today=date(2025, 1, 10))

        result = pipeline.process_data(
            TextDocument.from_text(PHONEPE_TEXT), SourceTag.PHONEPE, "phonepe.pdf"
        )

        transfer = result.transactions[0]
        assert transfer.category == "Money Transfer"
        assert transfer.category_method == CategoryMethod.AI
        assert transfer.category_confidence == Confidence.MEDIUM
        classifier.reset_budget.assert_called_once()

    def test_use_ai_false_ignores_classifier(self) -> None:
        """Test that disabling AI wins over a supplied classifier."""
        classifier = MagicMock()
        pipeline = StatementPipeline(classifier=classifier, use_ai=False)
        assert pipeline.classifier is None
        assert pipeline.categorizer.classifier is None


class TestUploads:
    """Tests for in-memory uploads and inspection."""

    def test_process_bytes(self) -> None:
        """Test an upload is processed under its original name."""
        content = b"Date,Description,Amount\n15/01/2024,Zomato Order,-450\n"
        result = make_pipeline().process_bytes(content, "gpay_jan.csv")

        assert result.file_name == "gpay_jan.csv"
        assert result.source == SourceTag.GPAY
        assert len(result.transactions) == 1

    def test_unsupported_extension_rejected_first(self) -> None:
        """Test that unsupported uploads fail before touching disk."""
        with pytest.raises(UnsupportedFileTypeError):
            make_pipeline().process_bytes(b"PK\x03\x04", "statement.docx")

    def test_inspect_file(self, tmp_path: Path) -> None:
        """Test the inspection report for a CSV."""
        path = write_csv(
            tmp_path / "paytm.csv",
            'Date,Activity,Amount\n15/01/2024,Paid for order,"₹1,234.00"\n',
        )
        report = make_pipeline().inspect_file(path)

        assert report.source == SourceTag.PAYTM
        assert report.has_date_pattern is True
        assert report.has_rupee_symbol is True
        assert report.first_lines[0] == "Date Activity Amount"
