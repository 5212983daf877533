"""Tests for the text-based extraction strategies."""

from datetime import date
from decimal import Decimal

from finpal_extractor.config import ExtractionSettings
from finpal_extractor.models.transaction import Confidence, SourceTag, TransactionType
from finpal_extractor.parsers.base import TabularData, TextDocument
from finpal_extractor.processing.normalizer import SkipReason
from finpal_extractor.processing.statement_groups import (
    StatementGroupStrategy,
    bill_merchant,
    is_boilerplate,
    parse_detail_line,
)
from finpal_extractor.processing.text_mining import (
    AmountContextStrategy,
    EmergencyNumberStrategy,
    LinePatternStrategy,
)

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
    "Jun 25, 2025",
    "10:01 am",
    "Received from ANITA SHARMA CREDIT ₹1,500.50",
    "Transaction ID T2506251001",
    "Jun 26, 2025",
    "09:00 am",
    "Electricity bill payment DEBIT ₹845",
    "Page 1 of 1",
])


def document(*lines: str) -> TextDocument:
    """Helper to build a TextDocument from lines."""
    return TextDocument.from_text("\n".join(lines))


class TestStatementGroupStrategy:
    """Tests for strategy 3."""

    def test_parses_all_groups(self) -> None:
        """Test that each date/time/detail triple becomes a candidate."""
        output = StatementGroupStrategy().extract(TextDocument.from_text(PHONEPE_TEXT), SourceTag.PHONEPE)

        assert len(output.candidates) == 3
        paid, received, bill = output.candidates

        assert paid.date == date(2025, 6, 24)
        assert paid.description == "Paid to RAHIM KUTUBUDDIN PINJARI"
        assert paid.merchant == "RAHIM KUTUBUDDIN PINJARI"
        assert paid.amount == Decimal("20000")
        assert paid.transaction_type == TransactionType.DEBIT
        assert paid.confidence == Confidence.HIGH

        assert received.transaction_type == TransactionType.CREDIT
        assert received.amount == Decimal("1500.50")
        assert received.merchant == "ANITA SHARMA"

        assert bill.description == "Electricity bill payment"
        assert bill.merchant == "Electricity Board"
        assert bill.amount == Decimal("845")

    def test_lookahead_ids(self) -> None:
        """Test transaction ID and UTR capture from the following lines."""
        output = StatementGroupStrategy().extract(TextDocument.from_text(PHONEPE_TEXT), SourceTag.PHONEPE)
        paid, received, _ = output.candidates

        assert paid.reference_id == "T2506241513224290430015"
        assert paid.utr == "498533764693"
        assert received.reference_id == "T2506251001"
        assert received.utr is None

    def test_metadata(self) -> None:
        """Test account, period and page markers."""
        output = StatementGroupStrategy().extract(TextDocument.from_text(PHONEPE_TEXT), SourceTag.PHONEPE)

        assert output.metadata is not None
        assert output.metadata.account_number == "9876543210"
        assert output.metadata.period == "01 Jun, 2025 - 30 Jun, 2025"
        assert output.metadata.page_count == 1

    def test_final_group_without_trailing_lines(self) -> None:
        """Test that a group ending the document is still read."""
        output = StatementGroupStrategy().extract(
            document("Jun 24, 2025", "03:13 pm", "Paid to SHOP DEBIT ₹99"),
            SourceTag.PHONEPE,
        )
        assert len(output.candidates) == 1

    def test_wrong_time_line_rejected(self) -> None:
        """Test the strict time-line format."""
        output = StatementGroupStrategy().extract(
            document("Jun 24, 2025", "15:13", "Paid to SHOP DEBIT ₹99"),
            SourceTag.PHONEPE,
        )
        assert output.candidates == []
        assert output.metadata is None

    def test_tabular_input_is_linearized(self) -> None:
        """Test that text strategies accept tabular data as text."""
        data = TabularData(headers=["Line"], rows=[
            {"Line": "Jun 24, 2025"},
            {"Line": "03:13 pm"},
            {"Line": "Paid to SHOP DEBIT ₹99"},
        ])
        output = StatementGroupStrategy().extract(data, SourceTag.UNKNOWN)
        assert len(output.candidates) == 1


class TestStatementGroupHelpers:
    """Tests for statement group helper functions."""

    def test_boilerplate(self) -> None:
        """Test header and footer recognition."""
        assert is_boilerplate("Page 3 of 7")
        assert is_boilerplate("This is a system generated statement")
        assert is_boilerplate("XXXXXX3645")
        assert not is_boilerplate("Jun 24, 2025")

    def test_bill_merchant(self) -> None:
        """Test utility merchant mapping."""
        assert bill_merchant("Gas cylinder booking") == "Gas Company"
        assert bill_merchant("Water bill") == "Water Board"
        assert bill_merchant("Broadband recharge") == "Utility Company"

    def test_detail_line_unrecognized(self) -> None:
        """Test that lines without type and amount are rejected."""
        assert parse_detail_line("Paid to SHOP 99") is None


class TestLinePatternStrategy:
    """Tests for strategy 4."""

    def test_date_and_amount_on_line(self) -> None:
        """Test a line carrying both its date and amount."""
        output = LinePatternStrategy().extract(
            document("15/01/2024 Swiggy order ₹450.00"), SourceTag.UNKNOWN
        )

        assert len(output.candidates) == 1
        candidate = output.candidates[0]
        assert candidate.date == date(2024, 1, 15)
        assert candidate.amount == Decimal("450.00")
        assert candidate.description == "Swiggy order"
        assert candidate.transaction_type == TransactionType.DEBIT
        assert candidate.confidence == Confidence.HIGH

    def test_date_borrowed_from_next_line(self) -> None:
        """Test the two-line window and its lower confidence."""
        output = LinePatternStrategy().extract(
            document("Refund from Amazon Rs. 1,299", "16/01/2024"), SourceTag.UNKNOWN
        )

        candidate = output.candidates[0]
        assert candidate.date == date(2024, 1, 16)
        assert candidate.amount == Decimal("1299")
        assert candidate.transaction_type == TransactionType.CREDIT
        assert candidate.confidence == Confidence.MEDIUM

    def test_long_numbers_are_not_amounts(self) -> None:
        """Test that ID-length numbers are ignored when no currency is present."""
        strategy = LinePatternStrategy()
        assert strategy.line_amount("Order 123456789012 amount 250") == Decimal("250")

    def test_date_digits_are_not_amounts(self) -> None:
        """Test that a date alone is not an amount."""
        output = LinePatternStrategy().extract(document("Statement date 15/01/2024"), SourceTag.UNKNOWN)
        assert output.candidates == []

    def test_amount_without_date_skipped(self) -> None:
        """Test that amount-only lines are counted as missing a date."""
        output = LinePatternStrategy().extract(document("Total ₹500", "Thank you"), SourceTag.UNKNOWN)
        assert output.candidates == []
        assert output.skipped[SkipReason.MISSING_DATE] == 1

    def test_minimum_amount(self) -> None:
        """Test the minimum line amount threshold."""
        settings = ExtractionSettings(min_line_amount=100)
        output = LinePatternStrategy(settings).extract(
            document("15/01/2024 Tea ₹20"), SourceTag.UNKNOWN
        )
        assert output.candidates == []


class TestAmountContextStrategy:
    """Tests for strategy 5."""

    def test_amount_with_nearby_date(self) -> None:
        """Test mining an amount and its context window."""
        output = AmountContextStrategy().extract(
            document("Payment to Ramesh on 15/01/2024 of ₹2,500.00 done"), SourceTag.UNKNOWN
        )

        assert len(output.candidates) == 1
        candidate = output.candidates[0]
        assert candidate.amount == Decimal("2500.00")
        assert candidate.date == date(2024, 1, 15)
        assert candidate.confidence == Confidence.LOW
        assert "Ramesh" in candidate.description

    def test_near_identical_amounts_collapse(self) -> None:
        """Test that amounts within one unit keep the first occurrence."""
        output = AmountContextStrategy().extract(
            document("15/01/2024 paid ₹100.00 and again ₹100.50"), SourceTag.UNKNOWN
        )
        assert [c.amount for c in output.candidates] == [Decimal("100.00")]

    def test_out_of_range_ignored(self) -> None:
        """Test the exclusive amount bounds."""
        output = AmountContextStrategy().extract(
            document("15/01/2024 fee ₹20 and ₹5,000,000"), SourceTag.UNKNOWN
        )
        assert output.candidates == []

    def test_no_date_in_context(self) -> None:
        """Test that candidates without a date are dropped."""
        output = AmountContextStrategy().extract(document("Paid ₹750 to shop"), SourceTag.UNKNOWN)
        assert output.candidates == []
        assert output.skipped[SkipReason.MISSING_DATE] == 1


class TestEmergencyNumberStrategy:
    """Tests for strategy 6."""

    def test_synthetic_dates_and_warning(self) -> None:
        """Test bare numbers become guessed transactions on descending dates."""
        strategy = EmergencyNumberStrategy(today=date(2025, 1, 10))
        output = strategy.extract(document("Ref 42 amount 500 and 150000 and 2500"), SourceTag.UNKNOWN)

        assert [c.amount for c in output.candidates] == [Decimal("500"), Decimal("2500")]
        assert [c.date for c in output.candidates] == [date(2025, 1, 10), date(2025, 1, 9)]
        assert all(c.confidence == Confidence.NONE for c in output.candidates)
        assert output.candidates[0].merchant == "Statement"
        assert output.warnings == [EmergencyNumberStrategy.UNSUPPORTED_WARNING]

    def test_source_label(self) -> None:
        """Test that a detected provider names the guessed transactions."""
        strategy = EmergencyNumberStrategy(today=date(2025, 1, 10))
        output = strategy.extract(document("amount 500"), SourceTag.PAYTM)
        assert output.candidates[0].description == "Paytm Transaction 1 (from number pattern)"

    def test_limit(self) -> None:
        """Test the emergency candidate cap."""
        settings = ExtractionSettings(emergency_limit=2)
        strategy = EmergencyNumberStrategy(settings, today=date(2025, 1, 10))
        output = strategy.extract(document("100 200 300 400"), SourceTag.UNKNOWN)
        assert len(output.candidates) == 2

    def test_nothing_found_no_warning(self) -> None:
        """Test that an empty result carries no warning."""
        strategy = EmergencyNumberStrategy(today=date(2025, 1, 10))
        output = strategy.extract(document("no numbers here"), SourceTag.UNKNOWN)
        assert output.candidates == []
        assert output.warnings == []
