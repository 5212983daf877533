"""Tests for the provider and generic column strategies."""

from datetime import date
from decimal import Decimal

from finpal_extractor.models.transaction import Confidence, SourceTag, TransactionType
from finpal_extractor.parsers.base import TabularData, TextDocument
from finpal_extractor.processing.normalizer import SkipReason
from finpal_extractor.processing.tabular import (
    GenericColumnStrategy,
    ProviderColumnStrategy,
    direction_from_text,
)


def make_table(headers: list[str], *rows: list[object]) -> TabularData:
    """Helper to build TabularData from positional rows."""
    return TabularData(
        headers=headers,
        rows=[dict(zip(headers, row)) for row in rows],
    )


class TestDirectionFromText:
    """Tests for direction_from_text."""

    def test_debit_words(self) -> None:
        """Test debit markers."""
        assert direction_from_text("DEBIT") == TransactionType.DEBIT
        assert direction_from_text("Dr") == TransactionType.DEBIT
        assert direction_from_text("Paid") == TransactionType.DEBIT

    def test_credit_words(self) -> None:
        """Test credit markers."""
        assert direction_from_text("Credit") == TransactionType.CREDIT
        assert direction_from_text("CR") == TransactionType.CREDIT
        assert direction_from_text("Received") == TransactionType.CREDIT

    def test_ambiguous_or_empty(self) -> None:
        """Test that neither or both markers give None."""
        assert direction_from_text("") is None
        assert direction_from_text(None) is None
        assert direction_from_text("Debit/Credit") is None


class TestProviderColumnStrategy:
    """Tests for strategy 1."""

    def test_gpay_signed_amounts(self) -> None:
        """Test a GPay export with signed amounts and a transaction ID."""
        data = make_table(
            ["Date", "Description", "Amount", "Transaction ID"],
            ["15/01/2024", "Zomato Order", "-450", "TXN001"],
            ["16/01/2024", "Received from Anita", "1,200", "TXN002"],
        )
        output = ProviderColumnStrategy().extract(data, SourceTag.GPAY)

        assert output.decisive is True
        assert len(output.candidates) == 2
        first, second = output.candidates
        assert first.date == date(2024, 1, 15)
        assert first.amount == Decimal("450")
        assert first.transaction_type == TransactionType.DEBIT
        assert first.reference_id == "TXN001"
        assert first.confidence == Confidence.HIGH
        assert second.amount == Decimal("1200")
        assert second.transaction_type == TransactionType.CREDIT

    def test_type_column_overrides_sign(self) -> None:
        """Test that a stated direction wins over an unsigned amount."""
        data = make_table(
            ["Date", "Description", "Amount", "Type"],
            ["15/01/2024", "Swiggy", "300", "Debit"],
        )
        output = ProviderColumnStrategy().extract(data, SourceTag.GPAY)
        assert output.candidates[0].transaction_type == TransactionType.DEBIT

    def test_phonepe_failed_status_dropped(self) -> None:
        """Test that PhonePe rows without a success status are skipped."""
        data = make_table(
            ["Date", "Transaction Details", "Type", "Amount", "Status"],
            ["24/06/2025", "Paid to Ramesh", "Debit", "500", "Success"],
            ["24/06/2025", "Paid to Suresh", "Debit", "700", "Failed"],
            ["25/06/2025", "Paid to Mahesh", "Debit", "900", "Pending"],
        )
        output = ProviderColumnStrategy().extract(data, SourceTag.PHONEPE)

        assert [c.description for c in output.candidates] == ["Paid to Ramesh"]
        assert output.skipped[SkipReason.FAILED_STATUS] == 2

    def test_all_failed_is_still_decisive(self) -> None:
        """Test that a recognized layout with no surviving rows stays decisive."""
        data = make_table(
            ["Date", "Transaction Details", "Amount", "Status"],
            ["24/06/2025", "Paid to Suresh", "700", "FAILED"],
        )
        output = ProviderColumnStrategy().extract(data, SourceTag.PHONEPE)
        assert output.candidates == []
        assert output.decisive is True

    def test_phonepe_without_status_column(self) -> None:
        """Test that the status filter only applies when the column exists."""
        data = make_table(
            ["Date", "Transaction Details", "Debit", "Credit"],
            ["24/06/2025", "Paid to Ramesh", "500", ""],
            ["25/06/2025", "Received from Anita", "", "250"],
        )
        output = ProviderColumnStrategy().extract(data, SourceTag.PHONEPE)

        assert len(output.candidates) == 2
        assert output.candidates[0].transaction_type == TransactionType.DEBIT
        assert output.candidates[1].transaction_type == TransactionType.CREDIT
        assert output.candidates[1].amount == Decimal("250")

    def test_bank_debit_credit_columns(self) -> None:
        """Test a bank statement with split withdrawal and deposit columns."""
        data = make_table(
            ["Txn Date", "Narration", "Withdrawal Amt.", "Deposit Amt.", "Chq./Ref.No."],
            ["01/02/2024", "ATM CASH WDL", "2,000.00", "", "000123"],
            ["02/02/2024", "NEFT SALARY", "", "50,000.00", "000124"],
            ["03/02/2024", "OPENING BALANCE", "", "", ""],
        )
        output = ProviderColumnStrategy().extract(data, SourceTag.BANK)

        assert len(output.candidates) == 2
        atm, salary = output.candidates
        assert atm.amount == Decimal("2000.00")
        assert atm.transaction_type == TransactionType.DEBIT
        assert atm.reference_id == "000123"
        assert salary.amount == Decimal("50000.00")
        assert salary.transaction_type == TransactionType.CREDIT
        assert output.skipped[SkipReason.ZERO_AMOUNT] == 1

    def test_bank_suffixed_headers(self) -> None:
        """Test headers that extend an alias with a unit or zone suffix."""
        data = make_table(
            [
                "Transaction Date (IST)", "Narration", "Withdrawal Amount (INR)",
                "Deposit Amount (INR)", "Balance (INR)",
            ],
            ["01/02/2024", "POS SWIGGY BLR", "250.00", "", "48,750.00"],
            ["02/02/2024", "NEFT SALARY FEB", "", "50,000.00", "98,750.00"],
        )
        output = ProviderColumnStrategy().extract(data, SourceTag.BANK)

        assert output.decisive is True
        swiggy, salary = output.candidates
        assert swiggy.amount == Decimal("250.00")
        assert swiggy.transaction_type == TransactionType.DEBIT
        assert salary.amount == Decimal("50000.00")
        assert salary.transaction_type == TransactionType.CREDIT

    def test_balance_never_an_amount(self) -> None:
        """Test that a running balance column does not stand in for the amount."""
        data = make_table(
            ["Date", "Description", "Balance Amount"],
            ["15/01/2024", "Tea", "480"],
        )
        output = ProviderColumnStrategy().extract(data, SourceTag.BANK)
        assert output.decisive is False

    def test_headers_match_case_insensitively(self) -> None:
        """Test trimmed, case-insensitive header lookup."""
        data = make_table(
            [" date ", "DESCRIPTION", "amount"],
            ["15/01/2024", "Tea", "-20"],
        )
        output = ProviderColumnStrategy().extract(data, SourceTag.GPAY)
        assert len(output.candidates) == 1

    def test_invalid_and_missing_dates(self) -> None:
        """Test date skip reasons."""
        data = make_table(
            ["Date", "Description", "Amount"],
            ["", "Tea", "-20"],
            ["31/02/2024", "Coffee", "-30"],
            ["01/03/2024", "", "-40"],
        )
        output = ProviderColumnStrategy().extract(data, SourceTag.GPAY)

        assert output.candidates == []
        assert output.skipped[SkipReason.MISSING_DATE] == 1
        assert output.skipped[SkipReason.INVALID_DATE] == 1
        assert output.skipped[SkipReason.MISSING_DESCRIPTION] == 1

    def test_unknown_source_not_applicable(self) -> None:
        """Test that sources without a mapping produce nothing."""
        data = make_table(["Date", "Description", "Amount"], ["15/01/2024", "Tea", "-20"])
        output = ProviderColumnStrategy().extract(data, SourceTag.UNKNOWN)
        assert output.candidates == []
        assert output.decisive is False

    def test_missing_columns_not_decisive(self) -> None:
        """Test that unresolved columns leave the strategy indecisive."""
        data = make_table(["When", "What"], ["15/01/2024", "Tea"])
        output = ProviderColumnStrategy().extract(data, SourceTag.GPAY)
        assert output.decisive is False

    def test_text_input_ignored(self) -> None:
        """Test that PDF text never reaches a tabular strategy."""
        document = TextDocument.from_text("Date Description Amount\n15/01/2024 Tea 20")
        output = ProviderColumnStrategy().extract(document, SourceTag.GPAY)
        assert output.candidates == []


class TestGenericColumnStrategy:
    """Tests for strategy 2."""

    def test_unrecognized_layout(self) -> None:
        """Test generic variants on an unknown export."""
        data = make_table(
            ["Posting Date", "Particulars", "Amt"],
            ["15/01/2024", "Electricity bill", "1,500"],
            ["16/01/2024", "Refund from Amazon", "499"],
        )
        output = GenericColumnStrategy().extract(data, SourceTag.UNKNOWN)

        assert output.decisive is True
        assert len(output.candidates) == 2
        assert output.candidates[0].transaction_type == TransactionType.DEBIT
        assert output.candidates[1].transaction_type == TransactionType.CREDIT

    def test_first_non_zero_amount_column(self) -> None:
        """Test that debit and credit columns are tried in order."""
        data = make_table(
            ["Date", "Remarks", "Debit", "Credit"],
            ["15/01/2024", "Rent", "15000", ""],
            ["16/01/2024", "Interest", "", "120"],
        )
        output = GenericColumnStrategy().extract(data, SourceTag.UNKNOWN)

        rent, interest = output.candidates
        assert rent.transaction_type == TransactionType.DEBIT
        assert rent.amount == Decimal("15000")
        assert interest.transaction_type == TransactionType.CREDIT

    def test_suffixed_headers_and_direction(self) -> None:
        """Test contained aliases, with the column name deciding direction."""
        data = make_table(
            ["Value Date", "Transaction Remarks", "Debit Amount (INR)", "Credit Amount (INR)", "Balance (INR)"],
            ["15/01/2024", "Rent", "15000", "", "35000"],
            ["16/01/2024", "Interest", "", "120", "35120"],
        )
        output = GenericColumnStrategy().extract(data, SourceTag.UNKNOWN)

        rent, interest = output.candidates
        assert rent.amount == Decimal("15000")
        assert rent.transaction_type == TransactionType.DEBIT
        assert interest.amount == Decimal("120")
        assert interest.transaction_type == TransactionType.CREDIT

    def test_negative_amount_is_debit(self) -> None:
        """Test sign on a plain amount column."""
        data = make_table(["date", "note", "amount"], ["15/01/2024", "received back", "-50"])
        output = GenericColumnStrategy().extract(data, SourceTag.UNKNOWN)
        assert output.candidates[0].transaction_type == TransactionType.DEBIT

    def test_zero_amount_rows_skipped(self) -> None:
        """Test that rows with no amount are dropped."""
        data = make_table(["Date", "Description", "Amount"], ["15/01/2024", "Balance", "0"])
        output = GenericColumnStrategy().extract(data, SourceTag.UNKNOWN)
        assert output.candidates == []
        assert output.skipped[SkipReason.ZERO_AMOUNT] == 1

    def test_no_usable_columns(self) -> None:
        """Test that missing fields make the strategy inapplicable."""
        data = make_table(["Name", "Phone"], ["Anita", "98765"])
        output = GenericColumnStrategy().extract(data, SourceTag.UNKNOWN)
        assert output.candidates == []
        assert output.decisive is False
