"""Tests for rule-tier and AI-fallback categorization."""

import threading
from datetime import date
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from finpal_extractor.models.category import Category, Taxonomy
from finpal_extractor.models.transaction import (
    CategoryMethod,
    Confidence,
    SourceTag,
    Transaction,
    TransactionType,
)
from finpal_extractor.processing.ai.models import AIClassification
from finpal_extractor.processing.categorizer import Categorizer


def make_transaction(
    description: str,
    merchant: str = "Unknown",
    amount: str = "100.00",
    txn_type: TransactionType = TransactionType.DEBIT,
) -> Transaction:
    """Helper to create test transactions."""
    return Transaction(
        date=date(2024, 1, 15),
        description=description,
        amount=Decimal(amount),
        transaction_type=txn_type,
        source=SourceTag.GPAY,
        merchant=merchant,
    )


def make_classifier(result: object = None) -> MagicMock:
    """Helper to create a stub AI classifier."""
    classifier = MagicMock()
    classifier.classify.return_value = result
    return classifier


@pytest.fixture(scope="module")
def taxonomy() -> Taxonomy:
    return Taxonomy.default()


class TestRuleTiers:
    """Tests for the merchant, keyword and special-pattern tiers."""

    def test_merchant_rule_high(self, taxonomy: Taxonomy) -> None:
        """Test that a known merchant is High/Rule."""
        txn = make_transaction("Zomato Order", "Zomato")
        result = Categorizer(taxonomy).categorize(txn)

        assert result.category == "Food & Dining"
        assert result.confidence == Confidence.HIGH
        assert result.method == CategoryMethod.RULE
        assert txn.category == "Food & Dining"
        assert txn.category_icon == "🍽️"

    def test_keyword_rule_medium(self, taxonomy: Taxonomy) -> None:
        """Test that a generic keyword is Medium/Rule."""
        txn = make_transaction("Dinner at local dhaba")
        result = Categorizer(taxonomy).categorize(txn)

        assert result.category == "Food & Dining"
        assert result.confidence == Confidence.MEDIUM
        assert result.method == CategoryMethod.RULE

    def test_special_pattern_high(self, taxonomy: Taxonomy) -> None:
        """Test cross-cutting patterns such as salary and ATM."""
        salary = Categorizer(taxonomy).categorize(make_transaction("NEFT SALARY JAN 2024"))
        atm = Categorizer(taxonomy).categorize(make_transaction("ATM CASH WDL 12345"))

        assert salary.category == "Income"
        assert salary.confidence == Confidence.HIGH
        assert atm.category == "ATM Withdrawal"

    def test_merchant_beats_keyword(self, taxonomy: Taxonomy) -> None:
        """Test tier order when both a merchant and a keyword match."""
        result = Categorizer(taxonomy).categorize(make_transaction("Swiggy food delivery"))
        assert result.confidence == Confidence.HIGH

    def test_longest_merchant_key_wins(self, taxonomy: Taxonomy) -> None:
        """Test that a more specific merchant key beats a shorter one."""
        result = Categorizer(taxonomy).categorize(make_transaction("Swiggy Instamart order"))
        assert result.category == "Groceries"

    def test_short_keys_need_whole_words(self, taxonomy: Taxonomy) -> None:
        """Test that short keys do not match inside other words."""
        result = Categorizer(taxonomy).match_rules(make_transaction("Coca cola vending"))
        assert result is None or result.category != "Transport"

    def test_no_match_default(self, taxonomy: Taxonomy) -> None:
        """Test that unmatched transactions get Others/Low/Default without AI."""
        txn = make_transaction("Paid to RAHIM KUTUBUDDIN PINJARI", "RAHIM KUTUBUDDIN PINJARI")
        result = Categorizer(taxonomy).categorize(txn)

        assert result.category == "Others"
        assert result.confidence == Confidence.LOW
        assert result.method == CategoryMethod.DEFAULT

    def test_custom_taxonomy(self) -> None:
        """Test a taxonomy built from custom categories."""
        custom = Taxonomy.build(
            categories=[Category(name="Pets", merchants=("supertails",))],
            aliases={},
            special_patterns=[],
            default_category="Misc",
        )
        categorizer = Categorizer(custom)

        assert categorizer.categorize(make_transaction("SUPERTAILS order")).category == "Pets"
        assert categorizer.categorize(make_transaction("Something else")).category == "Misc"


class TestAIFallback:
    """Tests for the AI tier."""

    def test_known_category_medium(self, taxonomy: Taxonomy) -> None:
        """Test that a taxonomy answer is Medium/AI."""
        classifier = make_classifier(AIClassification("Groceries", True, "Groceries"))
        txn = make_transaction("Paid to SHARMA JI")

        result = Categorizer(taxonomy, classifier).categorize(txn)

        assert result.category == "Groceries"
        assert result.confidence == Confidence.MEDIUM
        assert result.method == CategoryMethod.AI
        assert txn.category_icon == "🛒"

    def test_ad_hoc_category_low(self, taxonomy: Taxonomy) -> None:
        """Test that a name outside the taxonomy is kept at Low confidence."""
        classifier = make_classifier(AIClassification("Pet Care", False, "Pet Care"))
        result = Categorizer(taxonomy, classifier).categorize(make_transaction("Paid to PAWS CLINIQUE"))

        assert result.category == "Pet Care"
        assert result.confidence == Confidence.LOW
        assert result.method == CategoryMethod.AI

    def test_ai_failure_falls_back(self, taxonomy: Taxonomy) -> None:
        """Test that a None classification becomes the default."""
        classifier = make_classifier(None)
        result = Categorizer(taxonomy, classifier).categorize(make_transaction("Paid to XYZ"))

        assert result.method == CategoryMethod.DEFAULT
        assert result.category == "Others"

    def test_rules_skip_ai(self, taxonomy: Taxonomy) -> None:
        """Test that rule matches never reach the AI."""
        classifier = make_classifier(AIClassification("Groceries", True))
        categorizer = Categorizer(taxonomy, classifier)

        categorizer.categorize_all([make_transaction("Zomato Order", "Zomato")])

        classifier.classify.assert_not_called()

    def test_categorize_all_mixed(self, taxonomy: Taxonomy) -> None:
        """Test rules inline and AI for the remainder."""
        classifier = make_classifier(AIClassification("Shopping", True, "Shopping"))
        txns = [
            make_transaction("Zomato Order", "Zomato"),
            make_transaction("Paid to LOCAL VENDOR", "LOCAL VENDOR"),
        ]

        Categorizer(taxonomy, classifier).categorize_all(txns)

        assert txns[0].category_method == CategoryMethod.RULE
        assert txns[1].category == "Shopping"
        assert txns[1].category_method == CategoryMethod.AI
        classifier.classify.assert_called_once_with(
            description="Paid to LOCAL VENDOR",
            merchant="LOCAL VENDOR",
            amount=Decimal("100.00"),
            transaction_type="debit",
        )

    def test_timeout_falls_back(self, taxonomy: Taxonomy) -> None:
        """Test that a slow classification is abandoned for the default."""
        release = threading.Event()

        def slow_classify(**kwargs: object) -> AIClassification:
            release.wait(5)
            return AIClassification("Shopping", True)

        classifier = MagicMock()
        classifier.classify.side_effect = slow_classify
        txn = make_transaction("Paid to SLOW MERCHANT")

        try:
            Categorizer(taxonomy, classifier, timeout_seconds=0.05).categorize_all([txn])
        finally:
            release.set()

        assert txn.category == "Others"
        assert txn.category_method == CategoryMethod.DEFAULT
        classifier.client.usage_stats.record_timeout.assert_called_once()

    def test_idempotent(self, taxonomy: Taxonomy) -> None:
        """Test that categorizing twice yields the same assignment."""
        classifier = make_classifier(AIClassification("Shopping", True, "Shopping"))
        categorizer = Categorizer(taxonomy, classifier)
        txns = [
            make_transaction("Zomato Order", "Zomato"),
            make_transaction("Paid to LOCAL VENDOR"),
            make_transaction("ATM CASH WDL"),
        ]

        categorizer.categorize_all(txns)
        first = [(t.category, t.category_confidence, t.category_method) for t in txns]
        categorizer.categorize_all(txns)
        second = [(t.category, t.category_confidence, t.category_method) for t in txns]

        assert first == second
