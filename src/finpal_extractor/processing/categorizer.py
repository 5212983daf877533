"""Transaction categorizer: rule tiers with an AI fallback."""

from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Optional

from finpal_extractor.models.category import CategoryResult, KeyRule, Taxonomy
from finpal_extractor.models.transaction import CategoryMethod, Confidence, Transaction
from finpal_extractor.processing.ai.classifier import AIClassifier
from finpal_extractor.processing.ai.models import AIClassification
from finpal_extractor.utils.logging_config import get_logger

logger = get_logger(__name__)


class Categorizer:
    """Categorizes transactions against a shared, read-only taxonomy.

    The categorizer applies (in order of priority, first match wins):
    1. Merchant rules (High confidence)
    2. Keyword rules (Medium confidence)
    3. Special-pattern rules for income, transfers, ATM, charges, EMI (High)
    4. AI classification (Medium, or Low for names outside the taxonomy)
    5. Default category (Low)

    Tiers 1-3 are pure string scans. Tier 4 is optional and bounded by
    ``timeout_seconds`` per transaction; any failure falls through to tier 5.
    """

    def __init__(
        self,
        taxonomy: Taxonomy,
        classifier: Optional[AIClassifier] = None,
        timeout_seconds: float = 10,
        max_concurrency: int = 4,
    ):
        """Initialize categorizer.

        Args:
            taxonomy: Category taxonomy and rule tables.
            classifier: AI fallback, or None to disable tier 4.
            timeout_seconds: Logical timeout for one AI classification.
            max_concurrency: Parallel AI classifications.
        """
        self.taxonomy = taxonomy
        self.classifier = classifier
        self.timeout_seconds = timeout_seconds
        self.max_concurrency = max_concurrency

    def categorize(self, txn: Transaction) -> CategoryResult:
        """Categorize a single transaction and apply the result.

        Args:
            txn: Transaction to categorize (modified in place).

        Returns:
            The category result that was applied.
        """
        result = self.match_rules(txn)
        if result is None:
            result = self._from_ai(txn, self._classify(txn))
        self.apply(txn, result)
        return result

    def categorize_all(self, transactions: list[Transaction]) -> list[Transaction]:
        """Categorize a list of transactions.

        Rule tiers run inline. Transactions no rule matched are sent to the
        AI classifier on a bounded thread pool; each result is awaited for
        at most ``timeout_seconds`` before the transaction falls back to
        the default category. Abandoned calls are not waited for.

        Args:
            transactions: Transactions to categorize.

        Returns:
            Same list with categories assigned (modified in place).
        """
        pending: list[Transaction] = []
        for txn in transactions:
            result = self.match_rules(txn)
            if result is None:
                pending.append(txn)
            else:
                self.apply(txn, result)

        if pending:
            if self.classifier is None:
                for txn in pending:
                    self.apply(txn, self.default_result())
            else:
                self._categorize_with_ai(pending)

        counts: dict[str, int] = {}
        for txn in transactions:
            method = txn.category_method.value if txn.category_method else "None"
            counts[method] = counts.get(method, 0) + 1
        logger.info(f"Categorized {len(transactions)} transactions: {counts}")

        return transactions

    def _categorize_with_ai(self, pending: list[Transaction]) -> None:
        executor = ThreadPoolExecutor(
            max_workers=self.max_concurrency, thread_name_prefix="ai-categorize"
        )
        try:
            futures: list[Future] = [executor.submit(self._classify, txn) for txn in pending]
            for txn, future in zip(pending, futures):
                try:
                    classification = future.result(timeout=self.timeout_seconds)
                except FutureTimeoutError:
                    future.cancel()
                    logger.warning(f"AI categorization timed out for {txn.description[:30]!r}")
                    if self.classifier is not None:
                        self.classifier.client.usage_stats.record_timeout()
                    classification = None
                self.apply(txn, self._from_ai(txn, classification))
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

    def _classify(self, txn: Transaction) -> Optional[AIClassification]:
        if self.classifier is None:
            return None
        return self.classifier.classify(
            description=txn.description,
            merchant=txn.merchant,
            amount=txn.amount,
            transaction_type=txn.transaction_type.value,
        )

    def match_rules(self, txn: Transaction) -> Optional[CategoryResult]:
        """Run the rule tiers (merchant, keyword, special pattern).

        Args:
            txn: Transaction to match.

        Returns:
            CategoryResult, or None if no rule matched.
        """
        text = f"{txn.description} {txn.merchant}".lower()

        rule = self._first_match(self.taxonomy.merchant_rules, text)
        if rule is not None:
            return self._rule_result(rule.category, Confidence.HIGH, rule.key)

        rule = self._first_match(self.taxonomy.keyword_rules, text)
        if rule is not None:
            return self._rule_result(rule.category, Confidence.MEDIUM, rule.key)

        for special in self.taxonomy.special_rules:
            if special.pattern.search(text):
                return self._rule_result(special.category, Confidence.HIGH, special.pattern.pattern)

        return None

    @staticmethod
    def _first_match(rules: tuple[KeyRule, ...], text: str) -> Optional[KeyRule]:
        for rule in rules:
            if rule.matches(text):
                return rule
        return None

    def _rule_result(self, name: str, confidence: Confidence, matched: str) -> CategoryResult:
        category = self.taxonomy.get(name)
        return CategoryResult(
            category=category.name,
            confidence=confidence,
            method=CategoryMethod.RULE,
            icon=category.icon,
            color=category.color,
            matched=matched,
        )

    def _from_ai(self, txn: Transaction, classification: Optional[AIClassification]) -> CategoryResult:
        if classification is None:
            return self.default_result()

        if classification.is_known:
            category = self.taxonomy.get(classification.category)
            confidence = Confidence.MEDIUM
            name, icon, color = category.name, category.icon, category.color
        else:
            fallback = self.taxonomy.get(self.taxonomy.default_category)
            confidence = Confidence.LOW
            name, icon, color = classification.category, fallback.icon, fallback.color

        logger.debug(f"AI categorized {txn.description[:30]!r} as {name}")
        return CategoryResult(
            category=name,
            confidence=confidence,
            method=CategoryMethod.AI,
            icon=icon,
            color=color,
            matched=classification.raw_response,
        )

    def default_result(self) -> CategoryResult:
        """Terminal tier: the default category with Low confidence."""
        category = self.taxonomy.get(self.taxonomy.default_category)
        return CategoryResult(
            category=category.name,
            confidence=Confidence.LOW,
            method=CategoryMethod.DEFAULT,
            icon=category.icon,
            color=category.color,
        )

    @staticmethod
    def apply(txn: Transaction, result: CategoryResult) -> None:
        txn.assign_category(
            category=result.category,
            confidence=result.confidence,
            method=result.method,
            icon=result.icon,
            color=result.color,
        )
