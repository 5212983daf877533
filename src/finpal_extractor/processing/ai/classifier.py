"""AI fallback classifier used as the last categorization tier."""

import threading
from decimal import Decimal
from typing import Optional

from finpal_extractor.config import AISettings
from finpal_extractor.models.category import Taxonomy
from finpal_extractor.processing.ai.client import AIClient, AIClientConfig, AIClientError
from finpal_extractor.processing.ai.models import AIClassification
from finpal_extractor.processing.ai.prompts import (
    CLASSIFICATION_SYSTEM_PROMPT,
    build_classification_prompt,
)
from finpal_extractor.utils.logging_config import get_logger

logger = get_logger(__name__)

# Longest ad-hoc category name accepted from a response
MAX_AD_HOC_LENGTH = 40


class AIClassifier:
    """Asks the AI for a category name and maps the answer onto the taxonomy.

    Failures of any kind (missing key, network, timeout, empty answer)
    produce None so the caller can fall through to the default tier.
    At most ``max_calls`` classifications are attempted between calls
    to ``reset_budget``.

    Attributes:
        client: AI API client.
        taxonomy: Category taxonomy used for prompts and name resolution.
        max_calls: Classification budget per file.
    """

    def __init__(self, client: AIClient, taxonomy: Taxonomy, max_calls: int = 200):
        self.client = client
        self.taxonomy = taxonomy
        self.max_calls = max_calls
        self._calls = 0
        self._warned_unavailable = False
        self._warned_budget = False
        self._lock = threading.Lock()

    @classmethod
    def create(
        cls,
        settings: AISettings,
        taxonomy: Taxonomy,
        api_key_env: str = "ANTHROPIC_API_KEY",
    ) -> "AIClassifier":
        """Create a classifier from AI settings.

        Args:
            settings: AI section of the configuration.
            taxonomy: Category taxonomy.
            api_key_env: Environment variable for API key.

        Returns:
            Configured AIClassifier instance.
        """
        client_config = AIClientConfig(
            api_key_env=api_key_env,
            model=settings.model,
            max_tokens=settings.max_tokens,
            retry_attempts=settings.max_retries,
            timeout_seconds=settings.timeout_seconds,
        )
        return cls(AIClient(config=client_config), taxonomy, max_calls=settings.max_calls)

    @property
    def is_available(self) -> bool:
        """Check if AI classification is available."""
        return self.client.is_available

    def reset_budget(self) -> None:
        """Start a new per-file call budget."""
        with self._lock:
            self._calls = 0
            self._warned_budget = False

    def _take_call(self) -> bool:
        with self._lock:
            if self._calls >= self.max_calls:
                if not self._warned_budget:
                    logger.warning(
                        f"AI call budget of {self.max_calls} reached, remaining "
                        "transactions get the default category"
                    )
                    self._warned_budget = True
                return False
            self._calls += 1
            return True

    def classify(
        self,
        description: str,
        merchant: str,
        amount: Decimal,
        transaction_type: str,
    ) -> Optional[AIClassification]:
        """Classify one transaction.

        Args:
            description: Transaction description.
            merchant: Resolved merchant name.
            amount: Non-negative amount.
            transaction_type: "debit" or "credit".

        Returns:
            AIClassification, or None when the AI gave no usable answer.
        """
        if not self.is_available:
            with self._lock:
                if not self._warned_unavailable:
                    logger.warning(
                        f"{self.client.config.api_key_env} not set, skipping AI categorization"
                    )
                    self._warned_unavailable = True
            return None

        if not self._take_call():
            self.client.usage_stats.record_budget_skip()
            return None

        prompt = build_classification_prompt(
            description=description,
            merchant=merchant,
            amount=amount,
            transaction_type=transaction_type,
            category_names=self.taxonomy.category_names,
        )

        try:
            response = self.client.complete(prompt, CLASSIFICATION_SYSTEM_PROMPT)
        except AIClientError as e:
            logger.warning(f"AI categorization failed: {e}")
            return None

        result = self.parse_response(response)
        if result is not None:
            self.client.usage_stats.record_categorization()
        return result

    def parse_response(self, response: str) -> Optional[AIClassification]:
        """Map a raw response onto the taxonomy.

        Known names and aliases resolve to the canonical category. Anything
        else becomes an ad-hoc category named after the response.

        Args:
            response: Raw response text.

        Returns:
            AIClassification, or None for an empty response.
        """
        lines = [line.strip() for line in response.strip().splitlines() if line.strip()]
        if not lines:
            logger.warning("AI returned an empty response")
            return None
        name = lines[0].strip("\"'`*.: ")
        if not name:
            return None

        canonical = self.taxonomy.resolve_name(name)
        if canonical is not None:
            return AIClassification(category=canonical, is_known=True, raw_response=response)

        logger.debug(f"AI suggested unknown category {name!r}")
        return AIClassification(
            category=name[:MAX_AD_HOC_LENGTH].strip(),
            is_known=False,
            raw_response=response,
        )
