"""AI-powered transaction categorization fallback.

Example usage:
    from finpal_extractor.processing.ai import AIClassifier

    classifier = AIClassifier.create(config.ai, config.taxonomy)
    if classifier.is_available:
        result = classifier.classify("UPI/123/SOMESHOP", "Someshop", Decimal("250"), "debit")
"""

from finpal_extractor.processing.ai.classifier import AIClassifier
from finpal_extractor.processing.ai.client import (
    AIClient,
    AIClientConfig,
    AIClientError,
    AITimeoutError,
    APIKeyNotFoundError,
    RateLimitError,
)
from finpal_extractor.processing.ai.models import AIClassification, AIUsageStats

__all__ = [
    "AIClassifier",
    # Client
    "AIClient",
    "AIClientConfig",
    # Errors
    "AIClientError",
    "AITimeoutError",
    "APIKeyNotFoundError",
    "RateLimitError",
    # Result models
    "AIClassification",
    "AIUsageStats",
]
