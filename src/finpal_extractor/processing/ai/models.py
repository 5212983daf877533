"""AI-specific data models for categorization."""

import threading
from dataclasses import dataclass, field


@dataclass(frozen=True)
class AIClassification:
    """Category suggested by the AI for one transaction.

    Attributes:
        category: Canonical taxonomy name, or the ad-hoc name the AI gave.
        is_known: Whether the name resolved to a taxonomy category.
        raw_response: The response text as returned.
    """

    category: str
    is_known: bool
    raw_response: str = ""


@dataclass
class AIUsageStats:
    """Cumulative AI usage statistics for a session.

    Updated from worker threads, so every mutation takes the lock.

    Attributes:
        total_requests: Successful API requests.
        failed_requests: Requests that failed after all retries.
        timeouts: Requests or classifications that timed out.
        total_input_tokens: Total input tokens used.
        total_output_tokens: Total output tokens used.
        categorizations_performed: Responses turned into a category.
        skipped_budget: Classifications skipped because the call budget ran out.
    """

    total_requests: int = 0
    failed_requests: int = 0
    timeouts: int = 0
    total_input_tokens: int = 0
    total_output_tokens: int = 0
    categorizations_performed: int = 0
    skipped_budget: int = 0
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def add_request(self, input_tokens: int, output_tokens: int) -> None:
        """Record a completed request."""
        with self._lock:
            self.total_requests += 1
            self.total_input_tokens += input_tokens
            self.total_output_tokens += output_tokens

    def record_failure(self) -> None:
        with self._lock:
            self.failed_requests += 1

    def record_timeout(self) -> None:
        with self._lock:
            self.timeouts += 1

    def record_categorization(self) -> None:
        with self._lock:
            self.categorizations_performed += 1

    def record_budget_skip(self) -> None:
        with self._lock:
            self.skipped_budget += 1

    def to_dict(self) -> dict[str, int]:
        return {
            "requests": self.total_requests,
            "failures": self.failed_requests,
            "timeouts": self.timeouts,
            "inputTokens": self.total_input_tokens,
            "outputTokens": self.total_output_tokens,
            "categorizations": self.categorizations_performed,
            "skippedBudget": self.skipped_budget,
        }
