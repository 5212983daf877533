"""Anthropic API client wrapper with rate limiting and retries."""

import os
import threading
import time
from dataclasses import dataclass, field
from typing import Any

import anthropic
from rich.console import Console

from finpal_extractor.processing.ai.models import AIUsageStats
from finpal_extractor.utils.logging_config import get_logger

logger = get_logger(__name__)
_console = Console(stderr=True)


class AIClientError(Exception):
    """Base exception for AI client errors."""

    pass


class APIKeyNotFoundError(AIClientError):
    """Raised when API key is not found."""

    pass


class RateLimitError(AIClientError):
    """Raised when rate limiting persists after all retries."""

    pass


class AITimeoutError(AIClientError):
    """Raised when a request exceeds its timeout."""

    pass


@dataclass
class AIClientConfig:
    """Configuration for the AI client.

    Attributes:
        api_key_env: Environment variable name for API key.
        model: Model to use for requests.
        max_tokens: Maximum tokens for response.
        requests_per_minute: Rate limit.
        retry_attempts: Retries after the first attempt on rate limits,
            overload and connection errors.
        retry_delay: Initial delay between retries (exponential backoff).
        timeout_seconds: Transport timeout per request.
    """

    api_key_env: str = "ANTHROPIC_API_KEY"
    model: str = "claude-3-5-haiku-latest"
    max_tokens: int = 50
    requests_per_minute: int = 50
    retry_attempts: int = 2
    retry_delay: float = 1.0
    timeout_seconds: float = 10.0


@dataclass
class AIClient:
    """Wrapper for the Anthropic API, safe to share between worker threads.

    This client provides:
    - Lazy initialization (only connects when first used)
    - Rate limiting to avoid API throttling
    - Automatic retry with exponential backoff
    - Token usage tracking
    """

    config: AIClientConfig = field(default_factory=AIClientConfig)
    usage_stats: AIUsageStats = field(default_factory=AIUsageStats)
    _client: Any = field(default=None, init=False, repr=False)
    _request_count: int = field(default=0, init=False)
    _request_window_start: float = field(default=0.0, init=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    @property
    def is_available(self) -> bool:
        """Check if AI client can be initialized (API key exists)."""
        return bool(os.environ.get(self.config.api_key_env))

    def _ensure_initialized(self) -> None:
        """Lazily initialize the Anthropic client."""
        with self._lock:
            if self._client is not None:
                return

            api_key = os.environ.get(self.config.api_key_env)
            if not api_key:
                raise APIKeyNotFoundError(
                    f"API key not found in environment variable: {self.config.api_key_env}"
                )

            # Retries are handled here so they show up in usage stats
            self._client = anthropic.Anthropic(
                api_key=api_key,
                max_retries=0,
                timeout=self.config.timeout_seconds,
            )
            logger.info(f"AI client initialized with model: {self.config.model}")

    def _wait_for_rate_limit(self) -> None:
        """Wait if necessary to respect rate limits."""
        with self._lock:
            current_time = time.time()

            # Reset window if it's been more than a minute
            if current_time - self._request_window_start > 60:
                self._request_count = 0
                self._request_window_start = current_time

            if self._request_count >= self.config.requests_per_minute:
                wait_time = 60 - (current_time - self._request_window_start)
                if wait_time > 0:
                    _console.print(f"[yellow]Rate limit reached, waiting {wait_time:.0f}s...[/yellow]")
                    logger.info(f"Rate limit reached, waiting {wait_time:.1f}s")
                    time.sleep(wait_time)
                    self._request_count = 0
                    self._request_window_start = time.time()

            self._request_count += 1

    def send_message(self, system_prompt: str, user_prompt: str) -> tuple[str, int, int]:
        """Send a message to the AI and get the response.

        Args:
            system_prompt: The system prompt.
            user_prompt: The user prompt.

        Returns:
            Tuple of (response_text, input_tokens, output_tokens).

        Raises:
            APIKeyNotFoundError: If no API key is configured.
            AITimeoutError: If the request times out.
            RateLimitError: If still rate limited after all retries.
            AIClientError: If the request fails for any other reason.
        """
        self._ensure_initialized()

        delay = self.config.retry_delay
        attempts = self.config.retry_attempts + 1

        for attempt in range(attempts):
            self._wait_for_rate_limit()
            try:
                response = self._client.messages.create(
                    model=self.config.model,
                    max_tokens=self.config.max_tokens,
                    system=system_prompt,
                    messages=[{"role": "user", "content": user_prompt}],
                )
            except anthropic.APITimeoutError as e:
                self.usage_stats.record_timeout()
                raise AITimeoutError(f"Request timed out after {self.config.timeout_seconds}s") from e
            except anthropic.RateLimitError as e:
                if attempt < attempts - 1:
                    logger.warning(f"Rate limited, waiting {delay}s before retry")
                    time.sleep(delay)
                    delay *= 2
                    continue
                self.usage_stats.record_failure()
                raise RateLimitError(f"Rate limited after {attempt + 1} attempts") from e
            except (anthropic.APIConnectionError, anthropic.InternalServerError) as e:
                if attempt < attempts - 1:
                    logger.warning(f"Request failed: {e}, retrying in {delay}s")
                    time.sleep(delay)
                    delay *= 2
                    continue
                self.usage_stats.record_failure()
                raise AIClientError(f"Request failed after {attempt + 1} attempts: {e}") from e
            except anthropic.APIError as e:
                self.usage_stats.record_failure()
                raise AIClientError(f"Request failed: {e}") from e

            if response.content and len(response.content) > 0:
                content = getattr(response.content[0], "text", "") or ""
            else:
                content = ""
            input_tokens = response.usage.input_tokens
            output_tokens = response.usage.output_tokens
            self.usage_stats.add_request(input_tokens, output_tokens)

            logger.debug(f"Request completed: {input_tokens} in, {output_tokens} out")
            return content, input_tokens, output_tokens

        raise AIClientError("Request failed: no attempts made")

    def complete(self, prompt: str, system_prompt: str = "") -> str:
        """Send a single prompt and return the response text.

        Args:
            prompt: The user prompt.
            system_prompt: Optional system prompt.

        Returns:
            Raw response text.
        """
        content, _, _ = self.send_message(system_prompt, prompt)
        return content

    def get_usage_summary(self) -> str:
        """Get a summary of API usage.

        Returns:
            Human-readable usage summary.
        """
        stats = self.usage_stats
        return (
            f"AI Usage Summary:\n"
            f"  Total requests: {stats.total_requests}\n"
            f"  Failed requests: {stats.failed_requests}\n"
            f"  Timeouts: {stats.timeouts}\n"
            f"  Input tokens: {stats.total_input_tokens:,}\n"
            f"  Output tokens: {stats.total_output_tokens:,}\n"
            f"  Categorizations: {stats.categorizations_performed}\n"
            f"  Skipped (call budget): {stats.skipped_budget}"
        )
