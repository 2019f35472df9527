"""
LLM Client Protocol and Base Implementation

This module defines the interface for text-generation backends and provides
a base class with common functionality (rate limiting, metrics, error
classification).

Protocol Pattern:
    - LLMClientProtocol defines the interface
    - BaseLLMClient provides common implementation
    - Concrete clients (GeminiClient, OpenAIClient) extend base

No Retries Here:
    Clients make exactly one call per request. Retrying is owned by the
    RetryController so the prompt can differ between attempts, and upstream
    failures are surfaced to the caller untouched.

Author: Shubham Singh
Date: October 2026
"""

import json
import threading
import time
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Protocol, runtime_checkable

from loguru import logger

from patient_document_generation.core.exceptions import (
    MalformedResponseError,
    PaymentRequiredError,
    RateLimitError,
    UpstreamError,
    UpstreamUnavailableError,
)


# =============================================================================
# STAGE 1: LLM CLIENT PROTOCOL
# =============================================================================


@runtime_checkable
class LLMClientProtocol(Protocol):
    """
    Protocol defining the interface for text-generation backends.

    Required Methods:
        generate_structured(...) → JSON object constrained by a schema
        generate_text(...)       → Free text

    Both methods raise only ``UpstreamError`` subclasses.
    """

    def generate_structured(
        self,
        system_prompt: str,
        user_prompt: str,
        schema: Dict[str, Any],
        temperature: float,
        max_output_tokens: int,
    ) -> Dict[str, Any]:
        ...

    def generate_text(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float,
        max_output_tokens: int,
    ) -> str:
        ...

    @property
    def model_name(self) -> str:
        ...

    @property
    def provider_name(self) -> str:
        ...


# =============================================================================
# STAGE 2: BASE LLM CLIENT (ABSTRACT)
# =============================================================================


class BaseLLMClient(ABC):
    """
    Abstract base class for LLM clients with common functionality.

    What it does:
        Provides rate limiting, error translation and call metrics so
        concrete implementations only implement the provider API calls.

    What subclasses must implement:
        - _call_structured(...): provider call returning raw JSON text or a dict
        - _call_text(...): provider call returning text
        - provider_name: property returning provider name

    What base class provides:
        - Rate limiting between calls
        - Translation of SDK exceptions into UpstreamError subclasses
        - JSON decoding of structured payloads
        - Call metrics
    """

    def __init__(
        self,
        api_key: str,
        model_name: str,
        request_timeout: float = 90.0,
        rate_limit_delay: float = 0.5,
    ):
        """
        Initialize base LLM client.

        Args:
            api_key: API key for the provider
            model_name: Name of model to use
            request_timeout: Seconds before a call is abandoned
            rate_limit_delay: Seconds to wait between API calls
        """
        # =====================================================================
        # STAGE 2.1: STORE CONFIGURATION
        # =====================================================================
        self._api_key = api_key
        self._model_name = model_name
        self._request_timeout = request_timeout
        self._rate_limit_delay = rate_limit_delay

        # =====================================================================
        # STAGE 2.2: TRACKING STATE
        # =====================================================================
        self._last_call_time: Optional[float] = None
        self._total_calls = 0
        self._failed_calls = 0
        self._lock = threading.Lock()

    # =========================================================================
    # STAGE 3: PUBLIC API
    # =========================================================================

    def generate_structured(
        self,
        system_prompt: str,
        user_prompt: str,
        schema: Dict[str, Any],
        temperature: float,
        max_output_tokens: int,
    ) -> Dict[str, Any]:
        """
        Request a JSON object constrained by ``schema``.

        Returns:
            Decoded JSON object (not yet checked against the schema)

        Raises:
            UpstreamError: Any backend failure, already classified
            MalformedResponseError: Payload is not a JSON object
        """
        payload = self._execute(
            self._call_structured,
            system_prompt,
            user_prompt,
            schema,
            temperature,
            max_output_tokens,
        )

        if isinstance(payload, dict):
            return payload

        try:
            decoded = json.loads(payload)
        except (TypeError, ValueError) as e:
            raise MalformedResponseError(
                "Structured output is not valid JSON", provider=self.provider_name, original_error=e
            )

        if not isinstance(decoded, dict):
            raise MalformedResponseError(
                f"Structured output must be a JSON object, got {type(decoded).__name__}",
                provider=self.provider_name,
            )
        return decoded

    def generate_text(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float,
        max_output_tokens: int,
    ) -> str:
        """
        Request free text.

        Raises:
            UpstreamError: Any backend failure, already classified
        """
        return self._execute(
            self._call_text, system_prompt, user_prompt, temperature, max_output_tokens
        )

    def _execute(self, call, *args):
        """Run one provider call with rate limiting, translation and metrics."""
        self._apply_rate_limit()

        try:
            result = call(*args)
        except UpstreamError:
            self._record_call(succeeded=False)
            raise
        except Exception as e:
            self._record_call(succeeded=False)
            translated = self._translate_error(e)
            logger.error(f"{self.provider_name} call failed: {translated.message}")
            raise translated from e

        self._record_call(succeeded=True)
        return result

    def _record_call(self, succeeded: bool) -> None:
        with self._lock:
            if succeeded:
                self._total_calls += 1
            else:
                self._failed_calls += 1

    # =========================================================================
    # STAGE 4: ABSTRACT METHODS
    # =========================================================================

    @abstractmethod
    def _call_structured(
        self,
        system_prompt: str,
        user_prompt: str,
        schema: Dict[str, Any],
        temperature: float,
        max_output_tokens: int,
    ) -> Any:
        """Make the structured-output API call. Returns a dict or JSON text."""
        ...

    @abstractmethod
    def _call_text(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float,
        max_output_tokens: int,
    ) -> str:
        """Make the free-text API call."""
        ...

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the provider name (e.g., 'gemini', 'openai')."""
        ...

    # =========================================================================
    # STAGE 5: COMMON IMPLEMENTATION
    # =========================================================================

    @property
    def model_name(self) -> str:
        """Return the model name."""
        return self._model_name

    def _apply_rate_limit(self) -> None:
        """
        Apply rate limiting between API calls.

        Each caller reserves the next free slot under the lock, then sleeps
        outside it, so concurrent requests sharing a client stay spaced by
        ``rate_limit_delay``.
        """
        with self._lock:
            now = time.time()
            wait = 0.0
            if self._last_call_time is not None:
                wait = max(0.0, self._last_call_time + self._rate_limit_delay - now)
            self._last_call_time = now + wait

        if wait > 0:
            time.sleep(wait)

    def _translate_error(self, error: Exception) -> UpstreamError:
        """
        Classify an SDK exception into a domain exception.

        Status codes are preferred when the SDK exposes them; otherwise the
        message text is inspected.

        Mapping:
            401 / 402 / 403 / payment / billing / key    → PaymentRequiredError
            429 / rate / quota / resource exhausted      → RateLimitError
            everything else (timeouts, 5xx, network)     → UpstreamUnavailableError
        """
        status = _status_code(error)
        error_str = str(error).lower()

        if status in (401, 402, 403) or any(t in error_str for t in _PAYMENT_MARKERS):
            return PaymentRequiredError(provider=self.provider_name, original_error=error)

        if status == 429 or any(t in error_str for t in _RATE_LIMIT_MARKERS):
            return RateLimitError(provider=self.provider_name, original_error=error)

        if "timeout" in error_str or "timed out" in error_str or "deadline" in error_str:
            return UpstreamUnavailableError(
                f"{self.provider_name} request timed out after {self._request_timeout}s",
                provider=self.provider_name,
                original_error=error,
            )

        return UpstreamUnavailableError(
            f"{self.provider_name} API error: {error}",
            provider=self.provider_name,
            original_error=error,
        )

    # =========================================================================
    # STAGE 6: METRICS
    # =========================================================================

    @property
    def total_calls(self) -> int:
        """Total number of successful API calls."""
        return self._total_calls

    @property
    def failed_calls(self) -> int:
        """Number of failed API calls."""
        return self._failed_calls

    @property
    def success_rate(self) -> float:
        """Percentage of successful calls."""
        total = self._total_calls + self._failed_calls
        if total == 0:
            return 100.0
        return (self._total_calls / total) * 100


_PAYMENT_MARKERS = (
    "payment",
    "billing",
    "credit",
    "insufficient_quota",
    "api key",
    "api_key",
    "permission denied",
    "unauthenticated",
    "402",
)

_RATE_LIMIT_MARKERS = (
    "rate limit",
    "rate_limit",
    "too many requests",
    "quota",
    "resource exhausted",
    "resource_exhausted",
    "429",
)


def _status_code(error: Exception) -> Optional[int]:
    """Extract an HTTP status code from common SDK exception shapes."""
    for attribute in ("status_code", "code", "http_status"):
        value = getattr(error, attribute, None)
        if isinstance(value, int):
            return value
    response = getattr(error, "response", None)
    value = getattr(response, "status_code", None)
    return value if isinstance(value, int) else None
