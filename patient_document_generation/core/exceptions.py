"""
Domain Exceptions for Patient Document Generation

This module defines all custom exceptions used throughout the patient
document pipeline. Well-defined exceptions enable:
    1. Clear separation of infrastructure failures from content failures
    2. Specific catch blocks for different failure modes
    3. Rich error context for troubleshooting

Exception Hierarchy:
    PatientDocumentError (base)
    ├── ConfigurationError          → Invalid configuration
    ├── InputError                  → Rejected before any generation attempt
    │   ├── NoteTooLongError
    │   └── InvalidProfileError
    ├── UpstreamError               → Text-generation backend failures (never retried)
    │   ├── UpstreamUnavailableError
    │   ├── RateLimitError
    │   ├── PaymentRequiredError
    │   └── MalformedResponseError
    ├── ValidationExhaustedError    → Content failed validation on every attempt
    └── GenerationCancelledError    → Caller abandoned the request between attempts

Every class carries a ``failure_kind`` so the pipeline can build a terminal
outcome without inspecting messages.

Usage:
    from patient_document_generation.core.exceptions import RateLimitError

    try:
        document = generator.invoke(prompt)
    except RateLimitError as e:
        logger.error(f"Rate limited by {e.provider}")

Author: Shubham Singh
Date: October 2026
"""

from typing import List, Optional

from patient_document_generation.core.enums import FailureKind


# =============================================================================
# STAGE 1: BASE EXCEPTION
# =============================================================================


class PatientDocumentError(Exception):
    """
    Base exception for all patient document generation errors.

    What it does:
        Provides a common base class for all domain-specific exceptions,
        enabling catch-all handling while preserving specific error types.

    Attributes:
        message: Human-readable error description
        context: Dictionary of additional context for debugging
        failure_kind: Terminal failure category reported to callers
    """

    failure_kind: FailureKind = FailureKind.UPSTREAM_UNAVAILABLE

    def __init__(self, message: str, context: Optional[dict] = None):
        """
        Initialize with message and optional context.

        Args:
            message: Human-readable error description
            context: Additional debugging context (lengths, provider, stage)
        """
        self.message = message
        self.context = context or {}
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format message with context for display."""
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} [{context_str}]"
        return self.message


# =============================================================================
# STAGE 2: CONFIGURATION ERRORS
# =============================================================================


class ConfigurationError(PatientDocumentError):
    """
    Error in pipeline configuration.

    When raised:
        - Missing API key for the selected provider
        - Unsupported provider name
        - Numeric settings out of range
    """

    failure_kind = FailureKind.CONFIGURATION


# =============================================================================
# STAGE 3: INPUT ERRORS
# =============================================================================
# Rejected before any generation attempt. Never consume a retry.


class InputError(PatientDocumentError):
    """Base class for caller input that is rejected up front."""

    failure_kind = FailureKind.INVALID_INPUT


class NoteTooLongError(InputError):
    """
    Technical note exceeds the maximum accepted length.

    The note is never truncated silently; the caller is asked to summarize.

    Attributes:
        length: Length of the submitted note in characters
        max_length: Configured maximum
    """

    failure_kind = FailureKind.INPUT_TOO_LONG

    def __init__(self, length: int, max_length: int):
        self.length = length
        self.max_length = max_length
        super().__init__(
            f"Technical note is too long ({length} characters). Maximum allowed is "
            f"{max_length} characters. Please summarize the note."
        )


class InvalidProfileError(InputError):
    """
    Patient profile data is unusable.

    Raised only when the raw profile is not a mapping at all. Individual
    missing or unrecognized fields are defaulted by the normalizer.
    """


# =============================================================================
# STAGE 4: UPSTREAM ERRORS
# =============================================================================
# Infrastructure failures at the text-generation boundary. Surfaced
# immediately; the retry controller never retries these.


class UpstreamError(PatientDocumentError):
    """
    Base exception for text-generation backend failures.

    Attributes:
        provider: The LLM provider (gemini, openai)
        original_error: The wrapped original exception
    """

    def __init__(
        self,
        message: str,
        provider: str = "unknown",
        original_error: Optional[Exception] = None,
    ):
        self.provider = provider
        self.original_error = original_error
        super().__init__(
            message,
            context={
                "provider": provider,
                "original_error": str(original_error) if original_error else None,
            },
        )


class UpstreamUnavailableError(UpstreamError):
    """
    Backend unreachable, timed out, or failed with a generic error.

    When raised:
        - Network or DNS failure
        - Request timeout (a hung call must not hang the request)
        - 5xx status or any unclassified SDK error
    """

    failure_kind = FailureKind.UPSTREAM_UNAVAILABLE


class RateLimitError(UpstreamError):
    """
    Backend rate limit exceeded.

    Attributes:
        retry_after: Seconds to wait before retrying (if known)
    """

    failure_kind = FailureKind.RATE_LIMITED

    def __init__(
        self,
        provider: str,
        retry_after: Optional[int] = None,
        original_error: Optional[Exception] = None,
    ):
        self.retry_after = retry_after
        super().__init__(
            f"Rate limit exceeded for {provider}. Please try again later.",
            provider=provider,
            original_error=original_error,
        )
        self.context["retry_after"] = retry_after


class PaymentRequiredError(UpstreamError):
    """Backend rejected the call for payment or authorization reasons."""

    failure_kind = FailureKind.PAYMENT_REQUIRED

    def __init__(self, provider: str, original_error: Optional[Exception] = None):
        super().__init__(
            f"Payment or authorization required by {provider}. "
            "Please add credits or check the API key.",
            provider=provider,
            original_error=original_error,
        )


class MalformedResponseError(UpstreamError):
    """
    Backend returned a result that does not match the closed 7-key schema.

    When raised:
        - Payload is not JSON / not an object
        - A required section key is missing
        - A section value is not a string
        - Unexpected top-level keys are present
    """

    failure_kind = FailureKind.MALFORMED_RESPONSE


# =============================================================================
# STAGE 5: CONTENT AND CONTROL ERRORS
# =============================================================================


class ValidationExhaustedError(PatientDocumentError):
    """
    Every permitted attempt produced a document that failed validation.

    Attributes:
        errors: Validation errors of the final attempt
        warnings: Validation warnings of the final attempt
        attempts: Number of generation attempts made
    """

    failure_kind = FailureKind.VALIDATION_EXHAUSTED

    def __init__(self, errors: List[str], warnings: List[str], attempts: int):
        self.errors = list(errors)
        self.warnings = list(warnings)
        self.attempts = attempts
        super().__init__(
            "AI generation incomplete after retries. Please review the validation "
            "errors and regenerate.",
            context={"attempts": attempts, "error_count": len(self.errors)},
        )


class GenerationCancelledError(PatientDocumentError):
    """Caller cancelled the request before the next attempt was issued."""

    failure_kind = FailureKind.CANCELLED

    def __init__(self, attempts: int):
        self.attempts = attempts
        super().__init__("Generation cancelled by caller", context={"attempts": attempts})
