"""
Retry Controller - Generation / Validation / Retry Loop

This module runs the bounded loop at the heart of the pipeline:
compose → invoke → validate, with exactly one corrective retry.

State Machine:
    IDLE → ATTEMPTING(1) → PASSED
                         → FAILED_RETRYABLE → ATTEMPTING(2) → PASSED
                                                            → FAILED_TERMINAL
    Before any attempt     → CANCELLED  (cancel() was called)
    During any attempt     → ABORTED    (upstream or unexpected failure, never retried)

Retry Policy:
    - Only validation errors are retried. Warnings never trigger a retry.
    - The second prompt carries the first attempt's ValidationResult so the
      model can correct each named failure.
    - Upstream and malformed-response failures are raised immediately.

Pipeline Position:
    ProfileNormalizer → [RetryController: PromptBuilder → DocumentGenerator
                                          → DocumentValidator] → Outcome
                         ^^^^^^^^^^^^^^^
                         You are here

Author: Shubham Singh
Date: October 2026
"""

import threading
from typing import Optional, Tuple

from loguru import logger

from patient_document_generation.core.constants import MAX_GENERATION_ATTEMPTS
from patient_document_generation.core.enums import RetryState
from patient_document_generation.core.exceptions import (
    GenerationCancelledError,
    UpstreamError,
    ValidationExhaustedError,
)
from patient_document_generation.core.models import (
    PatientDocument,
    PatientProfile,
    ValidationResult,
)
from patient_document_generation.generation.document_generator import DocumentGenerator
from patient_document_generation.generation.prompt_builder import PromptBuilder
from patient_document_generation.validation.document_validator import DocumentValidator


class RetryController:
    """
    Drives at most two generation attempts for one request.

    What it does:
        Composes a prompt, invokes the backend, validates the result and,
        on validation failure, retries once with the failure summary
        prepended to the prompt.

    Why it exists:
        1. Makes "retry exactly once" an explicit state machine
        2. Separates content failures (retried) from infrastructure
           failures (surfaced)
        3. Supports cancellation between attempts

    Lifecycle:
        One controller per request. ``run`` may be called once; the
        controller keeps its final state, attempt count and last
        ValidationResult for inspection.

    Example:
        >>> controller = RetryController(builder, generator, validator)
        >>> document, result = controller.run(profile, technical_note)
        >>> controller.attempt_count
        1
    """

    max_attempts = MAX_GENERATION_ATTEMPTS

    def __init__(
        self,
        prompt_builder: PromptBuilder,
        generator: DocumentGenerator,
        validator: DocumentValidator,
        cancel_event: Optional[threading.Event] = None,
    ):
        """
        Args:
            prompt_builder: Composes the prompt for each attempt
            generator: Issues the constrained generation call
            validator: Judges each generated document
            cancel_event: Shared event a caller may set to cancel (optional)
        """
        self._prompt_builder = prompt_builder
        self._generator = generator
        self._validator = validator

        self._state = RetryState.IDLE
        self._attempt_count = 0
        self._last_validation: Optional[ValidationResult] = None
        self._cancel_event = cancel_event if cancel_event is not None else threading.Event()

    # =========================================================================
    # STAGE 1: STATE INSPECTION
    # =========================================================================

    @property
    def state(self) -> RetryState:
        return self._state

    @property
    def attempt_count(self) -> int:
        return self._attempt_count

    @property
    def last_validation(self) -> Optional[ValidationResult]:
        return self._last_validation

    @property
    def cancelled(self) -> bool:
        return self._cancel_event.is_set()

    def cancel(self) -> None:
        """
        Request cancellation. Safe to call from another thread.

        An attempt already in flight completes; the next one is not issued.
        """
        self._cancel_event.set()
        logger.info(f"Cancellation requested | Attempts so far: {self._attempt_count}")

    # =========================================================================
    # STAGE 2: MAIN LOOP
    # =========================================================================

    def run(
        self, profile: PatientProfile, technical_note: str
    ) -> Tuple[PatientDocument, ValidationResult]:
        """
        Generate a validated patient document.

        Args:
            profile: Canonical patient profile
            technical_note: Clinician's technical note (already length-checked)

        Returns:
            Tuple of (document, validation result) from the passing attempt

        Raises:
            ValidationExhaustedError: Both attempts failed validation
            GenerationCancelledError: Cancelled before an attempt was issued
            UpstreamError: Backend failure during an attempt (not retried)
            RuntimeError: Controller was already used
        """
        if self._state != RetryState.IDLE:
            raise RuntimeError(f"RetryController already used (state: {self._state.value})")

        retry_context: Optional[ValidationResult] = None

        while self._attempt_count < self.max_attempts:
            # =================================================================
            # STAGE 2.1: CANCELLATION GATE
            # =================================================================
            if self._cancel_event.is_set():
                self._state = RetryState.CANCELLED
                logger.warning(f"Generation cancelled before attempt {self._attempt_count + 1}")
                raise GenerationCancelledError(attempts=self._attempt_count)

            # =================================================================
            # STAGE 2.2: COMPOSE AND INVOKE
            # =================================================================
            self._state = RetryState.ATTEMPTING
            self._attempt_count += 1
            logger.info(
                f"Generation attempt {self._attempt_count}/{self.max_attempts} | "
                f"Language: {profile.language.value} | "
                f"Retry context: {retry_context is not None}"
            )

            try:
                prompt = self._prompt_builder.compose(profile, technical_note, retry_context)
                document = self._generator.invoke(prompt)

                # =============================================================
                # STAGE 2.3: VALIDATE
                # =============================================================
                result = self._validator.validate(document, profile.language)
            except UpstreamError as e:
                self._state = RetryState.ABORTED
                logger.error(f"Attempt {self._attempt_count} aborted | {e.message}")
                raise
            except Exception as e:
                self._state = RetryState.ABORTED
                logger.error(
                    f"Attempt {self._attempt_count} aborted | Unexpected {type(e).__name__}"
                )
                raise

            self._last_validation = result

            if result.passed:
                self._state = RetryState.PASSED
                logger.info(f"Document passed validation on attempt {self._attempt_count}")
                return document, result

            self._state = RetryState.FAILED_RETRYABLE
            retry_context = result

        # =====================================================================
        # STAGE 2.4: EXHAUSTED
        # =====================================================================
        self._state = RetryState.FAILED_TERMINAL
        logger.warning(
            f"Validation failed after {self._attempt_count} attempts | "
            f"Errors: {len(self._last_validation.errors)}"
        )
        raise ValidationExhaustedError(
            errors=list(self._last_validation.errors),
            warnings=list(self._last_validation.warnings),
            attempts=self._attempt_count,
        )
