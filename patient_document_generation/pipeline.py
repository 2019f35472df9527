"""
Patient Document Pipeline - Main Orchestrator

This is the PUBLIC API entry point for the patient document generation
system. It coordinates all layers (profile, generation, validation,
presentation) behind one call that always returns a GenerationOutcome.

Architecture Diagram:
    ┌─────────────────────────────────────────────────────────────────────┐
    │                       PatientDocumentPipeline                       │
    │                         (This Orchestrator)                         │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                     │
    │   ┌──────────┐   ┌────────────────────────────────────────────┐     │
    │   │ Profile  │ → │ RetryController                            │     │
    │   │Normalizer│   │ PromptBuilder → DocumentGenerator → Valid. │     │
    │   └──────────┘   └────────────────────────────────────────────┘     │
    │                                                                     │
    └─────────────────────────────────────────────────────────────────────┘

Outcome Mapping:
    Every domain exception is converted into a failure GenerationOutcome
    carrying its FailureKind. Input errors are detected before any backend
    call; upstream errors are never retried; validation failures are
    retried once by the RetryController.

Usage:
    from patient_document_generation import PatientDocumentPipeline

    pipeline = PatientDocumentPipeline.from_environment()
    outcome = pipeline.generate(technical_note, {"language": "estonian", "age": 72})
    print(outcome.to_response())

Author: Shubham Singh
Date: October 2026
"""

import threading
from typing import Any, Mapping, Optional, Union

from loguru import logger

from patient_document_generation.clients import GeminiClient, LLMClientProtocol, OpenAIClient
from patient_document_generation.core.config import PipelineConfiguration
from patient_document_generation.core.enums import DocumentSection
from patient_document_generation.core.exceptions import (
    ConfigurationError,
    InputError,
    NoteTooLongError,
    PatientDocumentError,
    ValidationExhaustedError,
)
from patient_document_generation.core.models import GenerationOutcome, PatientProfile
from patient_document_generation.generation import (
    DocumentGenerator,
    PromptBuilder,
    RetryController,
    SectionRegenerator,
)
from patient_document_generation.profile import ProfileNormalizer
from patient_document_generation.validation import DocumentValidator


# =============================================================================
# STAGE 1: PIPELINE CLASS
# =============================================================================


class PatientDocumentPipeline:
    """
    Main orchestrator for patient document generation.

    What it does:
        Validates the request input, normalizes the patient profile and
        runs a fresh RetryController per request. Returns a
        GenerationOutcome whether generation succeeded or not.

    Why it exists:
        1. Simple API: one method for one document
        2. Encapsulation: hides component wiring and exception mapping
        3. Configuration: single place to configure the backend and limits

    How it works:
        STAGE 1: Initialize components from configuration
        STAGE 2: On generate():
            2.1 Reject empty or oversized notes
            2.2 Normalize the profile
            2.3 Run compose → invoke → validate (at most two attempts)
            2.4 Map the result or the exception to a GenerationOutcome

    Thread Safety:
        Components hold no per-request state; each request gets its own
        RetryController. Counters are informational only.

    Example:
        >>> pipeline = PatientDocumentPipeline.from_environment()
        >>> outcome = pipeline.generate(note, {"language": "russian"})
        >>> outcome.succeeded
        True
    """

    def __init__(
        self,
        config: PipelineConfiguration,
        llm_client: Optional[LLMClientProtocol] = None,
        normalizer: Optional[ProfileNormalizer] = None,
        prompt_builder: Optional[PromptBuilder] = None,
        validator: Optional[DocumentValidator] = None,
    ):
        """
        Initialize pipeline with configuration and optional component overrides.

        Args:
            config: Pipeline configuration
            llm_client: Optional LLM client override (for testing)
            normalizer: Optional profile normalizer override
            prompt_builder: Optional prompt builder override
            validator: Optional validator override
        """
        # =====================================================================
        # STAGE 1.1: STORE CONFIGURATION
        # =====================================================================
        self._config = config

        # =====================================================================
        # STAGE 1.2: INITIALIZE LLM CLIENT
        # =====================================================================
        self._llm_client = llm_client or self._create_llm_client(config)

        # =====================================================================
        # STAGE 1.3: INITIALIZE COMPONENTS
        # =====================================================================
        self._normalizer = normalizer or ProfileNormalizer()
        self._prompt_builder = prompt_builder or PromptBuilder(
            emergency_number=config.emergency_number
        )
        self._validator = validator or DocumentValidator(emergency_number=config.emergency_number)
        self._generator = DocumentGenerator(self._llm_client)
        self._section_regenerator = SectionRegenerator(self._llm_client, self._prompt_builder)

        # =====================================================================
        # STAGE 1.4: TRACKING STATE
        # =====================================================================
        self._requests_total = 0
        self._requests_succeeded = 0
        self._counter_lock = threading.Lock()

        logger.info(
            f"PatientDocumentPipeline initialized | "
            f"Provider: {self._llm_client.provider_name} | "
            f"Model: {self._llm_client.model_name}"
        )

    # =========================================================================
    # STAGE 2: MAIN GENERATION API
    # =========================================================================

    def generate(
        self,
        technical_note: str,
        patient_profile: Optional[Mapping[str, Any]] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> GenerationOutcome:
        """
        Generate a validated patient document.

        Args:
            technical_note: Clinician's technical note
            patient_profile: Loosely-typed patient profile record
            cancel_event: Event the caller may set to stop before a retry

        Returns:
            GenerationOutcome (success with document and warnings, or a
            failure with its FailureKind and validation lists)
        """
        with self._counter_lock:
            self._requests_total += 1

        controller: Optional[RetryController] = None
        try:
            # =================================================================
            # STAGE 2.1: INPUT CHECKS
            # =================================================================
            self._check_note(technical_note)

            # =================================================================
            # STAGE 2.2: NORMALIZE PROFILE
            # =================================================================
            profile = self._normalizer.normalize(patient_profile)
            logger.info(
                f"Generating patient document | Note length: {len(technical_note)} | "
                f"Language: {profile.language.value} | "
                f"Literacy: {profile.health_literacy.value}"
            )

            # =================================================================
            # STAGE 2.3: GENERATE WITH RETRY
            # =================================================================
            controller = RetryController(
                self._prompt_builder, self._generator, self._validator, cancel_event=cancel_event
            )
            document, validation = controller.run(profile, technical_note)

        except ValidationExhaustedError as e:
            logger.warning(f"Generation failed | {e.failure_kind.value} | Attempts: {e.attempts}")
            return GenerationOutcome.failure(
                kind=e.failure_kind,
                error=e.message,
                attempts=e.attempts,
                validation_errors=e.errors,
                validation_warnings=e.warnings,
            )
        except PatientDocumentError as e:
            logger.error(f"Generation failed | {e.failure_kind.value} | {e.message}")
            return GenerationOutcome.failure(
                kind=e.failure_kind,
                error=e.message,
                attempts=controller.attempt_count if controller else 0,
            )

        # =====================================================================
        # STAGE 2.4: SUCCESS
        # =====================================================================
        with self._counter_lock:
            self._requests_succeeded += 1

        return GenerationOutcome.success(
            document=document,
            validation=validation,
            attempts=controller.attempt_count,
            model=self._llm_client.model_name,
        )

    def regenerate_section(
        self,
        section: Union[DocumentSection, str],
        technical_note: str,
        patient_profile: Optional[Mapping[str, Any]] = None,
        current_content: Optional[str] = None,
    ) -> str:
        """
        Regenerate one section's content for a reviewer.

        Unlike ``generate``, failures are raised rather than wrapped.

        Args:
            section: Section enum member or key (e.g. "medications")
            technical_note: Clinician's technical note
            patient_profile: Loosely-typed patient profile record
            current_content: Current section text, given to the model as context

        Returns:
            New section body text

        Raises:
            InputError: Unknown section, empty or oversized note
            UpstreamError: Backend failure
        """
        try:
            target = DocumentSection(section)
        except ValueError as e:
            raise InputError(
                f"Unknown section: {section}",
                context={"valid_sections": DocumentSection.keys()},
            ) from e

        self._check_note(technical_note)
        profile: PatientProfile = self._normalizer.normalize(patient_profile)
        return self._section_regenerator.regenerate(target, profile, technical_note, current_content)

    # =========================================================================
    # STAGE 3: FACTORY METHODS
    # =========================================================================

    @classmethod
    def from_environment(cls, env_file: Optional[str] = None) -> "PatientDocumentPipeline":
        """
        Create pipeline from environment configuration.

        Raises:
            ConfigurationError: If required settings are missing or invalid
        """
        config = PipelineConfiguration.from_environment(env_file=env_file, validate_on_load=True)
        return cls(config)

    # =========================================================================
    # STAGE 4: PRIVATE HELPERS
    # =========================================================================

    def _check_note(self, technical_note: Any) -> None:
        if not isinstance(technical_note, str) or not technical_note.strip():
            raise InputError("Technical note is required")
        if len(technical_note) > self._config.max_note_length:
            raise NoteTooLongError(len(technical_note), self._config.max_note_length)

    @staticmethod
    def _create_llm_client(config: PipelineConfiguration) -> LLMClientProtocol:
        """Create LLM client from configuration."""
        if config.llm_provider == "gemini":
            if not config.gemini_api_key:
                raise ConfigurationError(
                    "Gemini API key required", context={"setting": "GEMINI_API_KEY"}
                )
            return GeminiClient(
                api_key=config.gemini_api_key,
                model_name=config.gemini_model,
                request_timeout=config.request_timeout,
                rate_limit_delay=config.rate_limit_delay,
            )
        if config.llm_provider == "openai":
            if not config.openai_api_key:
                raise ConfigurationError(
                    "OpenAI API key required", context={"setting": "OPENAI_API_KEY"}
                )
            return OpenAIClient(
                api_key=config.openai_api_key,
                model_name=config.openai_model,
                base_url=config.openai_base_url,
                request_timeout=config.request_timeout,
                rate_limit_delay=config.rate_limit_delay,
            )
        raise ConfigurationError(
            f"Unsupported LLM provider: {config.llm_provider}",
            context={"supported": ["gemini", "openai"]},
        )

    # =========================================================================
    # STAGE 5: PROPERTIES AND METRICS
    # =========================================================================

    @property
    def requests_total(self) -> int:
        return self._requests_total

    @property
    def requests_succeeded(self) -> int:
        return self._requests_succeeded

    @property
    def success_rate(self) -> float:
        """Percentage of requests that produced a validated document."""
        if self._requests_total == 0:
            return 0.0
        return (self._requests_succeeded / self._requests_total) * 100

    @property
    def config(self) -> PipelineConfiguration:
        return self._config

    @property
    def llm_client(self) -> LLMClientProtocol:
        return self._llm_client
