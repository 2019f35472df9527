"""
Core Layer - Domain Models, Enums, Constants and Configuration

This layer contains PURE, side-effect-free components that form the foundation
of the patient document pipeline.

Submodules:
    models.py     → Data structures (PatientProfile, PatientDocument, ValidationResult, ...)
    enums.py      → Enumerations (Language, HealthLiteracy, DocumentSection, ...)
    constants.py  → Generation limits and language-keyed conventions
    config.py     → Configuration dataclass
    exceptions.py → Domain-specific exceptions

Dependency Rule:
    This layer depends on NOTHING else in the package.
    All other layers may depend on this layer.

Author: Shubham Singh
Date: October 2026
"""

from patient_document_generation.core.models import (
    PatientProfile,
    PatientDocument,
    ValidationResult,
    Section,
    GenerationOutcome,
)

from patient_document_generation.core.enums import (
    Sex,
    HealthLiteracy,
    Language,
    JourneyType,
    RiskAppetite,
    DocumentSection,
    RetryState,
    FailureKind,
)

from patient_document_generation.core.config import PipelineConfiguration

from patient_document_generation.core.exceptions import (
    PatientDocumentError,
    ConfigurationError,
    InputError,
    NoteTooLongError,
    InvalidProfileError,
    UpstreamError,
    UpstreamUnavailableError,
    RateLimitError,
    PaymentRequiredError,
    MalformedResponseError,
    ValidationExhaustedError,
    GenerationCancelledError,
)

__all__ = [
    # Models
    "PatientProfile",
    "PatientDocument",
    "ValidationResult",
    "Section",
    "GenerationOutcome",
    # Enums
    "Sex",
    "HealthLiteracy",
    "Language",
    "JourneyType",
    "RiskAppetite",
    "DocumentSection",
    "RetryState",
    "FailureKind",
    # Config
    "PipelineConfiguration",
    # Exceptions
    "PatientDocumentError",
    "ConfigurationError",
    "InputError",
    "NoteTooLongError",
    "InvalidProfileError",
    "UpstreamError",
    "UpstreamUnavailableError",
    "RateLimitError",
    "PaymentRequiredError",
    "MalformedResponseError",
    "ValidationExhaustedError",
    "GenerationCancelledError",
]
