"""
Enumerations for Patient Document Generation

This module defines all enumeration types used throughout the patient
document pipeline. Enums provide:
    1. Type safety for categorical values
    2. IDE autocomplete support
    3. Clear domain semantics

Enumeration Categories:
    Sex, HealthLiteracy, Language,
    JourneyType, RiskAppetite  → Patient profile vocabulary
    DocumentSection            → The seven fixed slots of a patient document
    RetryState                 → States of the generation retry controller
    FailureKind                → Distinguishable terminal failure categories

Author: Shubham Singh
Date: October 2026
"""

from enum import Enum
from typing import Any, Optional


# =============================================================================
# STAGE 1: TOLERANT PARSING MIXIN
# =============================================================================
# Profile data arrives loosely typed ("English", " LOW ", None). Every profile
# enum parses with a fallback instead of raising.


class _LenientEnum(str, Enum):
    """String enum with case-insensitive, default-returning lookup."""

    @classmethod
    def from_value(cls, value: Any, default: Optional["_LenientEnum"] = None):
        """
        Convert a raw value to an enum member.

        Args:
            value: Raw input (member, string, or anything else)
            default: Member returned when the value is missing or unrecognized

        Returns:
            Matching member, or ``default``
        """
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return default

        normalized = value.strip().lower().replace("_", "-").replace(" ", "-")
        for member in cls:
            if member.value == normalized or member.name.lower().replace("_", "-") == normalized:
                return member
        return default

    @classmethod
    def get_all_values(cls) -> list:
        """Return all member values as a list."""
        return [member.value for member in cls]


# =============================================================================
# STAGE 2: PATIENT PROFILE ENUMERATIONS
# =============================================================================


class Sex(_LenientEnum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


class HealthLiteracy(_LenientEnum):
    """
    Patient health literacy level.

    Drives the vocabulary and sentence-length regime of the generated text.
    The three regimes are mutually exclusive.
    """

    LOW = "low"
    """5th-grade vocabulary, 10-15 word sentences, everyday analogies."""

    MEDIUM = "medium"
    """Plain language, medical terms introduced with an inline explanation."""

    HIGH = "high"
    """Professional register, terminology and measurements allowed."""


class Language(_LenientEnum):
    """
    Output language of the patient document.

    Every member must have a matching entry in
    ``core.constants.LANGUAGE_CONVENTIONS``.
    """

    ESTONIAN = "estonian"
    RUSSIAN = "russian"
    ENGLISH = "english"


class JourneyType(_LenientEnum):
    """How the patient arrived at this diagnosis."""

    ELECTIVE = "elective"
    EMERGENCY = "emergency"
    CHRONIC = "chronic"
    FIRST_TIME = "first-time"


class RiskAppetite(_LenientEnum):
    """How much detail the patient wants about risks and complications."""

    MINIMAL = "minimal"
    MODERATE = "moderate"
    DETAILED = "detailed"


# =============================================================================
# STAGE 3: DOCUMENT SECTION ENUMERATION
# =============================================================================
# The seven slots of a patient document. Declaration order IS document order.


class DocumentSection(str, Enum):
    """
    The seven fixed sections of a patient-facing document.

    What it does:
        Names every slot of the structured generation result. The value is
        the key used in the model's JSON output and in ``PatientDocument``.

    Why it exists:
        1. One enumerated source for the closed 7-key schema
        2. Fixed ordering shared by the validator, composer and mapper
        3. Avoids string literals for section keys across layers
    """

    DIAGNOSIS_EXPLANATION = "diagnosis_explanation"
    """What do I have: the diagnosis in plain language."""

    LIFESTYLE_GUIDANCE = "lifestyle_guidance"
    """How should I live next: daily, practical instructions."""

    SIX_MONTH_TIMELINE = "six_month_timeline"
    """What the next six months will look like."""

    LONG_TERM_LIFE_IMPACT = "long_term_life_impact"
    """What the condition means for the rest of my life."""

    MEDICATIONS = "medications"
    """My medications, with dose, timing and purpose."""

    WARNING_SIGNS = "warning_signs"
    """Warning signs and when to call the emergency number."""

    CONTACTS = "contacts"
    """My care team contacts."""

    @classmethod
    def keys(cls) -> list:
        """Return section keys in document order."""
        return [section.value for section in cls]

    @property
    def position(self) -> int:
        """1-based position of this section in the document."""
        return list(DocumentSection).index(self) + 1


# =============================================================================
# STAGE 4: RETRY CONTROLLER STATES
# =============================================================================


class RetryState(str, Enum):
    """
    States of the generation retry controller.

    Transitions:
        IDLE → ATTEMPTING → PASSED
                          → FAILED_RETRYABLE → ATTEMPTING → PASSED
                                                          → FAILED_TERMINAL
        Any non-terminal state → CANCELLED (before the next attempt is issued)
        Any attempting state   → ABORTED (upstream/infrastructure failure)
    """

    IDLE = "idle"
    ATTEMPTING = "attempting"
    PASSED = "passed"
    FAILED_RETRYABLE = "failed_retryable"
    FAILED_TERMINAL = "failed_terminal"
    CANCELLED = "cancelled"
    ABORTED = "aborted"

    @property
    def is_terminal(self) -> bool:
        return self in (
            RetryState.PASSED,
            RetryState.FAILED_TERMINAL,
            RetryState.CANCELLED,
            RetryState.ABORTED,
        )


# =============================================================================
# STAGE 5: FAILURE KINDS
# =============================================================================


class FailureKind(str, Enum):
    """
    Distinguishable terminal failure categories reported to callers.

    Upstream statuses stay separate because each needs a different user
    remediation: retry later, add credits, or a generic retry.
    """

    INPUT_TOO_LONG = "input_too_long"
    INVALID_INPUT = "invalid_input"
    UPSTREAM_UNAVAILABLE = "upstream_unavailable"
    RATE_LIMITED = "rate_limited"
    PAYMENT_REQUIRED = "payment_required"
    MALFORMED_RESPONSE = "malformed_response"
    VALIDATION_EXHAUSTED = "validation_exhausted"
    CANCELLED = "cancelled"
    CONFIGURATION = "configuration"
