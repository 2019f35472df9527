"""
Domain Models for Patient Document Generation

This module defines the core data structures used throughout the patient
document pipeline. All models are dataclasses designed for:
    1. Type safety and IDE support
    2. Serialization to/from JSON
    3. Clear domain semantics

Model Hierarchy:
    PatientProfile     → Canonical personalization input
    PatientDocument    → The 7-section structured generation result
    ValidationResult   → Verdict of one validation pass
    Section            → Presentation unit (localized title + content)
    GenerationOutcome  → Terminal success/failure value returned to callers

Usage:
    from patient_document_generation.core.models import PatientDocument

    document = PatientDocument.from_dict(model_output)
    document.get(DocumentSection.WARNING_SIGNS)

Author: Shubham Singh
Date: October 2026
"""

from dataclasses import dataclass, field, fields
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple, Union

from patient_document_generation.core.enums import (
    DocumentSection,
    FailureKind,
    HealthLiteracy,
    JourneyType,
    Language,
    RiskAppetite,
    Sex,
)


# =============================================================================
# STAGE 1: PATIENT PROFILE
# =============================================================================


@dataclass(frozen=True)
class PatientProfile:
    """
    Canonical patient personalization profile.

    What it does:
        Holds the fully-resolved patient attributes used to personalize the
        generated document. Built by ``ProfileNormalizer`` from loose input.

    Invariants:
        ``language`` and ``health_literacy`` are always concrete enum members,
        never None. Optional attributes stay None when not supplied.

    Attributes:
        age: Patient age in years
        sex: Patient sex
        health_literacy: Vocabulary/sentence-length regime
        language: Output language
        journey_type: How the patient arrived at the diagnosis (optional)
        mental_state: Free-text emotional state, e.g. "anxious" (optional)
        comorbidities: Free-text comorbidity summary (optional)
        smoking_status: Free-text smoking status (optional)
        risk_appetite: Desired information depth
    """

    # -------------------------------------------------------------------------
    # 1.1 Always-resolved fields
    # -------------------------------------------------------------------------
    age: int
    sex: Sex
    health_literacy: HealthLiteracy
    language: Language

    # -------------------------------------------------------------------------
    # 1.2 Optional context
    # -------------------------------------------------------------------------
    journey_type: Optional[JourneyType] = None
    mental_state: Optional[str] = None
    comorbidities: Optional[str] = None
    smoking_status: Optional[str] = None
    risk_appetite: RiskAppetite = RiskAppetite.MODERATE

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "age": self.age,
            "sex": self.sex.value,
            "healthLiteracy": self.health_literacy.value,
            "language": self.language.value,
            "journeyType": self.journey_type.value if self.journey_type else None,
            "mentalState": self.mental_state,
            "comorbidities": self.comorbidities,
            "smokingStatus": self.smoking_status,
            "riskAppetite": self.risk_appetite.value,
        }


# =============================================================================
# STAGE 2: PATIENT DOCUMENT
# =============================================================================


@dataclass
class PatientDocument:
    """
    The structured, patient-facing generation result.

    What it does:
        Holds exactly seven named free-text slots in fixed order. A slot
        that was absent from the source data is None (not an empty string),
        so the validator can report it as missing.

    Why it exists:
        1. Encodes the closed 7-section schema as named fields
        2. Keeps "absent" distinct from "empty" for validation
        3. Single hand-off type between generation, validation and mapping

    Example:
        >>> doc = PatientDocument.from_dict({"medications": "Metoprolol 50 mg ..."})
        >>> doc.warning_signs is None
        True
    """

    diagnosis_explanation: Optional[str] = None
    lifestyle_guidance: Optional[str] = None
    six_month_timeline: Optional[str] = None
    long_term_life_impact: Optional[str] = None
    medications: Optional[str] = None
    warning_signs: Optional[str] = None
    contacts: Optional[str] = None

    def get(self, section: DocumentSection) -> Optional[str]:
        """Return the raw value of a section (None when absent)."""
        return getattr(self, section.value)

    def items(self) -> Iterator[Tuple[DocumentSection, Optional[str]]]:
        """Iterate ``(section, value)`` pairs in document order."""
        for section in DocumentSection:
            yield section, self.get(section)

    @property
    def missing_sections(self) -> List[DocumentSection]:
        return [section for section, value in self.items() if value is None]

    def full_text(self) -> str:
        """All present section values joined with a space, in order."""
        return " ".join(value for _, value in self.items() if isinstance(value, str))

    def to_dict(self) -> Dict[str, str]:
        """Convert to dictionary, omitting absent sections."""
        return {section.value: value for section, value in self.items() if value is not None}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PatientDocument":
        """
        Create from a mapping keyed by section name.

        Unknown keys are ignored here; the generator rejects them earlier at
        the untrusted boundary.
        """
        known = {f.name for f in fields(cls)}
        return cls(**{key: value for key, value in data.items() if key in known})


DocumentLike = Union[PatientDocument, Mapping[str, Any]]


# =============================================================================
# STAGE 3: VALIDATION RESULT
# =============================================================================


@dataclass(frozen=True)
class ValidationResult:
    """
    Verdict of one validation pass over a patient document.

    Invariants:
        ``passed`` is True if and only if ``errors`` is empty. Warnings
        never affect ``passed``. Use ``from_findings`` to construct.

    Attributes:
        passed: Whether the document may be released for review
        errors: Ordered, distinct blocking defects
        warnings: Ordered, distinct non-blocking quality concerns
    """

    passed: bool
    errors: Tuple[str, ...] = ()
    warnings: Tuple[str, ...] = ()

    def __post_init__(self):
        if self.passed != (len(self.errors) == 0):
            raise ValueError("ValidationResult.passed must be True exactly when errors is empty")

    @classmethod
    def from_findings(cls, errors: List[str], warnings: List[str]) -> "ValidationResult":
        """Build a result from raw findings, removing duplicates in order."""
        unique_errors = tuple(dict.fromkeys(errors))
        unique_warnings = tuple(dict.fromkeys(warnings))
        return cls(passed=not unique_errors, errors=unique_errors, warnings=unique_warnings)

    def summary(self) -> str:
        """
        Render numbered errors and warnings.

        Used verbatim as the retry context and in failure logs.
        """
        lines: List[str] = []
        if self.errors:
            lines.append("VALIDATION ERRORS:")
            lines.extend(f"{i}. {error}" for i, error in enumerate(self.errors, 1))
        if self.warnings:
            if lines:
                lines.append("")
            lines.append("VALIDATION WARNINGS:")
            lines.extend(f"{i}. {warning}" for i, warning in enumerate(self.warnings, 1))
        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "passed": self.passed,
            "errors": list(self.errors),
            "warnings": list(self.warnings),
        }


# =============================================================================
# STAGE 4: PRESENTATION SECTION
# =============================================================================


@dataclass
class Section:
    """One human-editable block of the patient document."""

    title: str
    content: str

    def to_dict(self) -> Dict[str, str]:
        return {"title": self.title, "content": self.content}


# =============================================================================
# STAGE 5: GENERATION OUTCOME
# =============================================================================


@dataclass
class GenerationOutcome:
    """
    Terminal result of one generation request.

    What it does:
        Carries either a validated document (success) or a distinguishable
        failure kind with the specific validation errors that caused it.

    Why it exists:
        1. Callers never have to catch pipeline exceptions
        2. Failure kinds map to different user remediation
        3. ``to_response`` renders the external response shape in one place
    """

    # -------------------------------------------------------------------------
    # 5.1 Success payload
    # -------------------------------------------------------------------------
    document: Optional[PatientDocument] = None
    validation: Optional[ValidationResult] = None
    model: Optional[str] = None

    # -------------------------------------------------------------------------
    # 5.2 Failure payload
    # -------------------------------------------------------------------------
    failure_kind: Optional[FailureKind] = None
    error: Optional[str] = None
    validation_errors: Optional[List[str]] = None
    validation_warnings: Optional[List[str]] = None

    # -------------------------------------------------------------------------
    # 5.3 Metadata
    # -------------------------------------------------------------------------
    attempts: int = 0

    @property
    def succeeded(self) -> bool:
        return self.failure_kind is None and self.document is not None

    @classmethod
    def success(
        cls,
        document: PatientDocument,
        validation: ValidationResult,
        attempts: int,
        model: Optional[str] = None,
    ) -> "GenerationOutcome":
        return cls(document=document, validation=validation, attempts=attempts, model=model)

    @classmethod
    def failure(
        cls,
        kind: FailureKind,
        error: str,
        attempts: int = 0,
        validation_errors: Optional[List[str]] = None,
        validation_warnings: Optional[List[str]] = None,
    ) -> "GenerationOutcome":
        return cls(
            failure_kind=kind,
            error=error,
            attempts=attempts,
            validation_errors=validation_errors,
            validation_warnings=validation_warnings,
        )

    def to_response(self) -> Dict[str, Any]:
        """
        Render the external response shape.

        Success:
            {"document": {...}, "model": ..., "validation": {"passed": true, "warnings": [...]}}
        Failure:
            {"error": ..., "failureKind": ..., "validationErrors"?: [...],
             "validationWarnings"?: [...]}
        """
        if self.succeeded:
            response: Dict[str, Any] = {
                "document": self.document.to_dict(),
                "validation": {
                    "passed": True,
                    "warnings": list(self.validation.warnings) if self.validation else [],
                },
            }
            if self.model:
                response["model"] = self.model
            return response

        response = {"error": self.error, "failureKind": self.failure_kind.value}
        if self.validation_errors is not None:
            response["validationErrors"] = list(self.validation_errors)
        if self.validation_warnings is not None:
            response["validationWarnings"] = list(self.validation_warnings)
        return response
