"""
Document Validator - Patient Document Safety Gate

This module checks a generated patient document against structural, content
and safety rules and returns a pass/fail verdict with separate error and
warning lists.

Why Errors and Warnings Are Separate:
    1. Errors block release and drive the single corrective retry
    2. Warnings never block; they are surfaced to the human reviewer
    3. Heuristic checks (medication wording, dosage shape, contacts) only
       ever produce warnings

Checks (all run, in this order, no short-circuit):
    1. Structural completeness   → error
    2. Medications content       → warning
    3. Warning-signs safety      → error
    4. Contacts completeness     → warning
    5. Epistemic honesty         → error
    6. Degenerate content        → error
    7. Dosage sanity             → warning
    8. Language consistency      → error

Pipeline Position:
    PromptBuilder → DocumentGenerator → [DocumentValidator] → RetryController
                                         ^^^^^^^^^^^^^^^^^
                                         You are here

Author: Shubham Singh
Date: October 2026
"""

import re
from typing import Any, Dict, Iterable, List, Mapping, Union

from loguru import logger

from patient_document_generation.core.constants import (
    DEFAULT_EMERGENCY_NUMBER,
    ENGLISH_CONVENTIONS,
    MIN_SECTION_LENGTH,
    SUSPICIOUS_DOSAGE_PATTERNS,
    LanguageConventions,
    get_conventions,
)
from patient_document_generation.core.enums import DocumentSection, Language
from patient_document_generation.core.models import (
    DocumentLike,
    PatientDocument,
    ValidationResult,
)


# =============================================================================
# STAGE 1: RULE-BASED CHECKS (STATIC CLASS)
# =============================================================================
# Each check returns a list of findings; the caller decides whether they are
# errors or warnings.


class DocumentChecks:
    """
    Static methods for patient document validation.

    What it does:
        Provides deterministic checks over the seven section values. Every
        check works on plain strings and conventions, so each one can be
        tested on its own.

    Lexicons:
        Every check that matches vocabulary uses the target language's
        conventions plus the English ones. Models frequently fall back to
        English terms ("112 emergency", "mg") inside localized text.
    """

    _dosage_regexes = [re.compile(pattern, re.IGNORECASE) for pattern in SUSPICIOUS_DOSAGE_PATTERNS]

    # -------------------------------------------------------------------------
    # 1.1 Structure
    # -------------------------------------------------------------------------

    @staticmethod
    def check_structure(values: Mapping[DocumentSection, Any]) -> List[str]:
        """
        Check that every section is present, textual and long enough.

        A present-but-empty section is reported as missing. A section below
        the minimum length is reported as too short.
        """
        errors = []
        for section in DocumentSection:
            value = values.get(section)
            if value is None:
                errors.append(f"Missing section: {section.value}")
            elif not isinstance(value, str):
                errors.append(
                    f"Section {section.value} has invalid content type "
                    f"({type(value).__name__}); expected text"
                )
            elif not value.strip():
                errors.append(f"Missing section: {section.value}")
            elif len(value.strip()) < MIN_SECTION_LENGTH:
                errors.append(
                    f"Section too short: {section.value} "
                    f"({len(value.strip())} chars, minimum {MIN_SECTION_LENGTH})"
                )
        return errors

    # -------------------------------------------------------------------------
    # 1.2 Medications
    # -------------------------------------------------------------------------

    @staticmethod
    def check_medications(text: str, conventions: LanguageConventions) -> List[str]:
        """
        Check that the medications section names medications or says there
        are none (or that details will follow). An empty section is left to
        the structural check.
        """
        if not text.strip():
            return []

        patterns = _merged(
            conventions.medication_patterns,
            conventions.no_medication_patterns,
            ENGLISH_CONVENTIONS.medication_patterns,
            ENGLISH_CONVENTIONS.no_medication_patterns,
        )
        if _matches_any(text, patterns):
            return []
        return ["Medications section may be incomplete - no medications or explicit statement found"]

    # -------------------------------------------------------------------------
    # 1.3 Warning signs (safety critical)
    # -------------------------------------------------------------------------

    @staticmethod
    def check_warning_signs(
        text: str, conventions: LanguageConventions, emergency_number: str
    ) -> List[str]:
        """
        Check that the warning-signs section points the patient to
        emergency help.

        Passes when the section contains the emergency number as a
        standalone number, or an emergency / immediate-action token at the
        start of a word that is not negated ("non-emergency", "не срочно").
        Runs even when the section is missing, so the error is never skipped.
        """
        lowered = _normalize(text)
        number_pattern = rf"(?<!\d){re.escape(emergency_number)}(?!\d)"
        if re.search(number_pattern, lowered):
            return []

        tokens = _merged(conventions.emergency_tokens, ENGLISH_CONVENTIONS.emergency_tokens)
        for token in tokens:
            for match in re.finditer(rf"(?<![\w-])(?:{token})", lowered):
                if not _NEGATION_BEFORE.search(lowered[: match.start()]):
                    return []

        return [
            f"Warning signs section ({DocumentSection.WARNING_SIGNS.value}) must include "
            f"the emergency number {emergency_number} and when to call it"
        ]

    # -------------------------------------------------------------------------
    # 1.4 Contacts
    # -------------------------------------------------------------------------

    @staticmethod
    def check_contacts(text: str, conventions: LanguageConventions) -> List[str]:
        if not text.strip():
            return []

        patterns = _merged(
            conventions.contact_patterns,
            conventions.contact_fallback_patterns,
            ENGLISH_CONVENTIONS.contact_patterns,
            ENGLISH_CONVENTIONS.contact_fallback_patterns,
        )
        if _matches_any(text, patterns):
            return []
        return ["Contacts section may be incomplete - no contact methods or statement found"]

    # -------------------------------------------------------------------------
    # 1.5 Epistemic honesty
    # -------------------------------------------------------------------------

    @staticmethod
    def check_forbidden_phrases(full_text: str, conventions: LanguageConventions) -> List[str]:
        """
        Scan the whole document for hedge phrases.

        One error per distinct phrase found, naming the phrase.
        """
        lowered = _normalize(full_text)
        phrases = _merged(conventions.forbidden_phrases, ENGLISH_CONVENTIONS.forbidden_phrases)
        return [
            f'Improper uncertainty language detected: "{phrase}". '
            f'Use "{ENGLISH_CONVENTIONS.care_team_fallback[:-1]}" instead.'
            for phrase in phrases
            if phrase in lowered
        ]

    # -------------------------------------------------------------------------
    # 1.6 Degenerate content
    # -------------------------------------------------------------------------

    @staticmethod
    def check_placeholders(
        values: Mapping[DocumentSection, str], conventions: LanguageConventions
    ) -> List[str]:
        """
        Flag sections whose whole content is a placeholder token.

        Independent of the length check: "N/A" is reported here as well as
        being too short.
        """
        tokens = set(_merged(conventions.null_tokens, ENGLISH_CONVENTIONS.null_tokens))
        errors = []
        for section, value in values.items():
            stripped = value.strip()
            if stripped and _normalize(stripped).rstrip(".") in tokens:
                errors.append(
                    f'Section {section.value} contains only "{stripped}" - '
                    f"placeholder content is not acceptable"
                )
        return errors

    # -------------------------------------------------------------------------
    # 1.7 Dosage sanity (heuristic)
    # -------------------------------------------------------------------------

    @classmethod
    def check_dosages(cls, text: str) -> List[str]:
        """
        Flag implausibly large mg values and gram units in the medications
        section. Smoke detector only: findings are warnings.
        """
        warnings = []
        for regex in cls._dosage_regexes:
            for match in regex.finditer(text):
                warnings.append(
                    f"Potentially suspicious medication dosage detected "
                    f"('{match.group(0).strip()}') - please review"
                )
        return warnings

    # -------------------------------------------------------------------------
    # 1.8 Language consistency
    # -------------------------------------------------------------------------

    @staticmethod
    def check_language(full_text: str, language: Language) -> List[str]:
        """
        Non-English documents must contain at least one non-ASCII character.
        Coarse guard against the model silently answering in English.
        """
        if language == Language.ENGLISH:
            return []
        if any(ord(char) > 127 for char in full_text):
            return []
        return [f"Language set to {language.value} but document appears to be in English"]


# =============================================================================
# STAGE 2: VALIDATION FUNCTION
# =============================================================================


def validate_document(
    document: DocumentLike,
    language: Union[Language, str],
    emergency_number: str = DEFAULT_EMERGENCY_NUMBER,
) -> ValidationResult:
    """
    Validate a patient document.

    Pure and deterministic: no logging, no I/O. Every check runs so that the
    complete error list is available for the retry prompt.

    Args:
        document: PatientDocument or a mapping keyed by section name
        language: Target language (enum or name; unknown → English)
        emergency_number: Local emergency number required in warning signs

    Returns:
        ValidationResult with ordered, distinct errors and warnings
    """
    target = Language.from_value(language, Language.ENGLISH)
    conventions = get_conventions(target)

    raw_values = _section_values(document)
    texts: Dict[DocumentSection, str] = {
        section: value for section, value in raw_values.items() if isinstance(value, str)
    }
    full_text = " ".join(texts.get(section, "") for section in DocumentSection if section in texts)

    medications = texts.get(DocumentSection.MEDICATIONS, "")

    errors: List[str] = []
    warnings: List[str] = []

    errors.extend(DocumentChecks.check_structure(raw_values))
    warnings.extend(DocumentChecks.check_medications(medications, conventions))
    errors.extend(
        DocumentChecks.check_warning_signs(
            texts.get(DocumentSection.WARNING_SIGNS, ""), conventions, emergency_number
        )
    )
    warnings.extend(
        DocumentChecks.check_contacts(texts.get(DocumentSection.CONTACTS, ""), conventions)
    )
    errors.extend(DocumentChecks.check_forbidden_phrases(full_text, conventions))
    errors.extend(DocumentChecks.check_placeholders(texts, conventions))
    warnings.extend(DocumentChecks.check_dosages(medications))
    errors.extend(DocumentChecks.check_language(full_text, target))

    return ValidationResult.from_findings(errors, warnings)


# =============================================================================
# STAGE 3: VALIDATOR CLASS
# =============================================================================


class DocumentValidator:
    """
    Validates generated patient documents.

    What it does:
        Wraps ``validate_document`` with a configured emergency number and
        logs each verdict (counts only, never document text).

    Why it exists:
        1. Injectable collaborator for the RetryController
        2. Holds deployment configuration (emergency number)
        3. Keeps ``validate_document`` itself free of side effects

    Example:
        >>> validator = DocumentValidator(emergency_number="112")
        >>> result = validator.validate(document, Language.ESTONIAN)
        >>> result.passed
        True
    """

    def __init__(self, emergency_number: str = DEFAULT_EMERGENCY_NUMBER):
        self._emergency_number = emergency_number
        self._validation_count = 0

    def validate(self, document: DocumentLike, language: Union[Language, str]) -> ValidationResult:
        self._validation_count += 1
        result = validate_document(document, language, self._emergency_number)

        if result.passed:
            logger.info(f"Validation passed | Warnings: {len(result.warnings)}")
        else:
            logger.warning(
                f"Validation failed | Errors: {len(result.errors)} | "
                f"Warnings: {len(result.warnings)}"
            )
        return result

    @property
    def emergency_number(self) -> str:
        return self._emergency_number

    @property
    def validation_count(self) -> int:
        return self._validation_count


# =============================================================================
# STAGE 4: HELPERS
# =============================================================================


def _section_values(document: DocumentLike) -> Dict[DocumentSection, Any]:
    """Raw value per section; absent keys are omitted."""
    if isinstance(document, PatientDocument):
        return {section: value for section, value in document.items() if value is not None}
    return {
        section: document[section.value]
        for section in DocumentSection
        if section.value in document and document[section.value] is not None
    }


# Negating word directly before an emergency token, in any supported language.
_NEGATION_BEFORE = re.compile(r"(?<!\w)(?:non|not|mitte|не)(?:\s+an?)?[\s-]+$")


def _normalize(text: str) -> str:
    return text.lower().replace("’", "'")


def _merged(*groups: Iterable[str]) -> List[str]:
    """Concatenate lexicons, dropping duplicates, keeping order."""
    return list(dict.fromkeys(entry for group in groups for entry in group))


def _matches_any(text: str, patterns: Iterable[str]) -> bool:
    lowered = _normalize(text)
    return any(re.search(pattern, lowered) for pattern in patterns)
