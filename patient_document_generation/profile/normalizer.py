"""
Profile Normalizer - Canonical Patient Profiles

Turns loosely-typed patient attributes (as posted by a form or read from a
JSON file) into a ``PatientProfile`` with every required field resolved.

Defaulting rules:
    age            missing / non-numeric / out of range → 65
    sex            missing / unrecognized               → other
    language       missing / unrecognized               → english
    healthLiteracy missing / unrecognized               → medium
    riskAppetite   missing / unrecognized               → moderate
    journeyType    missing / unrecognized               → None

Both camelCase (``healthLiteracy``) and snake_case (``health_literacy``)
keys are accepted. Normalization never raises for field values; only a
non-mapping input is rejected.

Pipeline Position:
    Raw input → [ProfileNormalizer] → PromptBuilder → DocumentGenerator
                 ^^^^^^^^^^^^^^^^^
                 You are here
"""

from typing import Any, Mapping, Optional

from loguru import logger

from patient_document_generation.core.constants import DEFAULT_AGE
from patient_document_generation.core.enums import (
    HealthLiteracy,
    JourneyType,
    Language,
    RiskAppetite,
    Sex,
)
from patient_document_generation.core.exceptions import InvalidProfileError
from patient_document_generation.core.models import PatientProfile

MAX_PLAUSIBLE_AGE = 130


class ProfileNormalizer:
    """
    Builds canonical patient profiles from loose input.

    Example:
        >>> normalizer = ProfileNormalizer()
        >>> profile = normalizer.normalize({"language": "Estonian", "age": "72"})
        >>> profile.health_literacy
        <HealthLiteracy.MEDIUM: 'medium'>
    """

    def __init__(self, default_age: int = DEFAULT_AGE):
        self._default_age = default_age

    def normalize(self, raw: Optional[Mapping[str, Any]]) -> PatientProfile:
        """
        Normalize a raw profile record.

        Args:
            raw: Loosely-typed profile mapping (None is treated as empty)

        Returns:
            PatientProfile with every required field populated

        Raises:
            InvalidProfileError: If ``raw`` is not a mapping
        """
        if raw is None:
            raw = {}
        if not isinstance(raw, Mapping):
            raise InvalidProfileError(
                "Patient profile must be a key/value record",
                context={"received_type": type(raw).__name__},
            )

        profile = PatientProfile(
            age=self._resolve_age(_pick(raw, "age")),
            sex=Sex.from_value(_pick(raw, "sex", "gender"), Sex.OTHER),
            health_literacy=HealthLiteracy.from_value(
                _pick(raw, "healthLiteracy", "health_literacy"), HealthLiteracy.MEDIUM
            ),
            language=Language.from_value(_pick(raw, "language"), Language.ENGLISH),
            journey_type=JourneyType.from_value(_pick(raw, "journeyType", "journey_type")),
            mental_state=_text_or_none(_pick(raw, "mentalState", "mental_state")),
            comorbidities=_join_list(_pick(raw, "comorbidities")),
            smoking_status=_text_or_none(_pick(raw, "smokingStatus", "smoking_status")),
            risk_appetite=RiskAppetite.from_value(
                _pick(raw, "riskAppetite", "risk_appetite"), RiskAppetite.MODERATE
            ),
        )

        logger.debug(
            f"Profile normalized | Language: {profile.language.value} | "
            f"Literacy: {profile.health_literacy.value} | Age: {profile.age}"
        )
        return profile

    def _resolve_age(self, value: Any) -> int:
        if isinstance(value, bool):
            return self._default_age
        try:
            age = int(float(value))
        except (TypeError, ValueError, OverflowError):
            return self._default_age
        if age <= 0 or age > MAX_PLAUSIBLE_AGE:
            return self._default_age
        return age


def normalize_profile(raw: Optional[Mapping[str, Any]]) -> PatientProfile:
    """Module-level shortcut for ``ProfileNormalizer().normalize(raw)``."""
    return ProfileNormalizer().normalize(raw)


# =============================================================================
# HELPERS
# =============================================================================


def _pick(raw: Mapping[str, Any], *keys: str) -> Any:
    """Return the first non-None value among ``keys``."""
    for key in keys:
        value = raw.get(key)
        if value is not None:
            return value
    return None


def _text_or_none(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _join_list(value: Any) -> Optional[str]:
    """Comorbidities may arrive as free text or as a list of strings."""
    if isinstance(value, (list, tuple)):
        items = [str(item).strip() for item in value if str(item).strip()]
        return ", ".join(items) or None
    return _text_or_none(value)
