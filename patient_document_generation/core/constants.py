"""
Constants for Patient Document Generation

This module holds every fixed value the pipeline depends on. Nothing here is
caller-supplied: loosening generation limits would invalidate the validator's
assumptions about section length and content shape.

Sections:
    1. Generation limits (temperature, output tokens, attempt count)
    2. Validation thresholds
    3. Language conventions (titles, register rules, safety lexicons)
    4. Presentation formatting
    5. Logging format

Author: Shubham Singh
Date: October 2026
"""

from dataclasses import dataclass
from typing import Dict, Tuple

from patient_document_generation.core.enums import DocumentSection, Language


# =============================================================================
# STAGE 1: GENERATION LIMITS
# =============================================================================

GENERATION_TEMPERATURE = 0.4
"""Deterministic-leaning sampling temperature for every generation call."""

MAX_OUTPUT_TOKENS = 6000
"""Upper bound on tokens returned for a full 7-section document."""

SECTION_MAX_OUTPUT_TOKENS = 1000
"""Upper bound on tokens returned when regenerating a single section."""

MAX_GENERATION_ATTEMPTS = 2
"""One initial attempt plus exactly one corrective retry."""

DEFAULT_MAX_NOTE_LENGTH = 50_000
"""Technical notes longer than this are rejected, never truncated."""

STRUCTURED_OUTPUT_NAME = "generate_patient_document"
STRUCTURED_OUTPUT_DESCRIPTION = (
    "Generate a patient-friendly medical communication document with exactly 7 sections"
)


# =============================================================================
# STAGE 2: VALIDATION THRESHOLDS
# =============================================================================

MIN_SECTION_LENGTH = 50
"""Minimum trimmed length of every section, in characters."""

DEFAULT_EMERGENCY_NUMBER = "112"

DEFAULT_AGE = 65
"""Age assumed when the caller does not supply a usable one."""


# =============================================================================
# STAGE 3: LANGUAGE CONVENTIONS
# =============================================================================
# Every language-dependent literal used by the composer, validator and mapper.
# Lexicon entries are regular expressions matched against lower-cased text.


@dataclass(frozen=True)
class LanguageConventions:
    """
    Language-keyed configuration for one output language.

    What it does:
        Groups the titles, register rules and validation lexicons that
        change with the output language, so supporting a new language means
        adding one record instead of editing checks.

    Attributes:
        section_titles: Seven localized titles, in document order
        register_rules: Formal-address and tone rules for the prompt
        phone_format: Phone number format the model must use
        emergency_number: Local emergency number
        emergency_tokens: Emergency / immediate-action word stems (regex, matched at word start)
        forbidden_phrases: Unhelpful hedge phrases (epistemic-honesty check)
        medication_patterns: Medication vocabulary
        no_medication_patterns: Explicit "no medications / details to follow"
        contact_patterns: Reachable-channel vocabulary
        contact_fallback_patterns: Explicit "contacts will be provided"
        null_tokens: Whole-section placeholder values
        care_team_fallback: Localized "your care team will provide this"
    """

    section_titles: Tuple[str, ...]
    register_rules: str
    phone_format: str
    emergency_number: str
    emergency_tokens: Tuple[str, ...]
    forbidden_phrases: Tuple[str, ...]
    medication_patterns: Tuple[str, ...]
    no_medication_patterns: Tuple[str, ...]
    contact_patterns: Tuple[str, ...]
    contact_fallback_patterns: Tuple[str, ...]
    null_tokens: Tuple[str, ...]
    care_team_fallback: str

    def title_for(self, section: DocumentSection) -> str:
        return self.section_titles[section.position - 1]


# -----------------------------------------------------------------------------
# 3.1 English
# -----------------------------------------------------------------------------
ENGLISH_CONVENTIONS = LanguageConventions(
    section_titles=(
        "WHAT DO I HAVE",
        "HOW SHOULD I LIVE NEXT",
        "HOW THE NEXT 6 MONTHS OF MY LIFE WILL LOOK LIKE",
        "WHAT DOES IT MEAN FOR MY LIFE",
        "MY MEDICATIONS",
        "WARNING SIGNS",
        "MY CONTACTS",
    ),
    register_rules="""ENGLISH LANGUAGE GUIDELINES:
- Use "you" with professional warmth
- Address the reader as "Dear Mr./Ms." or "Dear Patient"
- Clear, direct communication
- Readers may have varying familiarity with the local health system""",
    phone_format="+372 XXX XXXX",
    emergency_number=DEFAULT_EMERGENCY_NUMBER,
    emergency_tokens=(r"emergency", r"ambulance", r"immediate", r"right away"),
    forbidden_phrases=(
        "i don't know",
        "i do not know",
        "i'm not sure",
        "i am not sure",
        "unclear from notes",
        "unclear from the notes",
        "consult doctor for diagnosis",
        "cannot determine",
        "can't determine",
        "information not available",
    ),
    medication_patterns=(
        r"medication",
        r"medicine",
        r"drug",
        r"tablet",
        r"pill",
        r"capsule",
        r"dose",
        r"dosage",
        r"\d\s*mg\b",
        r"\bmg\b",
    ),
    no_medication_patterns=(
        r"no medication",
        r"not prescribed",
        r"your doctor will provide",
        r"your care team will provide",
    ),
    contact_patterns=(
        r"phone",
        r"telephone",
        r"e-?mail",
        r"contact",
        r"appointment",
        r"clinic",
        r"hospital",
        r"doctor",
        r"nurse",
    ),
    contact_fallback_patterns=(r"your care team will provide",),
    null_tokens=("n/a", "na", "none", "not applicable", "-"),
    care_team_fallback="Your care team will provide this information.",
)

# -----------------------------------------------------------------------------
# 3.2 Estonian
# -----------------------------------------------------------------------------
ESTONIAN_CONVENTIONS = LanguageConventions(
    section_titles=(
        "MIS MUL ON",
        "KUIDAS PEAKSIN EDASI ELAMA",
        "KUIDAS JÄRGMISED 6 KUUD VÄLJA NÄEVAD",
        "MIDA SEE TÄHENDAB MINU ELULE",
        "MINU RAVIMID",
        "HOIATAVAD MÄRGID",
        "MINU KONTAKTID",
    ),
    register_rules="""ESTONIAN LANGUAGE GUIDELINES:
- Use the formal "Teie" form throughout
- Address the reader as "Lugupeetud" followed by Mr./Mrs.
- Prefer modest, clear communication
- Avoid overly emotional or dramatic language""",
    phone_format="+372 XXX XXXX",
    emergency_number=DEFAULT_EMERGENCY_NUMBER,
    emergency_tokens=(r"kiirabi", r"erakorra", r"hädaabi", r"viivitamatult", r"kohe\b"),
    forbidden_phrases=(
        "ma ei tea",
        "ei ole kindel",
        "märkmetest ei selgu",
        "ei saa kindlaks teha",
        "teave puudub",
    ),
    medication_patterns=(r"ravim", r"tablett", r"annus", r"kapsel", r"\d\s*mg\b"),
    no_medication_patterns=(r"ravimeid ei ole", r"ei ole määratud", r"raviarst annab"),
    contact_patterns=(r"telefon", r"e-?post", r"kontakt", r"vastuvõtt", r"kliinik", r"haigla", r"arst", r"õde"),
    contact_fallback_patterns=(r"raviteam annab", r"ravimeeskond annab"),
    null_tokens=("puudub", "ei kohaldu"),
    care_team_fallback="Teie ravimeeskond annab Teile selle teabe.",
)

# -----------------------------------------------------------------------------
# 3.3 Russian
# -----------------------------------------------------------------------------
RUSSIAN_CONVENTIONS = LanguageConventions(
    section_titles=(
        "ЧТО У МЕНЯ ЕСТЬ",
        "КАК МНЕ ЖИТЬ ДАЛЬШЕ",
        "КАК БУДУТ ВЫГЛЯДЕТЬ СЛЕДУЮЩИЕ 6 МЕСЯЦЕВ",
        "ЧТО ЭТО ЗНАЧИТ ДЛЯ МОЕЙ ЖИЗНИ",
        "МОИ ЛЕКАРСТВА",
        "ПРЕДУПРЕЖДАЮЩИЕ ПРИЗНАКИ",
        "МОИ КОНТАКТЫ",
    ),
    register_rules="""RUSSIAN LANGUAGE GUIDELINES:
- Use the formal "Вы" form throughout
- Address the reader as "Уважаемый господин/Уважаемая госпожа"
- A slightly more direct communication style is acceptable
- The local medical system may be unfamiliar to some readers""",
    phone_format="+372 XXX XXXX",
    emergency_number=DEFAULT_EMERGENCY_NUMBER,
    emergency_tokens=(r"скорая", r"скорую", r"неотложн", r"экстренн", r"немедленно", r"срочно"),
    forbidden_phrases=(
        "я не знаю",
        "я не уверен",
        "неясно из записей",
        "невозможно определить",
        "информация недоступна",
    ),
    medication_patterns=(r"лекарств", r"препарат", r"таблет", r"доз", r"\d\s*мг"),
    no_medication_patterns=(r"не назначен", r"лекарства не", r"врач предоставит"),
    contact_patterns=(r"телефон", r"почт", r"контакт", r"приём", r"прием", r"клиник", r"больниц", r"врач", r"медсестр"),
    contact_fallback_patterns=(r"медицинская команда предоставит",),
    null_tokens=("нет", "не применимо", "отсутствует"),
    care_team_fallback="Ваша медицинская команда предоставит эту информацию.",
)


LANGUAGE_CONVENTIONS: Dict[Language, LanguageConventions] = {
    Language.ENGLISH: ENGLISH_CONVENTIONS,
    Language.ESTONIAN: ESTONIAN_CONVENTIONS,
    Language.RUSSIAN: RUSSIAN_CONVENTIONS,
}


def get_conventions(language: Language) -> LanguageConventions:
    """Return conventions for a language, falling back to English."""
    return LANGUAGE_CONVENTIONS.get(language, ENGLISH_CONVENTIONS)


# =============================================================================
# STAGE 4: MEDICATION DOSAGE HEURISTICS
# =============================================================================
# Smoke detector only: matches produce warnings, never errors.

SUSPICIOUS_DOSAGE_PATTERNS: Tuple[str, ...] = (
    r"\b\d{1,3}(?:[,\u00a0\u202f]\d{3})+\s*(?:mg|мг)\b",  # 1,000 mg / 1 000 мг with a (narrow) no-break space
    r"\b\d{4,}\s*(?:mg|мг)\b",  # 1000+ mg
    r"\b\d+(?:[.,]\d+)?\s*(?:g|grams?|gramm?i|г|грамм(?:а|ов)?)\b",  # grams where mg is expected
)


# =============================================================================
# STAGE 5: PRESENTATION FORMATTING
# =============================================================================

SECTION_SEPARATOR = "═" * 47
"""Visual separator placed above and below every section title."""


# =============================================================================
# STAGE 6: LOGGING CONFIGURATION
# =============================================================================

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)
