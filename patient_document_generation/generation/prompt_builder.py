"""
Prompt Builder - Patient Document Generation Prompts

This module constructs the instruction payload sent to the text-generation
backend. Prompts are designed to:
    1. Produce exactly seven sections in the patient's language
    2. Adapt vocabulary and depth to the patient profile
    3. Encode the same safety rules the validator enforces

Prompt Assembly Order (fixed):
    [retry block]            → only on the corrective attempt, prepended
    task header              → 7 sections, target language, note, profile
    personalization block    → literacy, age band, mental state, journey, depth
    section guidelines       → localized titles + per-section content rules
    language register rules  → formal address, phone format
    safety rules             → emergency number, no hedging, no speculation

Building prompts is pure string assembly: no network, no randomness. The
same inputs always yield the same prompt.

Pipeline Position:
    ProfileNormalizer → [PromptBuilder] → DocumentGenerator → DocumentValidator
                         ^^^^^^^^^^^^^^
                         You are here

Author: Shubham Singh
Date: October 2026
"""

from typing import List, Optional

from patient_document_generation.core.constants import (
    DEFAULT_EMERGENCY_NUMBER,
    MIN_SECTION_LENGTH,
    LanguageConventions,
    get_conventions,
)
from patient_document_generation.core.enums import (
    DocumentSection,
    HealthLiteracy,
    JourneyType,
    RiskAppetite,
)
from patient_document_generation.core.models import PatientProfile, ValidationResult


# =============================================================================
# STAGE 1: SYSTEM PROMPT
# =============================================================================

SYSTEM_PROMPT = """You are an expert medical communicator. You turn technical clinical notes into clear, empathetic documents written for the patient.

YOUR ROLE:
- Explain the clinical note in language this patient can understand
- Adapt tone, vocabulary and depth to the patient profile you are given
- Stay clinically accurate; clarity never overrides correctness
- Use only information present in the clinical note
- Where information is missing, tell the patient who will provide it

CORE PRINCIPLES:
1. Plain words over jargon
2. Warm, never patronizing
3. No invented facts, medications, results or contacts
4. Safety-critical content first: medications, warning signs, contacts

OUTPUT:
Return exactly 7 sections through the structured output format. Prefer short bullet points inside each section."""


# =============================================================================
# STAGE 2: PERSONALIZATION TEMPLATES
# =============================================================================

LITERACY_GUIDANCE = {
    HealthLiteracy.LOW: """HEALTH LITERACY (LOW):
- Very simple vocabulary (5th-grade reading level)
- Short sentences, 10-15 words at most
- No medical terms; use everyday comparisons ("how much blood your heart pumps")
- Concrete sizes and amounts ("the size of your fist")
- Break complex ideas into small steps and repeat the key points""",
    HealthLiteracy.MEDIUM: """HEALTH LITERACY (MEDIUM):
- Clear, straightforward language
- Introduce each medical term with an immediate explanation, e.g. "ejection fraction (how strongly the heart pumps)"
- Sentences of 15-20 words
- Use comparisons for complex ideas""",
    HealthLiteracy.HIGH: """HEALTH LITERACY (HIGH):
- Professional but accessible language
- Medical terminology is acceptable with context
- Longer, more detailed explanations are fine
- Percentages and measurements may be included""",
}

YOUNGER_AGE_GUIDANCE = """AGE (YOUNGER THAN 40):
- Address long-term impact on career, family planning and activity
- Use an active, empowering tone
- Digital health tools may be mentioned"""

OLDER_AGE_GUIDANCE = """AGE (65 AND OLDER):
- Keep formatting simple and easy to scan
- Address mobility, independence and retirement concerns
- Mention support from family and carers where relevant
- Be especially clear about medication schedules"""

ANXIOUS_GUIDANCE = """MENTAL STATE (ANXIOUS):
- Calm, reassuring tone
- Clear structure and timelines
- Emphasize what is known and what the patient can control
- Avoid alarming language and point to support resources"""

DEPRESSED_GUIDANCE = """MENTAL STATE (LOW MOOD):
- Clear, structured communication
- Break tasks into small, manageable steps
- Acknowledge challenges while offering realistic hope
- Emphasize support systems"""

JOURNEY_GUIDANCE = {
    JourneyType.EMERGENCY: """JOURNEY TYPE (EMERGENCY):
- Acknowledge that this happened suddenly
- Give extra reassurance and structure
- Make the immediate next steps very clear
- Address anxiety about an unexpected diagnosis""",
    JourneyType.FIRST_TIME: """JOURNEY TYPE (FIRST-TIME):
- Assume no prior medical knowledge
- Explain everything from the basics
- Normalize the experience ("Many people with this condition...")""",
    JourneyType.CHRONIC: """JOURNEY TYPE (CHRONIC):
- Build on what the patient already knows
- Focus on what is new or has changed
- Acknowledge the ongoing effort of long-term management""",
}

DEPTH_GUIDANCE = {
    RiskAppetite.MINIMAL: """INFORMATION DEPTH (MINIMAL):
- Brief, essential information only
- Focus on the actions required now
- Do not dwell on complications""",
    RiskAppetite.DETAILED: """INFORMATION DEPTH (DETAILED):
- Comprehensive explanations
- Include percentages and statistics where the note provides them
- Discuss possible complications and less common scenarios""",
}


# =============================================================================
# STAGE 3: SECTION GUIDELINES
# =============================================================================
# Content rules per section; {emergency} and {fallback} are filled per language.

SECTION_CONTENT_RULES = {
    DocumentSection.DIAGNOSIS_EXPLANATION: """   - Name the diagnosis in plain language
   - Explain simply what it means for the body
   - Translate relevant test results into understandable terms
   - Do not overwhelm with medical detail""",
    DocumentSection.LIFESTYLE_GUIDANCE: """   - Practical, actionable daily instructions
   - Diet, fluids, physical activity
   - Daily self-monitoring (weight, symptoms)
   - What to do and what to avoid, with concrete amounts (liters, grams, minutes)""",
    DocumentSection.SIX_MONTH_TIMELINE: """   - Phases: first 2 weeks, 1-3 months, 3-6 months
   - Physical changes to expect in each phase
   - Expected improvements and adjustments
   - Follow-up schedule""",
    DocumentSection.LONG_TERM_LIFE_IMPACT: """   - Long-term effect on daily life
   - What the patient CAN do (work, travel, hobbies)
   - What the patient MUST do (medications, check-ups)
   - Realistic but hopeful perspective""",
    DocumentSection.MEDICATIONS: """   - For each medication: name and dose, when to take it, what it does, what happens if it is missed
   - Never stop a medication without talking to the care team
   - If details are missing, write: "{fallback}\"""",
    DocumentSection.WARNING_SIGNS: """   - Concrete symptoms that need immediate action
   - When to call the emergency number {emergency}
   - When to contact the clinic instead
   - ALWAYS write this section, even if the note has no details""",
    DocumentSection.CONTACTS: """   - Treating physician with phone and email if given in the note
   - Nurse line, support line, pharmacy
   - Emergency number {emergency} and the situations that need it
   - Next appointment date if known
   - If contacts are missing, write: "{fallback}\"""",
}


# =============================================================================
# STAGE 4: SAFETY RULES
# =============================================================================

SAFETY_RULES_TEMPLATE = """CRITICAL SAFETY RULES:

1. NEVER SPECULATE:
   - Missing medication details → say the care team will provide specific instructions
   - Unclear prognosis → say the care team will guide the patient
   - Missing contacts → "{fallback}"

2. ALWAYS INCLUDE WARNING SIGNS:
   - Even if the note lacks details, list general emergency symptoms for the condition
   - Always tell the patient to call {emergency} in an emergency

3. MEDICATION SAFETY:
   - Never stop medications without consulting the care team
   - If dosing is unclear, say the care team will clarify it
   - Never write doses that are not in the note

4. NO HEDGING:
   - Never write phrases such as {forbidden}
   - Replace them with an actionable redirect: "{fallback}"

5. COMPLETENESS:
   - All 7 sections MUST be present
   - Each section MUST contain at least {min_length} characters of substantive text
   - Never answer a section with "N/A", "None" or "Not applicable\""""


# =============================================================================
# STAGE 5: PROMPT BUILDER CLASS
# =============================================================================


class PromptBuilder:
    """
    Constructs prompts for patient document generation.

    What it does:
        Takes a canonical profile and a technical note and produces the user
        prompt for the backend. On the corrective attempt, prepends a block
        that lists every failure of the previous attempt.

    Why it exists:
        1. Centralizes prompt logic for maintainability
        2. Keeps the prompt's safety rules aligned with the validator's checks
        3. Enables testing prompts without making LLM calls

    Example:
        >>> builder = PromptBuilder()
        >>> prompt = builder.compose(profile, technical_note)
        >>> retry_prompt = builder.compose(profile, technical_note, retry_context=result)
    """

    system_prompt = SYSTEM_PROMPT

    def __init__(self, emergency_number: str = DEFAULT_EMERGENCY_NUMBER):
        self._emergency_number = emergency_number

    # =========================================================================
    # 5.1 Full Document Prompt
    # =========================================================================

    def compose(
        self,
        profile: PatientProfile,
        technical_note: str,
        retry_context: Optional[ValidationResult] = None,
    ) -> str:
        """
        Build the complete generation prompt.

        Args:
            profile: Canonical patient profile
            technical_note: Clinician's technical note
            retry_context: Result of the failed previous attempt (retry only)

        Returns:
            Prompt string ready for the backend
        """
        conventions = get_conventions(profile.language)

        blocks = [
            self.build_task_header(profile, technical_note),
            self.build_personalization(profile),
            self.build_section_guidelines(conventions),
            conventions.register_rules + f"\n- Phone format: {conventions.phone_format}",
            self.build_safety_rules(conventions),
            f"Generate the complete patient communication document in "
            f"{profile.language.value} with all 7 sections.",
        ]
        prompt = "\n\n".join(blocks)

        if retry_context is not None:
            prompt = self.build_retry_block(retry_context, conventions) + "\n\n" + prompt

        return prompt

    def build_task_header(self, profile: PatientProfile, technical_note: str) -> str:
        return f"""Generate a patient-friendly medical communication document with exactly 7 sections, written entirely in {profile.language.value}, based on the following.

TECHNICAL CLINICAL NOTE:
{technical_note}

PATIENT PROFILE:
- Age: {profile.age}
- Sex: {profile.sex.value}
- Health Literacy: {profile.health_literacy.value}
- Language: {profile.language.value}
- Journey Type: {profile.journey_type.value if profile.journey_type else "Not specified"}
- Mental State: {profile.mental_state or "Not specified"}
- Comorbidities: {profile.comorbidities or "None"}
- Smoking Status: {profile.smoking_status or "Not specified"}
- Information Preference: {profile.risk_appetite.value}"""

    def build_personalization(self, profile: PatientProfile) -> str:
        """
        Build the personalization block.

        Literacy always contributes exactly one regime. Age band, mental
        state, journey type and information depth contribute only when they
        call for a change from the default register.
        """
        parts: List[str] = ["PERSONALIZATION REQUIREMENTS:", LITERACY_GUIDANCE[profile.health_literacy]]

        if profile.age < 40:
            parts.append(YOUNGER_AGE_GUIDANCE)
        elif profile.age >= 65:
            parts.append(OLDER_AGE_GUIDANCE)

        if profile.mental_state:
            mental_state = profile.mental_state.lower()
            if "anxious" in mental_state or "anxiety" in mental_state:
                parts.append(ANXIOUS_GUIDANCE)
            elif "depress" in mental_state:
                parts.append(DEPRESSED_GUIDANCE)

        if profile.journey_type in JOURNEY_GUIDANCE:
            parts.append(JOURNEY_GUIDANCE[profile.journey_type])

        if profile.risk_appetite in DEPTH_GUIDANCE:
            parts.append(DEPTH_GUIDANCE[profile.risk_appetite])

        return "\n\n".join(parts)

    def build_section_guidelines(self, conventions: LanguageConventions) -> str:
        lines = ["SECTION GUIDELINES (use these titles and JSON keys):"]
        for section in DocumentSection:
            rules = SECTION_CONTENT_RULES[section].format(
                emergency=self._emergency_number, fallback=conventions.care_team_fallback
            )
            lines.append(
                f"\n{section.position}. {conventions.title_for(section)} "
                f"(key: {section.value}):\n{rules}"
            )
        return "\n".join(lines)

    def build_safety_rules(self, conventions: LanguageConventions) -> str:
        forbidden = ", ".join(f'"{phrase}"' for phrase in conventions.forbidden_phrases[:4])
        return SAFETY_RULES_TEMPLATE.format(
            emergency=self._emergency_number,
            fallback=conventions.care_team_fallback,
            forbidden=forbidden,
            min_length=MIN_SECTION_LENGTH,
        )

    def build_retry_block(
        self, retry_context: ValidationResult, conventions: LanguageConventions
    ) -> str:
        """
        Build the corrective block prepended on the second attempt.

        Lists the previous failures verbatim, asks for each to be corrected
        and restates the hard constraints.
        """
        return f"""PREVIOUS ATTEMPT FAILED WITH:
{retry_context.summary()}

Correct EVERY failure listed above in this attempt.

CRITICAL REQUIREMENTS FOR THIS RETRY:
- ALL 7 sections MUST be present and substantive (minimum {MIN_SECTION_LENGTH} characters each)
- The {conventions.title_for(DocumentSection.WARNING_SIGNS)} section MUST include the emergency number {self._emergency_number} and when to call it
- Never use phrases like "I don't know" or "unclear from notes"
- Where information is unknown, write: "{conventions.care_team_fallback}"
- Never answer a section with "N/A", "None" or "Not applicable\""""

    # =========================================================================
    # 5.2 Single Section Prompt
    # =========================================================================

    def build_section_prompt(
        self,
        section: DocumentSection,
        profile: PatientProfile,
        technical_note: str,
        current_content: Optional[str] = None,
    ) -> str:
        """
        Build the prompt for regenerating one section.

        The model is told to return only that section's body text, in the
        patient's language, without title or separators.
        """
        conventions = get_conventions(profile.language)
        title = conventions.title_for(section)

        blocks = [
            self.build_task_header(profile, technical_note),
            self.build_personalization(profile),
            self.build_section_guidelines(conventions),
            conventions.register_rules + f"\n- Phone format: {conventions.phone_format}",
            self.build_safety_rules(conventions),
            f"""CRITICAL INSTRUCTIONS:
- You are regenerating ONLY this section: "{title}"
- Return ONLY the body text of this section
- Do NOT include the section title, separators or other sections
- Follow all personalization requirements for this patient

Current content (for context):
{current_content or "(empty)"}

Generate improved content for the section "{title}" in {profile.language.value}.""",
        ]
        return "\n\n".join(blocks)
