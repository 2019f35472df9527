"""Tests for prompt composition."""

import pytest

from patient_document_generation.core.constants import ESTONIAN_CONVENTIONS, RUSSIAN_CONVENTIONS
from patient_document_generation.core.enums import DocumentSection
from patient_document_generation.core.models import ValidationResult
from patient_document_generation.generation import PromptBuilder
from patient_document_generation.profile import normalize_profile


@pytest.fixture
def builder():
    return PromptBuilder()


class TestCompose:
    def test_is_deterministic(self, builder, english_profile, technical_note):
        assert builder.compose(english_profile, technical_note) == builder.compose(
            english_profile, technical_note
        )

    def test_contains_note_and_target_language(self, builder, estonian_profile, technical_note):
        prompt = builder.compose(estonian_profile, technical_note)
        assert technical_note in prompt
        assert "exactly 7 sections" in prompt
        assert "written entirely in estonian" in prompt

    def test_blocks_appear_in_fixed_order(self, builder, english_profile, technical_note):
        prompt = builder.compose(english_profile, technical_note)
        markers = [
            "TECHNICAL CLINICAL NOTE:",
            "PERSONALIZATION REQUIREMENTS:",
            "SECTION GUIDELINES",
            "ENGLISH LANGUAGE GUIDELINES:",
            "CRITICAL SAFETY RULES:",
        ]
        positions = [prompt.index(marker) for marker in markers]
        assert positions == sorted(positions)

    def test_no_retry_block_on_first_attempt(self, builder, english_profile, technical_note):
        assert "PREVIOUS ATTEMPT FAILED WITH" not in builder.compose(
            english_profile, technical_note
        )

    def test_unresolved_optional_fields_never_render_none(self, builder, technical_note):
        prompt = builder.compose(normalize_profile({}), technical_note)
        assert "Journey Type: Not specified" in prompt
        assert "Mental State: Not specified" in prompt
        assert "Language: english" in prompt
        assert "Health Literacy: medium" in prompt


class TestPersonalization:
    @pytest.mark.parametrize(
        "literacy, marker",
        [("low", "HEALTH LITERACY (LOW)"), ("medium", "HEALTH LITERACY (MEDIUM)"), ("high", "HEALTH LITERACY (HIGH)")],
    )
    def test_exactly_one_literacy_regime(self, builder, literacy, marker):
        block = builder.build_personalization(normalize_profile({"healthLiteracy": literacy}))
        assert marker in block
        assert block.count("HEALTH LITERACY (") == 1

    @pytest.mark.parametrize(
        "age, expected, unexpected",
        [
            (30, "YOUNGER THAN 40", "65 AND OLDER"),
            (65, "65 AND OLDER", "YOUNGER THAN 40"),
        ],
    )
    def test_age_band(self, builder, age, expected, unexpected):
        block = builder.build_personalization(normalize_profile({"age": age}))
        assert expected in block
        assert unexpected not in block

    def test_middle_age_has_no_age_block(self, builder):
        block = builder.build_personalization(normalize_profile({"age": 50}))
        assert "AGE (" not in block

    @pytest.mark.parametrize(
        "journey, marker",
        [
            ("emergency", "JOURNEY TYPE (EMERGENCY)"),
            ("first-time", "JOURNEY TYPE (FIRST-TIME)"),
            ("chronic", "JOURNEY TYPE (CHRONIC)"),
        ],
    )
    def test_journey_framing(self, builder, journey, marker):
        block = builder.build_personalization(normalize_profile({"journeyType": journey}))
        assert marker in block

    def test_elective_journey_adds_nothing(self, builder):
        block = builder.build_personalization(normalize_profile({"journeyType": "elective"}))
        assert "JOURNEY TYPE" not in block

    @pytest.mark.parametrize(
        "appetite, marker",
        [("minimal", "INFORMATION DEPTH (MINIMAL)"), ("detailed", "INFORMATION DEPTH (DETAILED)")],
    )
    def test_information_depth(self, builder, appetite, marker):
        block = builder.build_personalization(normalize_profile({"riskAppetite": appetite}))
        assert marker in block

    def test_moderate_depth_adds_nothing(self, builder):
        block = builder.build_personalization(normalize_profile({}))
        assert "INFORMATION DEPTH" not in block

    def test_anxious_mental_state(self, builder):
        block = builder.build_personalization(normalize_profile({"mentalState": "Very anxious"}))
        assert "MENTAL STATE (ANXIOUS)" in block


class TestLocalization:
    @pytest.mark.parametrize(
        "language, conventions, register_marker",
        [
            ("estonian", ESTONIAN_CONVENTIONS, "Teie"),
            ("russian", RUSSIAN_CONVENTIONS, "Вы"),
        ],
    )
    def test_localized_titles_and_register(
        self, builder, technical_note, language, conventions, register_marker
    ):
        prompt = builder.compose(normalize_profile({"language": language}), technical_note)
        for title in conventions.section_titles:
            assert title in prompt
        assert register_marker in prompt
        assert "+372 XXX XXXX" in prompt

    def test_section_keys_listed_in_order(self, builder, english_profile, technical_note):
        prompt = builder.compose(english_profile, technical_note)
        positions = [prompt.index(f"(key: {section.value})") for section in DocumentSection]
        assert positions == sorted(positions)


class TestSafetyRules:
    def test_emergency_number_is_configurable(self, english_profile, technical_note):
        prompt = PromptBuilder(emergency_number="911").compose(english_profile, technical_note)
        assert "call 911" in prompt
        assert "112" not in prompt

    def test_mentions_minimum_length(self, builder, english_profile, technical_note):
        assert "at least 50 characters" in builder.compose(english_profile, technical_note)


class TestRetryBlock:
    def test_retry_block_is_prepended_with_every_error(self, builder, english_profile, technical_note):
        failed = ValidationResult.from_findings(
            ["Missing section: contacts", "Section too short: medications (3 chars, minimum 50)"],
            [],
        )
        prompt = builder.compose(english_profile, technical_note, retry_context=failed)
        assert prompt.startswith("PREVIOUS ATTEMPT FAILED WITH:")
        assert "1. Missing section: contacts" in prompt
        assert "2. Section too short: medications (3 chars, minimum 50)" in prompt
        assert "Correct EVERY failure" in prompt

    def test_retry_block_restates_hard_constraints(self, builder, estonian_profile, technical_note):
        failed = ValidationResult.from_findings(["Missing section: contacts"], [])
        block = builder.compose(estonian_profile, technical_note, retry_context=failed).split(
            "TECHNICAL CLINICAL NOTE:"
        )[0]
        assert "minimum 50 characters" in block
        assert "HOIATAVAD MÄRGID" in block
        assert "112" in block
        assert "I don't know" in block
        assert ESTONIAN_CONVENTIONS.care_team_fallback in block

    def test_remaining_prompt_unchanged_by_retry(self, builder, english_profile, technical_note):
        first = builder.compose(english_profile, technical_note)
        failed = ValidationResult.from_findings(["Missing section: contacts"], [])
        retry = builder.compose(english_profile, technical_note, retry_context=failed)
        assert retry.endswith(first)


class TestSectionPrompt:
    def test_asks_for_body_only(self, builder, english_profile, technical_note):
        prompt = builder.build_section_prompt(
            DocumentSection.MEDICATIONS, english_profile, technical_note, "Old text"
        )
        assert 'regenerating ONLY this section: "MY MEDICATIONS"' in prompt
        assert "Do NOT include the section title" in prompt
        assert "Old text" in prompt
