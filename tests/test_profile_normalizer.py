"""Tests for patient profile normalization."""

import pytest

from patient_document_generation.core.enums import (
    HealthLiteracy,
    JourneyType,
    Language,
    RiskAppetite,
    Sex,
)
from patient_document_generation.core.exceptions import InvalidProfileError
from patient_document_generation.profile import ProfileNormalizer, normalize_profile


class TestDefaults:
    @pytest.mark.parametrize("raw", [None, {}])
    def test_empty_profile_gets_every_default(self, raw):
        profile = normalize_profile(raw)

        assert profile.age == 65
        assert profile.sex == Sex.OTHER
        assert profile.language == Language.ENGLISH
        assert profile.health_literacy == HealthLiteracy.MEDIUM
        assert profile.risk_appetite == RiskAppetite.MODERATE
        assert profile.journey_type is None
        assert profile.mental_state is None
        assert profile.comorbidities is None
        assert profile.smoking_status is None

    def test_unknown_values_fall_back(self):
        profile = normalize_profile(
            {
                "language": "klingon",
                "healthLiteracy": "unknown",
                "riskAppetite": 7,
                "journeyType": "teleported",
                "sex": "",
            }
        )
        assert profile.language == Language.ENGLISH
        assert profile.health_literacy == HealthLiteracy.MEDIUM
        assert profile.risk_appetite == RiskAppetite.MODERATE
        assert profile.journey_type is None
        assert profile.sex == Sex.OTHER

    def test_custom_default_age(self):
        assert ProfileNormalizer(default_age=50).normalize({}).age == 50


class TestKeysAndValues:
    def test_camel_case_keys(self):
        profile = normalize_profile(
            {
                "healthLiteracy": "low",
                "journeyType": "emergency",
                "mentalState": "anxious",
                "smokingStatus": "former smoker",
                "riskAppetite": "detailed",
            }
        )
        assert profile.health_literacy == HealthLiteracy.LOW
        assert profile.journey_type == JourneyType.EMERGENCY
        assert profile.mental_state == "anxious"
        assert profile.smoking_status == "former smoker"
        assert profile.risk_appetite == RiskAppetite.DETAILED

    def test_snake_case_keys(self):
        profile = normalize_profile(
            {"health_literacy": "high", "journey_type": "chronic", "risk_appetite": "minimal"}
        )
        assert profile.health_literacy == HealthLiteracy.HIGH
        assert profile.journey_type == JourneyType.CHRONIC
        assert profile.risk_appetite == RiskAppetite.MINIMAL

    def test_gender_is_accepted_for_sex(self):
        assert normalize_profile({"gender": "female"}).sex == Sex.FEMALE

    @pytest.mark.parametrize("value", ["Estonian", " ESTONIAN ", Language.ESTONIAN])
    def test_enum_values_are_case_insensitive(self, value):
        assert normalize_profile({"language": value}).language == Language.ESTONIAN

    @pytest.mark.parametrize("value", ["first-time", "first_time", "First Time"])
    def test_journey_spellings(self, value):
        assert normalize_profile({"journeyType": value}).journey_type == JourneyType.FIRST_TIME

    def test_comorbidity_list_is_joined(self):
        profile = normalize_profile({"comorbidities": ["diabetes", " ", "CKD stage 3"]})
        assert profile.comorbidities == "diabetes, CKD stage 3"

    def test_blank_free_text_becomes_none(self):
        profile = normalize_profile({"mentalState": "   ", "comorbidities": []})
        assert profile.mental_state is None
        assert profile.comorbidities is None


class TestAge:
    @pytest.mark.parametrize(
        "value, expected",
        [
            (72, 72),
            ("72", 72),
            (72.9, 72),
            (130, 130),
            (True, 65),
            ("abc", 65),
            (0, 65),
            (-4, 65),
            (200, 65),
            (float("inf"), 65),
            (float("nan"), 65),
            ([72], 65),
        ],
    )
    def test_age_resolution(self, value, expected):
        assert normalize_profile({"age": value}).age == expected


class TestRejection:
    @pytest.mark.parametrize("raw", [["age", 72], "english", 42])
    def test_non_mapping_is_rejected(self, raw):
        with pytest.raises(InvalidProfileError):
            normalize_profile(raw)
