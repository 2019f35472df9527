"""Pytest configuration and shared fixtures.

This module provides:
- A canonical valid patient document (passes with no errors and no warnings)
- A scripted fake LLM client that records every call
- Profile and configuration fixtures
"""

from typing import Any, Dict, List, Optional

import pytest

from patient_document_generation.core.config import PipelineConfiguration
from patient_document_generation.profile import normalize_profile


# =============================================================================
# Document Fixtures
# =============================================================================

VALID_DOCUMENT: Dict[str, str] = {
    "diagnosis_explanation": (
        "You have heart failure. This means your heart muscle does not pump blood as "
        "strongly as it should, so fluid can build up in your lungs and legs. With "
        "treatment and daily habits, most people feel much better within weeks."
    ),
    "lifestyle_guidance": (
        "Weigh yourself every morning after using the toilet and write it down. Keep "
        "salt low and drink no more than 1.5 liters of fluid daily. Walk for 20 minutes "
        "each day and rest when you feel tired."
    ),
    "six_month_timeline": (
        "First 2 weeks: rest at home and take short walks. Months 1-3: your breathing "
        "should improve and you can slowly do more. Months 3-6: most daily activities "
        "return. You will have check-ups every 4 to 6 weeks."
    ),
    "long_term_life_impact": (
        "Heart failure is a long-term condition, but you can live an active life. You "
        "can work, travel and enjoy hobbies if you take your medicines every day, follow "
        "the salt and fluid limits and attend regular check-ups."
    ),
    "medications": (
        "Metoprolol 50 mg: take one tablet every morning to slow your heart rate and "
        "protect your heart. Furosemide 40 mg: take one tablet every morning to remove "
        "extra fluid. If you miss a dose, take it when you remember, but never take two "
        "doses together."
    ),
    "warning_signs": (
        "Call 112 or go to the emergency department immediately if you have chest pain, "
        "severe shortness of breath, fainting or coughing up pink foam. Contact your "
        "clinic within a day if your weight rises by more than 2 kg in 3 days."
    ),
    "contacts": (
        "Cardiology clinic nurse line: +372 612 3456 (weekdays 8-16). Email: "
        "cardio@clinic.ee. Your next appointment is with Dr. Tamm on 12 March at 10:00. "
        "For emergencies at any time, call 112."
    ),
}

TECHNICAL_NOTE = (
    "72M admitted with acute decompensated HFrEF, EF 30%. NYHA III. Diuresed with IV "
    "furosemide, transitioned to PO furosemide 40 mg daily. Metoprolol succinate 50 mg "
    "daily. Follow-up cardiology clinic in 2 weeks. Daily weights, 1.5 L fluid restriction."
)


@pytest.fixture
def valid_document() -> Dict[str, str]:
    """A fresh copy of the canonical valid document."""
    return dict(VALID_DOCUMENT)


@pytest.fixture
def technical_note() -> str:
    return TECHNICAL_NOTE


# =============================================================================
# Profile Fixtures
# =============================================================================


@pytest.fixture
def english_profile():
    return normalize_profile({"age": 72, "sex": "male", "language": "english"})


@pytest.fixture
def estonian_profile():
    return normalize_profile(
        {"age": 58, "language": "estonian", "healthLiteracy": "low", "journeyType": "emergency"}
    )


# =============================================================================
# Fake LLM Client
# =============================================================================


class FakeLLMClient:
    """Scripted LLM client.

    Each queued response is returned in order; a queued exception instance
    is raised instead. Every call is recorded in ``calls``.
    """

    provider_name = "fake"
    model_name = "fake-model"

    def __init__(
        self,
        structured_responses: Optional[List[Any]] = None,
        text_responses: Optional[List[Any]] = None,
    ):
        self._structured = list(structured_responses or [])
        self._text = list(text_responses or [])
        self.calls: List[Dict[str, Any]] = []

    def generate_structured(self, system_prompt, user_prompt, schema, temperature, max_output_tokens):
        self.calls.append(
            {
                "kind": "structured",
                "system_prompt": system_prompt,
                "user_prompt": user_prompt,
                "schema": schema,
                "temperature": temperature,
                "max_output_tokens": max_output_tokens,
            }
        )
        return self._next(self._structured)

    def generate_text(self, system_prompt, user_prompt, temperature, max_output_tokens):
        self.calls.append(
            {
                "kind": "text",
                "system_prompt": system_prompt,
                "user_prompt": user_prompt,
                "temperature": temperature,
                "max_output_tokens": max_output_tokens,
            }
        )
        return self._next(self._text)

    @staticmethod
    def _next(queue: List[Any]) -> Any:
        if not queue:
            raise AssertionError("FakeLLMClient called more times than scripted")
        response = queue.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    @property
    def user_prompts(self) -> List[str]:
        return [call["user_prompt"] for call in self.calls]


@pytest.fixture
def fake_llm():
    """Factory for scripted fake LLM clients."""

    def _make(structured=None, text=None) -> FakeLLMClient:
        return FakeLLMClient(structured_responses=structured, text_responses=text)

    return _make


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture
def config() -> PipelineConfiguration:
    return PipelineConfiguration(gemini_api_key="test-key", rate_limit_delay=0.0)


@pytest.fixture
def clean_env(monkeypatch):
    """Remove every pipeline setting from the environment."""
    for name in (
        "LLM_PROVIDER",
        "GEMINI_API_KEY",
        "GOOGLE_API_KEY",
        "GEMINI_MODEL",
        "OPENAI_API_KEY",
        "OPENAI_MODEL",
        "OPENAI_BASE_URL",
        "REQUEST_TIMEOUT",
        "RATE_LIMIT_DELAY",
        "MAX_NOTE_LENGTH",
        "EMERGENCY_NUMBER",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch
