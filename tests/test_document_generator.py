"""Tests for the constrained generation call and the closed output schema."""

import pytest

from patient_document_generation.core.constants import GENERATION_TEMPERATURE, MAX_OUTPUT_TOKENS
from patient_document_generation.core.enums import DocumentSection
from patient_document_generation.core.exceptions import (
    MalformedResponseError,
    RateLimitError,
)
from patient_document_generation.generation import (
    SYSTEM_PROMPT,
    DocumentGenerator,
    document_schema,
)


class TestSchema:
    def test_schema_is_closed_over_seven_string_keys(self):
        schema = document_schema()
        assert schema["type"] == "object"
        assert schema["additionalProperties"] is False
        assert list(schema["properties"]) == DocumentSection.keys()
        assert sorted(schema["required"]) == sorted(DocumentSection.keys())
        for prop in schema["properties"].values():
            assert prop["type"] == "string"
            assert prop["description"]


class TestInvoke:
    def test_returns_document_from_conforming_result(self, fake_llm, valid_document):
        client = fake_llm(structured=[valid_document])
        document = DocumentGenerator(client).invoke("prompt text")
        assert document.to_dict() == valid_document

    def test_sends_fixed_limits_and_schema(self, fake_llm, valid_document):
        client = fake_llm(structured=[valid_document])
        DocumentGenerator(client).invoke("prompt text")
        call = client.calls[0]
        assert call["system_prompt"] == SYSTEM_PROMPT
        assert call["user_prompt"] == "prompt text"
        assert call["temperature"] == GENERATION_TEMPERATURE
        assert call["max_output_tokens"] == MAX_OUTPUT_TOKENS
        assert call["schema"] == document_schema()

    def test_does_not_retry_upstream_errors(self, fake_llm, valid_document):
        client = fake_llm(structured=[RateLimitError("fake"), valid_document])
        with pytest.raises(RateLimitError):
            DocumentGenerator(client).invoke("prompt text")
        assert len(client.calls) == 1


class TestMalformedResults:
    def test_missing_key(self, fake_llm, valid_document):
        del valid_document["contacts"]
        client = fake_llm(structured=[valid_document])
        with pytest.raises(MalformedResponseError, match="contacts"):
            DocumentGenerator(client).invoke("prompt")

    def test_extra_top_level_key(self, fake_llm, valid_document):
        valid_document["notes_for_clinician"] = "Something outside the validated fields."
        client = fake_llm(structured=[valid_document])
        with pytest.raises(MalformedResponseError, match="notes_for_clinician"):
            DocumentGenerator(client).invoke("prompt")

    @pytest.mark.parametrize("value", [42, None, ["a", "b"], {"text": "x"}])
    def test_non_string_value(self, fake_llm, valid_document, value):
        valid_document["medications"] = value
        client = fake_llm(structured=[valid_document])
        with pytest.raises(MalformedResponseError, match="medications"):
            DocumentGenerator(client).invoke("prompt")

    @pytest.mark.parametrize("raw", ["not an object", ["list"], 7])
    def test_non_object_result(self, fake_llm, raw):
        client = fake_llm(structured=[raw])
        with pytest.raises(MalformedResponseError):
            DocumentGenerator(client).invoke("prompt")

    def test_empty_strings_are_left_to_the_validator(self, fake_llm, valid_document):
        valid_document["contacts"] = ""
        client = fake_llm(structured=[valid_document])
        document = DocumentGenerator(client).invoke("prompt")
        assert document.contacts == ""
