"""
Document Generator - One Constrained Generation Call

This module issues a single structured call to the text-generation backend
and turns the reply into a PatientDocument.

Why Separate from the Retry Controller:
    1. Single Responsibility: this class only handles the LLM boundary
    2. Dependency injection: the LLM client is injected
    3. No retries here: the controller owns retries so that the prompt can
       differ between the first and the corrective attempt

The Closed Schema:
    The backend is asked for exactly seven string fields. The reply is
    untrusted: it is re-checked against the same pydantic model, which
    forbids extra keys, missing keys and non-string values.

Pipeline Position:
    PromptBuilder → [DocumentGenerator] → DocumentValidator
                     ^^^^^^^^^^^^^^^^^
                     You are here

Author: Shubham Singh
Date: October 2026
"""

from typing import Any, Dict

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, StrictStr, ValidationError

from patient_document_generation.clients.llm_client import LLMClientProtocol
from patient_document_generation.core.constants import (
    GENERATION_TEMPERATURE,
    MAX_OUTPUT_TOKENS,
)
from patient_document_generation.core.exceptions import MalformedResponseError
from patient_document_generation.core.models import PatientDocument
from patient_document_generation.generation.prompt_builder import SYSTEM_PROMPT


# =============================================================================
# STAGE 1: OUTPUT SCHEMA
# =============================================================================


class PatientDocumentSchema(BaseModel):
    """Closed 7-key output schema sent to, and enforced on, the backend."""

    model_config = ConfigDict(extra="forbid", title="PatientDocument")

    diagnosis_explanation: StrictStr = Field(
        description="What the patient has: the diagnosis in plain language"
    )
    lifestyle_guidance: StrictStr = Field(
        description="How the patient should live next: diet, activity, daily monitoring"
    )
    six_month_timeline: StrictStr = Field(
        description="What the next six months look like, phase by phase"
    )
    long_term_life_impact: StrictStr = Field(
        description="What the condition means for the patient's life in the long term"
    )
    medications: StrictStr = Field(
        description="Each medication with dose, timing, purpose and what to do if missed"
    )
    warning_signs: StrictStr = Field(
        description="Symptoms needing immediate action and when to call the emergency number"
    )
    contacts: StrictStr = Field(
        description="Care team contacts, emergency number and next appointment"
    )


def document_schema() -> Dict[str, Any]:
    """JSON schema of the closed output structure."""
    schema = PatientDocumentSchema.model_json_schema()
    schema["additionalProperties"] = False
    return schema


# =============================================================================
# STAGE 2: DOCUMENT GENERATOR CLASS
# =============================================================================


class DocumentGenerator:
    """
    Issues one constrained generation call and parses the result.

    What it does:
        Sends the system prompt, the composed user prompt and the closed
        schema to the backend with a fixed temperature and output bound,
        then validates the returned object.

    Why it exists:
        1. Keeps the LLM boundary in one place
        2. Turns any schema violation into MalformedResponseError
        3. Leaves retry policy to the RetryController

    Example:
        >>> generator = DocumentGenerator(llm_client)
        >>> document = generator.invoke(prompt)
    """

    def __init__(self, llm_client: LLMClientProtocol, system_prompt: str = SYSTEM_PROMPT):
        self._llm_client = llm_client
        self._system_prompt = system_prompt
        self._schema = document_schema()
        self._invocation_count = 0

        logger.debug(
            f"DocumentGenerator initialized | Provider: {llm_client.provider_name} | "
            f"Model: {llm_client.model_name}"
        )

    def invoke(self, prompt: str) -> PatientDocument:
        """
        Generate one patient document.

        Args:
            prompt: Composed user prompt

        Returns:
            PatientDocument with all seven sections populated

        Raises:
            UpstreamError: Backend unreachable, rate-limited, payment required
            MalformedResponseError: Reply does not match the closed schema
        """
        self._invocation_count += 1
        logger.info(f"Invoking {self._llm_client.provider_name} | Prompt length: {len(prompt)}")

        raw = self._llm_client.generate_structured(
            system_prompt=self._system_prompt,
            user_prompt=prompt,
            schema=self._schema,
            temperature=GENERATION_TEMPERATURE,
            max_output_tokens=MAX_OUTPUT_TOKENS,
        )
        return self.parse(raw)

    def parse(self, raw: Any) -> PatientDocument:
        """
        Check an untrusted reply against the closed schema.

        Raises:
            MalformedResponseError: Not an object, missing or extra keys,
                or non-string values
        """
        if not isinstance(raw, dict):
            raise MalformedResponseError(
                f"Expected a JSON object, got {type(raw).__name__}",
                provider=self._llm_client.provider_name,
            )

        try:
            parsed = PatientDocumentSchema.model_validate(raw)
        except ValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(part) for part in err['loc']) or '<root>'}: {err['type']}"
                for err in e.errors()
            )
            logger.error(f"Malformed generation result | {problems}")
            raise MalformedResponseError(
                f"Generation result does not match the 7-section schema ({problems})",
                provider=self._llm_client.provider_name,
            ) from e

        return PatientDocument(**parsed.model_dump())

    @property
    def invocation_count(self) -> int:
        return self._invocation_count
