"""
Gemini Client - Google Gemini API Implementation

This module provides the concrete implementation of LLMClient for
Google's Gemini API (gemini-2.5-flash, gemini-2.5-pro, etc.)

Structured output uses Gemini's JSON response mode with a response schema,
so the model returns the seven sections as one JSON object.

Author: Shubham Singh
Date: October 2026
"""

from typing import Any, Dict

from loguru import logger

from patient_document_generation.clients.llm_client import BaseLLMClient
from patient_document_generation.core.exceptions import (
    MalformedResponseError,
    UpstreamUnavailableError,
)


# =============================================================================
# STAGE 1: GEMINI CLIENT IMPLEMENTATION
# =============================================================================


class GeminiClient(BaseLLMClient):
    """
    Google Gemini API client.

    What it does:
        Sends the system instructions, the user prompt and (for documents)
        the output schema to Gemini, and returns the raw result.

    Why it exists:
        1. Encapsulates Gemini-specific API logic
        2. Applies permissive safety settings (clinical content trips filters)
        3. Translates Gemini errors to domain exceptions

    Example:
        >>> client = GeminiClient(api_key="...", model_name="gemini-2.5-flash")
        >>> payload = client.generate_structured(system, prompt, schema, 0.4, 6000)
    """

    SAFETY_SETTINGS = [
        {"category": "HARM_CATEGORY_HARASSMENT", "threshold": "BLOCK_NONE"},
        {"category": "HARM_CATEGORY_HATE_SPEECH", "threshold": "BLOCK_NONE"},
        {"category": "HARM_CATEGORY_SEXUALLY_EXPLICIT", "threshold": "BLOCK_NONE"},
        {"category": "HARM_CATEGORY_DANGEROUS_CONTENT", "threshold": "BLOCK_NONE"},
    ]

    def __init__(
        self,
        api_key: str,
        model_name: str = "gemini-2.5-flash",
        request_timeout: float = 90.0,
        rate_limit_delay: float = 0.5,
    ):
        """
        Initialize Gemini client.

        Args:
            api_key: Google API key (Gemini)
            model_name: Model to use
            request_timeout: Seconds before a call is abandoned
            rate_limit_delay: Seconds between API calls
        """
        super().__init__(
            api_key=api_key,
            model_name=model_name,
            request_timeout=request_timeout,
            rate_limit_delay=rate_limit_delay,
        )

        self._genai = None
        self._initialize_client()

        logger.info(f"GeminiClient initialized | Model: {model_name}")

    def _initialize_client(self) -> None:
        """Configure the google-generativeai SDK."""
        import google.generativeai as genai

        genai.configure(api_key=self._api_key)
        self._genai = genai

    # =========================================================================
    # STAGE 2: API CALL IMPLEMENTATION
    # =========================================================================

    def _call_structured(
        self,
        system_prompt: str,
        user_prompt: str,
        schema: Dict[str, Any],
        temperature: float,
        max_output_tokens: int,
    ) -> str:
        generation_config = self._genai.GenerationConfig(
            temperature=temperature,
            max_output_tokens=max_output_tokens,
            response_mime_type="application/json",
            response_schema=to_gemini_schema(schema),
        )
        return self._generate(system_prompt, user_prompt, generation_config)

    def _call_text(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float,
        max_output_tokens: int,
    ) -> str:
        generation_config = self._genai.GenerationConfig(
            temperature=temperature,
            max_output_tokens=max_output_tokens,
        )
        return self._generate(system_prompt, user_prompt, generation_config)

    def _generate(self, system_prompt: str, user_prompt: str, generation_config) -> str:
        """
        Make the actual Gemini API call.

        Raises:
            UpstreamUnavailableError: Prompt blocked by safety filters
            MalformedResponseError: Empty candidate
            Exception: SDK errors, translated by the base class
        """
        model = self._genai.GenerativeModel(
            model_name=self._model_name,
            system_instruction=system_prompt,
            safety_settings=self.SAFETY_SETTINGS,
            generation_config=generation_config,
        )
        response = model.generate_content(
            user_prompt,
            request_options={"timeout": self._request_timeout},
        )

        feedback = getattr(response, "prompt_feedback", None)
        if feedback is not None and getattr(feedback, "block_reason", None):
            raise UpstreamUnavailableError(
                f"Gemini blocked the prompt: {feedback.block_reason}", provider="gemini"
            )

        if response.candidates:
            candidate = response.candidates[0]
            if candidate.content and candidate.content.parts:
                return "".join(part.text for part in candidate.content.parts if part.text)

        raise MalformedResponseError("Gemini returned empty response", provider="gemini")

    # =========================================================================
    # STAGE 3: PROPERTIES
    # =========================================================================

    @property
    def provider_name(self) -> str:
        """Return provider name."""
        return "gemini"


# =============================================================================
# STAGE 4: SCHEMA CONVERSION
# =============================================================================


def to_gemini_schema(schema: Dict[str, Any]) -> Dict[str, Any]:
    """
    Reduce a JSON schema to the OpenAPI subset Gemini accepts.

    Gemini rejects ``title``, ``additionalProperties`` and ``$defs``; the
    closed-schema guarantee is enforced locally by the document generator.
    """
    unsupported = {"title", "additionalProperties", "$defs", "$schema"}
    reduced: Dict[str, Any] = {}
    for key, value in schema.items():
        if key in unsupported:
            continue
        if key == "properties":
            reduced[key] = {name: to_gemini_schema(prop) for name, prop in value.items()}
        else:
            reduced[key] = value
    return reduced
