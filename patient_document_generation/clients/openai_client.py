"""
OpenAI Client - OpenAI API Implementation

This module provides the concrete implementation of LLMClient for OpenAI's
chat completions API and for OpenAI-compatible gateways (set ``base_url``).

Structured output is requested as a forced function call whose parameters
are the closed document schema; the function arguments are the document.

Author: Shubham Singh
Date: October 2026
"""

from typing import Any, Dict, Optional

from loguru import logger

from patient_document_generation.clients.llm_client import BaseLLMClient
from patient_document_generation.core.constants import (
    STRUCTURED_OUTPUT_DESCRIPTION,
    STRUCTURED_OUTPUT_NAME,
)
from patient_document_generation.core.exceptions import MalformedResponseError


# =============================================================================
# STAGE 1: OPENAI CLIENT IMPLEMENTATION
# =============================================================================


class OpenAIClient(BaseLLMClient):
    """
    OpenAI API client.

    Supported Models:
        - gpt-4o-mini (cost-effective, fast)
        - gpt-4o (high quality)
        - any model exposed by an OpenAI-compatible gateway

    Example:
        >>> client = OpenAIClient(api_key="...", model_name="gpt-4o-mini")
        >>> payload = client.generate_structured(system, prompt, schema, 0.4, 6000)
    """

    def __init__(
        self,
        api_key: str,
        model_name: str = "gpt-4o-mini",
        base_url: Optional[str] = None,
        request_timeout: float = 90.0,
        rate_limit_delay: float = 0.5,
    ):
        """
        Initialize OpenAI client.

        Args:
            api_key: OpenAI (or gateway) API key
            model_name: Model to use
            base_url: OpenAI-compatible gateway URL (None for api.openai.com)
            request_timeout: Seconds before a call is abandoned
            rate_limit_delay: Seconds between API calls
        """
        super().__init__(
            api_key=api_key,
            model_name=model_name,
            request_timeout=request_timeout,
            rate_limit_delay=rate_limit_delay,
        )

        self._base_url = base_url
        self._client = None
        self._initialize_client()

        logger.info(f"OpenAIClient initialized | Model: {model_name}")

    def _initialize_client(self) -> None:
        """Create the SDK client. The SDK's own retries are disabled."""
        from openai import OpenAI

        self._client = OpenAI(
            api_key=self._api_key,
            base_url=self._base_url,
            timeout=self._request_timeout,
            max_retries=0,
        )

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
        """
        Make a forced function call carrying the document schema.

        Returns:
            JSON text of the function arguments

        Raises:
            MalformedResponseError: No function call in the response
        """
        response = self._client.chat.completions.create(
            model=self._model_name,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            temperature=temperature,
            max_tokens=max_output_tokens,
            tools=[
                {
                    "type": "function",
                    "function": {
                        "name": STRUCTURED_OUTPUT_NAME,
                        "description": STRUCTURED_OUTPUT_DESCRIPTION,
                        "parameters": schema,
                    },
                }
            ],
            tool_choice={"type": "function", "function": {"name": STRUCTURED_OUTPUT_NAME}},
        )

        if response.choices:
            tool_calls = response.choices[0].message.tool_calls
            if tool_calls:
                return tool_calls[0].function.arguments

        raise MalformedResponseError("No structured output received from OpenAI", provider="openai")

    def _call_text(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float,
        max_output_tokens: int,
    ) -> str:
        response = self._client.chat.completions.create(
            model=self._model_name,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            temperature=temperature,
            max_tokens=max_output_tokens,
        )

        if response.choices and response.choices[0].message.content:
            return response.choices[0].message.content

        raise MalformedResponseError("OpenAI returned empty response", provider="openai")

    # =========================================================================
    # STAGE 3: PROPERTIES
    # =========================================================================

    @property
    def provider_name(self) -> str:
        """Return provider name."""
        return "openai"
