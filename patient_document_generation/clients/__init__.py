"""
Clients Layer - LLM API Client Abstractions

This layer provides clean abstractions over text-generation backends
(Gemini, OpenAI and OpenAI-compatible gateways), enabling the rest of the
system to work with any provider interchangeably.

Submodules:
    llm_client.py    → Protocol and base implementation
    gemini_client.py → Google Gemini implementation
    openai_client.py → OpenAI implementation

Author: Shubham Singh
Date: October 2026
"""

from patient_document_generation.clients.llm_client import (
    LLMClientProtocol,
    BaseLLMClient,
)
from patient_document_generation.clients.gemini_client import GeminiClient
from patient_document_generation.clients.openai_client import OpenAIClient

__all__ = [
    "LLMClientProtocol",
    "BaseLLMClient",
    "GeminiClient",
    "OpenAIClient",
]
