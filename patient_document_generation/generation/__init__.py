"""
Generation Layer - Patient Document Generation

This layer composes prompts, calls the text-generation backend and runs the
bounded generation / validation / retry loop.

Submodules:
    prompt_builder.py      → Prompt construction and templates
    document_generator.py  → One constrained call, closed 7-key schema
    retry_controller.py    → At most two attempts, one corrective retry
    section_regenerator.py → Single-section rewrite for reviewers

Dependency Rule:
    This layer depends on: core, clients (LLM), validation
    This layer is used by: pipeline (orchestrator)

Author: Shubham Singh
Date: October 2026
"""

from patient_document_generation.generation.prompt_builder import PromptBuilder, SYSTEM_PROMPT
from patient_document_generation.generation.document_generator import (
    DocumentGenerator,
    PatientDocumentSchema,
    document_schema,
)
from patient_document_generation.generation.retry_controller import RetryController
from patient_document_generation.generation.section_regenerator import SectionRegenerator

__all__ = [
    "PromptBuilder",
    "SYSTEM_PROMPT",
    "DocumentGenerator",
    "PatientDocumentSchema",
    "document_schema",
    "RetryController",
    "SectionRegenerator",
]
