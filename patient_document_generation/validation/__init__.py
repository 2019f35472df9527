"""
Validation Layer - Patient Document Safety Gate

Submodules:
    document_validator.py → Structural, content and safety checks

Dependency Rule:
    This layer depends on: core
    This layer is used by: generation (retry controller), pipeline
"""

from patient_document_generation.validation.document_validator import (
    DocumentChecks,
    DocumentValidator,
    validate_document,
)

__all__ = [
    "DocumentChecks",
    "DocumentValidator",
    "validate_document",
]
