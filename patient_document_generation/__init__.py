"""
Patient Document Generation Module

Turns a clinician's technical note plus a patient profile into a structured,
clinically-safe, patient-facing document, validated before release.

Architecture Overview:
    patient_document_generation/
    ├── core/           → Domain models, enums, constants, configuration (Layer 0 - Pure)
    ├── profile/        → Profile normalization (Layer 1 - Business Logic)
    ├── clients/        → LLM client abstractions (Layer 2 - Infrastructure)
    ├── validation/     → Document safety gate (Layer 3 - Business Logic)
    ├── generation/     → Prompts, generation call, retry loop (Layer 4 - Business Logic)
    ├── presentation/   → Editable sections and flat text (Layer 5 - Presentation)
    └── pipeline.py     → Main orchestrator (Layer 6 - Public API)

Quick Start:
    from patient_document_generation import PatientDocumentPipeline

    pipeline = PatientDocumentPipeline.from_environment()
    outcome = pipeline.generate(technical_note, {"language": "estonian"})

Author: Shubham Singh
Date: October 2026
"""

__version__ = "1.0.0"
__author__ = "Shubham Singh"

# =============================================================================
# PUBLIC API EXPORTS
# =============================================================================

# Main Entry Point
from patient_document_generation.pipeline import PatientDocumentPipeline

# Core Models
from patient_document_generation.core.models import (
    PatientProfile,
    PatientDocument,
    ValidationResult,
    Section,
    GenerationOutcome,
)

# Enums
from patient_document_generation.core.enums import (
    Language,
    HealthLiteracy,
    DocumentSection,
    FailureKind,
    RetryState,
)

# Configuration
from patient_document_generation.core.config import PipelineConfiguration

# Standalone operations
from patient_document_generation.profile import normalize_profile
from patient_document_generation.validation import validate_document
from patient_document_generation.presentation import (
    to_sections,
    from_sections,
    parse_sections,
    sections_to_document,
)

__all__ = [
    # Main Entry Point (use this!)
    "PatientDocumentPipeline",
    # Core Models
    "PatientProfile",
    "PatientDocument",
    "ValidationResult",
    "Section",
    "GenerationOutcome",
    # Enums
    "Language",
    "HealthLiteracy",
    "DocumentSection",
    "FailureKind",
    "RetryState",
    # Configuration
    "PipelineConfiguration",
    # Operations
    "normalize_profile",
    "validate_document",
    "to_sections",
    "from_sections",
    "parse_sections",
    "sections_to_document",
]
