"""
Presentation Layer - Editable Sections and Flat Text

Submodules:
    section_mapper.py → Document ↔ sections ↔ flat text

Dependency Rule:
    This layer depends on: core
    This layer is used by: pipeline, command-line entry point
"""

from patient_document_generation.presentation.section_mapper import (
    document_to_text,
    from_sections,
    parse_sections,
    sections_to_document,
    to_sections,
)

__all__ = [
    "to_sections",
    "from_sections",
    "parse_sections",
    "sections_to_document",
    "document_to_text",
]
