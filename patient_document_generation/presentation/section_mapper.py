"""
Section Mapper - Document ↔ Editable Sections ↔ Flat Text

This module maps a validated PatientDocument to the ordered, human-editable
list of (title, content) sections shown to the reviewing clinician, and
re-serializes edited sections into the flat text used for storage and
printing.

Flat Text Format:
    ═══════════════════════════════════════════════
    WHAT DO I HAVE
    ═══════════════════════════════════════════════
    <content>

    ═══════════════════════════════════════════════
    HOW SHOULD I LIVE NEXT
    ...

Guarantees:
    - Titles and content are carried verbatim: never summarized, reordered
      or truncated
    - parse_sections(from_sections(sections)) == sections
    - No validation is re-run here; the document was gated upstream

Author: Shubham Singh
Date: October 2026
"""

import re
from typing import List, Sequence, Union

from patient_document_generation.core.constants import SECTION_SEPARATOR, get_conventions
from patient_document_generation.core.enums import DocumentSection, Language
from patient_document_generation.core.models import DocumentLike, PatientDocument, Section


SECTION_JOINER = "\n\n"

_HEADER_PATTERN = re.compile(
    rf"^{re.escape(SECTION_SEPARATOR)}\n(.*)\n{re.escape(SECTION_SEPARATOR)}\n", re.MULTILINE
)


# =============================================================================
# STAGE 1: DOCUMENT → SECTIONS
# =============================================================================


def to_sections(document: DocumentLike, language: Union[Language, str]) -> List[Section]:
    """
    Map a document to its seven sections in fixed order.

    Args:
        document: PatientDocument or a mapping keyed by section name
        language: Language used for the titles (unknown → English)

    Returns:
        Seven Section objects; an absent slot maps to empty content
    """
    conventions = get_conventions(Language.from_value(language, Language.ENGLISH))
    if not isinstance(document, PatientDocument):
        document = PatientDocument.from_dict(document)

    return [
        Section(title=conventions.title_for(section), content=value or "")
        for section, value in document.items()
    ]


def sections_to_document(sections: Sequence[Section]) -> PatientDocument:
    """
    Rebuild a PatientDocument from exactly seven ordered sections.

    Titles are not interpreted; position decides the slot.

    Raises:
        ValueError: If the number of sections is not seven
    """
    if len(sections) != len(DocumentSection):
        raise ValueError(
            f"Expected {len(DocumentSection)} sections, got {len(sections)}"
        )
    return PatientDocument(
        **{section.value: item.content for section, item in zip(DocumentSection, sections)}
    )


# =============================================================================
# STAGE 2: SECTIONS ↔ FLAT TEXT
# =============================================================================


def from_sections(sections: Sequence[Section]) -> str:
    """Serialize sections to flat text with separator-framed titles."""
    return SECTION_JOINER.join(
        f"{SECTION_SEPARATOR}\n{section.title}\n{SECTION_SEPARATOR}\n{section.content}"
        for section in sections
    )


def parse_sections(text: str) -> List[Section]:
    """
    Parse flat text back into sections.

    Each block starts with a title framed by separator lines. Text without
    any framed title is returned as one untitled section, and text before
    the first framed title becomes a leading untitled section. Blank input
    yields an empty list.
    """
    if not text or not text.strip():
        return []

    text = text.replace("\r\n", "\n")
    headers = list(_HEADER_PATTERN.finditer(text))
    if not headers:
        return [Section(title="", content=text.strip())]

    sections = []
    preamble = text[: headers[0].start()]
    if preamble.strip():
        sections.append(Section(title="", content=preamble.strip()))

    for index, match in enumerate(headers):
        is_last = index == len(headers) - 1
        end = len(text) if is_last else headers[index + 1].start()
        content = text[match.end() : end]
        if not is_last and content.endswith(SECTION_JOINER):
            content = content[: -len(SECTION_JOINER)]
        sections.append(Section(title=match.group(1), content=content))
    return sections


def document_to_text(document: DocumentLike, language: Union[Language, str]) -> str:
    """Canonical flat-text rendering of a document."""
    return from_sections(to_sections(document, language))
