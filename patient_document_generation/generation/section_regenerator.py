"""
Section Regenerator - Single-Section Rewrite for Reviewers

A clinician reviewing a generated document may ask for one section to be
rewritten. This module builds a focused prompt from the same composer blocks
and asks the backend for that section's body text only.

Differences from full generation:
    - Plain-text call, bounded to SECTION_MAX_OUTPUT_TOKENS
    - No validation and no retry: the reviewer is the gate
    - Surrounding separators or a repeated title are stripped

Author: Shubham Singh
Date: October 2026
"""

from typing import Optional

from loguru import logger

from patient_document_generation.clients.llm_client import LLMClientProtocol
from patient_document_generation.core.constants import (
    GENERATION_TEMPERATURE,
    SECTION_MAX_OUTPUT_TOKENS,
    SECTION_SEPARATOR,
    get_conventions,
)
from patient_document_generation.core.enums import DocumentSection
from patient_document_generation.core.exceptions import MalformedResponseError
from patient_document_generation.core.models import PatientProfile
from patient_document_generation.generation.prompt_builder import SYSTEM_PROMPT, PromptBuilder


class SectionRegenerator:
    """
    Regenerates the content of one document section.

    Example:
        >>> regenerator = SectionRegenerator(llm_client, PromptBuilder())
        >>> text = regenerator.regenerate(DocumentSection.MEDICATIONS, profile, note, old_text)
    """

    def __init__(self, llm_client: LLMClientProtocol, prompt_builder: Optional[PromptBuilder] = None):
        self._llm_client = llm_client
        self._prompt_builder = prompt_builder or PromptBuilder()

    def regenerate(
        self,
        section: DocumentSection,
        profile: PatientProfile,
        technical_note: str,
        current_content: Optional[str] = None,
    ) -> str:
        """
        Generate replacement content for one section.

        Returns:
            Section body text, without title or separators

        Raises:
            UpstreamError: Backend failure
            MalformedResponseError: Backend returned no usable text
        """
        logger.info(
            f"Regenerating section {section.value} | Language: {profile.language.value}"
        )
        prompt = self._prompt_builder.build_section_prompt(
            section, profile, technical_note, current_content
        )
        raw = self._llm_client.generate_text(
            system_prompt=SYSTEM_PROMPT,
            user_prompt=prompt,
            temperature=GENERATION_TEMPERATURE,
            max_output_tokens=SECTION_MAX_OUTPUT_TOKENS,
        )

        content = self._clean(raw, section, profile)
        if not content:
            raise MalformedResponseError(
                f"No content generated for section {section.value}",
                provider=self._llm_client.provider_name,
            )
        return content

    @staticmethod
    def _clean(raw: Optional[str], section: DocumentSection, profile: PatientProfile) -> str:
        """Drop separator lines and a leading repeated title."""
        if not raw:
            return ""
        title = get_conventions(profile.language).title_for(section)
        lines = [line for line in raw.strip().splitlines() if line.strip() != SECTION_SEPARATOR]
        while lines and lines[0].strip().upper() in ("", title.upper()):
            lines.pop(0)
        return "\n".join(lines).strip()
