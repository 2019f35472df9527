"""Tests for the section presentation mapper."""

import pytest

from patient_document_generation.core.constants import (
    ENGLISH_CONVENTIONS,
    RUSSIAN_CONVENTIONS,
    SECTION_SEPARATOR,
)
from patient_document_generation.core.enums import DocumentSection, Language
from patient_document_generation.core.models import PatientDocument, Section
from patient_document_generation.presentation import (
    document_to_text,
    from_sections,
    parse_sections,
    sections_to_document,
    to_sections,
)


class TestToSections:
    def test_seven_sections_in_document_order(self, valid_document):
        sections = to_sections(valid_document, Language.ENGLISH)
        assert [s.title for s in sections] == list(ENGLISH_CONVENTIONS.section_titles)
        assert [s.content for s in sections] == [
            valid_document[key] for key in DocumentSection.keys()
        ]

    def test_localized_titles(self, valid_document):
        sections = to_sections(PatientDocument.from_dict(valid_document), "russian")
        assert sections[0].title == "ЧТО У МЕНЯ ЕСТЬ"
        assert [s.title for s in sections] == list(RUSSIAN_CONVENTIONS.section_titles)

    def test_absent_slot_maps_to_empty_content(self, valid_document):
        del valid_document["contacts"]
        sections = to_sections(valid_document, Language.ENGLISH)
        assert len(sections) == 7
        assert sections[-1].content == ""


class TestFlatText:
    def test_format(self):
        text = from_sections([Section("A", "first"), Section("B", "second")])
        assert text == (
            f"{SECTION_SEPARATOR}\nA\n{SECTION_SEPARATOR}\nfirst\n\n"
            f"{SECTION_SEPARATOR}\nB\n{SECTION_SEPARATOR}\nsecond"
        )

    def test_round_trip_preserves_titles_and_content(self, valid_document):
        sections = to_sections(valid_document, Language.ESTONIAN)
        assert parse_sections(from_sections(sections)) == sections

    @pytest.mark.parametrize(
        "content",
        [
            "line one\nline two",
            "  leading and trailing spaces  ",
            "ends with blank lines\n\n",
            "",
            "- bullet\n- bullet\n\n- after gap",
        ],
    )
    def test_round_trip_is_verbatim(self, content):
        sections = [Section(f"T{i}", content) for i in range(7)]
        assert parse_sections(from_sections(sections)) == sections

    def test_reviewer_edit_survives_round_trip(self, valid_document):
        sections = to_sections(valid_document, Language.ENGLISH)
        sections[4].content = "Edited by Dr. Tamm: metoprolol 25 mg twice daily."
        parsed = parse_sections(from_sections(sections))
        assert sections_to_document(parsed).medications == sections[4].content

    def test_document_to_text_matches_manual_flattening(self, valid_document):
        expected = from_sections(to_sections(valid_document, "english"))
        assert document_to_text(valid_document, "english") == expected

    @pytest.mark.parametrize("blank", ["", "   \n  "])
    def test_blank_text_parses_to_nothing(self, blank):
        assert parse_sections(blank) == []

    def test_text_without_titles_is_one_untitled_section(self):
        assert parse_sections("Just a free-text note\n") == [Section("", "Just a free-text note")]

    def test_text_before_first_title_is_kept(self):
        text = "Intro line\n" + from_sections([Section("A", "x"), Section("B", "y")])
        assert parse_sections(text) == [Section("", "Intro line"), Section("A", "x"), Section("B", "y")]

    def test_blank_lines_before_first_title_are_ignored(self):
        text = "\n\n" + from_sections([Section("A", "x")])
        assert parse_sections(text) == [Section("A", "x")]

    def test_windows_line_endings(self):
        text = from_sections([Section("A", "x"), Section("B", "y")]).replace("\n", "\r\n")
        assert parse_sections(text) == [Section("A", "x"), Section("B", "y")]


class TestSectionsToDocument:
    def test_rebuilds_document_by_position(self, valid_document):
        sections = to_sections(valid_document, Language.ENGLISH)
        assert sections_to_document(sections).to_dict() == valid_document

    @pytest.mark.parametrize("count", [0, 6, 8])
    def test_requires_exactly_seven(self, count):
        with pytest.raises(ValueError, match="Expected 7 sections"):
            sections_to_document([Section("t", "c")] * count)
