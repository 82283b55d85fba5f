"""
Test suite for StructureAnalyzer.

Tests line labelling, section grouping, structural hints and lossless
reconstruction of the source text.

System role: Verification of the first segmentation stage
"""

import pytest

from regulex.core.document_processing.models import ContentType, StructuralHints
from regulex.core.document_processing.tasks import StructureAnalyzer

MIXED_TEXT = (
    "PART I\n"
    "INCOME TAX RATES\n"
    "The following rates apply to resident individuals.\n"
    "| Income band | Rate |\n"
    "| 0 - 500,000 | 6% |\n"
    "Tax payable = taxable income x rate\n"
    "(a) an exemption applies to pensions;\n"
    "(b) relief applies to dependants.\n"
    "Closing remarks on the schedule.\n"
)


@pytest.fixture
def analyzer() -> StructureAnalyzer:
    """Provide StructureAnalyzer instance for testing."""
    return StructureAnalyzer()


class TestStructureAnalyzerLabels:
    """Test suite for content type detection."""

    def test_analyze_should_label_mixed_regulatory_text(self, analyzer: StructureAnalyzer) -> None:
        """Test each construct gets its own section in source order."""
        # Act
        sections = analyzer.analyze(MIXED_TEXT)

        # Assert
        assert [section.content_type for section in sections] == [
            ContentType.HEADER,
            ContentType.BODY,
            ContentType.TABLE,
            ContentType.FORMULA,
            ContentType.LIST,
            ContentType.BODY,
        ]
        assert sections[2].text == "| Income band | Rate |\n| 0 - 500,000 | 6% |\n"

    def test_analyze_should_treat_unstructured_text_as_single_body(self, analyzer: StructureAnalyzer) -> None:
        """Test plain prose yields one body section spanning the text."""
        # Arrange
        text = "Every resident person is liable to tax on worldwide income.\nThis applies each year."

        # Act
        sections = analyzer.analyze(text)

        # Assert
        assert len(sections) == 1
        assert sections[0].content_type == ContentType.BODY
        assert (sections[0].start, sections[0].end) == (0, len(text))

    def test_analyze_should_not_label_sentences_with_numbers_as_headings(self, analyzer: StructureAnalyzer) -> None:
        """Test a numbered sentence ending in a full stop stays body text."""
        # Act
        sections = analyzer.analyze("2. Income of a resident person is taxable.\n")

        # Assert
        assert sections[0].content_type != ContentType.HEADER

    def test_analyze_should_return_empty_list_for_empty_text(self, analyzer: StructureAnalyzer) -> None:
        """Test empty input yields no sections."""
        assert analyzer.analyze("") == []


class TestStructureAnalyzerHints:
    """Test suite for structural hints."""

    def test_table_span_hint_should_force_table_label(self, analyzer: StructureAnalyzer) -> None:
        """Test a hinted span is labelled as a table even without table syntax."""
        # Arrange
        text = "Intro paragraph here.\nResident rates listed below\nClosing paragraph here.\n"
        start = text.index("Resident")
        end = start + len("Resident rates listed below")

        # Act
        sections = analyzer.analyze(text, StructuralHints(table_spans=[(start, end)]))

        # Assert
        assert [section.content_type for section in sections] == [
            ContentType.BODY,
            ContentType.TABLE,
            ContentType.BODY,
        ]

    def test_heading_hint_should_force_header_label(self, analyzer: StructureAnalyzer) -> None:
        """Test a line matching a hinted heading is a header."""
        # Arrange
        text = "Definitions\nIn this Act, income means gains and profits.\n"

        # Act
        sections = analyzer.analyze(text, StructuralHints(headings=["Definitions"]))

        # Assert
        assert sections[0].content_type == ContentType.HEADER
        assert sections[0].text == "Definitions\n"


class TestStructureAnalyzerLossless:
    """Test suite for reconstruction guarantees."""

    @pytest.mark.parametrize(
        "text",
        [
            MIXED_TEXT,
            "\n\nLeading blank lines then text.\n\n\nTrailing blanks.\n\n",
            "No trailing newline",
        ],
    )
    def test_sections_should_reproduce_source_text(self, analyzer: StructureAnalyzer, text: str) -> None:
        """Test concatenated sections equal the input and offsets are contiguous."""
        # Act
        sections = analyzer.analyze(text)

        # Assert
        assert "".join(section.text for section in sections) == text
        assert sections[0].start == 0
        assert sections[-1].end == len(text)
        for previous, following in zip(sections, sections[1:]):
            assert previous.end == following.start
        for section in sections:
            assert text[section.start:section.end] == section.text
