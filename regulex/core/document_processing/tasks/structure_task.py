"""
Structure analysis task.

Labels each line of raw regulatory text as header, table, formula, list or
body and groups consecutive lines with the same label into sections. The
concatenated section texts always reproduce the input exactly.

Dependencies: re (stdlib), pydantic models
System role: First stage of document segmentation
"""

import logging
import re

from regulex.core.document_processing.models import (
    ContentType,
    Section,
    StructuralHints,
)

logger = logging.getLogger(__name__)

_HEADING_KEYWORD = re.compile(
    r"^(?:PART|CHAPTER|SCHEDULE|SECTION|ARTICLE|TITLE|DIVISION)\b(?:\s+[\dIVXLC]+[A-Z]?\b)?",
    re.IGNORECASE,
)
_NUMBERED_HEADING = re.compile(r"^\d+(?:\.\d+)*\.?\s+[A-Z(\"'][^.;:!?]*:?$")
_ALL_CAPS = re.compile(r"^[A-Z][A-Z0-9 ,&()'/\-]{2,}$")
_TABLE_GAPS = re.compile(r"\S(?: {2,}|\t)\S.*\S(?: {2,}|\t)\S")
_FORMULA = re.compile(r"=|[×÷]|\d\s*\*\s*\(?\d|\d\s+[/xX]\s+\(?\d|\d\s?%\s+of\s+[A-Z]\b")
_LIST_ITEM = re.compile(
    r"^\s*(?:[-*•▪◦]\s+|\(?[a-z]{1,2}\)\s+|\([ivxlcdm]+\)\s+|\(?\d{1,3}\)\s+)",
    re.IGNORECASE,
)

_MAX_HEADING_CHARS = 100
_MAX_HEADING_WORDS = 12


class StructureAnalyzer:
    """Split raw text into ordered, labelled sections."""

    def analyze(self, text: str, hints: StructuralHints | None = None) -> list[Section]:
        """
        Label the text line by line and merge runs with the same label.

        Blank lines attach to the running section (leading blank lines attach
        to the first section). Text with no detectable structure yields one
        body section; empty text yields no sections.

        Args:
            text: Raw document text
            hints: Optional layout hints from the text provider

        Returns:
            list[Section]: Contiguous, non-overlapping sections in source order
        """
        if not text:
            return []

        hints = hints or StructuralHints()
        headings = {heading.strip().lower() for heading in hints.headings if heading.strip()}

        sections: list[Section] = []
        run_label: ContentType | None = None
        run_start = 0
        offset = 0

        for line in text.splitlines(keepends=True):
            line_start, offset = offset, offset + len(line)
            if not line.strip():
                continue
            label = self._classify(line, line_start, offset, hints, headings)
            if run_label is None:
                run_label = label
            elif label != run_label:
                sections.append(
                    Section(content_type=run_label, text=text[run_start:line_start], start=run_start, end=line_start)
                )
                run_label, run_start = label, line_start

        sections.append(
            Section(content_type=run_label or ContentType.BODY, text=text[run_start:], start=run_start, end=len(text))
        )
        logger.debug(
            f"{__name__}:analyze - Sections detected",
            extra={"section_count": len(sections), "text_length": len(text)},
        )
        return sections

    def _classify(
        self,
        line: str,
        start: int,
        end: int,
        hints: StructuralHints,
        headings: set[str],
    ) -> ContentType:
        stripped = line.strip()

        if any(start < span_end and span_start < end for span_start, span_end in hints.table_spans):
            return ContentType.TABLE
        if stripped.lower() in headings:
            return ContentType.HEADER
        if self._is_table_row(stripped):
            return ContentType.TABLE
        if self._is_heading(stripped):
            return ContentType.HEADER
        if _FORMULA.search(stripped) and not stripped.endswith((".", ";")):
            return ContentType.FORMULA
        if _LIST_ITEM.match(line):
            return ContentType.LIST
        return ContentType.BODY

    @staticmethod
    def _is_table_row(stripped: str) -> bool:
        if stripped.count("|") >= 2 or stripped.count("\t") >= 2:
            return True
        return bool(_TABLE_GAPS.search(stripped)) and any(ch.isdigit() for ch in stripped)

    @staticmethod
    def _is_heading(stripped: str) -> bool:
        if len(stripped) > _MAX_HEADING_CHARS or len(stripped.split()) > _MAX_HEADING_WORDS:
            return False
        if _HEADING_KEYWORD.match(stripped):
            return True
        if _NUMBERED_HEADING.match(stripped):
            return True
        return bool(_ALL_CAPS.match(stripped)) and any(ch.isalpha() for ch in stripped)
