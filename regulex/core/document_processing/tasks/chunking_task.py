"""
Content-aware chunk planning task.

Turns analyzer sections into size-bounded chunks. Each content type has its
own unit budget and its own notion of a safe split point: sentences and
lines for prose, rows for tables, whole expressions for formulas. A split
always takes the valid boundary closest to the budget. Constructs that
cannot be split within budget are kept whole and flagged as oversized.

Dependencies: re (stdlib), bisect (stdlib), regulex.configs
System role: Second stage of document segmentation
"""

import bisect
import logging
import re

from regulex.configs.chunking import ChunkingSettings
from regulex.core.document_processing.keywords import KeywordExtractor
from regulex.core.document_processing.models import (
    ContentType,
    DocumentChunk,
    Section,
    chunk_id_for,
)
from regulex.core.document_processing.units import UnitCounter, count_words

logger = logging.getLogger(__name__)

_PROSE_BREAK = re.compile(r"(?<=[.!?;:])\s+|\n\s*")
_WORD_BREAK = re.compile(r"\s+")
_ROW_BREAK = re.compile(r"\n")
_CONTINUATION = re.compile(r"[+\-*/×÷=(,]\s*$")

_PROSE_TYPES = (ContentType.BODY, ContentType.LIST, ContentType.HEADER)


class ChunkPlanner:
    """Plan size-bounded chunks from labelled sections."""

    def __init__(
        self,
        settings: ChunkingSettings,
        unit_counter: UnitCounter = count_words,
        keyword_extractor: KeywordExtractor | None = None,
    ) -> None:
        """
        Initialize chunk planner.

        Args:
            settings: Per-content-type budgets
            unit_counter: Size function for budgets
            keyword_extractor: Attaches context keywords to chunks when set
        """
        self._settings = settings
        self._count = unit_counter
        self._keywords = keyword_extractor

    def plan(self, document_id: str, sections: list[Section]) -> list[DocumentChunk]:
        """
        Plan chunks for a document.

        Args:
            document_id: Owning document ID
            sections: Analyzer output in source order

        Returns:
            list[DocumentChunk]: Pending chunks with contiguous sequences and no overlap
        """
        chunks: list[DocumentChunk] = []
        for section in sections:
            budget = self._settings.budget_for(section.content_type.value)
            for start, end, oversized in self._split(section, budget):
                core = section.text[start:end]
                sequence = len(chunks)
                unit_count = self._count(core)
                if oversized:
                    logger.warning(
                        f"{__name__}:plan - Atomic {section.content_type.value} exceeds budget, kept whole",
                        extra={
                            "document_id": document_id,
                            "sequence": sequence,
                            "unit_count": unit_count,
                            "budget": budget,
                        },
                    )
                chunks.append(
                    DocumentChunk(
                        id=chunk_id_for(document_id, sequence),
                        document_id=document_id,
                        sequence=sequence,
                        byte_range=(section.start + start, section.start + end),
                        text=core,
                        content_type=section.content_type,
                        unit_count=unit_count,
                        oversized=oversized,
                        context_keywords=self._keywords.context_keywords(core) if self._keywords else set(),
                    )
                )

        logger.info(
            f"{__name__}:plan - Chunks planned",
            extra={
                "document_id": document_id,
                "section_count": len(sections),
                "chunk_count": len(chunks),
                "oversized_count": sum(1 for chunk in chunks if chunk.oversized),
            },
        )
        return chunks

    def _split(self, section: Section, budget: int) -> list[tuple[int, int, bool]]:
        """Split one section into (start, end, oversized) pieces relative to the section."""
        text = section.text
        if self._count(text) <= budget:
            return [(0, len(text), False)]

        primary = self._boundaries(text, section.content_type)
        fallback = _boundary_offsets(_WORD_BREAK, text) if section.content_type in _PROSE_TYPES else []

        pieces: list[tuple[int, int, bool]] = []
        cursor = 0
        while cursor < len(text):
            if self._count(text[cursor:]) <= budget:
                pieces.append((cursor, len(text), False))
                break

            end = self._best_boundary(text, cursor, primary, budget)
            if end is None and fallback:
                end = self._best_boundary(text, cursor, fallback, budget)

            oversized = False
            if end is None:
                # Smallest atomic unit from the cursor, kept whole
                index = bisect.bisect_right(primary, cursor)
                end = primary[index] if index < len(primary) else len(text)
                oversized = self._count(text[cursor:end]) > budget

            pieces.append((cursor, end, oversized))
            cursor = end
        return pieces

    def _best_boundary(self, text: str, cursor: int, boundaries: list[int], budget: int) -> int | None:
        """Largest boundary after cursor whose piece fits the budget (maximise fill)."""
        lo = bisect.bisect_right(boundaries, cursor)
        hi = len(boundaries) - 1
        best: int | None = None
        while lo <= hi:
            mid = (lo + hi) // 2
            if self._count(text[cursor:boundaries[mid]]) <= budget:
                best = boundaries[mid]
                lo = mid + 1
            else:
                hi = mid - 1
        if best is None or self._count(text[cursor:best]) == 0:
            return None
        return best

    @staticmethod
    def _boundaries(text: str, content_type: ContentType) -> list[int]:
        if content_type == ContentType.TABLE:
            return _boundary_offsets(_ROW_BREAK, text)
        if content_type == ContentType.FORMULA:
            return [
                offset
                for offset in _boundary_offsets(_ROW_BREAK, text)
                if not _CONTINUATION.search(text[text.rfind("\n", 0, offset - 1) + 1:offset - 1])
            ]
        return _boundary_offsets(_PROSE_BREAK, text)


def _boundary_offsets(pattern: re.Pattern[str], text: str) -> list[int]:
    """Offsets where a new piece may start, strictly inside the text."""
    return sorted({m.end() for m in pattern.finditer(text) if 0 < m.end() < len(text)})
