"""
Overlap stitching task.

Copies a bounded window of words across each chunk boundary so that rules
spanning a boundary stay visible to the extraction model. The window size
follows the content type of the chunk the words are copied from. Core text
and offsets are never touched; overlap lives in its own fields.

Dependencies: re (stdlib), regulex.configs
System role: Third stage of document segmentation
"""

import logging
import re

from regulex.configs.chunking import ChunkingSettings
from regulex.core.document_processing.models import DocumentChunk

logger = logging.getLogger(__name__)

_WORD = re.compile(r"\S+")


def trailing_words(text: str, count: int) -> tuple[str, int]:
    """
    Return the suffix of text holding its last `count` words.

    Returns:
        tuple[str, int]: (suffix text, words actually taken)
    """
    if count <= 0:
        return "", 0
    words = list(_WORD.finditer(text))
    taken = min(count, len(words))
    if taken == 0:
        return "", 0
    return text[words[-taken].start():], taken


def leading_words(text: str, count: int) -> tuple[str, int]:
    """
    Return the prefix of text holding its first `count` words.

    Returns:
        tuple[str, int]: (prefix text, words actually taken)
    """
    if count <= 0:
        return "", 0
    end = None
    taken = 0
    for taken, match in enumerate(_WORD.finditer(text), start=1):
        end = match.end()
        if taken == count:
            break
    if end is None:
        return "", 0
    return text[:end], taken


class OverlapStitcher:
    """Attach neighbour context to adjacent chunks."""

    def __init__(self, settings: ChunkingSettings) -> None:
        self._settings = settings

    def stitch(self, chunks: list[DocumentChunk]) -> list[DocumentChunk]:
        """
        Apply overlap windows across every adjacent pair.

        Args:
            chunks: Planner output ordered by sequence

        Returns:
            list[DocumentChunk]: New chunk objects with overlap fields set
        """
        stitched: list[DocumentChunk] = []
        for index, chunk in enumerate(chunks):
            prefix, prev_count = "", 0
            suffix, next_count = "", 0

            if index > 0:
                previous = chunks[index - 1]
                prefix, prev_count = trailing_words(
                    previous.text, self._settings.overlap_for(previous.content_type.value)
                )
            if index < len(chunks) - 1:
                following = chunks[index + 1]
                suffix, next_count = leading_words(
                    following.text, self._settings.overlap_for(following.content_type.value)
                )

            stitched.append(
                chunk.model_copy(
                    update={
                        "overlap_prefix": prefix,
                        "overlap_prev": prev_count,
                        "overlap_suffix": suffix,
                        "overlap_next": next_count,
                    }
                )
            )

        logger.debug(
            f"{__name__}:stitch - Overlap applied",
            extra={"chunk_count": len(stitched)},
        )
        return stitched
