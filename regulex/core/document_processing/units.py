"""
Unit counters used for chunk size budgets.

A unit counter maps text to a size. Words are the default unit; tiktoken
token counts are available for model-accurate budgets.

Dependencies: tiktoken
System role: Size function for ChunkPlanner and token accounting
"""

from typing import Callable

import tiktoken

from regulex.configs.chunking import ChunkingSettings

UnitCounter = Callable[[str], int]


def count_words(text: str) -> int:
    """Count whitespace-separated words."""
    return len(text.split())


class TiktokenCounter:
    """Token counter backed by a tiktoken encoding, loaded on first use."""

    def __init__(self, encoding_name: str = "cl100k_base") -> None:
        self.encoding_name = encoding_name
        self._encoding: tiktoken.Encoding | None = None

    def __call__(self, text: str) -> int:
        if self._encoding is None:
            self._encoding = tiktoken.get_encoding(self.encoding_name)
        return len(self._encoding.encode(text, disallowed_special=()))


def build_unit_counter(settings: ChunkingSettings) -> UnitCounter:
    """
    Build the unit counter selected in configuration.

    Args:
        settings: Chunking settings

    Returns:
        UnitCounter: Callable returning the size of a text
    """
    if settings.unit_counter == "tiktoken":
        return TiktokenCounter(settings.tiktoken_encoding)
    return count_words
