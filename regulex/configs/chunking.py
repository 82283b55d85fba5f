"""
Chunking configuration settings.

Per-content-type size budgets and overlap windows used by the chunk planner
and overlap stitcher. Sizes are measured in "units" (words by default, or
tiktoken tokens when unit_counter is "tiktoken").

Dependencies: pydantic, pydantic_settings
System role: Segmentation policy configuration
"""

from typing import Literal

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from regulex.configs.base import BaseSettings


class ChunkingSettings(BaseSettings):
    """Chunk size and overlap policy per content type."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="CHUNKING_",
        case_sensitive=False,
        extra="ignore",
    )

    max_units: dict[str, int] = Field(
        default_factory=lambda: {
            "table": 800,
            "formula": 1000,
            "body": 1200,
            "list": 1200,
            "header": 1200,
        },
        description="Maximum chunk size in units, keyed by content type",
    )
    overlap_words: dict[str, int] = Field(
        default_factory=lambda: {
            "table": 150,
            "formula": 200,
            "body": 150,
            "list": 150,
            "header": 100,
        },
        description="Overlap window in words, keyed by the content type of the source chunk",
    )
    default_max_units: int = Field(default=1200, ge=1, description="Budget for unknown types")
    default_overlap_words: int = Field(default=150, ge=0, description="Overlap for unknown types")
    unit_counter: Literal["words", "tiktoken"] = Field(
        default="words",
        description="Size function used for budgets",
    )
    tiktoken_encoding: str = Field(
        default="cl100k_base",
        description="tiktoken encoding used when unit_counter is 'tiktoken'",
    )

    def budget_for(self, content_type: str) -> int:
        """Return the unit budget for a content type."""
        return self.max_units.get(content_type, self.default_max_units)

    def overlap_for(self, content_type: str) -> int:
        """Return the overlap window (words) for a content type."""
        return self.overlap_words.get(content_type, self.default_overlap_words)
