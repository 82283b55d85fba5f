"""
Extracted text model returned by the raw text provider.

Dependencies: pydantic
System role: Contract between document decoding and structure analysis
"""

from pydantic import BaseModel, Field


class StructuralHints(BaseModel):
    """Coarse layout outline supplied alongside raw text."""

    table_spans: list[tuple[int, int]] = Field(
        default_factory=list,
        description="(start, end) offsets known to be tabular",
    )
    headings: list[str] = Field(default_factory=list, description="Known heading strings")


class ExtractedText(BaseModel):
    """Plain text decoded from a document plus structural hints."""

    text: str
    hints: StructuralHints = Field(default_factory=StructuralHints)
    page_count: int | None = Field(default=None, description="Pages, when the source is paginated")
