"""
Rule domain models.

RuleDraft is what the extraction model returns for a chunk; ExtractedRule is
the persisted rule with its provenance.

Dependencies: pydantic
System role: Data structures for extracted rules
"""

import hashlib
import json
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

ContextRef = Literal["previous", "next"]


def rule_id_for(chunk_id: str, ordinal: int) -> str:
    """Deterministic rule ID from its source chunk and position in the response."""
    return hashlib.sha256(f"{chunk_id}:rule:{ordinal}".encode()).hexdigest()[:16]


class RuleDraft(BaseModel):
    """Rule candidate returned by the extraction model."""

    rule_type: str = Field(min_length=1, description="Rule category, e.g. income_tax_bracket")
    payload: dict[str, Any] = Field(default_factory=dict, description="Opaque rule content")
    confidence: float = Field(default=1.0, ge=0.0, le=1.0, description="Model confidence")
    context_refs: set[ContextRef] = Field(
        default_factory=set,
        description="Neighbouring chunks the rule depends on",
    )


class ExtractedRule(BaseModel):
    """Persisted rule with provenance."""

    model_config = ConfigDict(from_attributes=True)

    id: str = Field(description="Deterministic rule ID")
    document_id: str = Field(description="Owning document ID")
    source_chunk_id: str = Field(description="Chunk the rule was extracted from")
    source_sequence: int = Field(ge=0, description="Sequence of the source chunk")
    rule_type: str = Field(description="Rule category")
    payload: dict[str, Any] = Field(default_factory=dict, description="Opaque rule content")
    confidence: float = Field(default=1.0, ge=0.0, le=1.0, description="Model confidence")
    cross_chunk_refs: set[str] = Field(default_factory=set, description="Chunk IDs the rule depends on")
    embedding_id: str | None = Field(default=None, description="Vector ID once indexed")

    def embedding_text(self) -> str:
        """Stable text rendering of the rule used for its embedding."""
        return f"{self.rule_type}: {json.dumps(self.payload, sort_keys=True, default=str)}"
