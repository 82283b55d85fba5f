"""
Processing outcome models.

Dependencies: pydantic
System role: Per-chunk statistics, quality reports and document run summaries
"""

from datetime import datetime

from pydantic import BaseModel, Field

from regulex.core.document_processing.models.chunk import ChunkStatus
from regulex.core.exceptions import ErrorKind


class QualityReport(BaseModel):
    """Outcome of scoring one chunk's extraction."""

    chunk_id: str = Field(description="Scored chunk")
    factors: dict[str, float | None] = Field(
        description="Factor values; None marks a factor that could not be computed",
    )
    score: float = Field(ge=0.0, le=1.0, description="Weighted score over available factors")
    threshold: float = Field(ge=0.0, le=1.0, description="Passing threshold in force")

    @property
    def passed(self) -> bool:
        """Whether the score meets the threshold."""
        return self.score >= self.threshold

    def available_factors(self) -> dict[str, float]:
        """Factors that contributed to the score."""
        return {name: value for name, value in self.factors.items() if value is not None}


class ChunkProcessingStats(BaseModel):
    """Statistics written on every terminal chunk transition."""

    chunk_id: str
    started_at: datetime
    finished_at: datetime
    attempts: int = Field(ge=0)
    rules_extracted: int = Field(default=0, ge=0)
    tokens_used: int = Field(default=0, ge=0)
    quality_factors: dict[str, float] = Field(default_factory=dict)
    final_status: ChunkStatus
    error_kind: ErrorKind | None = None


class ProcessingResult(BaseModel):
    """Summary of one processing run over a document."""

    document_id: str
    success_count: int = Field(default=0, ge=0, description="Chunks completed in this run")
    failure_count: int = Field(default=0, ge=0, description="Chunks whose extraction failed")
    needs_review_chunk_ids: list[str] = Field(
        default_factory=list,
        description="Chunks moved to needs_review in this run",
    )
    skipped_count: int = Field(default=0, ge=0, description="Chunks not pending at submission")
    cancelled: bool = Field(default=False, description="Run stopped by cancellation")
    processing_time_ms: float = Field(default=0.0, ge=0.0)
