"""
Chunk processing statistics ORM model.

Dependencies: sqlalchemy, regulex.boundary.db.base
System role: Per-chunk processing metrics written on terminal transitions
"""

import uuid
from datetime import datetime

from sqlalchemy import JSON, DateTime, Enum, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from regulex.boundary.db.base import Base, TimestampMixin
from regulex.core.document_processing.models import ChunkStatus


class ChunkProcessingStatsModel(Base, TimestampMixin):
    """One row per terminal transition of a chunk."""

    __tablename__ = "chunk_processing_stats"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=lambda: uuid.uuid4().hex)
    chunk_id: Mapped[str] = mapped_column(
        String(32),
        ForeignKey("document_chunks.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    started_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    finished_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    attempts: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    rules_extracted: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    tokens_used: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    quality_factors: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    final_status: Mapped[ChunkStatus] = mapped_column(Enum(ChunkStatus, native_enum=False), nullable=False)
    error_kind: Mapped[str | None] = mapped_column(String(32), nullable=True)
