"""
Document chunk ORM model.

Dependencies: sqlalchemy, regulex.boundary.db.base
System role: Durable chunk record; the single owner of chunk processing state
"""

from sqlalchemy import JSON, Boolean, Enum, Float, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from regulex.boundary.db.base import Base, TimestampMixin
from regulex.core.document_processing.models import ChunkStatus, ContentType


class DocumentChunkModel(Base, TimestampMixin):
    """
    Chunk ORM model.

    Status changes only through compare-and-set updates
    (see ChunkCRUD.transition_status).

    Constraints:
        (document_id, chunk_sequence): UNIQUE; sequences are 0..N-1 per document
    """

    __tablename__ = "document_chunks"
    __table_args__ = (UniqueConstraint("document_id", "chunk_sequence", name="uq_chunk_sequence"),)

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    document_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("documents.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    chunk_sequence: Mapped[int] = mapped_column(Integer, nullable=False)
    start_position: Mapped[int] = mapped_column(Integer, nullable=False)
    end_position: Mapped[int] = mapped_column(Integer, nullable=False)
    chunk_text: Mapped[str] = mapped_column(Text, nullable=False)
    content_type: Mapped[ContentType] = mapped_column(Enum(ContentType, native_enum=False), nullable=False)
    unit_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    oversized: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    overlap_prev: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    overlap_next: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    overlap_prefix: Mapped[str] = mapped_column(Text, nullable=False, default="")
    overlap_suffix: Mapped[str] = mapped_column(Text, nullable=False, default="")
    status: Mapped[ChunkStatus] = mapped_column(
        Enum(ChunkStatus, native_enum=False),
        nullable=False,
        default=ChunkStatus.PENDING,
        index=True,
    )
    retry_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    quality_score: Mapped[float | None] = mapped_column(Float, nullable=True)
    context_keywords: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
