"""
Extracted rule ORM model.

Dependencies: sqlalchemy, regulex.boundary.db.base
System role: Durable rule record with provenance
"""

from sqlalchemy import JSON, Float, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from regulex.boundary.db.base import Base, TimestampMixin


class ExtractedRuleModel(Base, TimestampMixin):
    """
    Rule ORM model.

    Attributes:
        payload: Opaque JSON rule content
        cross_chunk_refs: JSON list of chunk IDs the rule depends on
        embedding_id: Vector ID, written once by the indexer
    """

    __tablename__ = "extracted_rules"

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    document_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("documents.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    source_chunk_id: Mapped[str] = mapped_column(
        String(32),
        ForeignKey("document_chunks.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    source_sequence: Mapped[int] = mapped_column(Integer, nullable=False)
    rule_type: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    payload: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    confidence: Mapped[float] = mapped_column(Float, nullable=False, default=1.0)
    cross_chunk_refs: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    embedding_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
