"""
Document ORM model.

Tracks a registered source document and its processing lifecycle.

Dependencies: sqlalchemy, regulex.boundary.db.base
System role: Durable document record
"""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, Enum, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from regulex.boundary.db.base import Base, TimestampMixin
from regulex.core.document_processing.models import DocumentStatus


class DocumentModel(Base, TimestampMixin):
    """
    Document ORM model.

    Attributes:
        id: Document ID (uuid4 hex, generated on insert)
        filename: Original filename
        source_uri: Location of the raw bytes
        content_type: MIME type used to select a text decoder
        status: Processing lifecycle (uploaded -> processing -> chunking ->
                extracting -> completed, or failed)
        total_chunks: Number of chunks planned
        error_message: Fatal error description when status is failed
        processing_started_at / processing_finished_at / processing_duration_ms:
                Timing of the most recent processing run
    """

    __tablename__ = "documents"

    id: Mapped[str] = mapped_column(
        String(64),
        primary_key=True,
        default=lambda: uuid.uuid4().hex,
    )
    filename: Mapped[str] = mapped_column(String(512), nullable=False)
    source_uri: Mapped[str] = mapped_column(Text, nullable=False)
    content_type: Mapped[str] = mapped_column(String(128), nullable=False, default="text/plain")
    status: Mapped[DocumentStatus] = mapped_column(
        Enum(DocumentStatus, native_enum=False),
        nullable=False,
        default=DocumentStatus.UPLOADED,
        index=True,
    )
    total_chunks: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    processing_started_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    processing_finished_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    processing_duration_ms: Mapped[int | None] = mapped_column(Integer, nullable=True)
