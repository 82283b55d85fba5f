"""
Document domain model.

Dependencies: pydantic
System role: Registered source document and its processing lifecycle
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class DocumentStatus(str, Enum):
    """Document processing lifecycle."""

    UPLOADED = "uploaded"
    PROCESSING = "processing"
    CHUNKING = "chunking"
    EXTRACTING = "extracting"
    COMPLETED = "completed"
    FAILED = "failed"


class Document(BaseModel):
    """Registered source document."""

    model_config = ConfigDict(from_attributes=True)

    id: str = Field(description="Document ID")
    filename: str = Field(description="Original filename")
    source_uri: str = Field(description="Location of the raw bytes")
    content_type: str = Field(default="text/plain", description="MIME type of the raw bytes")
    status: DocumentStatus = Field(default=DocumentStatus.UPLOADED, description="Lifecycle status")
    total_chunks: int = Field(default=0, ge=0, description="Chunks planned for the document")
    error_message: str | None = Field(default=None, description="Fatal error, if any")
    processing_started_at: datetime | None = Field(default=None)
    processing_finished_at: datetime | None = Field(default=None)
    processing_duration_ms: int | None = Field(default=None, ge=0)
    created_at: datetime | None = Field(default=None)
    updated_at: datetime | None = Field(default=None)
