"""
Durable store facade for documents, chunks, rules and processing stats.

Each operation runs in its own session and transaction, translates ORM rows
to pydantic domain models and wraps SQLAlchemy failures in PersistenceError.
Chunk status changes go through compare-and-set so concurrent coroutines
never double-process a chunk.

Dependencies: sqlalchemy, regulex.boundary.db.CRUD
System role: Single owner of persistent pipeline state
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import AsyncIterator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from regulex.boundary.db.CRUD import chunk_crud, document_crud, rule_crud, stats_crud
from regulex.boundary.db.models import (
    ChunkProcessingStatsModel,
    DocumentChunkModel,
    DocumentModel,
    ExtractedRuleModel,
)
from regulex.core.document_processing.models import (
    ChunkProcessingStats,
    ChunkStatus,
    Document,
    DocumentChunk,
    DocumentStatus,
    ExtractedRule,
)
from regulex.core.exceptions import ErrorKind, PersistenceError
from regulex.observability.log_utils import log_exception_with_context

logger = logging.getLogger(__name__)


def _chunk_from_row(row: DocumentChunkModel) -> DocumentChunk:
    return DocumentChunk(
        id=row.id,
        document_id=row.document_id,
        sequence=row.chunk_sequence,
        byte_range=(row.start_position, row.end_position),
        text=row.chunk_text,
        content_type=row.content_type,
        overlap_prev=row.overlap_prev,
        overlap_next=row.overlap_next,
        overlap_prefix=row.overlap_prefix,
        overlap_suffix=row.overlap_suffix,
        status=row.status,
        retry_count=row.retry_count,
        quality_score=row.quality_score,
        context_keywords=set(row.context_keywords or []),
        unit_count=row.unit_count,
        oversized=row.oversized,
    )


def _chunk_to_row(chunk: DocumentChunk) -> dict:
    return {
        "id": chunk.id,
        "document_id": chunk.document_id,
        "chunk_sequence": chunk.sequence,
        "start_position": chunk.byte_range[0],
        "end_position": chunk.byte_range[1],
        "chunk_text": chunk.text,
        "content_type": chunk.content_type,
        "unit_count": chunk.unit_count,
        "oversized": chunk.oversized,
        "overlap_prev": chunk.overlap_prev,
        "overlap_next": chunk.overlap_next,
        "overlap_prefix": chunk.overlap_prefix,
        "overlap_suffix": chunk.overlap_suffix,
        "status": chunk.status,
        "retry_count": chunk.retry_count,
        "quality_score": chunk.quality_score,
        "context_keywords": sorted(chunk.context_keywords),
    }


def _rule_from_row(row: ExtractedRuleModel) -> ExtractedRule:
    return ExtractedRule(
        id=row.id,
        document_id=row.document_id,
        source_chunk_id=row.source_chunk_id,
        source_sequence=row.source_sequence,
        rule_type=row.rule_type,
        payload=row.payload or {},
        confidence=row.confidence,
        cross_chunk_refs=set(row.cross_chunk_refs or []),
        embedding_id=row.embedding_id,
    )


def _rule_to_row(rule: ExtractedRule) -> dict:
    return {
        "id": rule.id,
        "document_id": rule.document_id,
        "source_chunk_id": rule.source_chunk_id,
        "source_sequence": rule.source_sequence,
        "rule_type": rule.rule_type,
        "payload": rule.payload,
        "confidence": rule.confidence,
        "cross_chunk_refs": sorted(rule.cross_chunk_refs),
        "embedding_id": rule.embedding_id,
    }


def _stats_from_row(row: ChunkProcessingStatsModel) -> ChunkProcessingStats:
    return ChunkProcessingStats(
        chunk_id=row.chunk_id,
        started_at=row.started_at,
        finished_at=row.finished_at,
        attempts=row.attempts,
        rules_extracted=row.rules_extracted,
        tokens_used=row.tokens_used,
        quality_factors=row.quality_factors or {},
        final_status=row.final_status,
        error_kind=ErrorKind(row.error_kind) if row.error_kind else None,
    )


class RuleStore:
    """Async persistence facade over the CRUD singletons."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        """
        Initialize store.

        Args:
            session_factory: Async session factory bound to the target database
        """
        self._session_factory = session_factory

    @asynccontextmanager
    async def _transaction(self, operation: str) -> AsyncIterator[AsyncSession]:
        """Open a session, commit on success, translate database errors."""
        async with self._session_factory() as session:
            try:
                yield session
                await session.commit()
            except SQLAlchemyError as e:
                await session.rollback()
                log_exception_with_context(
                    logger, f"{__name__}:{operation} - Database operation failed", e, operation=operation
                )
                raise PersistenceError(f"Store operation failed: {operation}", operation=operation) from e

    # Documents

    async def create_document(
        self,
        filename: str,
        source_uri: str,
        content_type: str = "text/plain",
    ) -> Document:
        """Register a document in `uploaded` status."""
        async with self._transaction("create_document") as session:
            row = await document_crud.create(
                session,
                filename=filename,
                source_uri=source_uri,
                content_type=content_type,
                status=DocumentStatus.UPLOADED,
            )
            return Document.model_validate(row)

    async def get_document(self, document_id: str) -> Document | None:
        """Fetch a document or None."""
        async with self._transaction("get_document") as session:
            row = await document_crud.get_by_id(session, document_id)
            return Document.model_validate(row) if row else None

    async def update_document(self, document_id: str, **fields) -> bool:
        """Update document fields; returns False when the document is missing."""
        async with self._transaction("update_document") as session:
            return await document_crud.update_by_id(session, document_id, **fields)

    async def mark_document_failed(self, document_id: str, error_message: str, finished_at: datetime) -> bool:
        """Set a document to `failed` with its error."""
        async with self._transaction("mark_document_failed") as session:
            return await document_crud.mark_failed(session, document_id, error_message, finished_at)

    async def delete_document(self, document_id: str) -> bool:
        """
        Delete a document and everything derived from it.

        Stats, rules and chunks are deleted explicitly before the document so
        the cascade holds on databases that do not enforce foreign keys.

        Returns:
            True if the document existed
        """
        async with self._transaction("delete_document") as session:
            await stats_crud.delete_by_document(session, document_id)
            await rule_crud.delete_by_document(session, document_id)
            await chunk_crud.delete_by_document(session, document_id)
            return await document_crud.delete_by_id(session, document_id)

    # Chunks

    async def add_chunks(self, chunks: list[DocumentChunk]) -> int:
        """Persist newly planned chunks and record the document's chunk total."""
        if not chunks:
            return 0
        async with self._transaction("add_chunks") as session:
            count = await chunk_crud.create_many(session, [_chunk_to_row(chunk) for chunk in chunks])
            await document_crud.update_by_id(session, chunks[0].document_id, total_chunks=count)
            return count

    async def get_chunks(self, document_id: str) -> list[DocumentChunk]:
        """All chunks of a document in sequence order."""
        async with self._transaction("get_chunks") as session:
            rows = await chunk_crud.get_by_document(session, document_id)
            return [_chunk_from_row(row) for row in rows]

    async def get_chunk(self, chunk_id: str) -> DocumentChunk | None:
        """Fetch one chunk or None."""
        async with self._transaction("get_chunk") as session:
            row = await chunk_crud.get_by_id(session, chunk_id)
            return _chunk_from_row(row) if row else None

    async def get_chunks_by_ids(self, chunk_ids: list[str]) -> dict[str, DocumentChunk]:
        """Fetch chunks by ID; missing IDs are absent from the result."""
        async with self._transaction("get_chunks_by_ids") as session:
            rows = await chunk_crud.get_by_ids(session, chunk_ids)
            return {row.id: _chunk_from_row(row) for row in rows}

    async def get_chunks_by_status(self, status: ChunkStatus, limit: int | None = None) -> list[DocumentChunk]:
        """Chunks in a status across all documents."""
        async with self._transaction("get_chunks_by_status") as session:
            rows = await chunk_crud.get_by_status(session, status, limit=limit)
            return [_chunk_from_row(row) for row in rows]

    async def transition(self, chunk_id: str, expected: ChunkStatus, new: ChunkStatus) -> bool:
        """
        Compare-and-set a chunk's status.

        Returns:
            True if the chunk was in `expected` and is now in `new`
        """
        async with self._transaction("transition") as session:
            return await chunk_crud.transition_status(session, chunk_id, expected, new)

    async def release_in_flight(self, document_id: str) -> int:
        """Return chunks left in `processing` by an interrupted run to `pending`."""
        async with self._transaction("release_in_flight") as session:
            return await chunk_crud.reset_status(
                session, document_id, ChunkStatus.PROCESSING, ChunkStatus.PENDING
            )

    async def increment_retry_count(self, chunk_id: str) -> None:
        """Add one to a chunk's retry counter."""
        async with self._transaction("increment_retry_count") as session:
            await chunk_crud.increment_retry_count(session, chunk_id)

    async def set_quality_score(self, chunk_id: str, score: float) -> None:
        """Record a chunk's quality score."""
        async with self._transaction("set_quality_score") as session:
            await chunk_crud.update_by_id(session, chunk_id, quality_score=score)

    # Rules

    async def replace_rules(self, chunk_id: str, rules: list[ExtractedRule]) -> int:
        """
        Store the rules of one chunk, replacing any earlier extraction.

        Replacing makes a re-run of a chunk interrupted after this write
        produce no duplicate rules.
        """
        async with self._transaction("replace_rules") as session:
            await rule_crud.delete_by_chunk(session, chunk_id)
            return await rule_crud.create_many(session, [_rule_to_row(rule) for rule in rules])

    async def get_rules_for_chunk(self, chunk_id: str) -> list[ExtractedRule]:
        """Rules extracted from one chunk."""
        async with self._transaction("get_rules_for_chunk") as session:
            rows = await rule_crud.get_by_chunk(session, chunk_id)
            return [_rule_from_row(row) for row in rows]

    async def get_rules_for_document(self, document_id: str) -> list[ExtractedRule]:
        """Rules of a document ordered by source sequence."""
        async with self._transaction("get_rules_for_document") as session:
            rows = await rule_crud.get_by_document(session, document_id)
            return [_rule_from_row(row) for row in rows]

    async def set_rule_embedding_id(self, rule_id: str, embedding_id: str) -> bool:
        """Write a rule's vector ID once; returns False if already set."""
        async with self._transaction("set_rule_embedding_id") as session:
            return await rule_crud.set_embedding_id(session, rule_id, embedding_id)

    # Stats

    async def record_stats(self, stats: ChunkProcessingStats) -> None:
        """Append a processing stats row."""
        async with self._transaction("record_stats") as session:
            await stats_crud.create(
                session,
                chunk_id=stats.chunk_id,
                started_at=stats.started_at,
                finished_at=stats.finished_at,
                attempts=stats.attempts,
                rules_extracted=stats.rules_extracted,
                tokens_used=stats.tokens_used,
                quality_factors=stats.quality_factors,
                final_status=stats.final_status,
                error_kind=stats.error_kind.value if stats.error_kind else None,
            )

    async def get_stats(self, chunk_id: str) -> list[ChunkProcessingStats]:
        """Stats rows of one chunk, oldest first."""
        async with self._transaction("get_stats") as session:
            rows = await stats_crud.get_by_chunk(session, chunk_id)
            return [_stats_from_row(row) for row in rows]
