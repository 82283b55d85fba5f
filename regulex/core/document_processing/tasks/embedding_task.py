"""
Embedding and indexing task.

Embeds the core text of a quality-passing chunk and each of its rules and
registers the vectors in the similarity index. An embedding or index write
failure leaves the items unindexed and is logged; it never fails the
pipeline.

Dependencies: regulex.boundary.vdb, regulex.boundary.db
System role: Final stage of chunk processing
"""

import logging

from pydantic import BaseModel, Field

from regulex.boundary.db.rule_store import RuleStore
from regulex.boundary.vdb import FAISSVectorIndex, VectorEntry, VectorKind, VectorMetadata
from regulex.core.document_processing.interfaces import EmbeddingService
from regulex.core.document_processing.models import DocumentChunk, ExtractedRule
from regulex.core.exceptions import EmbeddingError, VectorStoreError

logger = logging.getLogger(__name__)


class IndexingSummary(BaseModel):
    """What was indexed for one chunk."""

    chunk_id: str
    indexed_ids: list[str] = Field(default_factory=list)
    failed_ids: list[str] = Field(default_factory=list)


class EmbeddingIndexer:
    """Embed chunks and rules into the vector index."""

    def __init__(self, embedder: EmbeddingService, index: FAISSVectorIndex, store: RuleStore) -> None:
        """
        Initialize indexer.

        Args:
            embedder: Embedding service
            index: Vector index to write into
            store: Store used to record rule embedding IDs
        """
        self._embedder = embedder
        self._index = index
        self._store = store

    async def _embed(self, vector_id: str, text: str) -> list[float] | None:
        try:
            return await self._embedder.embed(text)
        except EmbeddingError as e:
            logger.warning(
                f"{__name__}:_embed - Embedding failed, item left unindexed",
                extra={"vector_id": vector_id, "error": str(e)},
            )
            return None

    async def index_chunk(self, chunk: DocumentChunk, rules: list[ExtractedRule]) -> IndexingSummary:
        """
        Index a chunk and its rules.

        Args:
            chunk: Completed, quality-passing chunk
            rules: Its persisted rules

        Returns:
            IndexingSummary: IDs indexed and IDs left unindexed
        """
        summary = IndexingSummary(chunk_id=chunk.id)
        entries: list[VectorEntry] = []

        vector = await self._embed(chunk.id, chunk.text)
        if vector is None:
            summary.failed_ids.append(chunk.id)
        else:
            entries.append(
                VectorEntry(
                    vector=vector,
                    text=chunk.text,
                    metadata=VectorMetadata(
                        vector_id=chunk.id,
                        kind=VectorKind.CHUNK,
                        document_id=chunk.document_id,
                        chunk_id=chunk.id,
                        sequence=chunk.sequence,
                    ),
                )
            )

        rule_ids: list[str] = []
        for rule in rules:
            text = rule.embedding_text()
            vector = await self._embed(rule.id, text)
            if vector is None:
                summary.failed_ids.append(rule.id)
                continue
            rule_ids.append(rule.id)
            entries.append(
                VectorEntry(
                    vector=vector,
                    text=text,
                    metadata=VectorMetadata(
                        vector_id=rule.id,
                        kind=VectorKind.RULE,
                        document_id=rule.document_id,
                        chunk_id=chunk.id,
                        sequence=chunk.sequence,
                    ),
                )
            )

        try:
            summary.indexed_ids = self._index.upsert(entries)
        except VectorStoreError as e:
            summary.failed_ids.extend(entry.metadata.vector_id for entry in entries)
            logger.warning(
                f"{__name__}:index_chunk - Index write failed, chunk left unindexed",
                extra={"chunk_id": chunk.id, "error": e.message, "failed_count": len(entries)},
            )
            return summary

        for rule_id in rule_ids:
            await self._store.set_rule_embedding_id(rule_id, rule_id)

        logger.info(
            f"{__name__}:index_chunk - Chunk indexed",
            extra={
                "chunk_id": chunk.id,
                "indexed_count": len(summary.indexed_ids),
                "failed_count": len(summary.failed_ids),
            },
        )
        return summary

    async def flush(self) -> bool:
        """Persist index changes made since the last flush."""
        return await self._index.persist()

    async def remove_document(self, document_id: str) -> int:
        """Remove every vector of a document and persist; returns vectors removed."""
        removed = self._index.delete_document(document_id)
        await self._index.persist()
        return removed
