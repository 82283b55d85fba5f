"""
Document service orchestrator.

Coordinates document registration, processing, rule and review queries,
search and deletion. Uses DocumentPipeline for processing and
SemanticRetriever for search.

Dependencies: regulex.boundary.db, regulex.boundary.vdb, regulex.core
System role: Document management orchestration
"""

import logging

from regulex.boundary.db.rule_store import RuleStore
from regulex.boundary.vdb import FAISSVectorIndex
from regulex.core.document_processing.entrypoint import DocumentPipeline
from regulex.core.document_processing.models import (
    ChunkStatus,
    Document,
    DocumentChunk,
    ExtractedRule,
    ProcessingResult,
    RankedChunk,
)
from regulex.core.exceptions import DocumentNotFoundError
from regulex.core.retriever import SemanticRetriever

logger = logging.getLogger(__name__)


class DocumentService:
    """
    Document service orchestrator.

    Handles document lifecycle: register, process, inspect, search, delete.
    """

    def __init__(
        self,
        store: RuleStore,
        pipeline: DocumentPipeline,
        retriever: SemanticRetriever,
        index: FAISSVectorIndex,
    ) -> None:
        """
        Initialize document service.

        Args:
            store: Durable store for documents, chunks and rules
            pipeline: Processing pipeline
            retriever: Chunk-aware semantic retriever
            index: Vector index shared with the pipeline
        """
        self._store = store
        self._pipeline = pipeline
        self._retriever = retriever
        self._index = index

    @property
    def pipeline(self) -> DocumentPipeline:
        return self._pipeline

    async def register_document(
        self,
        filename: str,
        source_uri: str,
        content_type: str = "text/plain",
    ) -> Document:
        """
        Register a document for processing.

        Args:
            filename: Original filename
            source_uri: Location of the raw bytes, read by the document source
            content_type: MIME type of the raw bytes

        Returns:
            Document: Registered document in `uploaded` status
        """
        document = await self._store.create_document(filename, source_uri, content_type)
        logger.info(
            f"{__name__}:register_document - Document registered",
            extra={"document_id": document.id, "document_filename": filename, "content_type": content_type},
        )
        return document

    async def process_document(self, document_id: str) -> ProcessingResult:
        """
        Process a registered document.

        Steps:
        1. Chunk the document on its first run
        2. Extract rules for every pending chunk in bounded batches
        3. Review quality and index passing chunks as they complete

        Args:
            document_id: Registered document ID

        Returns:
            ProcessingResult: Counts, review queue additions and timing

        Raises:
            DocumentNotFoundError: Document is not registered
            DocumentProcessingError: Document-level failure before dispatch
            PersistenceError: Store failure
        """
        return await self._pipeline.process(document_id)

    async def get_document(self, document_id: str) -> Document:
        """
        Fetch a document and its processing status.

        Raises:
            DocumentNotFoundError: Document is not registered
        """
        document = await self._store.get_document(document_id)
        if document is None:
            raise DocumentNotFoundError(document_id)
        return document

    async def get_chunks(self, document_id: str) -> list[DocumentChunk]:
        """Chunks of a document in sequence order."""
        await self.get_document(document_id)
        return await self._store.get_chunks(document_id)

    async def get_rules(self, document_id: str) -> list[ExtractedRule]:
        """Rules of a document in source order."""
        await self.get_document(document_id)
        return await self._store.get_rules_for_document(document_id)

    async def get_review_queue(self, limit: int | None = None) -> list[DocumentChunk]:
        """Chunks awaiting human review across all documents."""
        return await self._store.get_chunks_by_status(ChunkStatus.NEEDS_REVIEW, limit=limit)

    async def search(self, query: str, limit: int | None = None) -> list[RankedChunk]:
        """
        Search indexed chunks.

        Args:
            query: Search query text
            limit: Number of ranked chunks (default from settings)

        Returns:
            list[RankedChunk]: Ranked chunks with neighbouring context

        Raises:
            EmbeddingError: Query could not be embedded
        """
        return await self._retriever.search(query, limit)

    async def delete_document(self, document_id: str) -> bool:
        """
        Delete a document with its chunks, rules, stats and vectors.

        Steps:
        1. Cancel a running pipeline and wait for it to settle
        2. Remove the document's vectors from the index
        3. Delete the document record (cascades to chunks, rules, stats)

        Returns:
            True if the document existed
        """
        if self._pipeline.cancel(document_id):
            await self._pipeline.wait_until_idle(document_id)

        removed = await self._pipeline.remove_from_index(document_id)
        deleted = await self._store.delete_document(document_id)
        logger.info(
            f"{__name__}:delete_document - Document deleted",
            extra={"document_id": document_id, "existed": deleted, "vectors_removed": removed},
        )
        return deleted
