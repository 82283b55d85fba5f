"""
Document pipeline orchestrator.

Coordinates load, text extraction, structure analysis, chunk planning,
overlap stitching and scheduled rule extraction for one document. Quality
review and indexing run per chunk as the scheduler's completion hook.

Dependencies: All task modules, configs
System role: Pipeline orchestration (coordinates only)
"""

import asyncio
import logging
import time
from datetime import datetime, timezone

from regulex.boundary.db.rule_store import RuleStore
from regulex.boundary.vdb import FAISSVectorIndex
from regulex.configs import Settings, get_settings
from regulex.core.document_processing.interfaces import (
    DocumentSource,
    EmbeddingService,
    RawTextProvider,
    RuleExtractionService,
)
from regulex.core.document_processing.keywords import KeywordExtractor
from regulex.core.document_processing.models import (
    Document,
    DocumentChunk,
    DocumentStatus,
    ExtractedRule,
    ProcessingResult,
    QualityReport,
)
from regulex.core.document_processing.tasks import (
    ChunkPlanner,
    EmbeddingIndexer,
    ExtractionScheduler,
    OverlapStitcher,
    QualityValidator,
    StructureAnalyzer,
)
from regulex.core.document_processing.tasks.extraction_task import Sleep
from regulex.core.document_processing.units import build_unit_counter
from regulex.core.exceptions import DocumentNotFoundError, DocumentProcessingError

logger = logging.getLogger(__name__)


class DocumentPipeline:
    """Orchestrate document processing: load -> extract text -> analyze -> plan -> stitch -> extract rules."""

    def __init__(
        self,
        store: RuleStore,
        source: DocumentSource,
        text_provider: RawTextProvider,
        extractor: RuleExtractionService,
        embedder: EmbeddingService,
        index: FAISSVectorIndex,
        settings: Settings | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        """
        Initialize pipeline with collaborators and configuration.

        Args:
            store: Durable store owning document and chunk state
            source: Reads raw document bytes
            text_provider: Decodes bytes into text and structural hints
            extractor: Rule extraction model adapter
            embedder: Embedding model adapter
            index: Vector index for chunks and rules
            settings: Application settings (uses defaults if None)
            sleep: Awaitable sleep used for backoff and batch delays
        """
        self._settings = settings or get_settings()
        self._store = store
        self._source = source
        self._text_provider = text_provider
        self._index = index

        unit_counter = build_unit_counter(self._settings.chunking)
        keywords = KeywordExtractor(self._settings.quality.domain_keywords)

        self._analyzer = StructureAnalyzer()
        self._planner = ChunkPlanner(self._settings.chunking, unit_counter, keywords)
        self._stitcher = OverlapStitcher(self._settings.chunking)
        self._validator = QualityValidator(self._settings.quality, keywords, store)
        self._indexer = EmbeddingIndexer(embedder, index, store)
        self._scheduler = ExtractionScheduler(
            store,
            extractor,
            self._settings.scheduler,
            unit_counter=unit_counter,
            on_completed=self._after_extraction,
            sleep=sleep,
        )
        self._runs: dict[str, asyncio.Event] = {}
        self._cancel_requested: set[str] = set()

    @property
    def scheduler(self) -> ExtractionScheduler:
        return self._scheduler

    @property
    def validator(self) -> QualityValidator:
        return self._validator

    def is_running(self, document_id: str) -> bool:
        """Whether the document is being processed."""
        return document_id in self._runs

    async def process(self, document_id: str) -> ProcessingResult:
        """
        Process a document through the full pipeline.

        The first run plans and persists chunks. Later runs reuse the stored
        chunks, release any left `processing` by an interrupted run, and
        dispatch only the chunks still pending.

        Args:
            document_id: Registered document ID

        Returns:
            ProcessingResult: Summary scoped to this run

        Raises:
            DocumentNotFoundError: Document is not registered
            DocumentProcessingError: Document already running, or its bytes
                cannot be read or decoded (document marked failed)
            PersistenceError: Store failure; state stays resumable
        """
        document = await self._store.get_document(document_id)
        if document is None:
            raise DocumentNotFoundError(document_id)
        if document_id in self._runs:
            raise DocumentProcessingError("Document is already being processed", document_id=document_id)

        done = asyncio.Event()
        self._runs[document_id] = done
        try:
            return await self._run(document)
        finally:
            done.set()
            self._runs.pop(document_id, None)
            self._cancel_requested.discard(document_id)

    async def _run(self, document: Document) -> ProcessingResult:
        start_time = time.perf_counter()
        started_at = datetime.now(timezone.utc)
        await self._store.update_document(
            document.id,
            status=DocumentStatus.PROCESSING,
            processing_started_at=started_at,
            processing_finished_at=None,
            error_message=None,
        )

        chunks = await self._store.get_chunks(document.id)
        if not chunks:
            await self._store.update_document(document.id, status=DocumentStatus.CHUNKING)
            try:
                chunks = await self._chunk(document)
            except DocumentProcessingError as e:
                await self._store.mark_document_failed(document.id, e.message, datetime.now(timezone.utc))
                logger.error(
                    f"{__name__}:process - Document failed before dispatch",
                    extra={"document_id": document.id, "error": e.message},
                )
                raise
            await self._store.add_chunks(chunks)
        else:
            released = await self._store.release_in_flight(document.id)
            logger.info(
                f"{__name__}:process - Resuming from stored chunks",
                extra={"document_id": document.id, "chunk_count": len(chunks), "released_count": released},
            )

        await self._store.update_document(document.id, status=DocumentStatus.EXTRACTING)
        # No await between this check and submit registering its cancel event
        if document.id in self._cancel_requested:
            result = ProcessingResult(document_id=document.id, skipped_count=len(chunks), cancelled=True)
        else:
            try:
                result = await self._scheduler.submit(document.id)
            finally:
                await self._indexer.flush()

        elapsed_ms = (time.perf_counter() - start_time) * 1000
        if result.cancelled:
            # Chunks are pending again; the next run resumes them
            await self._store.update_document(document.id, status=DocumentStatus.UPLOADED)
        else:
            await self._store.update_document(
                document.id,
                status=DocumentStatus.COMPLETED,
                processing_finished_at=datetime.now(timezone.utc),
                processing_duration_ms=int(elapsed_ms),
            )

        result.processing_time_ms = elapsed_ms
        logger.info(
            f"{__name__}:process - Document run finished",
            extra={
                "document_id": document.id,
                "success_count": result.success_count,
                "failure_count": result.failure_count,
                "needs_review_count": len(result.needs_review_chunk_ids),
                "cancelled": result.cancelled,
                "processing_time_ms": round(elapsed_ms, 2),
            },
        )
        return result

    async def _chunk(self, document: Document) -> list[DocumentChunk]:
        """Load, decode, analyze, plan and stitch a document's chunks."""
        data = await self._source.load(document)
        extracted = self._text_provider.extract(data, document.content_type)
        sections = self._analyzer.analyze(extracted.text, extracted.hints)
        chunks = self._stitcher.stitch(self._planner.plan(document.id, sections))
        logger.info(
            f"{__name__}:_chunk - Document chunked",
            extra={
                "document_id": document.id,
                "page_count": extracted.page_count,
                "section_count": len(sections),
                "chunk_count": len(chunks),
            },
        )
        return chunks

    async def _after_extraction(self, chunk: DocumentChunk, rules: list[ExtractedRule]) -> QualityReport:
        """Review a completed chunk and index it when it passes."""
        report = await self._validator.review(chunk, rules)
        if report.passed:
            await self._indexer.index_chunk(chunk, rules)
        return report

    def cancel(self, document_id: str) -> bool:
        """
        Request cancellation of a running document.

        Returns:
            True if the document was running
        """
        if document_id not in self._runs:
            return False
        self._cancel_requested.add(document_id)
        self._scheduler.cancel(document_id)
        return True

    async def wait_until_idle(self, document_id: str) -> None:
        """Wait for a running document to finish."""
        done = self._runs.get(document_id)
        if done is not None:
            await done.wait()

    async def remove_from_index(self, document_id: str) -> int:
        """Remove every vector of a document; returns vectors removed."""
        return await self._indexer.remove_document(document_id)
