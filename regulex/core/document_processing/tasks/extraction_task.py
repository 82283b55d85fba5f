"""
Bounded-concurrency rule extraction task.

Dispatches the pending chunks of a document to the extraction model in
fixed-width batches. Each chunk coroutine claims its chunk with a
compare-and-set, retries transient failures under an explicit RetryPolicy
(driven by tenacity on attempt results, not exceptions), persists rules,
runs the post-completion hook and records processing stats.

Dependencies: tenacity, asyncio (stdlib)
System role: Fourth stage of document processing
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Awaitable, Callable

from tenacity import AsyncRetrying, RetryCallState, retry_if_result, stop_after_attempt
from tenacity.stop import stop_base

from regulex.boundary.db.rule_store import RuleStore
from regulex.configs.scheduler import SchedulerSettings
from regulex.core.document_processing.interfaces import RuleExtractionService
from regulex.core.document_processing.keywords import KeywordExtractor, Marker, find_markers, payload_signals
from regulex.core.document_processing.models import (
    ChunkProcessingStats,
    ChunkStatus,
    DocumentChunk,
    ExtractedRule,
    ProcessingResult,
    QualityReport,
    RuleDraft,
    rule_id_for,
)
from regulex.core.document_processing.units import UnitCounter, count_words
from regulex.core.exceptions import (
    ChunkExtractionError,
    DocumentProcessingError,
    ErrorKind,
    PersistenceError,
)
from regulex.observability.log_utils import chunk_context

logger = logging.getLogger(__name__)

PostCompletionHook = Callable[[DocumentChunk, list[ExtractedRule]], Awaitable[QualityReport | None]]
Sleep = Callable[[float], Awaitable[None]]


def quadratic_backoff(retry_number: int, base_seconds: float) -> float:
    """Delay before retry n: n^2 * base."""
    return retry_number ** 2 * base_seconds


@dataclass(frozen=True)
class RetryPolicy:
    """Retry budget and backoff for one chunk."""

    max_retries: int = 3
    base_seconds: float = 1.0
    backoff: Callable[[int, float], float] = quadratic_backoff

    @classmethod
    def from_settings(cls, settings: SchedulerSettings) -> "RetryPolicy":
        return cls(max_retries=settings.max_retries, base_seconds=settings.backoff_base_seconds)

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1

    def delay_for(self, retry_number: int) -> float:
        return self.backoff(retry_number, self.base_seconds)

    def attempts_left(self, retries_used: int) -> int:
        """
        Attempts a run may make after earlier runs used some retries.

        A run always gets its first attempt: it replaces an in-flight attempt
        whose result was discarded by cancellation or a crash.
        """
        return max(self.max_attempts - retries_used, 1)


@dataclass(frozen=True)
class AttemptOutcome:
    """Result of one extraction call: drafts on success, an error kind otherwise."""

    drafts: list[RuleDraft] | None = None
    error_kind: ErrorKind | None = None
    error_message: str | None = None
    cancelled: bool = False

    @property
    def succeeded(self) -> bool:
        return self.error_kind is None and not self.cancelled

    @property
    def retryable(self) -> bool:
        return self.error_kind is not None and self.error_kind.retryable


@dataclass
class ChunkOutcome:
    """Terminal outcome of one chunk coroutine."""

    chunk_id: str
    final_status: ChunkStatus | None = None
    attempts: int = 0
    extracted: bool = False
    cancelled: bool = False
    claimed: bool = True


@dataclass
class _Submission:
    cancel_event: asyncio.Event = field(default_factory=asyncio.Event)
    done: asyncio.Event = field(default_factory=asyncio.Event)


class stop_when_set(stop_base):
    """Stop retrying once an event is set."""

    def __init__(self, event: asyncio.Event) -> None:
        self._event = event

    def __call__(self, retry_state: RetryCallState) -> bool:
        return self._event.is_set()


class ExtractionScheduler:
    """
    Dispatch chunk extraction in fixed-width concurrent batches.

    Usage:
        scheduler = ExtractionScheduler(store, extractor, settings.scheduler)
        result = await scheduler.submit(document_id)
    """

    def __init__(
        self,
        store: RuleStore,
        extractor: RuleExtractionService,
        settings: SchedulerSettings,
        policy: RetryPolicy | None = None,
        unit_counter: UnitCounter = count_words,
        on_completed: PostCompletionHook | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        """
        Initialize scheduler.

        Args:
            store: Durable store owning chunk state
            extractor: Extraction model adapter
            settings: Batch width, delays and timeout
            policy: Retry policy (built from settings if None)
            unit_counter: Size function used for token accounting
            on_completed: Hook run after a chunk reaches `completed`
            sleep: Awaitable sleep used for backoff and batch delays
        """
        self._store = store
        self._extractor = extractor
        self._settings = settings
        self._policy = policy or RetryPolicy.from_settings(settings)
        self._count = unit_counter
        self._on_completed = on_completed
        self._sleep = sleep
        self._submissions: dict[str, _Submission] = {}

    @property
    def policy(self) -> RetryPolicy:
        return self._policy

    def is_running(self, document_id: str) -> bool:
        """Whether a submission for the document is in progress."""
        return document_id in self._submissions

    def cancel(self, document_id: str) -> bool:
        """
        Request cancellation of a document's submission.

        No further batches or retries are dispatched; in-flight results are
        discarded and their chunks released back to `pending`.

        Returns:
            True if a submission was running
        """
        submission = self._submissions.get(document_id)
        if submission is None:
            return False
        submission.cancel_event.set()
        logger.info(f"{__name__}:cancel - Cancellation requested", extra={"document_id": document_id})
        return True

    async def wait_until_idle(self, document_id: str) -> None:
        """Wait for a running submission of the document to finish."""
        submission = self._submissions.get(document_id)
        if submission is not None:
            await submission.done.wait()

    async def submit(self, document_id: str) -> ProcessingResult:
        """
        Extract rules for every pending chunk of a document.

        Args:
            document_id: Document whose chunks are dispatched

        Returns:
            ProcessingResult: Summary scoped to this submission

        Raises:
            DocumentProcessingError: A submission for the document is already running
            PersistenceError: Store failure, raised after the current batch settles
        """
        if document_id in self._submissions:
            raise DocumentProcessingError("Document is already being processed", document_id=document_id)

        submission = _Submission()
        self._submissions[document_id] = submission
        try:
            chunks = await self._store.get_chunks(document_id)
            pending = [chunk for chunk in chunks if chunk.status == ChunkStatus.PENDING]
            skipped = len(chunks) - len(pending)
            width = self._settings.batch_width
            batches = [pending[i:i + width] for i in range(0, len(pending), width)]

            logger.info(
                f"{__name__}:submit - Dispatching extraction",
                extra={
                    "document_id": document_id,
                    "pending_count": len(pending),
                    "skipped_count": skipped,
                    "batch_count": len(batches),
                },
            )

            outcomes: list[ChunkOutcome] = []
            for index, batch in enumerate(batches):
                if index > 0 and not submission.cancel_event.is_set():
                    await self._sleep(self._settings.inter_batch_delay_seconds)
                if submission.cancel_event.is_set():
                    break
                results = await asyncio.gather(
                    *(self._process_chunk(chunk, submission.cancel_event) for chunk in batch),
                    return_exceptions=True,
                )
                outcomes.extend(result for result in results if isinstance(result, ChunkOutcome))
                errors = [result for result in results if isinstance(result, BaseException)]
                if errors:
                    logger.error(
                        f"{__name__}:submit - Batch raised, stopping dispatch",
                        extra={"document_id": document_id, "batch": index, "error_count": len(errors)},
                    )
                    raise errors[0]

            return self._summarize(document_id, outcomes, skipped, submission.cancel_event.is_set())
        finally:
            submission.done.set()
            self._submissions.pop(document_id, None)

    def _summarize(
        self,
        document_id: str,
        outcomes: list[ChunkOutcome],
        skipped: int,
        cancelled: bool,
    ) -> ProcessingResult:
        result = ProcessingResult(
            document_id=document_id,
            success_count=sum(1 for o in outcomes if o.extracted and not o.cancelled),
            failure_count=sum(1 for o in outcomes if o.claimed and not o.extracted and not o.cancelled),
            needs_review_chunk_ids=[o.chunk_id for o in outcomes if o.final_status == ChunkStatus.NEEDS_REVIEW],
            skipped_count=skipped + sum(1 for o in outcomes if not o.claimed),
            cancelled=cancelled,
        )
        logger.info(
            f"{__name__}:submit - Extraction finished",
            extra={
                "document_id": document_id,
                "success_count": result.success_count,
                "failure_count": result.failure_count,
                "needs_review_count": len(result.needs_review_chunk_ids),
                "cancelled": cancelled,
            },
        )
        return result

    async def _process_chunk(self, chunk: DocumentChunk, cancel_event: asyncio.Event) -> ChunkOutcome:
        """Run one chunk through claim, retries and its terminal transition."""
        if not await self._store.transition(chunk.id, ChunkStatus.PENDING, ChunkStatus.PROCESSING):
            logger.info(
                f"{__name__}:_process_chunk - Chunk not pending, skipped",
                extra={"chunk_id": chunk.id},
            )
            return ChunkOutcome(chunk_id=chunk.id, claimed=False)

        started_at = datetime.now(timezone.utc)
        attempts = 0
        retries_used = chunk.retry_count

        async def attempt() -> AttemptOutcome:
            nonlocal attempts
            if attempts:
                if cancel_event.is_set():
                    return AttemptOutcome(cancelled=True)
                await self._store.increment_retry_count(chunk.id)
            attempts += 1
            return await self._attempt(chunk)

        retrying = AsyncRetrying(
            stop=stop_after_attempt(self._policy.attempts_left(retries_used)) | stop_when_set(cancel_event),
            wait=lambda retry_state: self._policy.delay_for(retries_used + retry_state.attempt_number),
            retry=retry_if_result(lambda outcome: outcome.retryable),
            sleep=self._sleep,
            before_sleep=lambda retry_state: logger.warning(
                f"{__name__}:_process_chunk - Transient failure, retrying",
                extra={
                    "chunk_id": chunk.id,
                    "attempt": retry_state.attempt_number,
                    "error_kind": retry_state.outcome.result().error_kind.value,
                    "delay_seconds": retry_state.upcoming_sleep,
                },
            ),
            retry_error_callback=lambda retry_state: retry_state.outcome.result(),
        )
        outcome: AttemptOutcome = await retrying(attempt)

        if cancel_event.is_set():
            await self._store.transition(chunk.id, ChunkStatus.PROCESSING, ChunkStatus.PENDING)
            logger.info(
                f"{__name__}:_process_chunk - Cancelled, result discarded",
                extra={"chunk_id": chunk.id, "attempts": attempts},
            )
            return ChunkOutcome(chunk_id=chunk.id, attempts=attempts, cancelled=True)

        if outcome.succeeded:
            return await self._complete(chunk, outcome.drafts or [], attempts, started_at)
        return await self._fail(chunk, outcome, attempts, started_at)

    async def _attempt(self, chunk: DocumentChunk) -> AttemptOutcome:
        """One extraction call mapped to an outcome. Store errors propagate."""
        try:
            drafts = await asyncio.wait_for(
                self._extractor.extract(chunk.padded_text),
                timeout=self._settings.extraction_timeout_seconds,
            )
        except asyncio.TimeoutError:
            return AttemptOutcome(error_kind=ErrorKind.TIMEOUT, error_message="Extraction call timed out")
        except ChunkExtractionError as e:
            return AttemptOutcome(error_kind=e.kind, error_message=e.message)
        except PersistenceError:
            raise
        except Exception as e:
            logger.warning(
                f"{__name__}:_attempt - Unexpected extractor failure treated as invalid response",
                extra={"chunk_id": chunk.id, "error_type": type(e).__name__},
            )
            return AttemptOutcome(error_kind=ErrorKind.INVALID_RESPONSE, error_message=str(e))
        return AttemptOutcome(drafts=list(drafts))

    async def _complete(
        self,
        chunk: DocumentChunk,
        drafts: list[RuleDraft],
        attempts: int,
        started_at: datetime,
    ) -> ChunkOutcome:
        rules = self._build_rules(chunk, drafts)
        await self._store.replace_rules(chunk.id, rules)
        await self._store.transition(chunk.id, ChunkStatus.PROCESSING, ChunkStatus.COMPLETED)

        report = await self._on_completed(chunk, rules) if self._on_completed else None
        final_status = ChunkStatus.NEEDS_REVIEW if report is not None and not report.passed else ChunkStatus.COMPLETED

        await self._store.record_stats(
            ChunkProcessingStats(
                chunk_id=chunk.id,
                started_at=started_at,
                finished_at=datetime.now(timezone.utc),
                attempts=attempts,
                rules_extracted=len(rules),
                tokens_used=self._count(chunk.padded_text),
                quality_factors=report.available_factors() if report else {},
                final_status=final_status,
            )
        )
        logger.info(
            f"{__name__}:_complete - Chunk extracted",
            extra=chunk_context(chunk, rules_extracted=len(rules), attempts=attempts, final_status=final_status),
        )
        return ChunkOutcome(chunk_id=chunk.id, final_status=final_status, attempts=attempts, extracted=True)

    async def _fail(
        self,
        chunk: DocumentChunk,
        outcome: AttemptOutcome,
        attempts: int,
        started_at: datetime,
    ) -> ChunkOutcome:
        await self._store.transition(chunk.id, ChunkStatus.PROCESSING, ChunkStatus.FAILED)
        await self._store.transition(chunk.id, ChunkStatus.FAILED, ChunkStatus.NEEDS_REVIEW)
        await self._store.record_stats(
            ChunkProcessingStats(
                chunk_id=chunk.id,
                started_at=started_at,
                finished_at=datetime.now(timezone.utc),
                attempts=attempts,
                tokens_used=self._count(chunk.padded_text) * attempts,
                final_status=ChunkStatus.NEEDS_REVIEW,
                error_kind=outcome.error_kind,
            )
        )
        logger.warning(
            f"{__name__}:_fail - Extraction failed, chunk routed to review",
            extra=chunk_context(chunk, attempts=attempts, error_kind=outcome.error_kind, error=outcome.error_message),
        )
        return ChunkOutcome(chunk_id=chunk.id, final_status=ChunkStatus.NEEDS_REVIEW, attempts=attempts)

    def _build_rules(self, chunk: DocumentChunk, drafts: list[RuleDraft]) -> list[ExtractedRule]:
        """Attach provenance and resolve cross-chunk references."""
        core_markers = find_markers(chunk.text)
        previous_only = find_markers(chunk.overlap_prefix) - core_markers
        next_only = find_markers(chunk.overlap_suffix) - core_markers

        rules: list[ExtractedRule] = []
        for ordinal, draft in enumerate(drafts):
            refs: set[str] = set()
            if chunk.overlap_prev and chunk.previous_id:
                if "previous" in draft.context_refs or self._uses_markers(draft, previous_only):
                    refs.add(chunk.previous_id)
            if chunk.overlap_next:
                if "next" in draft.context_refs or self._uses_markers(draft, next_only):
                    refs.add(chunk.next_id)
            rules.append(
                ExtractedRule(
                    id=rule_id_for(chunk.id, ordinal),
                    document_id=chunk.document_id,
                    source_chunk_id=chunk.id,
                    source_sequence=chunk.sequence,
                    rule_type=draft.rule_type,
                    payload=draft.payload,
                    confidence=draft.confidence,
                    cross_chunk_refs=refs,
                )
            )
        return rules

    @staticmethod
    def _uses_markers(draft: RuleDraft, markers: set[Marker]) -> bool:
        if not markers:
            return False
        signals = payload_signals([draft.payload])
        return any(KeywordExtractor.marker_reflected(marker, signals) for marker in markers)
