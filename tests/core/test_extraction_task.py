"""
Test suite for ExtractionScheduler and RetryPolicy.

Tests the chunk lifecycle under transient and permanent failures, quadratic
backoff, bounded batch concurrency, cancellation, idempotent resubmission
and cross-chunk reference resolution.

System role: Verification of bounded-concurrency rule extraction
"""

import asyncio

import pytest

from regulex.configs import SchedulerSettings
from regulex.core.document_processing.models import ChunkStatus, RuleDraft
from regulex.core.document_processing.tasks import ExtractionScheduler, RetryPolicy, quadratic_backoff
from regulex.core.exceptions import (
    DocumentProcessingError,
    ErrorKind,
    ExtractionTimeoutError,
    InvalidResponseError,
    PersistenceError,
    RateLimitedError,
)
from tests.fakes import RecordingSleep, ScriptedExtractor, make_chunks, prose


def build_scheduler(store, extractor, sleep: RecordingSleep, **overrides) -> ExtractionScheduler:
    settings = SchedulerSettings(extraction_timeout_seconds=5.0, **overrides)
    return ExtractionScheduler(store, extractor, settings, sleep=sleep)


class TestRetryPolicy:
    """Test suite for RetryPolicy."""

    def test_delays_should_grow_quadratically(self) -> None:
        # Arrange
        policy = RetryPolicy(max_retries=3, base_seconds=1.0)

        # Act / Assert
        assert [policy.delay_for(n) for n in (1, 2, 3)] == [1.0, 4.0, 9.0]
        assert policy.max_attempts == 4

    def test_from_settings_should_copy_budget(self) -> None:
        policy = RetryPolicy.from_settings(SchedulerSettings(max_retries=5, backoff_base_seconds=0.5))

        assert (policy.max_retries, policy.base_seconds) == (5, 0.5)
        assert quadratic_backoff(2, 0.5) == 2.0

    def test_attempts_left_should_shrink_with_used_retries(self) -> None:
        policy = RetryPolicy(max_retries=3)

        assert [policy.attempts_left(used) for used in (0, 2, 3)] == [4, 2, 1]


class TestSchedulerRetries:
    """Test suite for per-chunk retry behaviour."""

    async def test_transient_failures_then_success_should_complete(
        self, store, document, recording_sleep: RecordingSleep
    ) -> None:
        """Test Timeout, Timeout, success ends completed with two retries."""
        # Arrange
        await store.add_chunks(make_chunks(document.id, [prose(5)]))
        extractor = ScriptedExtractor(ExtractionTimeoutError("slow"), ExtractionTimeoutError("slow"))
        scheduler = build_scheduler(store, extractor, recording_sleep)

        # Act
        result = await scheduler.submit(document.id)

        # Assert
        (chunk,) = await store.get_chunks(document.id)
        assert chunk.status == ChunkStatus.COMPLETED
        assert chunk.retry_count == 2
        assert recording_sleep.delays == [1.0, 4.0]
        assert result.success_count == 1
        assert result.failure_count == 0
        assert len(await store.get_rules_for_chunk(chunk.id)) == 1

    async def test_exhausted_retries_should_route_to_review(
        self, store, document, recording_sleep: RecordingSleep
    ) -> None:
        """Test four rate-limit failures with maxRetries=3 end in needs_review."""
        # Arrange
        await store.add_chunks(make_chunks(document.id, [prose(5)]))
        extractor = ScriptedExtractor(*(RateLimitedError("quota") for _ in range(4)))
        scheduler = build_scheduler(store, extractor, recording_sleep)

        # Act
        result = await scheduler.submit(document.id)

        # Assert
        (chunk,) = await store.get_chunks(document.id)
        assert chunk.status == ChunkStatus.NEEDS_REVIEW
        assert chunk.retry_count == 3
        assert len(extractor.calls) == 4
        assert recording_sleep.delays == [1.0, 4.0, 9.0]
        assert result.needs_review_chunk_ids == [chunk.id]
        assert result.failure_count == 1
        review_queue = await store.get_chunks_by_status(ChunkStatus.NEEDS_REVIEW)
        assert [queued.id for queued in review_queue] == [chunk.id]
        (stats,) = await store.get_stats(chunk.id)
        assert stats.error_kind == ErrorKind.RATE_LIMITED
        assert stats.attempts == 4

    async def test_invalid_response_should_not_be_retried(
        self, store, document, recording_sleep: RecordingSleep
    ) -> None:
        # Arrange
        await store.add_chunks(make_chunks(document.id, [prose(5)]))
        extractor = ScriptedExtractor(InvalidResponseError("not json"))
        scheduler = build_scheduler(store, extractor, recording_sleep)

        # Act
        await scheduler.submit(document.id)

        # Assert
        (chunk,) = await store.get_chunks(document.id)
        assert chunk.status == ChunkStatus.NEEDS_REVIEW
        assert chunk.retry_count == 0
        assert len(extractor.calls) == 1
        assert recording_sleep.delays == []

    async def test_unexpected_exception_should_count_as_invalid_response(
        self, store, document, recording_sleep: RecordingSleep
    ) -> None:
        # Arrange
        await store.add_chunks(make_chunks(document.id, [prose(5)]))
        extractor = ScriptedExtractor(KeyError("rules"))
        scheduler = build_scheduler(store, extractor, recording_sleep)

        # Act
        await scheduler.submit(document.id)

        # Assert
        (chunk,) = await store.get_chunks(document.id)
        (stats,) = await store.get_stats(chunk.id)
        assert chunk.status == ChunkStatus.NEEDS_REVIEW
        assert stats.error_kind == ErrorKind.INVALID_RESPONSE

    async def test_slow_extraction_should_time_out_and_retry(
        self, store, document, recording_sleep: RecordingSleep
    ) -> None:
        """Test the per-call timeout turns a hung call into a retryable timeout."""
        # Arrange
        await store.add_chunks(make_chunks(document.id, [prose(5)]))
        extractor = ScriptedExtractor(delay=0.2)
        scheduler = ExtractionScheduler(
            store,
            extractor,
            SchedulerSettings(extraction_timeout_seconds=0.01, max_retries=1),
            sleep=recording_sleep,
        )

        # Act
        await scheduler.submit(document.id)

        # Assert
        (chunk,) = await store.get_chunks(document.id)
        (stats,) = await store.get_stats(chunk.id)
        assert chunk.status == ChunkStatus.NEEDS_REVIEW
        assert chunk.retry_count == 1
        assert stats.error_kind == ErrorKind.TIMEOUT

    async def test_store_failure_should_propagate(self, store, document, recording_sleep: RecordingSleep) -> None:
        """Test persistence errors are not swallowed as extraction failures."""
        # Arrange
        await store.add_chunks(make_chunks(document.id, [prose(5)]))
        extractor = ScriptedExtractor(PersistenceError("disk full", operation="replace_rules"))
        scheduler = build_scheduler(store, extractor, recording_sleep)

        # Act / Assert
        with pytest.raises(PersistenceError):
            await scheduler.submit(document.id)
        assert not scheduler.is_running(document.id)


class TestSchedulerBatches:
    """Test suite for bounded dispatch."""

    async def test_batches_should_never_exceed_width(self, store, document, recording_sleep: RecordingSleep) -> None:
        """Test seven chunks run as 3+3+1 with a pause between batches."""
        # Arrange
        await store.add_chunks(make_chunks(document.id, [prose(2)] * 7))
        extractor = ScriptedExtractor(delay=0.01)
        scheduler = build_scheduler(store, extractor, recording_sleep, batch_width=3)

        # Act
        result = await scheduler.submit(document.id)

        # Assert
        assert extractor.max_active <= 3
        assert len(extractor.calls) == 7
        assert recording_sleep.delays == [1.0, 1.0]
        assert result.success_count == 7
        chunks = await store.get_chunks(document.id)
        assert all(chunk.status == ChunkStatus.COMPLETED for chunk in chunks)

    async def test_failure_of_one_chunk_should_not_affect_siblings(
        self, store, document, recording_sleep: RecordingSleep
    ) -> None:
        # Arrange
        await store.add_chunks(make_chunks(document.id, [prose(2)] * 3))
        extractor = ScriptedExtractor(InvalidResponseError("garbled"))
        scheduler = build_scheduler(store, extractor, recording_sleep)

        # Act
        result = await scheduler.submit(document.id)

        # Assert
        assert result.success_count == 2
        assert result.failure_count == 1
        statuses = sorted(chunk.status.value for chunk in await store.get_chunks(document.id))
        assert statuses == ["completed", "completed", "needs_review"]

    async def test_resubmission_should_skip_terminal_chunks(
        self, store, document, recording_sleep: RecordingSleep
    ) -> None:
        """Test reprocessing a completed document creates no rules."""
        # Arrange
        await store.add_chunks(make_chunks(document.id, [prose(2)] * 3))
        extractor = ScriptedExtractor()
        scheduler = build_scheduler(store, extractor, recording_sleep)
        await scheduler.submit(document.id)
        rules_before = await store.get_rules_for_document(document.id)

        # Act
        result = await scheduler.submit(document.id)

        # Assert
        assert result.success_count == 0
        assert result.skipped_count == 3
        assert len(extractor.calls) == 3
        assert await store.get_rules_for_document(document.id) == rules_before

    async def test_concurrent_submission_should_be_rejected(
        self, store, document, recording_sleep: RecordingSleep
    ) -> None:
        # Arrange
        await store.add_chunks(make_chunks(document.id, [prose(2)]))
        extractor = ScriptedExtractor(delay=0.05)
        scheduler = build_scheduler(store, extractor, recording_sleep)
        running = asyncio.create_task(scheduler.submit(document.id))
        await asyncio.sleep(0)

        # Act / Assert
        with pytest.raises(DocumentProcessingError):
            await scheduler.submit(document.id)
        await running
        assert not scheduler.is_running(document.id)


class TestSchedulerCancellation:
    """Test suite for cancellation."""

    async def test_cancel_should_release_in_flight_chunks_and_stop_dispatch(
        self, store, document, recording_sleep: RecordingSleep
    ) -> None:
        """Test results arriving after cancellation are discarded."""
        # Arrange
        await store.add_chunks(make_chunks(document.id, [prose(2)] * 3))
        extractor = ScriptedExtractor()
        scheduler = build_scheduler(store, extractor, recording_sleep, batch_width=1)
        extractor.on_call = lambda _: scheduler.cancel(document.id)

        # Act
        result = await scheduler.submit(document.id)

        # Assert
        assert result.cancelled is True
        assert result.success_count == 0
        assert len(extractor.calls) == 1
        chunks = await store.get_chunks(document.id)
        assert all(chunk.status == ChunkStatus.PENDING for chunk in chunks)
        assert await store.get_rules_for_document(document.id) == []

    async def test_cancel_should_stop_pending_retries(
        self, store, document, recording_sleep: RecordingSleep
    ) -> None:
        # Arrange
        await store.add_chunks(make_chunks(document.id, [prose(2)]))
        extractor = ScriptedExtractor(RateLimitedError("quota"), RateLimitedError("quota"))
        scheduler = build_scheduler(store, extractor, recording_sleep)
        extractor.on_call = lambda _: scheduler.cancel(document.id)

        # Act
        result = await scheduler.submit(document.id)

        # Assert
        (chunk,) = await store.get_chunks(document.id)
        assert result.cancelled is True
        assert len(extractor.calls) == 1
        assert chunk.status == ChunkStatus.PENDING

    async def test_resumed_chunk_should_keep_one_retry_budget(
        self, store, document, recording_sleep: RecordingSleep
    ) -> None:
        """Test retries used before a cancellation count against the resumed run."""
        # Arrange
        await store.add_chunks(make_chunks(document.id, [prose(2)]))
        extractor = ScriptedExtractor(*[RateLimitedError("quota") for _ in range(8)])
        scheduler = build_scheduler(store, extractor, recording_sleep, max_retries=3)
        extractor.on_call = lambda _: scheduler.cancel(document.id) if len(extractor.calls) == 3 else None
        await scheduler.submit(document.id)
        (cancelled,) = await store.get_chunks(document.id)
        extractor.on_call = None

        # Act
        result = await scheduler.submit(document.id)

        # Assert
        (chunk,) = await store.get_chunks(document.id)
        assert (cancelled.status, cancelled.retry_count) == (ChunkStatus.PENDING, 2)
        assert chunk.status == ChunkStatus.NEEDS_REVIEW
        assert chunk.retry_count == 3
        assert len(extractor.calls) == 5
        assert recording_sleep.delays == [1.0, 4.0, 9.0]
        assert result.needs_review_chunk_ids == [chunk.id]
        assert chunk.status == ChunkStatus.PENDING

    def test_cancel_should_return_false_when_idle(self, recording_sleep: RecordingSleep) -> None:
        scheduler = ExtractionScheduler(None, ScriptedExtractor(), SchedulerSettings(), sleep=recording_sleep)

        assert scheduler.cancel("missing") is False


class TestCrossChunkReferences:
    """Test suite for provenance on extracted rules."""

    async def test_rules_using_context_should_reference_neighbours(
        self, store, document, recording_sleep: RecordingSleep
    ) -> None:
        """Test context_refs and overlap-only markers resolve to neighbour chunk IDs."""
        # Arrange
        chunks = make_chunks(document.id, ["The rate is 24%.", "Above Rs. 500,000 the rate is 30%.", "End."])
        chunks[1] = chunks[1].model_copy(
            update={
                "overlap_prefix": "The rate is 24%. ",
                "overlap_prev": 4,
                "overlap_suffix": " End.",
                "overlap_next": 1,
            }
        )
        await store.add_chunks([chunks[1]])
        drafts = [
            RuleDraft(rule_type="rate", payload={"rate": 30, "min_income": 500000}),
            RuleDraft(rule_type="rate", payload={"rate": 24, "max_income": 500000}),
            RuleDraft(rule_type="note", payload={}, context_refs={"next"}),
        ]
        scheduler = build_scheduler(store, ScriptedExtractor(drafts), recording_sleep)

        # Act
        await scheduler.submit(document.id)

        # Assert
        rules = await store.get_rules_for_chunk(chunks[1].id)
        by_payload = {tuple(sorted(rule.payload)): rule for rule in rules}
        assert by_payload[("min_income", "rate")].cross_chunk_refs == set()
        assert by_payload[("max_income", "rate")].cross_chunk_refs == {chunks[0].id}
        assert by_payload[()].cross_chunk_refs == {chunks[2].id}
        assert len(rules) == 3
        assert all(rule.source_chunk_id == chunks[1].id for rule in rules)
