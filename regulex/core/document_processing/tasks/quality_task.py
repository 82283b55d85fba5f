"""
Quality validation task.

Scores one chunk's extraction on four factors in [0, 1] and flags chunks
below the threshold for human review:

- completeness: rule markers of the core text found in rule payloads
- context_preservation: overlap-only keywords referenced by the rules
- cross_chunk_consistency: agreement with rules of the adjacent chunks
- keyword_coverage: domain keywords of the core text reflected in rules

A factor that cannot be computed is excluded and the remaining weights are
re-normalised. Scoring is a pure function of its inputs.

Dependencies: regulex.configs, regulex.boundary.db
System role: Post-extraction quality gate
"""

import logging
from decimal import Decimal, InvalidOperation
from itertools import chain
from typing import Any

from regulex.boundary.db.rule_store import RuleStore
from regulex.configs.quality import QualitySettings
from regulex.core.document_processing.keywords import KeywordExtractor, payload_signals
from regulex.core.document_processing.models import (
    ChunkStatus,
    DocumentChunk,
    ExtractedRule,
    QualityReport,
)
from regulex.observability.log_utils import log_with_context

logger = logging.getLogger(__name__)

COMPLETENESS = "completeness"
CONTEXT_PRESERVATION = "context_preservation"
CROSS_CHUNK_CONSISTENCY = "cross_chunk_consistency"
KEYWORD_COVERAGE = "keyword_coverage"

IDENTITY_KEYS = ("title", "name", "section", "code", "bracket_order")
RANGE_KEYS = (("min_income", "max_income"), ("lower", "upper"), ("min", "max"), ("from", "to"))


def _normalize(value: Any) -> Any:
    """Comparable form of a scalar payload value."""
    if isinstance(value, bool) or value is None:
        return value
    if isinstance(value, (int, float)):
        return Decimal(str(value))
    if isinstance(value, str):
        try:
            return Decimal(value.replace(",", "").strip())
        except InvalidOperation:
            return " ".join(value.lower().split())
    return value


def _range_of(payload: dict[str, Any]) -> tuple[str, Decimal, Decimal | None] | None:
    """First numeric (lower, upper) range in a payload; upper None means open-ended."""
    for low_key, high_key in RANGE_KEYS:
        if low_key not in payload:
            continue
        low = _normalize(payload.get(low_key))
        high = _normalize(payload.get(high_key))
        if not isinstance(low, Decimal):
            continue
        return low_key, low, high if isinstance(high, Decimal) else None
    return None


def _scalars_agree(a: dict[str, Any], b: dict[str, Any]) -> bool:
    shared = [
        key for key in a.keys() & b.keys()
        if not isinstance(a[key], (dict, list)) and not isinstance(b[key], (dict, list))
    ]
    return all(_normalize(a[key]) == _normalize(b[key]) for key in shared)


def compare_rules(a: ExtractedRule, b: ExtractedRule) -> bool | None:
    """
    Compare two rules of the same type.

    Returns:
        True when they agree, False when they contradict, None when they
        are not comparable
    """
    if a.rule_type != b.rule_type:
        return None

    for key in IDENTITY_KEYS:
        if key in a.payload and key in b.payload and _normalize(a.payload[key]) == _normalize(b.payload[key]):
            return _scalars_agree(a.payload, b.payload)

    range_a, range_b = _range_of(a.payload), _range_of(b.payload)
    if range_a is None or range_b is None or range_a[0] != range_b[0]:
        return None

    _, low_a, high_a = range_a
    _, low_b, high_b = range_b
    if low_a == low_b and high_a == high_b:
        return _scalars_agree(a.payload, b.payload)
    overlaps = (high_b is None or low_a < high_b) and (high_a is None or low_b < high_a)
    return not overlaps


def cross_chunk_consistency(
    rules: list[ExtractedRule],
    previous_rules: list[ExtractedRule] | None,
    next_rules: list[ExtractedRule] | None,
) -> float | None:
    """
    Agreement rate between a chunk's rules and its neighbours' rules.

    Args:
        rules: Rules of the chunk being scored
        previous_rules: Rules of the preceding chunk, None when unavailable
        next_rules: Rules of the following chunk, None when unavailable

    Returns:
        float | None: Agreements over comparable pairs; 1.0 when nothing is
        comparable; None when no neighbour is available
    """
    neighbours = [group for group in (previous_rules, next_rules) if group is not None]
    if not neighbours:
        return None

    comparisons = 0
    agreements = 0
    for rule in rules:
        for other in chain.from_iterable(neighbours):
            verdict = compare_rules(rule, other)
            if verdict is None:
                continue
            comparisons += 1
            agreements += int(verdict)
    return agreements / comparisons if comparisons else 1.0


def weighted_score(factors: dict[str, float | None], weights: dict[str, float]) -> float:
    """
    Weighted mean of the available factors.

    Absent factors (None) are dropped and the remaining weights re-normalised.
    """
    available = {name: value for name, value in factors.items() if value is not None}
    total_weight = sum(weights.get(name, 0.0) for name in available)
    if total_weight <= 0:
        return 0.0
    score = sum(value * weights.get(name, 0.0) for name, value in available.items()) / total_weight
    return min(1.0, max(0.0, score))


class QualityValidator:
    """Score extractions and route low-quality chunks to review."""

    def __init__(
        self,
        settings: QualitySettings,
        keyword_extractor: KeywordExtractor | None = None,
        store: RuleStore | None = None,
    ) -> None:
        """
        Initialize validator.

        Args:
            settings: Threshold, weights and domain keywords
            keyword_extractor: Shared extractor (built from settings if None)
            store: Store used by review() for neighbours and status updates
        """
        self._settings = settings
        self._keywords = keyword_extractor or KeywordExtractor(settings.domain_keywords)
        self._store = store

    def evaluate(
        self,
        chunk: DocumentChunk,
        rules: list[ExtractedRule],
        previous_rules: list[ExtractedRule] | None = None,
        next_rules: list[ExtractedRule] | None = None,
    ) -> QualityReport:
        """
        Compute the four factors and the overall score for one chunk.

        Args:
            chunk: Chunk whose extraction is scored
            rules: Rules extracted from the chunk
            previous_rules: Rules of the preceding chunk if it is available
            next_rules: Rules of the following chunk if it is available

        Returns:
            QualityReport: Factors, score and threshold
        """
        signals = payload_signals(rule.payload for rule in rules)
        core = self._keywords.profile(chunk.text)
        overlap_only = self._keywords.profile(f"{chunk.overlap_prefix} {chunk.overlap_suffix}") - core

        markers_found = sum(1 for marker in core.markers if self._keywords.marker_reflected(marker, signals))
        terms_found = sum(1 for term in core.terms if self._keywords.term_reflected(term, signals))

        factors: dict[str, float | None] = {
            COMPLETENESS: markers_found / len(core.markers) if core.markers else 1.0,
            CONTEXT_PRESERVATION: (
                self._keywords.reflected_count(overlap_only, signals) / len(overlap_only)
                if len(overlap_only) else 1.0
            ),
            CROSS_CHUNK_CONSISTENCY: cross_chunk_consistency(rules, previous_rules, next_rules),
            KEYWORD_COVERAGE: terms_found / len(core.terms) if core.terms else 1.0,
        }
        return self.score_factors(chunk.id, factors)

    def score_factors(self, chunk_id: str, factors: dict[str, float | None]) -> QualityReport:
        """Build a report from precomputed factor values."""
        score = weighted_score(factors, self._settings.weights)
        return QualityReport(
            chunk_id=chunk_id,
            factors=factors,
            score=round(score, 6),
            threshold=self._settings.threshold,
        )

    async def _neighbour_rules(self, chunk_id: str | None) -> list[ExtractedRule] | None:
        """Rules of a neighbour that finished extraction, else None."""
        if chunk_id is None:
            return None
        neighbour = await self._store.get_chunk(chunk_id)
        if neighbour is None:
            return None
        scored_review = neighbour.status == ChunkStatus.NEEDS_REVIEW and neighbour.quality_score is not None
        if neighbour.status != ChunkStatus.COMPLETED and not scored_review:
            return None
        return await self._store.get_rules_for_chunk(chunk_id)

    async def review(self, chunk: DocumentChunk, rules: list[ExtractedRule]) -> QualityReport:
        """
        Score a completed chunk, persist the score and flag it if below threshold.

        Neighbours that have not finished extraction contribute no
        constraint.

        Args:
            chunk: Chunk in `completed` status
            rules: Its persisted rules

        Returns:
            QualityReport: The scoring outcome
        """
        if self._store is None:
            raise RuntimeError("QualityValidator.review requires a store")

        report = self.evaluate(
            chunk,
            rules,
            previous_rules=await self._neighbour_rules(chunk.previous_id),
            next_rules=await self._neighbour_rules(chunk.next_id),
        )
        await self._store.set_quality_score(chunk.id, report.score)

        if not report.passed:
            await self._store.transition(chunk.id, ChunkStatus.COMPLETED, ChunkStatus.NEEDS_REVIEW)
            log_with_context(
                logger,
                logging.WARNING,
                f"{__name__}:review - Chunk below quality threshold",
                chunk_id=chunk.id,
                document_id=chunk.document_id,
                score=report.score,
                threshold=report.threshold,
                factors=report.available_factors(),
            )
        else:
            logger.debug(
                f"{__name__}:review - Chunk passed quality gate",
                extra={"chunk_id": chunk.id, "score": report.score},
            )
        return report
