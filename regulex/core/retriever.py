"""
Chunk-aware semantic retrieval.

Ranks chunks by vector distance to a query, folding rule hits into their
source chunk, then attaches each result's sequence neighbours as context
under a global expansion budget.

Dependencies: regulex.boundary.vdb, regulex.boundary.db
System role: Retrieval business logic
"""

import logging

from regulex.boundary.db.rule_store import RuleStore
from regulex.boundary.vdb import FAISSVectorIndex
from regulex.configs.retrieval import RetrievalSettings
from regulex.core.document_processing.interfaces import EmbeddingService
from regulex.core.document_processing.models import DocumentChunk, RankedChunk, chunk_id_for

logger = logging.getLogger(__name__)


class SemanticRetriever:
    """Nearest-chunk search with neighbour expansion."""

    def __init__(
        self,
        index: FAISSVectorIndex,
        store: RuleStore,
        embedder: EmbeddingService,
        settings: RetrievalSettings,
    ) -> None:
        """
        Initialize retriever.

        Args:
            index: Vector index holding chunk and rule vectors
            store: Store used to load chunks and neighbours
            embedder: Embedding service for query text
            settings: Limits and expansion budget
        """
        self._index = index
        self._store = store
        self._embedder = embedder
        self._settings = settings

    async def search(self, query: str, limit: int | None = None) -> list[RankedChunk]:
        """
        Embed a query and return the nearest chunks.

        Args:
            query: Query text
            limit: Number of ranked chunks (default from settings)

        Returns:
            list[RankedChunk]: Ranked chunks with neighbours

        Raises:
            EmbeddingError: When the query cannot be embedded
        """
        vector = await self._embedder.embed(query)
        return await self.search_by_vector(vector, limit)

    async def search_by_vector(self, vector: list[float], limit: int | None = None) -> list[RankedChunk]:
        """
        Return the nearest chunks to a vector, ascending by distance.

        Args:
            vector: Query vector
            limit: Number of ranked chunks (default from settings)

        Returns:
            list[RankedChunk]: Ranked chunks; each carries the sequence
            neighbours not already ranked, within the expansion budget
        """
        limit = limit or self._settings.default_limit
        best = self._nearest_chunks(vector, limit)

        chunks = await self._store.get_chunks_by_ids(list(best))
        ranked: list[RankedChunk] = []
        for chunk_id, distance in best.items():
            chunk = chunks.get(chunk_id)
            if chunk is None:
                logger.warning(
                    f"{__name__}:search_by_vector - Indexed chunk missing from store",
                    extra={"chunk_id": chunk_id},
                )
                continue
            ranked.append(RankedChunk(chunk=chunk, distance=distance, rank=len(ranked) + 1))
            if len(ranked) == limit:
                break

        await self._expand(ranked)
        logger.info(
            f"{__name__}:search_by_vector - Search complete",
            extra={
                "result_count": len(ranked),
                "neighbor_count": sum(len(result.neighbors) for result in ranked),
            },
        )
        return ranked

    def _nearest_chunks(self, vector: list[float], limit: int) -> dict[str, float]:
        """Best distance per chunk in ascending order, over-fetching until `limit` chunks are found."""
        total = len(self._index)
        k = limit * self._settings.candidate_multiplier
        while True:
            best: dict[str, float] = {}
            for hit in self._index.search(vector, k):
                chunk_id = hit.metadata.chunk_id
                if chunk_id not in best or hit.distance < best[chunk_id]:
                    best[chunk_id] = hit.distance
            # A few spare candidates cover chunks deleted from the store
            if len(best) >= limit + 2 or k >= total:
                return dict(sorted(best.items(), key=lambda item: item[1]))
            k *= 2

    async def _expand(self, ranked: list[RankedChunk]) -> None:
        """Attach neighbours; a neighbour goes to the best-ranked adjacent result."""
        budget = self._settings.max_expansion
        claimed = {result.chunk.id for result in ranked}

        for result in ranked:
            if budget <= 0:
                break
            neighbours: list[DocumentChunk] = []
            for sequence in (result.chunk.sequence - 1, result.chunk.sequence + 1):
                if budget <= 0 or sequence < 0:
                    continue
                neighbour_id = chunk_id_for(result.chunk.document_id, sequence)
                if neighbour_id in claimed:
                    continue
                neighbour = await self._store.get_chunk(neighbour_id)
                if neighbour is None:
                    continue
                claimed.add(neighbour_id)
                neighbours.append(neighbour)
                budget -= 1
            result.neighbors = neighbours
