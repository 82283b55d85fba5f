"""
Test suite for EmbeddingIndexer.

System role: Verification of chunk and rule indexing
"""

from regulex.boundary.vdb import FAISSVectorIndex, VectorKind
from regulex.core.document_processing.tasks import EmbeddingIndexer
from tests.fakes import MappingEmbedder, make_chunks, make_rule


class TestEmbeddingIndexer:
    """Test suite for index_chunk(), flush() and remove_document()."""

    async def test_index_chunk_should_index_core_text_and_rules(self, store, document) -> None:
        # Arrange
        (chunk,) = make_chunks(document.id, ["The rate is 24%."])
        await store.add_chunks([chunk])
        rule = make_rule(chunk, {"rate": 24})
        await store.replace_rules(chunk.id, [rule])
        embedder = MappingEmbedder({chunk.text: [1.0, 0.0], rule.embedding_text(): [0.0, 1.0]})
        index = FAISSVectorIndex()

        # Act
        summary = await EmbeddingIndexer(embedder, index, store).index_chunk(chunk, [rule])

        # Assert
        assert summary.indexed_ids == [chunk.id, rule.id]
        assert summary.failed_ids == []
        hit = index.search([0.0, 1.0], k=1)[0]
        assert hit.metadata.kind == VectorKind.RULE
        assert hit.metadata.chunk_id == chunk.id
        (stored,) = await store.get_rules_for_chunk(chunk.id)
        assert stored.embedding_id == rule.id

    async def test_embedding_failure_should_leave_item_unindexed(self, store, document) -> None:
        """Test a rule that cannot be embedded is skipped without failing the chunk."""
        # Arrange
        (chunk,) = make_chunks(document.id, ["The rate is 24%."])
        await store.add_chunks([chunk])
        rule = make_rule(chunk, {"rate": 24})
        await store.replace_rules(chunk.id, [rule])
        index = FAISSVectorIndex()

        # Act
        summary = await EmbeddingIndexer(MappingEmbedder({chunk.text: [1.0, 0.0]}), index, store).index_chunk(
            chunk, [rule]
        )

        # Assert
        assert summary.indexed_ids == [chunk.id]
        assert summary.failed_ids == [rule.id]
        assert rule.id not in index
        (stored,) = await store.get_rules_for_chunk(chunk.id)
        assert stored.embedding_id is None

    async def test_index_write_failure_should_leave_chunk_unindexed(self, store, document) -> None:
        """Test a vector the index rejects is skipped without failing the chunk."""
        # Arrange
        (chunk,) = make_chunks(document.id, ["The rate is 24%."])
        await store.add_chunks([chunk])
        rule = make_rule(chunk, {"rate": 24})
        await store.replace_rules(chunk.id, [rule])
        index = FAISSVectorIndex()
        await EmbeddingIndexer(MappingEmbedder({}, default=[1.0, 0.0]), index, store).index_chunk(chunk, [])

        # Act
        summary = await EmbeddingIndexer(MappingEmbedder({}, default=[1.0, 0.0, 0.0]), index, store).index_chunk(
            chunk, [rule]
        )

        # Assert
        assert summary.indexed_ids == []
        assert summary.failed_ids == [chunk.id, rule.id]
        assert rule.id not in index
        (stored,) = await store.get_rules_for_chunk(chunk.id)
        assert stored.embedding_id is None

    async def test_reindexing_should_replace_vectors(self, store, document) -> None:
        # Arrange
        (chunk,) = make_chunks(document.id, ["The rate is 24%."])
        await store.add_chunks([chunk])
        index = FAISSVectorIndex()
        indexer = EmbeddingIndexer(MappingEmbedder({}, default=[1.0, 1.0]), index, store)

        # Act
        await indexer.index_chunk(chunk, [])
        await indexer.index_chunk(chunk, [])

        # Assert
        assert len(index) == 1
        assert await indexer.remove_document(document.id) == 1
        assert len(index) == 0

    async def test_flush_should_persist_index_changes(self, store, document, tmp_path) -> None:
        # Arrange
        (chunk,) = make_chunks(document.id, ["The rate is 24%."])
        await store.add_chunks([chunk])
        index = FAISSVectorIndex(str(tmp_path / "faiss"))
        indexer = EmbeddingIndexer(MappingEmbedder({}, default=[1.0, 1.0]), index, store)
        await indexer.index_chunk(chunk, [])

        # Act
        flushed = await indexer.flush()

        # Assert
        assert flushed is True
        assert chunk.id in FAISSVectorIndex(str(tmp_path / "faiss"))
