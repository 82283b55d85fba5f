"""
Test suite for FAISSVectorIndex.

Tests ordering by distance, replacement on upsert, document deletion,
dimension checks and persistence of serialized snapshots.

Dependencies: faiss, langchain_community
System role: Verification of the similarity index adapter
"""

import pytest

from regulex.boundary.vdb import FAISSVectorIndex, VectorEntry, VectorKind, VectorMetadata
from regulex.core.exceptions import VectorStoreError


def entry(vector_id: str, vector: list[float], document_id: str = "doc-1", sequence: int = 0) -> VectorEntry:
    return VectorEntry(
        vector=vector,
        text=f"text of {vector_id}",
        metadata=VectorMetadata(
            vector_id=vector_id,
            kind=VectorKind.CHUNK,
            document_id=document_id,
            chunk_id=vector_id,
            sequence=sequence,
        ),
    )


@pytest.fixture
def index() -> FAISSVectorIndex:
    """In-memory index with three vectors on the x axis."""
    index = FAISSVectorIndex()
    index.upsert([entry("a", [0.0, 0.0]), entry("b", [2.0, 0.0], sequence=1), entry("c", [1.0, 0.0], sequence=2)])
    return index


class TestFAISSVectorIndex:
    """Test suite for FAISSVectorIndex."""

    def test_search_should_order_by_squared_distance(self, index: FAISSVectorIndex) -> None:
        # Act
        results = index.search([0.0, 0.0], k=3)

        # Assert
        assert [result.metadata.vector_id for result in results] == ["a", "c", "b"]
        assert [result.distance for result in results] == pytest.approx([0.0, 1.0, 4.0])
        assert results[1].content == "text of c"
        assert results[1].metadata.kind == VectorKind.CHUNK

    def test_search_should_cap_k_at_index_size(self, index: FAISSVectorIndex) -> None:
        assert len(index.search([0.0, 0.0], k=10)) == 3

    def test_search_on_empty_index_should_return_nothing(self) -> None:
        assert FAISSVectorIndex().search([0.0, 0.0], k=3) == []

    def test_upsert_should_replace_existing_vector(self, index: FAISSVectorIndex) -> None:
        # Act
        index.upsert([entry("b", [0.1, 0.0], sequence=1)])

        # Assert
        results = index.search([0.0, 0.0], k=3)
        assert len(index) == 3
        assert [result.metadata.vector_id for result in results] == ["a", "b", "c"]

    def test_delete_document_should_remove_its_vectors(self, index: FAISSVectorIndex) -> None:
        # Arrange
        index.upsert([entry("z", [5.0, 0.0], document_id="doc-2")])

        # Act
        removed = index.delete_document("doc-1")

        # Assert
        assert removed == 3
        assert "a" not in index
        assert [result.metadata.vector_id for result in index.search([0.0, 0.0], k=5)] == ["z"]
        assert index.delete_document("doc-1") == 0

    def test_dimension_mismatch_should_raise(self, index: FAISSVectorIndex) -> None:
        with pytest.raises(VectorStoreError):
            index.upsert([entry("d", [1.0, 2.0, 3.0])])
        with pytest.raises(VectorStoreError):
            index.search([1.0, 2.0, 3.0], k=1)

    async def test_persisted_index_should_reload(self, tmp_path) -> None:
        # Arrange
        directory = str(tmp_path / "faiss")
        original = FAISSVectorIndex(directory)
        original.upsert([entry("a", [0.0, 1.0]), entry("b", [3.0, 1.0], document_id="doc-2")])

        # Act
        written = await original.persist()
        reloaded = FAISSVectorIndex(directory)

        # Assert
        assert written is True
        assert len(reloaded) == 2
        assert reloaded.search([3.0, 1.0], k=1)[0].metadata.vector_id == "b"
        assert reloaded.delete_document("doc-2") == 1

    async def test_writes_should_stay_in_memory_until_persist(self, tmp_path) -> None:
        """Test upserts never touch disk and clean indexes are not rewritten."""
        # Arrange
        directory = tmp_path / "faiss"
        index = FAISSVectorIndex(str(directory))

        # Act
        index.upsert([entry("a", [0.0, 1.0])])
        before = list(directory.glob("*")) if directory.exists() else []
        first = await index.persist()
        second = await index.persist()

        # Assert
        assert before == []
        assert (first, second) == (True, False)
        assert [path.name for path in directory.iterdir()] == ["index.bin"]

    async def test_memory_only_index_should_not_persist(self, index: FAISSVectorIndex) -> None:
        assert await index.persist() is False
