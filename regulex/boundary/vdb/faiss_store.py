"""
FAISS vector index for chunk and rule vectors.

Wraps LangChain FAISS over an exact L2 index. Vectors are computed by the
embedding service before they reach the index, so the index never embeds
text itself. Keeps an ID registry so re-indexing replaces a vector and
removing a document removes all of its vectors. Mutations stay in memory;
`persist()` snapshots the index on the event loop and writes it to disk in a
worker thread.

Dependencies: faiss, langchain_community.vectorstores, langchain_core
System role: Similarity index behind indexer and retriever
"""

import asyncio
import logging
from pathlib import Path

import faiss
from langchain_community.docstore.in_memory import InMemoryDocstore
from langchain_community.vectorstores import FAISS
from langchain_core.embeddings import Embeddings

from regulex.boundary.vdb.vector_schemas import (
    VectorEntry,
    VectorMetadata,
    VectorSearchResult,
)
from regulex.core.exceptions import VectorStoreError

logger = logging.getLogger(__name__)

INDEX_FILENAME = "index.bin"


class PrecomputedEmbeddings(Embeddings):
    """Embeddings slot for an index that only accepts precomputed vectors."""

    def embed_documents(self, texts: list[str]) -> list[list[float]]:
        raise VectorStoreError("Index accepts precomputed vectors only", operation="embed_documents")

    def embed_query(self, text: str) -> list[float]:
        raise VectorStoreError("Index accepts precomputed vectors only", operation="embed_query")


class FAISSVectorIndex:
    """
    Local FAISS index keyed by chunk and rule IDs.

    Optionally persisted as one serialized file under the persist directory.
    """

    def __init__(self, persist_directory: str | None = None) -> None:
        """
        Initialize index, loading a persisted one when present.

        Args:
            persist_directory: Directory for FAISS index persistence (memory only if None)
        """
        self._persist_dir = Path(persist_directory) if persist_directory else None
        self._embeddings = PrecomputedEmbeddings()
        self._index: FAISS | None = None
        self._document_ids: dict[str, set[str]] = {}
        self._dirty = False
        self._persist_lock = asyncio.Lock()
        self._load()

    @property
    def _index_file(self) -> Path | None:
        return self._persist_dir / INDEX_FILENAME if self._persist_dir else None

    def _load(self) -> None:
        """Load existing index and rebuild the ID registry."""
        if self._index_file is None or not self._index_file.exists():
            return
        self._index = FAISS.deserialize_from_bytes(
            self._index_file.read_bytes(),
            self._embeddings,
            allow_dangerous_deserialization=True,
        )
        for vector_id, doc in self._index.docstore._dict.items():
            self._document_ids.setdefault(doc.metadata["document_id"], set()).add(vector_id)
        logger.info(
            f"{__name__}:_load - Index loaded",
            extra={"persist_directory": str(self._persist_dir), "vector_count": len(self)},
        )

    def _write(self, data: bytes) -> None:
        self._persist_dir.mkdir(parents=True, exist_ok=True)
        partial = self._index_file.with_suffix(".tmp")
        partial.write_bytes(data)
        partial.replace(self._index_file)

    async def persist(self) -> bool:
        """
        Write the index to the persist directory when it changed.

        Returns:
            bool: True if a snapshot was written
        """
        if self._persist_dir is None or self._index is None:
            return False
        async with self._persist_lock:
            if not self._dirty:
                return False
            data = self._index.serialize_to_bytes()
            self._dirty = False
            await asyncio.to_thread(self._write, data)
        logger.info(
            f"{__name__}:persist - Index saved",
            extra={"persist_directory": str(self._persist_dir), "vector_count": len(self)},
        )
        return True

    def _create(self, dimension: int) -> FAISS:
        return FAISS(
            embedding_function=self._embeddings,
            index=faiss.IndexFlatL2(dimension),
            docstore=InMemoryDocstore(),
            index_to_docstore_id={},
        )

    def __len__(self) -> int:
        return sum(len(ids) for ids in self._document_ids.values())

    def __contains__(self, vector_id: str) -> bool:
        return any(vector_id in ids for ids in self._document_ids.values())

    def upsert(self, entries: list[VectorEntry]) -> list[str]:
        """
        Add vectors, replacing any existing vector with the same ID.

        Args:
            entries: Vectors with text and metadata

        Returns:
            list[str]: IDs written

        Raises:
            VectorStoreError: When vector dimensions do not match the index
        """
        if not entries:
            return []

        dimension = len(entries[0].vector)
        if self._index is None:
            self._index = self._create(dimension)
        if any(len(entry.vector) != self._index.index.d for entry in entries):
            raise VectorStoreError(
                "Vector dimension does not match index",
                operation="upsert",
                details={"expected": self._index.index.d, "received": dimension},
            )

        ids = [entry.metadata.vector_id for entry in entries]
        existing = [vector_id for vector_id in ids if vector_id in self]
        if existing:
            self._remove(existing)

        self._index.add_embeddings(
            text_embeddings=[(entry.text, entry.vector) for entry in entries],
            metadatas=[entry.metadata.model_dump(mode="json") for entry in entries],
            ids=ids,
        )
        for entry in entries:
            self._document_ids.setdefault(entry.metadata.document_id, set()).add(entry.metadata.vector_id)
        self._dirty = True
        return ids

    def search(self, vector: list[float], k: int) -> list[VectorSearchResult]:
        """
        Nearest vectors by ascending L2 distance.

        Args:
            vector: Query vector
            k: Maximum number of results

        Returns:
            list[VectorSearchResult]: Results ordered by ascending distance
        """
        if self._index is None or k <= 0 or len(self) == 0:
            return []
        if len(vector) != self._index.index.d:
            raise VectorStoreError(
                "Query dimension does not match index",
                operation="search",
                details={"expected": self._index.index.d, "received": len(vector)},
            )
        results = self._index.similarity_search_with_score_by_vector(vector, k=min(k, len(self)))
        return [
            VectorSearchResult(
                metadata=VectorMetadata.model_validate(doc.metadata),
                content=doc.page_content,
                distance=float(score),
            )
            for doc, score in results
        ]

    def delete_document(self, document_id: str) -> int:
        """
        Delete all vectors of a document.

        Returns:
            int: Number of vectors removed
        """
        ids = self._document_ids.pop(document_id, set())
        if ids and self._index is not None:
            self._index.delete(list(ids))
            self._dirty = True
        return len(ids)

    def _remove(self, ids: list[str]) -> None:
        self._index.delete(ids)
        for document_ids in self._document_ids.values():
            document_ids.difference_update(ids)
