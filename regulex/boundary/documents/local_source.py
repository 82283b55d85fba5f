"""
Local filesystem document source.

Dependencies: asyncio (stdlib), pathlib (stdlib)
System role: Reads raw document bytes for the pipeline
"""

import asyncio
from pathlib import Path

from regulex.core.document_processing.models import Document
from regulex.core.exceptions import DocumentProcessingError


class LocalFileSource:
    """Load document bytes from a path, optionally relative to a root directory."""

    def __init__(self, root: str | Path | None = None) -> None:
        self._root = Path(root) if root else None

    def _resolve(self, source_uri: str) -> Path:
        path = Path(source_uri.removeprefix("file://"))
        if self._root is not None and not path.is_absolute():
            path = self._root / path
        return path

    async def load(self, document: Document) -> bytes:
        """
        Read the raw bytes of a document without blocking the event loop.

        Raises:
            DocumentProcessingError: File missing or unreadable
        """
        path = self._resolve(document.source_uri)
        try:
            return await asyncio.to_thread(path.read_bytes)
        except OSError as e:
            raise DocumentProcessingError(
                f"Document bytes unavailable: {type(e).__name__}",
                document_id=document.id,
                details={"source_uri": document.source_uri},
            ) from e
