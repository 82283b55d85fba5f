"""
Test suite for DocumentTextProvider and LocalFileSource.

Dependencies: pypdf
System role: Verification of document decoding and byte loading
"""

import io

import pytest
from pypdf import PdfWriter

from regulex.boundary.documents import DocumentTextProvider, LocalFileSource
from regulex.core.document_processing.models import Document
from regulex.core.exceptions import (
    CorruptDocumentError,
    DocumentProcessingError,
    UnsupportedFormatError,
)


@pytest.fixture
def provider() -> DocumentTextProvider:
    return DocumentTextProvider()


class TestDocumentTextProvider:
    """Test suite for extract()."""

    def test_plain_text_should_decode_and_normalise_newlines(self, provider: DocumentTextProvider) -> None:
        # Act
        extracted = provider.extract("\ufeffPART I\r\nRates apply.".encode("utf-8"), "text/plain; charset=utf-8")

        # Assert
        assert extracted.text == "PART I\nRates apply."
        assert extracted.page_count is None

    def test_invalid_utf8_should_be_corrupt(self, provider: DocumentTextProvider) -> None:
        with pytest.raises(CorruptDocumentError):
            provider.extract(b"\xff\xfe\xfa", "text/plain")

    def test_unknown_content_type_should_be_unsupported(self, provider: DocumentTextProvider) -> None:
        # Act / Assert
        with pytest.raises(UnsupportedFormatError) as exc_info:
            provider.extract(b"PK\x03\x04", "application/zip")
        assert exc_info.value.details["content_type"] == "application/zip"

    def test_garbage_pdf_should_be_corrupt(self, provider: DocumentTextProvider) -> None:
        with pytest.raises(CorruptDocumentError):
            provider.extract(b"this is not a pdf", "application/pdf")

    def test_pdf_without_text_should_be_corrupt(self, provider: DocumentTextProvider) -> None:
        # Arrange
        writer = PdfWriter()
        writer.add_blank_page(width=72, height=72)
        buffer = io.BytesIO()
        writer.write(buffer)

        # Act / Assert
        with pytest.raises(CorruptDocumentError):
            provider.extract(buffer.getvalue(), "application/pdf")


class TestLocalFileSource:
    """Test suite for LocalFileSource."""

    async def test_load_should_read_relative_to_root(self, tmp_path) -> None:
        # Arrange
        (tmp_path / "act.txt").write_bytes(b"Section 1.")
        document = Document(id="doc-1", filename="act.txt", source_uri="act.txt")

        # Act
        data = await LocalFileSource(tmp_path).load(document)

        # Assert
        assert data == b"Section 1."

    async def test_load_should_accept_file_uri(self, tmp_path) -> None:
        # Arrange
        path = tmp_path / "act.txt"
        path.write_bytes(b"Section 2.")
        document = Document(id="doc-1", filename="act.txt", source_uri=f"file://{path}")

        # Act / Assert
        assert await LocalFileSource().load(document) == b"Section 2."

    async def test_missing_file_should_raise_processing_error(self, tmp_path) -> None:
        # Arrange
        document = Document(id="doc-1", filename="gone.txt", source_uri="gone.txt")

        # Act / Assert
        with pytest.raises(DocumentProcessingError) as exc_info:
            await LocalFileSource(tmp_path).load(document)
        assert exc_info.value.details["document_id"] == "doc-1"
