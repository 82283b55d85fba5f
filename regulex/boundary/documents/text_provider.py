"""
Raw text provider for plain text and PDF documents.

Decodes document bytes into text plus structural hints. PDFs are read with
pypdf; outline titles become heading hints.

Dependencies: pypdf
System role: Document decoding adapter (first step of ingestion)
"""

import io
import logging

from pypdf import PdfReader
from pypdf.errors import PdfReadError

from regulex.core.document_processing.models import ExtractedText, StructuralHints
from regulex.core.exceptions import CorruptDocumentError, UnsupportedFormatError

logger = logging.getLogger(__name__)

TEXT_CONTENT_TYPES = frozenset({"text/plain", "text/markdown", "text/x-markdown"})
PDF_CONTENT_TYPES = frozenset({"application/pdf"})


class DocumentTextProvider:
    """Decode plain text and PDF bytes."""

    def extract(self, data: bytes, content_type: str) -> ExtractedText:
        """
        Decode document bytes.

        Args:
            data: Raw document bytes
            content_type: MIME type (parameters such as charset are ignored)

        Returns:
            ExtractedText: Text and hints

        Raises:
            UnsupportedFormatError: Content type is neither text nor PDF
            CorruptDocumentError: Bytes cannot be decoded or contain no text
        """
        media_type = content_type.split(";", 1)[0].strip().lower()
        if media_type in TEXT_CONTENT_TYPES:
            return self._extract_text(data)
        if media_type in PDF_CONTENT_TYPES:
            return self._extract_pdf(data)
        raise UnsupportedFormatError(content_type)

    @staticmethod
    def _extract_text(data: bytes) -> ExtractedText:
        try:
            text = data.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise CorruptDocumentError("Text document is not valid UTF-8", details={"position": e.start}) from e
        return ExtractedText(text=text.replace("\r\n", "\n"))

    def _extract_pdf(self, data: bytes) -> ExtractedText:
        try:
            reader = PdfReader(io.BytesIO(data))
            pages = [page.extract_text() or "" for page in reader.pages]
            headings = self._outline_titles(reader.outline)
        except (PdfReadError, ValueError, KeyError) as e:
            raise CorruptDocumentError(f"PDF could not be read: {type(e).__name__}") from e

        text = "\n\n".join(page.strip("\n") for page in pages)
        if not text.strip():
            raise CorruptDocumentError("PDF contains no extractable text", details={"page_count": len(pages)})

        logger.info(
            f"{__name__}:_extract_pdf - PDF decoded",
            extra={"page_count": len(pages), "text_length": len(text), "heading_count": len(headings)},
        )
        return ExtractedText(text=text, hints=StructuralHints(headings=headings), page_count=len(pages))

    def _outline_titles(self, outline: list) -> list[str]:
        """Flatten a pypdf outline (nested lists of destinations) into titles."""
        titles: list[str] = []
        for item in outline:
            if isinstance(item, list):
                titles.extend(self._outline_titles(item))
            else:
                title = getattr(item, "title", None)
                if title:
                    titles.append(str(title))
        return titles
