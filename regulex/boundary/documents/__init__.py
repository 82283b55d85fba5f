"""
Document boundary layer.

Exports:
  - DocumentTextProvider: Plain text and PDF decoding
  - LocalFileSource: Raw bytes from the local filesystem

Dependencies: pypdf
"""

from regulex.boundary.documents.local_source import LocalFileSource
from regulex.boundary.documents.text_provider import DocumentTextProvider

__all__ = ["DocumentTextProvider", "LocalFileSource"]
