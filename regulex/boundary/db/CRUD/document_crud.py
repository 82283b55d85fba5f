"""
Document CRUD operations.

Documents move uploaded -> processing -> chunking -> extracting and end in
completed or failed; a cancelled run puts them back to uploaded.

Dependencies: sqlalchemy, regulex.boundary.db.models
System role: Document persistence operations
"""

from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from regulex.boundary.db.CRUD.base_crud import BaseCRUD
from regulex.boundary.db.models.document_model import DocumentModel
from regulex.core.document_processing.models import DocumentStatus


class DocumentCRUD(BaseCRUD[DocumentModel]):
    """CRUD operations for DocumentModel."""

    def __init__(self) -> None:
        super().__init__(DocumentModel)

    async def mark_failed(
        self,
        session: AsyncSession,
        id: str,
        error_message: str,
        finished_at: datetime,
    ) -> bool:
        """
        Close a processing run as failed.

        Args:
            session: Async database session
            id: Document ID
            error_message: Fatal error shown to callers of get_document
            finished_at: End of the failed run

        Returns:
            True if the document exists and was updated
        """
        return await self.update_by_id(
            session,
            id,
            status=DocumentStatus.FAILED,
            error_message=error_message,
            processing_finished_at=finished_at,
        )


document_crud = DocumentCRUD()
