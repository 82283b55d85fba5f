"""
Dependency injection container.

Factory functions wiring settings, store, index, model adapters and the
pipeline into a DocumentService.

Dependencies: python-dotenv, regulex.configs, regulex.application, regulex.boundary
System role: DI container for service construction
"""

import asyncio

from dotenv import load_dotenv
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from regulex.application.services import DocumentService
from regulex.boundary.db import RuleStore, create_all_tables, get_async_engine, get_async_session_factory
from regulex.boundary.documents import DocumentTextProvider, LocalFileSource
from regulex.boundary.llm import GeminiRuleExtractor, LangChainEmbeddingService
from regulex.boundary.vdb import FAISSVectorIndex
from regulex.configs import Settings, get_settings
from regulex.core.document_processing.entrypoint import DocumentPipeline
from regulex.core.document_processing.interfaces import (
    DocumentSource,
    EmbeddingService,
    RawTextProvider,
    RuleExtractionService,
)
from regulex.core.document_processing.tasks.extraction_task import Sleep
from regulex.core.retriever import SemanticRetriever
from regulex.observability import configure_logging

# GOOGLE_API_KEY for the Gemini adapters
load_dotenv()


async def init_database(settings: Settings | None = None) -> async_sessionmaker[AsyncSession]:
    """
    Create the schema if missing and return a session factory.

    Args:
        settings: Application settings (uses defaults if None)

    Returns:
        async_sessionmaker: Session factory bound to the configured database
    """
    settings = settings or get_settings()
    engine = get_async_engine(settings.database)
    await create_all_tables(engine)
    return get_async_session_factory(engine)


def build_document_service(
    session_factory: async_sessionmaker[AsyncSession],
    settings: Settings | None = None,
    extractor: RuleExtractionService | None = None,
    embedder: EmbeddingService | None = None,
    source: DocumentSource | None = None,
    text_provider: RawTextProvider | None = None,
    index: FAISSVectorIndex | None = None,
    sleep: Sleep = asyncio.sleep,
) -> DocumentService:
    """
    Build a document service instance.

    Collaborators left as None get the production adapters: Gemini
    extraction and embeddings, local files, pypdf text extraction and a
    FAISS index persisted under the retrieval settings' directory.

    Args:
        session_factory: Async session factory for the store
        settings: Application settings (uses defaults if None)
        extractor: Rule extraction adapter
        embedder: Embedding adapter
        source: Raw document byte source
        text_provider: Bytes-to-text decoder
        index: Vector index
        sleep: Awaitable sleep for backoff and batch delays

    Returns:
        DocumentService: Document service instance
    """
    settings = settings or get_settings()
    store = RuleStore(session_factory)
    if index is None:
        index = FAISSVectorIndex(settings.retrieval.persist_directory)
    if embedder is None:
        embedder = LangChainEmbeddingService.from_settings(settings.models)

    pipeline = DocumentPipeline(
        store=store,
        source=source if source is not None else LocalFileSource(),
        text_provider=text_provider if text_provider is not None else DocumentTextProvider(),
        extractor=extractor if extractor is not None else GeminiRuleExtractor(settings.models),
        embedder=embedder,
        index=index,
        settings=settings,
        sleep=sleep,
    )
    retriever = SemanticRetriever(index, store, embedder, settings.retrieval)
    return DocumentService(store, pipeline, retriever, index)


async def create_document_service(settings: Settings | None = None) -> DocumentService:
    """
    Configure logging, initialize the database and build the production service.

    Args:
        settings: Application settings (uses defaults if None)

    Returns:
        DocumentService: Service wired to Gemini, local files and FAISS

    Usage:
        service = await create_document_service()
        document = await service.register_document("finance_act.pdf", "/data/finance_act.pdf", "application/pdf")
        result = await service.process_document(document.id)
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level)
    session_factory = await init_database(settings)
    return build_document_service(session_factory, settings)
