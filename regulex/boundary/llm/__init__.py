"""
Model provider adapters.

Exports:
  - GeminiRuleExtractor: Rule extraction over a LangChain chat model
  - LangChainEmbeddingService: Embeddings over LangChain Embeddings

Dependencies: langchain_core, langchain_google_genai
"""

from regulex.boundary.llm.embedding_service import LangChainEmbeddingService
from regulex.boundary.llm.rule_extractor import GeminiRuleExtractor

__all__ = ["GeminiRuleExtractor", "LangChainEmbeddingService"]
