"""
Retrieval configuration settings.

Result limits and neighbour expansion for chunk-aware search.

Dependencies: pydantic, pydantic_settings
System role: Similarity search configuration
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from regulex.configs.base import BaseSettings


class RetrievalSettings(BaseSettings):
    """Chunk-aware retrieval configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="RETRIEVAL_",
        case_sensitive=False,
        extra="ignore",
    )

    default_limit: int = Field(default=5, ge=1, description="Results returned when no limit is given")
    max_expansion: int = Field(
        default=10,
        ge=0,
        description="Maximum neighbour chunks attached across all results",
    )
    candidate_multiplier: int = Field(
        default=4,
        ge=1,
        description="Initial over-fetch factor so rule hits can fold into chunks",
    )
    persist_directory: str | None = Field(
        default=None,
        description="Directory for the serialized FAISS index; in-memory when unset",
    )
