"""
Model configuration settings.

Chat model and embedding model used by the Gemini adapters.

Dependencies: pydantic, pydantic_settings
System role: LLM and embedding model configuration
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from regulex.configs.base import BaseSettings


class ModelSettings(BaseSettings):
    """Google Gemini model configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="MODELS_",
        case_sensitive=False,
        extra="ignore",
    )

    extraction_model: str = Field(
        default="gemini-2.5-flash",
        description="Chat model used for rule extraction",
    )
    temperature: float = Field(default=0.0, ge=0.0, le=2.0, description="Sampling temperature")
    embedding_model: str = Field(
        default="models/text-embedding-004",
        description="Embedding model used for chunk and rule vectors",
    )
