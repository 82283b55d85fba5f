"""
Unified application settings.

Aggregates all configuration modules into a single Settings class.

Dependencies: All config modules
System role: Central configuration aggregator for the application
"""

from functools import lru_cache

from regulex.configs.base import BaseSettings
from regulex.configs.chunking import ChunkingSettings
from regulex.configs.database import DatabaseSettings
from regulex.configs.models import ModelSettings
from regulex.configs.quality import QualitySettings
from regulex.configs.retrieval import RetrievalSettings
from regulex.configs.scheduler import SchedulerSettings


class Settings(BaseSettings):
    """Unified application settings aggregating all config modules."""

    # Aggregated settings
    database: DatabaseSettings = DatabaseSettings()
    chunking: ChunkingSettings = ChunkingSettings()
    scheduler: SchedulerSettings = SchedulerSettings()
    quality: QualitySettings = QualitySettings()
    retrieval: RetrievalSettings = RetrievalSettings()
    models: ModelSettings = ModelSettings()


@lru_cache
def get_settings() -> Settings:
    """
    Get application settings singleton.

    Returns Settings instance, cached after first call.
    Environment variables loaded once at startup.

    Returns:
        Settings: Application settings instance

    Usage:
        from regulex.configs import get_settings
        settings = get_settings()
    """
    return Settings()
