"""
Configuration package.

Dependencies: pydantic_settings
System role: Typed configuration loaded from environment and .env
"""

from regulex.configs.chunking import ChunkingSettings
from regulex.configs.database import DatabaseSettings
from regulex.configs.models import ModelSettings
from regulex.configs.quality import QualitySettings
from regulex.configs.retrieval import RetrievalSettings
from regulex.configs.scheduler import SchedulerSettings
from regulex.configs.settings import Settings, get_settings

__all__ = [
    "ChunkingSettings",
    "DatabaseSettings",
    "ModelSettings",
    "QualitySettings",
    "RetrievalSettings",
    "SchedulerSettings",
    "Settings",
    "get_settings",
]
