"""
Extraction scheduler configuration settings.

Batch width, retry policy and timeouts for chunk rule extraction.

Dependencies: pydantic, pydantic_settings
System role: Dispatch and retry policy configuration
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from regulex.configs.base import BaseSettings


class SchedulerSettings(BaseSettings):
    """Bounded-concurrency dispatch configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="SCHEDULER_",
        case_sensitive=False,
        extra="ignore",
    )

    batch_width: int = Field(default=3, ge=1, description="Chunks dispatched concurrently per batch")
    max_retries: int = Field(default=3, ge=0, description="Retries after the first attempt")
    backoff_base_seconds: float = Field(
        default=1.0,
        ge=0.0,
        description="Base delay; retry n waits n^2 * base seconds",
    )
    inter_batch_delay_seconds: float = Field(
        default=1.0,
        ge=0.0,
        description="Pause between consecutive batches",
    )
    extraction_timeout_seconds: float = Field(
        default=120.0,
        gt=0.0,
        description="Per-call timeout for the extraction model",
    )
