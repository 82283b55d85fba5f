"""
Quality validation configuration settings.

Threshold, factor weights and the domain keyword vocabulary used to score
extraction results.

Dependencies: pydantic, pydantic_settings
System role: Quality gate configuration
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from regulex.configs.base import BaseSettings

DEFAULT_DOMAIN_KEYWORDS = [
    "income tax",
    "tax",
    "taxable",
    "rate",
    "bracket",
    "threshold",
    "exemption",
    "exempt",
    "deduction",
    "relief",
    "allowance",
    "withholding",
    "penalty",
    "surcharge",
    "assessment",
    "liability",
    "credit",
    "installment",
    "vat",
    "paye",
]


class QualitySettings(BaseSettings):
    """Four-factor quality score configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="QUALITY_",
        case_sensitive=False,
        extra="ignore",
    )

    threshold: float = Field(default=0.7, ge=0.0, le=1.0, description="Minimum passing score")
    weights: dict[str, float] = Field(
        default_factory=lambda: {
            "completeness": 0.30,
            "context_preservation": 0.25,
            "cross_chunk_consistency": 0.25,
            "keyword_coverage": 0.20,
        },
        description="Weight per quality factor",
    )
    domain_keywords: list[str] = Field(
        default_factory=lambda: list(DEFAULT_DOMAIN_KEYWORDS),
        description="Domain vocabulary used for keyword coverage and context keywords",
    )
