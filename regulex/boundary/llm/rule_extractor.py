"""
Rule extraction over a LangChain chat model.

Prompts the model (Gemini by default) for a JSON array of rules found in a
chunk of regulatory text and validates each item into a RuleDraft. Provider
failures are translated into the chunk extraction error vocabulary so the
scheduler can decide whether to retry.

Dependencies: langchain_core, langchain_google_genai
System role: Extraction model adapter
"""

import asyncio
import logging
from typing import Any

from langchain_core.exceptions import OutputParserException
from langchain_core.language_models import BaseChatModel
from langchain_core.output_parsers import JsonOutputParser
from langchain_core.prompts import ChatPromptTemplate
from langchain_google_genai import ChatGoogleGenerativeAI
from pydantic import ValidationError

from regulex.configs.models import ModelSettings
from regulex.core.document_processing.models import RuleDraft
from regulex.core.exceptions import (
    ExtractionTimeoutError,
    InvalidResponseError,
    RateLimitedError,
)

logger = logging.getLogger(__name__)

_RATE_LIMIT_MARKERS = ("429", "resource exhausted", "resource_exhausted", "rate limit", "quota")
_TIMEOUT_MARKERS = ("504", "deadline exceeded", "deadline_exceeded", "timed out", "timeout")

SYSTEM_PROMPT = """You extract machine-readable rules from tax and regulatory text.

The text may start and end with a few words copied from the neighbouring
sections. Use them to complete rules that continue across a boundary, and mark
such rules with context_refs.

Return a JSON array only (no markdown, no commentary). Each element:
{{
  "rule_type": "<snake_case category, e.g. income_tax_bracket, exemption, deduction, rate, threshold, penalty>",
  "payload": {{<rule fields; use numbers for amounts and rates, min_income/max_income for brackets, bracket_order for ordered brackets>}},
  "confidence": <0.0-1.0>,
  "context_refs": [<"previous" and/or "next" when the rule depends on context text>]
}}
Return [] when the text contains no rules."""


class GeminiRuleExtractor:
    """
    Rule extraction service backed by a LangChain chat model.

    Usage:
        extractor = GeminiRuleExtractor()
        drafts = await extractor.extract(chunk.padded_text)
    """

    def __init__(
        self,
        settings: ModelSettings | None = None,
        llm: BaseChatModel | None = None,
    ) -> None:
        """
        Initialize extractor.

        Args:
            settings: Model settings (uses defaults if None)
            llm: Chat model override (ChatGoogleGenerativeAI from settings if None)
        """
        settings = settings or ModelSettings()
        self._llm = llm or ChatGoogleGenerativeAI(
            model=settings.extraction_model,
            temperature=settings.temperature,
        )
        self._prompt = ChatPromptTemplate.from_messages(
            [("system", SYSTEM_PROMPT), ("human", "{chunk_text}")]
        )
        self._parser = JsonOutputParser()

    async def extract(self, chunk_text: str) -> list[RuleDraft]:
        """
        Extract rule drafts from chunk text.

        Args:
            chunk_text: Padded chunk text (overlap context included)

        Returns:
            list[RuleDraft]: Valid drafts; malformed items are skipped

        Raises:
            RateLimitedError: Provider rejected the call for quota reasons
            ExtractionTimeoutError: Provider deadline exceeded
            InvalidResponseError: Output is not a JSON array of rules
        """
        try:
            message = await (self._prompt | self._llm).ainvoke({"chunk_text": chunk_text})
        except asyncio.TimeoutError as e:
            raise ExtractionTimeoutError("Extraction call timed out") from e
        except Exception as e:
            raise self._translate(e) from e

        content = message.content if isinstance(message.content, str) else str(message.content)
        try:
            parsed = self._parser.parse(content)
        except OutputParserException as e:
            raise InvalidResponseError(
                "Extraction response is not valid JSON",
                details={"response_preview": content[:200]},
            ) from e

        return self._to_drafts(parsed)

    @staticmethod
    def _translate(error: Exception) -> Exception:
        message = str(error).lower()
        if any(marker in message for marker in _RATE_LIMIT_MARKERS):
            return RateLimitedError("Extraction model rate limited", details={"provider_error": str(error)[:200]})
        if any(marker in message for marker in _TIMEOUT_MARKERS):
            return ExtractionTimeoutError("Extraction model deadline exceeded", details={"provider_error": str(error)[:200]})
        return InvalidResponseError(
            f"Extraction call failed: {type(error).__name__}",
            details={"provider_error": str(error)[:200]},
        )

    @staticmethod
    def _to_drafts(parsed: Any) -> list[RuleDraft]:
        if isinstance(parsed, dict):
            parsed = parsed.get("rules", [parsed] if "rule_type" in parsed else None)
        if not isinstance(parsed, list):
            raise InvalidResponseError(
                "Extraction response is not a list of rules",
                details={"response_type": type(parsed).__name__},
            )

        drafts: list[RuleDraft] = []
        for index, item in enumerate(parsed):
            try:
                drafts.append(RuleDraft.model_validate(item))
            except ValidationError as e:
                logger.warning(
                    f"{__name__}:_to_drafts - Skipping malformed rule",
                    extra={"index": index, "error_count": e.error_count()},
                )
        return drafts
