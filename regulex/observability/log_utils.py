"""
Structured logging helpers.

Builds `extra=` context dicts whose values are safe to hand to any log
formatter: enums become their values, collections become counts and long
strings are truncated.

Dependencies: logging (stdlib)
System role: Logging helper functions
"""

import logging
from decimal import Decimal
from enum import Enum
from typing import Any

from regulex.core.document_processing.models import DocumentChunk


def safe_log_value(value: Any, max_length: int = 200) -> Any:
    """
    Convert a value into something a log record can carry.

    Args:
        value: Value to convert
        max_length: Maximum string length before truncating

    Returns:
        Any: Scalars unchanged, enums by value, collections as a size summary
    """
    if value is None or isinstance(value, (bool, int, float)):
        return value
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (list, tuple, set, frozenset)):
        return f"{type(value).__name__}({len(value)} items)"
    if isinstance(value, dict):
        return f"dict({len(value)} keys)"
    text = str(value)
    if len(text) > max_length:
        return f"{text[:max_length]}... ({len(text)} chars)"
    return text


def log_context(**context: Any) -> dict[str, Any]:
    """Safe `extra=` dict from keyword context."""
    return {key: safe_log_value(value) for key, value in context.items()}


def chunk_context(chunk: DocumentChunk, **context: Any) -> dict[str, Any]:
    """`extra=` dict identifying a chunk, merged with additional context."""
    return log_context(
        chunk_id=chunk.id,
        document_id=chunk.document_id,
        sequence=chunk.sequence,
        content_type=chunk.content_type,
        **context,
    )


def log_with_context(logger: logging.Logger, level: int, message: str, **context: Any) -> None:
    """Log a message with safely converted structured context."""
    logger.log(level, message, extra=log_context(**context))


def log_exception_with_context(
    logger: logging.Logger,
    message: str,
    exc: BaseException,
    **context: Any,
) -> None:
    """
    Log an exception at error level with its type, message and traceback.

    Args:
        logger: Logger instance
        message: Log message
        exc: Exception being reported
        **context: Additional context
    """
    extra = log_context(**context)
    extra.update(error_type=type(exc).__name__, error_msg=safe_log_value(str(exc)))
    logger.error(message, exc_info=exc, extra=extra)
