"""
Observability package.

Dependencies: logging (stdlib)
System role: Logging configuration and structured logging helpers
"""

from regulex.observability.log_utils import (
    log_exception_with_context,
    log_with_context,
    safe_log_value,
)
from regulex.observability.logger import configure_logging, get_logger

__all__ = [
    "configure_logging",
    "get_logger",
    "log_exception_with_context",
    "log_with_context",
    "safe_log_value",
]
