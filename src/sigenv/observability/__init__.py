"""Observability module for sigenv.

Structured logging via structlog, with console output for development and
JSON output for production, and redaction of secret-looking fields.

Example:
    >>> from sigenv.observability import get_logger
    >>>
    >>> logger = get_logger(__name__)
    >>> logger.info("signature.verified", keynum="a1b2c3d4e5f60718")
"""

from sigenv.observability.logging import (
    configure_logging,
    get_logger,
    is_debug_mode,
    sanitize_for_logging,
)

__all__ = [
    "configure_logging",
    "get_logger",
    "is_debug_mode",
    "sanitize_for_logging",
]
