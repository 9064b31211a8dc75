"""structlog setup for sigenv.

Key and signature events are emitted as structured events, rendered for a
terminal (``console``) or as one JSON object per line (``json``). Everything is
written to stderr so that the CLI can keep stdout for its JSON output.

Environment Variables:
    SIGENV_LOG_FORMAT: "console" (default) or "json"
    SIGENV_LOG_LEVEL: DEBUG, INFO (default), WARNING, ERROR
    SIGENV_SERVICE_NAME: value of the ``service`` field on every event
    SIGENV_DEBUG: "true" or "1" keeps secret-looking fields unredacted

Example:
    >>> from sigenv.observability.logging import configure_logging, get_logger
    >>>
    >>> configure_logging(log_format="json", log_level="DEBUG", force=True)
    >>> get_logger("sigenv.crypto.keys").debug("key.generated", keynum="a1b2c3d4e5f60718")
"""

import logging
import os
import sys
from dataclasses import dataclass
from typing import Any

import structlog
from structlog.typing import EventDict, Processor, WrappedLogger

ENV_LOG_FORMAT = "SIGENV_LOG_FORMAT"
ENV_LOG_LEVEL = "SIGENV_LOG_LEVEL"
ENV_SERVICE_NAME = "SIGENV_SERVICE_NAME"
ENV_DEBUG = "SIGENV_DEBUG"

REDACTED_PLACEHOLDER = "***REDACTED***"

# Field names containing one of these (case-insensitive) are redacted.
# Covers serialized signing keys ("secret_key"); key numbers stay visible.
SENSITIVE_FIELD_MARKERS = ("secret", "private", "password", "token", "authorization")

_configured = False


@dataclass(frozen=True)
class LogSettings:
    """Resolved logging options; explicit arguments win over the environment."""

    log_format: str = "console"
    log_level: str = "INFO"
    service_name: str = "sigenv"

    @classmethod
    def resolve(
        cls,
        log_format: str | None = None,
        log_level: str | None = None,
        service_name: str | None = None,
    ) -> "LogSettings":
        env = os.environ
        return cls(
            log_format=(log_format or env.get(ENV_LOG_FORMAT) or cls.log_format).lower(),
            log_level=(log_level or env.get(ENV_LOG_LEVEL) or cls.log_level).upper(),
            service_name=service_name or env.get(ENV_SERVICE_NAME) or cls.service_name,
        )


def _is_sensitive(field: str) -> bool:
    lowered = field.lower()
    return any(marker in lowered for marker in SENSITIVE_FIELD_MARKERS)


def _sanitize_value(value: Any) -> Any:
    if isinstance(value, dict):
        return sanitize_for_logging(value)
    if isinstance(value, list):
        return [_sanitize_value(item) for item in value]
    return value


def sanitize_for_logging(data: dict[str, Any]) -> dict[str, Any]:
    """Copy of ``data`` with secret-looking fields replaced by REDACTED_PLACEHOLDER.

    Nested dicts, including dicts inside lists, are sanitized too.

    Example:
        >>> sanitize_for_logging({"keynum": "a1b2", "secret_key": "RWQ..."})
        {'keynum': 'a1b2', 'secret_key': '***REDACTED***'}
    """
    return {
        field: REDACTED_PLACEHOLDER if _is_sensitive(field) else _sanitize_value(value)
        for field, value in data.items()
    }


def is_debug_mode() -> bool:
    return os.environ.get(ENV_DEBUG, "").strip().lower() in ("true", "1", "yes", "on")


def _redact_sensitive_fields(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """structlog processor; a no-op in debug mode."""
    if is_debug_mode():
        return event_dict
    return sanitize_for_logging(event_dict)


def _pre_chain() -> list[Processor]:
    """Processors shared by structlog events and foreign stdlib records."""
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        _redact_sensitive_fields,
    ]


def _renderer(log_format: str) -> Processor:
    if log_format == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(exception_formatter=structlog.dev.plain_traceback)


def configure_logging(
    log_format: str | None = None,
    log_level: str | None = None,
    service_name: str | None = None,
    force: bool = False,
) -> None:
    """Route structlog through stdlib logging to a single stderr handler.

    Args:
        log_format: "json" or "console"; defaults to SIGENV_LOG_FORMAT, then "console"
        log_level: Root level; defaults to SIGENV_LOG_LEVEL, then "INFO"
        service_name: Bound as ``service``; defaults to SIGENV_SERVICE_NAME, then "sigenv"
        force: Reconfigure even if logging was already configured
    """
    global _configured
    if _configured and not force:
        return

    settings = LogSettings.resolve(log_format, log_level, service_name)
    pre_chain = _pre_chain()

    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=pre_chain,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(settings.log_format),
            ],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(settings.log_level)

    structlog.contextvars.bind_contextvars(service=settings.service_name)
    _configured = True


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Structured logger for ``name``; configures logging with defaults on first use."""
    if not _configured:
        configure_logging()
    return structlog.stdlib.get_logger(name)
