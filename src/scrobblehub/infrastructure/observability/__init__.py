"""Observability infrastructure for structured logging."""

from scrobblehub.infrastructure.observability.log_messages import (
    LogMessages,
    LogTemplate,
)
from scrobblehub.infrastructure.observability.logging import (
    SourceLogger,
    configure_logging,
    get_correlation_id,
    get_source_logger,
    set_correlation_id,
)

__all__ = [
    "LogMessages",
    "LogTemplate",
    "SourceLogger",
    "configure_logging",
    "get_correlation_id",
    "get_source_logger",
    "set_correlation_id",
]
