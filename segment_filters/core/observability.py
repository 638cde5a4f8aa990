"""
Observability for the segment filter core.

Provides:
- Structured logging with JSON format and correlation IDs
- Correlation context for a preview/save request and an editing session
- Prometheus metrics for serialization, validation and rejected mutations

Usage:
    from segment_filters.core.observability import (
        configure_logging,
        set_correlation_id,
        metrics,
        record_metric,
    )
"""

import json
import logging
import uuid
from contextvars import ContextVar
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from prometheus_client import CollectorRegistry, Counter, generate_latest

if TYPE_CHECKING:
    from segment_filters.core.config import Settings

logger = logging.getLogger(__name__)

# ============================================================================
# Context Variables
# ============================================================================

# Correlation ID - links all logs for one preview/save request
_correlation_id_ctx: ContextVar[str] = ContextVar("correlation_id", default="")

# Editing session - links all mutations made in one builder session
_session_id_ctx: ContextVar[str] = ContextVar("session_id", default="")


def generate_correlation_id() -> str:
    """Generate a unique correlation ID (uuid4 string)."""
    return str(uuid.uuid4())


def get_correlation_id() -> str:
    """Get the current correlation ID from context."""
    return _correlation_id_ctx.get()


def set_correlation_id(correlation_id: str) -> None:
    """Set the correlation ID for the current context."""
    _correlation_id_ctx.set(correlation_id)


def get_session_id() -> str:
    """Get the current editing session ID from context."""
    return _session_id_ctx.get()


def set_session_id(session_id: str) -> None:
    """Set the editing session ID for the current context."""
    _session_id_ctx.set(session_id)


# ============================================================================
# Structured Logging Configuration
# ============================================================================

_RESERVED_RECORD_KEYS = frozenset(
    {
        "name",
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "taskName",
        "getMessage",
        "exc_info",
        "exc_text",
        "stack_info",
    }
)


class StructuredFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.

    Outputs logs as JSON with standard fields:
    - timestamp: ISO 8601 format
    - level: Log level
    - logger: Logger name
    - message: Log message
    - correlation_id: Request correlation ID (if available)
    - session_id: Editing session ID (if available)
    - extra: Any additional context from logging.extra
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        correlation_id = get_correlation_id()
        if correlation_id:
            log_entry["correlation_id"] = correlation_id

        session_id = get_session_id()
        if session_id:
            log_entry["session_id"] = session_id

        if record.exc_info:
            log_entry["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
            }

        log_entry["file"] = record.pathname
        log_entry["line"] = record.lineno
        log_entry["function"] = record.funcName

        # logger.info("msg", extra={"key": "value"})
        extra_keys = {k: v for k, v in record.__dict__.items() if k not in _RESERVED_RECORD_KEYS}
        if extra_keys:
            log_entry["extra"] = extra_keys

        return json.dumps(log_entry, default=str)


def configure_structured_logging(level: str = "INFO") -> None:
    """
    Configure root logger with structured JSON formatting.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    _install_handler(level, StructuredFormatter())


def configure_logging(config: "Settings | None" = None) -> None:
    """
    Configure logging from settings (JSON or plain text).

    Args:
        config: Settings to read; defaults to the process settings
    """
    if config is None:
        from segment_filters.core.config import settings as config

    if config.structured_logs:
        configure_structured_logging(config.log_level)
    else:
        _install_handler(
            config.log_level,
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"),
        )


def _install_handler(level: str, formatter: logging.Formatter) -> None:
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)
    root_logger.addHandler(handler)


# ============================================================================
# Prometheus Metrics
# ============================================================================

# Use a custom registry to avoid conflicts with the host application's metrics
_registry = CollectorRegistry()


class Metrics:
    """
    Centralized metrics for the filter core.

    Metrics groups:
    - Wire format: serializations, deserializations by outcome
    - Validation: results by validity
    - Node model: rejected mutations by violation kind
    - Evaluation: local evaluations
    """

    def __init__(self, registry: CollectorRegistry) -> None:
        self.registry = registry

        self.serializations_total = Counter(
            "segment_filters_serializations_total",
            "Total trees serialized to the wire format",
            registry=self.registry,
        )

        # outcome: ok | degraded | empty
        self.deserializations_total = Counter(
            "segment_filters_deserializations_total",
            "Total wire payloads deserialized",
            ["outcome"],
            registry=self.registry,
        )

        # result: valid | invalid
        self.validations_total = Counter(
            "segment_filters_validations_total",
            "Total tree validations",
            ["result"],
            registry=self.registry,
        )

        self.mutations_rejected_total = Counter(
            "segment_filters_mutations_rejected_total",
            "Mutations rejected at the capacity boundary",
            ["kind"],
            registry=self.registry,
        )

        self.evaluations_total = Counter(
            "segment_filters_evaluations_total",
            "Total trees evaluated against a record",
            registry=self.registry,
        )


# Global metrics instance
metrics = Metrics(_registry)


def record_metric(name: str, **labels: str) -> None:
    """
    Increment a counter on the global metrics instance.

    Metrics failures never break the core; they are logged at DEBUG and
    otherwise ignored.

    Args:
        name: Attribute name of the counter on ``Metrics``
        **labels: Label values for labelled counters
    """
    try:
        from segment_filters.core.config import settings

        if not settings.metrics_enabled:
            return

        counter = getattr(metrics, name)
        if labels:
            counter = counter.labels(**labels)
        counter.inc()
    except Exception as e:
        # Metrics should never break the caller
        logger.debug("Failed to record metric %s: %s", name, e, exc_info=True)


def render_metrics() -> bytes:
    """Return the Prometheus exposition text for the core's registry."""
    return generate_latest(_registry)
