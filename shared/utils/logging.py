"""Structured logging with correlation ID and caller identity support."""

import contextvars
import logging
import sys
import uuid
from typing import Any

import structlog

# Context variables propagated into every log event
_correlation_id: contextvars.ContextVar[str] = contextvars.ContextVar(
    "correlation_id", default=""
)
_caller_identity: contextvars.ContextVar[str] = contextvars.ContextVar(
    "caller_identity", default=""
)


def get_correlation_id() -> str:
    """Get the current correlation ID from context."""
    return _correlation_id.get()


def set_correlation_id(correlation_id: str | None = None) -> str:
    """Set correlation ID in context. Generates one if not provided."""
    cid = correlation_id or str(uuid.uuid4())
    _correlation_id.set(cid)
    return cid


def get_caller_identity() -> str:
    """Get the identity of the caller currently being served."""
    return _caller_identity.get()


def set_caller_identity(identity: str | None) -> None:
    """Record the caller identity for the current request context."""
    _caller_identity.set(identity or "")


def add_request_context(
    logger: logging.Logger, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Processor to add correlation ID and caller to log events."""
    correlation_id = get_correlation_id()
    if correlation_id:
        event_dict["correlation_id"] = correlation_id
    caller = get_caller_identity()
    if caller:
        event_dict.setdefault("caller", caller)
    return event_dict


def configure_logging(
    service_name: str,
    log_level: str = "INFO",
    json_format: bool = True,
) -> None:
    """Configure structured logging for a service.

    Args:
        service_name: Name of the service for log context
        log_level: Log level (DEBUG, INFO, WARNING, ERROR)
        json_format: Whether to output JSON logs (True for production)
    """
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        add_request_context,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if json_format:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper()),
    )

    structlog.contextvars.bind_contextvars(service=service_name)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a configured logger instance."""
    return structlog.get_logger(name)
