"""Shared utilities for registry services."""

from shared.utils.logging import (
    configure_logging,
    get_caller_identity,
    get_correlation_id,
    set_caller_identity,
    set_correlation_id,
)
from shared.utils.db import create_tables, get_db_session, init_db
from shared.utils.metrics import MetricsMiddleware, create_counter, create_histogram

__all__ = [
    "configure_logging",
    "get_caller_identity",
    "get_correlation_id",
    "set_caller_identity",
    "set_correlation_id",
    "create_tables",
    "get_db_session",
    "init_db",
    "MetricsMiddleware",
    "create_counter",
    "create_histogram",
]
