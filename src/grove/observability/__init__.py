"""Observability for Grove: structured logging with tenant context."""

from grove.observability.logging import (
    ConsoleFormatter,
    JsonFormatter,
    LogContext,
    configure_logging,
    request_id_var,
    tenancy_var,
    tenant_var,
)

__all__ = [
    "ConsoleFormatter",
    "JsonFormatter",
    "LogContext",
    "configure_logging",
    "request_id_var",
    "tenancy_var",
    "tenant_var",
]
