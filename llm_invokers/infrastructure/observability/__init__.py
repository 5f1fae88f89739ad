"""Observability module providing structlog configuration and OpenTelemetry tracing."""

from llm_invokers.infrastructure.observability.setup import (
    configure_logging,
    init_observability,
    shutdown_observability,
)
from llm_invokers.infrastructure.observability.tracing import (
    add_trace_context,
    get_current_span_id,
    get_current_trace_id,
    get_tracer,
    invoke_span,
)

__all__ = [
    "add_trace_context",
    "configure_logging",
    "get_current_span_id",
    "get_current_trace_id",
    "get_tracer",
    "init_observability",
    "invoke_span",
    "shutdown_observability",
]
