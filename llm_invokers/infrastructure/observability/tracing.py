"""Tracing helpers for instrumenting invoker calls with OpenTelemetry."""

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from opentelemetry import trace
from opentelemetry.trace import Span, Tracer


def get_tracer(name: str) -> Tracer:
    """Get a tracer for the given module name.

    Args:
        name: Module name, typically __name__.

    Returns:
        A Tracer instance for creating spans.
    """
    return trace.get_tracer(name)


@contextmanager
def invoke_span(
    tracer: Tracer,
    *,
    provider: str,
    model: str,
    prompt: str,
) -> Iterator[Span]:
    """Open the ``llm.invoke`` span shared by all invokers.

    Args:
        tracer: Tracer owned by the invoker module.
        provider: Provider name recorded as ``llm.provider``.
        model: Model identifier recorded as ``llm.model``.
        prompt: Prompt text; only its length is recorded.

    Yields:
        The active span, so callers can add the output length.
    """
    with tracer.start_as_current_span("llm.invoke") as span:
        span.set_attribute("llm.provider", provider)
        span.set_attribute("llm.model", model)
        span.set_attribute("llm.input_length", len(prompt))
        yield span


def get_current_trace_id() -> str | None:
    """Get the current trace ID as a hex string, or None outside a trace."""
    span_context = trace.get_current_span().get_span_context()
    if span_context.is_valid:
        return format(span_context.trace_id, "032x")
    return None


def get_current_span_id() -> str | None:
    """Get the current span ID as a hex string, or None outside a span."""
    span_context = trace.get_current_span().get_span_context()
    if span_context.is_valid:
        return format(span_context.span_id, "016x")
    return None


def add_trace_context(
    logger: Any,  # noqa: ARG001
    method_name: str,  # noqa: ARG001
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Structlog processor that adds trace_id and span_id to log events.

    Lets invoker log lines be correlated with their ``llm.invoke`` span.
    """
    trace_id = get_current_trace_id()
    span_id = get_current_span_id()
    if trace_id is not None and span_id is not None:
        event_dict["trace_id"] = trace_id
        event_dict["span_id"] = span_id
    return event_dict
