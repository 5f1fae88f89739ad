"""Tests for tracing helpers and invoker spans."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest
from opentelemetry import trace
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter

from llm_invokers.infrastructure.llm import (
    PLACEHOLDER_API_KEY,
    ClaudeApiInvoker,
    ClaudeCliInvoker,
    GeminiApiInvoker,
)
from llm_invokers.infrastructure.observability import (
    add_trace_context,
    get_current_span_id,
    get_current_trace_id,
    get_tracer,
    invoke_span,
)

# Module-level setup: configure TracerProvider once before any tests run
_exporter = InMemorySpanExporter()
_provider = TracerProvider()
_provider.add_span_processor(SimpleSpanProcessor(_exporter))
trace.set_tracer_provider(_provider)


@pytest.fixture(autouse=True)
def clear_spans():
    """Clear spans before each test."""
    _exporter.clear()
    yield
    _exporter.clear()


def get_finished_spans():
    """Get finished spans from the module-level exporter."""
    return _exporter.get_finished_spans()


class TestInvokeSpan:
    """Tests for the invoke_span context manager."""

    def test_records_provider_model_and_input_length(self):
        """Span should carry the standard llm attributes."""
        tracer = get_tracer("test")

        with invoke_span(tracer, provider="demo", model="m-1", prompt="abcd") as span:
            span.set_attribute("llm.output_length", 7)

        spans = get_finished_spans()
        assert len(spans) == 1
        assert spans[0].name == "llm.invoke"
        attrs = dict(spans[0].attributes or {})
        assert attrs["llm.provider"] == "demo"
        assert attrs["llm.model"] == "m-1"
        assert attrs["llm.input_length"] == 4
        assert attrs["llm.output_length"] == 7


class TestInvokerSpans:
    """Each invoker call should produce one llm.invoke span."""

    async def test_claude_api_span(self):
        """Claude API calls record output length on success."""
        invoker = ClaudeApiInvoker(
            api_key="test-key",
            transport=httpx.MockTransport(
                lambda request: httpx.Response(200, json={"content": [{"text": "hey"}]})
            ),
        )

        await invoker.invoke("hello")

        spans = get_finished_spans()
        assert len(spans) == 1
        attrs = dict(spans[0].attributes or {})
        assert attrs["llm.provider"] == "claude-api"
        assert attrs["llm.output_length"] == 3

    async def test_claude_api_failure_records_exception(self):
        """Errors swallowed by the invoker still show up on the span."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        invoker = ClaudeApiInvoker(
            api_key="test-key", transport=httpx.MockTransport(handler)
        )

        assert await invoker.invoke("hello") is None

        spans = get_finished_spans()
        assert len(spans) == 1
        assert any(event.name == "exception" for event in spans[0].events)

    async def test_claude_cli_span(self):
        """Claude CLI calls are traced with the pinned model."""
        process = MagicMock()
        process.returncode = 0
        process.communicate = AsyncMock(return_value=(b"output", b""))
        invoker = ClaudeCliInvoker(model="opus")

        with patch(
            "llm_invokers.infrastructure.llm.claude_cli.asyncio.create_subprocess_exec",
            new=AsyncMock(return_value=process),
        ):
            await invoker.invoke("hello")

        spans = get_finished_spans()
        assert len(spans) == 1
        attrs = dict(spans[0].attributes or {})
        assert attrs["llm.provider"] == "claude-cli"
        assert attrs["llm.model"] == "opus"

    async def test_gemini_span(self):
        """Gemini calls record the trimmed output length."""
        client = MagicMock()
        client.aio.models.generate_content = AsyncMock(
            return_value=SimpleNamespace(text="  four  ", candidates=None)
        )
        invoker = GeminiApiInvoker(api_key="test-key")

        with patch(
            "llm_invokers.infrastructure.llm.gemini_api.genai.Client",
            return_value=client,
        ):
            assert await invoker.invoke("hello") == "four"

        spans = get_finished_spans()
        assert len(spans) == 1
        attrs = dict(spans[0].attributes or {})
        assert attrs["llm.provider"] == "gemini"
        assert attrs["llm.output_length"] == 4

    async def test_disabled_gemini_creates_no_span(self):
        """A disabled Gemini invoker returns before tracing starts."""
        invoker = GeminiApiInvoker(api_key=PLACEHOLDER_API_KEY)

        await invoker.invoke("hello")

        assert get_finished_spans() == ()


class TestCurrentIds:
    """Tests for trace and span id helpers."""

    def test_ids_inside_span(self):
        """Both ids are hex strings of the expected width inside a span."""
        tracer = get_tracer("test")

        with tracer.start_as_current_span("test_span"):
            trace_id = get_current_trace_id()
            span_id = get_current_span_id()

        assert trace_id is not None and len(trace_id) == 32
        assert span_id is not None and len(span_id) == 16

    def test_ids_outside_span(self):
        """Both ids are None outside any span."""
        assert get_current_trace_id() is None
        assert get_current_span_id() is None


class TestStructlogProcessor:
    """Tests for structlog trace context processor."""

    def test_adds_trace_context_when_in_span(self):
        """Processor should add trace_id and span_id to event dict."""
        tracer = get_tracer("test")

        with tracer.start_as_current_span("test_span"):
            result = add_trace_context(None, "info", {"event": "test_event"})

        assert len(result["trace_id"]) == 32
        assert len(result["span_id"]) == 16

    def test_leaves_event_untouched_without_span(self):
        """Processor should not add trace context without active span."""
        result = add_trace_context(None, "info", {"event": "test_event"})

        assert result == {"event": "test_event"}
