"""Gemini invoker using the google-genai client."""

from enum import Enum
from typing import Any

import structlog
from google import genai
from google.genai import types

from llm_invokers.infrastructure.observability import get_tracer, invoke_span

logger = structlog.get_logger()
tracer = get_tracer(__name__)

# Value shipped in sample configuration files in place of a real key
PLACEHOLDER_API_KEY = "PUT_YOUR_GEMINI_API_KEY_HERE"

QUOTA_MARKERS = ("TooManyRequests", "quota", "RESOURCE_EXHAUSTED")


class GeminiClientState(str, Enum):
    """Lifecycle of the underlying genai client."""

    UNINITIALIZED = "uninitialized"
    READY = "ready"
    DISABLED = "disabled"


def extract_text(response: Any) -> str | None:
    """Pull the answer text out of a generate_content response.

    Uses ``response.text`` and falls back to the first part of the first
    candidate when that is empty.
    """
    text = getattr(response, "text", None)
    if text:
        return str(text)

    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return None
    content = getattr(candidates[0], "content", None)
    parts = getattr(content, "parts", None) or []
    if not parts:
        return None
    fallback = getattr(parts[0], "text", None)
    return str(fallback) if fallback else None


class GeminiApiInvoker:
    """Invoker that sends a single prompt to the Gemini API.

    Whether the invoker is usable is decided once, at construction: an empty
    key or the placeholder key leaves it DISABLED, and every call then
    returns ``None`` without touching the network. Otherwise the genai
    client is built on the first call. Quota errors are logged but not
    retried.
    """

    PROVIDER_NAME = "gemini"

    def __init__(
        self,
        api_key: str,
        *,
        default_model: str = "gemini-2.5-flash",
        default_temperature: float = 0.0,
        default_max_output_tokens: int = 8192,
        timeout_seconds: float | None = None,
        basic_logging: bool = False,
        verbose_logging: bool = False,
        detailed_logging: bool = False,
    ) -> None:
        """Initialize the invoker.

        Args:
            api_key: Google API key.
            default_model: Model used when a call doesn't override it.
            default_temperature: Temperature used when a call doesn't override it.
            default_max_output_tokens: Output limit used when a call doesn't
                override it.
            timeout_seconds: Optional request timeout in seconds.
            basic_logging: Log prompt sizes and empty responses.
            verbose_logging: Log the model used for each request.
            detailed_logging: Log response sizes.
        """
        self._api_key = api_key
        self._default_model = default_model
        self._default_temperature = default_temperature
        self._default_max_output_tokens = default_max_output_tokens
        self._timeout = timeout_seconds
        self._basic = basic_logging
        self._verbose = verbose_logging
        self._detailed = detailed_logging
        self._client: genai.Client | None = None

        if not api_key or api_key == PLACEHOLDER_API_KEY:
            self._state = GeminiClientState.DISABLED
        else:
            self._state = GeminiClientState.UNINITIALIZED

    @property
    def state(self) -> GeminiClientState:
        """Current client lifecycle state."""
        return self._state

    def _get_client(self) -> genai.Client:
        if self._client is None:
            http_options = None
            if self._timeout is not None:
                # HttpOptions expects milliseconds
                http_options = types.HttpOptions(timeout=int(self._timeout * 1000))
            self._client = genai.Client(api_key=self._api_key, http_options=http_options)
            self._state = GeminiClientState.READY
        return self._client

    async def invoke(
        self,
        prompt: str,
        *,
        model: str | None = None,
        temperature: float | None = None,
        max_output_tokens: int | None = None,
    ) -> str | None:
        """Send a prompt to Gemini and return the trimmed response text.

        Args:
            prompt: The prompt to send.
            model: Optional model override.
            temperature: Optional temperature override.
            max_output_tokens: Optional output limit override.

        Returns:
            Gemini's response text, or None if failed or disabled.
        """
        if self._state is GeminiClientState.DISABLED:
            logger.warning(
                "gemini_client_disabled",
                provider=self.PROVIDER_NAME,
                reason="API key not set",
            )
            return None

        model_to_use = model or self._default_model

        with invoke_span(
            tracer, provider=self.PROVIDER_NAME, model=model_to_use, prompt=prompt
        ) as span:
            try:
                client = self._get_client()

                if self._basic:
                    logger.info(
                        "gemini_request_start",
                        provider=self.PROVIDER_NAME,
                        prompt_length=len(prompt),
                    )
                if self._verbose:
                    logger.info(
                        "gemini_request_model",
                        provider=self.PROVIDER_NAME,
                        model=model_to_use,
                    )

                config = types.GenerateContentConfig(
                    temperature=(
                        temperature
                        if temperature is not None
                        else self._default_temperature
                    ),
                    max_output_tokens=(
                        max_output_tokens
                        if max_output_tokens is not None
                        else self._default_max_output_tokens
                    ),
                    top_p=1.0,
                    top_k=1,
                )

                try:
                    response = await client.aio.models.generate_content(
                        model=model_to_use,
                        contents=prompt,
                        config=config,
                    )
                except Exception as e:
                    span.record_exception(e)
                    message = str(e)
                    logger.error(
                        "gemini_request_failed",
                        provider=self.PROVIDER_NAME,
                        model=model_to_use,
                        error=message,
                        error_type=type(e).__name__,
                    )
                    if any(marker in message for marker in QUOTA_MARKERS):
                        logger.warning(
                            "gemini_quota_exceeded",
                            provider=self.PROVIDER_NAME,
                            model=model_to_use,
                        )
                    return None

                result = (extract_text(response) or "").strip()

                if self._detailed:
                    logger.info(
                        "gemini_response_received",
                        provider=self.PROVIDER_NAME,
                        response_length=len(result),
                    )

                if not result:
                    if self._basic:
                        logger.warning(
                            "gemini_empty_response",
                            provider=self.PROVIDER_NAME,
                            model=model_to_use,
                        )
                    return None

                span.set_attribute("llm.output_length", len(result))
                return result

            except Exception as e:
                span.record_exception(e)
                logger.error(
                    "gemini_error",
                    provider=self.PROVIDER_NAME,
                    model=model_to_use,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                return None
