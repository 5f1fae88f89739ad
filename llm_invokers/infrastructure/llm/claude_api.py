"""Claude invoker using the Anthropic Messages HTTP API."""

import httpx
import structlog

from llm_invokers.infrastructure.llm.exceptions import LLMConfigurationError
from llm_invokers.infrastructure.llm.schemas import MessagesRequest, MessagesResponse
from llm_invokers.infrastructure.observability import get_tracer, invoke_span

logger = structlog.get_logger()
tracer = get_tracer(__name__)


class ClaudeApiInvoker:
    """Invoker that posts a single prompt to the Anthropic Messages API.

    Each call opens its own HTTP client and closes it before returning.
    Failures of any kind are logged and reported as ``None``; nothing is
    retried here.
    """

    PROVIDER_NAME = "claude-api"
    MESSAGES_URL = "https://api.anthropic.com/v1/messages"
    ANTHROPIC_VERSION = "2023-06-01"

    def __init__(
        self,
        api_key: str,
        *,
        default_model: str = "claude-sonnet-4-20250514",
        default_max_tokens: int = 1024,
        default_temperature: float = 0.0,
        timeout_seconds: float = 100.0,
        verbose_logging: bool = False,
        detailed_logging: bool = False,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the invoker.

        Args:
            api_key: Anthropic API key sent as the ``x-api-key`` header.
            default_model: Model used when a call doesn't override it.
            default_max_tokens: Token limit used when a call doesn't override it.
            default_temperature: Temperature used when a call doesn't override it.
            timeout_seconds: Request timeout in seconds.
            verbose_logging: Log prompt and response sizes.
            detailed_logging: Log the model used for each request.
            transport: Optional httpx transport, mainly for tests.

        Raises:
            LLMConfigurationError: If API key is missing.
        """
        if not api_key:
            raise LLMConfigurationError(
                "Anthropic API key is required", provider=self.PROVIDER_NAME
            )

        self._api_key = api_key
        self._default_model = default_model
        self._default_max_tokens = default_max_tokens
        self._default_temperature = default_temperature
        self._timeout = timeout_seconds
        self._verbose = verbose_logging
        self._detailed = detailed_logging
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        return {
            "x-api-key": self._api_key,
            "anthropic-version": self.ANTHROPIC_VERSION,
            "content-type": "application/json",
        }

    async def invoke(
        self,
        prompt: str,
        *,
        model: str | None = None,
        max_tokens: int | None = None,
        temperature: float | None = None,
    ) -> str | None:
        """Send a prompt to Claude and return the first text block.

        Args:
            prompt: The prompt to send as a single user message.
            model: Optional model override.
            max_tokens: Optional token limit override.
            temperature: Optional temperature override.

        Returns:
            Claude's response text, or None if the call failed.
        """
        model_to_use = model or self._default_model

        with invoke_span(
            tracer, provider=self.PROVIDER_NAME, model=model_to_use, prompt=prompt
        ) as span:
            try:
                request = MessagesRequest.for_prompt(
                    prompt,
                    model=model_to_use,
                    max_tokens=(
                        max_tokens
                        if max_tokens is not None
                        else self._default_max_tokens
                    ),
                    temperature=(
                        temperature
                        if temperature is not None
                        else self._default_temperature
                    ),
                )

                if self._verbose:
                    logger.info(
                        "claude_api_request_start",
                        provider=self.PROVIDER_NAME,
                        prompt_length=len(prompt),
                    )
                if self._detailed:
                    logger.info(
                        "claude_api_request_model",
                        provider=self.PROVIDER_NAME,
                        model=model_to_use,
                    )

                async with httpx.AsyncClient(
                    timeout=httpx.Timeout(self._timeout),
                    headers=self._headers(),
                    transport=self._transport,
                ) as client:
                    response = await client.post(
                        self.MESSAGES_URL, json=request.model_dump()
                    )

                if not response.is_success:
                    logger.warning(
                        "claude_api_http_error",
                        provider=self.PROVIDER_NAME,
                        model=model_to_use,
                        status_code=response.status_code,
                        body=response.text,
                    )
                    return None

                result = MessagesResponse.model_validate(response.json()).first_text()
                if result is None:
                    logger.warning(
                        "claude_api_empty_response",
                        provider=self.PROVIDER_NAME,
                        model=model_to_use,
                    )
                    return None

                if self._verbose:
                    logger.info(
                        "claude_api_request_success",
                        provider=self.PROVIDER_NAME,
                        response_length=len(result),
                    )
                span.set_attribute("llm.output_length", len(result))
                return result

            except Exception as e:
                span.record_exception(e)
                logger.error(
                    "claude_api_error",
                    provider=self.PROVIDER_NAME,
                    model=model_to_use,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                return None
