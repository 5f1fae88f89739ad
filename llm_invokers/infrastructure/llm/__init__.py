"""LLM invoker layer."""

from llm_invokers.infrastructure.llm.claude_api import ClaudeApiInvoker
from llm_invokers.infrastructure.llm.claude_cli import (
    ClaudeCliInvoker,
    console_countdown,
    is_rate_limited,
)
from llm_invokers.infrastructure.llm.exceptions import (
    LLMConfigurationError,
    LLMProviderError,
    LLMRateLimitError,
    LLMRateLimitExhaustedError,
)
from llm_invokers.infrastructure.llm.factory import PROVIDERS, build_invoker
from llm_invokers.infrastructure.llm.gemini_api import (
    PLACEHOLDER_API_KEY,
    GeminiApiInvoker,
    GeminiClientState,
)
from llm_invokers.infrastructure.llm.protocol import TextInvoker

__all__ = [
    "PLACEHOLDER_API_KEY",
    "PROVIDERS",
    "ClaudeApiInvoker",
    "ClaudeCliInvoker",
    "GeminiApiInvoker",
    "GeminiClientState",
    "LLMConfigurationError",
    "LLMProviderError",
    "LLMRateLimitError",
    "LLMRateLimitExhaustedError",
    "TextInvoker",
    "build_invoker",
    "console_countdown",
    "is_rate_limited",
]
