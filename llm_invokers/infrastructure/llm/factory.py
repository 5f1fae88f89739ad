"""Build invokers from application settings."""

from llm_invokers.config import Settings
from llm_invokers.infrastructure.llm.claude_api import ClaudeApiInvoker
from llm_invokers.infrastructure.llm.claude_cli import (
    ClaudeCliInvoker,
    ProgressCallback,
)
from llm_invokers.infrastructure.llm.exceptions import LLMConfigurationError
from llm_invokers.infrastructure.llm.gemini_api import (
    PLACEHOLDER_API_KEY,
    GeminiApiInvoker,
)
from llm_invokers.infrastructure.llm.protocol import TextInvoker

PROVIDERS = ("claude-api", "claude-cli", "gemini")


def build_invoker(
    provider: str,
    settings: Settings,
    *,
    progress_callback: ProgressCallback | None = None,
) -> TextInvoker:
    """Create the invoker for a provider name.

    Args:
        provider: One of "claude-api", "claude-cli" or "gemini".
        settings: Settings supplying keys, models and logging flags.
        progress_callback: Countdown callback for the Claude CLI invoker.

    Returns:
        A configured invoker.

    Raises:
        LLMConfigurationError: If the provider is unknown, or the Claude API
            is requested without an Anthropic key.
    """
    if provider == "claude-api":
        api_key = (
            settings.anthropic_api_key.get_secret_value()
            if settings.anthropic_api_key
            else ""
        )
        return ClaudeApiInvoker(
            api_key,
            default_model=settings.claude_api_model,
            default_max_tokens=settings.claude_api_max_tokens,
            default_temperature=settings.temperature,
            timeout_seconds=settings.claude_api_timeout_seconds,
            verbose_logging=settings.verbose_logging,
            detailed_logging=settings.detailed_logging,
        )

    if provider == "claude-cli":
        return ClaudeCliInvoker(
            executable=settings.claude_cli_executable,
            model=settings.claude_cli_model,
            max_retries=settings.claude_cli_max_retries,
            retry_wait_seconds=settings.claude_cli_retry_wait_seconds,
            exit_on_rate_limit_exhausted=settings.claude_cli_exit_on_rate_limit,
            progress_callback=progress_callback,
            verbose_logging=settings.verbose_logging,
            detailed_logging=settings.detailed_logging,
        )

    if provider == "gemini":
        # A missing key leaves the invoker disabled rather than failing here
        api_key = (
            settings.gemini_api_key.get_secret_value()
            if settings.gemini_api_key
            else PLACEHOLDER_API_KEY
        )
        return GeminiApiInvoker(
            api_key,
            default_model=settings.gemini_model,
            default_temperature=settings.temperature,
            default_max_output_tokens=settings.gemini_max_output_tokens,
            basic_logging=settings.verbose_logging,
            verbose_logging=settings.verbose_logging,
            detailed_logging=settings.detailed_logging,
        )

    raise LLMConfigurationError(
        f"Unknown provider {provider!r}; expected one of {', '.join(PROVIDERS)}",
        provider=provider,
    )
