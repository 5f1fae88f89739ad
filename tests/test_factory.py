"""Tests for settings and the invoker factory."""

import pytest
from pydantic import SecretStr

from llm_invokers.config import Settings
from llm_invokers.infrastructure.llm import (
    ClaudeApiInvoker,
    ClaudeCliInvoker,
    GeminiApiInvoker,
    GeminiClientState,
    LLMConfigurationError,
    TextInvoker,
    build_invoker,
    console_countdown,
)


@pytest.fixture
def settings() -> Settings:
    """Settings isolated from any local .env file."""
    return Settings(
        _env_file=None,
        anthropic_api_key=SecretStr("anthropic-key"),
        gemini_api_key=SecretStr("gemini-key"),
    )


class TestSettings:
    """Tests for Settings defaults and environment loading."""

    def test_defaults(self, monkeypatch):
        """Defaults match the documented values."""
        for name in ("ANTHROPIC_API_KEY", "GEMINI_API_KEY", "CLAUDE_CLI_MODEL"):
            monkeypatch.delenv(name, raising=False)

        settings = Settings(_env_file=None)

        assert settings.anthropic_api_key is None
        assert settings.gemini_api_key is None
        assert settings.claude_api_model == "claude-sonnet-4-20250514"
        assert settings.claude_api_max_tokens == 1024
        assert settings.claude_cli_model == "sonnet"
        assert settings.claude_cli_max_retries == 3
        assert settings.claude_cli_retry_wait_seconds == 65
        assert settings.claude_cli_exit_on_rate_limit is True
        assert settings.gemini_model == "gemini-2.5-flash"
        assert settings.gemini_max_output_tokens == 8192
        assert settings.temperature == 0.0
        assert settings.otel_sample_rate == 1.0

    def test_reads_environment(self, monkeypatch):
        """Values are read from case-insensitive environment variables."""
        monkeypatch.setenv("ANTHROPIC_API_KEY", "from-env")
        monkeypatch.setenv("claude_cli_model", "opus")
        monkeypatch.setenv("CLAUDE_CLI_EXIT_ON_RATE_LIMIT", "false")

        settings = Settings(_env_file=None)

        assert settings.anthropic_api_key is not None
        assert settings.anthropic_api_key.get_secret_value() == "from-env"
        assert settings.claude_cli_model == "opus"
        assert settings.claude_cli_exit_on_rate_limit is False


class TestBuildInvoker:
    """Tests for build_invoker."""

    def test_builds_claude_api_invoker(self, settings):
        """Claude API invoker gets the key and model from settings."""
        invoker = build_invoker("claude-api", settings)

        assert isinstance(invoker, ClaudeApiInvoker)
        assert invoker._api_key == "anthropic-key"
        assert invoker._default_model == settings.claude_api_model

    def test_claude_api_without_key_raises(self):
        """Claude API invoker can't be built without a key."""
        with pytest.raises(LLMConfigurationError):
            build_invoker("claude-api", Settings(_env_file=None, anthropic_api_key=None))

    def test_builds_claude_cli_invoker(self, settings):
        """Claude CLI invoker gets retry settings and the progress callback."""
        settings = settings.model_copy(
            update={"claude_cli_retry_wait_seconds": 10, "claude_cli_max_retries": 1}
        )

        invoker = build_invoker(
            "claude-cli", settings, progress_callback=console_countdown
        )

        assert isinstance(invoker, ClaudeCliInvoker)
        assert invoker._retry_wait_seconds == 10
        assert invoker._max_retries == 1
        assert invoker._progress_callback is console_countdown

    def test_builds_gemini_invoker(self, settings):
        """Gemini invoker starts uninitialized with a real key."""
        invoker = build_invoker("gemini", settings)

        assert isinstance(invoker, GeminiApiInvoker)
        assert invoker.state is GeminiClientState.UNINITIALIZED

    def test_gemini_without_key_is_disabled(self):
        """A missing Gemini key yields a disabled invoker instead of an error."""
        invoker = build_invoker("gemini", Settings(_env_file=None, gemini_api_key=None))

        assert isinstance(invoker, GeminiApiInvoker)
        assert invoker.state is GeminiClientState.DISABLED

    def test_unknown_provider_raises(self, settings):
        """Unknown provider names are rejected."""
        with pytest.raises(LLMConfigurationError) as exc_info:
            build_invoker("openai", settings)

        assert "Unknown provider" in str(exc_info.value)
        assert exc_info.value.provider == "openai"

    @pytest.mark.parametrize("provider", ["claude-api", "claude-cli", "gemini"])
    def test_every_invoker_satisfies_protocol(self, settings, provider):
        """All invokers expose the shared invoke() surface."""
        assert isinstance(build_invoker(provider, settings), TextInvoker)
