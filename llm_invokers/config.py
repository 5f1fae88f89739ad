"""Application configuration using pydantic-settings."""

from functools import lru_cache

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Invoker settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Application
    app_name: str = "llm-invokers"
    app_version: str = "0.1.0"

    # Logging
    log_level: str = "INFO"
    log_json: bool = False
    verbose_logging: bool = False
    detailed_logging: bool = False

    # Shared generation defaults
    temperature: float = 0.0

    # Claude HTTP API
    anthropic_api_key: SecretStr | None = None
    claude_api_model: str = "claude-sonnet-4-20250514"
    claude_api_max_tokens: int = 1024
    claude_api_timeout_seconds: float = 100.0

    # Claude CLI
    claude_cli_executable: str = "claude"
    claude_cli_model: str = "sonnet"
    claude_cli_max_retries: int = 3
    claude_cli_retry_wait_seconds: int = 65
    claude_cli_exit_on_rate_limit: bool = True  # Exit the process when retries run out

    # Gemini API
    gemini_api_key: SecretStr | None = None
    gemini_model: str = "gemini-2.5-flash"
    gemini_max_output_tokens: int = 8192

    # Tracing
    otel_enabled: bool = False
    otel_endpoint: str | None = None  # e.g. http://localhost:4318
    otel_console_export: bool = False
    otel_sample_rate: float = 1.0  # Fraction of root traces sampled


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
