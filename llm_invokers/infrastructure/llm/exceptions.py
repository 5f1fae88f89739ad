"""Custom exceptions for LLM invoker operations."""


class LLMProviderError(Exception):
    """Base exception for LLM invoker errors."""

    def __init__(self, message: str, *, provider: str = "unknown") -> None:
        self.provider = provider
        super().__init__(message)


class LLMConfigurationError(LLMProviderError):
    """Raised when there's a configuration issue (e.g., missing API key)."""


class LLMRateLimitError(LLMProviderError):
    """Raised when the provider reports a rate limit.

    The Claude CLI invoker raises this internally to drive its retry loop;
    it never reaches the caller.
    """

    def __init__(
        self, message: str, *, provider: str = "unknown", stderr: str = ""
    ) -> None:
        self.stderr = stderr
        super().__init__(message, provider=provider)


class LLMRateLimitExhaustedError(LLMProviderError):
    """Raised when rate-limit retries are exhausted.

    This is fatal: the invoker does not convert it to an empty result.
    """

    def __init__(
        self,
        message: str,
        *,
        provider: str = "unknown",
        attempts: int = 0,
        stderr: str = "",
    ) -> None:
        self.attempts = attempts
        self.stderr = stderr
        super().__init__(message, provider=provider)
