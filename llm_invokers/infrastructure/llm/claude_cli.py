"""Claude invoker that runs the ``claude`` command-line tool."""

import asyncio
import contextlib
import sys
from collections.abc import Awaitable, Callable
from pathlib import Path

import structlog
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
)

from llm_invokers.infrastructure.llm.exceptions import (
    LLMRateLimitError,
    LLMRateLimitExhaustedError,
)
from llm_invokers.infrastructure.observability import get_tracer, invoke_span

logger = structlog.get_logger()
tracer = get_tracer(__name__)

ProgressCallback = Callable[[int], None]

# Literal stderr phrasings the CLI uses when the account is rate limited
RATE_LIMIT_MARKERS = ("rate_limit_error", "TooManyRequests", "rate limit")


def console_countdown(seconds_remaining: int) -> None:
    """Progress callback that redraws a single countdown line on stderr."""
    sys.stderr.write(f"\rRate limit - waiting: {seconds_remaining}s remaining...  ")
    sys.stderr.flush()


def is_rate_limited(stderr: str) -> bool:
    """Return True if CLI diagnostics contain a rate-limit marker."""
    return any(marker in stderr for marker in RATE_LIMIT_MARKERS)


class ClaudeCliInvoker:
    """Invoker that pipes a prompt through the Claude CLI in print mode.

    The CLI runs non-interactively: it reads the prompt from stdin, prints
    the answer and exits. When it fails with a rate-limit message the call
    waits ``retry_wait_seconds`` and tries again, up to ``max_retries``
    times. Once retries are exhausted the host process exits with status 1,
    unless ``exit_on_rate_limit_exhausted`` is False, in which case
    ``LLMRateLimitExhaustedError`` is raised instead. Every other failure is
    logged and reported as ``None``.
    """

    PROVIDER_NAME = "claude-cli"

    def __init__(
        self,
        *,
        executable: str = "claude",
        model: str = "sonnet",
        working_directory: str | Path | None = None,
        max_retries: int = 3,
        retry_wait_seconds: int = 65,
        exit_on_rate_limit_exhausted: bool = True,
        progress_callback: ProgressCallback | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        verbose_logging: bool = False,
        detailed_logging: bool = False,
    ) -> None:
        """Initialize the invoker.

        Args:
            executable: Name or path of the Claude CLI executable.
            model: Model alias passed to ``--model``.
            working_directory: Directory the CLI runs in (default: current).
            max_retries: Rate-limit retries before giving up.
            retry_wait_seconds: Seconds to wait before each retry.
            exit_on_rate_limit_exhausted: Terminate the process when retries
                run out instead of raising LLMRateLimitExhaustedError.
            progress_callback: Called once per second of each wait with the
                seconds remaining.
            sleep: Coroutine used for the one-second ticks.
            verbose_logging: Log prompt, output preview and response sizes.
            detailed_logging: Log each CLI call.
        """
        self._executable = executable
        self._model = model
        self._working_directory = working_directory
        self._max_retries = max_retries
        self._retry_wait_seconds = retry_wait_seconds
        self._exit_on_exhausted = exit_on_rate_limit_exhausted
        self._progress_callback = progress_callback
        self._sleep = sleep
        self._verbose = verbose_logging
        self._detailed = detailed_logging

    def build_command(self) -> list[str]:
        """Return the argv used to run the CLI in single-shot print mode."""
        return [
            self._executable,
            "--dangerously-skip-permissions",
            "--disallowedTools",
            "",
            "--permission-mode",
            "bypassPermissions",
            "--model",
            self._model,
            "--print",
        ]

    async def invoke(self, prompt: str, retry_count: int = 0) -> str | None:
        """Run the CLI with the prompt and return its standard output.

        Args:
            prompt: The prompt, written to the CLI's stdin.
            retry_count: Rate-limit retries already spent by this call chain.

        Returns:
            The CLI output exactly as printed, or None if the call failed.

        Raises:
            LLMRateLimitExhaustedError: If retries run out and the invoker
                was built with ``exit_on_rate_limit_exhausted=False``.
        """
        with invoke_span(
            tracer, provider=self.PROVIDER_NAME, model=self._model, prompt=prompt
        ) as span:
            retrying = AsyncRetrying(
                retry=retry_if_exception_type(LLMRateLimitError),
                stop=stop_after_attempt(max(1, self._max_retries - retry_count + 1)),
                wait=wait_fixed(self._retry_wait_seconds),
                sleep=self._countdown,
                before_sleep=self._log_retry(retry_count),
                reraise=True,
            )

            result: str | None = None
            try:
                async for attempt in retrying:
                    with attempt:
                        result = await self._run_once(prompt)
                if result is not None:
                    span.set_attribute("llm.output_length", len(result))
                return result

            except LLMRateLimitError as e:
                span.record_exception(e)
                logger.error(
                    "claude_cli_rate_limit_exhausted",
                    provider=self.PROVIDER_NAME,
                    retries=self._max_retries,
                    stderr=e.stderr,
                )
                if self._exit_on_exhausted:
                    sys.stderr.write(
                        f"\n\nClaude CLI rate limit exceeded after "
                        f"{self._max_retries} retries. Exiting program. "
                        f"Error: {e.stderr}\n"
                    )
                    sys.exit(1)
                raise LLMRateLimitExhaustedError(
                    f"Claude CLI rate limit exceeded after {self._max_retries} retries",
                    provider=self.PROVIDER_NAME,
                    attempts=self._max_retries,
                    stderr=e.stderr,
                ) from e

            except Exception as e:
                span.record_exception(e)
                logger.error(
                    "claude_cli_error",
                    provider=self.PROVIDER_NAME,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                return None

    async def _run_once(self, prompt: str) -> str | None:
        """Run the CLI a single time.

        Raises:
            LLMRateLimitError: If the CLI failed with a rate-limit message.
        """
        if self._verbose:
            logger.info(
                "claude_cli_request_start",
                provider=self.PROVIDER_NAME,
                prompt_length=len(prompt),
            )
        if self._detailed:
            logger.info(
                "claude_cli_spawn",
                provider=self.PROVIDER_NAME,
                executable=self._executable,
                model=self._model,
            )

        process = await asyncio.create_subprocess_exec(
            *self.build_command(),
            stdin=asyncio.subprocess.PIPE,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            cwd=self._working_directory,
        )
        try:
            stdout_bytes, stderr_bytes = await process.communicate(
                prompt.encode("utf-8")
            )
        finally:
            # Reap the child if communicate() failed or was cancelled
            if process.returncode is None:
                with contextlib.suppress(ProcessLookupError):
                    process.kill()
                await process.wait()
        result = stdout_bytes.decode("utf-8", errors="replace")
        error = stderr_bytes.decode("utf-8", errors="replace")

        if error:
            logger.warning("claude_cli_stderr", provider=self.PROVIDER_NAME, stderr=error)
        if result and self._verbose:
            logger.info(
                "claude_cli_stdout",
                provider=self.PROVIDER_NAME,
                preview=result[:200],
            )

        if process.returncode != 0:
            if is_rate_limited(error):
                raise LLMRateLimitError(
                    "Claude CLI rate limit exceeded",
                    provider=self.PROVIDER_NAME,
                    stderr=error,
                )
            logger.warning(
                "claude_cli_failed",
                provider=self.PROVIDER_NAME,
                exit_code=process.returncode,
                stderr=error,
            )
            return None

        if not result:
            logger.warning(
                "claude_cli_empty_response",
                provider=self.PROVIDER_NAME,
                exit_code=process.returncode,
                stderr_length=len(error),
            )
            return None

        if self._verbose:
            logger.info(
                "claude_cli_request_success",
                provider=self.PROVIDER_NAME,
                response_length=len(result),
            )
        return result

    async def _countdown(self, seconds: float) -> None:
        """Wait ``seconds`` in one-second ticks, reporting progress."""
        for remaining in range(int(seconds), 0, -1):
            if self._progress_callback is not None:
                self._progress_callback(remaining)
            await self._sleep(1)
        logger.info("claude_cli_retrying", provider=self.PROVIDER_NAME)

    def _log_retry(self, retry_count: int) -> Callable[[RetryCallState], None]:
        def log(retry_state: RetryCallState) -> None:
            attempt = retry_count + retry_state.attempt_number
            logger.warning(
                "claude_cli_rate_limited",
                provider=self.PROVIDER_NAME,
                wait_seconds=self._retry_wait_seconds,
                attempt=attempt,
                max_retries=self._max_retries,
            )

        return log
