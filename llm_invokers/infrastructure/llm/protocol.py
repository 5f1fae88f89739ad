"""Protocol definition for LLM invokers."""

from typing import Protocol, runtime_checkable


@runtime_checkable
class TextInvoker(Protocol):
    """Protocol for single-shot prompt invokers.

    Every implementation sends one prompt, extracts one text result and
    returns it. Failures are logged and reported as ``None`` rather than
    raised, so callers only need to check for a missing result.
    """

    async def invoke(self, prompt: str) -> str | None:
        """Send a prompt and return the model's text output.

        Args:
            prompt: The prompt text to send.

        Returns:
            The extracted response text, or None if the call failed.
        """
        ...
