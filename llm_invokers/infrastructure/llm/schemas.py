"""Wire schemas for the Anthropic Messages API."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict


class Message(BaseModel):
    """A single chat message."""

    role: Literal["user", "assistant"]
    content: str


class MessagesRequest(BaseModel):
    """Request body for ``POST /v1/messages``."""

    model: str
    max_tokens: int
    temperature: float
    messages: list[Message]

    @classmethod
    def for_prompt(
        cls, prompt: str, *, model: str, max_tokens: int, temperature: float
    ) -> "MessagesRequest":
        """Build a request holding one user message."""
        return cls(
            model=model,
            max_tokens=max_tokens,
            temperature=temperature,
            messages=[Message(role="user", content=prompt)],
        )


class ContentBlock(BaseModel):
    """One block of the response ``content`` list."""

    model_config = ConfigDict(extra="ignore")

    type: str | None = None
    text: str | None = None


class MessagesResponse(BaseModel):
    """Subset of the Messages API response that invokers read."""

    model_config = ConfigDict(extra="ignore")

    # Only the first block is validated, in first_text()
    content: list[Any] = []

    def first_text(self) -> str | None:
        """Return the text of the first content block, if present."""
        if not self.content:
            return None
        return ContentBlock.model_validate(self.content[0]).text
