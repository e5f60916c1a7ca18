"""
Data structures returned by the completion client.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class LLMError(Exception):
    """
    Raised when a completion cannot be produced.

    Wraps provider/transport exceptions so callers only need to catch one
    type. The original exception is kept on ``cause``.
    """

    def __init__(self, message: str, cause: Exception | None = None):
        super().__init__(message)
        self.cause = cause


class CompletionTimeoutError(LLMError):
    """The completion endpoint did not answer within the configured timeout."""


class TokenUsage(BaseModel):
    """Token counts reported by the provider."""

    prompt_tokens: int = Field(default=0, ge=0)
    completion_tokens: int = Field(default=0, ge=0)

    @property
    def total_tokens(self) -> int:
        return self.prompt_tokens + self.completion_tokens


class LLMResponse(BaseModel):
    """A single completion result."""

    text: str = Field(description="Response text, passed to Discord unchanged")
    model: str = Field(default="", description="Model that produced the response")
    usage: TokenUsage = Field(default_factory=TokenUsage)
