"""
LLM layer.

Builds the Penelope persona prompt and sends it to an OpenAI-compatible
chat completion endpoint through LiteLLM:

    MessageResponder  →  render_prompt(history, author, content)
                                    ↓
                     CompletionClient.complete(prompt)
                                    ↓
                               LLMResponse  →  Discord reply

The client is stateless per call; every reply renders its prompt from the
channel history fetched for that message.
"""

from penelope.llm.client import CompletionClient, build_completion_client
from penelope.llm.models import CompletionTimeoutError, LLMError, LLMResponse, TokenUsage
from penelope.llm.prompts import RenderedPrompt, format_history, render_prompt

__all__ = [
    "CompletionClient",
    "build_completion_client",
    "CompletionTimeoutError",
    "LLMError",
    "LLMResponse",
    "TokenUsage",
    "RenderedPrompt",
    "format_history",
    "render_prompt",
]
