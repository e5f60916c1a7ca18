"""
Completion client — the bot's single handle to the LLM endpoint.

Data flow:
    MessageResponder → RenderedPrompt
                            ↓
    CompletionClient.complete()  →  LiteLLM acompletion(api_base=endpoint)
                            ↓
                       LLMResponse  →  posted to Discord verbatim

Design decisions:
- LiteLLM keeps the transport provider-agnostic. The default model string
  uses the "openai/" prefix, which sends the request to whatever
  OpenAI-compatible endpoint is configured (e.g. an Azure AI model
  deployment serving Llama 3).
- One client is built at startup and shared by every in-flight reply.
  acompletion() holds no per-call state on the client, so no lock is needed.
- No retries. A bounded timeout is applied when configured and surfaces as
  CompletionTimeoutError, distinct from other provider failures.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from litellm import acompletion

from penelope.config.settings import LLMSettings
from penelope.llm.models import CompletionTimeoutError, LLMError, LLMResponse, TokenUsage
from penelope.llm.prompts import RenderedPrompt

logger = logging.getLogger(__name__)


class CompletionClient:
    """
    Sends rendered prompts to a fixed model on a fixed endpoint.

    Args:
        endpoint: Base URL of the chat completion API
        api_key: Key for that API
        settings: Model id, default temperature, max_tokens and timeout
    """

    def __init__(self, endpoint: str, api_key: str, settings: LLMSettings):
        self._endpoint = endpoint
        self._api_key = api_key
        self._settings = settings

    @property
    def model(self) -> str:
        return self._settings.model

    async def complete(
        self,
        prompt: RenderedPrompt,
        temperature: float | None = None,
    ) -> LLMResponse:
        """
        Run one chat completion.

        Args:
            prompt: System and user turns to send
            temperature: Sampling temperature; defaults to the configured value

        Returns:
            LLMResponse with the model's text

        Raises:
            CompletionTimeoutError: If the endpoint exceeds settings.timeout
            LLMError: On any other transport or provider failure
        """
        call_kwargs: dict[str, Any] = {
            "model": self._settings.model,
            "messages": prompt.to_messages(),
            "temperature": (
                self._settings.temperature if temperature is None else temperature
            ),
            "api_base": self._endpoint,
            "api_key": self._api_key,
        }
        if self._settings.max_tokens is not None:
            call_kwargs["max_tokens"] = self._settings.max_tokens

        try:
            response = await asyncio.wait_for(
                acompletion(**call_kwargs), timeout=self._settings.timeout
            )
        except asyncio.TimeoutError as e:
            raise CompletionTimeoutError(
                f"Completion timed out after {self._settings.timeout}s", cause=e
            ) from e
        except Exception as e:
            raise LLMError(f"LLM API call failed: {e}", cause=e) from e

        text = response.choices[0].message.content or ""
        usage = getattr(response, "usage", None)
        result = LLMResponse(
            text=text,
            model=response.model or self._settings.model,
            usage=TokenUsage(
                prompt_tokens=getattr(usage, "prompt_tokens", 0) or 0,
                completion_tokens=getattr(usage, "completion_tokens", 0) or 0,
            ),
        )
        logger.debug(
            f"Completion from {result.model}: {result.usage.total_tokens} tokens"
        )
        return result


def build_completion_client(
    endpoint: str,
    api_key: str,
    settings: LLMSettings,
) -> CompletionClient:
    """
    Build the process-wide completion client.

    Called once at startup; the client is never reconfigured afterwards.

    Raises:
        LLMError: If the endpoint or API key is empty
    """
    if not endpoint:
        raise LLMError("Completion endpoint not configured.")
    if not api_key:
        raise LLMError("Completion API key not configured.")

    logger.info(f"Completion client ready (model: {settings.model}, endpoint: {endpoint})")
    return CompletionClient(endpoint=endpoint, api_key=api_key, settings=settings)
