"""Model-call capability and its OpenAI-compatible implementation."""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Protocol

from openai import AsyncOpenAI

logger = logging.getLogger(__name__)

ChatMessage = Dict[str, str]
"""{"role": "system" | "user" | "assistant", "content": str}"""


@dataclass(frozen=True)
class ModelResponse:
    """Raw text and token usage from one completion."""
    text: str
    prompt_tokens: int = 0
    completion_tokens: int = 0

    @property
    def total_tokens(self) -> int:
        return self.prompt_tokens + self.completion_tokens


class ModelClient(Protocol):
    """
    Anything that can run a chat completion.

    Implementations raise on transport errors; the executor decides
    whether to retry.
    """

    async def complete(
        self,
        messages: List[ChatMessage],
        model: str,
        timeout: float,
    ) -> ModelResponse:
        ...


class OpenAICompatibleClient:
    """
    Chat completions against the OpenAI API or any endpoint that speaks it
    (Ollama exposes one under /v1).

    SDK-level retries are disabled; the executor owns the retry policy.
    """

    def __init__(
        self,
        api_key: str,
        base_url: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: int = 4096,
        json_mode: bool = True,
    ):
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.json_mode = json_mode
        self._client = AsyncOpenAI(
            # The SDK refuses an empty key; Ollama ignores whatever is sent
            api_key=api_key or "ollama",
            base_url=base_url,
            max_retries=0,
        )

        logger.debug(
            "Created model client: base_url=%s, temperature=%s, max_tokens=%s, json_mode=%s",
            base_url,
            temperature,
            max_tokens,
            json_mode,
        )

    async def complete(
        self,
        messages: List[ChatMessage],
        model: str,
        timeout: float,
    ) -> ModelResponse:
        request = {
            "model": model,
            "messages": messages,
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
            "timeout": timeout,
        }
        if self.json_mode:
            request["response_format"] = {"type": "json_object"}

        response = await self._client.chat.completions.create(**request)

        content = ""
        if response.choices:
            content = response.choices[0].message.content or ""

        usage = response.usage
        return ModelResponse(
            text=content,
            prompt_tokens=usage.prompt_tokens if usage else 0,
            completion_tokens=usage.completion_tokens if usage else 0,
        )
