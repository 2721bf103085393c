# src/llm/adapters/anthropic_adapter.py — v1
"""Anthropic Claude adapter implementing BaseLLMClient.

Uses the official anthropic SDK. The client is created lazily so that an
unconfigured adapter never touches the SDK.
"""

from __future__ import annotations

import logging
import time
from typing import Any

from toolfactory.llm.base_client import BaseLLMClient
from toolfactory.llm.models import CompletionRequest, CompletionResponse, TokenUsage

logger = logging.getLogger(__name__)


class AnthropicAdapter(BaseLLMClient):
    """Adapter for Anthropic Claude models."""

    def __init__(
        self,
        model: str = "claude-sonnet-4-20250514",
        light_model: str = "claude-3-5-haiku-20241022",
        api_key: str | None = None,
        timeout_s: float = 120.0,
        max_tokens_default: int = 4096,
    ) -> None:
        self._api_key = api_key
        self._model = model
        self._light_model = light_model
        self._timeout_s = timeout_s
        self._max_tokens_default = max_tokens_default
        self.__client = None  # Lazy initialization

    @property
    def _client(self):
        """Lazy-init Anthropic client (only on first API call)."""
        if self.__client is None:
            import anthropic

            self.__client = anthropic.AsyncAnthropic(
                api_key=self._api_key or "",
                timeout=self._timeout_s,
            )
        return self.__client

    def is_available(self) -> bool:
        return bool(self._api_key)

    @property
    def provider_name(self) -> str:
        return "anthropic"

    @property
    def model_name(self) -> str:
        return self._model

    async def complete(self, request: CompletionRequest) -> CompletionResponse:
        """Text completion via Anthropic Messages API."""
        model = self._light_model if request.use_light_model else self._model
        kwargs: dict[str, Any] = {
            "model": model,
            "max_tokens": request.max_tokens or self._max_tokens_default,
            "temperature": request.temperature,
            "messages": [{"role": "user", "content": request.user_prompt}],
        }
        if request.system_prompt:
            kwargs["system"] = request.system_prompt

        start = time.monotonic()
        response = await self._client.messages.create(**kwargs)
        duration_ms = int((time.monotonic() - start) * 1000)

        return CompletionResponse(
            content=self._extract_text(response),
            provider="anthropic",
            model=getattr(response, "model", None) or model,
            token_usage=TokenUsage(
                input_tokens=response.usage.input_tokens,
                output_tokens=response.usage.output_tokens,
            ),
            duration_ms=duration_ms,
            raw_response=response,
        )

    @staticmethod
    def _extract_text(response: Any) -> str:
        """Concatenate text blocks of an Anthropic response."""
        return "".join(
            block.text
            for block in response.content
            if getattr(block, "type", None) == "text"
        )
