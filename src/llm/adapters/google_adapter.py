# src/llm/adapters/google_adapter.py — v1
"""Google Gemini adapter implementing BaseLLMClient.

Uses google-generativeai SDK.
"""

from __future__ import annotations

import time
from typing import Any

from toolfactory.llm.base_client import BaseLLMClient
from toolfactory.llm.models import CompletionRequest, CompletionResponse, TokenUsage


class GoogleAdapter(BaseLLMClient):
    """Google Gemini adapter."""

    def __init__(
        self,
        model: str = "gemini-2.0-flash",
        api_key: str = "",
        timeout_s: float = 120.0,
        max_tokens_default: int = 4096,
        **kwargs: Any,
    ):
        self._model = model
        self._api_key = api_key
        self._timeout_s = timeout_s
        self._max_tokens_default = max_tokens_default

    def is_available(self) -> bool:
        return bool(self._api_key)

    @property
    def provider_name(self) -> str:
        return "google"

    @property
    def model_name(self) -> str:
        return self._model

    async def complete(self, request: CompletionRequest) -> CompletionResponse:
        import google.generativeai as genai

        genai.configure(api_key=self._api_key)
        model = genai.GenerativeModel(
            self._model,
            system_instruction=request.system_prompt or None,
        )

        gen_config: dict[str, Any] = {
            "max_output_tokens": request.max_tokens or self._max_tokens_default,
            "temperature": request.temperature,
        }

        t0 = time.monotonic()
        resp = await model.generate_content_async(
            request.user_prompt,
            generation_config=gen_config,
            request_options={"timeout": self._timeout_s},
        )
        duration = int((time.monotonic() - t0) * 1000)

        usage = getattr(resp, "usage_metadata", None)
        return CompletionResponse(
            content=resp.text or "",
            provider="google",
            model=self._model,
            token_usage=TokenUsage(
                input_tokens=getattr(usage, "prompt_token_count", 0) if usage else 0,
                output_tokens=getattr(usage, "candidates_token_count", 0) if usage else 0,
            ),
            duration_ms=duration,
            raw_response=resp,
        )
