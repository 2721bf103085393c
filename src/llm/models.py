# src/llm/models.py — v1
"""LLM-specific types: CompletionRequest, CompletionResponse, FallbackResponse."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class TokenUsage(BaseModel):
    input_tokens: int = 0
    output_tokens: int = 0

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens


class CompletionRequest(BaseModel):
    """Provider-independent completion request."""

    system_prompt: str
    user_prompt: str
    max_tokens: int | None = None
    temperature: float = 0.2
    use_light_model: bool = False


class CompletionResponse(BaseModel):
    """Normalized response from any provider."""

    content: str
    provider: str
    model: str
    token_usage: TokenUsage = Field(default_factory=TokenUsage)
    duration_ms: int = 0
    raw_response: Any = Field(default=None, exclude=True)


class FallbackResponse(CompletionResponse):
    """Response of a stage call routed through the fallback logic."""

    stage: str
    used_fallback: bool = False
    original_provider: str | None = None
