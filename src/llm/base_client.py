# src/llm/base_client.py — v1
"""Abstract LLM client interface: one per completion provider."""

from __future__ import annotations

from abc import ABC, abstractmethod

from toolfactory.llm.models import CompletionRequest, CompletionResponse


class BaseLLMClient(ABC):
    """Unified interface for all completion providers."""

    @abstractmethod
    async def complete(self, request: CompletionRequest) -> CompletionResponse:
        """Text completion. Raises on any provider failure."""

    @abstractmethod
    def is_available(self) -> bool:
        """Whether the provider is configured (credentials present)."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Provider identifier (anthropic, google)."""

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Default model used for completions."""
