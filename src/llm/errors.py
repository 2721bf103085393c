# src/llm/errors.py — v1
"""AI gateway error taxonomy."""

from __future__ import annotations

from typing import Literal

AIErrorCode = Literal[
    "PROVIDER_UNAVAILABLE",
    "API_ERROR",
    "TIMEOUT",
    "TOKEN_LIMIT_EXCEEDED",
]


class AIServiceError(Exception):
    """Failure of an AI call after local recovery was attempted."""

    def __init__(
        self,
        message: str,
        code: AIErrorCode,
        provider: str | None = None,
    ) -> None:
        self.code = code
        self.provider = provider
        super().__init__(message)


class NoProviderAvailableError(AIServiceError):
    """No AI provider is configured. Checked before any job is advanced."""

    def __init__(self, message: str = "No AI providers available") -> None:
        super().__init__(message, code="PROVIDER_UNAVAILABLE")


class TokenLimitExceededError(AIServiceError):
    """Request input exceeds the per-stage budget; raised before any network call."""

    def __init__(self, stage: str, estimated_tokens: int, max_input_tokens: int) -> None:
        self.stage = stage
        self.estimated_tokens = estimated_tokens
        self.max_input_tokens = max_input_tokens
        super().__init__(
            f"Input too large for stage '{stage}': ~{estimated_tokens} tokens "
            f"(limit {max_input_tokens})",
            code="TOKEN_LIMIT_EXCEEDED",
        )
