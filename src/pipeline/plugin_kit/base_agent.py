# src/pipeline/plugin_kit/base_agent.py — v1
"""Standard agent interface for AI-backed pipeline stages."""

from __future__ import annotations

import hashlib
import time
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from toolfactory.llm.models import CompletionRequest, FallbackResponse
from toolfactory.pipeline.plugin_kit.models import AgentMetadata, AgentOutput

if TYPE_CHECKING:
    from toolfactory.llm.gateway import AIGateway
    from toolfactory.pipeline.state import PipelineState


class BaseAgent(ABC):
    """Standard interface for all pipeline agents."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique agent identifier, also the token-budget stage key."""

    @property
    @abstractmethod
    def version(self) -> str:
        """Agent version (semver)."""

    @property
    @abstractmethod
    def description(self) -> str:
        """Human-readable description of what this agent does."""

    @abstractmethod
    async def execute(self, state: PipelineState, gateway: AIGateway) -> AgentOutput:
        """Execute the agent's logic.

        Args:
            state: Current pipeline state (read-only by convention; the
                pipeline applies the returned data).
            gateway: AI gateway used for completions.

        Returns:
            AgentOutput with data, confidence, and metadata.
        """

    async def _complete(
        self,
        gateway: AIGateway,
        state: PipelineState,
        system_prompt: str,
        user_prompt: str,
        use_light_model: bool = False,
        temperature: float = 0.2,
    ) -> tuple[FallbackResponse, str, int]:
        """Run one stage completion; returns (response, prompt_hash, elapsed_ms)."""
        start_ms = time.monotonic_ns() // 1_000_000
        prompt_hash = hashlib.sha256(
            (system_prompt + user_prompt).encode()
        ).hexdigest()[:16]
        response = await gateway.complete_with_fallback(
            CompletionRequest(
                system_prompt=system_prompt,
                user_prompt=user_prompt,
                temperature=temperature,
                use_light_model=use_light_model,
            ),
            stage=self.name,
            job_id=state.job_id,
        )
        elapsed_ms = (time.monotonic_ns() // 1_000_000) - start_ms
        return response, prompt_hash, elapsed_ms

    def _metadata(
        self,
        response: FallbackResponse | None,
        prompt_hash: str | None,
        elapsed_ms: int,
    ) -> AgentMetadata:
        return AgentMetadata(
            agent_name=self.name,
            agent_version=self.version,
            execution_time_ms=elapsed_ms,
            llm_calls=1 if response is not None else 0,
            tokens_used=response.token_usage.total_tokens if response else 0,
            prompt_hash=prompt_hash,
            provider=response.provider if response else None,
            used_fallback=response.used_fallback if response else False,
        )
