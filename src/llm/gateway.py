# src/llm/gateway.py — v1
"""AI provider gateway — one completion interface over two providers.

Responsibilities:
  - Route a call to the primary provider, or to the secondary directly
    when the primary is not configured.
  - Fall back sequentially to the secondary when the primary fails for
    any reason (never racing both).
  - Enforce per-stage token budgets before any network call.
  - Estimate and log the cost of every successful call.

The gateway is built once (see client_factory.create_gateway) and
injected wherever completions are needed.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

from toolfactory.llm.errors import AIServiceError, NoProviderAvailableError
from toolfactory.llm.models import CompletionRequest, CompletionResponse, FallbackResponse
from toolfactory.llm.retry import LLMRetryExhausted, RetryConfig, with_retry
from toolfactory.llm.token_budget import (
    StageTokenLimits,
    check_request_budget,
    resolve_max_tokens,
)
from toolfactory.tracking.cost_calculator import compute_cost

if TYPE_CHECKING:
    from toolfactory.llm.base_client import BaseLLMClient
    from toolfactory.tracking.cost_tracker import CostTracker
    from toolfactory.tracking.models import ModelPricing

logger = logging.getLogger(__name__)


class AIGateway:
    """Completion gateway with fallback, budgets and cost accounting.

    Args:
        primary: Preferred provider client.
        secondary: Fallback provider client.
        stage_limits: Per-stage token limits (defaults to DEFAULT_STAGE_LIMITS).
        pricing: Per-model price table (defaults to DEFAULT_PRICING).
        cost_tracker: Optional sink for per-call cost entries.
        retry_configs: Per-provider retry policy ({} disables retries).
    """

    def __init__(
        self,
        primary: BaseLLMClient | None,
        secondary: BaseLLMClient | None = None,
        stage_limits: dict[str, StageTokenLimits] | None = None,
        pricing: dict[str, ModelPricing] | None = None,
        cost_tracker: CostTracker | None = None,
        retry_configs: dict[str, RetryConfig] | None = None,
    ) -> None:
        self._primary = primary
        self._secondary = secondary
        self._stage_limits = stage_limits
        self._pricing = pricing
        self._cost_tracker = cost_tracker
        self._retry_configs = retry_configs

    # --- Introspection ---

    @property
    def providers(self) -> list[BaseLLMClient]:
        """Configured provider clients in priority order."""
        return [p for p in (self._primary, self._secondary) if p is not None]

    def available_providers(self) -> list[BaseLLMClient]:
        return [p for p in self.providers if p.is_available()]

    def is_configured(self) -> bool:
        """Whether at least one provider can take calls."""
        return bool(self.available_providers())

    @property
    def primary_provider(self) -> str | None:
        """Name of the provider that will be tried first, if any."""
        available = self.available_providers()
        return available[0].provider_name if available else None

    def ensure_configured(self) -> None:
        """Pre-flight check for pipeline entry points.

        Raises:
            NoProviderAvailableError: If no provider is available.
        """
        if not self.is_configured():
            raise NoProviderAvailableError()

    # --- Completions ---

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        max_tokens: int | None = None,
        provider_hint: str | None = None,
    ) -> CompletionResponse:
        """Single-provider completion, no fallback and no stage budget.

        Args:
            system_prompt: System instruction.
            user_prompt: User message.
            max_tokens: Output allowance (provider default if None).
            provider_hint: Preferred provider name; ignored if unavailable.

        Raises:
            NoProviderAvailableError: If no provider is available.
            AIServiceError: If the provider call fails.
        """
        available = self.available_providers()
        if not available:
            raise NoProviderAvailableError()

        client = next(
            (p for p in available if p.provider_name == provider_hint), available[0]
        )
        request = CompletionRequest(
            system_prompt=system_prompt, user_prompt=user_prompt, max_tokens=max_tokens,
        )
        return await self._call(client, request, operation=client.provider_name)

    async def complete_with_fallback(
        self,
        request: CompletionRequest,
        stage: str,
        job_id: str | None = None,
    ) -> FallbackResponse:
        """Stage completion with budget check, fallback and cost accounting.

        Args:
            request: Prompts and generation options.
            stage: Stage name, keys the token budget table.
            job_id: Job the call is made for (cost attribution).

        Returns:
            FallbackResponse; `used_fallback` and `original_provider` are set
            when the secondary provider answered after a primary failure.

        Raises:
            NoProviderAvailableError: If neither provider is available.
            TokenLimitExceededError: If the input exceeds the stage budget.
            AIServiceError: If every attempted provider failed.
        """
        primary = self._primary if self._primary and self._primary.is_available() else None
        secondary = (
            self._secondary if self._secondary and self._secondary.is_available() else None
        )
        if primary is None and secondary is None:
            raise NoProviderAvailableError()

        limits = check_request_budget(request, stage, self._stage_limits)
        sized = request.model_copy(
            update={"max_tokens": resolve_max_tokens(request.max_tokens, limits)}
        )

        used_fallback = False
        original_provider: str | None = None

        if primary is not None:
            try:
                response = await self._call(primary, sized, operation=f"{stage}:{primary.provider_name}")
            except AIServiceError as exc:
                if secondary is None:
                    raise
                logger.warning(
                    "Stage '%s': %s failed (%s), falling back to %s",
                    stage, primary.provider_name, exc, secondary.provider_name,
                )
                used_fallback = True
                original_provider = primary.provider_name
                response = await self._call(
                    secondary, sized, operation=f"{stage}:{secondary.provider_name}"
                )
        else:
            # Primary not configured: go straight to the secondary.
            response = await self._call(
                secondary, sized, operation=f"{stage}:{secondary.provider_name}"
            )

        self._account(stage, response, job_id, used_fallback)

        return FallbackResponse(
            **response.model_dump(),
            raw_response=response.raw_response,
            stage=stage,
            used_fallback=used_fallback,
            original_provider=original_provider,
        )

    # --- Internal helpers ---

    async def _call(
        self,
        client: BaseLLMClient,
        request: CompletionRequest,
        operation: str,
    ) -> CompletionResponse:
        """Call one provider with retries, mapping failures to AIServiceError."""
        start = time.monotonic()
        try:
            response = await with_retry(
                client.complete,
                request,
                operation=operation,
                retry_configs=self._retry_configs,
            )
        except LLMRetryExhausted as exc:
            code = "TIMEOUT" if exc.error_type == "timeout" else "API_ERROR"
            raise AIServiceError(
                f"{client.provider_name} call failed: {exc.last_error}",
                code=code,
                provider=client.provider_name,
            ) from exc

        if not response.duration_ms:
            response.duration_ms = int((time.monotonic() - start) * 1000)
        return response

    def _account(
        self,
        stage: str,
        response: CompletionResponse,
        job_id: str | None,
        used_fallback: bool,
    ) -> None:
        usage = response.token_usage
        cost = compute_cost(
            response.model, usage.input_tokens, usage.output_tokens, self._pricing
        )
        logger.info(
            "AI call cost: stage=%s provider=%s model=%s in=%d out=%d cost=$%.6f fallback=%s",
            stage, response.provider, response.model,
            usage.input_tokens, usage.output_tokens, cost, used_fallback,
        )
        if self._cost_tracker is not None:
            self._cost_tracker.record(
                stage, response, cost, job_id=job_id, used_fallback=used_fallback
            )
