# src/llm/token_budget.py — v1
"""Per-stage token budgets and input size estimation.

Estimation is deliberately coarse (characters / 4) and happens before
any network call.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from toolfactory.llm.errors import TokenLimitExceededError
from toolfactory.llm.models import CompletionRequest

logger = logging.getLogger(__name__)

CHARS_PER_TOKEN = 4


@dataclass(frozen=True)
class StageTokenLimits:
    """Input ceiling and output allowance for one pipeline stage."""

    max_input_tokens: int
    max_output_tokens: int


DEFAULT_STAGE_LIMITS: dict[str, StageTokenLimits] = {
    "contentSummarizer": StageTokenLimits(max_input_tokens=20_000, max_output_tokens=4_096),
    "courseAnalyst": StageTokenLimits(max_input_tokens=12_000, max_output_tokens=4_096),
    "knowledgeArchitect": StageTokenLimits(max_input_tokens=12_000, max_output_tokens=4_096),
    "toolBuilder": StageTokenLimits(max_input_tokens=16_000, max_output_tokens=16_000),
    "feedbackApplier": StageTokenLimits(max_input_tokens=24_000, max_output_tokens=16_000),
    "qaReviewer": StageTokenLimits(max_input_tokens=24_000, max_output_tokens=2_048),
}

DEFAULT_LIMITS = StageTokenLimits(max_input_tokens=16_000, max_output_tokens=4_096)


def estimate_tokens(text: str) -> int:
    """Rough token estimate: ceil(len(text) / 4)."""
    return math.ceil(len(text) / CHARS_PER_TOKEN)


def get_stage_limits(
    stage: str,
    limits: dict[str, StageTokenLimits] | None = None,
) -> StageTokenLimits:
    """Limits for `stage`, falling back to DEFAULT_LIMITS for unknown stages."""
    table = DEFAULT_STAGE_LIMITS if limits is None else limits
    return table.get(stage, DEFAULT_LIMITS)


def check_request_budget(
    request: CompletionRequest,
    stage: str,
    limits: dict[str, StageTokenLimits] | None = None,
) -> StageTokenLimits:
    """Reject oversized requests before any network call.

    Returns:
        The stage limits that apply.

    Raises:
        TokenLimitExceededError: If the estimated input exceeds the stage budget.
    """
    stage_limits = get_stage_limits(stage, limits)
    estimated = estimate_tokens(request.system_prompt + request.user_prompt)
    if estimated > stage_limits.max_input_tokens:
        logger.warning(
            "Stage '%s' input ~%d tokens exceeds budget %d",
            stage, estimated, stage_limits.max_input_tokens,
        )
        raise TokenLimitExceededError(stage, estimated, stage_limits.max_input_tokens)
    return stage_limits


def resolve_max_tokens(requested: int | None, stage_limits: StageTokenLimits) -> int:
    """Requested output allowance, clamped to the stage maximum."""
    return min(requested or stage_limits.max_output_tokens, stage_limits.max_output_tokens)
