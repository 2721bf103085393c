# tests/unit/llm/test_unit_token_budget.py — v1
"""Tests for llm/token_budget.py."""

from __future__ import annotations

import pytest

from toolfactory.llm.errors import TokenLimitExceededError
from toolfactory.llm.models import CompletionRequest
from toolfactory.llm.token_budget import (
    DEFAULT_LIMITS,
    DEFAULT_STAGE_LIMITS,
    StageTokenLimits,
    check_request_budget,
    estimate_tokens,
    get_stage_limits,
    resolve_max_tokens,
)


class TestEstimateTokens:
    def test_rounds_up(self):
        assert estimate_tokens("") == 0
        assert estimate_tokens("abcd") == 1
        assert estimate_tokens("abcde") == 2


class TestStageLimits:
    def test_known_stage(self):
        assert get_stage_limits("toolBuilder") is DEFAULT_STAGE_LIMITS["toolBuilder"]

    def test_unknown_stage_gets_default(self):
        assert get_stage_limits("somethingElse") is DEFAULT_LIMITS

    def test_custom_table(self):
        table = {"a": StageTokenLimits(max_input_tokens=1, max_output_tokens=1)}
        assert get_stage_limits("a", table).max_input_tokens == 1
        assert get_stage_limits("toolBuilder", table) is DEFAULT_LIMITS


class TestCheckRequestBudget:
    def test_within_budget(self):
        request = CompletionRequest(system_prompt="s", user_prompt="u")
        assert check_request_budget(request, "courseAnalyst").max_input_tokens == 12_000

    def test_system_prompt_counts(self):
        limits = {"s": StageTokenLimits(max_input_tokens=2, max_output_tokens=10)}
        request = CompletionRequest(system_prompt="x" * 8, user_prompt="y")
        with pytest.raises(TokenLimitExceededError) as exc_info:
            check_request_budget(request, "s", limits)
        assert exc_info.value.estimated_tokens == 3
        assert exc_info.value.stage == "s"


class TestResolveMaxTokens:
    def test_default_and_clamp(self):
        limits = StageTokenLimits(max_input_tokens=10, max_output_tokens=500)
        assert resolve_max_tokens(None, limits) == 500
        assert resolve_max_tokens(200, limits) == 200
        assert resolve_max_tokens(900, limits) == 500
