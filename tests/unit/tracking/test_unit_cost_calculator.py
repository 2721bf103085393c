# tests/unit/tracking/test_unit_cost_calculator.py — v1
"""Tests for tracking/cost_calculator.py."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from toolfactory.tracking.cost_calculator import compute_cost, summarize_job_costs
from toolfactory.tracking.models import CostEntry, ModelPricing


def _entry(stage: str, provider: str, cost: float, fallback: bool = False) -> CostEntry:
    return CostEntry(
        entry_id=f"{stage}-{provider}",
        timestamp=datetime.now(timezone.utc),
        job_id="job-1",
        stage=stage,
        provider=provider,
        model="m",
        input_tokens=100,
        output_tokens=10,
        total_tokens=110,
        duration_ms=1,
        cost_usd=cost,
        used_fallback=fallback,
    )


class TestComputeCost:
    def test_known_model(self):
        assert compute_cost("claude-sonnet-4-20250514", 1_000_000, 1_000_000) == pytest.approx(18.0)

    def test_unknown_model_priced_as_flash(self):
        assert compute_cost("mystery-model", 1_000_000, 0) == pytest.approx(0.10)

    def test_custom_table(self):
        pricing = {"m": ModelPricing(model="m", input_price_per_1m=1.0, output_price_per_1m=2.0)}
        assert compute_cost("m", 500_000, 500_000, pricing) == pytest.approx(1.5)

    def test_zero_tokens(self):
        assert compute_cost("gemini-2.0-flash", 0, 0) == 0.0


class TestSummarizeJobCosts:
    def test_aggregates(self):
        summary = summarize_job_costs("job-1", [
            _entry("courseAnalyst", "anthropic", 0.01),
            _entry("toolBuilder", "anthropic", 0.05),
            _entry("toolBuilder", "google", 0.002, fallback=True),
        ])
        assert summary.total_calls == 3
        assert summary.fallback_calls == 1
        assert summary.total_input_tokens == 300
        assert summary.total_output_tokens == 30
        assert summary.total_cost_usd == pytest.approx(0.062)
        assert summary.by_stage["toolBuilder"] == pytest.approx(0.052)
        assert summary.by_provider == pytest.approx({"anthropic": 0.06, "google": 0.002})

    def test_empty(self):
        summary = summarize_job_costs("job-x", [])
        assert summary.total_calls == 0
        assert summary.by_stage == {}
