# src/tracking/cost_calculator.py — v1
"""Cost estimation from token usage, and per-job aggregation."""

from __future__ import annotations

from collections import defaultdict

from toolfactory.tracking.models import CostEntry, JobCostSummary, ModelPricing

# Default pricing per 1M tokens
DEFAULT_PRICING: dict[str, ModelPricing] = {
    "claude-sonnet-4-20250514": ModelPricing(
        model="claude-sonnet-4-20250514",
        input_price_per_1m=3.0, output_price_per_1m=15.0,
    ),
    "claude-3-5-haiku-20241022": ModelPricing(
        model="claude-3-5-haiku-20241022",
        input_price_per_1m=0.80, output_price_per_1m=4.0,
    ),
    "gemini-2.0-flash": ModelPricing(
        model="gemini-2.0-flash",
        input_price_per_1m=0.10, output_price_per_1m=0.40,
    ),
}

# Unknown models are priced like this one.
FALLBACK_PRICING_MODEL = "gemini-2.0-flash"


def compute_cost(
    model: str,
    input_tokens: int,
    output_tokens: int,
    pricing: dict[str, ModelPricing] | None = None,
) -> float:
    """Estimated USD cost of one call."""
    pricing = pricing or DEFAULT_PRICING
    p = pricing.get(model) or DEFAULT_PRICING[FALLBACK_PRICING_MODEL]
    return (input_tokens * p.input_price_per_1m / 1_000_000
            + output_tokens * p.output_price_per_1m / 1_000_000)


def summarize_job_costs(job_id: str, entries: list[CostEntry]) -> JobCostSummary:
    """Aggregate a job's cost entries by stage and provider."""
    by_stage: dict[str, float] = defaultdict(float)
    by_provider: dict[str, float] = defaultdict(float)
    for e in entries:
        by_stage[e.stage] += e.cost_usd
        by_provider[e.provider] += e.cost_usd

    return JobCostSummary(
        job_id=job_id,
        total_calls=len(entries),
        fallback_calls=sum(1 for e in entries if e.used_fallback),
        total_input_tokens=sum(e.input_tokens for e in entries),
        total_output_tokens=sum(e.output_tokens for e in entries),
        total_cost_usd=sum(e.cost_usd for e in entries),
        by_stage=dict(by_stage),
        by_provider=dict(by_provider),
    )
