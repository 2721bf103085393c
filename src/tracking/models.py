# src/tracking/models.py — v1
"""Cost tracking models: ModelPricing, CostEntry, JobCostSummary."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class ModelPricing(BaseModel):
    """LLM model pricing per 1M tokens (USD)."""

    model: str
    input_price_per_1m: float
    output_price_per_1m: float


class CostEntry(BaseModel):
    """One AI call attributed to a job and stage."""

    entry_id: str
    timestamp: datetime
    job_id: str | None = None
    stage: str
    provider: str
    model: str
    input_tokens: int
    output_tokens: int
    total_tokens: int
    duration_ms: int
    cost_usd: float
    used_fallback: bool = False


class JobCostSummary(BaseModel):
    """Aggregated cost of every AI call made for one job."""

    job_id: str
    total_calls: int = 0
    fallback_calls: int = 0
    total_input_tokens: int = 0
    total_output_tokens: int = 0
    total_cost_usd: float = 0.0
    by_stage: dict[str, float] = Field(default_factory=dict)
    by_provider: dict[str, float] = Field(default_factory=dict)
