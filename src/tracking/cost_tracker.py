# src/tracking/cost_tracker.py — v1
"""AI call cost tracking — records every gateway call per job.

Costs are operator-facing only: they are logged and kept here, never
attached to anything shown to end users.
"""

from __future__ import annotations

import json
import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path

from toolfactory.llm.models import CompletionResponse
from toolfactory.tracking.cost_calculator import summarize_job_costs
from toolfactory.tracking.models import CostEntry, JobCostSummary

logger = logging.getLogger(__name__)


class CostTracker:
    """Accumulates cost entries across pipeline runs."""

    def __init__(self) -> None:
        self._entries: list[CostEntry] = []

    def record(
        self,
        stage: str,
        response: CompletionResponse,
        cost_usd: float,
        job_id: str | None = None,
        used_fallback: bool = False,
    ) -> CostEntry:
        """Record one AI call.

        Args:
            stage: Pipeline stage name (e.g. "courseAnalyst").
            response: Provider response with token usage.
            cost_usd: Estimated cost from the price table.
            job_id: Job the call was made for, if any.
            used_fallback: Whether the secondary provider answered.

        Returns:
            The recorded CostEntry.
        """
        entry = CostEntry(
            entry_id=str(uuid.uuid4()),
            timestamp=datetime.now(timezone.utc),
            job_id=job_id,
            stage=stage,
            provider=response.provider,
            model=response.model,
            input_tokens=response.token_usage.input_tokens,
            output_tokens=response.token_usage.output_tokens,
            total_tokens=response.token_usage.total_tokens,
            duration_ms=response.duration_ms,
            cost_usd=cost_usd,
            used_fallback=used_fallback,
        )
        self._entries.append(entry)
        return entry

    @property
    def entries(self) -> list[CostEntry]:
        """All recorded calls."""
        return list(self._entries)

    def entries_for(self, job_id: str) -> list[CostEntry]:
        return [e for e in self._entries if e.job_id == job_id]

    def summary(self, job_id: str) -> JobCostSummary:
        """Cost breakdown for one job."""
        return summarize_job_costs(job_id, self.entries_for(job_id))

    @property
    def total_cost_usd(self) -> float:
        return sum(e.cost_usd for e in self._entries)

    def save(self, path: Path) -> None:
        """Save all entries to a JSON Lines file."""
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w") as f:
            for entry in self._entries:
                f.write(json.dumps(entry.model_dump(), default=str) + "\n")
