# tests/unit/tracking/test_unit_cost_tracker.py — v1
"""Tests for tracking/cost_tracker.py."""

from __future__ import annotations

import json

import pytest

from toolfactory.llm.models import CompletionResponse, TokenUsage
from toolfactory.tracking.cost_tracker import CostTracker


def _response(provider: str = "anthropic") -> CompletionResponse:
    return CompletionResponse(
        content="x",
        provider=provider,
        model="claude-sonnet-4-20250514",
        token_usage=TokenUsage(input_tokens=40, output_tokens=10),
        duration_ms=12,
    )


class TestCostTracker:
    def test_record(self):
        tracker = CostTracker()
        entry = tracker.record("courseAnalyst", _response(), 0.01, job_id="j1")
        assert entry.total_tokens == 50
        assert entry.duration_ms == 12
        assert tracker.entries == [entry]

    def test_per_job(self):
        tracker = CostTracker()
        tracker.record("courseAnalyst", _response(), 0.01, job_id="j1")
        tracker.record("toolBuilder", _response("google"), 0.02, job_id="j1", used_fallback=True)
        tracker.record("courseAnalyst", _response(), 0.03, job_id="j2")

        assert len(tracker.entries_for("j1")) == 2
        summary = tracker.summary("j1")
        assert summary.total_calls == 2
        assert summary.fallback_calls == 1
        assert summary.total_cost_usd == pytest.approx(0.03)
        assert tracker.total_cost_usd == pytest.approx(0.06)

    def test_entries_is_a_copy(self):
        tracker = CostTracker()
        tracker.record("s", _response(), 0.0)
        tracker.entries.clear()
        assert len(tracker.entries) == 1

    def test_save_jsonl(self, tmp_path):
        tracker = CostTracker()
        tracker.record("s1", _response(), 0.1, job_id="j1")
        tracker.record("s2", _response(), 0.2, job_id="j1")
        path = tmp_path / "costs" / "calls.jsonl"
        tracker.save(path)
        lines = path.read_text().splitlines()
        assert len(lines) == 2
        assert json.loads(lines[1])["stage"] == "s2"
