# src/pipeline/state.py — v1
"""Mutable pipeline state flowing through all stages of one run.

Accumulates results from each stage: prepared content, extraction,
design, builder context, artifact, validation results and timings.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from pydantic import BaseModel, Field

from toolfactory.core.models import BuilderContext, CourseAnalysis, ToolDesign
from toolfactory.pipeline.plugin_kit.models import AgentOutput
from toolfactory.validation.models import ValidationResult


class PipelineState(BaseModel):
    """State accumulating results across all pipeline stages.

    Each stage reads from and writes to this state. The factory pipeline
    passes it from stage to stage in fixed order.
    """

    # === IDENTITY ===
    run_id: str = Field(default_factory=lambda: uuid.uuid4().hex[:12])
    job_id: str
    attempt: int = 0
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    # === INPUT ===
    source_content: str
    revision_notes: str | None = None
    qa_feedback: list[str] = Field(default_factory=list)
    prior_artifact: str | None = None
    user_request: str = ""

    # === CONTENT ANALYSIS ===
    prepared_content: str = ""
    content_summarized: bool = False
    content_truncated: bool = False

    # === KNOWLEDGE + DESIGN ===
    course_analysis: CourseAnalysis | None = None
    tool_design: ToolDesign | None = None
    builder_context: BuilderContext | None = None

    # === GENERATION ===
    artifact_html: str | None = None
    fix_feedback: list[str] = Field(default_factory=list)
    output_fix_attempts: int = 0

    # === VERDICTS ===
    validation_results: dict[str, ValidationResult] = Field(default_factory=dict)
    review: dict | None = None

    # === AGENT OUTPUTS (raw) ===
    agent_outputs: dict[str, AgentOutput] = Field(default_factory=dict)

    # === STATS ===
    stage_timings_ms: dict[str, int] = Field(default_factory=dict)
    total_llm_calls: int = 0
    total_tokens_used: int = 0
    fallback_calls: int = 0
    warnings: list[str] = Field(default_factory=list)

    def record_agent_output(self, agent_name: str, output: AgentOutput) -> None:
        """Record an agent's output and update running stats."""
        self.agent_outputs[agent_name] = output
        self.total_llm_calls += output.metadata.llm_calls
        self.total_tokens_used += output.metadata.tokens_used
        if output.metadata.used_fallback:
            self.fallback_calls += 1
        self.warnings.extend(output.warnings)

    def record_validation(self, result: ValidationResult) -> None:
        """Store a validation result under its stage tag (phase results merge into design)."""
        self.validation_results[result.stage] = result
