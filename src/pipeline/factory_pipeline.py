# src/pipeline/factory_pipeline.py — v1
"""Factory pipeline — course content in, validated HTML tool out.

Stages run in fixed order:
  content_analysis → extraction → extraction_validation → design →
  design_validation → context_build → generation → output_validation →
  quality_gate

Each stage advances or halts the run. A validation stage with any
error-level issue halts; warnings are recorded and the run continues.
Provider errors that survive the gateway's fallback halt the run with
their message preserved verbatim. Every run, halted or not, ends with a
QAReport.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from toolfactory.config.settings import Settings
from toolfactory.core.models import CourseAnalysis, QAReport, ToolDesign
from toolfactory.llm.errors import AIServiceError
from toolfactory.logging.context import set_job_context, set_stage_context
from toolfactory.pipeline.agents.content_summarizer import (
    ContentSummarizerAgent,
    truncate_content,
)
from toolfactory.pipeline.agents.course_analyst import CourseAnalystAgent
from toolfactory.pipeline.agents.feedback_applier import FeedbackApplierAgent
from toolfactory.pipeline.agents.knowledge_architect import KnowledgeArchitectAgent
from toolfactory.pipeline.agents.qa_reviewer import QAReviewerAgent
from toolfactory.pipeline.agents.tool_builder import ToolBuilderAgent
from toolfactory.pipeline.context_builder import build_builder_context
from toolfactory.pipeline.quality_gate import build_qa_report
from toolfactory.pipeline.revision import build_user_request
from toolfactory.pipeline.state import PipelineState
from toolfactory.validation.design import validate_design_alignment
from toolfactory.validation.extraction import validate_extraction
from toolfactory.validation.models import ValidationIssue, ValidationResult
from toolfactory.validation.output import validate_tool_output
from toolfactory.validation.report import format_validation_result

if TYPE_CHECKING:
    from toolfactory.llm.gateway import AIGateway
    from toolfactory.pipeline.plugin_kit.base_agent import BaseAgent
    from toolfactory.pipeline.plugin_kit.models import AgentOutput
    from toolfactory.validation.matching import LabelMatcher

logger = logging.getLogger(__name__)


class PipelineStage(str, Enum):
    CONTENT_ANALYSIS = "content_analysis"
    EXTRACTION = "extraction"
    EXTRACTION_VALIDATION = "extraction_validation"
    DESIGN = "design"
    DESIGN_VALIDATION = "design_validation"
    CONTEXT_BUILD = "context_build"
    GENERATION = "generation"
    OUTPUT_VALIDATION = "output_validation"
    QUALITY_GATE = "quality_gate"


@dataclass
class FactoryResult:
    """Outcome of one pipeline run."""

    success: bool
    artifact_html: str | None
    qa_report: QAReport
    state: PipelineState
    halted_stage: PipelineStage | None = None
    error: str | None = None
    duration_ms: int = 0


class FactoryPipeline:
    """Runs the factory stages for one job.

    Args:
        gateway: AI gateway used by every AI-backed stage.
        settings: Thresholds and toggles (defaults to Settings()).
        matcher: Label matching strategy for design and output validation.
        agents: Override agents by name (contentSummarizer, courseAnalyst,
            knowledgeArchitect, toolBuilder, feedbackApplier, qaReviewer).
    """

    def __init__(
        self,
        gateway: AIGateway,
        settings: Settings | None = None,
        matcher: LabelMatcher | None = None,
        agents: dict[str, BaseAgent] | None = None,
    ) -> None:
        self._gateway = gateway
        self._settings = settings or Settings()
        self._matcher = matcher
        self._agents: dict[str, BaseAgent] = {
            "contentSummarizer": ContentSummarizerAgent(),
            "courseAnalyst": CourseAnalystAgent(),
            "knowledgeArchitect": KnowledgeArchitectAgent(
                source_excerpt_chars=self._settings.design_source_excerpt_chars,
            ),
            "toolBuilder": ToolBuilderAgent(),
            "feedbackApplier": FeedbackApplierAgent(),
            "qaReviewer": QAReviewerAgent(),
        }
        self._agents.update(agents or {})
        self._handlers = {
            PipelineStage.CONTENT_ANALYSIS: self._content_analysis,
            PipelineStage.EXTRACTION: self._extraction,
            PipelineStage.EXTRACTION_VALIDATION: self._extraction_validation,
            PipelineStage.DESIGN: self._design,
            PipelineStage.DESIGN_VALIDATION: self._design_validation,
            PipelineStage.CONTEXT_BUILD: self._context_build,
            PipelineStage.GENERATION: self._generation,
            PipelineStage.OUTPUT_VALIDATION: self._output_validation,
            PipelineStage.QUALITY_GATE: self._quality_gate,
        }

    async def run(
        self,
        job_id: str,
        source_content: str,
        revision_notes: str | None = None,
        prior_artifact: str | None = None,
        attempt: int = 0,
        qa_feedback: list[str] | None = None,
    ) -> FactoryResult:
        """Run all stages for one job.

        Args:
            job_id: Job being processed (logging and cost attribution).
            source_content: Course content submitted with the job.
            revision_notes: Human notes for this run, highest authority.
            prior_artifact: Previous HTML, passed as reference on revisions.
            attempt: Revision or retry number (0 for the first run).
            qa_feedback: Blocking findings of the previous run, fed back to
                the builder on retries.

        Returns:
            FactoryResult. Provider failures are captured, never raised.
        """
        state = PipelineState(
            job_id=job_id,
            attempt=attempt,
            source_content=source_content,
            revision_notes=revision_notes,
            prior_artifact=prior_artifact,
            qa_feedback=list(qa_feedback or []),
        )
        set_job_context(job_id, state.run_id)
        start = time.monotonic()
        halted: PipelineStage | None = None
        error: str | None = None

        logger.info(
            "Pipeline start: job=%s run=%s attempt=%d chars=%d revision=%s",
            job_id, state.run_id, attempt, len(source_content), bool(revision_notes),
        )

        try:
            for stage in PipelineStage:
                set_stage_context(stage.value)
                stage_start = time.monotonic()
                try:
                    advance = await self._handlers[stage](state)
                except AIServiceError as exc:
                    logger.error("Stage %s failed: %s", stage.value, exc)
                    halted, error = stage, str(exc)
                    break
                finally:
                    state.stage_timings_ms[stage.value] = int(
                        (time.monotonic() - stage_start) * 1000
                    )
                if not advance:
                    halted = stage
                    logger.warning("Pipeline halted at %s", stage.value)
                    break
        finally:
            set_stage_context(None)

        report = build_qa_report(
            state,
            halted_stage=halted.value if halted else None,
            error=error,
            min_review_score=self._settings.qa_min_review_score,
        )
        duration_ms = int((time.monotonic() - start) * 1000)
        logger.info(
            "Pipeline complete: job=%s passed=%s score=%d/%d llm_calls=%d "
            "tokens=%d fallbacks=%d duration=%dms",
            job_id, report.passed, report.score, report.max_score,
            state.total_llm_calls, state.total_tokens_used, state.fallback_calls,
            duration_ms,
        )
        return FactoryResult(
            success=report.passed,
            artifact_html=state.artifact_html,
            qa_report=report,
            state=state,
            halted_stage=halted,
            error=error,
            duration_ms=duration_ms,
        )

    # === STAGES ===

    async def _content_analysis(self, state: PipelineState) -> bool:
        content, truncated = truncate_content(
            state.source_content, self._settings.content_max_chars,
        )
        state.prepared_content = content
        state.content_truncated = truncated
        if truncated:
            logger.info(
                "Content truncated: %d → %d chars", len(state.source_content), len(content),
            )

        if len(content) > self._settings.content_summarize_threshold_chars:
            output = await self._run_agent("contentSummarizer", state)
            state.prepared_content = output.data["summary"]
            state.content_summarized = not output.parse_failed
            logger.info(
                "Content summarized: %d → %d chars",
                len(content), len(state.prepared_content),
            )

        state.user_request = build_user_request(
            state.prepared_content,
            revision_notes=state.revision_notes,
            prior_artifact=state.prior_artifact,
            prior_chars=self._settings.revision_prior_artifact_chars,
            qa_feedback=state.qa_feedback,
        )
        return True

    async def _extraction(self, state: PipelineState) -> bool:
        output = await self._run_agent("courseAnalyst", state)
        state.course_analysis = CourseAnalysis.model_validate(output.data["course_analysis"])
        return True

    async def _extraction_validation(self, state: PipelineState) -> bool:
        result = validate_extraction(state.course_analysis or CourseAnalysis())
        return self._record(state, _with_parse_failure(result, state, "courseAnalyst"))

    async def _design(self, state: PipelineState) -> bool:
        output = await self._run_agent("knowledgeArchitect", state)
        state.tool_design = ToolDesign.model_validate(output.data["tool_design"])
        return True

    async def _design_validation(self, state: PipelineState) -> bool:
        result = validate_design_alignment(
            state.course_analysis or CourseAnalysis(),
            state.tool_design or ToolDesign(),
            matcher=self._matcher,
        )
        return self._record(state, _with_parse_failure(result, state, "knowledgeArchitect"))

    async def _context_build(self, state: PipelineState) -> bool:
        state.builder_context = build_builder_context(
            state.course_analysis or CourseAnalysis(),
            state.tool_design or ToolDesign(),
            matcher=self._matcher,
        )
        logger.info(
            "Builder context: items=%d terms=%d phases=%d",
            len(state.builder_context.framework_items),
            len(state.builder_context.terminology),
            len(state.builder_context.phases),
        )
        return True

    async def _generation(self, state: PipelineState) -> bool:
        output = await self._run_agent("toolBuilder", state)
        state.artifact_html = output.data["html"]
        return True

    async def _output_validation(self, state: PipelineState) -> bool:
        if state.builder_context is None:
            raise RuntimeError("Output validation requires a builder context")
        source = "toolBuilder"
        result = self._validate_output(state, source)
        limit = self._settings.output_fix_max_attempts
        while not result.passed and state.output_fix_attempts < limit:
            state.output_fix_attempts += 1
            state.fix_feedback = [f"[{e.code}] {e.message}" for e in result.errors]
            logger.info(
                "Output repair %d/%d: %d blocking issues",
                state.output_fix_attempts, limit, len(state.fix_feedback),
            )
            try:
                output = await self._run_agent("feedbackApplier", state)
            except AIServiceError as exc:
                logger.warning("Output repair failed: %s", exc)
                break
            if output.parse_failed:
                break
            state.artifact_html = output.data["html"]
            source = "feedbackApplier"
            result = self._validate_output(state, source)
        return self._record(state, result)

    async def _quality_gate(self, state: PipelineState) -> bool:
        if self._settings.qa_review_enabled:
            output = await self._run_agent("qaReviewer", state)
            state.review = output.data
        return True

    # === HELPERS ===

    async def _run_agent(self, name: str, state: PipelineState) -> AgentOutput:
        agent = self._agents[name]
        output = await agent.execute(state, self._gateway)
        state.record_agent_output(name, output)
        logger.debug(
            "Agent %s: provider=%s fallback=%s tokens=%d %dms",
            name, output.metadata.provider, output.metadata.used_fallback,
            output.metadata.tokens_used, output.metadata.execution_time_ms,
        )
        return output

    def _validate_output(self, state: PipelineState, source: str) -> ValidationResult:
        result = validate_tool_output(
            state.artifact_html or "", state.builder_context, matcher=self._matcher,
        )
        return _with_parse_failure(
            result, state, source,
            kind="an HTML document", expected="A complete HTML document",
        )

    def _record(self, state: PipelineState, result: ValidationResult) -> bool:
        state.record_validation(result)
        text = format_validation_result(result)
        if result.passed:
            logger.info(text)
        else:
            logger.warning(text)
        return result.passed


def _with_parse_failure(
    result: ValidationResult,
    state: PipelineState,
    agent_name: str,
    kind: str = "JSON",
    expected: str = "A JSON object",
) -> ValidationResult:
    """Prepend a RESPONSE_PARSE_FAILED error when the agent's response was unusable."""
    output = state.agent_outputs.get(agent_name)
    if output is None or not output.parse_failed:
        return result
    issue = ValidationIssue(
        code="RESPONSE_PARSE_FAILED",
        message=f"The {agent_name} response could not be parsed as {kind}.",
        field="response",
        expected=expected,
        actual="Unparseable response",
    )
    return ValidationResult.from_issues(
        result.stage, [issue, *result.errors], result.warnings,
    )
