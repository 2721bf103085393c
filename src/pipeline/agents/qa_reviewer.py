# src/pipeline/agents/qa_reviewer.py — v1
"""QA reviewer agent — advisory AI review of the generated tool.

Scores the artifact against the builder context and lists issues. Runs
in the quality gate only when enabled; its score never blocks a job on
its own. A response that cannot be parsed yields a neutral record.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, Field

from toolfactory.pipeline.parsing import ResponseParseError, extract_json_object
from toolfactory.pipeline.plugin_kit.base_agent import BaseAgent
from toolfactory.pipeline.plugin_kit.models import AgentOutput

if TYPE_CHECKING:
    from toolfactory.llm.gateway import AIGateway
    from toolfactory.pipeline.state import PipelineState

logger = logging.getLogger(__name__)

MAX_HTML_CHARS = 60_000

SYSTEM_PROMPT = """You are a QA reviewer for interactive decision tools. Critically assess whether the HTML tool delivers what the builder context describes: every framework item asked with its exact label, course terms used, a clear verdict, the expert quote displayed, and a working slide flow.

Respond only with valid JSON:
{
  "overall_quality": 0.0,
  "issues": [{"severity": "low|medium|high", "category": "", "description": "", "suggestion": ""}],
  "summary": ""
}"""


class ReviewIssue(BaseModel):
    """A single issue raised by the reviewer."""

    severity: str  # "low", "medium", "high"
    category: str
    description: str
    suggestion: str = ""


class ReviewOutput(BaseModel):
    overall_quality: float  # 0.0 - 1.0
    issues: list[ReviewIssue] = Field(default_factory=list)
    summary: str = ""


class QAReviewerAgent(BaseAgent):
    """Assess generated tool quality and flag issues."""

    @property
    def name(self) -> str:
        return "qaReviewer"

    @property
    def version(self) -> str:
        return "1.0.0"

    @property
    def description(self) -> str:
        return "Review the generated tool against its builder context"

    def _format_prompt(self, state: PipelineState) -> str:
        context = (
            state.builder_context.model_dump(by_alias=True) if state.builder_context else {}
        )
        html = (state.artifact_html or "")[:MAX_HTML_CHARS]
        return (
            "BUILDER CONTEXT:\n"
            f"{json.dumps(context, indent=2)}\n\n"
            "GENERATED HTML:\n"
            f"{html}"
        )

    def _build_issue(self, raw: Any) -> ReviewIssue | None:
        if not isinstance(raw, dict):
            return None
        try:
            return ReviewIssue(
                severity=raw.get("severity", "low"),
                category=raw.get("category", "unknown"),
                description=raw.get("description", ""),
                suggestion=raw.get("suggestion", ""),
            )
        except ValueError as exc:
            logger.debug("Skipping malformed review issue: %s", exc)
            return None

    async def execute(self, state: PipelineState, gateway: AIGateway) -> AgentOutput:
        response, prompt_hash, elapsed_ms = await self._complete(
            gateway, state, SYSTEM_PROMPT, self._format_prompt(state), use_light_model=True,
        )

        parse_failed = False
        try:
            parsed = extract_json_object(response.content)
        except ResponseParseError as exc:
            logger.warning("QA review parse failed: %s", exc)
            parsed = {
                "overall_quality": 0.5,
                "issues": [],
                "summary": "Quality review could not be completed.",
            }
            parse_failed = True

        issues = [i for i in map(self._build_issue, parsed.get("issues", [])) if i]
        try:
            quality = min(max(float(parsed.get("overall_quality", 0.5)), 0.0), 1.0)
        except (TypeError, ValueError):
            quality = 0.5
        review = ReviewOutput(
            overall_quality=quality, issues=issues, summary=str(parsed.get("summary", "")),
        )

        return AgentOutput(
            data={
                **review.model_dump(),
                "issue_count": len(issues),
                "high_severity_count": sum(1 for i in issues if i.severity == "high"),
            },
            confidence=quality,
            metadata=self._metadata(response, prompt_hash, elapsed_ms),
            parse_failed=parse_failed,
        )
