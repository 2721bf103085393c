# src/pipeline/agents/feedback_applier.py — v1
"""Feedback applier agent — repair a generated tool from validation findings.

Receives the current HTML, the builder context and the blocking findings
of output validation, and answers with the complete revised HTML. A
response without an HTML document keeps the current artifact.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

from toolfactory.pipeline.parsing import ResponseParseError, extract_html
from toolfactory.pipeline.plugin_kit.base_agent import BaseAgent
from toolfactory.pipeline.plugin_kit.models import AgentOutput

if TYPE_CHECKING:
    from toolfactory.llm.gateway import AIGateway
    from toolfactory.pipeline.state import PipelineState

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """You are an HTML repair specialist for interactive decision tools. Fix every listed issue with minimal changes and keep all working functionality.

Rules:
- Use framework labels and course terms exactly as given in the builder context.
- Keep the layered slide CSS (.slide absolute, .slide.active, .slide.past).
- Return the COMPLETE revised HTML only: start with <!DOCTYPE html> and end with </html>. No explanations, no markdown."""


class FeedbackApplierAgent(BaseAgent):
    """Apply output validation findings to the current artifact."""

    @property
    def name(self) -> str:
        return "feedbackApplier"

    @property
    def version(self) -> str:
        return "1.0.0"

    @property
    def description(self) -> str:
        return "Revise the generated tool to fix blocking findings"

    def _format_prompt(self, state: PipelineState) -> str:
        context = (
            state.builder_context.model_dump(by_alias=True) if state.builder_context else {}
        )
        issues = "\n".join(f"{i}. {issue}" for i, issue in enumerate(state.fix_feedback, 1))
        return (
            "BUILDER CONTEXT:\n"
            f"{json.dumps(context, indent=2)}\n\n"
            "CURRENT HTML:\n"
            f"{state.artifact_html or ''}\n\n"
            "ISSUES TO FIX:\n"
            f"{issues}"
        )

    async def execute(self, state: PipelineState, gateway: AIGateway) -> AgentOutput:
        response, prompt_hash, elapsed_ms = await self._complete(
            gateway, state, SYSTEM_PROMPT, self._format_prompt(state), use_light_model=True,
        )

        try:
            html = extract_html(response.content)
            parse_failed = False
        except ResponseParseError as exc:
            logger.warning("Feedback applier returned no HTML document: %s", exc)
            html = state.artifact_html or ""
            parse_failed = True

        return AgentOutput(
            data={"html": html, "issues_addressed": len(state.fix_feedback)},
            confidence=0.0 if parse_failed else 1.0,
            metadata=self._metadata(response, prompt_hash, elapsed_ms),
            parse_failed=parse_failed,
        )
