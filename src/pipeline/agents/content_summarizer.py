# src/pipeline/agents/content_summarizer.py — v1
"""Content summarizer agent — distill long course content before extraction.

Keeps the tool-relevant knowledge (frameworks, formulas, thresholds,
decision criteria, numbered steps) and compresses everything else.
Runs on the light model; skipped entirely for short content.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from toolfactory.pipeline.parsing import strip_code_fences
from toolfactory.pipeline.plugin_kit.base_agent import BaseAgent
from toolfactory.pipeline.plugin_kit.models import AgentOutput

if TYPE_CHECKING:
    from toolfactory.llm.gateway import AIGateway
    from toolfactory.pipeline.state import PipelineState

logger = logging.getLogger(__name__)

TRUNCATION_MARKER = "\n\n[... content truncated ...]\n\n"

SYSTEM_PROMPT = """You are a course content summarizer. Distill large course content into the knowledge needed to build an interactive decision tool.

PRESERVE EXACTLY:
1. Every formula, with its exact wording
2. Every numbered list, step or process, with its numbering
3. Every threshold or benchmark (e.g. "aim for 20% margin")
4. Every decision framework (GO / NO-GO criteria)
5. Course-specific terminology and attributed expert quotes
6. The module name and its learning objective

COMPRESS: motivational text, background theory, repeated concepts.
REMOVE: platitudes, administrative details, reading-time estimates.

Start with the MODULE NAME and LEARNING OBJECTIVE. Keep the output under
8,000 characters. Return the compressed content directly, no JSON."""


def truncate_content(content: str, max_chars: int) -> tuple[str, bool]:
    """Keep the head and tail of oversized content around a marker.

    Returns:
        (content, truncated) where content keeps the first and last
        max_chars // 2 characters when the input exceeds max_chars.
    """
    if len(content) <= max_chars:
        return content, False
    half = max_chars // 2
    return content[:half] + TRUNCATION_MARKER + content[-half:], True


class ContentSummarizerAgent(BaseAgent):
    """Compress long course content while preserving actionable knowledge."""

    @property
    def name(self) -> str:
        return "contentSummarizer"

    @property
    def version(self) -> str:
        return "1.0.0"

    @property
    def description(self) -> str:
        return "Summarize large course content, keeping frameworks and formulas"

    async def execute(self, state: PipelineState, gateway: AIGateway) -> AgentOutput:
        content = state.prepared_content or state.source_content
        response, prompt_hash, elapsed_ms = await self._complete(
            gateway, state, SYSTEM_PROMPT, content, use_light_model=True,
        )
        summary = strip_code_fences(response.content)
        warnings: list[str] = []
        if not summary:
            logger.warning("Summarizer returned empty content, keeping original")
            warnings.append("Content summary was empty; original content used")
            summary = content

        return AgentOutput(
            data={
                "summary": summary,
                "original_chars": len(content),
                "summary_chars": len(summary),
            },
            confidence=1.0 if not warnings else 0.5,
            metadata=self._metadata(response, prompt_hash, elapsed_ms),
            parse_failed=bool(warnings),
            warnings=warnings,
        )
