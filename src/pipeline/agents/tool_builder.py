# src/pipeline/agents/tool_builder.py — v1
"""Tool builder agent — generate the single-file HTML tool.

The user prompt is the ordered user request (revision notes first, then
source content, then the prior artifact excerpt) followed by the builder
context as JSON.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

from toolfactory.pipeline.parsing import ResponseParseError, extract_html, strip_code_fences
from toolfactory.pipeline.plugin_kit.base_agent import BaseAgent
from toolfactory.pipeline.plugin_kit.models import AgentOutput

if TYPE_CHECKING:
    from toolfactory.llm.gateway import AIGateway
    from toolfactory.pipeline.state import PipelineState

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """You are a tool builder. Generate a complete, working single-file HTML decision tool.

Respond with ONLY the HTML: start with <!DOCTYPE html> and end with </html>.
No explanations, no markdown.

STRUCTURE (slide based):
1. Welcome slide with the tool name and tagline
2. One question slide per input, progress bar at the top
3. Results slide with a large color-coded GO / NO-GO verdict, key numbers and the expert quote with attribution
4. Commitment slide (who, what, when) with save and export

SLIDE CSS (mandatory):
.slide { position: absolute; inset: 0; }
.slide.active { ... visible state ... }
.slide.past { ... exited state ... }
Never lay slides out in a wide horizontal strip (e.g. width: 800vw).

BUILDER CONTEXT:
- frameworkItems: one question per item, using the EXACT label
- terminology: use the exact terms in labels, help text or results
- expertQuote: display on the results slide
- checklist: show on the results slide
- calculation: implement in JavaScript
- phases: if present, build a multi-phase wizard with a summary between phases

If a REVISION REQUEST is present it has the highest priority."""


class ToolBuilderAgent(BaseAgent):
    """Generate the HTML artifact from the builder context."""

    @property
    def name(self) -> str:
        return "toolBuilder"

    @property
    def version(self) -> str:
        return "1.0.0"

    @property
    def description(self) -> str:
        return "Generate a single-file HTML decision tool"

    def _format_prompt(self, state: PipelineState) -> str:
        context = (
            state.builder_context.model_dump(by_alias=True) if state.builder_context else {}
        )
        return (
            f"{state.user_request}\n\n"
            "BUILDER CONTEXT:\n"
            f"{json.dumps(context, indent=2)}"
        )

    async def execute(self, state: PipelineState, gateway: AIGateway) -> AgentOutput:
        response, prompt_hash, elapsed_ms = await self._complete(
            gateway, state, SYSTEM_PROMPT, self._format_prompt(state), temperature=0.4,
        )

        warnings: list[str] = []
        parse_failed = False
        try:
            html = extract_html(response.content)
        except ResponseParseError as exc:
            # Keep whatever came back so the reviewer can inspect it.
            logger.warning("Tool builder returned no HTML document: %s", exc)
            html = strip_code_fences(response.content)
            warnings.append("Generated output is not a complete HTML document")
            parse_failed = True

        return AgentOutput(
            data={"html": html, "html_chars": len(html)},
            confidence=0.5 if parse_failed else 1.0,
            metadata=self._metadata(response, prompt_hash, elapsed_ms),
            parse_failed=parse_failed,
            warnings=warnings,
        )
