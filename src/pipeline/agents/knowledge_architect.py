# src/pipeline/agents/knowledge_architect.py — v1
"""Knowledge architect agent — design a tool that applies the extracted knowledge.

Receives the CourseAnalysis as JSON plus an excerpt of the source content
and answers with a ToolDesign (classic inputs, optionally wizard phases).
Revision notes, when present, lead the prompt.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

from pydantic import ValidationError

from toolfactory.core.models import ToolDesign
from toolfactory.pipeline.parsing import ResponseParseError, extract_json_object
from toolfactory.pipeline.plugin_kit.base_agent import BaseAgent
from toolfactory.pipeline.plugin_kit.models import AgentOutput
from toolfactory.pipeline.revision import with_revision_block

if TYPE_CHECKING:
    from toolfactory.llm.gateway import AIGateway
    from toolfactory.pipeline.state import PipelineState

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """You are a knowledge application architect. Design an interactive tool that turns what a student learned into a concrete decision about their own business.

RULES:
1. The tool ends in a clear verdict (GO / NO-GO or threshold passed / failed).
2. Map EVERY numbered framework item to an input whose label uses the item's toolInputLabel verbatim.
3. Use the course terminology in input labels or help text.
4. Every input has a realistic placeholder and help text (max 15 words).
5. Show the expert quote on the result, with attribution.
6. Link reflection questions to inputs via reflectionQuestionBasis.

Optionally structure the tool as a wizard: 3 to 5 phases, at most 6 inputs
per phase, every input in exactly one phase, and a summaryTemplate per phase
that only references {{inputName}} variables from that phase.

Respond with valid JSON only:
{
  "toolDesign": {"name": "Verb + Noun", "tagline": "", "courseCorrelation": ""},
  "inputs": [{"name": "fieldName", "type": "number|text|select|textarea", "label": "", "placeholder": "", "helpText": "", "required": true, "courseReference": "", "options": [], "reflectionQuestionBasis": ""}],
  "processing": {"logic": "", "formula": "", "courseFramework": ""},
  "output": {
    "primaryResult": {"label": "", "format": "", "interpretation": ""},
    "decision": {"type": "GO_NO_GO", "criteria": "", "goThreshold": "", "noGoThreshold": ""},
    "nextAction": {"onGo": "", "onNoGo": ""}
  },
  "deepContentIntegration": {"expertQuoteToDisplay": {"quote": "", "source": "", "displayLocation": "results"}},
  "courseAlignment": {"moduleObjective": "", "toolDelivery": "", "knowledgeReinforcement": ""},
  "phases": [{"id": "", "name": "", "description": "", "inputs": [], "summaryTemplate": "", "branchConditions": []}],
  "defaultPath": []
}"""


class KnowledgeArchitectAgent(BaseAgent):
    """Design a decision tool from a course analysis.

    Args:
        source_excerpt_chars: How much of the source content to pass along
            with the analysis.
    """

    def __init__(self, source_excerpt_chars: int = 3000) -> None:
        self._excerpt_chars = source_excerpt_chars

    @property
    def name(self) -> str:
        return "knowledgeArchitect"

    @property
    def version(self) -> str:
        return "1.0.0"

    @property
    def description(self) -> str:
        return "Design a decision tool that applies the course knowledge"

    def _format_prompt(self, state: PipelineState) -> str:
        analysis = state.course_analysis.model_dump(by_alias=True) if state.course_analysis else {}
        excerpt = (state.prepared_content or state.source_content)[: self._excerpt_chars]
        prompt = (
            "COURSE ANALYSIS:\n"
            f"{json.dumps(analysis, indent=2)}\n\n"
            "ORIGINAL CONTENT EXCERPT (for reference):\n"
            f"{excerpt}\n\n"
            "Design a tool that helps students APPLY the knowledge from this "
            "course to their real business situation."
        )
        return with_revision_block(prompt, state.revision_notes)

    async def execute(self, state: PipelineState, gateway: AIGateway) -> AgentOutput:
        response, prompt_hash, elapsed_ms = await self._complete(
            gateway, state, SYSTEM_PROMPT, self._format_prompt(state),
        )

        parse_failed = False
        try:
            design = ToolDesign.model_validate(extract_json_object(response.content))
        except (ResponseParseError, ValidationError) as exc:
            logger.warning("Tool design parse failed: %s", exc)
            design = ToolDesign()
            parse_failed = True

        return AgentOutput(
            data={"tool_design": design.model_dump(by_alias=True)},
            confidence=0.0 if parse_failed else 1.0,
            metadata=self._metadata(response, prompt_hash, elapsed_ms),
            parse_failed=parse_failed,
        )
