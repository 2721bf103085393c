# src/pipeline/agents/course_analyst.py — v1
"""Course analyst agent — extract teachable knowledge as a CourseAnalysis.

The model answers with one JSON object (camelCase keys). A response with
no decodable object yields an empty CourseAnalysis flagged parse_failed,
which extraction validation then reports.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pydantic import ValidationError

from toolfactory.core.models import CourseAnalysis
from toolfactory.pipeline.parsing import ResponseParseError, extract_json_object
from toolfactory.pipeline.plugin_kit.base_agent import BaseAgent
from toolfactory.pipeline.plugin_kit.models import AgentOutput
from toolfactory.pipeline.revision import with_revision_block

if TYPE_CHECKING:
    from toolfactory.llm.gateway import AIGateway
    from toolfactory.pipeline.state import PipelineState

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """You are a course analyst. Extract the practical knowledge from course content that will power an interactive decision tool.

For the content, identify:
1. The DECISION this content helps someone make
2. The FRAMEWORK or methodology taught, with its exact numbering
3. The TERMINOLOGY that makes this course unique (at least 2 terms)
4. EXPERT QUOTES with attribution
5. The NUMBERS and thresholds that determine success

Use the course's exact wording. "LEVER 1: YOUR PRICE" is better than "Enter your price".

Respond with valid JSON only, in this structure:
{
  "moduleTitle": "Module name from the content",
  "coreConcept": "One sentence capturing the main teaching",
  "learningObjective": "What students should be able to DO",
  "deepContent": {
    "keyTerminology": [{"term": "", "definition": "", "howToUseInTool": "label | help text | result section"}],
    "numberedFramework": {
      "frameworkName": "",
      "items": [{"number": 1, "name": "", "fullLabel": "", "definition": "", "toolInputLabel": ""}]
    },
    "reflectionQuestions": [{"question": "", "section": "", "toolInputOpportunity": ""}],
    "expertWisdom": [{"quote": "", "source": "", "principle": ""}],
    "sprintChecklist": [{"item": "", "validationType": "", "toolValidation": ""}],
    "inputRanges": [{"fieldId": "", "fieldLabel": "", "inferredMin": 0, "inferredMax": 0, "sourceQuote": "", "confidence": ""}]
  },
  "framework": {"name": "", "steps": [], "inputs": [], "outputs": []},
  "formulas": [{"name": "", "formula": "", "variables": [{"name": "", "description": "", "unit": ""}], "interpretation": ""}],
  "decisionCriteria": {"goCondition": "", "noGoCondition": "", "thresholds": []},
  "toolOpportunity": {"suggestedToolName": "", "toolPurpose": "", "valueProposition": ""}
}"""


class CourseAnalystAgent(BaseAgent):
    """Extract frameworks, terminology, quotes and criteria from content."""

    @property
    def name(self) -> str:
        return "courseAnalyst"

    @property
    def version(self) -> str:
        return "1.0.0"

    @property
    def description(self) -> str:
        return "Extract teachable knowledge from course content"

    async def execute(self, state: PipelineState, gateway: AIGateway) -> AgentOutput:
        # Revision notes outrank the source, so they lead the input
        content = with_revision_block(
            state.prepared_content or state.source_content, state.revision_notes,
        )
        response, prompt_hash, elapsed_ms = await self._complete(
            gateway, state, SYSTEM_PROMPT, content,
        )

        parse_failed = False
        try:
            analysis = CourseAnalysis.model_validate(extract_json_object(response.content))
        except (ResponseParseError, ValidationError) as exc:
            logger.warning("Course analysis parse failed: %s", exc)
            analysis = CourseAnalysis()
            parse_failed = True

        return AgentOutput(
            data={"course_analysis": analysis.model_dump(by_alias=True)},
            confidence=0.0 if parse_failed else 1.0,
            metadata=self._metadata(response, prompt_hash, elapsed_ms),
            parse_failed=parse_failed,
        )
