# src/validation/design.py — v1
"""Design alignment validation — does the ToolDesign cover the extraction?

Rules:
  - Every framework item must be matched by at least one input label
    (against its toolInputLabel or its name). Unmatched items are errors.
  - Terminology not reflected in any input label or help text is a warning.
  - An extracted expert quote with no display hint in the design is a warning.
  - Reflection questions with no input linked to them is a warning.
  - When the design declares wizard phases, phase structure and default
    path are validated too.
"""

from __future__ import annotations

import logging

from toolfactory.core.models import CourseAnalysis, FrameworkItem, ToolDesign
from toolfactory.validation.matching import DEFAULT_MATCHER, LabelMatcher
from toolfactory.validation.models import ValidationIssue, ValidationResult
from toolfactory.validation.phases import validate_default_path, validate_phases
from toolfactory.validation.severity import IssueCollector

logger = logging.getLogger(__name__)


def validate_design_alignment(
    analysis: CourseAnalysis,
    design: ToolDesign,
    matcher: LabelMatcher | None = None,
) -> ValidationResult:
    """Validate that a design expresses the extracted knowledge.

    Args:
        analysis: Validated extraction result.
        design: Tool design from the knowledge architect stage.
        matcher: Label matching strategy (case-insensitive substring by default).

    Returns:
        ValidationResult tagged "design".
    """
    matcher = matcher or DEFAULT_MATCHER
    issues = IssueCollector()
    items = analysis.framework_items
    labels = [i.label for i in design.inputs]

    for item in items:
        if not any(_item_matches(matcher, label, item) for label in labels):
            issues.add(ValidationIssue(
                code="FRAMEWORK_ITEM_NOT_MAPPED",
                message=(
                    f'Framework item "{item.name}" (#{item.number}) is not mapped to '
                    f"a tool input. The design must include inputs for all "
                    f"{len(items)} framework items."
                ),
                field="inputs",
                expected=item.tool_input_label or item.name,
                actual="No matching input found",
            ))

    terminology = analysis.terminology
    if terminology:
        searchable = " ".join(
            f"{i.label} {i.help_text}" for i in design.inputs
        )
        unused = [t.term for t in terminology if not matcher.matches(searchable, t.term)]
        if unused:
            quoted = ", ".join(f'"{t}"' for t in unused)
            issues.add(ValidationIssue(
                code="TERMINOLOGY_NOT_USED",
                message=(
                    f"Course-specific terminology not used in tool design: {quoted}. "
                    f"Used {len(terminology) - len(unused)} of {len(terminology)} terms."
                ),
                field="inputs.label",
                expected=f"All terms used: {', '.join(t.term for t in terminology)}",
                actual=f"Unused: {', '.join(unused)}",
            ))

    quotes = analysis.expert_quotes
    if quotes and not _quote_placed(design):
        first = quotes[0]
        issues.add(ValidationIssue(
            code="QUOTE_NOT_PLACED",
            message=(
                f'Expert quote not specified for display: "{first.quote[:60]}" '
                f"({first.source or 'unknown source'})."
            ),
            field="deepContentIntegration.expertQuoteToDisplay",
            expected="Quote display specification with location",
            actual="Not specified, quote will not appear in generated tool",
        ))

    questions = analysis.reflection_questions
    if questions and not any(i.reflection_question_basis.strip() for i in design.inputs):
        issues.add(ValidationIssue(
            code="REFLECTION_QUESTIONS_NOT_LINKED",
            message=(
                f"{len(questions)} reflection questions from the course are not "
                "mapped to tool inputs."
            ),
            field="inputs.reflectionQuestionBasis",
            expected="At least one input referencing a course reflection question",
            actual="0 inputs reference reflection questions",
        ))

    result = ValidationResult.from_issues("design", issues.errors, issues.warnings)

    if design.phases:
        input_ids = [i.name for i in design.inputs]
        result = result.merged_with(validate_phases(design.phases, input_ids))
        if design.default_path:
            result = result.merged_with(
                validate_default_path(design.phases, design.default_path)
            )

    logger.info(
        "Design validation: passed=%s errors=%d warnings=%d items=%d inputs=%d",
        result.passed, len(result.errors), len(result.warnings),
        len(items), len(design.inputs),
    )
    return result


def _item_matches(matcher: LabelMatcher, label: str, item: FrameworkItem) -> bool:
    candidates = [c for c in (item.tool_input_label, item.name) if c.strip()]
    return any(matcher.matches(label, c) for c in candidates)


def _quote_placed(design: ToolDesign) -> bool:
    integration = design.deep_content_integration
    if integration is None or integration.expert_quote_to_display is None:
        return False
    return bool(integration.expert_quote_to_display.quote.strip())
