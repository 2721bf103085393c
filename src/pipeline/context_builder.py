# src/pipeline/context_builder.py — v1
"""Builder context assembly — flatten a validated analysis + design for generation.

Pure and deterministic: the same inputs always give the same context, and
every framework item of the analysis appears exactly once, in order.
"""

from __future__ import annotations

from toolfactory.core.models import (
    BuilderContext,
    BuilderFrameworkItem,
    BuilderQuote,
    BuilderTerm,
    CourseAnalysis,
    DesignInput,
    FrameworkItem,
    TermUsage,
    ToolDesign,
    VerdictCriteria,
)
from toolfactory.validation.matching import DEFAULT_MATCHER, LabelMatcher

DEFAULT_TOOL_NAME = "Decision Tool"
DEFAULT_TAGLINE = "Make informed decisions"
DEFAULT_MODULE = "Course Module"
DEFAULT_CALCULATION = "Weighted analysis of inputs"
DEFAULT_GO = "Positive indicators outweigh negative"
DEFAULT_NO_GO = "Negative indicators outweigh positive"


def build_builder_context(
    analysis: CourseAnalysis,
    design: ToolDesign,
    matcher: LabelMatcher | None = None,
) -> BuilderContext:
    """Assemble the generation context.

    Args:
        analysis: Extraction result that passed validation.
        design: Tool design that passed validation.
        matcher: Label matching strategy used to pair items with design
            inputs (case-insensitive substring by default).

    Returns:
        BuilderContext with defaults filled in where the design is silent.
    """
    matcher = matcher or DEFAULT_MATCHER
    items = [
        _framework_item(item, design.inputs, matcher) for item in analysis.framework_items
    ]

    terms = [
        BuilderTerm(
            term=t.term,
            definition=t.definition,
            use_in=_term_usage(t.how_to_use_in_tool),
        )
        for t in analysis.terminology
    ]

    quotes = analysis.expert_quotes
    expert_quote = BuilderQuote(quote=quotes[0].quote, source=quotes[0].source) if quotes else None

    checklist = (
        [c.item for c in analysis.deep_content.sprint_checklist]
        if analysis.deep_content
        else []
    )

    decision = design.output.decision
    go = (decision.go_threshold or decision.criteria) if decision else ""
    no_go = decision.no_go_threshold if decision else ""

    return BuilderContext(
        tool_name=design.tool_design.name or DEFAULT_TOOL_NAME,
        tool_tagline=design.tool_design.tagline or DEFAULT_TAGLINE,
        module_reference=analysis.module_title or DEFAULT_MODULE,
        framework_items=items,
        terminology=terms,
        expert_quote=expert_quote,
        checklist=checklist,
        calculation=design.processing.formula or DEFAULT_CALCULATION,
        verdict_criteria=VerdictCriteria(go=go or DEFAULT_GO, no_go=no_go or DEFAULT_NO_GO),
        phases=list(design.phases),
        default_path=list(design.default_path),
    )


def _framework_item(
    item: FrameworkItem, inputs: list[DesignInput], matcher: LabelMatcher,
) -> BuilderFrameworkItem:
    label = item.tool_input_label or item.full_label or item.name or f"Item {item.number}"
    match = _matching_input(item, inputs, matcher)
    return BuilderFrameworkItem(
        number=item.number,
        label=label,
        definition=item.definition,
        input_type=match.type if match and match.type else "number",
        placeholder=(
            match.placeholder if match and match.placeholder else f"e.g., {item.number * 1000}"
        ),
    )


def _matching_input(
    item: FrameworkItem, inputs: list[DesignInput], matcher: LabelMatcher,
) -> DesignInput | None:
    """First input whose label contains the item's input label, else its name."""
    for needle in (item.tool_input_label, item.name):
        if not needle:
            continue
        for inp in inputs:
            if matcher.matches(inp.label, needle):
                return inp
    return None


def _term_usage(hint: str) -> TermUsage:
    lowered = hint.lower()
    if "label" in lowered:
        return "label"
    if "result" in lowered:
        return "resultSection"
    return "helpText"
