# src/validation/output.py — v1
"""Output validation — does the generated HTML contain what the design promised?

The artifact is treated as opaque text; only the presence of substrings
and a few CSS patterns is checked, never its full grammar.
"""

from __future__ import annotations

import logging
import re

from toolfactory.core.models import BuilderContext
from toolfactory.validation.matching import DEFAULT_MATCHER, LabelMatcher, tail_segment
from toolfactory.validation.models import ValidationIssue, ValidationResult
from toolfactory.validation.severity import IssueCollector, escalate

logger = logging.getLogger(__name__)

QUOTE_PREFIX_CHARS = 50

# Multi-viewport-width flex strip (e.g. width: 800vw), a known broken layout.
_WIDE_CONTAINER = re.compile(r"width\s*:\s*\d{3,}vw", re.IGNORECASE)
_ABSOLUTE_SLIDE = re.compile(r"\.slide\s*\{[^}]*position\s*:\s*absolute", re.IGNORECASE)
_ACTIVE_SLIDE = re.compile(r"\.slide\.active", re.IGNORECASE)
_PAST_SLIDE = re.compile(r"\.slide\.past", re.IGNORECASE)


def validate_tool_output(
    html: str,
    context: BuilderContext,
    matcher: LabelMatcher | None = None,
) -> ValidationResult:
    """Validate a generated artifact against the builder context.

    Args:
        html: Rendered artifact text.
        context: Builder context the artifact was generated from.
        matcher: Label matching strategy (case-insensitive substring by default).

    Returns:
        ValidationResult tagged "output".
    """
    matcher = matcher or DEFAULT_MATCHER
    issues = IssueCollector()

    if not html.strip():
        issues.add(ValidationIssue(
            code="EMPTY_ARTIFACT",
            message="Generation produced no HTML.",
            field="html",
            expected="Non-empty HTML document",
            actual="empty",
        ))
        return ValidationResult.from_issues("output", issues.errors, issues.warnings)

    for item in context.framework_items:
        if not (matcher.matches(html, item.label) or matcher.matches(html, tail_segment(item.label))):
            issues.add(ValidationIssue(
                code="FRAMEWORK_ITEM_MISSING_IN_HTML",
                message=(
                    f'Framework item "{item.label}" not found in generated HTML. The '
                    "tool must include all framework items with exact terminology."
                ),
                field=f"frameworkItems[{item.number}]",
                expected=item.label,
                actual="Not found in HTML",
            ))

    quote = context.expert_quote
    if quote is not None and quote.quote.strip():
        prefix = quote.quote[:QUOTE_PREFIX_CHARS]
        if not matcher.matches(html, prefix):
            issues.add(ValidationIssue(
                code="EXPERT_QUOTE_MISSING_IN_HTML",
                message=(
                    f"Expert quote from {quote.source or 'the course'} is not displayed "
                    "in the tool."
                ),
                field="expertQuote",
                expected=f'"{prefix}..."',
                actual="Not found in HTML",
            ))

    if _WIDE_CONTAINER.search(html):
        issues.add(ValidationIssue(
            code="BROKEN_SLIDE_LAYOUT",
            message=(
                "Tool uses a wide container (e.g. width:800vw) which breaks the slide "
                "layout. Slides must use position:absolute with .active/.past classes."
            ),
            field="css",
            expected=".slide { position: absolute; } with .slide.active and .slide.past",
            actual="Wide flex container detected",
        ))

    has_absolute = bool(_ABSOLUTE_SLIDE.search(html))
    has_active = bool(_ACTIVE_SLIDE.search(html))
    has_past = bool(_PAST_SLIDE.search(html))
    if not (has_absolute and has_active and has_past):
        issues.add(ValidationIssue(
            code="MISSING_SLIDE_SCAFFOLD",
            message=(
                "Tool is missing the mandatory slide CSS scaffold: .slide { position: "
                "absolute; } with .slide.active and .slide.past state classes."
            ),
            field="css",
            expected=".slide { position: absolute; } .slide.active { ... } .slide.past { ... }",
            actual=(
                f"position:absolute={has_absolute}, .active={has_active}, "
                f".past={has_past}"
            ),
        ))

    item_text = " ".join(
        f"{item.label} {item.definition}" for item in context.framework_items
    )
    for term in context.terminology:
        if matcher.matches(html, term.term):
            continue
        load_bearing = matcher.matches(item_text, term.term)
        code, severity = escalate("term_missing_in_output", load_bearing)
        if load_bearing:
            message = (
                f'Critical course term "{term.term}" not found in generated HTML. It '
                "is required because it appears in the framework."
            )
        else:
            message = (
                f'Course term "{term.term}" may have been genericized. Verify it '
                "appears in the tool."
            )
        issues.add(
            ValidationIssue(
                code=code,
                message=message,
                field=f"terminology.{term.term}",
                expected=term.term,
                actual="Not found in HTML",
            ),
            severity,
        )

    result = ValidationResult.from_issues("output", issues.errors, issues.warnings)
    logger.info(
        "Output validation: passed=%s errors=%d warnings=%d items_checked=%d",
        result.passed, len(result.errors), len(result.warnings),
        len(context.framework_items),
    )
    return result
