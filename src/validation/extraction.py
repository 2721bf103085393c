# src/validation/extraction.py — v1
"""Extraction validation — is the CourseAnalysis usable for tool design?

Rules:
  - moduleTitle must be non-blank.
  - At least one of: numbered framework with >= 1 item, >= 2 terminology
    entries, >= 2 legacy framework steps, >= 1 formula, go/no-go criteria.
  - A framework detected by name but with zero items is an error only if
    no other usable content exists, otherwise a warning.
  - Missing expert quotes is a warning.
"""

from __future__ import annotations

import logging

from toolfactory.core.models import CourseAnalysis
from toolfactory.validation.models import ValidationIssue, ValidationResult
from toolfactory.validation.severity import IssueCollector, escalate

logger = logging.getLogger(__name__)

MIN_TERMINOLOGY = 2
MIN_LEGACY_STEPS = 2


def validate_extraction(analysis: CourseAnalysis) -> ValidationResult:
    """Validate a course analysis.

    Args:
        analysis: Extraction result from the course analyst stage.

    Returns:
        ValidationResult tagged "extraction". Every problem is collected;
        validation never stops at the first failure.
    """
    issues = IssueCollector()

    item_count = len(analysis.framework_items)
    term_count = len(analysis.terminology)
    step_count = len(analysis.framework.steps) if analysis.framework else 0
    formula_count = len(analysis.formulas)

    has_framework = item_count >= 1
    has_terminology = term_count >= MIN_TERMINOLOGY
    has_legacy = step_count >= MIN_LEGACY_STEPS
    has_formulas = formula_count >= 1
    has_criteria = _has_decision_criteria(analysis)
    has_other_content = has_terminology or has_legacy or has_formulas or has_criteria

    if not analysis.module_title.strip():
        issues.add(ValidationIssue(
            code="MISSING_MODULE_TITLE",
            message=(
                "No module title found. The extraction must name the module "
                "the tool belongs to."
            ),
            field="moduleTitle",
            expected='Non-empty string like "Sprint 6: Cashflow Story Part 1"',
            actual=analysis.module_title or "empty",
        ))

    if not (has_framework or has_other_content):
        framework_name = _framework_name(analysis) or "none"
        issues.add(ValidationIssue(
            code="MISSING_NUMBERED_FRAMEWORK",
            message=(
                "No course-specific content found. Extract at least one of: a "
                "numbered framework, 2+ key terms, 2+ framework steps, a formula, "
                "or go/no-go decision criteria."
            ),
            field="deepContent OR framework OR formulas OR decisionCriteria",
            expected="At least one structured content element",
            actual=(
                f"Framework: {framework_name}, Items: {item_count}, "
                f"Terminology: {term_count}, Steps: {step_count}, "
                f"Formulas: {formula_count}, "
                f"Decision criteria: {'yes' if has_criteria else 'no'}"
            ),
        ))

    framework_name = _framework_name(analysis)
    if framework_name and item_count == 0:
        code, severity = escalate("empty_named_framework", not has_other_content)
        if has_other_content:
            message = (
                f'Framework "{framework_name}" was identified but its items could '
                "not be extracted. The tool will be built from the remaining content."
            )
        else:
            message = (
                f'Framework "{framework_name}" was identified but 0 items were '
                "extracted and no other usable content was found."
            )
        issues.add(
            ValidationIssue(
                code=code,
                message=message,
                field="deepContent.numberedFramework.items",
                expected="Items with number, name, fullLabel, definition, toolInputLabel",
                actual=f'frameworkName: "{framework_name}", items: []',
            ),
            severity,
        )

    if not analysis.expert_quotes:
        issues.add(ValidationIssue(
            code="MISSING_EXPERT_QUOTES",
            message="No expert quotes extracted. Quotes make the tool output richer.",
            field="deepContent.expertWisdom",
            expected="At least 1 expert quote",
            actual="0 quotes",
        ))

    result = ValidationResult.from_issues("extraction", issues.errors, issues.warnings)
    logger.info(
        "Extraction validation: passed=%s errors=%d warnings=%d items=%d terms=%d",
        result.passed, len(result.errors), len(result.warnings), item_count, term_count,
    )
    return result


def _has_decision_criteria(analysis: CourseAnalysis) -> bool:
    criteria = analysis.decision_criteria
    if criteria is None:
        return False
    return bool(criteria.go_condition.strip() and criteria.no_go_condition.strip())


def _framework_name(analysis: CourseAnalysis) -> str:
    if analysis.deep_content is None or analysis.deep_content.numbered_framework is None:
        return ""
    return analysis.deep_content.numbered_framework.framework_name.strip()
