# src/validation/severity.py — v1
"""Severity decision table for every validation issue code.

Most codes have a fixed severity. A few are data-dependent; their
escalation rules live here and nowhere else.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from toolfactory.validation.models import ValidationIssue


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


# Codes whose severity never depends on the data.
FIXED_SEVERITY: dict[str, Severity] = {
    # extraction
    "MISSING_MODULE_TITLE": Severity.ERROR,
    "MISSING_NUMBERED_FRAMEWORK": Severity.ERROR,
    "MISSING_EXPERT_QUOTES": Severity.WARNING,
    "RESPONSE_PARSE_FAILED": Severity.ERROR,
    # design
    "FRAMEWORK_ITEM_NOT_MAPPED": Severity.ERROR,
    "TERMINOLOGY_NOT_USED": Severity.WARNING,
    "QUOTE_NOT_PLACED": Severity.WARNING,
    "REFLECTION_QUESTIONS_NOT_LINKED": Severity.WARNING,
    # output
    "EMPTY_ARTIFACT": Severity.ERROR,
    "FRAMEWORK_ITEM_MISSING_IN_HTML": Severity.ERROR,
    "EXPERT_QUOTE_MISSING_IN_HTML": Severity.ERROR,
    "BROKEN_SLIDE_LAYOUT": Severity.ERROR,
    "MISSING_SLIDE_SCAFFOLD": Severity.ERROR,
    # phases
    "TOO_FEW_PHASES": Severity.ERROR,
    "TOO_MANY_PHASES": Severity.ERROR,
    "DUPLICATE_PHASE_ID": Severity.ERROR,
    "TOO_MANY_PHASE_INPUTS": Severity.ERROR,
    "DUPLICATE_PHASE_INPUT": Severity.ERROR,
    "MISSING_SUMMARY_TEMPLATE": Severity.ERROR,
    "CROSS_PHASE_TEMPLATE_REFERENCE": Severity.ERROR,
    "ORPHAN_INPUT": Severity.ERROR,
    "UNKNOWN_PATH_PHASE": Severity.ERROR,
    "DEFAULT_PATH_TOO_SHORT": Severity.ERROR,
}


@dataclass(frozen=True)
class EscalationRule:
    """Severity (and code) chosen by whether `condition` holds."""

    condition: str
    code_when_met: str
    severity_when_met: Severity
    code_otherwise: str
    severity_otherwise: Severity


ESCALATION_RULES: dict[str, EscalationRule] = {
    # A named framework with no items is fatal only when nothing else
    # can carry the tool.
    "empty_named_framework": EscalationRule(
        condition="no other usable content was extracted",
        code_when_met="INCOMPLETE_FRAMEWORK_ITEMS",
        severity_when_met=Severity.ERROR,
        code_otherwise="INCOMPLETE_FRAMEWORK_ITEMS",
        severity_otherwise=Severity.WARNING,
    ),
    # Terms used inside framework items are load-bearing.
    "term_missing_in_output": EscalationRule(
        condition="term appears in a framework item label or definition",
        code_when_met="CRITICAL_TERMINOLOGY_MISSING",
        severity_when_met=Severity.ERROR,
        code_otherwise="TERMINOLOGY_GENERICIZED",
        severity_otherwise=Severity.WARNING,
    ),
}


def severity_of(code: str) -> Severity:
    """Fixed severity for `code`.

    Raises:
        KeyError: If the code is unknown or data-dependent.
    """
    return FIXED_SEVERITY[code]


def escalate(rule_name: str, condition_met: bool) -> tuple[str, Severity]:
    """Resolve a data-dependent rule into (code, severity)."""
    rule = ESCALATION_RULES[rule_name]
    if condition_met:
        return rule.code_when_met, rule.severity_when_met
    return rule.code_otherwise, rule.severity_otherwise


class IssueCollector:
    """Accumulate issues, routing each to errors or warnings by severity."""

    def __init__(self) -> None:
        self.errors: list[ValidationIssue] = []
        self.warnings: list[ValidationIssue] = []

    def add(self, issue: ValidationIssue, severity: Severity | None = None) -> None:
        """Add an issue; severity defaults to the fixed table entry for its code."""
        resolved = severity or severity_of(issue.code)
        if resolved is Severity.ERROR:
            self.errors.append(issue)
        else:
            self.warnings.append(issue)
