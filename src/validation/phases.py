# src/validation/phases.py — v1
"""Phase-structure validation for multi-step wizard tools.

Rules:
  - 3 to 5 phases, unique phase ids, at most 6 inputs per phase.
  - Every declared input belongs to exactly one phase (no orphans).
  - Every phase declares a summary template whose {{variables}} name
    inputs of that same phase.
  - A default traversal path references existing phases only and is at
    least MIN_PHASES long.
  - No branch condition anywhere is logged, never reported.
"""

from __future__ import annotations

import logging
import re
from collections import Counter

from toolfactory.core.models import Phase
from toolfactory.validation.models import ValidationIssue, ValidationResult
from toolfactory.validation.severity import IssueCollector

logger = logging.getLogger(__name__)

MIN_PHASES = 3
MAX_PHASES = 5
MAX_INPUTS_PER_PHASE = 6

_TEMPLATE_VAR = re.compile(r"\{\{(\w+)\}\}")


def validate_phases(phases: list[Phase], all_input_ids: list[str]) -> ValidationResult:
    """Validate wizard phases against the full set of declared input ids.

    Returns:
        ValidationResult tagged "phases".
    """
    issues = IssueCollector()

    if len(phases) < MIN_PHASES:
        issues.add(_issue(
            "TOO_FEW_PHASES",
            f"Minimum {MIN_PHASES} phases required, got {len(phases)}",
            "phases", f">= {MIN_PHASES}", str(len(phases)),
        ))
    if len(phases) > MAX_PHASES:
        issues.add(_issue(
            "TOO_MANY_PHASES",
            f"Maximum {MAX_PHASES} phases allowed, got {len(phases)}",
            "phases", f"<= {MAX_PHASES}", str(len(phases)),
        ))

    id_counts = Counter(p.id for p in phases)
    duplicates = sorted(pid for pid, n in id_counts.items() if n > 1)
    if duplicates:
        issues.add(_issue(
            "DUPLICATE_PHASE_ID",
            f"Phase IDs must be unique. Duplicates found: {', '.join(duplicates)}",
            "phases.id", "unique ids", ", ".join(duplicates),
        ))

    owner: dict[str, str] = {}
    for phase in phases:
        label = phase.name or phase.id
        names = [i.name for i in phase.inputs]

        if len(names) > MAX_INPUTS_PER_PHASE:
            issues.add(_issue(
                "TOO_MANY_PHASE_INPUTS",
                f'Phase "{label}" has {len(names)} inputs, maximum is {MAX_INPUTS_PER_PHASE}',
                f"phases[{phase.id}].inputs", f"<= {MAX_INPUTS_PER_PHASE}", str(len(names)),
            ))

        for name in names:
            if name in owner and owner[name] != phase.id:
                issues.add(_issue(
                    "DUPLICATE_PHASE_INPUT",
                    f'Input "{name}" is assigned to both "{owner[name]}" and "{phase.id}"',
                    f"phases[{phase.id}].inputs", "exactly one owning phase",
                    f"{owner[name]}, {phase.id}",
                ))
            else:
                owner.setdefault(name, phase.id)

        if not phase.summary_template.strip():
            issues.add(_issue(
                "MISSING_SUMMARY_TEMPLATE",
                f'Phase "{label}" is missing a summaryTemplate',
                f"phases[{phase.id}].summaryTemplate", "non-empty template", "empty",
            ))
            continue

        for var in _TEMPLATE_VAR.findall(phase.summary_template):
            if var not in names:
                issues.add(_issue(
                    "CROSS_PHASE_TEMPLATE_REFERENCE",
                    f'Phase "{label}" summaryTemplate references "{{{{{var}}}}}" '
                    "but this input is not in this phase",
                    f"phases[{phase.id}].summaryTemplate",
                    f"one of: {', '.join(names) or '(no inputs)'}", var,
                ))

    for input_id in all_input_ids:
        if input_id not in owner:
            issues.add(_issue(
                "ORPHAN_INPUT",
                f'Input "{input_id}" is not assigned to any phase (orphan input)',
                "inputs", "assigned to exactly one phase", input_id,
            ))

    if not any(p.branch_conditions for p in phases):
        logger.warning(
            "No branch conditions defined in any phase; consider conditional paths"
        )

    result = ValidationResult.from_issues("phases", issues.errors, issues.warnings)
    logger.info(
        "Phase validation: passed=%s issues=%d phases=%d inputs=%d",
        result.passed, len(result.errors), len(phases), len(owner),
    )
    return result


def validate_default_path(phases: list[Phase], default_path: list[str]) -> ValidationResult:
    """Validate that a default traversal path is reachable and long enough."""
    issues = IssueCollector()
    known = {p.id for p in phases}

    for phase_id in default_path:
        if phase_id not in known:
            issues.add(_issue(
                "UNKNOWN_PATH_PHASE",
                f'Default path references non-existent phase: "{phase_id}"',
                "defaultPath", f"one of: {', '.join(sorted(known))}", phase_id,
            ))

    if len(default_path) < MIN_PHASES:
        issues.add(_issue(
            "DEFAULT_PATH_TOO_SHORT",
            f"Default path must include at least {MIN_PHASES} phases",
            "defaultPath", f">= {MIN_PHASES}", str(len(default_path)),
        ))

    return ValidationResult.from_issues("phases", issues.errors, issues.warnings)


def _issue(code: str, message: str, field: str, expected: str, actual: str) -> ValidationIssue:
    return ValidationIssue(
        code=code, message=message, field=field, expected=expected, actual=actual,
    )
