# src/validation/report.py — v1
"""Human-readable rendering of validation results."""

from __future__ import annotations

from toolfactory.validation.models import ValidationResult


def format_validation_result(result: ValidationResult) -> str:
    """Render a result as the log/CLI block operators read.

    Example:
        Validation [design]: FAILED
        Errors:
          - [FRAMEWORK_ITEM_NOT_MAPPED] Framework item "Price" (#1) ...
    """
    lines = [f"Validation [{result.stage}]: {'PASSED' if result.passed else 'FAILED'}"]
    if result.errors:
        lines.append("Errors:")
        lines.extend(f"  - [{e.code}] {e.message}" for e in result.errors)
    if result.warnings:
        lines.append("Warnings:")
        lines.extend(f"  - [{w.code}] {w.message}" for w in result.warnings)
    return "\n".join(lines)
