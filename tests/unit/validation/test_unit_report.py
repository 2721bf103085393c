# tests/unit/validation/test_unit_report.py — v1
"""Tests for validation/report.py and ValidationResult helpers."""

from __future__ import annotations

from toolfactory.validation.models import ValidationIssue, ValidationResult
from toolfactory.validation.report import format_validation_result


def _issue(code: str, message: str = "msg") -> ValidationIssue:
    return ValidationIssue(code=code, message=message, field="f", expected="e", actual="a")


class TestFormatValidationResult:
    def test_passed_without_issues(self):
        result = ValidationResult.from_issues("extraction", [], [])
        assert format_validation_result(result) == "Validation [extraction]: PASSED"

    def test_failed_lists_errors_then_warnings(self):
        result = ValidationResult.from_issues(
            "design",
            [_issue("FRAMEWORK_ITEM_NOT_MAPPED", "Item missing")],
            [_issue("QUOTE_NOT_PLACED", "No quote")],
        )
        text = format_validation_result(result)
        lines = text.splitlines()
        assert lines[0] == "Validation [design]: FAILED"
        assert lines[1] == "Errors:"
        assert lines[2] == "  - [FRAMEWORK_ITEM_NOT_MAPPED] Item missing"
        assert lines[3] == "Warnings:"
        assert lines[4] == "  - [QUOTE_NOT_PLACED] No quote"


class TestValidationResult:
    def test_passed_follows_errors(self):
        assert ValidationResult.from_issues("output", [], [_issue("W")]).passed
        assert not ValidationResult.from_issues("output", [_issue("E")], []).passed

    def test_merged_keeps_stage(self):
        design = ValidationResult.from_issues("design", [], [_issue("W1")])
        phases = ValidationResult.from_issues("phases", [_issue("E1")], [])
        merged = design.merged_with(phases)
        assert merged.stage == "design"
        assert not merged.passed
        assert merged.error_codes() == ["E1"]
        assert merged.warning_codes() == ["W1"]
