# src/validation/models.py — v1
"""Validation result types shared by every validation stage."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, Field

ValidationStage = Literal["extraction", "design", "output", "phases"]


class ValidationIssue(BaseModel):
    """A structured problem found by a validator.

    `expected` and `actual` are the primary debugging surface when the
    pipeline halts, so they are always populated.
    """

    code: str
    message: str
    field: str
    expected: str
    actual: str


class ValidationResult(BaseModel):
    """Outcome of one validation stage. Errors block, warnings do not."""

    passed: bool
    errors: list[ValidationIssue] = Field(default_factory=list)
    warnings: list[ValidationIssue] = Field(default_factory=list)
    stage: ValidationStage
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def from_issues(
        cls,
        stage: ValidationStage,
        errors: list[ValidationIssue],
        warnings: list[ValidationIssue],
    ) -> ValidationResult:
        return cls(passed=not errors, errors=errors, warnings=warnings, stage=stage)

    def error_codes(self) -> list[str]:
        return [e.code for e in self.errors]

    def warning_codes(self) -> list[str]:
        return [w.code for w in self.warnings]

    def merged_with(self, other: ValidationResult) -> ValidationResult:
        """Combine issues of another result into this stage's result."""
        return ValidationResult.from_issues(
            self.stage,
            [*self.errors, *other.errors],
            [*self.warnings, *other.warnings],
        )
