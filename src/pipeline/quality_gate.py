# src/pipeline/quality_gate.py — v1
"""Quality gate — fold a run's verdicts into the job's QAReport.

Scored checks: extraction, design and output validation, plus the AI
review when it ran. A check scores when it passed. Only validation errors
and halts fail the report; review scores are advisory.
"""

from __future__ import annotations

from toolfactory.core.models import QAFinding, QAReport
from toolfactory.pipeline.state import PipelineState
from toolfactory.validation.models import ValidationResult

VALIDATION_CHECKS = ("extraction", "design", "output")


def build_qa_report(
    state: PipelineState,
    halted_stage: str | None = None,
    error: str | None = None,
    min_review_score: float = 0.5,
) -> QAReport:
    """Build the QA report for one pipeline run (success or halt).

    Args:
        state: Final pipeline state.
        halted_stage: Stage that stopped the run, if any.
        error: Provider or runtime error text, preserved verbatim.
        min_review_score: Review score below which a warning finding is added.
    """
    findings: list[QAFinding] = []
    score = 0
    max_score = len(VALIDATION_CHECKS)

    for check in VALIDATION_CHECKS:
        result = state.validation_results.get(check)
        if result is None:
            continue
        findings.extend(_findings(check, result))
        if result.passed:
            score += 1

    review_score: float | None = None
    if state.review is not None:
        max_score += 1
        review_score = float(state.review.get("overall_quality", 0.5))
        if review_score >= min_review_score:
            score += 1
        else:
            findings.append(QAFinding(
                check="review",
                code="LOW_REVIEW_SCORE",
                severity="warning",
                message=state.review.get("summary") or "AI review scored the tool low.",
                expected=f">= {min_review_score:.2f}",
                actual=f"{review_score:.2f}",
            ))
        for issue in state.review.get("issues", []):
            if issue.get("severity") == "high":
                findings.append(QAFinding(
                    check="review",
                    code="REVIEW_ISSUE",
                    severity="warning",
                    message=issue.get("description", ""),
                    field=issue.get("category", ""),
                    expected=issue.get("suggestion", ""),
                ))

    has_errors = any(f.severity == "error" for f in findings)
    passed = halted_stage is None and error is None and not has_errors

    return QAReport(
        passed=passed,
        score=score,
        max_score=max_score,
        findings=findings,
        summary=_summary(passed, findings, halted_stage, error),
        halted_stage=halted_stage,
        error=error,
        review_score=review_score,
        fix_attempts=state.output_fix_attempts,
    )


def _findings(check: str, result: ValidationResult) -> list[QAFinding]:
    out = [
        QAFinding(check=check, severity="error", **issue.model_dump())
        for issue in result.errors
    ]
    out.extend(
        QAFinding(check=check, severity="warning", **issue.model_dump())
        for issue in result.warnings
    )
    return out


def _summary(
    passed: bool,
    findings: list[QAFinding],
    halted_stage: str | None,
    error: str | None,
) -> str:
    errors = sum(1 for f in findings if f.severity == "error")
    warnings = len(findings) - errors
    if passed:
        return f"All quality checks passed ({warnings} warning(s))."
    if error:
        return f"Pipeline halted at {halted_stage or 'unknown stage'}: {error}"
    return (
        f"Pipeline halted at {halted_stage or 'quality gate'} with "
        f"{errors} error(s) and {warnings} warning(s)."
    )
