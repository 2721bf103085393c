# tests/unit/core/test_unit_core_models.py — v1
"""Tests for core/models.py — wire aliases and derived accessors."""

from __future__ import annotations

from toolfactory.core.models import (
    CourseAnalysis,
    QAFinding,
    QAReport,
    ToolDesign,
)


class TestCourseAnalysis:
    def test_parses_camel_case(self, sample_analysis_data):
        analysis = CourseAnalysis.model_validate(sample_analysis_data)
        assert analysis.module_title == "Sprint 6: Cash Flow Story"
        assert len(analysis.framework_items) == 3
        assert analysis.framework_items[0].tool_input_label == "LEVER 1: YOUR PRICE"

    def test_accepts_snake_case(self):
        analysis = CourseAnalysis(module_title="M1")
        assert analysis.module_title == "M1"

    def test_empty_accessors(self):
        analysis = CourseAnalysis()
        assert analysis.framework_items == []
        assert analysis.terminology == []
        assert analysis.expert_quotes == []
        assert analysis.reflection_questions == []

    def test_ignores_unknown_keys(self):
        analysis = CourseAnalysis.model_validate({"moduleTitle": "M", "surprise": 1})
        assert analysis.module_title == "M"

    def test_dump_by_alias(self, sample_analysis):
        dumped = sample_analysis.model_dump(by_alias=True)
        assert "moduleTitle" in dumped
        assert "numberedFramework" in dumped["deepContent"]


class TestToolDesign:
    def test_defaults(self):
        design = ToolDesign()
        assert design.inputs == []
        assert design.phases == []
        assert design.tool_design.name == ""

    def test_parses_nested(self, sample_design_data):
        design = ToolDesign.model_validate(sample_design_data)
        assert [i.name for i in design.inputs] == ["price", "volume", "cogs"]
        assert design.output.decision.go_threshold == "Cash impact > 0"
        assert design.deep_content_integration.expert_quote_to_display.source == "Alan Miltz"

    def test_phase_summary_template_alias(self):
        design = ToolDesign.model_validate({
            "phases": [{"id": "p1", "summaryTemplate": "{{price}}", "inputs": [{"name": "price"}]}],
            "defaultPath": ["p1"],
        })
        assert design.phases[0].summary_template == "{{price}}"
        assert design.default_path == ["p1"]


class TestQAReport:
    def test_counts(self):
        report = QAReport(
            passed=False,
            score=1,
            max_score=3,
            findings=[
                QAFinding(check="design", code="A", severity="error", message="m"),
                QAFinding(check="design", code="B", severity="warning", message="m"),
                QAFinding(check="output", code="C", severity="warning", message="m"),
            ],
        )
        assert report.error_count == 1
        assert report.warning_count == 2
