# tests/unit/pipeline/test_unit_context_builder.py — v1
"""Tests for pipeline/context_builder.py."""

from __future__ import annotations

from toolfactory.core.models import CourseAnalysis, ToolDesign
from toolfactory.pipeline.context_builder import (
    DEFAULT_CALCULATION,
    DEFAULT_GO,
    DEFAULT_MODULE,
    DEFAULT_NO_GO,
    DEFAULT_TAGLINE,
    DEFAULT_TOOL_NAME,
    build_builder_context,
)
from toolfactory.validation.matching import WholeWordMatcher


class TestBuildBuilderContext:
    def test_sample(self, sample_context):
        assert sample_context.tool_name == "Find Your Power of One"
        assert sample_context.module_reference == "Sprint 6: Cash Flow Story"
        assert [i.label for i in sample_context.framework_items] == [
            "LEVER 1: YOUR PRICE", "LEVER 2: YOUR VOLUME", "LEVER 3: YOUR COGS",
        ]
        assert [i.placeholder for i in sample_context.framework_items] == [
            "e.g., 120", "e.g., 500", "e.g., 3000",
        ]
        assert [t.use_in for t in sample_context.terminology] == ["label", "resultSection"]
        assert sample_context.expert_quote.source == "Alan Miltz"
        assert sample_context.checklist == ["We know how each lever moves cash"]
        assert sample_context.calculation == "cash = price * volume - cogs * volume"
        assert sample_context.verdict_criteria.go == "Cash impact > 0"
        assert sample_context.verdict_criteria.no_go == "Cash impact <= 0"

    def test_defaults_when_silent(self):
        context = build_builder_context(CourseAnalysis(), ToolDesign())
        assert context.tool_name == DEFAULT_TOOL_NAME
        assert context.tool_tagline == DEFAULT_TAGLINE
        assert context.module_reference == DEFAULT_MODULE
        assert context.calculation == DEFAULT_CALCULATION
        assert context.verdict_criteria.go == DEFAULT_GO
        assert context.verdict_criteria.no_go == DEFAULT_NO_GO
        assert context.framework_items == []
        assert context.expert_quote is None

    def test_deterministic(self, sample_analysis, sample_design):
        first = build_builder_context(sample_analysis, sample_design)
        second = build_builder_context(sample_analysis, sample_design)
        assert first == second

    def test_every_item_once_in_order(self, sample_analysis, sample_design):
        design = sample_design.model_copy(update={"inputs": list(reversed(sample_design.inputs))})
        context = build_builder_context(sample_analysis, design)
        assert [i.number for i in context.framework_items] == [1, 2, 3]

    def test_label_fallbacks(self):
        analysis = CourseAnalysis.model_validate({
            "moduleTitle": "M",
            "deepContent": {"numberedFramework": {"items": [
                {"number": 1, "name": "Price", "fullLabel": "LEVER 1: PRICE"},
                {"number": 2, "name": "Volume"},
                {"number": 3},
            ]}},
        })
        context = build_builder_context(analysis, ToolDesign())
        assert [i.label for i in context.framework_items] == [
            "LEVER 1: PRICE", "Volume", "Item 3",
        ]
        assert [i.placeholder for i in context.framework_items] == [
            "e.g., 1000", "e.g., 2000", "e.g., 3000",
        ]

    def test_input_type_from_matching_input(self, sample_analysis, sample_design):
        inputs = [
            i.model_copy(update={"type": "select"}) if i.name == "cogs" else i
            for i in sample_design.inputs
        ]
        context = build_builder_context(
            sample_analysis, sample_design.model_copy(update={"inputs": inputs}),
        )
        assert [i.input_type for i in context.framework_items] == ["number", "number", "select"]

    def test_phases_carried(self, sample_analysis, sample_design_data):
        sample_design_data["phases"] = [{"id": "p1", "summaryTemplate": "x"}]
        sample_design_data["defaultPath"] = ["p1"]
        context = build_builder_context(
            sample_analysis, ToolDesign.model_validate(sample_design_data),
        )
        assert [p.id for p in context.phases] == ["p1"]
        assert context.default_path == ["p1"]

    def test_matcher_decides_input_pairing(self):
        analysis = CourseAnalysis.model_validate({
            "deepContent": {"numberedFramework": {"items": [
                {"number": 1, "name": "Price"},
            ]}},
        })
        design = ToolDesign.model_validate({"inputs": [
            {"name": "prices", "type": "select", "label": "YOUR PRICES",
             "placeholder": "pick a band"},
            {"name": "price", "type": "number", "label": "YOUR PRICE", "placeholder": "e.g., 99"},
        ]})

        loose = build_builder_context(analysis, design)
        assert loose.framework_items[0].input_type == "select"

        strict = build_builder_context(analysis, design, matcher=WholeWordMatcher())
        assert strict.framework_items[0].input_type == "number"
        assert strict.framework_items[0].placeholder == "e.g., 99"
