# src/core/models.py — v1
"""Shared domain types: course analysis, tool design, builder context, QA report.

AI stages answer in camelCase JSON; every model accepts both the camelCase
wire names and the snake_case field names.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _WireModel(BaseModel):
    """Base for models exchanged with AI stages (camelCase on the wire)."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


# === COURSE ANALYSIS (extraction result) ===


class FrameworkItem(_WireModel):
    """One numbered element of a pedagogical framework (e.g. "Lever 3")."""

    number: int
    name: str = ""
    full_label: str = ""
    definition: str = ""
    tool_input_label: str = ""


class NumberedFramework(_WireModel):
    """A named framework and its ordered items."""

    framework_name: str = ""
    items: list[FrameworkItem] = Field(default_factory=list)


class TerminologyEntry(_WireModel):
    """Course-specific term with its definition and a usage hint."""

    term: str
    definition: str = ""
    how_to_use_in_tool: str = ""


class ExpertQuote(_WireModel):
    quote: str
    source: str = ""
    principle: str = ""


class ReflectionQuestion(_WireModel):
    question: str
    section: str = ""
    tool_input_opportunity: str = ""


class ChecklistItem(_WireModel):
    item: str
    validation_type: str = ""
    tool_validation: str = ""


class InputRange(_WireModel):
    """Numeric guidance inferred from the course (e.g. "30-45 days")."""

    field_id: str
    field_label: str = ""
    inferred_min: float | None = None
    inferred_max: float | None = None
    source_quote: str = ""
    confidence: str = ""


class DeepContent(_WireModel):
    """Course-specific knowledge that makes a tool distinctive."""

    key_terminology: list[TerminologyEntry] = Field(default_factory=list)
    numbered_framework: NumberedFramework | None = None
    reflection_questions: list[ReflectionQuestion] = Field(default_factory=list)
    expert_wisdom: list[ExpertQuote] = Field(default_factory=list)
    sprint_checklist: list[ChecklistItem] = Field(default_factory=list)
    input_ranges: list[InputRange] = Field(default_factory=list)


class LegacyFramework(_WireModel):
    """Unnumbered framework expressed as a list of steps."""

    name: str = ""
    steps: list[str] = Field(default_factory=list)
    inputs: list[str] = Field(default_factory=list)
    outputs: list[str] = Field(default_factory=list)


class FormulaVariable(_WireModel):
    name: str
    description: str = ""
    unit: str = ""


class Formula(_WireModel):
    name: str = ""
    formula: str = ""
    variables: list[FormulaVariable] = Field(default_factory=list)
    interpretation: str = ""


class DecisionCriteria(_WireModel):
    go_condition: str = ""
    no_go_condition: str = ""
    thresholds: list[str] = Field(default_factory=list)


class ToolOpportunity(_WireModel):
    suggested_tool_name: str = ""
    tool_purpose: str = ""
    value_proposition: str = ""


class CourseAnalysis(_WireModel):
    """Structured knowledge extracted from source content."""

    module_title: str = ""
    core_concept: str = ""
    learning_objective: str = ""
    deep_content: DeepContent | None = None
    framework: LegacyFramework | None = None
    formulas: list[Formula] = Field(default_factory=list)
    decision_criteria: DecisionCriteria | None = None
    tool_opportunity: ToolOpportunity | None = None

    @property
    def framework_items(self) -> list[FrameworkItem]:
        """Numbered framework items, empty when none were extracted."""
        if self.deep_content is None or self.deep_content.numbered_framework is None:
            return []
        return self.deep_content.numbered_framework.items

    @property
    def terminology(self) -> list[TerminologyEntry]:
        return self.deep_content.key_terminology if self.deep_content else []

    @property
    def expert_quotes(self) -> list[ExpertQuote]:
        return self.deep_content.expert_wisdom if self.deep_content else []

    @property
    def reflection_questions(self) -> list[ReflectionQuestion]:
        return self.deep_content.reflection_questions if self.deep_content else []


# === TOOL DESIGN ===


class DesignInput(_WireModel):
    """One input field of the designed tool. `name` is its stable id."""

    name: str
    type: str = "number"
    label: str = ""
    placeholder: str = ""
    help_text: str = ""
    required: bool = True
    course_reference: str = ""
    options: list[str] = Field(default_factory=list)
    reflection_question_basis: str = ""


class BranchCondition(_WireModel):
    """Conditional jump out of a phase."""

    input_name: str = ""
    operator: str = ""
    value: str = ""
    target_phase: str = ""


class Phase(_WireModel):
    """One step of a multi-step wizard tool."""

    id: str
    name: str = ""
    description: str = ""
    inputs: list[DesignInput] = Field(default_factory=list)
    summary_template: str = ""
    branch_conditions: list[BranchCondition] = Field(default_factory=list)


class ToolIdentity(_WireModel):
    name: str = ""
    tagline: str = ""
    course_correlation: str = ""


class Processing(_WireModel):
    logic: str = ""
    formula: str = ""
    course_framework: str = ""


class PrimaryResult(_WireModel):
    label: str = ""
    format: str = ""
    interpretation: str = ""


class DecisionBlock(_WireModel):
    type: str = ""
    criteria: str = ""
    go_threshold: str = ""
    no_go_threshold: str = ""


class NextAction(_WireModel):
    on_go: str = ""
    on_no_go: str = ""


class ToolOutput(_WireModel):
    primary_result: PrimaryResult | None = None
    decision: DecisionBlock | None = None
    next_action: NextAction | None = None


class QuoteDisplay(_WireModel):
    quote: str = ""
    source: str = ""
    display_location: str = ""


class DeepContentIntegration(_WireModel):
    """Hints on where extracted knowledge surfaces in the tool."""

    expert_quote_to_display: QuoteDisplay | None = None


class CourseAlignment(_WireModel):
    module_objective: str = ""
    tool_delivery: str = ""
    knowledge_reinforcement: str = ""


class ToolDesign(_WireModel):
    """Interactive tool specification derived from a CourseAnalysis."""

    tool_design: ToolIdentity = Field(default_factory=ToolIdentity)
    inputs: list[DesignInput] = Field(default_factory=list)
    processing: Processing = Field(default_factory=Processing)
    output: ToolOutput = Field(default_factory=ToolOutput)
    deep_content_integration: DeepContentIntegration | None = None
    course_alignment: CourseAlignment | None = None
    phases: list[Phase] = Field(default_factory=list)
    default_path: list[str] = Field(default_factory=list)


# === BUILDER CONTEXT ===


TermUsage = Literal["label", "helpText", "resultSection"]


class BuilderFrameworkItem(_WireModel):
    number: int
    label: str
    definition: str = ""
    input_type: str = "number"
    placeholder: str = ""


class BuilderTerm(_WireModel):
    term: str
    definition: str = ""
    use_in: TermUsage = "helpText"


class BuilderQuote(_WireModel):
    quote: str
    source: str = ""


class VerdictCriteria(_WireModel):
    go: str
    no_go: str


class BuilderContext(_WireModel):
    """Flattened, validation-passed context handed to generation."""

    tool_name: str
    tool_tagline: str
    module_reference: str
    framework_items: list[BuilderFrameworkItem] = Field(default_factory=list)
    terminology: list[BuilderTerm] = Field(default_factory=list)
    expert_quote: BuilderQuote | None = None
    checklist: list[str] = Field(default_factory=list)
    calculation: str = ""
    verdict_criteria: VerdictCriteria
    phases: list[Phase] = Field(default_factory=list)
    default_path: list[str] = Field(default_factory=list)


# === QA REPORT ===


class QAFinding(BaseModel):
    """One problem (or observation) surfaced to the human reviewer."""

    check: str
    code: str
    severity: Literal["error", "warning"]
    message: str
    field: str = ""
    expected: str = ""
    actual: str = ""


class QAReport(BaseModel):
    """Structured verdict attached to a job after every pipeline run."""

    passed: bool
    score: int
    max_score: int
    findings: list[QAFinding] = Field(default_factory=list)
    summary: str = ""
    halted_stage: str | None = None
    error: str | None = None
    review_score: float | None = None
    fix_attempts: int = 0  # automatic output repairs made during the run
    generated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def error_count(self) -> int:
        return sum(1 for f in self.findings if f.severity == "error")

    @property
    def warning_count(self) -> int:
        return sum(1 for f in self.findings if f.severity == "warning")
