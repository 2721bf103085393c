# tests/conftest.py — v1
"""Shared test fixtures for all unit tests.

Provides a scripted fake LLM client, sample extraction/design/context
objects and an HTML factory. No network access — all AI calls are faked.
"""

from __future__ import annotations

import json
from typing import Callable

import pytest

from toolfactory.config.settings import Settings
from toolfactory.core.models import (
    BuilderContext,
    CourseAnalysis,
    ToolDesign,
)
from toolfactory.llm.base_client import BaseLLMClient
from toolfactory.llm.gateway import AIGateway
from toolfactory.llm.models import CompletionRequest, CompletionResponse, TokenUsage
from toolfactory.pipeline.context_builder import build_builder_context


# === ENVIRONMENT ===


@pytest.fixture(autouse=True)
def _clean_settings_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep developer shell variables (API keys, log level) out of Settings."""
    for name in Settings.model_fields:
        monkeypatch.delenv(name.upper(), raising=False)
        monkeypatch.delenv(name, raising=False)


# === FAKE LLM ===


class FakeLLMClient(BaseLLMClient):
    """Scripted provider.

    `routes` maps a lowercase substring of the system prompt to a reply
    (str), an exception to raise, or a list of those consumed in order
    (the last entry repeats). `default` answers unmatched prompts.
    """

    def __init__(
        self,
        name: str = "fake",
        model: str = "fake-model",
        available: bool = True,
        routes: dict[str, object] | None = None,
        default: object = "ok",
    ) -> None:
        self._name = name
        self._model = model
        self._available = available
        self.routes = dict(routes or {})
        self.default = default
        self.requests: list[CompletionRequest] = []

    def is_available(self) -> bool:
        return self._available

    @property
    def provider_name(self) -> str:
        return self._name

    @property
    def model_name(self) -> str:
        return self._model

    async def complete(self, request: CompletionRequest) -> CompletionResponse:
        self.requests.append(request)
        reply = self._reply_for(request.system_prompt.lower())
        if isinstance(reply, Exception):
            raise reply
        return CompletionResponse(
            content=str(reply),
            provider=self._name,
            model=self._model,
            token_usage=TokenUsage(input_tokens=100, output_tokens=50),
            duration_ms=5,
        )

    def _reply_for(self, system_prompt: str) -> object:
        for key, reply in self.routes.items():
            if key in system_prompt:
                if isinstance(reply, list):
                    return reply.pop(0) if len(reply) > 1 else reply[0]
                return reply
        return self.default

    def requests_for(self, key: str) -> list[CompletionRequest]:
        return [r for r in self.requests if key in r.system_prompt.lower()]


@pytest.fixture
def fake_client_cls() -> type[FakeLLMClient]:
    return FakeLLMClient


# === FIXTURES: Sample data ===


QUOTE = "Cash flow is the oxygen of a company, without it the business suffocates."


@pytest.fixture
def sample_analysis_data() -> dict:
    """Course analysis as the course analyst answers it (camelCase)."""
    return {
        "moduleTitle": "Sprint 6: Cash Flow Story",
        "coreConcept": "Small lever changes create big cash impact",
        "learningObjective": "Decide which cash lever to pull first",
        "deepContent": {
            "keyTerminology": [
                {"term": "Power of One", "definition": "1% change impact",
                 "howToUseInTool": "section label"},
                {"term": "Cash Flow Story", "definition": "Narrative of cash",
                 "howToUseInTool": "result section"},
            ],
            "numberedFramework": {
                "frameworkName": "The 3 Cash Levers",
                "items": [
                    {"number": 1, "name": "Price", "fullLabel": "LEVER 1: PRICE",
                     "definition": "A 1% price rise flows straight to profit",
                     "toolInputLabel": "LEVER 1: YOUR PRICE"},
                    {"number": 2, "name": "Volume", "fullLabel": "LEVER 2: VOLUME",
                     "definition": "Units sold per period",
                     "toolInputLabel": "LEVER 2: YOUR VOLUME"},
                    {"number": 3, "name": "COGS", "fullLabel": "LEVER 3: COGS",
                     "definition": "Direct cost of each unit sold",
                     "toolInputLabel": "LEVER 3: YOUR COGS"},
                ],
            },
            "expertWisdom": [{"quote": QUOTE, "source": "Alan Miltz"}],
            "sprintChecklist": [{"item": "We know how each lever moves cash"}],
        },
        "decisionCriteria": {
            "goCondition": "Cash impact is positive",
            "noGoCondition": "Cash impact is negative",
        },
    }


@pytest.fixture
def sample_design_data() -> dict:
    """Tool design covering all 3 items and both terms."""
    return {
        "toolDesign": {
            "name": "Find Your Power of One",
            "tagline": "Decide which lever to pull first",
        },
        "inputs": [
            {"name": "price", "type": "number", "label": "LEVER 1: YOUR PRICE",
             "placeholder": "e.g., 120", "helpText": "Power of One starts with price"},
            {"name": "volume", "type": "number", "label": "LEVER 2: YOUR VOLUME",
             "placeholder": "e.g., 500", "helpText": "Units that shape your Cash Flow Story"},
            {"name": "cogs", "type": "number", "label": "LEVER 3: YOUR COGS",
             "helpText": "Direct cost per unit"},
        ],
        "processing": {"formula": "cash = price * volume - cogs * volume"},
        "output": {
            "decision": {"type": "GO_NO_GO", "goThreshold": "Cash impact > 0",
                         "noGoThreshold": "Cash impact <= 0"},
        },
        "deepContentIntegration": {
            "expertQuoteToDisplay": {"quote": QUOTE, "source": "Alan Miltz",
                                     "displayLocation": "results"},
        },
    }


@pytest.fixture
def sample_analysis(sample_analysis_data: dict) -> CourseAnalysis:
    return CourseAnalysis.model_validate(sample_analysis_data)


@pytest.fixture
def sample_design(sample_design_data: dict) -> ToolDesign:
    return ToolDesign.model_validate(sample_design_data)


@pytest.fixture
def sample_context(sample_analysis: CourseAnalysis, sample_design: ToolDesign) -> BuilderContext:
    return build_builder_context(sample_analysis, sample_design)


SLIDE_CSS = (
    ".slide { position: absolute; inset: 0; opacity: 0; }\n"
    ".slide.active { opacity: 1; }\n"
    ".slide.past { transform: translateX(-100%); }\n"
)


@pytest.fixture
def html_factory() -> Callable[..., str]:
    """Build a valid artifact for a context, optionally dropping parts."""

    def _make(
        context: BuilderContext,
        drop_labels: tuple[str, ...] = (),
        drop_terms: tuple[str, ...] = (),
        include_quote: bool = True,
        css: str = SLIDE_CSS,
    ) -> str:
        slides = [
            f'<section class="slide"><label>{item.label}</label><input type="number"></section>'
            for item in context.framework_items
            if item.label not in drop_labels
        ]
        terms = [
            f"<p>{t.term}</p>" for t in context.terminology if t.term not in drop_terms
        ]
        quote = (
            f"<blockquote>{context.expert_quote.quote} - {context.expert_quote.source}"
            "</blockquote>"
            if include_quote and context.expert_quote
            else ""
        )
        return (
            "<!DOCTYPE html>\n<html><head><style>\n"
            f"{css}</style></head><body>\n"
            f"<h1>{context.tool_name}</h1>\n"
            + "\n".join(slides)
            + "\n".join(terms)
            + quote
            + "\n</body></html>"
        )

    return _make


@pytest.fixture
def pipeline_routes(
    sample_analysis_data: dict,
    sample_design_data: dict,
    sample_context: BuilderContext,
    html_factory: Callable[..., str],
) -> dict[str, object]:
    """System-prompt routes answering every stage with valid output."""
    return {
        "content summarizer": "MODULE: Sprint 6\nLEVER 1: PRICE\nLEVER 2: VOLUME",
        "course analyst": json.dumps(sample_analysis_data),
        "knowledge application architect": "```json\n" + json.dumps(sample_design_data) + "\n```",
        "tool builder": html_factory(sample_context),
        "qa reviewer": json.dumps({"overall_quality": 0.9, "issues": [], "summary": "Solid"}),
    }


@pytest.fixture
def fake_llm(pipeline_routes: dict[str, object]) -> FakeLLMClient:
    return FakeLLMClient(name="anthropic", model="claude-sonnet-4-20250514", routes=pipeline_routes)


@pytest.fixture
def gateway(fake_llm: FakeLLMClient) -> AIGateway:
    return AIGateway(primary=fake_llm, retry_configs={})
