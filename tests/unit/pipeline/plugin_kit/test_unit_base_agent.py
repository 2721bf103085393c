# tests/unit/pipeline/plugin_kit/test_unit_base_agent.py — v1
"""Tests for pipeline/plugin_kit/base_agent.py — BaseAgent ABC."""

from __future__ import annotations

import pytest

from toolfactory.llm.gateway import AIGateway
from toolfactory.pipeline.plugin_kit.base_agent import BaseAgent
from toolfactory.pipeline.plugin_kit.models import AgentOutput
from toolfactory.pipeline.state import PipelineState


class EchoAgent(BaseAgent):
    @property
    def name(self) -> str:
        return "echo"

    @property
    def version(self) -> str:
        return "0.1.0"

    @property
    def description(self) -> str:
        return "Echo the source content"

    async def execute(self, state, gateway):
        response, prompt_hash, elapsed_ms = await self._complete(
            gateway, state, "You are an echo", state.source_content, use_light_model=True,
        )
        return AgentOutput(
            data={"text": response.content},
            metadata=self._metadata(response, prompt_hash, elapsed_ms),
        )


class TestBaseAgent:
    def test_cannot_instantiate(self):
        with pytest.raises(TypeError):
            BaseAgent()  # type: ignore[abstract]

    @pytest.mark.asyncio
    async def test_complete_routes_through_gateway(self, fake_client_cls):
        client = fake_client_cls(name="anthropic", routes={"echo": "pong"})
        gateway = AIGateway(primary=client, retry_configs={})
        state = PipelineState(job_id="job-1", source_content="ping")

        output = await EchoAgent().execute(state, gateway)

        assert output.data == {"text": "pong"}
        request = client.requests[0]
        assert request.user_prompt == "ping"
        assert request.use_light_model
        meta = output.metadata
        assert meta.agent_name == "echo"
        assert meta.llm_calls == 1
        assert meta.tokens_used == 150
        assert meta.provider == "anthropic"
        assert not meta.used_fallback
        assert len(meta.prompt_hash) == 16

    def test_metadata_without_response(self):
        meta = EchoAgent()._metadata(None, None, 3)
        assert meta.llm_calls == 0
        assert meta.tokens_used == 0
        assert meta.provider is None
