# src/pipeline/plugin_kit/models.py — v1
"""Agent plugin models: AgentMetadata, AgentOutput."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class AgentMetadata(BaseModel):
    """Metadata about an agent execution, attached to every AgentOutput."""

    agent_name: str
    agent_version: str
    execution_time_ms: int
    llm_calls: int
    tokens_used: int
    prompt_hash: str | None = None
    provider: str | None = None
    used_fallback: bool = False


class AgentOutput(BaseModel):
    """Standard return type for all BaseAgent.execute() calls.

    `parse_failed` marks outputs built from a fallback record because the
    AI response held no usable structure.
    """

    data: dict[str, Any]
    confidence: float = 1.0
    metadata: AgentMetadata
    parse_failed: bool = False
    warnings: list[str] = Field(default_factory=list)
