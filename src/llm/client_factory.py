# src/llm/client_factory.py — v1
"""Factory: instantiate provider clients and the gateway from settings."""

from __future__ import annotations

import importlib
import logging
from typing import TYPE_CHECKING

from toolfactory.config.settings import Settings
from toolfactory.llm.base_client import BaseLLMClient
from toolfactory.llm.gateway import AIGateway

if TYPE_CHECKING:
    from toolfactory.tracking.cost_tracker import CostTracker

logger = logging.getLogger(__name__)

# Registry of provider name → adapter class path (lazy import).
_PROVIDER_REGISTRY: dict[str, str] = {
    "anthropic": "toolfactory.llm.adapters.anthropic_adapter.AnthropicAdapter",
    "google": "toolfactory.llm.adapters.google_adapter.GoogleAdapter",
}


class UnsupportedProviderError(ValueError):
    """Raised when a provider is not registered."""


def create_llm_client(provider: str, settings: Settings | None = None) -> BaseLLMClient:
    """Instantiate the adapter for `provider` with keys and models from settings.

    Raises:
        UnsupportedProviderError: If provider is not registered.
    """
    if provider not in _PROVIDER_REGISTRY:
        raise UnsupportedProviderError(
            f"Unsupported LLM provider: {provider!r}. "
            f"Available: {', '.join(sorted(_PROVIDER_REGISTRY))}"
        )

    settings = settings or Settings()
    adapter_cls = _import_class(_PROVIDER_REGISTRY[provider])

    init_kwargs: dict[str, object] = {"timeout_s": settings.llm_timeout_s}
    if provider == "anthropic":
        init_kwargs.update(
            model=settings.anthropic_model,
            light_model=settings.anthropic_light_model,
            api_key=settings.anthropic_api_key,
        )
    elif provider == "google":
        init_kwargs.update(model=settings.google_model, api_key=settings.google_api_key)

    logger.debug("Creating LLM client: provider=%s", provider)
    return adapter_cls(**init_kwargs)


def create_gateway(
    settings: Settings | None = None,
    cost_tracker: CostTracker | None = None,
) -> AIGateway:
    """Build the process-wide gateway: configured primary, the other as fallback."""
    settings = settings or Settings()
    primary_name = settings.llm_primary_provider
    secondary_name = next(p for p in _PROVIDER_REGISTRY if p != primary_name)

    gateway = AIGateway(
        primary=create_llm_client(primary_name, settings),
        secondary=create_llm_client(secondary_name, settings),
        cost_tracker=cost_tracker,
    )
    logger.info(
        "AI gateway ready: primary=%s secondary=%s active=%s",
        primary_name, secondary_name, gateway.primary_provider or "none",
    )
    return gateway


def register_provider(name: str, class_path: str) -> None:
    """Register a custom provider adapter (class implementing BaseLLMClient)."""
    _PROVIDER_REGISTRY[name] = class_path
    logger.info("Registered LLM provider: %s → %s", name, class_path)


def _import_class(class_path: str) -> type:
    """Dynamically import a class from its fully qualified path."""
    module_path, class_name = class_path.rsplit(".", 1)
    module = importlib.import_module(module_path)
    return getattr(module, class_name)
