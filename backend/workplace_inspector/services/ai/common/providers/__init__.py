"""Provider factory: returns the configured provider or raises ``ProviderConfigError``."""

from __future__ import annotations

import logging

from workplace_inspector.core.config import Settings, get_settings

from .base import BaseProvider, ProviderResult
from .mock import MockProvider

logger = logging.getLogger(__name__)

__all__ = ["get_provider", "BaseProvider", "ProviderResult", "MockProvider", "ProviderConfigError"]


class ProviderConfigError(RuntimeError):
    """The selected provider cannot be used with the current configuration."""


def get_provider(provider_name: str, settings: Settings | None = None) -> BaseProvider:
    """Return a provider instance for *provider_name*.

    A provider outside the allowlist, or one without its API key, raises
    ``ProviderConfigError``. The mock provider is only returned when it is
    requested by name.
    """
    settings = settings or get_settings()
    name = provider_name.lower().strip()

    if name not in settings.ai_allowed_providers:
        logger.error("Provider %r not in allowlist %r", name, settings.ai_allowed_providers)
        raise ProviderConfigError(f"Vision provider {name!r} is not allowed")

    if name == "mock":
        return MockProvider()

    if name == "claude":
        if not settings.anthropic_api_key:
            logger.error("ANTHROPIC_API_KEY not set")
            raise ProviderConfigError("ANTHROPIC_API_KEY is not configured")
        from .claude import ClaudeProvider

        return ClaudeProvider(api_key=settings.anthropic_api_key)

    if name == "openai":
        if not settings.openai_api_key:
            logger.error("OPENAI_API_KEY not set")
            raise ProviderConfigError("OPENAI_API_KEY is not configured")
        from .openai import OpenAIProvider

        return OpenAIProvider(api_key=settings.openai_api_key)

    logger.error("Unknown provider %r", name)
    raise ProviderConfigError(f"Unknown vision provider {name!r}")
