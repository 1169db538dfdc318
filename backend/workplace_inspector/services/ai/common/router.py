"""AI router: resolves provider + model for a scope from settings."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from workplace_inspector.core.config import Settings, get_settings

from .providers import BaseProvider, get_provider

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedConfig:
    """Final resolved provider + model for a scope."""

    provider: BaseProvider
    model: str
    temperature: float
    max_tokens: int
    timeout_seconds: float


def resolve(scope: str, *, settings: Settings | None = None) -> ResolvedConfig:
    """Resolve provider + model for a given *scope*.

    Resolution chain (first non-empty wins):
      1. ENV scope-specific: ``AI_VISION_PROVIDER`` / ``AI_VISION_MODEL``.
      2. Fallback: ``"openai"`` with the provider's default model.

    Model validation: if the resolved model is not in the allowlist for
    that provider, we fall back to the first allowed model.

    Raises ``ProviderConfigError`` when the provider cannot be built.
    """
    settings = settings or get_settings()

    # --- 1. Determine provider name ---
    provider_name = ""
    if scope == "vision":
        provider_name = settings.ai_vision_provider
    if not provider_name:
        provider_name = "openai"

    # --- 2. Determine model ---
    model = ""
    if scope == "vision":
        model = settings.ai_vision_model.strip()

    # --- 3. Validate model against allowlist ---
    allowed_models = settings.ai_allowed_models.get(provider_name, [])
    if allowed_models and model and model not in allowed_models:
        logger.warning(
            "Model %r not in allowlist for %r, using first allowed: %r",
            model,
            provider_name,
            allowed_models[0],
        )
        model = allowed_models[0]

    if allowed_models and not model:
        model = allowed_models[0]

    # --- 4. Build provider instance ---
    provider = get_provider(provider_name, settings)

    return ResolvedConfig(
        provider=provider,
        model=model,
        temperature=settings.ai_temperature,
        max_tokens=settings.ai_max_tokens,
        timeout_seconds=settings.ai_timeout_seconds,
    )
