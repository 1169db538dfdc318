"""AI audit - writes one structured log record per provider run."""

from __future__ import annotations

import hashlib
import logging
from typing import Any

from workplace_inspector.core.config import Settings, get_settings

from .providers.base import ProviderResult

logger = logging.getLogger(__name__)

# Scope-dependent audit actions. Falls back to "AI_RUN" for unknown scopes.
SCOPE_ACTIONS: dict[str, str] = {
    "vision": "AI_WORKPLACE_PHOTO_ANALYZED",
}


def build_audit_record(
    *,
    scope: str,
    provider_result: ProviderResult,
    prompt_text: str,
    parsed_output: dict[str, Any] | None,
    settings: Settings | None = None,
    extra_meta: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Build the metadata dict written by :func:`log_ai_run`.

    * PII: prompt and response are always hashed; raw text is only included
      when ``AI_DEBUG_STORE_RAW=true``.
    """
    settings = settings or get_settings()

    record: dict[str, Any] = {
        "action": SCOPE_ACTIONS.get(scope, "AI_RUN"),
        "scope": scope,
        "provider": provider_result.provider,
        "model": provider_result.model,
        "prompt_tokens": provider_result.prompt_tokens,
        "completion_tokens": provider_result.completion_tokens,
        "latency_ms": provider_result.latency_ms,
        "prompt_hash": hashlib.sha256(prompt_text.encode()).hexdigest(),
        "response_hash": hashlib.sha256(provider_result.raw_text.encode()).hexdigest(),
        "output": parsed_output,
    }

    if settings.ai_debug_store_raw:
        record["prompt_raw"] = prompt_text
        record["response_raw"] = provider_result.raw_text

    if extra_meta:
        record.update(extra_meta)

    return record


def log_ai_run(
    *,
    scope: str,
    provider_result: ProviderResult,
    prompt_text: str,
    parsed_output: dict[str, Any] | None,
    settings: Settings | None = None,
    extra_meta: dict[str, Any] | None = None,
) -> dict[str, Any]:
    record = build_audit_record(
        scope=scope,
        provider_result=provider_result,
        prompt_text=prompt_text,
        parsed_output=parsed_output,
        settings=settings,
        extra_meta=extra_meta,
    )
    logger.info(
        "%s provider=%s model=%s tokens=%s/%s latency_ms=%s",
        record["action"],
        record["provider"],
        record["model"],
        record["prompt_tokens"],
        record["completion_tokens"],
        record["latency_ms"],
        extra={"audit": record},
    )
    return record
