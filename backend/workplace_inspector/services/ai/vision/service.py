"""Workplace photo analysis service.

Flow:
- Validate upload (missing / size / media type), then provider config.
- One multimodal call with the mode prompt and the image as a data URL.
- Marker-based parsing of the reply into ``AnalysisResult``.

No retries: every failure is terminal for the request. Empty model output
is a degraded success (all fields empty, LOW risk, explanatory note).
"""

from __future__ import annotations

import logging
import time
from typing import Optional

import httpx

from workplace_inspector.core.config import Settings, get_settings
from workplace_inspector.core.errors import ConfigurationError, UpstreamError
from workplace_inspector.core.image_processing import to_data_url, validate_image_upload
from workplace_inspector.services.ai.common import router as ai_router
from workplace_inspector.services.ai.common.audit import log_ai_run
from workplace_inspector.services.ai.common.providers import ProviderConfigError
from workplace_inspector.services.ai.common.sections import extract_sections

from .contracts import (
    EMPTY_OUTPUT_NOTE,
    MISSING_SECTIONS_NOTE,
    POSSIBLE_ISSUES,
    RISK_LEVEL,
    SECTION_TAGS,
    WHAT_I_SEE,
    WHAT_THIS_MEANS,
    WHAT_YOU_CAN_DO_NEXT,
    AnalysisMode,
    AnalysisResult,
    RiskLevel,
    parse_mode,
)
from .prompts import get_prompt_for_mode

logger = logging.getLogger(__name__)

MSG_QUOTA_EXCEEDED = "API quota exceeded. Check provider billing/credits."
MSG_ANALYSIS_FAILED = "Failed to analyze image"


def normalize_risk(raw: Optional[str]) -> RiskLevel:
    """Map free text to a risk level: HIGH, then MEDIUM, else LOW."""
    s = (raw or "").upper()
    if "HIGH" in s:
        return RiskLevel.HIGH
    if "MEDIUM" in s:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def parse_analysis(text: str) -> AnalysisResult:
    """Build an ``AnalysisResult`` from a model reply using section markers.

    A reply where none of the four text sections can be found is still
    returned, with ``error`` set to ``MISSING_SECTIONS_NOTE``.
    """
    sections = extract_sections(text, SECTION_TAGS)
    if not sections[RISK_LEVEL]:
        logger.info("Reply has no %s section; defaulting to LOW", RISK_LEVEL)

    note = None
    if not any(sections[tag] for tag in (WHAT_I_SEE, WHAT_THIS_MEANS, POSSIBLE_ISSUES, WHAT_YOU_CAN_DO_NEXT)):
        logger.warning("Reply has no recognizable sections (%d chars)", len(text or ""))
        note = MISSING_SECTIONS_NOTE

    return AnalysisResult(
        what_i_see=sections[WHAT_I_SEE],
        what_this_means=sections[WHAT_THIS_MEANS],
        possible_issues=sections[POSSIBLE_ISSUES],
        what_you_can_do_next=sections[WHAT_YOU_CAN_DO_NEXT],
        risk_level=normalize_risk(sections[RISK_LEVEL]),
        raw=text,
        error=note,
    )


def empty_result() -> AnalysisResult:
    return AnalysisResult(risk_level=RiskLevel.LOW, raw="", error=EMPTY_OUTPUT_NOTE)


def _provider_error_message(exc: httpx.HTTPStatusError) -> str:
    status = exc.response.status_code
    if status == 429:
        return MSG_QUOTA_EXCEEDED
    try:
        body = exc.response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        err = body.get("error")
        if isinstance(err, dict) and err.get("message"):
            return str(err["message"])
        if isinstance(err, str) and err:
            return err
    return f"{MSG_ANALYSIS_FAILED} (provider status {status})"


async def analyze_workplace_photo(
    content: Optional[bytes],
    content_type: Optional[str],
    mode: AnalysisMode | str | None = None,
    *,
    settings: Settings | None = None,
) -> AnalysisResult:
    """Analyze one workplace photo and return the structured assessment.

    Raises:
        InspectionInputError: missing, oversized or non-image upload.
        ConfigurationError: the provider credential is missing or not allowed.
        UpstreamError: the provider call failed.
    """
    settings = settings or get_settings()
    validate_image_upload(content, content_type, max_bytes=settings.max_upload_bytes)

    try:
        config = ai_router.resolve("vision", settings=settings)
    except ProviderConfigError as exc:
        raise ConfigurationError(f"Server misconfiguration: {exc}") from exc

    resolved_mode = parse_mode(mode)
    prompt = get_prompt_for_mode(resolved_mode)
    data_url = to_data_url(content, content_type)

    t0 = time.monotonic()
    try:
        provider_result = await config.provider.generate(
            prompt,
            image_data_url=data_url,
            model=config.model,
            temperature=config.temperature,
            max_tokens=config.max_tokens,
            timeout_seconds=config.timeout_seconds,
        )
    except httpx.HTTPStatusError as exc:
        logger.error(
            "Vision provider %s returned %s: %s",
            config.provider.name,
            exc.response.status_code,
            exc.response.text[:500],
            exc_info=True,
        )
        raise UpstreamError(_provider_error_message(exc), status_code=exc.response.status_code) from exc
    except httpx.HTTPError as exc:
        logger.error("Vision provider %s request failed: %s", config.provider.name, exc, exc_info=True)
        raise UpstreamError(f"{MSG_ANALYSIS_FAILED}: {exc}") from exc
    except Exception as exc:
        logger.exception("Vision provider %s raised unexpectedly", config.provider.name)
        raise UpstreamError(MSG_ANALYSIS_FAILED) from exc

    latency_ms = int((time.monotonic() - t0) * 1000)
    text = (provider_result.raw_text or "").strip()

    if not text:
        logger.warning(
            "Vision provider %s returned empty output (model=%s)",
            provider_result.provider,
            provider_result.model,
        )
        result = empty_result()
    else:
        result = parse_analysis(provider_result.raw_text)

    log_ai_run(
        scope="vision",
        provider_result=provider_result,
        prompt_text=prompt,
        parsed_output={"mode": resolved_mode.value, "risk_level": result.risk_level.value, "empty": not text},
        settings=settings,
        extra_meta={"latency_ms": latency_ms, "image_bytes": len(content)},
    )

    return result
