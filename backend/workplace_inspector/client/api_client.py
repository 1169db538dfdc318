"""Client for the analysis endpoint with local usage gating and history."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional

import httpx
from pydantic import ValidationError

from workplace_inspector.core.image_processing import make_thumbnail_data_url, validate_image_upload
from workplace_inspector.services.ai.vision.contracts import AnalysisMode, AnalysisResult, parse_mode

from .history import HistoryCache, HistoryItem
from .usage import UsageGate

logger = logging.getLogger(__name__)

INSPECTOR_API_URL = os.environ.get("INSPECTOR_API_URL", "http://localhost:8000")
ANALYZE_PATH = "/api/v1/analyze"
DEFAULT_TIMEOUT_SEC = 90.0

MSG_REQUEST_FAILED = "Failed to analyze image"


class AnalysisRequestError(Exception):
    """The endpoint answered with an error status or an unusable body."""

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


@dataclass(frozen=True)
class AnalysisOutcome:
    result: AnalysisResult
    mode: AnalysisMode
    history_item: HistoryItem
    remaining_today: int

    @property
    def note(self) -> Optional[str]:
        """Degraded-success note from the server, if any."""
        return self.result.error


class InspectorClient:
    """Runs one analysis at a time: gate -> endpoint -> usage bump -> history."""

    def __init__(
        self,
        gate: UsageGate,
        history: HistoryCache,
        *,
        base_url: str = INSPECTOR_API_URL,
        http: Optional[httpx.Client] = None,
        timeout_sec: float = DEFAULT_TIMEOUT_SEC,
    ) -> None:
        self.gate = gate
        self.history = history
        self._http = http or httpx.Client(base_url=base_url, timeout=timeout_sec)

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "InspectorClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def analyze(
        self,
        content: bytes,
        content_type: str,
        mode: AnalysisMode | str | None = None,
        *,
        filename: str = "upload",
    ) -> AnalysisOutcome:
        """Analyze a photo.

        Raises:
            InspectionInputError: the file fails local validation.
            UsageLimitReached: today's free analyses are used up (no request is sent).
            AnalysisRequestError: the endpoint returned an error.
        """
        validate_image_upload(content, content_type)
        self.gate.check()

        resolved_mode = parse_mode(mode)
        try:
            resp = self._http.post(
                ANALYZE_PATH,
                files={"image": (filename, content, content_type)},
                data={"mode": resolved_mode.value},
            )
        except httpx.HTTPError as exc:
            logger.warning("Analysis request failed: %s", exc)
            raise AnalysisRequestError(f"{MSG_REQUEST_FAILED}: {exc}") from exc

        try:
            body = resp.json()
        except ValueError:
            body = {}

        if resp.status_code != 200:
            message = body.get("error") if isinstance(body, dict) else None
            raise AnalysisRequestError(message or MSG_REQUEST_FAILED, status_code=resp.status_code)

        # A 200 with only an error field is a failure.
        if isinstance(body, dict) and body.get("error") and not body.get("riskLevel"):
            raise AnalysisRequestError(str(body["error"]), status_code=resp.status_code)

        try:
            result = AnalysisResult.model_validate(body)
        except ValidationError as exc:
            raise AnalysisRequestError("Malformed analysis response", status_code=resp.status_code) from exc

        usage = self.gate.record_success()
        item = self.history.add_result(result, resolved_mode, image_data_url=make_thumbnail_data_url(content))

        return AnalysisOutcome(
            result=result,
            mode=resolved_mode,
            history_item=item,
            remaining_today=max(0, self.gate.limit - usage.count),
        )
