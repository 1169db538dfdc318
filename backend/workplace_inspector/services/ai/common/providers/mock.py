"""Mock provider with deterministic responses for tests and local development."""

from __future__ import annotations

import time

from .base import BaseProvider, ProviderResult

MOCK_RESPONSE = """[WHAT_I_SEE]
A tidy work area with clear surfaces and visible equipment.

[WHAT_THIS_MEANS]
This looks like an active workspace in normal operation.

[POSSIBLE_ISSUES]
- No obvious hazards are visible in this mock response.

[WHAT_YOU_CAN_DO_NEXT]
1) Keep walkways and exits clear.
2) Re-check the area during peak hours.

[RISK_LEVEL]
LOW - mock provider response."""


class MockProvider(BaseProvider):
    name = "mock"

    def __init__(self, text: str = MOCK_RESPONSE) -> None:
        self._text = text

    async def generate(
        self,
        prompt: str,
        *,
        image_data_url: str | None = None,
        model: str = "",
        temperature: float = 0.2,
        max_tokens: int = 900,
        timeout_seconds: float = 60.0,
    ) -> ProviderResult:
        t0 = time.monotonic()
        text = self._text
        elapsed = (time.monotonic() - t0) * 1000
        return ProviderResult(
            raw_text=text,
            model=model or "mock-vision-v1",
            provider=self.name,
            prompt_tokens=len(prompt.split()),
            completion_tokens=len(text.split()),
            latency_ms=round(elapsed, 2),
        )
