"""Abstract base for all vision providers."""

from __future__ import annotations

import abc
import re
from dataclasses import dataclass

_DATA_URL_RE = re.compile(r"^data:(?P<media_type>[^;,]+);base64,(?P<data>.*)$", re.DOTALL)


@dataclass(frozen=True)
class ProviderResult:
    """Immutable result returned by every provider."""

    raw_text: str
    model: str
    provider: str
    prompt_tokens: int = 0
    completion_tokens: int = 0
    latency_ms: float = 0.0


def split_data_url(data_url: str) -> tuple[str, str]:
    """Split ``data:<type>;base64,<payload>`` into ``(media_type, payload)``."""
    match = _DATA_URL_RE.match(data_url)
    if not match:
        raise ValueError("Not a base64 data URL")
    return match.group("media_type"), match.group("data")


class BaseProvider(abc.ABC):
    """Contract that every vision provider must implement."""

    name: str = "base"

    @abc.abstractmethod
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
        """Send *prompt* (plus an optional inline image) and return a ``ProviderResult``."""
