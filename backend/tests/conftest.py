import io
import os
from unittest.mock import AsyncMock, patch

import httpx
import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from PIL import Image

from workplace_inspector.core.config import Settings, get_settings
from workplace_inspector.services.ai.common.providers.base import ProviderResult

BASE_URL = os.getenv("BASE_URL", "http://127.0.0.1:8000")

OPENAI_GENERATE = "workplace_inspector.services.ai.common.providers.openai.OpenAIProvider.generate"

SAMPLE_REPLY = """[WHAT_I_SEE]
A prep counter with raw chicken next to sliced vegetables.

[WHAT_THIS_MEANS]
This is an active food preparation area.

[POSSIBLE_ISSUES]
- Raw meat stored next to ready-to-eat food.
- Uncovered containers.

[WHAT_YOU_CAN_DO_NEXT]
1) Separate raw meat from ready-to-eat items.
2) Cover and label all containers.

[RISK_LEVEL]
HIGH - cross-contamination risk."""


@pytest.fixture(autouse=True)
def _reset_settings_cache():
    # Tests build their own Settings; never leak a cached instance between tests.
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def _make_settings(**overrides) -> Settings:
    values = {
        "openai_api_key": "sk-test",
        "anthropic_api_key": "",
        "ai_vision_provider": "openai",
        "ai_vision_model": "",
        "ai_allowed_providers_raw": "openai,claude,mock",
        "ai_allowed_models_raw": "",
        "ai_debug_store_raw": False,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def _provider_result(text: str = SAMPLE_REPLY, **kwargs) -> ProviderResult:
    defaults = {
        "model": "gpt-4o-mini",
        "provider": "openai",
        "prompt_tokens": 700,
        "completion_tokens": 120,
        "latency_ms": 850.0,
    }
    defaults.update(kwargs)
    return ProviderResult(raw_text=text, **defaults)


def _png_bytes(size=(800, 600), color="red") -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", size, color).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def sample_reply() -> str:
    return SAMPLE_REPLY


@pytest.fixture
def make_settings():
    """Factory: ``make_settings(openai_api_key="")`` -> isolated ``Settings``."""
    return _make_settings


@pytest.fixture
def provider_result():
    """Factory for ``ProviderResult``; defaults to a HIGH-risk kitchen reply."""
    return _provider_result


@pytest.fixture
def png_bytes():
    return _png_bytes


@pytest.fixture
def openai_generate():
    """Patch ``OpenAIProvider.generate``; set ``return_value``/``side_effect`` per test."""
    with patch(OPENAI_GENERATE, new=AsyncMock(return_value=_provider_result())) as generate:
        yield generate


@pytest.fixture
def settings(request) -> Settings:
    # Indirect parametrization passes overrides as a dict.
    return _make_settings(**getattr(request, "param", {}))


@pytest.fixture
def app(settings):
    from workplace_inspector.main import app as fastapi_app

    fastapi_app.dependency_overrides[get_settings] = lambda: settings
    yield fastapi_app
    fastapi_app.dependency_overrides.pop(get_settings, None)


@pytest.fixture
def api_client(app):
    with_client = TestClient(app)
    yield with_client
    with_client.close()


@pytest_asyncio.fixture
async def client(app):
    # Default: in-process ASGI tests (no uvicorn needed).
    # Set USE_LIVE_SERVER=true to run against a running server at BASE_URL.
    use_live_server = os.getenv("USE_LIVE_SERVER", "").strip().lower() in {"1", "true", "yes"}
    if use_live_server:
        async with httpx.AsyncClient(base_url=BASE_URL) as c:
            yield c
        return

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
