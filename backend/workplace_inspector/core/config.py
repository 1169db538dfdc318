from functools import lru_cache
import json
from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

MAX_UPLOAD_BYTES_DEFAULT = 10 * 1024 * 1024


def _parse_list_value(value: str) -> list[str]:
    if not value:
        return []
    if isinstance(value, str):
        raw = value.strip()
        if raw == "":
            return []
        try:
            parsed = json.loads(raw)
            if isinstance(parsed, list):
                return [str(item).strip().lower() for item in parsed if str(item).strip()]
        except Exception:
            pass
        return [item.strip().lower() for item in raw.split(",") if item.strip()]
    if isinstance(value, list):
        return [str(item).strip().lower() for item in value if str(item).strip()]
    return []


def _parse_models_value(value: str) -> dict[str, list[str]]:
    """Parse ``{"openai": ["gpt-4o-mini", ...]}`` from ``AI_ALLOWED_MODELS``."""
    if not value or not value.strip():
        return {}
    try:
        parsed = json.loads(value)
    except json.JSONDecodeError:
        return {}
    if not isinstance(parsed, dict):
        return {}
    result: dict[str, list[str]] = {}
    for provider, models in parsed.items():
        if isinstance(models, str):
            models = [models]
        if isinstance(models, list):
            result[str(provider).lower().strip()] = [str(m).strip() for m in models if str(m).strip()]
    return result


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        validate_by_name=True,
        populate_by_name=True,
    )

    environment: str = "development"
    log_level: str = "INFO"

    openai_api_key: str = ""
    anthropic_api_key: str = ""

    ai_vision_provider: str = "openai"
    ai_vision_model: str = ""
    ai_allowed_providers_raw: str = Field(
        default="openai,claude,mock",
        validation_alias=AliasChoices("AI_ALLOWED_PROVIDERS"),
    )
    ai_allowed_models_raw: str = Field(
        default="",
        validation_alias=AliasChoices("AI_ALLOWED_MODELS"),
    )
    ai_max_tokens: int = 900
    ai_temperature: float = 0.2
    ai_timeout_seconds: float = 60.0
    ai_debug_store_raw: bool = Field(
        default=False,
        validation_alias=AliasChoices("AI_DEBUG_STORE_RAW"),
    )

    max_upload_bytes: int = MAX_UPLOAD_BYTES_DEFAULT

    docs_enabled: bool = Field(default=True)
    openapi_enabled: bool = Field(default=True)
    expose_error_details: bool = False

    cors_allow_origins: str = ""
    cors_allow_methods: str = "GET,POST,OPTIONS"
    cors_allow_headers: str = "Content-Type,Accept"

    @field_validator("ai_vision_provider", mode="before")
    @classmethod
    def _normalize_provider(cls, value):
        if value is None:
            return "openai"
        return str(value).lower().strip() or "openai"

    @property
    def ai_allowed_providers(self) -> list[str]:
        return _parse_list_value(self.ai_allowed_providers_raw)

    @property
    def ai_allowed_models(self) -> dict[str, list[str]]:
        return _parse_models_value(self.ai_allowed_models_raw)

    @property
    def cors_origins(self) -> list[str]:
        return [item.strip() for item in self.cors_allow_origins.split(",") if item.strip()]

    @property
    def cors_methods(self) -> list[str]:
        return [item.strip() for item in self.cors_allow_methods.split(",") if item.strip()]

    @property
    def cors_headers(self) -> list[str]:
        return [item.strip() for item in self.cors_allow_headers.split(",") if item.strip()]

    def validate_required_config(self) -> list[str]:
        errors: list[str] = []
        provider = self.ai_vision_provider
        if provider not in self.ai_allowed_providers:
            errors.append(f"AI_VISION_PROVIDER={provider!r} is not in AI_ALLOWED_PROVIDERS")
        if provider == "openai" and not self.openai_api_key:
            errors.append("OPENAI_API_KEY is not set")
        if provider == "claude" and not self.anthropic_api_key:
            errors.append("ANTHROPIC_API_KEY is not set")
        if self.max_upload_bytes <= 0:
            errors.append("MAX_UPLOAD_BYTES must be positive")
        return errors


@lru_cache

def get_settings() -> Settings:
    return Settings()
