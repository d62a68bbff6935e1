"""Centralized application configuration.

Values come from (highest priority first): constructor kwargs, the games
JSON config file, environment variables, ``.env``.
"""

import json
import os
from enum import StrEnum
from functools import lru_cache
from pathlib import Path
from typing import Any

import structlog
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    SecretStr,
    field_validator,
)
from pydantic.alias_generators import to_camel
from pydantic.fields import FieldInfo
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

logger = structlog.get_logger()


class Environment(StrEnum):
    DEV = "dev"
    LOCAL = "local"
    STAGING = "staging"
    PRODUCTION = "production"
    GUSTAVE = "gustave"
    TESTING = "testing"


class FirebaseFrontendConfig(BaseModel):
    """Firebase web-app config object, as issued by the Firebase console."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    api_key: str = ""
    auth_domain: str = ""
    database_url: str = Field(default="", alias="databaseURL")
    project_id: str = ""
    storage_bucket: str = ""
    messaging_sender_id: str = ""
    app_id: str = ""
    measurement_id: str = ""


class SquidexAppConfig(BaseModel):
    """Credentials for one Squidex app. ``url`` falls back to the default URL."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    client_id: str
    client_secret: SecretStr
    url: str | None = None


def games_config_path() -> Path | None:
    """Locate the games JSON config file.

    ``GAMES_CONFIG_PATH`` wins; otherwise ``config/games.{ENV}.json`` when
    ``ENV`` is set. Returns None when neither variable is set.
    """
    explicit = os.environ.get("GAMES_CONFIG_PATH")
    if explicit:
        return Path(explicit)
    env = os.environ.get("ENV")
    if env:
        return Path("config") / f"games.{env}.json"
    return None


def load_games_config(path: Path | None) -> dict[str, Any]:
    """Read the games config file. Missing or unreadable files yield ``{}``."""
    if path is None:
        return {}
    if not path.is_file():
        logger.warning("games_config_not_found", path=str(path))
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        logger.error("games_config_unreadable", path=str(path), error=str(exc))
        return {}
    if not isinstance(data, dict):
        logger.error("games_config_not_an_object", path=str(path))
        return {}
    logger.info("games_config_loaded", path=str(path))
    return data


class GamesConfigFileSource(PydanticBaseSettingsSource):
    """Settings source backed by the games JSON file.

    Keys in the file are the upper-case variable names (``SQUIDEX_APPS``,
    ``FIREBASE_FRONTEND_CONFIG``, ...).
    """

    def __init__(
        self, settings_cls: type[BaseSettings], path: Path | None
    ) -> None:
        super().__init__(settings_cls)
        self._data = load_games_config(path)

    def get_field_value(
        self, field: FieldInfo, field_name: str
    ) -> tuple[Any, str, bool]:
        return self._data.get(field_name.upper()), field_name, False

    def __call__(self) -> dict[str, Any]:
        values: dict[str, Any] = {}
        for field_name, field in self.settings_cls.model_fields.items():
            value, key, _ = self.get_field_value(field, field_name)
            if value not in (None, ""):
                values[key] = value
        return values


class Settings(BaseSettings):
    """Application settings.

    Secrets use SecretStr to prevent accidental logging. Squidex apps are
    keyed by app name; each app may override the default Squidex URL.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # --- App ---
    env: Environment = Environment.DEV
    log_level: str = "INFO"
    enable_request_logging: bool = False
    api_name: str = "ap-api"
    base_path: str = "/"

    # --- CORS ---
    cors_allowed_origins: list[str] = [
        "http://localhost:4200",
        "http://localhost:57170",
    ]
    cors_allow_credentials: bool = True
    cors_allowed_methods: list[str] = ["*"]
    cors_allowed_headers: list[str] = ["*"]

    # --- Firebase ---
    firebase_frontend_config: FirebaseFrontendConfig = FirebaseFrontendConfig()

    # --- Analytics (GA4 Measurement Protocol) ---
    analytics_secret_key: SecretStr | None = None
    games_measurement_id: str = ""

    # --- Squidex ---
    squidex_default_url: str = ""
    squidex_default_app: str = ""
    squidex_apps: dict[str, SquidexAppConfig] = {}
    squidex_timeout_seconds: float = 30.0
    squidex_token_margin_seconds: int = 300

    # --- Rate limiting (per client IP) ---
    rate_limit_window_seconds: int = 15 * 60
    auth_rate_limit: int = 10
    api_rate_limit: int = 100

    @field_validator("env", mode="before")
    @classmethod
    def _fallback_to_dev(cls, value: Any) -> Any:
        """Unknown environment names fall back to ``dev``."""
        if isinstance(value, str):
            value = value.lower()
            if value not in {e.value for e in Environment}:
                return Environment.DEV
        return value

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            GamesConfigFileSource(settings_cls, games_config_path()),
            env_settings,
            dotenv_settings,
            file_secret_settings,
        )

    # --- Convenience properties ---
    @property
    def firebase_web_api_key(self) -> str:
        return self.firebase_frontend_config.api_key

    @property
    def is_dev(self) -> bool:
        return self.env in (Environment.DEV, Environment.LOCAL)

    @property
    def is_prod(self) -> bool:
        return self.env == Environment.PRODUCTION


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Cached settings singleton.

    Usage::

        from content_gateway.config import get_settings
        settings = get_settings()
    """
    return Settings()


settings = get_settings()
