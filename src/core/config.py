"""Core configuration.

Why here:
- Centralizes environment variables (pydantic-settings) away from the CLI.
- Gateways receive an immutable `ClientConfig`, never the settings object.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from dotenv import dotenv_values, set_key
from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic.config import ConfigDict
from pydantic_settings import BaseSettings, SettingsConfigDict

from core.errors import ConfigurationError

DEFAULT_BASE_URL = "https://api.make.com/"
_APP_DIR = "make-reconciler"


def get_user_config_dir() -> Path:
    """Per-user configuration directory: APPDATA, Application Support or XDG."""

    if sys.platform.startswith("win"):
        root = Path(os.environ.get("APPDATA") or Path.home())
    elif sys.platform == "darwin":
        root = Path.home() / "Library" / "Application Support"
    else:
        root = Path(os.environ.get("XDG_CONFIG_HOME") or Path.home() / ".config")
    return root / _APP_DIR


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


def read_user_env_vars() -> dict[str, str]:
    env_path = get_user_env_file()
    if not env_path.exists():
        return {}
    return {k: v for k, v in dotenv_values(env_path).items() if v is not None}


def write_user_env_vars(values: dict[str, str | None]) -> Path:
    """Set variables in the per-user .env; `None` leaves a variable untouched."""

    env_path = get_user_env_file()
    env_path.parent.mkdir(parents=True, exist_ok=True)
    env_path.touch(exist_ok=True)
    for key, value in values.items():
        if value is not None:
            set_key(env_path, key, value, quote_mode="never")
    return env_path


class AppSettings(BaseSettings):
    """Central application settings.

    Variables use the `MAKE_` prefix: `MAKE_API_TOKEN`, `MAKE_BASE_URL`, ...
    """

    model_config = SettingsConfigDict(
        env_prefix="MAKE_",
        extra="ignore",
        case_sensitive=False,
        # Project first (dev), then the per-user config.
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    api_token: str | None = Field(
        default=None,
        description="API token sent as `Authorization: Token <token>`.",
    )
    base_url: str = Field(
        default=DEFAULT_BASE_URL,
        description="Base URL of the remote API.",
    )
    http_timeout_seconds: float | None = Field(
        default=None,
        gt=0,
        description="Per-request timeout (seconds). Unset means no timeout.",
    )
    user_agent: str = Field(
        default="make-reconciler/0.1",
        min_length=1,
        description="User-Agent for API requests.",
    )

    log_level: str = Field(
        default="INFO",
        description="Minimum log level (DEBUG, INFO, WARNING, ...).",
    )
    log_json: bool = Field(
        default=False,
        description="Render logs as JSON lines instead of the console format.",
    )

    @field_validator("base_url", mode="before")
    @classmethod
    def _default_when_blank(cls, value: object) -> object:
        if value is None or (isinstance(value, str) and not value.strip()):
            return DEFAULT_BASE_URL
        return value


def load_settings() -> AppSettings:
    """Read `AppSettings`; invalid values become a `ConfigurationError`."""

    try:
        return AppSettings()
    except ValidationError as exc:
        problems = "; ".join(
            f"MAKE_{'.'.join(str(part) for part in error['loc']).upper()}: {error['msg']}"
            for error in exc.errors()
        )
        raise ConfigurationError(f"Invalid configuration: {problems}") from exc


class ClientConfig(BaseModel):
    """Immutable transport configuration shared by every gateway."""

    model_config = ConfigDict(frozen=True)

    base_url: str = Field(..., min_length=1)
    api_token: str = Field(..., min_length=1, repr=False)
    user_agent: str = Field(default="make-reconciler/0.1", min_length=1)
    timeout_seconds: float | None = Field(default=None, gt=0)

    @classmethod
    def from_settings(
        cls,
        settings: AppSettings | None = None,
        *,
        api_token: str | None = None,
        base_url: str | None = None,
    ) -> "ClientConfig":
        """Resolve explicit arguments over environment over defaults."""

        settings = settings or load_settings()
        token = api_token if api_token is not None else settings.api_token
        url = base_url if base_url is not None else settings.base_url

        if not token:
            raise ConfigurationError(
                "Missing API token: set MAKE_API_TOKEN or pass an explicit token."
            )
        if not url:
            url = DEFAULT_BASE_URL

        return cls(
            base_url=url,
            api_token=token,
            user_agent=settings.user_agent,
            timeout_seconds=settings.http_timeout_seconds,
        )
