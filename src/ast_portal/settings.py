"""Portal settings (Pydantic v2, ``AST_*`` environment variables)."""

from __future__ import annotations

import json
from datetime import timedelta
from functools import lru_cache
from pathlib import Path
from typing import Annotated, Any, Literal

from pydantic import (
    Field,
    SecretStr,
    ValidationError,
    ValidationInfo,
    field_validator,
    model_validator,
)
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from ast_portal import __version__
from ast_portal.common.errors import ConfigError

# ---- Defaults ---------------------------------------------------------------

DEFAULT_BLOB_CONTAINER = "input"
DEFAULT_DATABASE_URL = "sqlite:///./data/ast_portal.sqlite"
DEFAULT_FABRIC_API_URL = "https://api.fabric.microsoft.com"
DEFAULT_FABRIC_SCOPE = "https://api.fabric.microsoft.com/.default"
DEFAULT_AUTHORITY_URL = "https://login.microsoftonline.com"
DEFAULT_SESSION_MAX_AGE = timedelta(hours=24)
DEFAULT_DRAFT_TTL = timedelta(minutes=30)

_UNIT_SECONDS = {"s": 1, "m": 60, "h": 3600, "d": 86400}

# field name -> environment variable, for fail-fast reporting
_REQUIRED_FIELDS: dict[str, str] = {
    "auth_password": "AST_AUTH_PASSWORD",
    "blob_connection_string": "AST_BLOB_CONNECTION_STRING",
    "azure_client_id": "AST_AZURE_CLIENT_ID",
    "azure_client_secret": "AST_AZURE_CLIENT_SECRET",
    "azure_tenant_id": "AST_AZURE_TENANT_ID",
    "fabric_workspace_id": "AST_FABRIC_WORKSPACE_ID",
    "fabric_notebook_id": "AST_FABRIC_NOTEBOOK_ID",
}


# ---- Helpers ----------------------------------------------------------------

def _parse_duration(value: Any, *, field_name: str) -> timedelta:
    """Accept seconds (int/float/str) or '60s'/'5m'/'1h'/'14d'."""
    if isinstance(value, timedelta):
        return value
    if isinstance(value, (int, float)):
        seconds = float(value)
    elif isinstance(value, str):
        s = value.strip()
        if not s:
            raise ValueError(f"{field_name} must not be blank")
        try:
            seconds = float(s)
        except ValueError:
            unit = s[-1].lower()
            num = s[:-1].strip()
            if unit not in _UNIT_SECONDS or not num:
                raise ValueError(
                    f"{field_name} must be secs or 'Xs','Xm','Xh','Xd'"
                ) from None
            try:
                seconds = float(num) * _UNIT_SECONDS[unit]
            except ValueError as exc:
                raise ValueError(
                    f"{field_name} must be secs or 'Xs','Xm','Xh','Xd'"
                ) from exc
    else:
        raise TypeError(f"{field_name} must be number, duration string, or timedelta")
    if seconds <= 0:
        raise ValueError(f"{field_name} must be > 0 seconds")
    return timedelta(seconds=seconds)


def _list_from_env(value: Any) -> list[str]:
    """JSON array or comma string; strip empties; dedupe preserving order."""
    if value in (None, "", []):
        return []
    if isinstance(value, str):
        s = value.strip()
        if s.startswith("["):
            try:
                parsed = json.loads(s)
            except json.JSONDecodeError as exc:
                raise ValueError("Expected a JSON array") from exc
            if not isinstance(parsed, list):
                raise ValueError("Expected a JSON array")
            items = [str(x).strip() for x in parsed]
        else:
            items = [seg.strip() for seg in s.split(",")]
    elif isinstance(value, (list, tuple, set)):
        items = [str(x).strip() for x in value]
    else:
        raise TypeError("Expected string or list")
    return list(dict.fromkeys(x for x in items if x))


# ---- Settings ---------------------------------------------------------------

class Settings(BaseSettings):
    """FastAPI settings loaded from ``AST_*`` environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="AST_",
        case_sensitive=False,
        extra="ignore",
        env_ignore_empty=True,
        str_strip_whitespace=True,
    )

    # Application
    app_name: str = "AST Run Portal"
    app_version: str = __version__
    environment: Literal["development", "production"] = "development"
    log_level: str = "INFO"
    server_cors_origins: Annotated[list[str], NoDecode] = Field(default_factory=list)
    web_dir: Path | None = None

    # Session gate
    auth_password: SecretStr | None = None
    session_cookie_name: str = "ast-auth-token"
    session_max_age: timedelta = DEFAULT_SESSION_MAX_AGE

    # Run drafts
    draft_cookie_name: str = "ast-run-draft"
    draft_ttl: timedelta = DEFAULT_DRAFT_TTL

    # Blob storage
    blob_connection_string: SecretStr | None = None
    blob_container: str = DEFAULT_BLOB_CONTAINER
    blob_request_timeout_seconds: float = Field(default=30.0, gt=0)

    # Service principal + Fabric notebook
    azure_client_id: str | None = None
    azure_client_secret: SecretStr | None = None
    azure_tenant_id: str | None = None
    azure_authority_url: str = DEFAULT_AUTHORITY_URL
    fabric_api_url: str = DEFAULT_FABRIC_API_URL
    fabric_scope: str = DEFAULT_FABRIC_SCOPE
    fabric_workspace_id: str | None = None
    fabric_notebook_id: str | None = None
    http_timeout_seconds: float = Field(default=30.0, gt=0)

    # Run records
    database_url: str = DEFAULT_DATABASE_URL
    database_echo: bool = False

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: Any) -> str:
        level = str(value or "INFO").strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError("log_level must be one of DEBUG, INFO, WARNING, ERROR, CRITICAL")
        return level

    @field_validator("server_cors_origins", mode="before")
    @classmethod
    def _parse_cors_origins(cls, value: Any) -> list[str]:
        return _list_from_env(value)

    @field_validator("session_max_age", "draft_ttl", mode="before")
    @classmethod
    def _parse_durations(cls, value: Any, info: ValidationInfo) -> timedelta:
        return _parse_duration(value, field_name=info.field_name)

    @model_validator(mode="after")
    def _finalize(self) -> "Settings":
        self.azure_authority_url = self.azure_authority_url.rstrip("/")
        self.fabric_api_url = self.fabric_api_url.rstrip("/")
        return self

    # ---- Derived values --------------------------------------------------

    @property
    def secure_cookies(self) -> bool:
        return self.environment == "production"

    @property
    def missing_required(self) -> list[str]:
        """Environment variables for required fields that are unset or blank."""

        missing: list[str] = []
        for field_name, env_name in _REQUIRED_FIELDS.items():
            value = getattr(self, field_name)
            if isinstance(value, SecretStr):
                value = value.get_secret_value()
            if not value:
                missing.append(env_name)
        return missing

    def require_complete(self) -> "Settings":
        """Raise :class:`ConfigError` naming every missing required variable."""

        missing = self.missing_required
        if missing:
            raise ConfigError(
                "Missing required configuration: " + ", ".join(missing),
                missing=missing,
            )
        return self

    def required(self, field_name: str) -> str:
        """Value of one required field, secrets unwrapped; ``ConfigError`` when unset."""

        value = getattr(self, field_name)
        if isinstance(value, SecretStr):
            value = value.get_secret_value()
        if not value:
            env_name = _REQUIRED_FIELDS[field_name]
            raise ConfigError(
                f"Missing required configuration: {env_name}",
                missing=[env_name],
            )
        return value


def load_settings(**overrides: Any) -> Settings:
    """Build settings and fail fast on missing or invalid configuration."""

    try:
        settings = Settings(**overrides)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc
    return settings.require_complete()


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()


def reload_settings() -> Settings:
    get_settings.cache_clear()
    return get_settings()


__all__ = [
    "Settings",
    "get_settings",
    "load_settings",
    "reload_settings",
]
