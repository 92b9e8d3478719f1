"""Application settings loaded from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from space_travelling.errors import ConfigurationError

DEFAULT_PRISMIC_ENDPOINT = "https://spacetravellingworld.cdn.prismic.io/api/v2"


def _env(key: str, default: str = "") -> str:
    return os.environ.get(key, default)


def _env_int(key: str, default: int) -> int:
    raw = os.environ.get(key)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{key} must be an integer, got {raw!r}") from None


def _env_float(key: str, default: float) -> float:
    raw = os.environ.get(key)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError(f"{key} must be a number, got {raw!r}") from None


def _env_bool(key: str, default: bool) -> bool:
    raw = os.environ.get(key)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class PrismicConfig:
    endpoint: str = field(default_factory=lambda: _env("PRISMIC_API_ENDPOINT", DEFAULT_PRISMIC_ENDPOINT))
    access_token: str = field(default_factory=lambda: _env("PRISMIC_ACCESS_TOKEN"), repr=False)
    timeout_seconds: float = field(default_factory=lambda: _env_float("PRISMIC_TIMEOUT_SECONDS", 10.0))
    max_retries: int = field(default_factory=lambda: _env_int("PRISMIC_MAX_RETRIES", 3))


@dataclass(frozen=True)
class SiteConfig:
    revalidate_seconds: int = field(default_factory=lambda: _env_int("REVALIDATE_SECONDS", 1800))
    page_size: int = field(default_factory=lambda: _env_int("PAGE_SIZE", 2))
    fallback_wait_seconds: float = field(default_factory=lambda: _env_float("FALLBACK_WAIT_SECONDS", 2.0))
    prebuild_pages: bool = field(default_factory=lambda: _env_bool("PREBUILD_PAGES", True))
    max_cached_pages: int = field(default_factory=lambda: _env_int("MAX_CACHED_PAGES", 1000))


@dataclass(frozen=True)
class AppConfig:
    env: str = field(default_factory=lambda: _env("APP_ENV", "development"))
    log_level: str = field(default_factory=lambda: _env("LOG_LEVEL", "INFO"))
    secret_key: str = field(default_factory=lambda: _env("SECRET_KEY"), repr=False)
    slow_request_ms: int = field(default_factory=lambda: _env_int("SLOW_REQUEST_MS", 800))
    host: str = field(default_factory=lambda: _env("HOST", "127.0.0.1"))
    port: int = field(default_factory=lambda: _env_int("PORT", 8000))

    @property
    def is_development(self) -> bool:
        return self.env == "development"


@dataclass(frozen=True)
class Settings:
    prismic: PrismicConfig = field(default_factory=PrismicConfig)
    site: SiteConfig = field(default_factory=SiteConfig)
    app: AppConfig = field(default_factory=AppConfig)

    def validate(self) -> None:
        """Raise ``ConfigurationError`` when a required value is missing."""
        if not self.prismic.access_token:
            raise ConfigurationError("PRISMIC_ACCESS_TOKEN is not set")
        if not self.prismic.endpoint.startswith(("http://", "https://")):
            raise ConfigurationError(f"PRISMIC_API_ENDPOINT is not a URL: {self.prismic.endpoint!r}")
        if not self.app.secret_key and not self.app.is_development:
            raise ConfigurationError("SECRET_KEY must be set outside development")


def load_settings() -> Settings:
    """Build settings from the current environment."""
    return Settings()
