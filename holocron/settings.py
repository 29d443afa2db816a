"""Centralized configuration management for the Holocron catalog service."""

from __future__ import annotations

import logging
import os
from functools import lru_cache

from dotenv import load_dotenv
from pydantic import Field, PrivateAttr
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables defined in a local .env file before instantiating the
# settings singleton so every consumer importing :mod:`holocron.settings` sees the
# same configuration as ``holocron.main``.
load_dotenv()

# -- Application-wide constants -------------------------------------------------

DEFAULT_SWAPI_BASE_URL = "https://swapi.tech/api"
DEFAULT_PAGE_SIZE = 12
DEFAULT_PAGE_CAP = 9
DEFAULT_PAGE_TTL_SECONDS = 300.0
DEFAULT_DETAIL_TTL_SECONDS = 600.0
DEFAULT_COLLECTION_TTL_SECONDS = 300.0
DEFAULT_REQUEST_TIMEOUT_SECONDS = 10.0
DEFAULT_FAVORITES_PATH = "./data/favorites.json"
DEFAULT_LOG_LEVEL = "INFO"


def _normalize_origin(origin: str) -> str:
    """Return the origin stripped of whitespace and trailing slashes."""

    return origin.strip().rstrip("/")


class AppSettings(BaseSettings):
    """Typed configuration surface built on top of ``pydantic-settings``.

    Every knob the catalog layer depends on (remote base URL, page sizing, the
    per-namespace cache lifetimes) is declared here so services receive plain
    values instead of reading the environment themselves.
    """

    _explicit_base_url: bool = PrivateAttr(default=False)
    _explicit_cors_allow_origins: bool = PrivateAttr(default=False)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    def __init__(
        self, **values: object
    ) -> None:  # noqa: D401 - short override explanation
        """Capture explicit overrides prior to delegating to ``BaseSettings``."""

        normalized_keys = {str(key).lower() for key in values}
        super().__init__(**values)
        self._explicit_base_url = (
            "swapi_base_url" in normalized_keys
            or bool((os.getenv("SWAPI_BASE_URL") or "").strip())
        )
        self._explicit_cors_allow_origins = (
            "cors_allow_origins_raw" in normalized_keys
            or bool((os.getenv("CORS_ALLOW_ORIGINS") or "").strip())
        )

    swapi_base_url: str = Field(
        default=DEFAULT_SWAPI_BASE_URL,
        alias="SWAPI_BASE_URL",
        description="Root URL of the remote people resource (without trailing slash).",
    )
    page_size: int = Field(
        default=DEFAULT_PAGE_SIZE,
        alias="PAGE_SIZE",
        ge=1,
        description="Number of people requested per remote page and per synthesized view page.",
    )
    page_cap: int = Field(
        default=DEFAULT_PAGE_CAP,
        alias="PAGE_CAP",
        ge=1,
        description="Hard upper bound on pages fetched while materializing the full collection.",
    )
    page_ttl_seconds: float = Field(
        default=DEFAULT_PAGE_TTL_SECONDS,
        alias="PAGE_TTL_SECONDS",
        gt=0,
        description="Lifetime of a cached remote page.",
    )
    detail_ttl_seconds: float = Field(
        default=DEFAULT_DETAIL_TTL_SECONDS,
        alias="DETAIL_TTL_SECONDS",
        gt=0,
        description="Lifetime of a cached person detail record.",
    )
    collection_ttl_seconds: float = Field(
        default=DEFAULT_COLLECTION_TTL_SECONDS,
        alias="COLLECTION_TTL_SECONDS",
        gt=0,
        description="Lifetime of the cached, fully materialized people collection.",
    )
    request_timeout_seconds: float = Field(
        default=DEFAULT_REQUEST_TIMEOUT_SECONDS,
        alias="REQUEST_TIMEOUT_SECONDS",
        gt=0,
        description="Timeout applied to every outbound HTTP request.",
    )
    detail_concurrency_limit: int | None = Field(
        default=None,
        alias="DETAIL_CONCURRENCY_LIMIT",
        ge=1,
        description=(
            "Optional cap on concurrent detail requests within one batch. Unset"
            " keeps the batch fan-out unbounded."
        ),
    )
    favorites_path: str = Field(
        default=DEFAULT_FAVORITES_PATH,
        alias="FAVORITES_PATH",
        description="JSON key-value file holding the persisted favorites list.",
    )
    log_level: str = Field(
        default=DEFAULT_LOG_LEVEL,
        alias="LOG_LEVEL",
        description="Root logging level (e.g. INFO, DEBUG, WARNING).",
    )
    cors_allow_origins_raw: str | None = Field(
        default=None,
        alias="CORS_ALLOW_ORIGINS",
        description="Comma-separated list of CORS origins allowed to call the API.",
    )
    warmup_on_startup: bool = Field(
        default=False,
        alias="WARMUP_ON_STARTUP",
        description="Prefetch the full people collection while the API starts.",
    )

    @property
    def base_url(self) -> str:
        """Return ``swapi_base_url`` without a trailing slash."""

        return self.swapi_base_url.rstrip("/")

    @property
    def cors_allow_origins(self) -> list[str]:
        """Return normalised CORS origins supplied via environment variables."""

        if not self.cors_allow_origins_raw:
            return []

        origins = [
            _normalize_origin(origin)
            for origin in self.cors_allow_origins_raw.split(",")
            if origin.strip()
        ]
        return [origin for origin in origins if origin]

    @property
    def log_level_numeric(self) -> int:
        """Translate ``log_level`` into the numeric constant expected by logging."""

        candidate = logging.getLevelName(self.log_level.upper())
        if isinstance(candidate, int):
            return candidate
        return logging.INFO

    def ttl_policy(self) -> dict[str, float]:
        """Return the cache namespace to TTL mapping consumed by ``CacheStore``."""

        # Imported lazily so the cache module stays free of settings imports.
        from holocron.cache import COLLECTION_NAMESPACE, DETAIL_NAMESPACE, PAGE_NAMESPACE

        return {
            PAGE_NAMESPACE: self.page_ttl_seconds,
            DETAIL_NAMESPACE: self.detail_ttl_seconds,
            COLLECTION_NAMESPACE: self.collection_ttl_seconds,
        }

    def optional_config_warnings(self) -> list[str]:
        """Return human-readable warnings for unset optional configuration."""

        warnings: list[str] = []

        if not self._explicit_base_url:
            warnings.append(
                f"SWAPI_BASE_URL is not set - using the public {DEFAULT_SWAPI_BASE_URL}"
            )

        if not self._explicit_cors_allow_origins and not self.cors_allow_origins:
            warnings.append(
                "CORS_ALLOW_ORIGINS is not set - using default localhost origins only "
                "(may cause CORS issues in production)"
            )

        return warnings


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    """Return a cached instance of :class:`AppSettings`."""

    return AppSettings()


__all__ = [
    "AppSettings",
    "DEFAULT_COLLECTION_TTL_SECONDS",
    "DEFAULT_DETAIL_TTL_SECONDS",
    "DEFAULT_LOG_LEVEL",
    "DEFAULT_PAGE_CAP",
    "DEFAULT_PAGE_SIZE",
    "DEFAULT_PAGE_TTL_SECONDS",
    "DEFAULT_SWAPI_BASE_URL",
    "get_settings",
]
