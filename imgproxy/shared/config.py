"""Configuration management using pydantic-settings."""

from dataclasses import dataclass
from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

CORS_HEADERS: dict[str, str] = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Content-Type,X-Amz-Date,Authorization,X-Api-Key,X-Amz-Security-Token",
    "Access-Control-Allow-Methods": "GET, HEAD, OPTIONS, POST",
}

IMAGE_PREFIX = "image/"
JSON_PREFIX = "application/json"


class Settings(BaseSettings):
    """Proxy settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        case_sensitive=False,
        extra="ignore",
    )

    whitelisted_hosts: str = Field(default="", description="Comma-separated list of hosts allowed as fetch targets")
    input_encoding: Literal["base64", "raw"] = Field(
        default="base64", description="How the url query parameter is encoded"
    )
    accept_json: bool = Field(default=True, description="Accept application/json upstream responses")
    cors_enabled: bool = Field(default=False, description="Add static CORS headers to successful responses")
    upstream_timeout: float | None = Field(default=None, gt=0, description="Upstream deadline in seconds")
    chunk_size: int = Field(default=64 * 1024, ge=1024, description="Upstream body read size in bytes")
    request_timeout: float = Field(default=30.0, gt=0, description="HTTP server per-request deadline in seconds")
    log_level: str = Field(default="INFO", description="Logging level")
    host: str = Field(default="0.0.0.0", description="HTTP server bind address")
    port: int = Field(default=8080, ge=1, le=65535, description="HTTP server port")


@dataclass(frozen=True)
class ProxyConfig:
    """Immutable pipeline configuration, built once and injected into the handler."""

    allowed_hosts: frozenset[str] = frozenset()
    input_encoding: Literal["base64", "raw"] = "base64"
    accept_json: bool = True
    cors_enabled: bool = False
    upstream_timeout: float | None = None
    chunk_size: int = 64 * 1024

    @property
    def content_type_prefixes(self) -> tuple[str, ...]:
        if self.accept_json:
            return (IMAGE_PREFIX, JSON_PREFIX)
        return (IMAGE_PREFIX,)

    @property
    def static_headers(self) -> dict[str, str]:
        return dict(CORS_HEADERS) if self.cors_enabled else {}

    @classmethod
    def from_settings(cls, settings: Settings) -> "ProxyConfig":
        return cls(
            allowed_hosts=parse_host_list(settings.whitelisted_hosts),
            input_encoding=settings.input_encoding,
            accept_json=settings.accept_json,
            cors_enabled=settings.cors_enabled,
            upstream_timeout=settings.upstream_timeout,
            chunk_size=settings.chunk_size,
        )


def parse_host_list(raw: str) -> frozenset[str]:
    """Split a comma-separated host list, dropping blank entries."""
    return frozenset(entry.strip().lower() for entry in raw.split(",") if entry.strip())


@lru_cache
def get_settings() -> Settings:
    """Get the cached settings instance."""
    return Settings()
