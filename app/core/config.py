"""Configuration management for Streamscout."""

from pydantic import PositiveInt, field_validator
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict
from urllib.parse import urlparse


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # TMDB
    tmdb_api_key: str = ""
    tmdb_language: str = "pt-BR"

    # Database (system of record)
    database_url: str = "sqlite:///./streamscout.db"

    # Search index
    elasticsearch_url: str = "http://localhost:9200"
    elasticsearch_index: str = "titles"
    index_timeout: PositiveInt = 10  # Timeout for index requests in seconds

    # Search settings
    default_region: str = "BR"
    ingest_concurrency: PositiveInt = 4  # Parallel persist+index calls per query
    provider_timeout: PositiveInt = 30  # Timeout for provider calls in seconds
    enrich_availability: bool = False  # Fetch watch providers before persisting

    # Network settings
    # Proxy configuration in the format http://host:port or socks5://host:port
    proxy: str | None = None

    @field_validator("proxy")
    @classmethod
    def validate_proxy(cls, v: str | None) -> str | None:
        if v is None:
            return v

        parsed = urlparse(v)
        if parsed.scheme not in ("http", "https", "socks4", "socks5", "socks5h"):
            raise ValueError(
                "Proxy must be a valid URL with scheme http/https/socks4/socks5/socks5h"
            )
        if not parsed.netloc:
            raise ValueError("Proxy must have a host and port")
        return v

    @field_validator("default_region")
    @classmethod
    def normalize_region(cls, v: str) -> str:
        return v.strip().upper()

    # App settings
    debug: bool = False

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
