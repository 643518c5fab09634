from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_SCANNER_PATTERNS = [
    "scanner",
    "crawl",
    "bot",
    "spider",
    "virus",
    "security",
    "check",
    "scan",
    "antivirus",
    "protection",
]


class Settings(BaseSettings):
    """Application settings loaded from environment variables with SECRETDROP_ prefix."""

    # Storage
    storage_backend: Literal["filesystem", "memory", "redis"] = "filesystem"
    storage_dir: Path = Path("./storage")
    # Redis backend
    redis_url: str = "redis://localhost:6379/0"
    redis_key_prefix: str = "secretdrop:secret:"
    redis_max_connections: int = Field(default=20, ge=1)
    # Secrets
    id_bytes: int = Field(default=16, ge=16, le=64)
    consume_mode: Literal["locked", "unlocked"] = "locked"
    # Scanner detection (lists are read from env as JSON arrays)
    scanner_detection: bool = True
    scanner_patterns: list[str] = Field(default_factory=lambda: list(DEFAULT_SCANNER_PATTERNS))
    # App
    static_dir: Path | None = None
    debug: bool = False
    log_level: str = "INFO"

    model_config = SettingsConfigDict(env_prefix="SECRETDROP_", env_file=".env")


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings instance."""
    return Settings()
