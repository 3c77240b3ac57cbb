"""
Application configuration using Pydantic Settings.

Supports environment variables and .env files for configuration.
"""

from functools import lru_cache
import json
from pathlib import Path
from typing import Literal

from pydantic import ValidationInfo, field_validator
from pydantic_settings import BaseSettings

DEFAULT_WORKSPACE_DIR = Path.home() / "aspect-model-editor" / "models"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    env: Literal["development", "staging", "production"] = "development"
    debug: bool = False
    log_level: Literal["critical", "error", "warning", "info", "debug"] = "info"

    # Server
    host: str = "127.0.0.1"
    port: int = 9091
    workers: int = 1

    # CORS
    cors_origins: list[str] = ["http://localhost:4200", "http://localhost:3000"]

    # Workspace
    workspace_dir: Path = DEFAULT_WORKSPACE_DIR
    backup_dir: Path | None = None
    scratch_dir: Path | None = None
    model_store: Literal["filesystem", "memory"] = "filesystem"

    # Export sessions
    export_session_ttl_minutes: int = 30

    # File upload limits
    max_upload_size_mb: int = 50
    max_package_uncompressed_mb: int = 200

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        if isinstance(v, str):
            value = v.strip()
            if value.startswith("["):
                try:
                    parsed = json.loads(value)
                    if isinstance(parsed, list):
                        return [str(origin).strip() for origin in parsed if str(origin).strip()]
                except json.JSONDecodeError:
                    pass
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    @field_validator("workspace_dir", "backup_dir", "scratch_dir", mode="before")
    @classmethod
    def expand_paths(cls, v, info: ValidationInfo):
        if isinstance(v, str):
            if not v.strip():
                if info.field_name == "workspace_dir":
                    return DEFAULT_WORKSPACE_DIR
                return None
            return Path(v).expanduser()
        if isinstance(v, Path):
            return v.expanduser()
        return v

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
