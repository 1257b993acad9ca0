# src/sharelink/config/settings.py
"""
Settings - Pydantic-based Configuration Management

Provides centralized configuration management using Pydantic Settings.
Supports environment variables and a .env file with validation.
List-valued settings are read from the environment as JSON arrays.

Files that USE this module:
- sharelink.app (loads settings for logging and server startup)
- sharelink.adapters.network.* (timeouts, health path, tunnel endpoints)
- sharelink.adapters.providers.* (upload timeout)
- sharelink.adapters.persistence.hint_store (hint file location)
- sharelink.adapters.web.* (files directory, routes, sweep interval)
- sharelink.application.* (resolver and chain defaults)

Files that this module USES:
- sharelink.shared.validators (validation functions for settings)
"""

from __future__ import annotations  # Enable postponed evaluation of annotations

from pathlib import Path  # Object-oriented filesystem paths
from typing import Optional  # Type hints for optional values

from pydantic import Field, field_validator  # Data validation and field configuration
from pydantic_settings import BaseSettings, SettingsConfigDict  # Settings management with Pydantic

from sharelink.shared.validators import validate_port, validate_route_path


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # --- Server ---
    app_host: str = Field(default="0.0.0.0", alias="APP_HOST")
    app_port: int = Field(default=8000, alias="APP_PORT")
    health_path: str = Field(default="/api/health", alias="HEALTH_PATH")
    files_route: str = Field(default="/api/files", alias="FILES_ROUTE")
    files_dir: Path = Field(default=Path("./data/uploads"), alias="FILES_DIR")

    # --- Domain resolution ---
    # Checked in order; bare hosts get an https:// prefix
    domain_env_vars: list[str] = Field(
        default=[
            "PUBLIC_BASE_URL",
            "VERCEL_URL",
            "RAILWAY_PUBLIC_DOMAIN",
            "LIGHTNING_CLOUDSPACE_HOST",
        ],
        alias="DOMAIN_ENV_VARS",
    )
    tunnel_inspect_ports: list[int] = Field(default=[4040, 4041, 4042], alias="TUNNEL_INSPECT_PORTS")
    tunnel_discovery_urls: list[str] = Field(
        default=[
            "https://api.tunnelmole.com/tunnels",
            "https://api.loca.lt/tunnels",
        ],
        alias="TUNNEL_DISCOVERY_URLS",
    )
    hint_file: Path = Field(default=Path("./data/domain_hint.json"), alias="HINT_FILE")

    # --- HTTP timeouts (seconds) ---
    probe_timeout_seconds: float = Field(default=5.0, alias="PROBE_TIMEOUT_SECONDS", gt=0, le=30)
    tunnel_timeout_seconds: float = Field(default=2.0, alias="TUNNEL_TIMEOUT_SECONDS", gt=0, le=30)
    discovery_timeout_seconds: float = Field(default=3.0, alias="DISCOVERY_TIMEOUT_SECONDS", gt=0, le=30)
    upload_timeout_seconds: float = Field(default=30.0, alias="UPLOAD_TIMEOUT_SECONDS", gt=0, le=300)

    # --- Rate limiting ---
    rate_limit_sweep_seconds: int = Field(default=300, alias="RATE_LIMIT_SWEEP_SECONDS", ge=1)

    # --- Logging ---
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_file: Optional[str] = Field(default=None, alias="LOG_FILE")
    log_dir: Optional[str] = Field(default=None, alias="LOG_DIR")
    log_stdout: bool = Field(default=True, alias="SHARELINK_LOG_STDOUT")
    log_max_bytes: int = Field(default=10 * 1024 * 1024, alias="LOG_MAX_BYTES")  # 10MB
    log_backup_count: int = Field(default=5, alias="LOG_BACKUP_COUNT")

    @property
    def fallback_base_url(self) -> str:
        """Loopback address used when nothing public can be verified."""
        return f"http://localhost:{self.app_port}"

    @field_validator("health_path", "files_route")
    @classmethod
    def validate_paths(cls, v: str) -> str:
        """Route paths must be absolute and must not end with a slash."""
        if not validate_route_path(v):
            raise ValueError(f"Invalid route path: {v!r}")
        return v

    @field_validator("app_port")
    @classmethod
    def validate_app_port(cls, v: int) -> int:
        if not validate_port(v):
            raise ValueError("APP_PORT must be between 1 and 65535")
        return v

    @field_validator("tunnel_inspect_ports")
    @classmethod
    def validate_inspect_ports(cls, v: list[int]) -> list[int]:
        if not all(validate_port(p) for p in v):
            raise ValueError("TUNNEL_INSPECT_PORTS must contain ports between 1 and 65535")
        return v


# Global settings instance
settings = Settings()
