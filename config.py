"""
config.py
---------
Centralised configuration management for the SQL migration engine.

Loads settings from environment variables (with .env file support via
python-dotenv). Provides typed settings as frozen dataclasses so
configuration is immutable at runtime.

Design Decisions:
    * Every setting has a class-level default, so the engine works without
      any .env file; environment variables override for deployments.
    * Target database credentials are never part of this module's defaults.
      They reach the engine as an already-resolved connection descriptor.
"""
from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

_env_path = Path(__file__).parent / ".env"
if _env_path.exists():
    load_dotenv(dotenv_path=_env_path)


def _load_targets() -> dict[str, str]:
    """Parse ``TARGET_DATABASES`` (a JSON object of project id → URL)."""
    raw = os.getenv("TARGET_DATABASES", "").strip()
    if not raw:
        return {}
    try:
        targets = json.loads(raw)
    except ValueError as exc:
        raise ValueError(f"TARGET_DATABASES is not valid JSON: {exc}") from exc
    if not isinstance(targets, dict):
        raise ValueError("TARGET_DATABASES must be a JSON object")
    return {str(key): str(value) for key, value in targets.items()}


@dataclass(frozen=True)
class DatabaseConfig:
    """Connection pool and connectivity-probe settings for target databases."""
    connect_timeout: int = field(
        default_factory=lambda: int(os.getenv("DB_CONNECT_TIMEOUT", "10"))
    )
    pool_max_open: int = field(
        default_factory=lambda: int(os.getenv("DB_POOL_MAX_OPEN", "5"))
    )
    pool_max_idle: int = field(
        default_factory=lambda: int(os.getenv("DB_POOL_MAX_IDLE", "2"))
    )
    conn_max_lifetime: float = field(
        default_factory=lambda: float(os.getenv("DB_CONN_MAX_LIFETIME", "180"))
    )
    probe_attempts: int = field(
        default_factory=lambda: int(os.getenv("DB_PROBE_ATTEMPTS", "3"))
    )
    probe_delay: float = field(
        default_factory=lambda: float(os.getenv("DB_PROBE_DELAY", "2.0"))
    )


@dataclass(frozen=True)
class LoggingConfig:
    """Log level and optional log file."""
    log_level: str = field(
        default_factory=lambda: os.getenv("LOG_LEVEL", "INFO").upper()
    )
    log_file: str | None = field(
        default_factory=lambda: os.getenv("LOG_FILE")  # None → log to stderr only
    )


@dataclass(frozen=True)
class APIConfig:
    """HTTP request layer settings."""
    host: str = field(default_factory=lambda: os.getenv("API_HOST", "0.0.0.0"))
    port: int = field(default_factory=lambda: int(os.getenv("API_PORT", "8000")))
    targets: dict[str, str] = field(default_factory=_load_targets)


@dataclass(frozen=True)
class AppConfig:
    """Root application configuration."""
    db: DatabaseConfig = field(default_factory=DatabaseConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    api: APIConfig = field(default_factory=APIConfig)
    app_name: str = "SQL Migration Engine"
    app_version: str = "1.0.0"


def load_config() -> AppConfig:
    """
    Build and return the application configuration.

    Returns:
        AppConfig: Fully populated (and frozen) configuration object.

    Example::

        cfg = load_config()
        print(cfg.db.pool_max_open)    # 5
        print(cfg.db.probe_attempts)   # 3
    """
    return AppConfig()


# Module-level singleton used throughout the application
CONFIG: AppConfig = load_config()


def get_log_level() -> int:
    """Convert string log level from config to logging module constant."""
    level = getattr(logging, CONFIG.logging.log_level, None)
    if not isinstance(level, int):
        return logging.INFO
    return level
