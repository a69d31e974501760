"""Application configuration loader.

Loads centralized configuration from data/config/app_config_v1.yaml
(or the file named by MATHSOLVE_CONFIG), falling back to built-in
defaults when no file exists.

Usage:
    from mathsolve.config.app_config import load_app_config, build_store

    config = load_app_config()
    store = build_store(config)
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import structlog
import yaml

from mathsolve.store.base import RecordStore
from mathsolve.store.rest_store import RestRecordStore
from mathsolve.store.sqlite_store import SqliteRecordStore

logger = structlog.get_logger(__name__)

# Config file path (relative to project root)
CONFIG_FILE = Path("data/config/app_config_v1.yaml")
CONFIG_ENV = "MATHSOLVE_CONFIG"


class ConfigError(Exception):
    """Invalid configuration."""


@dataclass
class StoreConfig:
    """Where records live."""

    backend: str = "sqlite"  # sqlite | rest
    db_path: str = "db/mathsolve.db"
    base_url: str = "http://localhost:5173"
    proxy_path: str = "/supabase-proxy"
    api_key_env: str | None = "MATHSOLVE_ANON_KEY"
    timeout_seconds: float = 20.0

    def get_api_key(self) -> str | None:
        """Get API key from environment variable."""
        if self.api_key_env:
            return os.environ.get(self.api_key_env)
        return None


@dataclass
class ScratchpadConfig:
    """Surface size and tool appearance."""

    width: int = 800
    height: int = 500
    background: str = "#ffffff"
    pen_color: str = "#1a1a2e"
    pen_width: int = 2
    eraser_width: int = 20


@dataclass
class AuthConfig:
    pbkdf2_iterations: int = 100_000


@dataclass
class WebConfig:
    cors_origins: list[str] = field(default_factory=lambda: ["*"])


@dataclass
class AppConfig:
    """Application-wide configuration."""

    store: StoreConfig = field(default_factory=StoreConfig)
    scratchpad: ScratchpadConfig = field(default_factory=ScratchpadConfig)
    auth: AuthConfig = field(default_factory=AuthConfig)
    web: WebConfig = field(default_factory=WebConfig)


# Module-level cache
_cached_config: AppConfig | None = None


def _parse_config(data: dict[str, Any]) -> AppConfig:
    """Parse configuration dictionary into AppConfig object.

    Unknown keys are ignored; missing keys take their defaults.
    """
    defaults = AppConfig()

    store_data = data.get("store") or {}
    store = StoreConfig(
        backend=store_data.get("backend", defaults.store.backend),
        db_path=store_data.get("db_path", defaults.store.db_path),
        base_url=store_data.get("base_url", defaults.store.base_url),
        proxy_path=store_data.get("proxy_path", defaults.store.proxy_path),
        api_key_env=store_data.get("api_key_env", defaults.store.api_key_env),
        timeout_seconds=float(store_data.get("timeout_seconds", defaults.store.timeout_seconds)),
    )
    if store.backend not in ("sqlite", "rest"):
        raise ConfigError(f"Unknown store backend: {store.backend}")

    pad = data.get("scratchpad") or {}
    scratchpad = ScratchpadConfig(
        width=int(pad.get("width", defaults.scratchpad.width)),
        height=int(pad.get("height", defaults.scratchpad.height)),
        background=pad.get("background", defaults.scratchpad.background),
        pen_color=pad.get("pen_color", defaults.scratchpad.pen_color),
        pen_width=int(pad.get("pen_width", defaults.scratchpad.pen_width)),
        eraser_width=int(pad.get("eraser_width", defaults.scratchpad.eraser_width)),
    )

    auth_data = data.get("auth") or {}
    auth = AuthConfig(
        pbkdf2_iterations=int(
            auth_data.get("pbkdf2_iterations", defaults.auth.pbkdf2_iterations)
        ),
    )

    web_data = data.get("web") or {}
    web = WebConfig(cors_origins=list(web_data.get("cors_origins", defaults.web.cors_origins)))

    return AppConfig(store=store, scratchpad=scratchpad, auth=auth, web=web)


def load_app_config(force_reload: bool = False) -> AppConfig:
    """Load application config.

    Args:
        force_reload: If True, ignore cached config and reload from file.

    Returns:
        AppConfig object with all settings.
    """
    global _cached_config

    if _cached_config is not None and not force_reload:
        return _cached_config

    env_path = os.environ.get(CONFIG_ENV)
    config_path = Path(env_path) if env_path else CONFIG_FILE

    if config_path.exists():
        logger.debug("loading_app_config", source=str(config_path))
        data = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
    else:
        logger.info("using_default_config")
        data = {}

    _cached_config = _parse_config(data)
    return _cached_config


def build_store(config: AppConfig | None = None) -> RecordStore:
    """Create the record store selected by the configuration."""
    config = config or load_app_config()
    store_config = config.store

    if store_config.backend == "rest":
        return RestRecordStore(
            base_url=store_config.base_url,
            api_key=store_config.get_api_key(),
            proxy_path=store_config.proxy_path,
            timeout=store_config.timeout_seconds,
        )

    store = SqliteRecordStore(Path(store_config.db_path))
    store.init_db()
    return store


def clear_config_cache() -> None:
    """Clear the configuration cache.

    Useful for testing or when config is modified at runtime.
    """
    global _cached_config
    _cached_config = None
