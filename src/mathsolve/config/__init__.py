"""Configuration package for mathsolve."""

from mathsolve.config.app_config import (
    AppConfig,
    AuthConfig,
    ConfigError,
    ScratchpadConfig,
    StoreConfig,
    WebConfig,
    build_store,
    clear_config_cache,
    load_app_config,
)

__all__ = [
    "AppConfig",
    "AuthConfig",
    "ConfigError",
    "ScratchpadConfig",
    "StoreConfig",
    "WebConfig",
    "build_store",
    "clear_config_cache",
    "load_app_config",
]
