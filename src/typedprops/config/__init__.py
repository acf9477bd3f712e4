"""Configuration management for typedprops."""

from .loader import get_config, load_config, reset_config
from .settings import (
    Config,
    MenuConfig,
    StorageConfig,
    TypesConfig,
    WidgetConfig,
)

__all__ = [
    "Config",
    "WidgetConfig",
    "TypesConfig",
    "MenuConfig",
    "StorageConfig",
    "load_config",
    "get_config",
    "reset_config",
]
