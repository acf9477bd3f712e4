"""Configuration loading.

Sources, lowest precedence first:

1. ``Config`` defaults
2. the YAML file: the ``config_path`` argument, else ``$TYPEDPROPS_CONFIG``,
   else ``config/typedprops.yaml``
3. ``TYPEDPROPS_<SECTION>__<FIELD>`` environment variables, for example
   ``TYPEDPROPS_WIDGET__BLUR_SETTLE_MS=250`` or ``TYPEDPROPS_LOG_LEVEL=DEBUG``

A ``.env`` file next to the config file (or the explicit ``env_path``) is
loaded first, so it can feed both ``${VAR}`` references and overrides.
A relative ``storage.settings_path`` is resolved against the config file's
directory.
"""

import logging
import os
import re
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv
from pydantic import ValidationError

from ..errors import ConfigError
from .settings import Config

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "TYPEDPROPS_CONFIG"
OVERRIDE_PREFIX = "TYPEDPROPS_"
DEFAULT_CONFIG_PATH = Path("config/typedprops.yaml")

_ENV_REFERENCE = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}")

_SECTIONS = ("widget", "types", "menu", "storage")

_config: Optional[Config] = None


def _expand_env_refs(obj: Any) -> Any:
    """Replace ``${VAR}`` references anywhere inside strings."""
    if isinstance(obj, str):
        return _ENV_REFERENCE.sub(lambda m: os.environ.get(m.group(1), ""), obj)
    if isinstance(obj, dict):
        return {key: _expand_env_refs(value) for key, value in obj.items()}
    if isinstance(obj, list):
        return [_expand_env_refs(item) for item in obj]
    return obj


def _scalar(raw: str) -> Any:
    """YAML scalar for an override value: "250" -> 250, "false" -> False."""
    try:
        value = yaml.safe_load(raw)
    except yaml.YAMLError:
        return raw
    # "typedprops:" would load as a mapping
    if value is None or isinstance(value, (dict, list)):
        return raw
    return value


def _env_overrides() -> Dict[str, Any]:
    """Collect ``TYPEDPROPS_*`` overrides for known sections and fields."""
    overrides: Dict[str, Any] = {}
    for name, raw in os.environ.items():
        if not name.startswith(OVERRIDE_PREFIX) or name == CONFIG_ENV_VAR:
            continue
        path = name[len(OVERRIDE_PREFIX) :].lower().split("__")
        section = path[0]
        if section not in Config.model_fields:
            continue
        value = _scalar(raw)
        if len(path) == 1 and section not in _SECTIONS:
            overrides[section] = value
        elif len(path) == 2 and section in _SECTIONS:
            overrides.setdefault(section, {})[path[1]] = value
    return overrides


def _merge(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    merged = dict(base)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def resolve_config_path(config_path: Optional[Path] = None) -> Path:
    if config_path is not None:
        return Path(config_path)
    from_env = os.environ.get(CONFIG_ENV_VAR)
    if from_env:
        return Path(from_env)
    return DEFAULT_CONFIG_PATH


def load_config(
    config_path: Optional[Path] = None,
    env_path: Optional[Path] = None,
) -> Config:
    """Load the configuration and make it the current one.

    Args:
        config_path: YAML file; see the module docstring for the fallbacks.
        env_path: ``.env`` file (default: beside the config file).

    Returns:
        The loaded Config.

    Raises:
        ConfigError: If the merged configuration fails validation.
    """
    global _config

    config_path = resolve_config_path(config_path)
    if env_path is None:
        env_path = config_path.parent / ".env"
    if env_path.exists():
        load_dotenv(env_path)

    data: Dict[str, Any] = {}
    if config_path.exists():
        with open(config_path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ConfigError(str(config_path), ["top level must be a mapping"])
        logger.debug(f"Loaded config from {config_path}")
    else:
        logger.debug(f"No config file at {config_path}, using defaults")

    data = _merge(_expand_env_refs(data), _env_overrides())

    try:
        config = Config(**data)
    except ValidationError as e:
        raise ConfigError(str(config_path), [err["msg"] for err in e.errors()]) from e

    settings_path = Path(config.storage.settings_path)
    if config_path.exists() and not settings_path.is_absolute():
        config.storage.settings_path = str(config_path.parent / settings_path)

    _config = config
    return _config


def get_config() -> Config:
    """The current config; defaults until ``load_config`` runs."""
    global _config
    if _config is None:
        _config = Config()
    return _config


def reset_config() -> None:
    global _config
    _config = None
