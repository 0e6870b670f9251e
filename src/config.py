"""Configuration loader for the story universe registry

Configurable values come from config/config.yaml. Every key has a default
in config_schema, so a missing default file means "all defaults" rather
than an error. An explicitly named file that does not exist still fails.

Configuration is validated at load time using Pydantic.
Typos and invalid values fail fast with clear error messages.

Usage:
    from src.config import load_config, get, get_validated_config

    # Load and validate (call once at startup)
    load_config("config/config.yaml")

    # Get values by dot-path
    strict = get("registry.strict_author_lookup")

    # Or use the typed config object (preferred)
    config = get_validated_config()
    strict = config.registry.strict_author_lookup
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from .config_schema import AppConfig, load_validated_config, validate_config_dict


# Global config instances
_config: dict[str, Any] | None = None
_validated_config: AppConfig | None = None

# Default config path
DEFAULT_CONFIG_PATH: Path = Path(__file__).parent.parent / "config" / "config.yaml"


def load_config(config_path: str | None = None) -> dict[str, Any]:
    """Load and validate configuration from YAML file.

    Validates the config against the Pydantic schema. Invalid configs
    raise a ValidationError with details about what's wrong.

    Args:
        config_path: Path to config file. Defaults to config/config.yaml.

    Returns:
        Configuration dictionary with defaults filled in.

    Raises:
        FileNotFoundError: If an explicitly given config file doesn't exist.
        pydantic.ValidationError: If config is invalid.
    """
    global _config, _validated_config

    if config_path is None and not DEFAULT_CONFIG_PATH.exists():
        _validated_config = AppConfig()
        _config = _validated_config.model_dump()
        return _config

    path: Path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH

    _validated_config = load_validated_config(path)

    with open(path) as f:
        loaded: Any = yaml.safe_load(f)
        if not isinstance(loaded, dict):
            loaded = {}
    # Raw dict with defaults filled in, so get() never misses a known key
    _config = _validated_config.model_dump()
    _merge_raw(_config, loaded)

    return _config


def load_config_dict(config_dict: dict[str, Any]) -> dict[str, Any]:
    """Validate and install a config dict as the global config.

    Used by tests and embedders that build config in code.
    """
    global _config, _validated_config

    _validated_config = validate_config_dict(config_dict)
    _config = _validated_config.model_dump()
    _merge_raw(_config, config_dict)
    return _config


def _merge_raw(target: dict[str, Any], raw: dict[str, Any]) -> None:
    for key, value in raw.items():
        if isinstance(value, dict) and isinstance(target.get(key), dict):
            _merge_raw(target[key], value)
        else:
            target[key] = value


def get_config() -> dict[str, Any]:
    """Get the loaded configuration dict. Loads default if not already loaded.

    For typed access, use get_validated_config() instead.
    """
    global _config
    if _config is None:
        load_config()
    if _config is None:
        raise RuntimeError("Config failed to load. Call load_config() first.")
    return _config


def get_validated_config() -> AppConfig:
    """Get the validated configuration object.

    Returns a typed AppConfig instance with IDE autocompletion support.
    Loads default config if not already loaded.
    """
    global _validated_config
    if _validated_config is None:
        load_config()
    if _validated_config is None:
        raise RuntimeError("Validated config failed to load. Call load_config() first.")
    return _validated_config


def get(key: str, default: Any = None) -> Any:
    """Get a config value by dot-separated key path.

    Examples:
        get("registry.max_title_length")
        get("logging.default_recent")
    """
    config: dict[str, Any] = get_config()
    keys: list[str] = key.split(".")

    value: Any = config
    for k in keys:
        if isinstance(value, dict) and k in value:
            value = value[k]
        else:
            return default

    return value


def set_config_value(key: str, value: Any) -> None:
    """Set a config value by dot-separated key path.

    Used for runtime overrides (e.g., CLI args). The result is
    re-validated, so an invalid override raises immediately.

    Args:
        key: Dot-separated key path (e.g., "registry.strict_author_lookup")
        value: Value to set
    """
    global _config, _validated_config

    if _config is None:
        load_config()

    if _config is None:
        raise RuntimeError("Config failed to load. Call load_config() first.")

    keys = key.split(".")
    target = _config

    # Navigate to parent
    for k in keys[:-1]:
        if k not in target:
            target[k] = {}
        target = target[k]

    target[keys[-1]] = value

    _validated_config = validate_config_dict(_config)


def reset_config() -> None:
    """Forget the loaded config so the next access reloads it. For tests."""
    global _config, _validated_config
    _config = None
    _validated_config = None


def configure_logging(level: str | None = None) -> None:
    """Configure the standard library root logger from logging.level."""
    resolved = level or get("logging.level") or "INFO"
    logging.basicConfig(
        level=getattr(logging, str(resolved).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
