"""
ConfigManager: YAML-backed balance configuration access for Alchemy (2025).

Purpose
-------
- Provide hierarchical, dot-notation access to tunable balance values
  (tier thresholds, paging limits) kept in `config/*.yaml`.
- Allow runtime overrides for tests and operator tooling without touching
  the YAML files.

Responsibilities
----------------
- Load and deep-merge every YAML file under `Config.CONFIG_DIR`.
- Serve reads from an in-memory cache; overrides win over YAML defaults.
- Run registered validators on writes so a bad override never lands.

Non-Responsibilities
--------------------
- Environment/static settings (handled by `Config`)
- Interpreting values (each consumer validates the shape it needs)

Key Design Decisions
--------------------
- YAML is the single source for **defaults**; `set()` stores **overrides**
  in memory only.
- Lazily loads on first `get()` so import order never matters.

Dependencies
------------
- PyYAML (`yaml.safe_load`)
- `alchemy.core.config.config.Config` for the config directory
- `alchemy.core.logging.logger.get_logger` for structured logs
"""

from __future__ import annotations

import copy
from pathlib import Path
from typing import Any, Callable, Dict, MutableMapping, Optional

import yaml

from alchemy.core.config.config import Config
from alchemy.core.config.errors import ConfigInitializationError, ConfigValidationError
from alchemy.core.logging.logger import get_logger

logger = get_logger(__name__)

_MISSING = object()


class ConfigManager:
    """
    Class-level configuration store (no instantiation).

    Examples
    --------
    >>> tiers = ConfigManager.get("rewards.tiers")
    >>> ConfigManager.get("rewards.history.max_per_page", 100)
    100
    """

    _defaults: Dict[str, Any] = {}
    _overrides: Dict[str, Any] = {}
    _validators: Dict[str, Callable[[Any], Any]] = {}
    _initialized: bool = False
    _config_dir: Optional[Path] = None

    # =========================================================================
    # YAML LOADING & DEFAULTS
    # =========================================================================

    @staticmethod
    def _deep_merge_dict(
        target: MutableMapping[str, Any],
        source: MutableMapping[str, Any],
    ) -> None:
        """Recursively merge `source` into `target` (in-place)."""
        for key, value in source.items():
            if isinstance(value, dict) and isinstance(target.get(key), dict):
                ConfigManager._deep_merge_dict(target[key], value)
            else:
                target[key] = copy.deepcopy(value)

    @classmethod
    def _load_yaml_configs(cls, config_dir: Path) -> Dict[str, Any]:
        merged: Dict[str, Any] = {}

        if not config_dir.exists():
            logger.warning(
                "Config directory not found; using built-in defaults only",
                extra={"config_dir": str(config_dir)},
            )
            return merged

        yaml_files = sorted(config_dir.rglob("*.yaml")) + sorted(config_dir.rglob("*.yml"))
        if not yaml_files:
            logger.info(
                "No YAML config files discovered; using built-in defaults only",
                extra={"config_dir": str(config_dir)},
            )
            return merged

        for yaml_file in yaml_files:
            try:
                with yaml_file.open("r", encoding="utf-8") as handle:
                    data = yaml.safe_load(handle)
            except (OSError, yaml.YAMLError) as exc:
                logger.error(
                    "Failed to load YAML config",
                    extra={
                        "file": str(yaml_file.relative_to(config_dir)),
                        "error": str(exc),
                        "error_type": type(exc).__name__,
                    },
                    exc_info=True,
                )
                raise ConfigInitializationError(
                    f"Could not load config file '{yaml_file}'"
                ) from exc

            if isinstance(data, dict):
                cls._deep_merge_dict(merged, data)
                logger.debug(
                    "Loaded YAML config",
                    extra={"file": str(yaml_file.relative_to(config_dir))},
                )
            elif data is not None:
                logger.warning(
                    "Ignoring non-dict YAML root object",
                    extra={
                        "file": str(yaml_file.relative_to(config_dir)),
                        "root_type": type(data).__name__,
                    },
                )

        logger.info(
            "YAML configs loaded",
            extra={"yaml_file_count": len(yaml_files), "top_level_keys": sorted(merged)},
        )
        return merged

    @classmethod
    def load(cls, config_dir: Optional[Path] = None) -> None:
        """
        (Re)load YAML defaults from disk.

        Overrides set through `set()` survive a reload.

        Raises
        ------
        ConfigInitializationError
            If a YAML file exists but cannot be read or parsed.
        """
        directory = Path(config_dir) if config_dir is not None else Path(Config.CONFIG_DIR)
        cls._defaults = cls._load_yaml_configs(directory)
        cls._config_dir = directory
        cls._initialized = True

    @classmethod
    def reset(cls) -> None:
        """Drop overrides and loaded defaults; the next read reloads YAML."""
        cls._defaults = {}
        cls._overrides = {}
        cls._initialized = False
        cls._config_dir = None

    # =========================================================================
    # VALIDATION HOOKS
    # =========================================================================

    @classmethod
    def register_validator(cls, key: str, validator: Callable[[Any], Any]) -> None:
        """
        Register a validator for a specific configuration key path.

        Validators are invoked on write and must either return the value to
        store or raise to block the write.
        """
        cls._validators[key] = validator
        logger.debug(
            "ConfigManager validator registered",
            extra={
                "config_key": key,
                "validator": getattr(validator, "__name__", "anonymous"),
            },
        )

    @classmethod
    def _apply_validator(cls, key: str, value: Any) -> Any:
        validator = cls._validators.get(key)
        if not validator:
            return value

        try:
            return validator(value)
        except (TypeError, ValueError, ConfigValidationError) as exc:
            logger.error(
                "Config validation failed",
                extra={
                    "config_key": key,
                    "error": str(exc),
                    "error_type": type(exc).__name__,
                },
            )
            raise ConfigValidationError(
                f"Validation failed for config key '{key}': {exc}"
            ) from exc

    # =========================================================================
    # READ / WRITE API
    # =========================================================================

    @staticmethod
    def _lookup(source: Dict[str, Any], key: str) -> Any:
        value: Any = source
        for part in key.split("."):
            if not isinstance(value, dict) or part not in value:
                return _MISSING
            value = value[part]
        return value

    @classmethod
    def get(cls, key: str, default: Any = None) -> Any:
        """
        Retrieve a configuration value by dot-notation path.

        Overrides win over YAML defaults. Returned containers are copies, so
        callers may mutate them freely.

        Examples
        --------
        >>> ConfigManager.get("rewards.tiers")
        [{'name': 'Novice', 'min_lifetime_points': 0}, ...]
        """
        if not cls._initialized:
            cls.load()

        if key in cls._overrides:
            return copy.deepcopy(cls._overrides[key])

        value = cls._lookup(cls._defaults, key)
        if value is _MISSING:
            return default
        return copy.deepcopy(value)

    @classmethod
    def set(cls, key: str, value: Any) -> None:
        """
        Store an in-memory override for `key`.

        Raises
        ------
        ConfigValidationError
            If a registered validator rejects the value.
        """
        validated = cls._apply_validator(key, value)
        cls._overrides[key] = copy.deepcopy(validated)
        logger.info("Config override applied", extra={"config_key": key})

    @classmethod
    def clear_override(cls, key: str) -> None:
        cls._overrides.pop(key, None)
