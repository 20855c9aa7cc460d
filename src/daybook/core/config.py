"""Configuration management for Daybook."""

import copy
from pathlib import Path
from typing import Any, Iterator, Optional

import yaml  # type: ignore[import-untyped]
from jsonschema import ValidationError, validate  # type: ignore[import-untyped]


class ConfigManager:
    """Manage application configuration."""

    DEFAULT_CONFIG = {
        "version": "1.0",
        "general": {
            "data_dir": "~/.daybook/data",
        },
        "export": {
            "output_dir": "~/Documents",
            "date_format": "%x",
        },
        "notifications": {
            "enabled": False,
            "backend": "auto",
            "types": {
                "timer": True,
                "export": True,
            },
        },
        "display": {
            "recent_entries": 10,
        },
        "advanced": {
            "backup_on_start": False,
            "log_level": "WARNING",
        },
    }

    CONFIG_SCHEMA = {
        "type": "object",
        "properties": {
            "version": {"type": "string"},
            "general": {
                "type": "object",
                "properties": {
                    "data_dir": {"type": "string"},
                },
            },
            "export": {
                "type": "object",
                "properties": {
                    "output_dir": {"type": "string"},
                    "date_format": {"type": "string", "minLength": 1},
                },
            },
            "notifications": {
                "type": "object",
                "properties": {
                    "enabled": {"type": "boolean"},
                    "backend": {"type": "string"},
                    "types": {
                        "type": "object",
                        "additionalProperties": {"type": "boolean"},
                    },
                },
            },
            "display": {
                "type": "object",
                "properties": {
                    "recent_entries": {"type": "integer", "minimum": 1, "maximum": 1000},
                },
            },
            "advanced": {
                "type": "object",
                "properties": {
                    "backup_on_start": {"type": "boolean"},
                    "log_level": {
                        "type": "string",
                        "enum": ["DEBUG", "INFO", "WARNING", "ERROR"],
                    },
                },
            },
        },
        "required": ["version"],
    }

    def __init__(self, config_path: Optional[Path] = None):
        """Load ``config_path`` (default ~/.daybook/config.yml), creating it if missing.

        Raises:
            ValueError: If the file was invalid. It is moved to
                ``config.yml.backup`` and defaults are written in its place.
        """
        self.config_path = Path(config_path or Path.home() / ".daybook" / "config.yml")
        self._config: dict[str, Any] = copy.deepcopy(self.DEFAULT_CONFIG)

        if not self.config_path.exists():
            self.save()
            return

        try:
            with open(self.config_path, encoding="utf-8") as f:
                stored = yaml.safe_load(f) or {}
            if not isinstance(stored, dict):
                raise ValueError("Invalid configuration: top level must be a mapping")
            self._config = _merged(self.DEFAULT_CONFIG, stored)
            self.validate()
        except (ValueError, yaml.YAMLError) as e:
            backup_path = self.config_path.with_suffix(".yml.backup")
            self.config_path.rename(backup_path)
            self.reset()
            raise ValueError(f"Config file was invalid, backed up to {backup_path}: {e}")

    def get(self, key: str, default: Any = None) -> Any:
        """Look up a dotted key such as ``export.date_format``."""
        value: Any = self._config
        for part in key.split("."):
            if not isinstance(value, dict) or value.get(part) is None:
                return default
            value = value[part]
        return value

    def set(self, key: str, value: Any) -> None:
        """Set a dotted key and save.

        Raises:
            ValueError: If the result fails validation. Nothing is changed.
        """
        candidate = copy.deepcopy(self._config)
        *parents, leaf = key.split(".")
        section = candidate
        for part in parents:
            if not isinstance(section.get(part), dict):
                section[part] = {}
            section = section[part]
        section[leaf] = value

        _check(candidate, self.CONFIG_SCHEMA)
        self._config = candidate
        self.save()

    def validate(self) -> bool:
        """Raise ValueError unless the current settings match the schema."""
        _check(self._config, self.CONFIG_SCHEMA)
        return True

    def save(self) -> None:
        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.config_path, "w", encoding="utf-8") as f:
            yaml.safe_dump(self._config, f, default_flow_style=False, sort_keys=False)

    def reset(self) -> None:
        """Restore and save the defaults."""
        self._config = copy.deepcopy(self.DEFAULT_CONFIG)
        self.save()

    def to_dict(self) -> dict[str, Any]:
        return copy.deepcopy(self._config)

    def get_all_keys(self) -> list[str]:
        """Dotted names of every leaf setting, in file order."""
        return list(_leaf_keys(self._config))

    @property
    def data_dir(self) -> Path:
        """Configured data directory with ``~`` expanded."""
        return Path(self.get("general.data_dir")).expanduser()

    @property
    def export_dir(self) -> Path:
        """Configured export directory with ``~`` expanded."""
        return Path(self.get("export.output_dir")).expanduser()


def _merged(defaults: dict[str, Any], stored: dict[str, Any]) -> dict[str, Any]:
    """Stored settings layered over the defaults, section by section."""
    result = copy.deepcopy(defaults)
    for key, value in stored.items():
        if isinstance(result.get(key), dict) and isinstance(value, dict):
            result[key] = _merged(result[key], value)
        else:
            result[key] = value
    return result


def _check(config: dict[str, Any], schema: dict[str, Any]) -> None:
    try:
        validate(instance=config, schema=schema)
    except ValidationError as e:
        raise ValueError(f"Invalid configuration: {e.message}")


def _leaf_keys(config: dict[str, Any], prefix: str = "") -> Iterator[str]:
    for key, value in config.items():
        name = f"{prefix}{key}"
        if isinstance(value, dict):
            yield from _leaf_keys(value, f"{name}.")
        else:
            yield name
