"""Application configuration management."""

from __future__ import annotations

import json
import logging
import os
import sys
from configparser import ConfigParser
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from typing import Any, Mapping, MutableMapping

CONFIG_DIR_NAME = "linkresolver"
DEFAULT_JSON_FILENAME = "settings.json"
DEFAULT_INI_FILENAME = "settings.ini"
SETTINGS_SECTION = "resolver"

ENV_OVERRIDES = {
    "LINKRESOLVER_BASE_URL": "base_url",
    "LINKRESOLVER_MODEL": "model",
    "LINKRESOLVER_SEARCH_URL": "search_url",
}


logger = logging.getLogger(__name__)


class ConfigError(RuntimeError):
    """Raised when the resolver cannot be configured."""


def get_user_config_dir(app_name: str = CONFIG_DIR_NAME) -> Path:
    """Return the configuration directory for the current user.

    The directory is created on first use. On Windows the directory is
    under ``%APPDATA%``; otherwise the XDG base directory or ``~/.config``
    is used.
    """
    if sys.platform.startswith("win"):
        base_dir = Path(os.getenv("APPDATA", Path.home()))
    else:
        base_dir = Path(os.getenv("XDG_CONFIG_HOME", Path.home() / ".config"))
    config_dir = base_dir / app_name
    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir


class ConfigManager:
    """Handle loading and saving user configuration settings."""

    def __init__(
        self,
        app_name: str = CONFIG_DIR_NAME,
        *,
        format: str = "json",
        filename: str | None = None,
    ) -> None:
        self.app_name = app_name
        self.format = format.lower()
        if self.format not in {"json", "ini"}:
            raise ValueError("format must be either 'json' or 'ini'")
        if filename is None:
            filename = (
                DEFAULT_JSON_FILENAME if self.format == "json" else DEFAULT_INI_FILENAME
            )
        self.config_dir = get_user_config_dir(app_name)
        self.config_path = self.config_dir / filename

    def load(self) -> dict[str, Any]:
        """Load configuration from disk.

        Returns an empty dictionary if the configuration file is absent.
        """
        if not self.config_path.exists():
            return {}

        if self.format == "json":
            with self.config_path.open("r", encoding="utf-8") as fh:
                try:
                    return json.load(fh)
                except json.JSONDecodeError as exc:
                    raise ConfigError(
                        f"Invalid settings file {self.config_path}: {exc}"
                    ) from exc

        parser = ConfigParser()
        parser.read(self.config_path, encoding="utf-8")
        return {section: dict(parser.items(section)) for section in parser.sections()}

    def save(self, data: MutableMapping[str, Any]) -> None:
        """Persist configuration data to disk."""
        if self.format == "json":
            with self.config_path.open("w", encoding="utf-8") as fh:
                json.dump(data, fh, indent=2, sort_keys=True)
                fh.write("\n")
            return

        parser = ConfigParser()
        for section, values in data.items():
            if not isinstance(values, MutableMapping):
                raise ValueError("INI configuration requires mapping values per section")
            parser[section] = {
                str(key): "" if value is None else str(value)
                for key, value in values.items()
            }
        with self.config_path.open("w", encoding="utf-8") as fh:
            parser.write(fh)

    def update(self, data: MutableMapping[str, Any]) -> dict[str, Any]:
        """Update the stored configuration with ``data`` and return the result."""
        current = self.load()
        for section, values in data.items():
            if not isinstance(values, MutableMapping):
                raise ValueError("Configuration updates require mapping values per section")
            section_data = current.setdefault(section, {})
            if not isinstance(section_data, dict):
                raise ValueError("Existing section must be a mapping to apply updates")
            section_data.update(values)
        self.save(current)
        return current

    def __repr__(self) -> str:  # pragma: no cover - debugging helper
        return f"ConfigManager(app_name={self.app_name!r}, format={self.format!r}, path={self.config_path!s})"


@dataclass(frozen=True, slots=True)
class ResolverSettings:
    """Connection and behaviour settings for a resolution run."""

    base_url: str = "https://api.openai.com"
    model: str = "gpt-4o-mini"
    api_key_env: str = "OPENAI_API_KEY"
    confidence_floor: float = 0.8
    verify_urls: bool = True
    verify_timeout: float = 10.0
    request_timeout: float = 60.0
    max_retries: int = 2
    retry_backoff: float = 0.5
    max_automatic_rounds: int = 5
    search_url: str | None = None
    search_results: int = 5

    def api_key(self) -> str:
        """Return the API key from the environment or raise :class:`ConfigError`."""

        value = os.getenv(self.api_key_env, "").strip()
        if not value:
            raise ConfigError(f"{self.api_key_env} environment variable not set")
        return value

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


def _coerce_bool(value: Any) -> bool | None:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"1", "true", "yes", "on"}:
            return True
        if lowered in {"0", "false", "no", "off"}:
            return False
    return None


def _coerce_field(name: str, value: Any, default: Any) -> Any:
    """Return ``value`` converted to the type of ``default`` or ``default``."""

    if isinstance(default, bool):
        coerced = _coerce_bool(value)
        return default if coerced is None else coerced
    if isinstance(default, int):
        try:
            number = int(value)
        except (TypeError, ValueError):
            logger.warning("Ignoring invalid setting", extra={"setting": name, "value": value})
            return default
        return max(number, 0)
    if isinstance(default, float):
        try:
            number = float(value)
        except (TypeError, ValueError):
            logger.warning("Ignoring invalid setting", extra={"setting": name, "value": value})
            return default
        if number != number or number < 0:
            return default
        return number
    if value is None:
        return None
    text = str(value).strip()
    if name == "search_url":
        return text.rstrip("/") or None
    return text or default


def merge_settings(
    settings: ResolverSettings, overrides: Mapping[str, Any]
) -> ResolverSettings:
    """Return ``settings`` with recognised, non-``None`` ``overrides`` applied."""

    defaults = ResolverSettings()
    changes: dict[str, Any] = {}
    for item in fields(ResolverSettings):
        if item.name not in overrides:
            continue
        raw = overrides[item.name]
        if raw is None:
            continue
        changes[item.name] = _coerce_field(item.name, raw, getattr(defaults, item.name))
    merged = replace(settings, **changes)
    floor = min(1.0, max(0.0, merged.confidence_floor))
    if floor != merged.confidence_floor:
        merged = replace(merged, confidence_floor=floor)
    return merged


def load_settings(
    config_manager: ConfigManager | None = None,
    *,
    overrides: Mapping[str, Any] | None = None,
    environ: Mapping[str, str] | None = None,
) -> ResolverSettings:
    """Build settings from the settings file, the environment and ``overrides``."""

    manager = config_manager or ConfigManager()
    data = manager.load()
    section = data.get(SETTINGS_SECTION, {}) if isinstance(data, dict) else {}
    if not isinstance(section, dict):
        raise ConfigError(f"'{SETTINGS_SECTION}' settings must be a mapping")
    settings = merge_settings(ResolverSettings(), section)

    env = os.environ if environ is None else environ
    env_values = {
        field_name: env[variable]
        for variable, field_name in ENV_OVERRIDES.items()
        if env.get(variable)
    }
    settings = merge_settings(settings, env_values)
    if overrides:
        settings = merge_settings(settings, overrides)
    logger.debug("Resolver settings loaded", extra={"settings": settings.as_dict()})
    return settings


__all__ = [
    "ConfigError",
    "ConfigManager",
    "ResolverSettings",
    "get_user_config_dir",
    "load_settings",
    "merge_settings",
]
