"""Configuration and persisted settings for sizescope."""

import configparser
import json
import logging
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, ValidationError

from sizescope.cache import DEFAULT_MAX_ENTRIES, DEFAULT_TTL_MILLIS

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "application.properties"
SETTINGS_FILE_NAME = "settings.json"

# Properties files have no sections; everything is read under this one
_SECTION = "sizescope"


class AppConfig(BaseModel):
    """Tunables read from application.properties."""

    cache_max_entries: int = Field(DEFAULT_MAX_ENTRIES, description="LRU bound of the size cache")
    cache_ttl_millis: int = Field(DEFAULT_TTL_MILLIS, description="Freshness window of cache entries")
    log_level: str = Field("WARNING", description="Root log level")
    log_file: Optional[str] = Field(None, description="Optional log file path")


class DeleteSettings(BaseModel):
    """Delete behavior, persisted as JSON."""

    always_permanent_delete: bool = Field(False, description="Skip the trash and delete permanently")
    confirm_permanent_delete: bool = Field(True, description="Ask before a permanent delete")


def _read_properties(path: Path) -> dict[str, str]:
    parser = configparser.ConfigParser(
        interpolation=None,
        delimiters=("=", ":"),
        comment_prefixes=("#", "!"),
        strict=False,
    )
    parser.optionxform = str  # keep key case (cache.maxEntries)
    try:
        text = path.read_text(encoding="utf-8")
        parser.read_string(f"[{_SECTION}]\n{text}", source=str(path))
    except (OSError, UnicodeDecodeError, configparser.Error) as e:
        logger.debug("Ignoring unreadable config %s: %s", path, e)
        return {}
    return dict(parser[_SECTION])


def _get_int(props: dict[str, str], key: str, default: int, minimum: int = 0) -> int:
    value = props.get(key)
    if value is None:
        return default
    try:
        parsed = int(value.strip())
    except ValueError:
        return default
    return parsed if parsed >= minimum else default


def load_config(config_path: str | Path | None = None) -> AppConfig:
    """
    Load configuration from a properties file.

    Recognized keys: cache.maxEntries, cache.ttlMillis, log.level, log.file.
    Missing files and unset or unparsable values fall back to defaults.

    Args:
        config_path: Properties file; defaults to application.properties
            in the current working directory.

    Returns:
        AppConfig with defaults filled in
    """
    path = Path(config_path) if config_path is not None else Path.cwd() / CONFIG_FILE_NAME
    if not path.is_file():
        return AppConfig()

    props = _read_properties(path)
    defaults = AppConfig()
    log_level = props.get("log.level", "").strip() or defaults.log_level
    log_file = props.get("log.file", "").strip() or None

    return AppConfig(
        cache_max_entries=_get_int(props, "cache.maxEntries", defaults.cache_max_entries),
        cache_ttl_millis=_get_int(props, "cache.ttlMillis", defaults.cache_ttl_millis),
        log_level=log_level.upper(),
        log_file=log_file,
    )


def load_settings(settings_path: str | Path | None = None) -> DeleteSettings:
    """Load delete settings from disk, or defaults if missing or corrupt."""
    path = Path(settings_path) if settings_path is not None else Path.cwd() / SETTINGS_FILE_NAME
    if not path.exists():
        return DeleteSettings()

    try:
        with open(path, encoding="utf-8") as f:
            return DeleteSettings.model_validate(json.load(f))
    except (json.JSONDecodeError, OSError, ValidationError) as e:
        logger.warning("Could not read settings from %s: %s", path, e)
        return DeleteSettings()


def save_settings(settings: DeleteSettings, settings_path: str | Path | None = None) -> bool:
    """Save delete settings to disk."""
    path = Path(settings_path) if settings_path is not None else Path.cwd() / SETTINGS_FILE_NAME
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(settings.model_dump(), f, indent=2)
        return True
    except OSError as e:
        logger.warning("Could not save settings to %s: %s", path, e)
        return False
