"""
User configuration persistence.

Stores settings like backend location and notification timing in a JSON file.
"""

import json
import logging
from pathlib import Path
from typing import TypedDict


class Config(TypedDict, total=False):
    """User configuration."""
    backend: str  # http, mock
    base_url: str  # Root of the local PDRPG API
    timeout: float  # Seconds per remote call
    api_key: str | None
    notification_ttl_ms: int  # Level-up toast lifetime
    attribute_cap: int  # Attribute value shown as 100% on the radar
    default_character_class: str  # Class provisioned when no character exists
    serialize_writes: bool  # Apply same-domain calls in issuance order
    log_level: str


DEFAULT_CONFIG: Config = {
    "backend": "http",
    "base_url": "http://127.0.0.1:3030/api",
    "timeout": 30,
    "api_key": None,
    "notification_ttl_ms": 5000,
    "attribute_cap": 50,
    "default_character_class": "Warrior",
    "serialize_writes": False,
    "log_level": "WARNING",
}


def get_config_path(data_dir: Path | str = ".") -> Path:
    """Get path to config file."""
    return Path(data_dir) / ".pdrpg_config.json"


def load_config(data_dir: Path | str = ".") -> Config:
    """Load config from file, or return defaults if not found."""
    path = get_config_path(data_dir)

    if not path.exists():
        return DEFAULT_CONFIG.copy()

    try:
        with open(path, "r", encoding="utf-8") as f:
            saved = json.load(f)
        # Merge with defaults to handle missing keys
        config = DEFAULT_CONFIG.copy()
        if isinstance(saved, dict):
            config.update(saved)
        return config
    except (json.JSONDecodeError, IOError):
        return DEFAULT_CONFIG.copy()


def save_config(config: Config, data_dir: Path | str = ".") -> bool:
    """Save config to file. Returns True on success."""
    path = get_config_path(data_dir)

    # Ensure directory exists
    path.parent.mkdir(parents=True, exist_ok=True)

    try:
        with open(path, "w", encoding="utf-8") as f:
            json.dump(config, f, indent=2)
        return True
    except IOError:
        return False


def set_base_url(base_url: str, data_dir: Path | str = ".") -> None:
    """Save backend location."""
    config = load_config(data_dir)
    config["base_url"] = base_url
    save_config(config, data_dir)


def set_notification_ttl(ttl_ms: int, data_dir: Path | str = ".") -> None:
    """Save level-up toast lifetime."""
    config = load_config(data_dir)
    config["notification_ttl_ms"] = ttl_ms
    save_config(config, data_dir)


def set_serialize_writes(enabled: bool, data_dir: Path | str = ".") -> None:
    """Save same-domain ordering preference."""
    config = load_config(data_dir)
    config["serialize_writes"] = enabled
    save_config(config, data_dir)


def configure_logging(config: Config | None = None) -> None:
    """Apply the configured log level to the package logger."""
    level = (config or DEFAULT_CONFIG).get("log_level", "WARNING")
    logging.getLogger("pdrpg").setLevel(getattr(logging, str(level).upper(), logging.WARNING))
