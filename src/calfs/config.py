"""Configuration management for calfs."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

CALFS_HOME = Path(os.environ.get("CALFS_HOME", Path.home() / "calfs"))
CONFIG_FILE = CALFS_HOME / "config" / "calfs.conf"


@dataclass
class Config:
    """calfs configuration."""

    ics: str = ""
    gcal_config_folder: str = ""
    gcal_calendar_id: str = "primary"
    google_client_secret_file: str = ""
    mountpoint: str = str(Path.home() / "cal")
    cache_ttl: float = 60.0


def _unquote(value: str) -> str:
    """Strip surrounding quotes, or an inline comment from an unquoted value."""
    if value.startswith(('"', "'")):
        quote = value[0]
        end_quote = value.find(quote, 1)
        if end_quote != -1:
            return value[1:end_quote]
        return value[1:]
    if "#" in value:
        return value.split("#")[0].strip()
    return value


def load_config(path: Path | None = None) -> Config:
    """Load configuration from calfs.conf file."""
    config = Config()
    path = path or CONFIG_FILE

    if not path.exists():
        return config

    for line in path.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        if "=" not in line:
            continue

        key, _, value = line.partition("=")
        key = key.strip().lower()
        value = _unquote(value.strip())

        match key:
            case "ics":
                config.ics = value
            case "gcal_config_folder":
                config.gcal_config_folder = value
            case "gcal_calendar_id":
                config.gcal_calendar_id = value
            case "google_client_secret_file":
                config.google_client_secret_file = value
            case "mountpoint":
                config.mountpoint = value
            case "cache_ttl":
                try:
                    config.cache_ttl = float(value)
                except ValueError:
                    logger.warning(f"Ignoring invalid CACHE_TTL: {value!r}")

    return config
