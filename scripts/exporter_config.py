#!/usr/bin/env python3
"""
Exporter Settings

Loads the JSON settings file once at startup. Only `cities` is required:

    {
        "cities": ["Ljubljana", "Maribor"],
        "interval_seconds": 600,
        "port": 9336
    }
"""

import json
from dataclasses import dataclass, field
from pathlib import Path

from arso_fetch import ARSO_URL, FETCH_MAX_RETRIES, FETCH_TIMEOUT_SEC

SCRIPT_DIR = Path(__file__).parent
SETTINGS_PATH = SCRIPT_DIR / "settings.json"

DEFAULT_INTERVAL_SEC = 10 * 60
DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 9336


@dataclass(frozen=True)
class Settings:
    """Exporter configuration."""
    cities: tuple
    url: str = ARSO_URL
    interval_seconds: int = DEFAULT_INTERVAL_SEC
    timeout_seconds: float = FETCH_TIMEOUT_SEC
    fetch_retries: int = FETCH_MAX_RETRIES
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    watchlist: frozenset = field(init=False, repr=False)

    def __post_init__(self):
        object.__setattr__(self, 'watchlist', frozenset(self.cities))


def _require(condition: bool, message: str):
    if not condition:
        raise ValueError(message)


def parse_settings(data: dict) -> Settings:
    """Validate a decoded settings object.

    Raises:
        ValueError: If a key is missing or has an invalid value
    """
    _require(isinstance(data, dict), "Settings must be a JSON object")

    cities = data.get('cities')
    _require(isinstance(cities, list) and cities,
             "'cities' must be a non-empty list of station names")
    _require(all(isinstance(c, str) and c.strip() for c in cities),
             "'cities' entries must be non-empty strings")

    interval = data.get('interval_seconds', DEFAULT_INTERVAL_SEC)
    _require(isinstance(interval, int) and not isinstance(interval, bool) and interval > 0,
             "'interval_seconds' must be a positive integer")

    timeout = data.get('timeout_seconds', FETCH_TIMEOUT_SEC)
    _require(isinstance(timeout, (int, float)) and not isinstance(timeout, bool) and timeout > 0,
             "'timeout_seconds' must be a positive number")

    retries = data.get('fetch_retries', FETCH_MAX_RETRIES)
    _require(isinstance(retries, int) and not isinstance(retries, bool) and retries >= 1,
             "'fetch_retries' must be an integer >= 1")

    url = data.get('url', ARSO_URL)
    _require(isinstance(url, str) and url.startswith(('http://', 'https://')),
             "'url' must be an http(s) URL")

    host = data.get('host', DEFAULT_HOST)
    _require(isinstance(host, str) and host, "'host' must be a non-empty string")

    port = data.get('port', DEFAULT_PORT)
    _require(isinstance(port, int) and not isinstance(port, bool) and 0 < port < 65536,
             "'port' must be an integer between 1 and 65535")

    return Settings(
        cities=tuple(c.strip() for c in cities),
        url=url,
        interval_seconds=interval,
        timeout_seconds=timeout,
        fetch_retries=retries,
        host=host,
        port=port,
    )


def load_settings(path: Path = SETTINGS_PATH) -> Settings:
    """Load and validate the settings file.

    Raises:
        ValueError: If the file is missing, not valid JSON, or invalid
    """
    try:
        with open(path, encoding='utf-8') as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise ValueError(f"Settings file not found: {path}") from e
    except json.JSONDecodeError as e:
        raise ValueError(f"Settings file {path} is not valid JSON: {e}") from e

    return parse_settings(data)
