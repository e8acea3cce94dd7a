"""Configuration registry and loader.

Every configurable setting is declared here with its key, type, default and
description. The registry is the single source of truth for what settings
exist; the INI file only overrides defaults.
"""

import configparser
import logging
import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

logger = logging.getLogger("anticorruption_client.config")

CONFIG_ENV_VAR = "ANTICORRUPTION_CONFIG"


class ConfigType(Enum):
    STRING = "string"
    INT = "int"
    BOOL = "bool"


@dataclass(frozen=True, slots=True)
class ConfigEntry:
    key: str
    type: ConfigType
    default: str | int | bool
    description: str


# ---------------------------------------------------------------------------
# Registry -- every known setting
# ---------------------------------------------------------------------------

REGISTRY: list[ConfigEntry] = [
    # -- server --
    ConfigEntry("server.url", ConfigType.STRING, "https://localhost:8443", "Backend base URL"),
    ConfigEntry("server.verify_tls", ConfigType.BOOL, True, "Verify the backend TLS certificate"),
    # -- http --
    ConfigEntry(
        "http.timeout_seconds", ConfigType.INT, 0, "Per-request timeout in seconds (0 = none)"
    ),
    # -- dispatch --
    ConfigEntry("dispatch.max_workers", ConfigType.INT, 4, "Threads used for backend calls"),
    # -- logging --
    ConfigEntry("logging.level", ConfigType.STRING, "INFO", "Root log level"),
]

# Fast lookup by key
_REGISTRY_MAP: dict[str, ConfigEntry] = {e.key: e for e in REGISTRY}


# ---------------------------------------------------------------------------
# Value parsing
# ---------------------------------------------------------------------------


def parse_value(entry: ConfigEntry, raw: str) -> str | int | bool:
    """Parse a raw string value according to the entry's type."""
    match entry.type:
        case ConfigType.STRING:
            return raw
        case ConfigType.INT:
            return int(raw)
        case ConfigType.BOOL:
            return raw.strip().lower() in ("true", "1", "yes", "on")


# ---------------------------------------------------------------------------
# INI section/key -> registry key mapping
# ---------------------------------------------------------------------------

INI_MAP: dict[tuple[str, str], str] = {
    ("server", "URL"): "server.url",
    ("server", "VERIFY_TLS"): "server.verify_tls",
    ("http", "TIMEOUT_SECONDS"): "http.timeout_seconds",
    ("dispatch", "MAX_WORKERS"): "dispatch.max_workers",
    ("logging", "LEVEL"): "logging.level",
}


def default_config_path() -> Path:
    """Resolve the INI file location.

    Priority:
      1. ANTICORRUPTION_CONFIG environment variable
      2. instance/client.ini relative to the project root
    """
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path)
    source_root = Path(__file__).parent.parent.parent
    return source_root / "instance" / "client.ini"


def defaults() -> dict[str, str | int | bool]:
    return {entry.key: entry.default for entry in REGISTRY}


def load_config(path: str | Path | None = None) -> dict[str, str | int | bool]:
    """Load settings from an INI file on top of the registry defaults.

    A missing file is not an error: the defaults are returned. Unknown keys
    are logged and ignored. A value that does not parse raises ValueError.
    """
    values = defaults()
    config_path = Path(path) if path is not None else default_config_path()
    if not config_path.exists():
        logger.info(f"No config file at {config_path}, using defaults")
        return values

    parser = configparser.ConfigParser()
    # Keep option names as written (INI_MAP keys are upper case).
    parser.optionxform = str  # type: ignore[assignment,method-assign]
    parser.read(config_path, encoding="utf-8")

    for section in parser.sections():
        for option, raw in parser.items(section):
            key = INI_MAP.get((section.lower(), option.upper()))
            if key is None:
                logger.warning(f"Ignoring unknown setting [{section}] {option} in {config_path}")
                continue
            entry = _REGISTRY_MAP[key]
            try:
                values[key] = parse_value(entry, raw)
            except ValueError:
                raise ValueError(f"Invalid value for [{section}] {option}: {raw!r}") from None
    return values
