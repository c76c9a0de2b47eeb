"""
Configuration for PortHound.

Settings come from built-in defaults, optionally overridden by a
[hound] table in a TOML file, optionally overridden again by CLI flags.

Example porthound.toml:

    [hound]
    command_timeout = 10
    path_timeout = 20
    kill_timeout = 10
    probe_host = "8.8.8.8"
    probe_port = 80
"""

from __future__ import annotations

import logging
import tomllib
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Optional, Union

from hound.errors import ConfigError


logger = logging.getLogger(__name__)

CONFIG_SECTION = "hound"


@dataclass(frozen=True)
class HoundConfig:
    """Runtime settings shared by every operation."""
    # Time limit for netstat / tasklist / hostname
    command_timeout: float = 10.0
    # wmic is markedly slower than the other tools
    path_timeout: float = 20.0
    kill_timeout: float = 10.0
    # Used only to make the OS pick an outbound route; nothing is sent
    probe_host: str = "8.8.8.8"
    probe_port: int = 80

    def with_overrides(self, **overrides: Any) -> "HoundConfig":
        """Return a copy with every non-None override applied and validated."""
        changes = {key: value for key, value in overrides.items() if value is not None}
        if not changes:
            return self
        return validate_config(replace(self, **changes))


def _validate_timeout(value: Any, field_name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigError(f"{field_name} must be a number, got {value!r}")
    if value <= 0:
        raise ConfigError(f"{field_name} must be positive, got {value}")
    return float(value)


def validate_config(config: HoundConfig) -> HoundConfig:
    """
    Validate a configuration object.

    Raises:
        ConfigError: If any value is out of range or of the wrong type
    """
    for name in ("command_timeout", "path_timeout", "kill_timeout"):
        _validate_timeout(getattr(config, name), f"{CONFIG_SECTION}.{name}")

    if not isinstance(config.probe_host, str) or not config.probe_host:
        raise ConfigError(f"{CONFIG_SECTION}.probe_host must be a non-empty string")

    port = config.probe_port
    if isinstance(port, bool) or not isinstance(port, int) or not 1 <= port <= 0xFFFF:
        raise ConfigError(f"{CONFIG_SECTION}.probe_port must be between 1 and 65535, got {port!r}")

    return config


def load_config(path: Optional[Union[str, Path]] = None) -> HoundConfig:
    """
    Load configuration from a TOML file.

    Args:
        path: TOML file to read; defaults are returned when None

    Returns:
        Validated HoundConfig

    Raises:
        ConfigError: If the file is missing, malformed, or holds bad values
    """
    if path is None:
        return HoundConfig()

    config_path = Path(path)
    logger.debug("Loading configuration from %s", config_path)

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except FileNotFoundError as e:
        raise ConfigError(f"Configuration file not found: {config_path}") from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Malformed configuration file {config_path}: {e}") from e

    section = data.get(CONFIG_SECTION, {})
    if not isinstance(section, dict):
        raise ConfigError(f"[{CONFIG_SECTION}] must be a table")

    known = {f.name for f in fields(HoundConfig)}
    unknown = sorted(set(section) - known)
    if unknown:
        raise ConfigError(f"Unknown configuration key(s): {', '.join(unknown)}")

    return validate_config(HoundConfig(**section))
