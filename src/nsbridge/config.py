"""Bridge configuration.

Settings are resolved from three layers, lowest precedence first:

1. the defaults of :class:`BridgeConfig`;
2. a YAML file, given explicitly or through ``NSBRIDGE_CONFIG``;
3. environment variables ``NSBRIDGE_RUNTIME``, ``NSBRIDGE_CALENDAR`` and
   ``NSBRIDGE_TIMEZONE``.

Example file::

    runtime: reference
    calendar: gregorian
    timezone: Europe/Berlin
"""
from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any

import yaml

from nsbridge.errors import ConfigError

logger = logging.getLogger(__name__)

CONFIG_ENV = "NSBRIDGE_CONFIG"

_ENV_KEYS: dict[str, str] = {
    "NSBRIDGE_RUNTIME": "runtime",
    "NSBRIDGE_CALENDAR": "calendar",
    "NSBRIDGE_TIMEZONE": "timezone",
}


@dataclass(frozen=True)
class BridgeConfig:
    """Resolved bridge settings.

    Parameters
    ----------
    runtime:
        Backend name: ``"auto"``, ``"objc"``, ``"reference"`` or the name
        of an entry-point registered runtime.
    calendar:
        Calendar identifier used when no explicit calendar is passed.
    timezone:
        IANA zone name, or ``None`` for the host's current zone.
    objc_path, foundation_path, appkit_path:
        Explicit library paths overriding ``ctypes.util.find_library``.
    """

    runtime: str = "auto"
    calendar: str = "gregorian"
    timezone: str | None = None
    objc_path: str | None = None
    foundation_path: str | None = None
    appkit_path: str | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.runtime, str) or not self.runtime:
            raise ConfigError(f"runtime must be a non-empty string, got {self.runtime!r}")
        if not isinstance(self.calendar, str) or not self.calendar:
            raise ConfigError(f"calendar must be a non-empty string, got {self.calendar!r}")
        for name in ("timezone", "objc_path", "foundation_path", "appkit_path"):
            value = getattr(self, name)
            if value is not None and not isinstance(value, str):
                raise ConfigError(f"{name} must be a string or null, got {value!r}")

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "BridgeConfig":
        """Build a config from a plain mapping, rejecting unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(
                f"Unknown configuration key(s): {', '.join(unknown)}. "
                f"Valid keys: {', '.join(sorted(known))}"
            )
        return cls(**dict(data))

    def with_environment(self, environ: Mapping[str, str] | None = None) -> "BridgeConfig":
        """Return a copy with ``NSBRIDGE_*`` environment overrides applied."""
        environ = os.environ if environ is None else environ
        overrides = {
            key: environ[var] for var, key in _ENV_KEYS.items() if environ.get(var)
        }
        if overrides:
            logger.debug("Applying environment overrides: %s", sorted(overrides))
        return replace(self, **overrides)


def load_config(
    path: str | Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> BridgeConfig:
    """Resolve a :class:`BridgeConfig` from file and environment.

    Parameters
    ----------
    path:
        YAML file to read.  Defaults to ``$NSBRIDGE_CONFIG`` when set.
    environ:
        Environment mapping; defaults to ``os.environ``.

    Raises
    ------
    ConfigError
        If the file is missing, is not valid YAML, is not a mapping or
        holds invalid values.
    """
    environ = os.environ if environ is None else environ
    if path is None and environ.get(CONFIG_ENV):
        path = environ[CONFIG_ENV]

    config = BridgeConfig()
    if path is not None:
        config = _read_file(Path(path))
    return config.with_environment(environ)


def _read_file(path: Path) -> BridgeConfig:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Cannot read configuration file {path}: {exc}") from exc
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration file {path} must contain a mapping")
    logger.debug("Loaded bridge configuration from %s", path)
    return BridgeConfig.from_mapping(data)
