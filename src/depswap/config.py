"""
Configuration for depswap installs.

Settings live in a JSON file (``~/.config/depswap/config.json`` unless
``DEPSWAP_CONFIG_PATH`` points elsewhere) and are turned into an
:class:`InstallConfig` per install, with command-line overrides on top.
"""

import json
import logging
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional

from .child_process import STDIO_MODES

logger = logging.getLogger(__name__)

CONFIG_PATH_ENV = "DEPSWAP_CONFIG_PATH"


class ConfigError(ValueError):
    """Raised for configuration values depswap cannot use."""


@dataclass
class InstallConfig:
    """How to invoke the package manager for one install."""

    npm_client: Optional[str] = None
    registry: Optional[str] = None
    npm_client_args: List[str] = field(default_factory=list)
    npm_global_style: bool = False
    mutex: Optional[str] = None
    stdio: str = "pipe"
    sub_command: str = "install"

    def __post_init__(self):
        if self.stdio not in STDIO_MODES:
            raise ConfigError(f"stdio must be one of {STDIO_MODES}, got {self.stdio!r}")
        if not self.sub_command:
            raise ConfigError("sub_command must not be empty")
        if isinstance(self.npm_client_args, str):
            self.npm_client_args = self.npm_client_args.split()
        self.npm_client_args = list(self.npm_client_args or [])


def default_config_path() -> Path:
    override = os.environ.get(CONFIG_PATH_ENV)
    if override:
        return Path(override)
    return Path.home() / ".config" / "depswap" / "config.json"


def get_default_config(config_dir: Path) -> Dict[str, Any]:
    return {
        "npm_client": "npm",
        "registry": None,
        "npm_client_args": [],
        "npm_global_style": False,
        "mutex": None,
        "stdio": "pipe",
        "sub_command": "install",
        "language": "en",
        "lock_dir": str(config_dir / ".locks"),
        "lock_timeout": 300.0,
        "serialize_installs": True,
    }


_BOOL_KEYS = {"npm_global_style", "serialize_installs"}
_FLOAT_KEYS = {"lock_timeout"}
_LIST_KEYS = {"npm_client_args"}


class ConfigManager:
    """
    Manages loading and first-time creation of the depswap config file.
    """

    def __init__(self, config_path=None, suppress_init_messages=True):
        self.config_path = Path(config_path) if config_path else default_config_path()
        self.config_dir = self.config_path.parent
        self.suppress_init_messages = suppress_init_messages
        self.config = self._load_or_create_config()

    def _load_or_create_config(self) -> Dict[str, Any]:
        defaults = get_default_config(self.config_dir)
        if not self.config_path.exists():
            logger.debug("creating default config at %s", self.config_path)
            self._write(defaults)
            return defaults
        try:
            with open(self.config_path, "r", encoding="utf-8") as f:
                stored = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Config file {self.config_path} is not valid JSON: {e}")
        if not isinstance(stored, dict):
            raise ConfigError(f"Config file {self.config_path} must contain a JSON object")
        # fill in keys added since the file was written
        merged = dict(defaults)
        merged.update(stored)
        return merged

    def _write(self, config: Dict[str, Any]) -> None:
        self.config_dir.mkdir(parents=True, exist_ok=True)
        with open(self.config_path, "w", encoding="utf-8") as f:
            json.dump(config, f, indent=4)

    def save_config(self) -> None:
        self._write(self.config)

    def get(self, key, default=None):
        return self.config.get(key, default)

    def set(self, key: str, value) -> None:
        """Sets ``key`` (parsing strings from the command line) and persists it."""
        if key not in get_default_config(self.config_dir):
            raise ConfigError(f"Unknown config key {key!r}")
        self.config[key] = self._coerce(key, value)
        self.save_config()

    @staticmethod
    def _coerce(key, value):
        if not isinstance(value, str):
            return value
        if key in _BOOL_KEYS:
            lowered = value.strip().lower()
            if lowered in ("1", "true", "yes", "on"):
                return True
            if lowered in ("0", "false", "no", "off"):
                return False
            raise ConfigError(f"{key} expects a boolean, got {value!r}")
        if key in _FLOAT_KEYS:
            try:
                return float(value)
            except ValueError:
                raise ConfigError(f"{key} expects a number, got {value!r}")
        if key in _LIST_KEYS:
            return value.split()
        if value.lower() in ("", "none", "null"):
            return None
        return value

    def to_install_config(self, **overrides) -> InstallConfig:
        """Builds an :class:`InstallConfig`; ``None`` overrides are ignored."""
        known = {f.name for f in fields(InstallConfig)}
        values = {key: self.config.get(key) for key in known if self.config.get(key) is not None}
        for key, value in overrides.items():
            if key not in known:
                raise ConfigError(f"Unknown install option {key!r}")
            if value is not None:
                values[key] = value
        return InstallConfig(**values)
