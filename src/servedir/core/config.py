"""Configuration records and runtime settings.

Two separate concerns live here:

1. ``Configuration`` - the immutable record produced by the argument parser.
   It is grouped into server, auth and file settings and built from
   ``DEFAULT_CONFIGURATION`` through a ``ConfigBuilder``.

2. ``SettingsResolver`` - ambient runtime settings (logging) with priority:
   1. Environment variables (SERVEDIR_*)
   2. Config files (user > system)
   3. Defaults
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any

import yaml

from servedir.core.errors import ConfigError


@dataclass(frozen=True)
class ServerSettings:
    """Listening socket and TLS material."""

    host: str = "localhost"
    port: int = 8080
    ssl: bool = False
    key: str | None = None
    cert: str | None = None

    @property
    def scheme(self) -> str:
        return "https" if self.ssl else "http"


@dataclass(frozen=True)
class AuthSettings:
    """Basic auth credentials. A password turns authentication on."""

    username: str = "admin"
    password: str | None = None

    @property
    def enabled(self) -> bool:
        return self.password is not None


@dataclass(frozen=True)
class FileSettings:
    """Static file serving options."""

    prefix: str = "."
    use_index: bool = True
    jail: bool = False


@dataclass(frozen=True)
class Configuration:
    """Fully resolved configuration for one invocation."""

    server: ServerSettings = field(default_factory=ServerSettings)
    auth: AuthSettings = field(default_factory=AuthSettings)
    files: FileSettings = field(default_factory=FileSettings)


# Prefix "." is resolved against the working directory at build time.
DEFAULT_CONFIGURATION = Configuration()

_GROUPS = ("server", "auth", "files")


class ConfigBuilder:
    """Accumulate dotted-key assignments and produce a new Configuration.

    Example:
        config = ConfigBuilder().set("server.port", 9090).set("files.jail", True).build()
    """

    def __init__(self, base: Configuration = DEFAULT_CONFIGURATION) -> None:
        self._base = base
        self._values: dict[str, dict[str, Any]] = {group: {} for group in _GROUPS}

    def set(self, key: str, value: Any) -> ConfigBuilder:
        """Assign a value. Later assignments to the same key win.

        Args:
            key: Dotted key, e.g. 'server.port'

        Raises:
            KeyError: If the key does not name a configuration field
        """
        group, _, name = key.partition(".")
        if group not in self._values:
            raise KeyError(f"Unknown configuration key: {key}")
        known = {f.name for f in fields(getattr(self._base, group))}
        if name not in known:
            raise KeyError(f"Unknown configuration key: {key}")
        self._values[group][name] = value
        return self

    def build(self) -> Configuration:
        server = replace(self._base.server, **self._values["server"])
        auth = replace(self._base.auth, **self._values["auth"])
        files = replace(self._base.files, **self._values["files"])
        files = replace(files, prefix=os.path.abspath(files.prefix))
        return Configuration(server=server, auth=auth, files=files)


# ---------------------------------------------------------------------------
# Runtime settings
# ---------------------------------------------------------------------------

ALLOWED_LOGGING_LEVELS = frozenset({"quiet", "normal", "verbose", "debug"})
DEFAULT_LOGGING_LEVEL = "normal"

_TRUE_STRINGS = frozenset({"1", "true", "yes", "on"})
_FALSE_STRINGS = frozenset({"0", "false", "no", "off"})


@dataclass(frozen=True)
class LoggingPolicy:
    """Resolved, immutable logging policy."""

    level_name: str  # quiet | normal | verbose | debug
    emit_info: bool
    emit_verbose: bool
    emit_debug: bool
    color: bool
    source: str


class SettingsResolver:
    """Resolve runtime settings with strict priority.

    Example:
        resolver = SettingsResolver(user_config_path=Path('~/.config/servedir/config.yaml'))
        level, source = resolver.resolve('logging.level')
        # level = 'normal', source = 'default'
    """

    def __init__(
        self,
        user_config_path: Path | None = None,
        system_config_path: Path | None = None,
        defaults: dict[str, Any] | None = None,
        environ: dict[str, str] | None = None,
    ) -> None:
        self.user_config_path = user_config_path or Path.home() / ".config/servedir/config.yaml"
        self.system_config_path = system_config_path or Path("/etc/servedir/config.yaml")
        self.defaults = defaults or self._default_settings()
        self.environ = os.environ if environ is None else environ

        self._user_config: dict[str, Any] | None = None
        self._system_config: dict[str, Any] | None = None

    def resolve(self, key: str) -> tuple[Any, str]:
        """Resolve a settings value with priority.

        Args:
            key: Settings key (dot notation: 'logging.level')

        Returns:
            (value, source) tuple

        Raises:
            ConfigError: If key not found in any source
        """
        value = self._from_env(key)
        if value is not None:
            return value, "env"

        value = self._get_nested(self._get_user_config(), key)
        if value is not None:
            return value, "user_config"

        value = self._get_nested(self._get_system_config(), key)
        if value is not None:
            return value, "system_config"

        value = self._get_nested(self.defaults, key)
        if value is not None:
            return value, "default"

        raise ConfigError(f"Settings key '{key}' not found in any source")

    def resolve_logging_level(self) -> tuple[str, str]:
        """Resolve and validate logging.level.

        Returns:
            (level, source) with level in quiet | normal | verbose | debug

        Raises:
            ConfigError: If the resolved value is invalid.
        """
        key = "logging.level"
        value, source = self.resolve(key)
        if not isinstance(value, str):
            raise ConfigError(f"Settings key '{key}' must be a string, got {type(value).__name__}")

        norm = value.strip().lower()
        if norm not in ALLOWED_LOGGING_LEVELS:
            allowed = ", ".join(sorted(ALLOWED_LOGGING_LEVELS))
            raise ConfigError(f"Invalid '{key}': {value!r}. Allowed values: {allowed}")
        return norm, source

    def resolve_color(self) -> bool:
        key = "logging.color"
        value, _source = self.resolve(key)
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            norm = value.strip().lower()
            if norm in _TRUE_STRINGS:
                return True
            if norm in _FALSE_STRINGS:
                return False
        raise ConfigError(f"Settings key '{key}' must be a bool, got {value!r}")

    def resolve_logging_policy(self) -> LoggingPolicy:
        """Resolve the logging policy. Side-effect free."""
        level_name, source = self.resolve_logging_level()
        return LoggingPolicy(
            level_name=level_name,
            emit_info=level_name != "quiet",
            emit_verbose=level_name in ("verbose", "debug"),
            emit_debug=level_name == "debug",
            color=self.resolve_color(),
            source=source,
        )

    def _from_env(self, key: str) -> str | None:
        """Environment variable format: SERVEDIR_LOGGING_LEVEL."""
        env_key = f"SERVEDIR_{key.upper().replace('.', '_')}"
        return self.environ.get(env_key)

    def _get_user_config(self) -> dict[str, Any]:
        if self._user_config is None:
            self._user_config = self._load_yaml(self.user_config_path)
        return self._user_config

    def _get_system_config(self) -> dict[str, Any]:
        if self._system_config is None:
            self._system_config = self._load_yaml(self.system_config_path)
        return self._system_config

    def _load_yaml(self, path: Path) -> dict[str, Any]:
        if not path.exists():
            return {}

        try:
            with open(path) as f:
                data = yaml.safe_load(f)
                return data if isinstance(data, dict) else {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Failed to load settings from {path}: {e}") from e

    def _get_nested(self, data: dict[str, Any], key: str) -> Any | None:
        """Get nested value using dot notation.

        Example:
            data = {'logging': {'level': 'debug'}}
            _get_nested(data, 'logging.level') -> 'debug'
        """
        current: Any = data
        for part in key.split("."):
            if not isinstance(current, dict):
                return None
            current = current.get(part)
            if current is None:
                return None
        return current

    @staticmethod
    def _default_settings() -> dict[str, Any]:
        return {
            "logging": {
                "level": DEFAULT_LOGGING_LEVEL,
                "color": True,
            },
        }
