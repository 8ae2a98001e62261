"""servedir core: configuration records, settings, errors and logging."""

from servedir.core.config import (
    DEFAULT_CONFIGURATION,
    AuthSettings,
    ConfigBuilder,
    Configuration,
    FileSettings,
    LoggingPolicy,
    ServerSettings,
    SettingsResolver,
)
from servedir.core.errors import (
    CliError,
    ConfigError,
    InvalidArgument,
    InvalidOptionArgument,
    ServedirError,
    StartupError,
)
from servedir.core.logging import (
    VerbosityLevel,
    apply_logging_policy,
    get_logger,
    get_verbosity,
    set_colors,
    set_verbosity,
)

__all__ = [
    # Config
    "Configuration",
    "ServerSettings",
    "AuthSettings",
    "FileSettings",
    "DEFAULT_CONFIGURATION",
    "ConfigBuilder",
    "SettingsResolver",
    "LoggingPolicy",
    # Errors
    "ServedirError",
    "CliError",
    "InvalidOptionArgument",
    "InvalidArgument",
    "ConfigError",
    "StartupError",
    # Logging
    "VerbosityLevel",
    "get_logger",
    "set_verbosity",
    "get_verbosity",
    "set_colors",
    "apply_logging_policy",
]
