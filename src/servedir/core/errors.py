"""Error handling with friendly messages."""

from __future__ import annotations


class ServedirError(Exception):
    """Base exception for all servedir errors."""

    def __init__(self, message: str, suggestion: str | None = None) -> None:
        self.message = message
        self.suggestion = suggestion
        super().__init__(message)

    def __str__(self) -> str:
        if self.suggestion:
            return f"{self.message}\nSuggestion: {self.suggestion}"
        return self.message


class CliError(ServedirError):
    """Command-line argument error."""

    pass


class InvalidOptionArgument(CliError):
    """Option is missing its value or the value is malformed."""

    def __init__(self, option: str, detail: str | None = None) -> None:
        self.option = option
        message = f"Invalid argument for option '{option}'"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message, "Run 'servedir --help' for usage")


class InvalidArgument(CliError):
    """Unknown option or empty argument."""

    def __init__(self, token: str) -> None:
        self.token = token
        super().__init__(
            f"Invalid argument '{token}'",
            "Run 'servedir --help' for usage",
        )


class ConfigError(ServedirError):
    """Configuration error."""

    pass


class StartupError(ServedirError):
    """Server failed to start."""

    pass
