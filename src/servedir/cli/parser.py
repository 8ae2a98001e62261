"""Option parser: normalized tokens -> Configuration or terminal action.

The parser walks the token list once with a cursor. It performs no I/O: help
and version requests come back as a ``TerminalAction`` for the caller to
print, and malformed input raises a ``CliError`` that ``parse_argv`` turns
into ``ParseOutcome.error``.
"""

from __future__ import annotations

import os
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Literal

from servedir import __version__
from servedir.cli.options import (
    OPTION_SPECS,
    SPECS_BY_ID,
    OptionId,
    OptionKind,
    lookup,
)
from servedir.cli.tokenizer import tokenize
from servedir.core.config import DEFAULT_CONFIGURATION, ConfigBuilder, Configuration
from servedir.core.errors import CliError, InvalidArgument, InvalidOptionArgument

# argv[0] and argv[1] are the interpreter and the script
ARGV_SKIP = 2

PROG = "servedir"


def help_text(prog: str = PROG) -> str:
    lines = [f"Usage: {prog} [options] [file]", ""]
    width = max(len(spec.usage()) for spec in OPTION_SPECS)
    for spec in OPTION_SPECS:
        lines.append(f"  {spec.usage().ljust(width)}  {spec.help}")
    lines.append("")
    lines.append("  file  Directory to serve (default: current directory)")
    return "\n".join(lines)


def version_text() -> str:
    return f"v{__version__}"


@dataclass(frozen=True)
class TerminalAction:
    kind: Literal["version", "help"]
    text: str


@dataclass(frozen=True)
class ParseOutcome:
    """Exactly one of ``config``, ``action`` or ``error`` is set."""

    config: Configuration | None = None
    action: TerminalAction | None = None
    error: CliError | None = None

    def __post_init__(self) -> None:
        present = [x for x in (self.config, self.action, self.error) if x is not None]
        if len(present) != 1:
            raise ValueError("ParseOutcome needs exactly one of config, action or error")

    @property
    def ok(self) -> bool:
        return self.error is None


class OptionParser:
    """Single pass over a normalized token list."""

    def __init__(self, skip: int = ARGV_SKIP) -> None:
        self.skip = skip

    def parse(self, tokens: Sequence[str]) -> Configuration | TerminalAction:
        """Parse ``tokens`` starting at index ``skip``.

        Raises:
            InvalidOptionArgument: Value option without a usable value
            InvalidArgument: Unknown option or empty token
        """
        builder = ConfigBuilder()
        i = self.skip

        while i < len(tokens):
            token = tokens[i]
            spec = lookup(token)

            if spec is None:
                if token == "" or token.startswith("-"):
                    raise InvalidArgument(token)
                # Last positional wins.
                builder.set("files.prefix", os.path.abspath(token))
                i += 1
                continue

            if spec.kind is OptionKind.TERMINAL:
                if spec.option_id is OptionId.VERSION:
                    return TerminalAction("version", version_text())
                return TerminalAction("help", help_text())

            if spec.kind is OptionKind.FLAG:
                for key, value in spec.flag_assignment().items():
                    builder.set(key, value)
                i += 1
                continue

            if i + 1 >= len(tokens) or tokens[i + 1].startswith("-"):
                raise InvalidOptionArgument(token)

            try:
                updates = spec.value_assignment(tokens[i + 1])
            except ValueError as e:
                raise InvalidOptionArgument(token, str(e)) from e
            for key, value in updates.items():
                builder.set(key, value)
            i += 2

        return builder.build()


def parse_argv(argv: Sequence[str]) -> ParseOutcome:
    """Tokenize and parse a full argument vector (interpreter, script, args...)."""
    try:
        result = OptionParser().parse(tokenize(argv))
    except CliError as e:
        return ParseOutcome(error=e)
    if isinstance(result, TerminalAction):
        return ParseOutcome(action=result)
    return ParseOutcome(config=result)


def parse_args(args: Sequence[str]) -> ParseOutcome:
    """Parse user arguments only (no interpreter/script entries)."""
    return parse_argv(["python", PROG, *args])


def canonical_args(config: Configuration) -> list[str]:
    """Minimal argument list that parses back to ``config``.

    One token per non-default field, long spellings, values joined with '='.
    """
    defaults = DEFAULT_CONFIGURATION
    args: list[str] = []

    def long(option_id: OptionId) -> str:
        return SPECS_BY_ID[option_id].long

    server = config.server
    if server.host != defaults.server.host:
        args.append(f"{long(OptionId.HOST)}={server.host}")
    if server.port != defaults.server.port:
        # Unsigned form keeps negative values away from the leading '-' check.
        args.append(f"{long(OptionId.PORT)}={server.port & 0xFFFFFFFF}")
    if server.ssl:
        args.append(long(OptionId.SSL))
    if server.key is not None:
        args.append(f"{long(OptionId.KEY)}={server.key}")
    if server.cert is not None:
        args.append(f"{long(OptionId.CERT)}={server.cert}")

    if config.auth.password is not None:
        args.append(f"{long(OptionId.AUTH)}={config.auth.username}:{config.auth.password}")

    if config.files.jail:
        args.append(long(OptionId.JAIL))
    if config.files.prefix != os.path.abspath(defaults.files.prefix):
        args.append(config.files.prefix)

    return args
