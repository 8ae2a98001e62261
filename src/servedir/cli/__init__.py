"""Command-line front end: tokenizer, option table, parser and entry point."""

from servedir.cli.parser import (
    OptionParser,
    ParseOutcome,
    TerminalAction,
    canonical_args,
    parse_args,
    parse_argv,
)
from servedir.cli.tokenizer import tokenize

__all__ = [
    "OptionParser",
    "ParseOutcome",
    "TerminalAction",
    "canonical_args",
    "parse_args",
    "parse_argv",
    "tokenize",
]
