"""Normalize raw argv into a flat token stream.

- ``--name=value`` becomes ``--name``, ``value``
- ``-abc`` becomes ``-a``, ``-b``, ``-c``
- everything else passes through unchanged
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator


def _expand(arg: str) -> Iterator[str]:
    if arg.startswith("--"):
        name, sep, value = arg.partition("=")
        if sep:
            yield name
            yield value
        else:
            yield arg
    elif arg.startswith("-") and len(arg) > 2:
        for ch in arg[1:]:
            yield f"-{ch}"
    else:
        yield arg


def tokenize(args: Iterable[str]) -> list[str]:
    """Return the normalized token list for ``args``. Never fails."""
    tokens: list[str] = []
    for arg in args:
        tokens.extend(_expand(arg))
    return tokens
