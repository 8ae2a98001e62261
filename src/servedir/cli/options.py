"""Static option table.

Every recognized spelling maps to one ``OptionSpec``. The table is built once
at import time and exposed read-only.
"""

from __future__ import annotations

import math
import re
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any

DEFAULT_USERNAME = "admin"

_PREFIXED_INT_RE = re.compile(r"0(?:[xX][0-9a-fA-F]+|[oO][0-7]+|[bB][01]+)")
_DECIMAL_RE = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")


class OptionId(Enum):
    VERSION = "version"
    HELP = "help"
    HOST = "host"
    PORT = "port"
    SSL = "ssl"
    KEY = "key"
    CERT = "cert"
    AUTH = "auth"
    JAIL = "jail"


class OptionKind(Enum):
    TERMINAL = "terminal"  # ends parsing
    VALUE = "value"  # consumes the next token
    FLAG = "flag"  # boolean switch


def coerce_int32(text: str) -> int:
    """Weak string-to-number coercion truncated to a signed 32-bit integer.

    Non-numeric text becomes 0; no range checking is done.

    >>> coerce_int32("9090"), coerce_int32("12.9"), coerce_int32("0x1F"), coerce_int32("abc")
    (9090, 12, 31, 0)
    """
    s = text.strip()
    if not s:
        return 0
    if _PREFIXED_INT_RE.fullmatch(s):
        value = int(s, 0)
    elif _DECIMAL_RE.fullmatch(s):
        number = float(s)
        if not math.isfinite(number):
            return 0
        value = int(number)
    else:
        return 0

    value &= 0xFFFFFFFF
    return value - 0x100000000 if value >= 0x80000000 else value


def parse_auth(value: str) -> dict[str, Any]:
    """Split ``user:pass`` (or a bare password) into auth assignments.

    Raises:
        ValueError: If the value has more than one ':' separator
    """
    parts = value.split(":")
    if len(parts) == 1:
        return {"auth.password": parts[0]}
    if len(parts) == 2:
        username, password = parts
        return {"auth.username": username or DEFAULT_USERNAME, "auth.password": password}
    raise ValueError("expected <user:pass> or <pass>")


def _assign(key: str, convert: Callable[[str], Any] = str) -> Callable[[str], dict[str, Any]]:
    def transform(value: str) -> dict[str, Any]:
        return {key: convert(value)}

    return transform


@dataclass(frozen=True)
class OptionSpec:
    option_id: OptionId
    short: str
    long: str
    kind: OptionKind
    help: str
    metavar: str | None = None
    # VALUE options: token -> {dotted key: value}
    transform: Callable[[str], dict[str, Any]] | None = None
    # FLAG options: dotted key set to True
    flag_key: str | None = None

    @property
    def spellings(self) -> tuple[str, str]:
        return (self.short, self.long)

    def flag_assignment(self) -> dict[str, Any]:
        """Assignments made by a FLAG option.

        Raises:
            TypeError: If this option is not a flag
        """
        if self.kind is not OptionKind.FLAG or self.flag_key is None:
            raise TypeError(f"{self.long} is not a flag option")
        return {self.flag_key: True}

    def value_assignment(self, value: str) -> dict[str, Any]:
        """Assignments made by a VALUE option for ``value``.

        Raises:
            TypeError: If this option takes no value
            ValueError: If ``value`` is rejected by the option's transform
        """
        if self.kind is not OptionKind.VALUE or self.transform is None:
            raise TypeError(f"{self.long} does not take a value")
        return self.transform(value)

    def usage(self) -> str:
        text = f"{self.short}, {self.long}"
        if self.metavar:
            text = f"{text} <{self.metavar}>"
        return text


OPTION_SPECS: tuple[OptionSpec, ...] = (
    OptionSpec(
        OptionId.VERSION, "-v", "--version", OptionKind.TERMINAL, "Print the version and exit"
    ),
    OptionSpec(OptionId.HELP, "-h", "--help", OptionKind.TERMINAL, "Print this help and exit"),
    OptionSpec(
        OptionId.HOST,
        "-H",
        "--host",
        OptionKind.VALUE,
        "Address to bind (default: localhost)",
        metavar="host",
        transform=_assign("server.host"),
    ),
    OptionSpec(
        OptionId.PORT,
        "-p",
        "--port",
        OptionKind.VALUE,
        "Port to listen on (default: 8080)",
        metavar="port",
        transform=_assign("server.port", coerce_int32),
    ),
    OptionSpec(
        OptionId.SSL,
        "-s",
        "--ssl",
        OptionKind.FLAG,
        "Serve over HTTPS (needs --key and --cert)",
        flag_key="server.ssl",
    ),
    OptionSpec(
        OptionId.KEY,
        "-k",
        "--key",
        OptionKind.VALUE,
        "TLS private key file",
        metavar="file",
        transform=_assign("server.key"),
    ),
    OptionSpec(
        OptionId.CERT,
        "-c",
        "--cert",
        OptionKind.VALUE,
        "TLS certificate file",
        metavar="file",
        transform=_assign("server.cert"),
    ),
    OptionSpec(
        OptionId.AUTH,
        "-a",
        "--auth",
        OptionKind.VALUE,
        "Require basic auth (user defaults to admin)",
        metavar="user:pass",
        transform=parse_auth,
    ),
    OptionSpec(
        OptionId.JAIL,
        "-j",
        "--jail",
        OptionKind.FLAG,
        "Refuse files that resolve outside the served directory",
        flag_key="files.jail",
    ),
)

OPTION_TABLE: MappingProxyType[str, OptionSpec] = MappingProxyType(
    {spelling: spec for spec in OPTION_SPECS for spelling in spec.spellings}
)

SPECS_BY_ID: MappingProxyType[OptionId, OptionSpec] = MappingProxyType(
    {spec.option_id: spec for spec in OPTION_SPECS}
)


def lookup(token: str) -> OptionSpec | None:
    return OPTION_TABLE.get(token)
