"""servedir entry point.

Exit codes:
- 0: version/help printed, or server stopped with Ctrl+C
- 1: argument error, settings error, startup or runtime failure
"""

from __future__ import annotations

import asyncio
import sys
import traceback
from collections.abc import Callable, Sequence

from servedir.cli.parser import parse_argv
from servedir.core.config import Configuration, SettingsResolver
from servedir.core.errors import ConfigError, StartupError
from servedir.core.logging import (
    ServedirLogger,
    apply_logging_policy,
    colors_enabled,
    get_logger,
    get_verbosity,
)
from servedir.server import (
    FileServer,
    InterfaceAddresses,
    basic_auth,
    list_addresses,
    static_files,
)

log = get_logger(__name__)

_WILDCARD_HOSTS = frozenset({"", "0.0.0.0", "::"})


def _url(scheme: str, host: str, port: int) -> str:
    if ":" in host:
        host = f"[{host}]"
    return f"{scheme}://{host}:{port}"


def banner_lines(
    config: Configuration,
    scheme: str,
    port: int,
    addresses: InterfaceAddresses,
    *,
    color: bool = False,
) -> list[str]:
    """Startup banner: served directory and reachable URLs.

    The first address of each family is highlighted, the rest listed below it.
    """
    highlight = ServedirLogger.COLORS["INFO"] if color else ""
    reset = ServedirLogger.COLORS["RESET"] if color else ""

    lines = [f"Serving {config.files.prefix}"]
    if config.auth.enabled:
        lines.append(f"Basic auth enabled for user '{config.auth.username}'")

    host = config.server.host
    if host not in _WILDCARD_HOSTS:
        lines.append(f"Available on: {highlight}{_url(scheme, host, port)}{reset}")
        return lines

    families = [("IPv4", addresses.ipv4)]
    if host != "0.0.0.0":
        families.append(("IPv6", addresses.ipv6))

    lines.append("Available on:")
    for label, addrs in families:
        for index, addr in enumerate(addrs):
            url = _url(scheme, addr, port)
            if index == 0:
                lines.append(f"  {label}: {highlight}{url}{reset}")
            else:
                lines.append(f"  {' ' * len(label)}  {url}")
    return lines


async def serve(
    config: Configuration,
    *,
    addresses: Callable[[], InterfaceAddresses] | None = None,
) -> None:
    """Build the server from ``config`` and run it until shutdown."""
    enumerate_addresses = addresses or list_addresses
    server = FileServer(config.server, verbosity=int(get_verbosity()))
    server.on_error(lambda err: log.error(str(err)))

    def announce(scheme: str, _host: str, port: int) -> None:
        color = colors_enabled()
        for line in banner_lines(config, scheme, port, enumerate_addresses(), color=color):
            print(line)
        print("Hit CTRL-C to stop the server")

    server.on_listening(announce)

    if config.auth.enabled:
        server.use("/", basic_auth(config.auth))
    server.use("/", static_files(config.files))

    log.verbose(
        f"host={config.server.host} port={config.server.port} ssl={config.server.ssl} "
        f"jail={config.files.jail} auth={'on' if config.auth.enabled else 'off'}"
    )
    await server.listen()


def main(argv: Sequence[str] | None = None) -> int:
    """Run servedir.

    Args:
        argv: Full argument vector (interpreter, script, args...). Defaults to
            the running process' vector.

    Returns:
        Process exit code
    """
    if argv is None:
        argv = [sys.executable, *sys.argv]

    try:
        apply_logging_policy(SettingsResolver().resolve_logging_policy())
    except ConfigError as e:
        log.error(str(e))
        return 1

    outcome = parse_argv(argv)
    if outcome.error is not None:
        log.error(str(outcome.error))
        return 1
    if outcome.action is not None:
        print(outcome.action.text)
        return 0

    config = outcome.config
    if config is None:
        raise RuntimeError("ParseOutcome without a configuration")
    try:
        asyncio.run(serve(config))
    except KeyboardInterrupt:
        print("\nInterrupted")
        return 0
    except StartupError:
        # already reported through on_error
        return 1
    except Exception as e:
        log.error(f"{type(e).__name__}: {e}")
        traceback.print_exc()
        return 1
    return 0
