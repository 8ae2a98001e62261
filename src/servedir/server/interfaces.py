"""Local network addresses for the startup banner."""

from __future__ import annotations

import ipaddress
import socket
from dataclasses import dataclass

import psutil


@dataclass(frozen=True)
class InterfaceAddresses:
    ipv4: tuple[str, ...] = ()
    ipv6: tuple[str, ...] = ()


def list_addresses() -> InterfaceAddresses:
    """Return non-loopback IPv4 and IPv6 addresses of local interfaces.

    Order follows psutil's interface order; duplicates are dropped and IPv6
    zone suffixes ("%eth0") removed.
    """
    ipv4: list[str] = []
    ipv6: list[str] = []

    for _name, addrs in psutil.net_if_addrs().items():
        for addr in addrs:
            if addr.family == socket.AF_INET:
                target = ipv4
            elif addr.family == socket.AF_INET6:
                target = ipv6
            else:
                continue

            address = addr.address.split("%", 1)[0]
            try:
                ip = ipaddress.ip_address(address)
            except ValueError:
                continue
            if ip.is_loopback:
                continue
            if address not in target:
                target.append(address)

    return InterfaceAddresses(ipv4=tuple(ipv4), ipv6=tuple(ipv6))
