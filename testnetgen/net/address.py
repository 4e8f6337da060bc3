"""testnetgen.net.address

Node i gets the starting address with `i` added to the last octet.

Only the last octet moves. Past .255 it wraps to .0 and the third octet
stays put; peer memos of already-deployed networks encode exactly this, so it
is preserved rather than fixed.
"""

from __future__ import annotations

import ipaddress
import logging
import socket
from collections.abc import Callable, Iterable

from testnetgen.core.exceptions import InvalidAddressError

logger = logging.getLogger(__name__)


def _parse_ipv4(ip: str) -> ipaddress.IPv4Address:
    try:
        addr = ipaddress.ip_address(ip.strip())
    except ValueError as e:
        raise InvalidAddressError(f"{ip}: not an IP address") from e
    if isinstance(addr, ipaddress.IPv6Address):
        mapped = addr.ipv4_mapped
        if mapped is None:
            raise InvalidAddressError(f"{ip}: non ipv4 address")
        return mapped
    return addr


def calculate_ip(ip: str, index: int) -> str:
    """Pure: same (ip, index) always yields the same address."""

    if index < 0:
        raise ValueError(f"index must be >= 0, got {index}")

    octets = bytearray(_parse_ipv4(ip).packed)
    octets[3] = (octets[3] + index) % 256
    return str(ipaddress.IPv4Address(bytes(octets)))


def octet_headroom(ip: str) -> int:
    """How many nodes fit before the last octet wraps."""

    return 256 - _parse_ipv4(ip).packed[3]


# Routable but never contacted: connecting a UDP socket only selects a route.
_ROUTE_TARGET = ("10.254.254.254", 1)


def _route_address() -> list[str]:
    """Source address of the interface holding the default route."""

    try:
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as s:
            s.connect(_ROUTE_TARGET)
            return [s.getsockname()[0]]
    except OSError:
        return []


def _hostname_addresses() -> list[str]:
    try:
        infos = socket.getaddrinfo(socket.gethostname(), None, socket.AF_INET)
    except OSError:
        return []
    return [str(info[4][0]) for info in infos]


def first_usable_ipv4(candidates: Iterable[str]) -> str:
    """First candidate that is IPv4 and neither loopback nor unspecified."""

    for candidate in candidates:
        try:
            addr = ipaddress.ip_address(candidate)
        except ValueError:
            continue
        if not isinstance(addr, ipaddress.IPv4Address):
            continue
        if addr.is_loopback or addr.is_unspecified:
            continue
        return str(addr)
    raise InvalidAddressError("no usable IPv4 address on any interface: are you connected to the network?")


def external_ip() -> str:
    """IPv4 address of a local interface that is up and not loopback."""

    return first_usable_ipv4([*_route_address(), *_hostname_addresses()])


def resolve_ip(index: int, starting_ip: str, resolver: Callable[[], str] = external_ip) -> str:
    """Address for node `index`. Empty `starting_ip` means auto-detect; auto-detect ignores `index`."""

    if not starting_ip:
        ip = resolver()
        logger.debug("external_ip_resolved", extra={"ip": ip, "node_index": index})
        return ip
    return calculate_ip(starting_ip, index)
