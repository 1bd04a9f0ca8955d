"""
Transport addresses that services are announced with.

Every registration is made with a freshly built address descriptor: the wildcard
address of the IPv4 or IPv6 family bound to the service port, or the path of a local
socket. Descriptors are immutable values, so the address of one registration can never
leak into the next one.

rpcbind itself exchanges addresses as universal addresses (RFC 5665), where the port is
appended to the host as two decimal octets. For example, the IPv4 wildcard address on
port 2049 is "0.0.0.0.8.1" and the IPv6 wildcard address on that port is "::.8.1".
Local socket addresses are simply their path.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import auto, Enum
import ipaddress
from typing import Optional, Union


class Family(Enum):
    """Address family of a transport."""

    INET = auto()
    INET6 = auto()
    LOCAL = auto()


# Netids of local transports (connection oriented and connectionless)
LOCAL_NETIDS = ("ticotsord", "ticots", "ticlts", "local", "unix")


def family_for_netid(netid: str) -> Optional[Family]:
    """Return the address family used by a transport, or None if it is unknown."""
    if netid in ("udp", "tcp"):
        return Family.INET
    elif netid in ("udp6", "tcp6"):
        return Family.INET6
    elif netid in LOCAL_NETIDS:
        return Family.LOCAL
    else:
        return None


def _format_port(port: int) -> str:
    return f"{port >> 8}.{port & 0xFF}"


@dataclass(frozen=True)
class InetV4Address:
    """IPv4 address and port, the wildcard address by default."""

    port: int
    host: str = "0.0.0.0"

    @property
    def family(self) -> Family:
        return Family.INET

    @property
    def uaddr(self) -> str:
        """Return the universal address."""
        return f"{self.host}.{_format_port(self.port)}"


@dataclass(frozen=True)
class InetV6Address:
    """IPv6 address and port, the wildcard address by default."""

    port: int
    host: str = "::"

    @property
    def family(self) -> Family:
        return Family.INET6

    @property
    def uaddr(self) -> str:
        """Return the universal address."""
        return f"{self.host}.{_format_port(self.port)}"


@dataclass(frozen=True)
class LocalAddress:
    """Filesystem path of a local socket."""

    path: str

    @property
    def family(self) -> Family:
        return Family.LOCAL

    @property
    def uaddr(self) -> str:
        """Return the universal address."""
        return self.path


AddressDescriptor = Union[InetV4Address, InetV6Address, LocalAddress]


def build_address(
    family: Family, port: Optional[int] = None, path: Optional[str] = None
) -> AddressDescriptor:
    """
    Build the address that a service is announced with.

    IPv4 and IPv6 addresses are the wildcard address of their family bound to the
    specified port. Local addresses carry the specified socket path. No validation is
    performed beyond that: any problem with the address surfaces when it's registered.
    """
    if family == Family.INET:
        return InetV4Address(port or 0)
    elif family == Family.INET6:
        return InetV6Address(port or 0)
    else:
        return LocalAddress(path or "")


def parse_uaddr(netid: str, uaddr: str) -> AddressDescriptor:
    """
    Parse the universal address of a transport into an address descriptor.

    Raises ValueError if the netid is unknown or the address is malformed.
    """
    family = family_for_netid(netid)

    if family is None:
        raise ValueError(f"unknown netid '{netid}'")
    elif family == Family.LOCAL:
        return LocalAddress(uaddr)

    # The port is encoded in the last two dot separated octets
    host, _, port_octets = uaddr.rpartition(".")
    host, _, high_octet = host.rpartition(".")

    malformed = ValueError(f"malformed universal address '{uaddr}' for {netid}")

    try:
        high, low = int(high_octet), int(port_octets)

        if family == Family.INET:
            host = str(ipaddress.IPv4Address(host))
        else:
            host = str(ipaddress.IPv6Address(host))
    except ValueError:
        raise malformed

    if not (0 <= high <= 0xFF and 0 <= low <= 0xFF):
        raise malformed

    port = (high << 8) + low

    if family == Family.INET:
        return InetV4Address(port, host)
    else:
        return InetV6Address(port, host)
