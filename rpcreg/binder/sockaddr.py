"""
Conversion of address descriptors into C socket address structures.

The binder libraries expect addresses as raw struct sockaddr_in, sockaddr_in6 or
sockaddr_un memory. The layout differs between BSD derived systems (macOS), which start
with a length byte followed by a single byte family, and Linux, which starts with a two
byte family in native byte order. Ports are always stored in network byte order.
"""

import socket
import struct

from rpcreg.address import (
    AddressDescriptor,
    InetV4Address,
    InetV6Address,
)

# Size of sun_path in struct sockaddr_un
SUN_PATH_SIZE_BSD = 104
SUN_PATH_SIZE_LINUX = 108


def _header(length: int, family: int, bsd: bool) -> bytes:
    if bsd:
        return struct.pack("=BB", length, family)
    else:
        return struct.pack("=H", family)


def pack_sockaddr(address: AddressDescriptor, bsd: bool = False) -> bytes:
    """
    Pack an address descriptor into the platform's struct sockaddr layout.

    Raises ValueError if the address can't be represented, for example when a local
    socket path doesn't fit.
    """
    if isinstance(address, InetV4Address):
        host = socket.inet_pton(socket.AF_INET, address.host)

        # sockaddr_in: family, port, address, zero padding
        length = 16
        return (
            _header(length, socket.AF_INET, bsd)
            + struct.pack("!H", address.port)
            + host
            + bytes(8)
        )
    elif isinstance(address, InetV6Address):
        host = socket.inet_pton(socket.AF_INET6, address.host)

        # sockaddr_in6: family, port, flow info, address, scope id
        length = 28
        return (
            _header(length, socket.AF_INET6, bsd)
            + struct.pack("!HI", address.port, 0)
            + host
            + struct.pack("=I", 0)
        )
    else:
        path = address.path.encode()
        path_size = SUN_PATH_SIZE_BSD if bsd else SUN_PATH_SIZE_LINUX

        # The path must leave room for the terminating null byte
        if len(path) >= path_size:
            raise ValueError(f"socket path too long: {address.path}")

        length = 2 + path_size
        return _header(length, socket.AF_UNIX, bsd) + path.ljust(path_size, b"\0")
