"""
Static catalogue of the managed RPC services and the transports they are announced on.

The catalogue is plain table data: three logical services and, per registration mode,
the ordered list of groups to register. A group covers one service over one protocol
family (for example all UDP variants of NFS) and is the unit that failures are reported
for.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

from rpcreg.address import AddressDescriptor, build_address, Family
from rpcreg.config import LocalSocketConfig
import rpcreg.constants as constants


class Mode(Enum):
    """Registration mode, determines which phases of the orchestrator run."""

    FULL = "full"
    UNSET_ONLY = "unset-only"
    STATD_ONLY = "statd-only"


class NetId(Enum):
    """Transports that services are announced on."""

    UDP = "udp"
    UDP6 = "udp6"
    TCP = "tcp"
    TCP6 = "tcp6"

    # Local ordered stream and datagram transports
    TICOTSORD = "ticotsord"
    TICLTS = "ticlts"

    @property
    def family(self) -> Family:
        """Return the address family of this transport."""
        if self in (NetId.UDP, NetId.TCP):
            return Family.INET
        elif self in (NetId.UDP6, NetId.TCP6):
            return Family.INET6
        else:
            return Family.LOCAL


@dataclass(frozen=True)
class LogicalService:
    """
    An RPC program that is managed by rpcreg.

    The versions are the ones that are registered. Withdrawal covers a different set of
    versions, since stale registrations of versions that are no longer offered must be
    cleaned up as well.
    """

    name: str
    program: int
    versions: Tuple[int, ...]
    withdraw_versions: Tuple[int, ...]


@dataclass(frozen=True)
class TransportBinding:
    """Transport and the port (or local socket path) a service listens on."""

    netid: NetId
    port: Optional[int] = None
    path: Optional[str] = None

    def address(self) -> AddressDescriptor:
        """Build a fresh address descriptor for this binding."""
        return build_address(self.netid.family, port=self.port, path=self.path)


@dataclass(frozen=True)
class ServiceGroup:
    """Registrations of one service over one protocol family."""

    service: LogicalService
    label: Optional[str]
    bindings: Tuple[TransportBinding, ...]

    # Defaults to the versions of the service
    versions: Optional[Tuple[int, ...]] = None

    @property
    def name(self) -> str:
        """Return the name that failures of this group are reported with."""
        if self.label:
            return f"{self.service.name}/{self.label}"
        else:
            return self.service.name

    @property
    def registered_versions(self) -> Tuple[int, ...]:
        """Return the versions that are registered for this group."""
        if self.versions is not None:
            return self.versions
        else:
            return self.service.versions


NFS = LogicalService(
    "NFS", constants.RPCPROG_NFS, versions=(2, 3), withdraw_versions=(3, 4)
)
MOUNT = LogicalService(
    "MOUNT", constants.RPCPROG_MNT, versions=(1, 3), withdraw_versions=(1, 2, 3)
)
STAT = LogicalService(
    "STAT", constants.RPCPROG_STAT, versions=(1,), withdraw_versions=(1,)
)


def _inet_group(service: LogicalService, label: str, port: int) -> ServiceGroup:
    """Create a group for the IPv4 and IPv6 transports of a protocol."""
    protocol = label.lower()
    netids = (NetId(protocol), NetId(f"{protocol}6"))

    return ServiceGroup(
        service, label, tuple(TransportBinding(netid, port=port) for netid in netids)
    )


def _local_group(service: LogicalService, netid: NetId, path: str) -> ServiceGroup:
    """Create a group for a local transport, without bindings if there's no path."""
    bindings: Tuple[TransportBinding, ...] = ()

    if path:
        bindings = (TransportBinding(netid, path=path),)

    return ServiceGroup(service, netid.name, bindings)


STATD_ONLY_GROUPS = [
    ServiceGroup(
        STAT,
        None,
        (
            TransportBinding(NetId.UDP, port=constants.STATD_UDP_PORT),
            TransportBinding(NetId.UDP6, port=constants.STATD_UDP_PORT),
            TransportBinding(NetId.TCP, port=constants.STATD_TCP_PORT),
            TransportBinding(NetId.TCP6, port=constants.STATD_TCP_PORT),
        ),
    )
]


def groups_for(
    mode: Mode, local: Optional[LocalSocketConfig] = None
) -> List[ServiceGroup]:
    """
    Return the ordered groups to register in the specified mode.

    Local socket groups are only included in full mode if local sockets are enabled.
    """
    if mode == Mode.UNSET_ONLY:
        return []
    elif mode == Mode.STATD_ONLY:
        return list(STATD_ONLY_GROUPS)

    groups = [
        _inet_group(NFS, "UDP", constants.NFS_PORT),
        _inet_group(NFS, "TCP", constants.NFS_PORT),
    ]

    if local and local.enabled:
        groups += [
            _local_group(NFS, NetId.TICLTS, local.nfsd_ticlts),
            _local_group(NFS, NetId.TICOTSORD, local.nfsd_ticotsord),
        ]

    groups += [
        _inet_group(MOUNT, "UDP", constants.MOUNT_PORT),
        _inet_group(MOUNT, "TCP", constants.MOUNT_PORT),
    ]

    if local and local.enabled:
        groups += [
            _local_group(MOUNT, NetId.TICLTS, local.mountd_ticlts),
            _local_group(MOUNT, NetId.TICOTSORD, local.mountd_ticotsord),
        ]

    return groups
