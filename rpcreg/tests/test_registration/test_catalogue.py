from rpcreg.address import Family, InetV6Address, LocalAddress
from rpcreg.config import LocalSocketConfig
from rpcreg.registration import (
    groups_for,
    Mode,
    MOUNT,
    NetId,
    NFS,
    ServiceGroup,
    STAT,
    TransportBinding,
)


def test_service_catalogue():
    assert (NFS.program, NFS.versions) == (100003, (2, 3))
    assert NFS.withdraw_versions == (3, 4)
    assert (MOUNT.program, MOUNT.versions) == (100005, (1, 3))
    assert MOUNT.withdraw_versions == (1, 2, 3)
    assert (STAT.program, STAT.versions, STAT.withdraw_versions) == (100024, (1,), (1,))


def test_netid_families():
    assert NetId.UDP.family == Family.INET
    assert NetId.TCP.family == Family.INET
    assert NetId.UDP6.family == Family.INET6
    assert NetId.TCP6.family == Family.INET6
    assert NetId.TICLTS.family == Family.LOCAL
    assert NetId.TICOTSORD.family == Family.LOCAL


def test_binding_address():
    assert TransportBinding(NetId.TCP6, port=2049).address() == InetV6Address(2049)
    assert TransportBinding(NetId.TICLTS, path="/a").address() == LocalAddress("/a")


def test_group_names():
    assert ServiceGroup(NFS, "UDP", ()).name == "NFS/UDP"
    assert ServiceGroup(STAT, None, ()).name == "STAT"


def test_group_versions_default_to_service():
    assert ServiceGroup(MOUNT, "TCP", ()).registered_versions == (1, 3)
    assert ServiceGroup(MOUNT, "TCP", (), versions=(3,)).registered_versions == (3,)


def test_unset_only_has_no_groups():
    assert groups_for(Mode.UNSET_ONLY) == []


def test_statd_only_groups():
    groups = groups_for(Mode.STATD_ONLY)

    assert [g.name for g in groups] == ["STAT"]
    assert [(b.netid.value, b.port) for b in groups[0].bindings] == [
        ("udp", 710),
        ("udp6", 710),
        ("tcp", 904),
        ("tcp6", 904),
    ]


def test_full_groups():
    groups = groups_for(Mode.FULL)

    assert [g.name for g in groups] == ["NFS/UDP", "NFS/TCP", "MOUNT/UDP", "MOUNT/TCP"]

    nfs_udp, nfs_tcp, mount_udp, mount_tcp = groups

    assert [(b.netid, b.port) for b in nfs_udp.bindings] == [
        (NetId.UDP, 2049),
        (NetId.UDP6, 2049),
    ]
    assert [(b.netid, b.port) for b in nfs_tcp.bindings] == [
        (NetId.TCP, 2049),
        (NetId.TCP6, 2049),
    ]
    assert [(b.netid, b.port) for b in mount_udp.bindings] == [
        (NetId.UDP, 32767),
        (NetId.UDP6, 32767),
    ]
    assert [(b.netid, b.port) for b in mount_tcp.bindings] == [
        (NetId.TCP, 32767),
        (NetId.TCP6, 32767),
    ]


def test_full_groups_ignore_disabled_local_sockets():
    local = LocalSocketConfig(enabled=False, nfsd_ticlts="/run/nfsd.ticlts")

    assert len(groups_for(Mode.FULL, local)) == 4


def test_full_groups_with_local_sockets():
    local = LocalSocketConfig(
        enabled=True,
        nfsd_ticlts="/run/nfsd.ticlts",
        nfsd_ticotsord="/run/nfsd.ticotsord",
        mountd_ticotsord="/run/mountd.ticotsord",
    )

    groups = groups_for(Mode.FULL, local)

    assert [g.name for g in groups] == [
        "NFS/UDP",
        "NFS/TCP",
        "NFS/TICLTS",
        "NFS/TICOTSORD",
        "MOUNT/UDP",
        "MOUNT/TCP",
        "MOUNT/TICLTS",
        "MOUNT/TICOTSORD",
    ]

    assert groups[2].bindings == (
        TransportBinding(NetId.TICLTS, path="/run/nfsd.ticlts"),
    )
    assert groups[3].bindings == (
        TransportBinding(NetId.TICOTSORD, path="/run/nfsd.ticotsord"),
    )

    # Without a configured path there's nothing to register
    assert groups[6].bindings == ()
    assert groups[7].bindings == (
        TransportBinding(NetId.TICOTSORD, path="/run/mountd.ticotsord"),
    )
