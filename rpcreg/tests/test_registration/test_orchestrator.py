import logging

from rpcreg.address import InetV4Address, InetV6Address, LocalAddress
from rpcreg.config import LocalSocketConfig
from rpcreg.registration import Mode, Orchestrator


NFS_MOUNT_UNSETS = [
    ("unset", None, 100003, 3),
    ("unset", None, 100003, 4),
    ("unset", None, 100005, 1),
    ("unset", None, 100005, 2),
    ("unset", None, 100005, 3),
]

STAT_UNSET = ("unset", None, 100024, 1)


def _first_set_index(calls):
    return next(i for i, c in enumerate(calls) if c[0] == "set")


def test_full_mode_calls(recording_binder, caplog):
    outcomes = Orchestrator(recording_binder).run(Mode.FULL)

    assert recording_binder.unset_calls == NFS_MOUNT_UNSETS

    assert [c[1:4] for c in recording_binder.set_calls] == [
        ("udp", 100003, 2),
        ("udp6", 100003, 2),
        ("udp", 100003, 3),
        ("udp6", 100003, 3),
        ("tcp", 100003, 2),
        ("tcp6", 100003, 2),
        ("tcp", 100003, 3),
        ("tcp6", 100003, 3),
        ("udp", 100005, 1),
        ("udp6", 100005, 1),
        ("udp", 100005, 3),
        ("udp6", 100005, 3),
        ("tcp", 100005, 1),
        ("tcp6", 100005, 1),
        ("tcp", 100005, 3),
        ("tcp6", 100005, 3),
    ]

    addresses = [c[4] for c in recording_binder.set_calls]
    assert addresses[:2] == [InetV4Address(2049), InetV6Address(2049)]
    assert addresses[-2:] == [InetV4Address(32767), InetV6Address(32767)]

    assert [o.group for o in outcomes] == [
        "NFS/UDP",
        "NFS/TCP",
        "MOUNT/UDP",
        "MOUNT/TCP",
    ]
    assert all(o.ok for o in outcomes)
    assert "couldn't register" not in caplog.text


def test_withdrawal_precedes_registration(recording_binder):
    for mode in Mode:
        recording_binder.calls.clear()

        Orchestrator(recording_binder).run(mode)

        if recording_binder.set_calls:
            first_set = _first_set_index(recording_binder.calls)
            assert recording_binder.calls[:first_set] == recording_binder.unset_calls


def test_unset_only_mode(recording_binder):
    recording_binder.unregister_result = False

    outcomes = Orchestrator(recording_binder).run(Mode.UNSET_ONLY)

    assert outcomes == []
    assert recording_binder.unset_calls == NFS_MOUNT_UNSETS
    assert recording_binder.set_calls == []


def test_unset_only_mode_with_status(recording_binder):
    Orchestrator(recording_binder).run(Mode.UNSET_ONLY, withdraw_status=True)

    assert recording_binder.unset_calls == NFS_MOUNT_UNSETS + [STAT_UNSET]
    assert recording_binder.set_calls == []


def test_withdrawal_errors_are_ignored(recording_binder):
    recording_binder.unregister_error = OSError("rpcbind is not running")

    outcomes = Orchestrator(recording_binder).run(Mode.FULL)

    assert len(recording_binder.unset_calls) == 5
    assert len(recording_binder.set_calls) == 16
    assert all(o.ok for o in outcomes)


def test_statd_only_mode(recording_binder, caplog):
    outcomes = Orchestrator(recording_binder).run(Mode.STATD_ONLY)

    assert recording_binder.unset_calls == NFS_MOUNT_UNSETS + [STAT_UNSET]

    assert recording_binder.set_calls == [
        ("set", "udp", 100024, 1, InetV4Address(710)),
        ("set", "udp6", 100024, 1, InetV6Address(710)),
        ("set", "tcp", 100024, 1, InetV4Address(904)),
        ("set", "tcp6", 100024, 1, InetV6Address(904)),
    ]

    assert [o.group for o in outcomes] == ["STAT"]
    assert "couldn't register" not in caplog.text


def test_statd_only_mode_with_udp6_failure(recording_binder, caplog):
    recording_binder.failing = {("udp6", 100024, 1)}

    outcomes = Orchestrator(recording_binder).run(Mode.STATD_ONLY)

    assert len(recording_binder.set_calls) == 4
    assert outcomes[0].failed == 1
    assert caplog.text.count("couldn't register") == 1
    assert caplog.text.count("couldn't register STAT service") == 1


def test_failures_do_not_abort_later_groups(recording_binder, caplog):
    # Every NFS registration fails
    recording_binder.failing = {
        (netid, 100003, version)
        for netid in ("udp", "udp6", "tcp", "tcp6")
        for version in (2, 3)
    }

    outcomes = Orchestrator(recording_binder).run(Mode.FULL)

    assert len(recording_binder.set_calls) == 16
    assert [o.ok for o in outcomes] == [False, False, True, True]

    assert "couldn't register NFS/UDP service" in caplog.text
    assert "couldn't register NFS/TCP service" in caplog.text
    assert "MOUNT" not in caplog.text


def test_local_socket_groups(recording_binder):
    local = LocalSocketConfig(
        enabled=True, nfsd_ticotsord="/run/nfsd.sock", mountd_ticlts="/run/mountd.sock"
    )

    outcomes = Orchestrator(recording_binder, local).run(Mode.FULL)

    assert len(outcomes) == 8

    local_calls = [
        c
        for c in recording_binder.set_calls
        if c[1] not in ("udp", "udp6", "tcp", "tcp6")
    ]
    assert local_calls == [
        ("set", "ticotsord", 100003, 2, LocalAddress("/run/nfsd.sock")),
        ("set", "ticotsord", 100003, 3, LocalAddress("/run/nfsd.sock")),
        ("set", "ticlts", 100005, 1, LocalAddress("/run/mountd.sock")),
        ("set", "ticlts", 100005, 3, LocalAddress("/run/mountd.sock")),
    ]


def test_repeated_runs_are_identical(recording_binder, caplog):
    caplog.set_level(logging.ERROR, logger="rpcreg")

    recording_binder.failing = {("tcp6", 100005, 3)}
    orchestrator = Orchestrator(recording_binder)

    orchestrator.run(Mode.FULL)
    first_calls = list(recording_binder.calls)
    first_log = [r.getMessage() for r in caplog.records]

    recording_binder.calls.clear()
    caplog.clear()

    orchestrator.run(Mode.FULL)

    assert recording_binder.calls == first_calls
    assert [r.getMessage() for r in caplog.records] == first_log
    assert first_log == ["couldn't register MOUNT/TCP service"]
