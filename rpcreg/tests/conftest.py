"""Module that adds flags to pytest to enable extra tests and shared fixtures."""

import ctypes
from typing import List, Optional, Set, Tuple

import pytest

from rpcreg.address import AddressDescriptor
from rpcreg.binder import Binder
from rpcreg.binder.rpcb import RpcbList


def pytest_addoption(parser):
    parser.addoption(
        "--binder",
        action="store_true",
        default=False,
        help="Run tests against the system rpcbind",
    )


def pytest_configure(config):
    config.addinivalue_line("markers", "binder: mark test as requiring rpcbind to run")


def pytest_collection_modifyitems(config, items):
    if not config.getoption("--binder"):
        skip_binder = pytest.mark.skip(reason="only runs with --binder option")

        for item in items:
            if "binder" in item.keywords:
                item.add_marker(skip_binder)


class RecordingBinder(Binder):
    """In-memory binder that records every call and fails the configured ones."""

    def __init__(self) -> None:
        self.calls: List[Tuple] = []

        # (netid, program, version) combinations that fail to register
        self.failing: Set[Tuple[str, int, int]] = set()

        self.unregister_result = True
        self.unregister_error: Optional[Exception] = None

    def unregister(self, netid: Optional[str], program: int, version: int) -> bool:
        self.calls.append(("unset", netid, program, version))

        if self.unregister_error:
            raise self.unregister_error

        return self.unregister_result

    def register(
        self, netid: str, program: int, version: int, address: AddressDescriptor
    ) -> bool:
        self.calls.append(("set", netid, program, version, address))
        return (netid, program, version) not in self.failing

    @property
    def unset_calls(self) -> List[Tuple]:
        return [c for c in self.calls if c[0] == "unset"]

    @property
    def set_calls(self) -> List[Tuple]:
        return [c for c in self.calls if c[0] == "set"]


@pytest.fixture
def recording_binder() -> RecordingBinder:
    return RecordingBinder()


@pytest.fixture
def rpcblist():
    """Build a linked registration table from (prog, vers, netid, addr, owner)."""

    def build(*entries) -> List[RpcbList]:
        nodes = [RpcbList() for _ in entries]

        for node, (prog, vers, netid, addr, owner) in zip(nodes, entries):
            node.rpcb_map.r_prog = prog
            node.rpcb_map.r_vers = vers
            node.rpcb_map.r_netid = netid
            node.rpcb_map.r_addr = addr
            node.rpcb_map.r_owner = owner

        for node, next_node in zip(nodes, nodes[1:]):
            node.rpcb_next = ctypes.pointer(next_node)

        return nodes

    return build
