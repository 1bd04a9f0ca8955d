"""
Registration table structures returned by the rpcbind DUMP procedure.

Both libtirpc and the oncrpc framework decode the table into the same linked list:

    struct rpcb {
        rpcprog_t r_prog;
        rpcvers_t r_vers;
        char *r_netid;
        char *r_addr;
        char *r_owner;
    };

    struct rpcblist {
        struct rpcb rpcb_map;
        struct rpcblist *rpcb_next;
    };
"""

import ctypes
from typing import List

from rpcreg.address import family_for_netid
from .common import Mapping

# rpcbind protocol version 4 and its DUMP procedure
RPCBVERS4 = 4
RPCBPROC_DUMP = 4


class Rpcb(ctypes.Structure):
    """struct rpcb, a single entry in the rpcbind registration table."""

    _fields_ = [
        ("r_prog", ctypes.c_uint32),
        ("r_vers", ctypes.c_uint32),
        ("r_netid", ctypes.c_char_p),
        ("r_addr", ctypes.c_char_p),
        ("r_owner", ctypes.c_char_p),
    ]


class RpcbList(ctypes.Structure):
    """struct rpcblist, linked list of registration table entries."""


RpcbList._fields_ = [
    ("rpcb_map", Rpcb),
    ("rpcb_next", ctypes.POINTER(RpcbList)),
]


def read_maps(head: "ctypes._Pointer[RpcbList]") -> List[Mapping]:
    """
    Convert a linked list of registration table entries into mappings.

    A NULL head is an empty table. Entries on transports that can't be addressed
    (like rawip) are skipped.
    """
    mappings: List[Mapping] = []

    node = head

    while node:
        entry = node.contents.rpcb_map
        netid = (entry.r_netid or b"").decode()

        if family_for_netid(netid) is not None:
            mappings.append(
                Mapping(
                    program=entry.r_prog,
                    version=entry.r_vers,
                    netid=netid,
                    uaddr=(entry.r_addr or b"").decode(),
                    owner=(entry.r_owner or b"").decode(),
                )
            )

        node = node.contents.rpcb_next

    return mappings
