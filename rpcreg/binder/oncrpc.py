"""
Binder client backed by the ONC RPC framework of macOS.

The framework takes netid strings and raw BSD style struct sockaddr pointers directly,
but exports its functions under prefixed symbol names (for example
_newrpclib_rpcb_set instead of rpcb_set):

    int rpcb_set(const char *netid, unsigned int program, unsigned int version,
                 const struct sockaddr *addr);
    int rpcb_unset(const char *netid, unsigned int program, unsigned int version);

Both return non-zero on success.

There's no rpcb_getmaps(), so the registration table is retrieved by calling the DUMP
procedure of rpcbind through a client handle:

    CLIENT *clnt_create_timeout(const char *host, unsigned int prog,
                                unsigned int vers, const char *nettype,
                                const struct timeval *timeout);
"""

import ctypes
from typing import Any, List, Optional

from rpcreg.address import AddressDescriptor
import rpcreg.constants as constants
from rpcreg.logger import log
from .common import Binder, BinderError, Mapping
from .rpcb import read_maps, RpcbList, RPCBPROC_DUMP, RPCBVERS4
from .sockaddr import pack_sockaddr

# Location of the framework binary
DEFAULT_LIBRARY = "/System/Library/PrivateFrameworks/oncrpc.framework/oncrpc"

# Timeouts in seconds for connecting to rpcbind and for the DUMP call itself
CONNECT_TIMEOUT = 5
CALL_TIMEOUT = 60

RPC_SUCCESS = 0


class Timeval(ctypes.Structure):
    """struct timeval."""

    _fields_ = [("tv_sec", ctypes.c_long), ("tv_usec", ctypes.c_int32)]


class Client(ctypes.Structure):
    """CLIENT, an RPC client handle."""


class ClntOps(ctypes.Structure):
    """struct clnt_ops, the functions of a client handle."""

    _fields_ = [
        (
            "cl_call",
            ctypes.CFUNCTYPE(
                ctypes.c_int,
                ctypes.POINTER(Client),
                ctypes.c_uint,
                ctypes.c_void_p,
                ctypes.c_void_p,
                ctypes.c_void_p,
                ctypes.POINTER(ctypes.POINTER(RpcbList)),
                Timeval,
            ),
        ),
        ("cl_abort", ctypes.c_void_p),
        ("cl_geterr", ctypes.c_void_p),
        ("cl_freeres", ctypes.c_void_p),
        ("cl_destroy", ctypes.CFUNCTYPE(None, ctypes.POINTER(Client))),
        ("cl_control", ctypes.c_void_p),
    ]


Client._fields_ = [
    ("cl_auth", ctypes.c_void_p),
    ("cl_ops", ctypes.POINTER(ClntOps)),
    ("cl_private", ctypes.c_void_p),
]


class OncRpcBinder(Binder):
    """Binder client that calls into the oncrpc framework."""

    def __init__(self, lib: ctypes.CDLL, symbol_prefix: str = "_newrpclib_"):
        """Wrap a loaded oncrpc framework with the specified symbol name prefix."""
        self._lib = lib
        self._symbol_prefix = symbol_prefix

        self._rpcb_set = lib[f"{symbol_prefix}rpcb_set"]
        self._rpcb_set.argtypes = [
            ctypes.c_char_p,
            ctypes.c_uint,
            ctypes.c_uint,
            ctypes.c_char_p,
        ]
        self._rpcb_set.restype = ctypes.c_int

        self._rpcb_unset = lib[f"{symbol_prefix}rpcb_unset"]
        self._rpcb_unset.argtypes = [ctypes.c_char_p, ctypes.c_uint, ctypes.c_uint]
        self._rpcb_unset.restype = ctypes.c_int

    @staticmethod
    def load(library: str = "", symbol_prefix: str = "_newrpclib_") -> "OncRpcBinder":
        """
        Load the oncrpc framework from the specified path or its default location.

        Raises BinderError if the framework or its functions can't be loaded.
        """
        path = library or DEFAULT_LIBRARY

        try:
            return OncRpcBinder(ctypes.CDLL(path), symbol_prefix)
        except (OSError, AttributeError) as e:
            raise BinderError(f"failed to load {path}: {e}")

    def unregister(self, netid: Optional[str], program: int, version: int) -> bool:
        """Withdraw the registration of a program version."""
        c_netid = netid.encode() if netid is not None else None

        return bool(self._rpcb_unset(c_netid, program, version))

    def register(
        self, netid: str, program: int, version: int, address: AddressDescriptor
    ) -> bool:
        """Register a program version on a transport with the specified address."""
        try:
            sockaddr = pack_sockaddr(address, bsd=True)
        except (ValueError, OSError) as e:
            log.debug(f"unusable address {address}: {e}")
            return False

        return bool(self._rpcb_set(netid.encode(), program, version, sockaddr))

    def dump(self) -> List[Mapping]:
        """
        Retrieve all registrations from rpcbind on localhost.

        Raises BinderError if rpcbind can't be reached or the call fails.
        """
        clnt_create_timeout = self._function(
            f"{self._symbol_prefix}clnt_create_timeout"
        )
        clnt_create_timeout.argtypes = [
            ctypes.c_char_p,
            ctypes.c_uint,
            ctypes.c_uint,
            ctypes.c_char_p,
            ctypes.POINTER(Timeval),
        ]
        clnt_create_timeout.restype = ctypes.POINTER(Client)

        xdr_rpcblist_ptr = self._function(f"{self._symbol_prefix}xdr_rpcblist_ptr")
        xdr_void = self._function("xdr_void")

        client = clnt_create_timeout(
            b"localhost",
            constants.RPCPROG_RPCB,
            RPCBVERS4,
            b"udp",
            ctypes.byref(Timeval(CONNECT_TIMEOUT, 0)),
        )

        if not client:
            raise BinderError("failed to create RPC client for rpcbind on localhost")

        ops = client.contents.cl_ops.contents
        head = ctypes.POINTER(RpcbList)()

        try:
            stat = ops.cl_call(
                client,
                RPCBPROC_DUMP,
                ctypes.cast(xdr_void, ctypes.c_void_p),
                None,
                ctypes.cast(xdr_rpcblist_ptr, ctypes.c_void_p),
                ctypes.pointer(head),
                Timeval(CALL_TIMEOUT, 0),
            )
        finally:
            ops.cl_destroy(client)

        if stat != RPC_SUCCESS:
            raise BinderError(f"RPC call failed: {self._describe_status(stat)}")

        return read_maps(head)

    def _function(self, name: str) -> Any:
        """Look up a function of the framework, raising BinderError if it's missing."""
        try:
            return self._lib[name]
        except AttributeError as e:
            raise BinderError(f"missing function {name}: {e}")

    def _describe_status(self, stat: int) -> str:
        clnt_sperrno = self._function("clnt_sperrno")
        clnt_sperrno.argtypes = [ctypes.c_int]
        clnt_sperrno.restype = ctypes.c_char_p

        message = clnt_sperrno(stat)

        if message:
            return message.decode(errors="replace")
        else:
            return f"status {stat}"
