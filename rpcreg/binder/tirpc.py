"""
Binder client backed by the transport independent RPC library (libtirpc).

libtirpc identifies transports by netconfig entries rather than netid strings, and
takes addresses as netbuf structures wrapping a raw struct sockaddr:

    struct netconfig *getnetconfigent(const char *netid);
    void freenetconfigent(struct netconfig *nconf);
    bool_t rpcb_set(rpcprog_t prog, rpcvers_t vers, const struct netconfig *nconf,
                    const struct netbuf *address);
    bool_t rpcb_unset(rpcprog_t prog, rpcvers_t vers, const struct netconfig *nconf);
    rpcblist *rpcb_getmaps(const struct netconfig *nconf, const char *host);

Passing a NULL netconfig to rpcb_unset withdraws the registration on all transports.
"""

import ctypes
import ctypes.util
from typing import List, Optional

from rpcreg.address import AddressDescriptor
from rpcreg.logger import log
from .common import Binder, BinderError, Mapping
from .rpcb import read_maps, RpcbList
from .sockaddr import pack_sockaddr


class NetBuf(ctypes.Structure):
    """struct netbuf."""

    _fields_ = [
        ("maxlen", ctypes.c_uint),
        ("len", ctypes.c_uint),
        ("buf", ctypes.c_void_p),
    ]


class TirpcBinder(Binder):
    """Binder client that calls into libtirpc."""

    def __init__(self, lib: ctypes.CDLL, host: str = "localhost"):
        """
        Wrap a loaded libtirpc library.

        The host is only used to look up the registration table.
        """
        self._lib = lib
        self._host = host

        self._lib.getnetconfigent.argtypes = [ctypes.c_char_p]
        self._lib.getnetconfigent.restype = ctypes.c_void_p

        self._lib.freenetconfigent.argtypes = [ctypes.c_void_p]
        self._lib.freenetconfigent.restype = None

        self._lib.rpcb_set.argtypes = [
            ctypes.c_uint32,
            ctypes.c_uint32,
            ctypes.c_void_p,
            ctypes.POINTER(NetBuf),
        ]
        self._lib.rpcb_set.restype = ctypes.c_int

        self._lib.rpcb_unset.argtypes = [
            ctypes.c_uint32,
            ctypes.c_uint32,
            ctypes.c_void_p,
        ]
        self._lib.rpcb_unset.restype = ctypes.c_int

        self._lib.rpcb_getmaps.argtypes = [ctypes.c_void_p, ctypes.c_char_p]
        self._lib.rpcb_getmaps.restype = ctypes.POINTER(RpcbList)

    @staticmethod
    def load(library: str = "") -> "TirpcBinder":
        """
        Load libtirpc from the specified path or the default library search path.

        Raises BinderError if the library can't be found or loaded.
        """
        path = library or ctypes.util.find_library("tirpc")

        if not path:
            raise BinderError("libtirpc not found")

        try:
            return TirpcBinder(ctypes.CDLL(path))
        except (OSError, AttributeError) as e:
            raise BinderError(f"failed to load {path}: {e}")

    def unregister(self, netid: Optional[str], program: int, version: int) -> bool:
        """Withdraw the registration of a program version."""
        nconf = None

        if netid is not None:
            nconf = self._lib.getnetconfigent(netid.encode())

            if not nconf:
                log.debug(f"unknown netid {netid}")
                return False

        try:
            return bool(self._lib.rpcb_unset(program, version, nconf))
        finally:
            if nconf:
                self._lib.freenetconfigent(nconf)

    def register(
        self, netid: str, program: int, version: int, address: AddressDescriptor
    ) -> bool:
        """Register a program version on a transport with the specified address."""
        try:
            sockaddr = pack_sockaddr(address)
        except (ValueError, OSError) as e:
            log.debug(f"unusable address {address}: {e}")
            return False

        nconf = self._lib.getnetconfigent(netid.encode())

        if not nconf:
            log.debug(f"unknown netid {netid}")
            return False

        try:
            buf = ctypes.create_string_buffer(sockaddr, len(sockaddr))
            netbuf = NetBuf(
                len(sockaddr), len(sockaddr), ctypes.cast(buf, ctypes.c_void_p)
            )

            ret = self._lib.rpcb_set(program, version, nconf, ctypes.byref(netbuf))

            return bool(ret)
        finally:
            self._lib.freenetconfigent(nconf)

    def dump(self) -> List[Mapping]:
        """Retrieve all registrations from rpcbind on the configured host."""
        nconf = self._lib.getnetconfigent(b"udp")

        if not nconf:
            raise BinderError("no netconfig entry for udp")

        try:
            head = self._lib.rpcb_getmaps(nconf, self._host.encode())
        finally:
            self._lib.freenetconfigent(nconf)

        if not head:
            log.debug(f"no registrations retrieved from {self._host}")
            return []

        try:
            return read_maps(head)
        finally:
            self._free_maps(head)

    def _free_maps(self, head: "ctypes._Pointer[RpcbList]") -> None:
        """Release the registration table allocated by libtirpc."""
        self._lib.xdr_free.argtypes = [ctypes.c_void_p, ctypes.c_void_p]
        self._lib.xdr_free.restype = None

        self._lib.xdr_free(
            ctypes.cast(self._lib.xdr_rpcblist_ptr, ctypes.c_void_p),
            ctypes.byref(head),
        )
