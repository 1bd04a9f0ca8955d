"""
Clients of the system RPC binder that services are registered with.

rpcreg doesn't speak the rpcbind protocol itself. It calls the rpcb_set() and
rpcb_unset() functions of the platform's RPC library instead, through ctypes. The
libraries differ in calling convention and even in their exported symbol names, so
every difference is contained in a Binder implementation:

* Linux ships libtirpc, which identifies transports by netconfig entries and takes
addresses as netbuf structures.
* macOS ships the oncrpc framework, which takes netid strings and BSD style sockaddr
structures, and prefixes its exported symbols with "_newrpclib_".
"""

import platform

from rpcreg.config import BinderConfig
from .common import Binder, BinderError, Mapping
from .oncrpc import OncRpcBinder
from .tirpc import TirpcBinder


def open_binder(config: BinderConfig) -> Binder:
    """
    Load the binder library selected by the configuration.

    The library flavor defaults to the oncrpc framework on macOS and libtirpc
    everywhere else. Raises BinderError if the library can't be loaded.
    """
    flavor = config.flavor

    if not flavor:
        flavor = "oncrpc" if platform.system() == "Darwin" else "tirpc"

    if flavor == "tirpc":
        return TirpcBinder.load(config.library)
    elif flavor == "oncrpc":
        return OncRpcBinder.load(config.library, config.symbol_prefix)
    else:
        raise BinderError(f"unknown binder flavor '{flavor}'")


__all__ = [
    "Binder",
    "BinderError",
    "Mapping",
    "OncRpcBinder",
    "TirpcBinder",
    "open_binder",
]
