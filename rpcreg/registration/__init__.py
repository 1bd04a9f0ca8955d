"""
Modules that announce the file sharing services with the system RPC binder.

NFS clients locate the NFS server, its MOUNT protocol companion and the status monitor
by asking the port mapper (rpcbind) of the server for the address of each program
version on a given transport. A server therefore has to register all of these
combinations before clients can reach it, and withdraw them again when it goes away.

The services and the transports they are registered on are static table data in the
'catalogue' submodule. The 'orchestrator' applies the registration policy of a mode to
that table: stale registrations are always withdrawn first, after which the groups of
the mode are registered by the 'registrar' one by one. The 'transfer' submodule deals
with the registration table of the binder as a whole.
"""

from .catalogue import (
    groups_for,
    LogicalService,
    Mode,
    MOUNT,
    NetId,
    NFS,
    ServiceGroup,
    STAT,
    TransportBinding,
)
from .orchestrator import Orchestrator
from .registrar import register_group, RegistrationOutcome
from .transfer import export_mappings, format_mappings, import_mappings, list_mappings

__all__ = [
    "groups_for",
    "LogicalService",
    "Mode",
    "MOUNT",
    "NetId",
    "NFS",
    "ServiceGroup",
    "STAT",
    "TransportBinding",
    "Orchestrator",
    "register_group",
    "RegistrationOutcome",
    "export_mappings",
    "format_mappings",
    "import_mappings",
    "list_mappings",
]
