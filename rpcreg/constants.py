"""Module defining various global constants."""

# rpcreg version
VERSION = "1.0.0"

# Format of exported registration tables
# The major version must be identical between exporting and importing instances.
EXPORT_FORMAT_VERSION = "1.0.0"

# Exit code for when rpcreg itself fails (registration failures are not included).
RPCREG_ERROR_CODE = 1

# Standard RPC program numbers
RPCPROG_RPCB = 100000
RPCPROG_NFS = 100003
RPCPROG_MNT = 100005
RPCPROG_STAT = 100024

# Well-known ports of the file sharing services
NFS_PORT = 2049
MOUNT_PORT = 32767

# Legacy fixed ports of the status monitor in status-only mode
STATD_UDP_PORT = 710
STATD_TCP_PORT = 904
