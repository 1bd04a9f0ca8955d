"""Module for configuration variables with defaults that are overridable by a file."""

from __future__ import annotations

from configparser import ConfigParser, SectionProxy
from dataclasses import dataclass, field
import os
import tempfile

from rpcreg.logger import log


@dataclass
class BinderConfig:
    """Configuration variables related to loading the RPC binder library."""

    # Empty means the platform default library
    library: str = ""

    # Calling convention of the library ("tirpc" or "oncrpc"), empty to detect
    flavor: str = ""

    # Prefix of the exported rpcb_* symbols in the oncrpc framework
    symbol_prefix: str = "_newrpclib_"

    @staticmethod
    def load(section: SectionProxy) -> BinderConfig:
        """Load overridden variables from a section within a config file."""
        config = BinderConfig()

        config.library = section.get("library", fallback=config.library)
        config.flavor = section.get("flavor", fallback=config.flavor).lower()
        config.symbol_prefix = section.get(
            "symbol_prefix", fallback=config.symbol_prefix
        )

        return config


@dataclass
class LocalSocketConfig:
    """
    Configuration variables related to local socket transports.

    The NFS and MOUNT services are only registered on local sockets if this is enabled
    and only for the transports with a configured socket path.
    """

    enabled: bool = False

    nfsd_ticlts: str = ""
    nfsd_ticotsord: str = ""
    mountd_ticlts: str = ""
    mountd_ticotsord: str = ""

    @staticmethod
    def load(section: SectionProxy) -> LocalSocketConfig:
        """Load overridden variables from a section within a config file."""
        config = LocalSocketConfig()

        config.enabled = section.getboolean("enabled", fallback=config.enabled)

        config.nfsd_ticlts = section.get("nfsd_ticlts", fallback=config.nfsd_ticlts)
        config.nfsd_ticotsord = section.get(
            "nfsd_ticotsord", fallback=config.nfsd_ticotsord
        )
        config.mountd_ticlts = section.get(
            "mountd_ticlts", fallback=config.mountd_ticlts
        )
        config.mountd_ticotsord = section.get(
            "mountd_ticotsord", fallback=config.mountd_ticotsord
        )

        return config


@dataclass
class LockConfig:
    """Configuration variables related to serializing concurrent rpcreg runs."""

    path: str = os.path.join(tempfile.gettempdir(), "rpcreg.lock")

    @staticmethod
    def load(section: SectionProxy) -> LockConfig:
        """Load overridden variables from a section within a config file."""
        config = LockConfig()

        config.path = os.path.expanduser(section.get("path", fallback=config.path))

        return config


@dataclass
class Config:
    """Configuration variables."""

    binder: BinderConfig = field(default_factory=BinderConfig)
    local: LocalSocketConfig = field(default_factory=LocalSocketConfig)
    lock: LockConfig = field(default_factory=LockConfig)

    @staticmethod
    def load(filename: str) -> Config:
        """Load overridden configuration variables from a config file."""
        parser = ConfigParser()

        config = Config()

        try:
            with open(filename, "r") as f:
                parser.read_string(f.read(), filename)

            if "binder" in parser:
                config.binder = BinderConfig.load(parser["binder"])
            if "local" in parser:
                config.local = LocalSocketConfig.load(parser["local"])
            if "lock" in parser:
                config.lock = LockConfig.load(parser["lock"])
        except FileNotFoundError:
            log.info(f"no config file at {filename}")
        except Exception as e:
            # An unreadable config file is not considered a fatal error since we can
            # fall back to defaults.
            log.error(f"failed to read config file {filename}: {e}")
        else:
            log.info(f"loaded config: {config}")

        return config
