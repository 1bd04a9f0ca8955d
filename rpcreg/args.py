"""Module defining the command-line arguments and providing a parser for them."""

from __future__ import annotations

import argparse
from typing import List, Optional

from rpcreg.constants import EXPORT_FORMAT_VERSION, VERSION
from rpcreg.registration import Mode


class Arguments(argparse.Namespace):
    """Parsed command-line arguments."""

    unset_only: bool
    statd_only: bool

    local_sockets: bool

    list: bool
    export_path: Optional[str]
    import_path: Optional[str]
    programs: List[int]

    config: str
    debug: bool

    @property
    def mode(self) -> Mode:
        """
        Determine the registration mode from the -u and -s flags.

        Withdrawing only takes precedence over registering the status monitor when
        both flags are specified.
        """
        if self.unset_only:
            return Mode.UNSET_ONLY
        elif self.statd_only:
            return Mode.STATD_ONLY
        else:
            return Mode.FULL

    @classmethod
    def parse(cls, args: Optional[List[str]] = None) -> Arguments:
        """
        Parse command-line arguments from the given list of strings.

        Defaults to sys.argv if none are specified.
        """
        return cls._get_parser().parse_args(args, namespace=cls())

    @classmethod
    def _get_parser(cls) -> argparse.ArgumentParser:
        parser = argparse.ArgumentParser(
            description="Register NFS, MOUNT and STAT services with rpcbind.",
            usage="rpcreg [-u] [-s] [option...]",
        )

        parser.add_argument(
            "--version",
            action="version",
            version=f"%(prog)s {VERSION} (export format {EXPORT_FORMAT_VERSION})",
            help="show the program version and export format version",
        )

        # Registration modes
        parser.add_argument(
            "-u",
            action="store_true",
            help="only withdraw existing registrations",
            dest="unset_only",
        )
        parser.add_argument(
            "-s",
            action="store_true",
            help="only register the status monitor on its fixed ports",
            dest="statd_only",
        )

        # Register NFS and MOUNT on the configured local sockets as well
        parser.add_argument(
            "--local-sockets",
            action="store_true",
            help="also register on configured local socket transports",
        )

        # Registration table transfer, mutually exclusive with each other
        transfer = parser.add_mutually_exclusive_group()

        transfer.add_argument(
            "--list", action="store_true", help="list registrations known to rpcbind"
        )
        transfer.add_argument(
            "--export",
            type=str,
            help="write registrations known to rpcbind to a file",
            dest="export_path",
            metavar="FILE",
        )
        transfer.add_argument(
            "--import",
            type=str,
            help="register all mappings from an exported file",
            dest="import_path",
            metavar="FILE",
        )

        # Restrict exports to specific programs
        parser.add_argument(
            "--program",
            type=cls._parse_program,
            action="append",
            help="only export mappings of this program number (repeatable)",
            dest="programs",
            default=[],
        )

        # Path to (optional) config file
        parser.add_argument(
            "--config",
            type=str,
            help="path to config file (default is /etc/rpcreg/config)",
            default="/etc/rpcreg/config",
        )

        # Enable debug output
        parser.add_argument(
            "--debug", action="store_true", help="enable debug information"
        )

        return parser

    @staticmethod
    def _parse_program(arg: str) -> int:
        try:
            val = int(arg)
        except ValueError:
            val = 0

        if not 0 < val < 2 ** 32:
            raise argparse.ArgumentTypeError("expected program number > 0")

        return val
