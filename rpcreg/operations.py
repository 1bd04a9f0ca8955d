"""Module that runs the operation selected on the command line against the binder."""

import dataclasses
import sys
from typing import List

import fasteners

from rpcreg.args import Arguments
import rpcreg.binder as binder
from rpcreg.config import Config
from rpcreg.logger import log
import rpcreg.registration as registration


class Operations:
    """Class that encapsulates a single rpcreg run."""

    def __init__(self, args: Arguments, config: Config):
        """Initialize operations based on command-line arguments and configuration."""
        self._args = args
        self._config = config

    def run(self) -> int:
        """
        Run the selected operation while holding the rpcreg lock.

        The lock keeps concurrent rpcreg processes from interleaving their calls, which
        would break the withdraw-before-register order. Registration failures are
        reported but don't affect the exit code.
        """
        with fasteners.InterProcessLock(self._config.lock.path):
            log.debug(f"acquired lock {self._config.lock.path}")

            rpcb = binder.open_binder(self._config.binder)

            if self._args.list:
                self._list(rpcb)
            elif self._args.export_path:
                registration.export_mappings(
                    rpcb, self._args.export_path, self._args.programs
                )
            elif self._args.import_path:
                registration.import_mappings(rpcb, self._args.import_path)
            else:
                self._register(rpcb)

        return 0

    def _register(self, rpcb: binder.Binder) -> List[registration.RegistrationOutcome]:
        """Withdraw and register the services according to the selected mode."""
        local = self._config.local

        if self._args.local_sockets:
            local = dataclasses.replace(local, enabled=True)

        orchestrator = registration.Orchestrator(rpcb, local)

        # The status monitor is also withdrawn if -s is combined with -u
        return orchestrator.run(self._args.mode, withdraw_status=self._args.statd_only)

    @staticmethod
    def _list(rpcb: binder.Binder) -> None:
        """Print the registration table of the binder to stdout."""
        mappings = registration.list_mappings(rpcb)

        for line in registration.format_mappings(mappings):
            sys.stdout.write(line + "\n")

        sys.stdout.flush()
