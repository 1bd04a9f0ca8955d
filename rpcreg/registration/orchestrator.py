"""Module that implements the withdraw-then-register policy for the managed services."""

from typing import List, Optional

from rpcreg.binder import Binder
from rpcreg.config import LocalSocketConfig
from rpcreg.logger import log
from .catalogue import groups_for, LogicalService, Mode, MOUNT, NFS, STAT
from .registrar import register_group, RegistrationOutcome


class Orchestrator:
    """
    Announces or withdraws the catalogue of file sharing services.

    A run always starts by withdrawing stale registrations of NFS and MOUNT, so that
    the registrations that follow cleanly take over from any earlier instance. What is
    registered afterwards depends on the mode:

    * UNSET_ONLY registers nothing.
    * STATD_ONLY registers only the status monitor on its fixed legacy ports.
    * FULL registers NFS and MOUNT over UDP and TCP, and over local sockets if these
    are configured.

    Every call is made exactly once and in a fixed order. Failures are reported per
    group but never abort the run.
    """

    def __init__(self, binder: Binder, local: Optional[LocalSocketConfig] = None):
        """Initialize the orchestrator with a binder and local socket configuration."""
        self._binder = binder
        self._local = local or LocalSocketConfig()

    def withdraw(self, include_status: bool = False) -> None:
        """
        Withdraw the registrations of the managed services on all transports.

        Withdrawal is best-effort: a service that wasn't registered can't be withdrawn
        either, which is not a problem.
        """
        services = [NFS, MOUNT]

        if include_status:
            services.append(STAT)

        for service in services:
            self._withdraw_service(service)

    def _withdraw_service(self, service: LogicalService) -> None:
        for version in service.withdraw_versions:
            try:
                ok = self._binder.unregister(None, service.program, version)
            except Exception as e:
                log.debug(f"rpcb_unset({service.program}, {version}) raised: {e}")
            else:
                log.debug(
                    f"rpcb_unset({service.program}, {version}) - "
                    f"{'ok' if ok else 'not registered'}"
                )

    def run(
        self, mode: Mode, withdraw_status: bool = False
    ) -> List[RegistrationOutcome]:
        """
        Withdraw stale registrations and register the groups of the specified mode.

        The status monitor is withdrawn as well in STATD_ONLY mode or if explicitly
        requested. Returns the outcome of every registered group in order.
        """
        log.debug(f"running in {mode.value} mode")

        self.withdraw(include_status=withdraw_status or mode == Mode.STATD_ONLY)

        return [
            register_group(self._binder, group)
            for group in groups_for(mode, self._local)
        ]
