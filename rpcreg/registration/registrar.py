"""Registration of a single service group with the binder."""

from dataclasses import dataclass

from rpcreg.binder import Binder
from rpcreg.logger import log
from .catalogue import ServiceGroup, TransportBinding


@dataclass
class RegistrationOutcome:
    """Number of attempted and failed registrations of a group."""

    group: str
    attempted: int = 0
    failed: int = 0

    @property
    def ok(self) -> bool:
        """Check if all registrations of the group succeeded."""
        return self.failed == 0


def _register(
    binder: Binder, program: int, version: int, binding: TransportBinding
) -> bool:
    """Register a single program version on a binding, treating errors as failure."""
    netid = binding.netid.value
    address = binding.address()

    try:
        ok = binder.register(netid, program, version, address)
    except Exception as e:
        log.debug(f"rpcb_set({netid}, {program}, {version}) raised: {e}")
        return False

    log.debug(
        f"rpcb_set({netid}, {program}, {version}, {address.uaddr}) - "
        f"{'ok' if ok else 'failed'}"
    )

    return ok


def register_group(binder: Binder, group: ServiceGroup) -> RegistrationOutcome:
    """
    Register every version of a group's service on every binding of the group.

    Registrations are independent, so all of them are attempted regardless of earlier
    failures. If any of them failed then a single error is logged for the whole group.
    """
    outcome = RegistrationOutcome(group.name)

    for version in group.registered_versions:
        for binding in group.bindings:
            outcome.attempted += 1

            if not _register(binder, group.service.program, version, binding):
                outcome.failed += 1

    if not outcome.ok:
        log.error(f"couldn't register {group.name} service")

    return outcome
