"""
Listing, exporting and importing the registration table of the binder.

An exported table can be imported into the binder of another machine (or the same
machine at a later point) to announce the same services there. Only the mappings are
transferred, rpcbind remains the only place where registrations live.
"""

from typing import Dict, Iterable, List, Optional

from rpcreg.address import parse_uaddr
from rpcreg.binder import Binder, Mapping
from rpcreg.logger import log, summarize
from .document import ExportDocument, pack_document, unpack_document
from .registrar import RegistrationOutcome


def list_mappings(binder: Binder) -> List[Mapping]:
    """Retrieve the registration table of the binder."""
    return binder.dump()


def export_mappings(
    binder: Binder, path: str, programs: Optional[Iterable[int]] = None
) -> int:
    """
    Write the registration table of the binder to a file.

    If programs are specified then only mappings of these programs are exported.
    Returns the number of exported mappings.
    """
    mappings = list_mappings(binder)

    if programs:
        selected = set(programs)
        mappings = [m for m in mappings if m.program in selected]

    with open(path, "wb") as f:
        f.write(pack_document(ExportDocument(mappings=mappings)))

    log.info(f"exported {len(mappings)} mappings to {path}")

    return len(mappings)


def import_mappings(binder: Binder, path: str) -> RegistrationOutcome:
    """
    Register all mappings from an exported registration table.

    Every mapping is attempted regardless of earlier failures, with a single error
    logged if any of them failed. Mappings with an unusable address count as failures.
    """
    with open(path, "rb") as f:
        doc = unpack_document(f.read())

    outcome = RegistrationOutcome("import")

    for mapping in doc.mappings:
        outcome.attempted += 1

        if not _import_mapping(binder, mapping):
            outcome.failed += 1

    if not outcome.ok:
        log.error(
            f"couldn't register {outcome.failed} of {outcome.attempted} "
            "imported mappings"
        )

    return outcome


def _import_mapping(binder: Binder, mapping: Mapping) -> bool:
    """Register a single imported mapping, treating errors as failure."""
    try:
        address = parse_uaddr(mapping.netid, mapping.uaddr)
        return binder.register(mapping.netid, mapping.program, mapping.version, address)
    except Exception as e:
        log.debug(f"failed to import {summarize(mapping)}: {e}")
        return False


def format_mappings(mappings: List[Mapping]) -> List[str]:
    """Format mappings as aligned table rows like rpcinfo does."""
    rows: List[Dict[str, str]] = [
        {
            "program": str(m.program),
            "version": str(m.version),
            "netid": m.netid,
            "address": m.uaddr,
            "owner": m.owner,
        }
        for m in mappings
    ]

    columns = ["program", "version", "netid", "address", "owner"]
    widths = {c: max([len(c)] + [len(row[c]) for row in rows]) for c in columns}

    header = "  ".join(c.ljust(widths[c]) for c in columns).rstrip()
    lines = [
        "  ".join(row[c].ljust(widths[c]) for c in columns).rstrip() for row in rows
    ]

    return [header] + lines
