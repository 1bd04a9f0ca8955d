"""
File format of exported registration tables.

An exported table is a single MessagePack map:

    {"format": "1.0.0", "mappings": [[program, version, netid, uaddr, owner], ...]}

The format is versioned separately from rpcreg. Tables with a different major format
version are rejected, newer minor versions may only add trailing fields to a mapping.
"""

from dataclasses import dataclass, field
from typing import Any, List

import msgpack
import semver

from rpcreg.binder import Mapping
import rpcreg.constants as constants


@dataclass
class ExportDocument:
    """Contents of an exported registration table."""

    format: str = constants.EXPORT_FORMAT_VERSION
    mappings: List[Mapping] = field(default_factory=list)


def pack_document(doc: ExportDocument) -> bytes:
    """Serialize a registration table."""
    return msgpack.packb(
        {
            "format": doc.format,
            "mappings": [
                [m.program, m.version, m.netid, m.uaddr, m.owner] for m in doc.mappings
            ],
        }
    )


def unpack_document(data: bytes) -> ExportDocument:
    """
    Deserialize a registration table.

    Raises ValueError if the data isn't a registration table or if it was exported in
    an incompatible format.
    """
    try:
        obj = msgpack.unpackb(data)
    except (msgpack.UnpackException, ValueError) as e:
        raise ValueError(f"not an exported registration table: {e}")

    if not isinstance(obj, dict) or not isinstance(obj.get("mappings"), list):
        raise ValueError("not an exported registration table")

    _check_format(obj.get("format"))

    return ExportDocument(
        format=obj["format"], mappings=[_unpack_mapping(m) for m in obj["mappings"]]
    )


def _check_format(format_version: Any) -> None:
    try:
        version = semver.VersionInfo.parse(format_version)
    except (ValueError, TypeError):
        raise ValueError(f"invalid export format version {format_version!r}")

    expected = semver.VersionInfo.parse(constants.EXPORT_FORMAT_VERSION)

    if version.major != expected.major:
        raise ValueError(
            f"incompatible export format "
            f"({version} != {constants.EXPORT_FORMAT_VERSION})"
        )


def _unpack_mapping(entry: Any) -> Mapping:
    if not isinstance(entry, list) or len(entry) < 5:
        raise ValueError(f"malformed mapping {entry!r}")

    program, version, netid, uaddr, owner = entry[:5]

    if not (
        isinstance(program, int)
        and isinstance(version, int)
        and isinstance(netid, str)
        and isinstance(uaddr, str)
        and isinstance(owner, str)
    ):
        raise ValueError(f"malformed mapping {entry!r}")

    return Mapping(program, version, netid, uaddr, owner)
