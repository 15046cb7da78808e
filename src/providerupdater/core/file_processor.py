"""Per-file acceptance policy for profile files found in the archive."""
from __future__ import annotations

import logging
import posixpath
from typing import Mapping

from ..constants import OVPN_EXTENSION
from ..exceptions import ParserError
from ..models import FileResult, ProvisionalRecord, Protocol
from ..warner import Warner
from .hosts import HostToServer
from .parsers import parse_content, parse_filename


def process_file(filename: str, content: bytes) -> FileResult:
    """
    Turn one archive entry into a provisional record.

    Files without the ``.ovpn`` extension are not profiles and are skipped
    without any warning. Otherwise the protocol, the hosts and the filename
    metadata are checked in that order; the first failing check rejects the
    file. Advisory warnings gathered before a rejection are kept.

    Args:
        filename: The entry name inside the archive.
        content: The raw bytes of the entry.

    Returns:
        A `FileResult` holding the record (None if rejected) and warnings.
    """
    result = FileResult()
    if not filename.endswith(OVPN_EXTENSION):
        return result

    text = content.decode("utf-8", errors="replace")
    try:
        parsed = parse_content(text)
        hostname = parsed.hosts[0]
        if len(parsed.hosts) > 1:
            result.warnings.append(
                f'only using the first host "{hostname}" and discarding '
                f"{len(parsed.hosts) - 1} other hosts"
            )
        meta = parse_filename(posixpath.basename(filename))
    except ParserError as exc:
        result.warnings.append(f"{exc} in {filename}")
        return result

    result.record = ProvisionalRecord(
        hostname=hostname,
        country=meta.country,
        city=meta.city,
        tcp=parsed.protocol is Protocol.TCP,
        udp=parsed.protocol is Protocol.UDP,
    )
    return result


def process_files(contents: Mapping[str, bytes], warner: Warner) -> HostToServer:
    """Process every archive entry and merge accepted records by hostname."""
    hts = HostToServer()
    skipped = 0
    for filename in sorted(contents):
        result = process_file(filename, contents[filename])
        for warning in result.warnings:
            warner.warn(warning)
        if result.record is None:
            skipped += 1
            continue
        hts.add(result.record)
    logging.debug(
        "Processed %d archive entries: %d hosts accepted, %d entries skipped.",
        len(contents),
        len(hts),
        skipped,
    )
    return hts
