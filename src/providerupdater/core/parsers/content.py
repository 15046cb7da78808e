"""Extraction of the transport protocol and remote hosts of an OpenVPN profile."""
from __future__ import annotations

from typing import Iterable, List

from ...exceptions import RemoteHostNotFoundError, UnknownProtocolError
from ...models import ParsedContent, Protocol

PROTOCOL_TOKENS = {
    "udp": Protocol.UDP,
    "udp4": Protocol.UDP,
    "udp6": Protocol.UDP,
    "tcp": Protocol.TCP,
    "tcp4": Protocol.TCP,
    "tcp6": Protocol.TCP,
    "tcp-client": Protocol.TCP,
}

COMMENT_PREFIXES = ("#", ";")


def split_lines(content: str) -> List[List[str]]:
    """Split a profile body into whitespace separated fields, skipping comments."""
    lines: List[List[str]] = []
    for line in content.splitlines():
        fields = line.split()
        if not fields or fields[0].startswith(COMMENT_PREFIXES):
            continue
        lines.append(fields)
    return lines


def extract_protocol(lines: Iterable[List[str]]) -> Protocol:
    """
    Return the protocol of the first ``proto`` line, defaulting to UDP.

    Raises:
        UnknownProtocolError: If the declared protocol is not recognised.
    """
    for fields in lines:
        if fields[0] != "proto":
            continue
        token = " ".join(fields[1:])
        if len(fields) != 2:
            raise UnknownProtocolError(token)
        protocol = PROTOCOL_TOKENS.get(token.lower())
        if protocol is None:
            raise UnknownProtocolError(token)
        return protocol
    return Protocol.UDP


def extract_hosts(lines: Iterable[List[str]]) -> List[str]:
    """Return the host of every ``remote`` line, in file order."""
    return [fields[1] for fields in lines if fields[0] == "remote" and len(fields) > 1]


def parse_content(content: str) -> ParsedContent:
    """
    Parse a profile body into its protocol and remote hosts.

    The protocol is checked first: an unknown protocol aborts parsing
    before hosts are looked at.

    Raises:
        UnknownProtocolError: If the declared protocol is not recognised.
        RemoteHostNotFoundError: If no ``remote`` line is present.
    """
    lines = split_lines(content)
    protocol = extract_protocol(lines)
    hosts = extract_hosts(lines)
    if not hosts:
        raise RemoteHostNotFoundError()
    return ParsedContent(protocol=protocol, hosts=hosts)
