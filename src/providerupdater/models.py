"""Data types flowing through the updater.

A profile file is turned into `ParsedMeta` (from its filename) and
`ParsedContent` (from its body). Accepted files become a
`ProvisionalRecord`, and a provisional record with resolved IPs becomes
a `Server`.
"""
from __future__ import annotations

import enum
import ipaddress
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union

from .constants import OPENVPN

IPAddress = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]


class Protocol(str, enum.Enum):
    """Transport protocol declared by a profile."""

    UDP = "udp"
    TCP = "tcp"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class ParsedMeta:
    """Country and city decoded from a profile filename, empty when absent."""

    country: str = ""
    city: str = ""


@dataclass(frozen=True)
class ParsedContent:
    protocol: Protocol
    hosts: List[str] = field(default_factory=list)


@dataclass
class ProvisionalRecord:
    """A server candidate built from profile files, before resolution."""

    hostname: str
    country: str = ""
    city: str = ""
    tcp: bool = False
    udp: bool = False

    def merge(self, other: ProvisionalRecord) -> None:
        """Fold another record for the same hostname into this one."""
        self.tcp = self.tcp or other.tcp
        self.udp = self.udp or other.udp
        if not self.country:
            self.country = other.country
        if not self.city:
            self.city = other.city


@dataclass(frozen=True)
class Server:
    """A resolved server entry of the catalogue."""

    hostname: str
    country: str = ""
    city: str = ""
    tcp: bool = False
    udp: bool = False
    ips: Tuple[IPAddress, ...] = ()
    vpn: str = OPENVPN

    @classmethod
    def from_record(cls, record: ProvisionalRecord, ips: List[IPAddress]) -> Server:
        return cls(
            hostname=record.hostname,
            country=record.country,
            city=record.city,
            tcp=record.tcp,
            udp=record.udp,
            ips=tuple(ips),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON serializable representation of the server."""
        data: Dict[str, Any] = {"vpn": self.vpn}
        if self.country:
            data["country"] = self.country
        if self.city:
            data["city"] = self.city
        data["hostname"] = self.hostname
        if self.tcp:
            data["tcp"] = True
        if self.udp:
            data["udp"] = True
        data["ips"] = [str(ip) for ip in self.ips]
        return data


@dataclass
class FileResult:
    """
    Outcome of processing one profile file.

    ``record`` is None when the file was rejected or is not a profile.
    ``warnings`` holds every diagnostic raised while checking the file,
    whatever its fate.
    """

    record: Optional[ProvisionalRecord] = None
    warnings: List[str] = field(default_factory=list)

    @property
    def accepted(self) -> bool:
        return self.record is not None
