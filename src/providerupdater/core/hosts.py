from __future__ import annotations

from typing import Dict, List, Mapping, Sequence

from ..models import IPAddress, ProvisionalRecord, Server


class HostToServer:
    """Provisional records keyed by hostname."""

    def __init__(self):
        self._records: Dict[str, ProvisionalRecord] = {}

    def __len__(self) -> int:
        return len(self._records)

    def __bool__(self) -> bool:
        return bool(self._records)

    def add(self, record: ProvisionalRecord) -> None:
        """Add a record, merging it with any record already holding its hostname."""
        existing = self._records.get(record.hostname)
        if existing is None:
            self._records[record.hostname] = ProvisionalRecord(
                hostname=record.hostname,
                country=record.country,
                city=record.city,
                tcp=record.tcp,
                udp=record.udp,
            )
            return
        existing.merge(record)

    def hostnames(self) -> List[str]:
        """Return the distinct hostnames to resolve, sorted."""
        return sorted(self._records)

    def to_servers(self, host_to_ips: Mapping[str, Sequence[IPAddress]]) -> List[Server]:
        """
        Build servers for every hostname that resolved to at least one IP.

        Unresolved hostnames are dropped. The result is sorted by hostname.
        """
        servers = []
        for hostname in self.hostnames():
            ips = host_to_ips.get(hostname)
            if not ips:
                continue
            servers.append(Server.from_record(self._records[hostname], list(ips)))
        return servers
