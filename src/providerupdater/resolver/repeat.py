from __future__ import annotations

import asyncio
import ipaddress
import logging
import socket
from typing import Dict, List, Optional, Sequence

from aiohttp.resolver import AsyncResolver

from ..exceptions import HostResolveError
from ..models import IPAddress
from .settings import RepeatSettings


def parse_ip(host: str) -> Optional[IPAddress]:
    """Return the host as an IP address, or None if it is a hostname."""
    try:
        return ipaddress.ip_address(host)
    except ValueError:
        return None


class RepeatResolver:
    """
    Resolve a hostname several times to collect all of its IP addresses.

    Providers often rotate the records returned for a hostname, so a single
    lookup may miss addresses. Lookups are repeated until they stop bringing
    new addresses, keep failing, or the time budget runs out.
    """

    def __init__(self, nameservers: Sequence[str] = ()):
        self.nameservers = list(nameservers)
        self._resolver: Optional[AsyncResolver] = None

    def _get_resolver(self) -> AsyncResolver:
        """Lazily initialize and return the asynchronous DNS resolver."""
        if self._resolver is None:
            if self.nameservers:
                self._resolver = AsyncResolver(nameservers=self.nameservers)
            else:
                self._resolver = AsyncResolver()
        return self._resolver

    async def lookup(self, host: str) -> List[IPAddress]:
        """Resolve ``host`` once."""
        results = await self._get_resolver().resolve(host, 0, socket.AF_UNSPEC)
        return [ipaddress.ip_address(result["host"]) for result in results]

    async def resolve(self, host: str, settings: RepeatSettings) -> List[IPAddress]:
        """
        Resolve ``host`` repeatedly and return the unique IPs found.

        Raises:
            HostResolveError: If no IP address could be found.
        """
        literal = parse_ip(host)
        if literal is not None:
            return [literal]

        loop = asyncio.get_running_loop()
        deadline = loop.time() + settings.max_duration
        found: Dict[IPAddress, None] = {}
        no_new = fails = 0
        reason = "no address found"

        while True:
            remaining = deadline - loop.time()
            if remaining <= 0:
                reason = "timed out"
                break
            try:
                ips = await asyncio.wait_for(self.lookup(host), timeout=remaining)
            except asyncio.TimeoutError:
                reason = "timed out"
                break
            except OSError as exc:
                fails += 1
                reason = exc.strerror or str(exc) or exc.__class__.__name__
                logging.debug("Resolution %d of %s failed: %s", fails, host, reason)
                if fails >= settings.max_fails:
                    break
            else:
                fails = 0
                new_ips = [ip for ip in ips if ip not in found]
                found.update(dict.fromkeys(new_ips))
                no_new = 0 if new_ips else no_new + 1
                if no_new >= settings.max_no_new:
                    break

            remaining = deadline - loop.time()
            if remaining <= 0:
                break
            await asyncio.sleep(min(settings.between_duration, remaining))

        if not found:
            raise HostResolveError(host, reason)

        ips = list(found)
        if settings.sort_ips:
            ips.sort(key=lambda ip: (ip.version, ip))
        return ips

    async def close(self) -> None:
        """Gracefully close the resolver."""
        if self._resolver:
            try:
                await self._resolver.close()
            except Exception as exc:
                logging.debug("AsyncResolver close failed: %s", exc)
            self._resolver = None
