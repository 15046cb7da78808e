"""Provider updater turning a profile archive into a resolved server catalogue.

`Updater.get_servers` downloads the provider's zip archive of OpenVPN
profiles, turns each profile into a provisional record, resolves all
distinct hostnames in one batch and returns the servers sorted by hostname.
Non-fatal problems are reported to a `Warner`; fatal ones are raised.
"""
from __future__ import annotations

import functools
import logging
from typing import Callable, Dict, List, Optional, Protocol, Sequence, Tuple

from .config import Settings
from .constants import DEFAULT_ZIP_URL
from .core.file_processor import process_files
from .core.unzip import Unzipper
from .exceptions import NotEnoughServersError, ResolveError
from .models import IPAddress, Server
from .resolver import ParallelResolver, ParallelSettings, RepeatResolver, derive_parallel_settings
from .warner import LoggingWarner, Warner

SettingsFactory = Callable[[int], ParallelSettings]


class ArchiveFetcher(Protocol):
    async def fetch_and_extract(self, url: str) -> Dict[str, bytes]:
        ...


class HostsResolver(Protocol):
    async def resolve(
        self, hosts: Sequence[str], settings: ParallelSettings
    ) -> Tuple[Dict[str, List[IPAddress]], List[str]]:
        ...


class Updater:
    """Fetch, parse and resolve the servers of a provider."""

    def __init__(
        self,
        unzipper: ArchiveFetcher,
        presolver: HostsResolver,
        warner: Warner,
        *,
        zip_url: str = DEFAULT_ZIP_URL,
        settings_factory: SettingsFactory = derive_parallel_settings,
    ):
        self.unzipper = unzipper
        self.presolver = presolver
        self.warner = warner
        self.zip_url = zip_url
        self.settings_factory = settings_factory

    @classmethod
    def from_settings(cls, settings: Settings, warner: Optional[Warner] = None) -> Updater:
        """Build an updater wired to the real archive fetcher and resolver."""
        repeat = RepeatResolver(nameservers=settings.resolver.nameservers)
        return cls(
            Unzipper(settings.network),
            ParallelResolver(repeat, show_progress=settings.resolver.show_progress),
            warner or LoggingWarner(),
            zip_url=settings.updater.zip_url,
            settings_factory=functools.partial(
                derive_parallel_settings, config=settings.resolver
            ),
        )

    async def get_servers(self, min_servers: int) -> List[Server]:
        """
        Return the provider's servers, sorted by hostname.

        Args:
            min_servers: The minimum number of servers to find.

        Returns:
            The resolved servers.
        Raises:
            NetworkError: If the archive cannot be downloaded.
            ArchiveError: If the archive cannot be read.
            ResolveError: If the batch resolution fails.
            NotEnoughServersError: If fewer than ``min_servers`` servers remain.
        """
        contents = await self.unzipper.fetch_and_extract(self.zip_url)

        hts = process_files(contents, self.warner)

        host_to_ips: Dict[str, List[IPAddress]] = {}
        if hts:
            hosts = hts.hostnames()
            settings = self.settings_factory(min_servers)
            logging.info("Resolving %d hosts.", len(hosts))
            try:
                host_to_ips, warnings = await self.presolver.resolve(hosts, settings)
            except ResolveError as exc:
                for warning in exc.warnings:
                    self.warner.warn(warning)
                raise
            for warning in warnings:
                self.warner.warn(warning)

        servers = hts.to_servers(host_to_ips)
        if len(servers) < min_servers:
            raise NotEnoughServersError(len(servers), min_servers)

        logging.info("Found %d servers.", len(servers))
        return servers

    async def close(self) -> None:
        """Close the network resources of the collaborators that hold any."""
        for collaborator in (self.unzipper, self.presolver):
            close = getattr(collaborator, "close", None)
            if callable(close):
                await close()

    async def __aenter__(self) -> Updater:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()
