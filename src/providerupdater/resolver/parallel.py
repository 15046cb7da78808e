from __future__ import annotations

import asyncio
import logging
from typing import Dict, List, Optional, Sequence, Tuple

from tqdm import tqdm

from ..exceptions import HostResolveError, ResolveError
from ..models import IPAddress
from .repeat import RepeatResolver
from .settings import ParallelSettings


class ParallelResolver:
    """
    Resolve many hostnames concurrently with a failure tolerance.

    Each host goes through a `RepeatResolver`. Hosts that cannot be
    resolved produce a warning, until the share of failures goes above
    ``ParallelSettings.max_fail_ratio`` which aborts the whole batch.
    """

    def __init__(self, repeat: Optional[RepeatResolver] = None, *, show_progress: bool = False):
        self.repeat = repeat or RepeatResolver()
        self.show_progress = show_progress

    async def resolve(
        self, hosts: Sequence[str], settings: ParallelSettings
    ) -> Tuple[Dict[str, List[IPAddress]], List[str]]:
        """
        Resolve ``hosts`` and return the IPs of each host with the warnings.

        Hosts that failed to resolve are absent from the returned mapping.

        Raises:
            ResolveError: If too many hosts failed or too few were found. The
                warnings gathered so far are attached to the exception.
        """
        host_to_ips: Dict[str, List[IPAddress]] = {}
        warnings: List[str] = []
        max_fails = int(settings.max_fail_ratio * len(hosts))
        semaphore = asyncio.Semaphore(settings.max_concurrency)

        async def resolve_one(host: str) -> Tuple[str, List[IPAddress]]:
            async with semaphore:
                return host, await self.repeat.resolve(host, settings.repeat)

        tasks = [asyncio.create_task(resolve_one(host)) for host in hosts]
        progress = tqdm(
            total=len(tasks), desc="Resolving", unit="host", disable=not self.show_progress
        )
        fails = 0
        try:
            for next_done in asyncio.as_completed(tasks):
                try:
                    host, ips = await next_done
                except HostResolveError as exc:
                    fails += 1
                    warnings.append(str(exc))
                    if fails > max_fails:
                        raise ResolveError(
                            f"maximum failure ratio reached: {fails} failed "
                            f"out of {len(hosts)} hosts",
                            warnings,
                        ) from exc
                    continue
                finally:
                    progress.update(1)
                host_to_ips[host] = ips
        finally:
            progress.close()
            for task in tasks:
                if not task.done():
                    task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)

        logging.info("Resolved %d out of %d hosts.", len(host_to_ips), len(hosts))
        if len(host_to_ips) < settings.min_found:
            raise ResolveError(
                f"minimum number of hosts not found: found {len(host_to_ips)} "
                f"and expected at least {settings.min_found}",
                warnings,
            )
        return host_to_ips, warnings

    async def close(self) -> None:
        await self.repeat.close()
