"""Settings of the parallel resolver and their derivation from an update's needs."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from ..config import ResolverSettings


@dataclass(frozen=True)
class RepeatSettings:
    """How hard a single hostname is resolved."""

    max_duration: float = 20.0
    between_duration: float = 1.0
    max_no_new: int = 2
    max_fails: int = 2
    sort_ips: bool = True


@dataclass(frozen=True)
class ParallelSettings:
    """
    Tolerance of a batch resolution.

    ``max_fail_ratio`` bounds the share of hosts allowed to fail before the
    whole batch fails; ``min_found`` is the number of hosts that must end up
    with at least one IP.
    """

    min_found: int = 0
    max_fail_ratio: float = 0.1
    max_concurrency: int = 50
    repeat: RepeatSettings = field(default_factory=RepeatSettings)


def derive_parallel_settings(
    min_servers: int, config: Optional[ResolverSettings] = None
) -> ParallelSettings:
    """
    Build the resolution settings for an update requiring ``min_servers``.

    Every server needs its own hostname, so the batch must find at least
    ``min_servers`` hosts. The failure ratio and the per-host repeat policy
    come from the configuration.
    """
    config = config or ResolverSettings()
    return ParallelSettings(
        min_found=min_servers,
        max_fail_ratio=config.max_fail_ratio,
        max_concurrency=config.max_concurrency,
        repeat=RepeatSettings(
            max_duration=config.max_duration,
            between_duration=config.between_duration,
            max_no_new=config.max_no_new,
            max_fails=config.max_fails,
            sort_ips=config.sort_ips,
        ),
    )
