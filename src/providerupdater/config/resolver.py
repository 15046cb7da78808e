from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field, field_validator


class ResolverSettings(BaseModel):
    """Settings for the parallel hostname resolution."""

    max_concurrency: int = Field(50, description="Maximum number of hosts resolved at the same time.")
    max_fail_ratio: float = Field(
        0.1, description="Ratio of hosts allowed to fail resolution before the whole update fails."
    )
    max_duration: float = Field(20.0, description="Maximum time spent resolving a single host, in seconds.")
    between_duration: float = Field(1.0, description="Pause between two resolutions of the same host, in seconds.")
    max_no_new: int = Field(
        2, description="Stop resolving a host after this many consecutive resolutions found no new IP."
    )
    max_fails: int = Field(2, description="Stop resolving a host after this many consecutive failures.")
    sort_ips: bool = Field(True, description="Sort the IP addresses found for each host.")
    nameservers: List[str] = Field(
        default_factory=list, description="DNS servers to query. Empty to use the system configuration."
    )
    show_progress: bool = Field(False, description="Show a progress bar while resolving.")

    @field_validator("max_concurrency")
    @classmethod
    def _check_concurrency(cls, value: int) -> int:
        if value < 1:
            raise ValueError("max_concurrency must be at least 1")
        return value

    @field_validator("max_fail_ratio")
    @classmethod
    def _check_ratio(cls, value: float) -> float:
        if not 0 <= value <= 1:
            raise ValueError("max_fail_ratio must be between 0 and 1")
        return value
