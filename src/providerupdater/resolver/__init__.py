from __future__ import annotations

from .parallel import ParallelResolver
from .repeat import RepeatResolver
from .settings import ParallelSettings, RepeatSettings, derive_parallel_settings

__all__ = [
    "ParallelResolver",
    "ParallelSettings",
    "RepeatResolver",
    "RepeatSettings",
    "derive_parallel_settings",
]
