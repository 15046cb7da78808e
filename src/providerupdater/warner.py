"""Diagnostic sinks receiving the non-fatal warnings of an update."""
from __future__ import annotations

import logging
from typing import List, Optional, Protocol


class Warner(Protocol):
    def warn(self, message: str) -> None:
        ...


class LoggingWarner:
    """Send every warning to the logging system."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger()

    def warn(self, message: str) -> None:
        self.logger.warning(message)


class CollectingWarner:
    """Keep warnings in memory, optionally forwarding them to another warner."""

    def __init__(self, forward: Optional[Warner] = None):
        self.forward = forward
        self.messages: List[str] = []

    def warn(self, message: str) -> None:
        self.messages.append(message)
        if self.forward is not None:
            self.forward.warn(message)
