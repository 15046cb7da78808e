"""Custom exception types for the provider updater."""
from __future__ import annotations

from typing import Iterable


class ProviderUpdaterError(Exception):
    """Base exception class for all application-specific errors."""

    pass


class NetworkError(ProviderUpdaterError):
    """Raised for network-related errors, such as connection or timeout issues."""

    pass


class ArchiveError(ProviderUpdaterError):
    """Raised when the downloaded archive cannot be read."""

    pass


class ConfigError(ProviderUpdaterError):
    """Raised for configuration-related errors."""

    pass


class ParserError(ProviderUpdaterError):
    """Raised when a profile file cannot be turned into a server record."""

    pass


class UnknownCountryCodeError(ParserError):
    """Raised when a profile filename carries a country code we do not know."""

    def __init__(self, code: str):
        super().__init__(f"country code is unknown: {code}")
        self.code = code


class UnknownProtocolError(ParserError):
    """Raised when a profile declares a transport protocol we do not know."""

    def __init__(self, token: str):
        super().__init__(f"unknown protocol: {token}")
        self.token = token


class RemoteHostNotFoundError(ParserError):
    """Raised when a profile has no remote host line."""

    def __init__(self):
        super().__init__("remote host not found")


class HostResolveError(ProviderUpdaterError):
    """Raised when a single hostname yields no IP address."""

    def __init__(self, host: str, reason: str):
        super().__init__(f"failed resolving {host}: {reason}")
        self.host = host


class ResolveError(ProviderUpdaterError):
    """
    Raised when a batch resolution fails as a whole.

    The warnings gathered before the failure travel with the exception so
    the caller can still report them.
    """

    def __init__(self, message: str, warnings: Iterable[str] = ()):
        super().__init__(message)
        self.warnings = list(warnings)


class NotEnoughServersError(ProviderUpdaterError):
    """Raised when fewer servers than required survive the update."""

    def __init__(self, count: int, minimum: int):
        super().__init__(
            f"not enough servers found: {count} and expected at least {minimum}"
        )
        self.count = count
        self.minimum = minimum
