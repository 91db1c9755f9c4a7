"""Exception types raised by the logo derivation pipeline."""

from __future__ import annotations


class LogoKitError(Exception):
    """Base class for all pipeline errors."""


class FetchError(LogoKitError):
    """Raised when the encoded bytes behind a reference cannot be retrieved."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"Failed to fetch {_shorten(url)}: {reason}")
        self.url = url
        self.reason = reason


class LoadError(LogoKitError):
    """Raised when the base logo image is unreachable or cannot be decoded."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"Failed to load {_shorten(url)}: {reason}")
        self.url = url
        self.reason = reason


class TransformFailure(LogoKitError):
    """Raised when a single derivation step fails."""

    def __init__(self, key: str, reason: str) -> None:
        super().__init__(f"Derivation of {key!r} failed: {reason}")
        self.key = key
        self.reason = reason


class MissingFormatError(LogoKitError, KeyError):
    """Raised when a caller asks for a variant the bundle does not hold."""

    def __init__(self, key: str) -> None:
        super().__init__(f"Format {key!r} not available")
        self.key = key

    def __str__(self) -> str:
        return str(self.args[0])


def _shorten(url: str, limit: int = 80) -> str:
    # data URIs can be megabytes long
    if len(url) <= limit:
        return url
    return f"{url[:limit]}..."
