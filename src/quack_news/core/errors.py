"""Error taxonomy for sources, aggregation and stores."""

from typing import Optional


class QuackNewsError(Exception):
    """Base error for the package."""


class SourceError(QuackNewsError):
    """A single feed could not be read."""

    def __init__(self, source: str, message: str) -> None:
        super().__init__(f"{source}: {message}")
        self.source = source


class SourceUnavailable(SourceError):
    """The feed answered with a non-2xx status or could not be reached."""

    def __init__(self, source: str, status_code: Optional[int] = None) -> None:
        if status_code is None:
            message = "unreachable"
        else:
            message = f"HTTP {status_code}"
        super().__init__(source, message)
        self.status_code = status_code


class SourceTimeout(SourceError):
    """The feed did not answer in time."""

    def __init__(self, source: str) -> None:
        super().__init__(source, "timed out")


class DecodeError(SourceError):
    """The feed payload was not a listing."""

    def __init__(self, source: str, reason: str) -> None:
        super().__init__(source, f"malformed payload ({reason})")
        self.reason = reason


class NoContentAvailable(QuackNewsError):
    """Aggregation produced zero usable items."""


class StoreError(QuackNewsError):
    """A document or object store operation failed."""
