"""Exception hierarchy for the snapshot service."""

from __future__ import annotations


class SnapshotServiceError(Exception):
    """Base exception for all service errors."""


class FeedError(SnapshotServiceError):
    """Fetching or decoding an external feed failed."""

    def __init__(self, message: str, *, url: str = "") -> None:
        self.url = url
        super().__init__(message)


class TransportError(FeedError):
    """Feed host could not be reached or the request timed out."""


class StatusError(FeedError):
    """Feed answered with a non-2xx status."""

    def __init__(self, message: str, *, status_code: int, url: str = "") -> None:
        self.status_code = status_code
        super().__init__(message, url=url)


class DecodeError(FeedError):
    """Feed body is not JSON or does not match the expected record."""


class StorageError(SnapshotServiceError):
    """Database failure while storing or reading snapshots."""


class NotFoundError(SnapshotServiceError):
    """Requested data does not exist."""


class SnapshotNotFoundError(NotFoundError):
    """No snapshot link at or after the requested time."""


class StationNotFoundError(NotFoundError):
    """Kiosk identifier absent from the matched station snapshot."""


class CycleError(SnapshotServiceError):
    """A poll cycle failed; ``stage`` names the step that failed.

    The underlying error is chained as ``__cause__``.
    """

    STATION_FETCH = "station_fetch"
    WEATHER_FETCH = "weather_fetch"
    STORE = "store"

    def __init__(self, stage: str, message: str) -> None:
        self.stage = stage
        super().__init__(message)
