from __future__ import annotations

import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime

from indego_weather.schemas.indego import IndegoData
from indego_weather.schemas.weather import WeatherData


@dataclass(frozen=True)
class SnapshotBundle:
    """The two payloads referenced by one link, and the link's timestamp."""

    station: IndegoData
    weather: WeatherData
    timestamp: datetime


class SnapshotStore(ABC):
    @abstractmethod
    def put(self, station: IndegoData, weather: WeatherData, timestamp: datetime) -> uuid.UUID:
        """Store both payloads and their link atomically; return the link id.

        Raises StorageError, leaving nothing stored, if any write fails.
        """
        raise NotImplementedError

    @abstractmethod
    def nearest_at_or_after(self, at: datetime) -> SnapshotBundle:
        """Return the link with the smallest timestamp >= ``at``.

        Raises SnapshotNotFoundError when there is none, StorageError on database failure.
        """
        raise NotImplementedError
