from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional

from indego_weather.exceptions import CycleError, FeedError, StationNotFoundError, StorageError
from indego_weather.feeds.indego_client import IndegoClient
from indego_weather.feeds.weather_client import WeatherClient
from indego_weather.observability import RuntimeObservability
from indego_weather.schemas.indego import IndegoData, StationFeature
from indego_weather.schemas.weather import WeatherData
from indego_weather.store.base import SnapshotBundle, SnapshotStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StationBundle:
    station: StationFeature
    weather: WeatherData
    timestamp: datetime


class SnapshotOrchestrator:
    """Runs one poll cycle: fetch both feeds, then store them and their link atomically."""

    def __init__(
        self,
        indego_client: IndegoClient,
        weather_client: WeatherClient,
        store: SnapshotStore,
        latitude: float,
        longitude: float,
        max_attempts: int = 3,
        retry_delay_seconds: float = 2.0,
        observability: Optional[RuntimeObservability] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.indego_client = indego_client
        self.weather_client = weather_client
        self.store = store
        self.latitude = latitude
        self.longitude = longitude
        self.max_attempts = max_attempts
        self.retry_delay_seconds = retry_delay_seconds
        self.observability = observability
        self._sleep = sleep

    def _fetch_station_feed(self) -> IndegoData:
        last_error = None
        for attempt in range(1, self.max_attempts + 1):
            try:
                return self.indego_client.fetch()
            except FeedError as exc:
                last_error = exc
                logger.warning(f"Failed to fetch Indego data, attempt {attempt}/{self.max_attempts}: {exc}")
                if attempt < self.max_attempts:
                    self._sleep(self.retry_delay_seconds)
        raise CycleError(
            CycleError.STATION_FETCH,
            f"failed to fetch Indego data after {self.max_attempts} attempts: {last_error}",
        ) from last_error

    def _run(self) -> uuid.UUID:
        station = self._fetch_station_feed()

        try:
            weather = self.weather_client.fetch(self.latitude, self.longitude)
        except FeedError as exc:
            raise CycleError(CycleError.WEATHER_FETCH, f"failed to fetch weather data: {exc}") from exc

        timestamp = station.last_updated or datetime.now(timezone.utc)
        try:
            return self.store.put(station, weather, timestamp)
        except StorageError as exc:
            raise CycleError(CycleError.STORE, f"failed to store snapshot link: {exc}") from exc

    def run_cycle(self) -> uuid.UUID:
        """Fetch, store and link one snapshot set. Raises CycleError naming the failed stage."""
        logger.info("Starting snapshot cycle")
        try:
            link_id = self._run()
        except CycleError as exc:
            logger.error(f"Snapshot cycle failed at {exc.stage}: {exc}")
            if self.observability:
                self.observability.mark_ingestion_failure(str(exc))
            raise

        logger.info(f"Snapshot cycle stored link {link_id}")
        if self.observability:
            self.observability.mark_ingestion_success()
        return link_id


class SnapshotQuery:
    def __init__(self, store: SnapshotStore):
        self.store = store

    def at(self, at: datetime) -> SnapshotBundle:
        return self.store.nearest_at_or_after(at)

    def station_at(self, kiosk_id: int, at: datetime) -> StationBundle:
        bundle = self.at(at)
        station = bundle.station.find_station(kiosk_id)
        if station is None:
            raise StationNotFoundError(f"Station {kiosk_id} not found")
        return StationBundle(station=station, weather=bundle.weather, timestamp=bundle.timestamp)
