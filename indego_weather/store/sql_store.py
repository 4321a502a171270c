from __future__ import annotations

import logging
import uuid
from datetime import datetime

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from indego_weather.database import session_scope
from indego_weather.exceptions import SnapshotNotFoundError, StorageError
from indego_weather.models import SnapshotLink, StationSnapshotRecord, WeatherSnapshotRecord
from indego_weather.schemas.indego import IndegoData
from indego_weather.schemas.weather import WeatherData
from indego_weather.store.base import SnapshotBundle, SnapshotStore
from indego_weather.utils.validators import ensure_utc

logger = logging.getLogger(__name__)


class SqlSnapshotStore(SnapshotStore):
    """SQLAlchemy-backed store (PostgreSQL in production)."""

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def put(self, station: IndegoData, weather: WeatherData, timestamp: datetime) -> uuid.UUID:
        ts = ensure_utc(timestamp)
        station_row = StationSnapshotRecord(
            id=uuid.uuid4(),
            timestamp=ts,
            data=station.model_dump(mode="json", by_alias=True),
        )
        weather_row = WeatherSnapshotRecord(
            id=uuid.uuid4(),
            timestamp=ts,
            data=weather.model_dump(mode="json", by_alias=True),
        )
        link_id = uuid.uuid4()
        link = SnapshotLink(
            id=link_id,
            timestamp=ts,
            indego_snapshot_id=station_row.id,
            weather_snapshot_id=weather_row.id,
        )

        try:
            with session_scope(self.session_factory) as session:
                session.add(station_row)
                session.add(weather_row)
                session.flush()
                # Link last, once both payload rows exist in this transaction.
                session.add(link)
                session.flush()
        except SQLAlchemyError as exc:
            raise StorageError(f"failed to store snapshot: {exc}") from exc

        logger.info(f"Stored snapshot {link_id} at {ts.isoformat()}")
        return link_id

    def nearest_at_or_after(self, at: datetime) -> SnapshotBundle:
        at_utc = ensure_utc(at)
        try:
            with session_scope(self.session_factory) as session:
                row = (
                    session.query(
                        SnapshotLink.timestamp,
                        StationSnapshotRecord.data,
                        WeatherSnapshotRecord.data,
                    )
                    .join(StationSnapshotRecord, SnapshotLink.indego_snapshot_id == StationSnapshotRecord.id)
                    .join(WeatherSnapshotRecord, SnapshotLink.weather_snapshot_id == WeatherSnapshotRecord.id)
                    .filter(SnapshotLink.timestamp >= at_utc)
                    .order_by(SnapshotLink.timestamp.asc())
                    .first()
                )
        except SQLAlchemyError as exc:
            raise StorageError(f"failed to fetch snapshot: {exc}") from exc

        if row is None:
            raise SnapshotNotFoundError(f"no snapshot found at or after {at_utc.isoformat()}")

        snapshot_time, station_json, weather_json = row
        try:
            station = IndegoData.model_validate(station_json)
            weather = WeatherData.model_validate(weather_json)
        except ValidationError as exc:
            raise StorageError(f"stored snapshot payload is unreadable: {exc}") from exc

        return SnapshotBundle(station=station, weather=weather, timestamp=ensure_utc(snapshot_time))
