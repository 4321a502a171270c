from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import event
from sqlalchemy.exc import OperationalError

from indego_weather.exceptions import SnapshotNotFoundError, StorageError
from indego_weather.models import SnapshotLink, StationSnapshotRecord, WeatherSnapshotRecord

T0 = datetime(2019, 9, 1, 10, 0, tzinfo=timezone.utc)


def test_exact_timestamp_match(store, indego_data, weather_data):
    store.put(indego_data, weather_data, T0)

    bundle = store.nearest_at_or_after(T0)
    assert bundle.timestamp == T0
    assert bundle.station.find_station(3005) is not None
    assert bundle.weather.main.temp == 295.4


def test_returns_earliest_link_after_requested_time(store, indego_data, weather_data):
    for hours in (3, 1, 2):
        store.put(indego_data, weather_data, T0 + timedelta(hours=hours))

    bundle = store.nearest_at_or_after(T0 + timedelta(minutes=30))
    assert bundle.timestamp == T0 + timedelta(hours=1)

    bundle = store.nearest_at_or_after(T0 + timedelta(hours=1, seconds=1))
    assert bundle.timestamp == T0 + timedelta(hours=2)


def test_offset_timestamps_are_compared_in_utc(store, indego_data, weather_data):
    store.put(indego_data, weather_data, T0)

    eastern = timezone(timedelta(hours=-4))
    bundle = store.nearest_at_or_after(datetime(2019, 9, 1, 5, 59, tzinfo=eastern))
    assert bundle.timestamp == T0

    with pytest.raises(SnapshotNotFoundError):
        store.nearest_at_or_after(datetime(2019, 9, 1, 6, 1, tzinfo=eastern))


def test_not_found_when_nothing_at_or_after(store, indego_data, weather_data):
    store.put(indego_data, weather_data, T0)

    with pytest.raises(SnapshotNotFoundError):
        store.nearest_at_or_after(T0 + timedelta(seconds=1))


def test_not_found_on_empty_store(store):
    with pytest.raises(SnapshotNotFoundError):
        store.nearest_at_or_after(T0)


def test_unknown_feed_fields_are_kept(store, indego_data, weather_data):
    weather_data = weather_data.model_copy(update={"visibility": 10000})
    raw = indego_data.model_dump(by_alias=True)
    raw["features"][0]["properties"]["rentalUrl"] = "https://example.test/3005"
    station = type(indego_data).model_validate(raw)

    store.put(station, weather_data, T0)
    bundle = store.nearest_at_or_after(T0)

    dumped = bundle.station.model_dump(by_alias=True)
    assert dumped["features"][0]["properties"]["rentalUrl"] == "https://example.test/3005"
    assert bundle.weather.visibility == 10000


def test_failed_put_leaves_nothing_behind(store, session_factory, indego_data, weather_data):
    engine = session_factory.kw["bind"]

    def fail_weather_insert(conn, cursor, statement, parameters, context, executemany):
        if statement.startswith("INSERT INTO weather_snapshots"):
            raise OperationalError(statement, parameters, Exception("disk full"))

    event.listen(engine, "before_cursor_execute", fail_weather_insert)
    try:
        with pytest.raises(StorageError):
            store.put(indego_data, weather_data, T0)
    finally:
        event.remove(engine, "before_cursor_execute", fail_weather_insert)

    with pytest.raises(SnapshotNotFoundError):
        store.nearest_at_or_after(T0 - timedelta(days=1))

    session = session_factory()
    try:
        assert session.query(StationSnapshotRecord).count() == 0
        assert session.query(WeatherSnapshotRecord).count() == 0
        assert session.query(SnapshotLink).count() == 0
    finally:
        session.close()


def test_unreadable_payload_is_storage_error(store, session_factory, indego_data, weather_data):
    store.put(indego_data, weather_data, T0)

    session = session_factory()
    try:
        record = session.query(StationSnapshotRecord).one()
        record.data = {"features": [{"properties": {"id": "not-a-number"}}]}
        session.commit()
    finally:
        session.close()

    with pytest.raises(StorageError):
        store.nearest_at_or_after(T0)
