import pytest

from indego_weather.database import build_engine, build_session_factory, init_db
from indego_weather.schemas.indego import IndegoData
from indego_weather.schemas.weather import WeatherData
from indego_weather.store.sql_store import SqlSnapshotStore


def station_feed(*kiosk_ids, last_updated="2019-09-01T10:00:00Z"):
    return {
        "last_updated": last_updated,
        "type": "FeatureCollection",
        "features": [
            {
                "geometry": {"coordinates": [-75.14403, 39.94733], "type": "Point"},
                "properties": {
                    "id": kiosk_id,
                    "name": "Welcome Park, NPS",
                    "totalDocks": 13,
                    "docksAvailable": 7,
                    "bikesAvailable": 4,
                    "classicBikesAvailable": 3,
                    "electricBikesAvailable": 1,
                    "kioskStatus": "FullService",
                    "addressStreet": "191 S. 2nd St.",
                    "addressCity": "Philadelphia",
                    "addressState": "PA",
                    "addressZipCode": "19106",
                    "bikes": [
                        {"dockNumber": 1, "isElectric": True, "isAvailable": False, "battery": 0},
                        {"dockNumber": 6, "isElectric": False, "isAvailable": True, "battery": None},
                    ],
                },
                "type": "Feature",
            }
            for kiosk_id in kiosk_ids
        ],
    }


WEATHER_FEED = {
    "coord": {"lon": -75.1652, "lat": 39.9526},
    "weather": [{"id": 800, "main": "Clear", "description": "clear sky", "icon": "01d"}],
    "main": {"temp": 295.4, "feels_like": 295.1, "temp_min": 293.2, "temp_max": 297.0, "pressure": 1015, "humidity": 60},
    "name": "Philadelphia",
    "cod": 200,
}


@pytest.fixture
def session_factory():
    engine = build_engine("sqlite://")
    init_db(engine)
    yield build_session_factory(engine)
    engine.dispose()


@pytest.fixture
def store(session_factory):
    return SqlSnapshotStore(session_factory)


@pytest.fixture
def indego_data():
    return IndegoData.model_validate(station_feed(3005, 3006))


@pytest.fixture
def weather_data():
    return WeatherData.model_validate(WEATHER_FEED)
