import io
import json
from urllib.error import HTTPError, URLError
from urllib.parse import parse_qs, urlparse

import pytest
from conftest import WEATHER_FEED, station_feed

from indego_weather.exceptions import DecodeError, StatusError, TransportError
from indego_weather.feeds import base
from indego_weather.feeds.indego_client import IndegoClient
from indego_weather.feeds.weather_client import WeatherClient


class FakeResponse(io.BytesIO):
    def __init__(self, body: bytes, status: int = 200):
        super().__init__(body)
        self.status = status


def _serve(monkeypatch, body=b"", status=200, error=None):
    requests = []

    def fake_urlopen(request, timeout=None):
        requests.append(request)
        if error is not None:
            raise error
        return FakeResponse(body, status)

    monkeypatch.setattr(base, "urlopen", fake_urlopen)
    return requests


def test_indego_client_decodes_station_feed(monkeypatch):
    _serve(monkeypatch, json.dumps(station_feed(3005)).encode())

    data = IndegoClient("http://indego.test/stations/json/").fetch()

    station = data.find_station(3005)
    assert station.properties.name == "Welcome Park, NPS"
    assert station.properties.total_docks == 13
    assert station.properties.bikes[0].dock_number == 1
    assert data.last_updated.isoformat() == "2019-09-01T10:00:00+00:00"


def test_weather_client_sends_coordinates_and_key(monkeypatch):
    requests = _serve(monkeypatch, json.dumps(WEATHER_FEED).encode())

    data = WeatherClient("http://weather.test/data/2.5/weather", "secret").fetch(44.34, 10.99)

    assert data.main.temp == 295.4
    assert data.weather[0].description == "clear sky"
    query = parse_qs(urlparse(requests[0].full_url).query)
    assert query["appid"] == ["secret"]
    assert float(query["lat"][0]) == 44.34
    assert float(query["lon"][0]) == 10.99


def test_http_error_status_is_status_error(monkeypatch):
    url = "http://indego.test/stations/json/"
    _serve(monkeypatch, error=HTTPError(url, 500, "Internal Server Error", {}, None))

    with pytest.raises(StatusError) as excinfo:
        IndegoClient(url).fetch()
    assert excinfo.value.status_code == 500


def test_non_2xx_without_http_error_is_status_error(monkeypatch):
    _serve(monkeypatch, b"", status=304)

    with pytest.raises(StatusError):
        IndegoClient("http://indego.test/").fetch()


def test_unreachable_host_is_transport_error(monkeypatch):
    _serve(monkeypatch, error=URLError("Name or service not known"))

    with pytest.raises(TransportError):
        WeatherClient("http://weather.test/", "k").fetch(1.0, 2.0)


def test_timeout_is_transport_error(monkeypatch):
    _serve(monkeypatch, error=TimeoutError("timed out"))

    with pytest.raises(TransportError):
        IndegoClient("http://indego.test/").fetch()


def test_non_json_body_is_decode_error(monkeypatch):
    _serve(monkeypatch, b"<html>maintenance</html>")

    with pytest.raises(DecodeError):
        IndegoClient("http://indego.test/").fetch()


def test_wrong_shape_is_decode_error(monkeypatch):
    _serve(monkeypatch, json.dumps({"features": [{"properties": {"name": "no id"}}]}).encode())

    with pytest.raises(DecodeError):
        IndegoClient("http://indego.test/").fetch()


def test_decode_error_is_not_a_transport_error(monkeypatch):
    _serve(monkeypatch, b"[")

    with pytest.raises(DecodeError) as excinfo:
        IndegoClient("http://indego.test/").fetch()
    assert not isinstance(excinfo.value, (TransportError, StatusError))
