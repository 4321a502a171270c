from __future__ import annotations

from indego_weather.config import Settings
from indego_weather.feeds.base import FeedClient
from indego_weather.schemas.weather import WeatherData


class WeatherClient(FeedClient):
    """Current-conditions client for the OpenWeather API."""

    def __init__(self, base_url: str, api_key: str, timeout_seconds: int = 10):
        super().__init__(base_url, timeout_seconds=timeout_seconds)
        self.api_key = api_key

    @classmethod
    def from_settings(cls, settings: Settings) -> "WeatherClient":
        return cls(settings.weather_base_url, settings.weather_api_key, timeout_seconds=settings.feed_timeout_seconds)

    def fetch(self, lat: float, lon: float) -> WeatherData:
        payload = self._get_json({"lat": f"{lat:f}", "lon": f"{lon:f}", "appid": self.api_key})
        return self._decode(payload, WeatherData)
