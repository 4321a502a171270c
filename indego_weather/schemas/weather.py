from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class _WeatherModel(BaseModel):
    model_config = ConfigDict(extra="allow")


class Coordinates(_WeatherModel):
    lon: Optional[float] = None
    lat: Optional[float] = None


class Condition(_WeatherModel):
    id: Optional[int] = None
    main: Optional[str] = None
    description: Optional[str] = None
    icon: Optional[str] = None


class MainReadings(_WeatherModel):
    temp: Optional[float] = None
    feels_like: Optional[float] = None
    temp_min: Optional[float] = None
    temp_max: Optional[float] = None
    pressure: Optional[int] = None
    humidity: Optional[int] = None


class Wind(_WeatherModel):
    speed: Optional[float] = None
    deg: Optional[int] = None
    gust: Optional[float] = None


class Clouds(_WeatherModel):
    all: Optional[int] = None


class WeatherData(_WeatherModel):
    """OpenWeather current conditions response."""

    coord: Optional[Coordinates] = None
    weather: List[Condition] = []
    base: Optional[str] = None
    main: Optional[MainReadings] = None
    visibility: Optional[int] = None
    wind: Optional[Wind] = None
    clouds: Optional[Clouds] = None
    dt: Optional[int] = None
    sys: Optional[dict] = None
    timezone: Optional[int] = None
    id: Optional[int] = None
    name: Optional[str] = None
    cod: Optional[int] = None
