"""Typed records for the Indego station feed (GeoJSON FeatureCollection)."""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _FeedModel(BaseModel):
    # Unknown feed fields are kept so the stored payload is the full document.
    model_config = ConfigDict(extra="allow", alias_generator=to_camel, populate_by_name=True)


class Bike(_FeedModel):
    dock_number: Optional[int] = None
    is_electric: Optional[bool] = None
    is_available: Optional[bool] = None
    battery: Optional[int] = None


class Geometry(_FeedModel):
    coordinates: List[float] = []
    type: str = "Point"


class StationProperties(_FeedModel):
    """Details and availability counts of one station."""

    id: int
    name: Optional[str] = None
    coordinates: Optional[List[float]] = None
    total_docks: Optional[int] = None
    docks_available: Optional[int] = None
    bikes_available: Optional[int] = None
    classic_bikes_available: Optional[int] = None
    smart_bikes_available: Optional[int] = None
    electric_bikes_available: Optional[int] = None
    reward_bikes_available: Optional[int] = None
    reward_docks_available: Optional[int] = None
    kiosk_status: Optional[str] = None
    kiosk_public_status: Optional[str] = None
    kiosk_connection_status: Optional[str] = None
    kiosk_type: Optional[int] = None
    address_street: Optional[str] = None
    address_city: Optional[str] = None
    address_state: Optional[str] = None
    address_zip_code: Optional[str] = None
    bikes: List[Bike] = []
    close_time: Optional[datetime] = None
    event_end: Optional[datetime] = None
    event_start: Optional[datetime] = None
    is_event_based: Optional[bool] = None
    is_virtual: Optional[bool] = None
    kiosk_id: Optional[int] = None
    notes: Optional[str] = None
    open_time: Optional[datetime] = None
    public_text: Optional[str] = None
    time_zone: Optional[str] = None
    trikes_available: Optional[int] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None


class StationFeature(_FeedModel):
    geometry: Optional[Geometry] = None
    properties: StationProperties
    type: str = "Feature"


class IndegoData(_FeedModel):
    """The whole station feed response."""

    last_updated: Optional[datetime] = Field(default=None, alias="last_updated")
    features: List[StationFeature] = []
    type: str = "FeatureCollection"

    def find_station(self, kiosk_id: int) -> Optional[StationFeature]:
        for feature in self.features:
            if feature.properties.id == kiosk_id:
                return feature
        return None
