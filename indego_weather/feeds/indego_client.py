from __future__ import annotations

from indego_weather.config import Settings
from indego_weather.feeds.base import FeedClient
from indego_weather.schemas.indego import IndegoData


class IndegoClient(FeedClient):
    """Station feed client."""

    @classmethod
    def from_settings(cls, settings: Settings) -> "IndegoClient":
        return cls(settings.indego_base_url, timeout_seconds=settings.feed_timeout_seconds)

    def fetch(self) -> IndegoData:
        return self._decode(self._get_json(), IndegoData)
