from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from typing import Any
from urllib.error import HTTPError, URLError
from urllib.parse import urlencode
from urllib.request import Request, urlopen

from pydantic import BaseModel, ValidationError

from indego_weather.exceptions import DecodeError, StatusError, TransportError

logger = logging.getLogger(__name__)

USER_AGENT = "indego-weather-snapshots/1.0"


class FeedClient(ABC):
    """Blocking JSON-over-HTTP client for one external feed."""

    def __init__(self, base_url: str, timeout_seconds: int = 10):
        self.base_url = base_url
        self.timeout_seconds = timeout_seconds

    @abstractmethod
    def fetch(self, *args, **kwargs) -> BaseModel:
        raise NotImplementedError

    def _get_json(self, params: dict[str, Any] | None = None) -> Any:
        url = self.base_url
        if params:
            url = f"{url}?{urlencode(params)}"
        request = Request(url, headers={"User-Agent": USER_AGENT, "Accept": "application/json"})
        try:
            with urlopen(request, timeout=self.timeout_seconds) as response:
                status = response.status
                body = response.read()
        except HTTPError as exc:
            raise StatusError(
                f"{self.base_url} answered with status {exc.code}", status_code=exc.code, url=self.base_url
            ) from exc
        except (URLError, TimeoutError, OSError) as exc:
            raise TransportError(f"{self.base_url} unreachable: {exc}", url=self.base_url) from exc

        if not 200 <= status < 300:
            raise StatusError(f"{self.base_url} answered with status {status}", status_code=status, url=self.base_url)

        try:
            return json.loads(body.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise DecodeError(f"{self.base_url} returned a non-JSON body: {exc}", url=self.base_url) from exc

    def _decode(self, payload: Any, model: type[BaseModel]) -> BaseModel:
        try:
            return model.model_validate(payload)
        except ValidationError as exc:
            raise DecodeError(
                f"{self.base_url} returned an unexpected {model.__name__} payload: {exc.error_count()} errors",
                url=self.base_url,
            ) from exc
