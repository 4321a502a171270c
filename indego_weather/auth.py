"""
Bearer-token authentication for the /api/v1 routes.
Accepts the configured static token or an RS256 JWT signed by a key from the identity provider's JWKS.
"""
import hmac
import json
import logging
from threading import Lock
from typing import Optional
from urllib.error import URLError
from urllib.request import Request, urlopen

from fastapi import HTTPException, Request as FastAPIRequest
from jose import JWTError, jwt

from indego_weather.config import Settings

logger = logging.getLogger(__name__)


class JWKSCache:
    """Fetches the JWKS document once and keeps it for the process lifetime."""

    def __init__(self, url: str, timeout_seconds: int = 8):
        self.url = url
        self.timeout_seconds = timeout_seconds
        self._jwks: Optional[dict] = None
        self._lock = Lock()

    def get(self) -> dict:
        with self._lock:
            if self._jwks is not None:
                return self._jwks

            request = Request(self.url, headers={"Accept": "application/json"})
            try:
                with urlopen(request, timeout=self.timeout_seconds) as response:
                    self._jwks = json.loads(response.read().decode("utf-8"))
            except (URLError, TimeoutError, OSError, ValueError) as exc:
                logger.warning(f"Failed to load JWKS from {self.url}: {exc}")
                raise HTTPException(status_code=401, detail="Unable to verify token")

            logger.info("Loaded JWKS", extra={"url": self.url, "keys": len(self._jwks.get("keys", []))})
            return self._jwks

    def key_for(self, kid: str) -> dict:
        for key in self.get().get("keys", []):
            if key.get("kid") == kid:
                return key
        raise HTTPException(status_code=401, detail="Unable to find appropriate key")


class BearerAuthenticator:
    def __init__(self, settings: Settings, jwks: Optional[JWKSCache] = None):
        self.enabled = settings.auth_enabled
        self.static_token = settings.auth_token
        self.audience = settings.auth_audience
        self.issuer = f"https://{settings.auth_domain}/" if settings.auth_domain else None
        self.jwks = jwks or JWKSCache(settings.jwks_url)

    def verify(self, token: str) -> dict:
        """Return the token claims, or raise a 401 HTTPException."""
        if self.static_token and hmac.compare_digest(token.encode(), self.static_token.encode()):
            return {"sub": "static-token"}

        try:
            header = jwt.get_unverified_header(token)
        except JWTError:
            raise HTTPException(status_code=401, detail="Invalid token")
        if header.get("alg") != "RS256":
            raise HTTPException(status_code=401, detail=f"Unexpected signing method: {header.get('alg')}")

        key = self.jwks.key_for(header.get("kid", ""))
        try:
            return jwt.decode(
                token,
                key,
                algorithms=["RS256"],
                audience=self.audience,
                issuer=self.issuer,
            )
        except JWTError as exc:
            raise HTTPException(status_code=401, detail=f"Invalid token: {exc}")

    def __call__(self, request: FastAPIRequest) -> Optional[dict]:
        if not self.enabled:
            return None

        auth_header = request.headers.get("Authorization", "")
        parts = auth_header.split(" ")
        if len(parts) != 2 or parts[0] != "Bearer" or not parts[1]:
            raise HTTPException(status_code=401, detail="unauthorized")
        return self.verify(parts[1])


def require_auth(request: FastAPIRequest) -> Optional[dict]:
    """FastAPI dependency; delegates to the authenticator stored on the app."""
    return request.app.state.authenticator(request)
