"""
Configuration module for the Indego weather snapshot service.
Settings are read from a .env file; environment variables take precedence.
"""
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from a .env file and environment variables."""

    # Runtime
    host: str = "0.0.0.0"
    port: int = 3000

    # Database
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_user: str = "postgres"
    postgres_password: str = ""
    postgres_db: str = "indego"
    postgres_sslmode: str = "disable"
    database_url: Optional[str] = Field(default=None, validate_default=True)
    db_pool_size: int = 25
    db_max_overflow: int = 0
    db_pool_timeout_seconds: int = 30

    # Logging
    log_level: str = "INFO"

    # Feeds
    indego_base_url: str = "https://www.rideindego.com/stations/json/"
    weather_base_url: str = "https://api.openweathermap.org/data/2.5/weather"
    weather_api_key: str = ""
    weather_latitude: float = 39.9526
    weather_longitude: float = -75.1652
    feed_timeout_seconds: int = 10

    # Polling
    station_fetch_attempts: int = 3
    station_fetch_retry_delay_seconds: float = 2.0
    ingestion_enabled: bool = True
    ingestion_interval_seconds: int = 3600

    # Auth
    auth_enabled: bool = True
    auth_token: str = ""
    auth_domain: str = ""
    auth_audience: str = ""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("database_url", mode="before")
    @classmethod
    def construct_database_url(cls, v, info):
        """Build a PostgreSQL URL from its components if not explicitly set."""
        if v:
            return v

        data = info.data
        return (
            f"postgresql+psycopg2://{data.get('postgres_user')}:{data.get('postgres_password')}"
            f"@{data.get('postgres_host')}:{data.get('postgres_port')}/{data.get('postgres_db')}"
            f"?sslmode={data.get('postgres_sslmode')}"
        )

    @field_validator("station_fetch_attempts")
    @classmethod
    def at_least_one_attempt(cls, v):
        if v < 1:
            raise ValueError("station_fetch_attempts must be at least 1")
        return v

    @property
    def jwks_url(self) -> str:
        return f"https://{self.auth_domain}/.well-known/jwks.json"


def load_settings(env_file: Optional[str] = ".env") -> Settings:
    """Build settings once at startup; callers pass the result to each component."""
    return Settings(_env_file=env_file)
