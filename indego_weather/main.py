"""
Main application entry point.
Builds every component from one Settings object and runs the API with the background poller.
"""
import argparse
import asyncio
import logging
import sys
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI

from indego_weather.api.routes import create_app
from indego_weather.config import Settings, load_settings
from indego_weather.database import build_session_factory, engine_from_settings, init_db
from indego_weather.feeds.indego_client import IndegoClient
from indego_weather.feeds.weather_client import WeatherClient
from indego_weather.ingestion import IngestionService
from indego_weather.observability import RuntimeObservability
from indego_weather.services.snapshot_service import SnapshotOrchestrator, SnapshotQuery
from indego_weather.store.sql_store import SqlSnapshotStore

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings):
    # stdout for container log collectors
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )


def build_app(settings: Settings) -> FastAPI:
    """Wire the store, clients, orchestrator, poller and API together."""
    engine = engine_from_settings(settings)
    store = SqlSnapshotStore(build_session_factory(engine))
    observability = RuntimeObservability()

    orchestrator = SnapshotOrchestrator(
        indego_client=IndegoClient.from_settings(settings),
        weather_client=WeatherClient.from_settings(settings),
        store=store,
        latitude=settings.weather_latitude,
        longitude=settings.weather_longitude,
        max_attempts=settings.station_fetch_attempts,
        retry_delay_seconds=settings.station_fetch_retry_delay_seconds,
        observability=observability,
    )
    ingestion_service = IngestionService(orchestrator, interval_seconds=settings.ingestion_interval_seconds)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Lifespan context manager for startup and shutdown events.
        Handles database initialization and poller lifecycle.
        """
        logger.info("Starting Indego weather snapshot service...")
        ingestion_task = None

        try:
            init_db(engine)
            if settings.ingestion_enabled:
                ingestion_task = asyncio.create_task(ingestion_service.start())
            logger.info("Application started successfully")
            yield
        except Exception as e:
            logger.error(f"Startup failed: {e}", exc_info=True)
            raise
        finally:
            logger.info("Shutting down Indego weather snapshot service...")
            await ingestion_service.stop()

            if ingestion_task is not None:
                ingestion_task.cancel()
                try:
                    await ingestion_task
                except asyncio.CancelledError:
                    pass

            engine.dispose()
            logger.info("Shutdown complete")

    return create_app(
        settings,
        orchestrator=orchestrator,
        query=SnapshotQuery(store),
        observability=observability,
        lifespan=lifespan,
    )


def main(argv: Optional[list] = None):
    """Run the application."""
    parser = argparse.ArgumentParser(description="Indego weather snapshot service")
    parser.add_argument("--env-file", default=".env", help="Path to the configuration file")
    args = parser.parse_args(argv)

    settings = load_settings(args.env_file)
    configure_logging(settings)
    logger.info(
        "Configuration loaded",
        extra={
            "host": settings.host,
            "port": settings.port,
            "log_level": settings.log_level,
            "ingestion_interval_seconds": settings.ingestion_interval_seconds,
            "db_pool_size": settings.db_pool_size,
            "db_max_overflow": settings.db_max_overflow,
            "db_pool_timeout_seconds": settings.db_pool_timeout_seconds,
        },
    )

    uvicorn.run(
        build_app(settings),
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        lifespan="on",
        access_log=True,
    )


if __name__ == "__main__":
    main()
