"""
Background polling service.
Runs one snapshot cycle on startup and then once per configured interval.
"""
import asyncio
import logging

from indego_weather.exceptions import SnapshotServiceError
from indego_weather.services.snapshot_service import SnapshotOrchestrator

logger = logging.getLogger(__name__)


class IngestionService:
    """Drives the orchestrator on a fixed interval.

    Each cycle is awaited before the next sleep, so timer-driven cycles never overlap.
    A manually triggered cycle can still run alongside one.
    """

    def __init__(self, orchestrator: SnapshotOrchestrator, interval_seconds: int = 3600):
        self.orchestrator = orchestrator
        self.interval_seconds = interval_seconds
        self.running = False

    async def run_once(self) -> bool:
        """Run one cycle in a worker thread. Returns False if the cycle failed."""
        try:
            await asyncio.to_thread(self.orchestrator.run_cycle)
        except SnapshotServiceError as e:
            logger.error(f"Cronjob failed: {e}")
            return False
        logger.info("Cronjob successfully fetched and stored data")
        return True

    async def start(self):
        """Start the polling loop."""
        self.running = True
        logger.info(f"Starting ingestion service (interval: {self.interval_seconds}s)")

        while self.running:
            try:
                await self.run_once()
            except Exception as e:
                logger.error(f"Error in ingestion loop: {e}", exc_info=True)
            await asyncio.sleep(self.interval_seconds)

    async def stop(self):
        """Stop the polling loop."""
        logger.info("Stopping ingestion service...")
        self.running = False
