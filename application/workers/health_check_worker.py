from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from application.services.orchestrator import DataOrchestrator

logger = logging.getLogger(__name__)


class HealthCheckWorker:
    """
    Background task that probes every data source on a fixed interval.

    It runs independently of the request path; a slow probe never holds up
    get_aggregated_dataset.
    """
    def __init__(self, orchestrator: DataOrchestrator, interval_seconds: float):
        self.orchestrator = orchestrator
        self.interval_seconds = interval_seconds
        self.is_running = False
        self._task: asyncio.Task | None = None

    async def run_cycle(self) -> None:
        cycle_start = datetime.now()
        await self.orchestrator.run_health_checks()
        cycle_duration = (datetime.now() - cycle_start).total_seconds()
        logger.debug(
            f'Health check cycle completed in {cycle_duration:.2f}s: {self.orchestrator.get_status().value}',
            extra={'extra_data': {
                'cycle_duration_seconds': cycle_duration,
                'sources': [health.status.value for health in self.orchestrator.get_health()],
            }}
        )

    async def run(self) -> None:
        """Main loop. Runs until stopped or cancelled."""
        self.is_running = True
        logger.info(f'Health check worker started, interval {self.interval_seconds}s')

        while self.is_running:
            try:
                await self.run_cycle()
                await asyncio.sleep(self.interval_seconds)
            except asyncio.CancelledError:
                logger.info('Health check worker received cancellation signal')
                break
            except Exception as e:
                logger.error(f'Error in health check cycle: {e}', exc_info=True)
                await asyncio.sleep(self.interval_seconds)

        self.is_running = False
        logger.info('Health check worker stopped')

    def start(self) -> asyncio.Task:
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self.run(), name='health-check-worker')
        return self._task

    async def stop(self) -> None:
        self.is_running = False
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
