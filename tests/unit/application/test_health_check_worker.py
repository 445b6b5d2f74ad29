import asyncio
from unittest.mock import AsyncMock, Mock

import pytest

from application.services.orchestrator import DataOrchestrator
from application.workers.health_check_worker import HealthCheckWorker
from domain.models.asset import HealthStatus


@pytest.fixture
def orchestrator(make_source):
    return DataOrchestrator(
        [make_source('A'), make_source('B', status=HealthStatus.DEGRADED)], cache_timeout_ms=60_000
    )


class TestHealthCheckWorker:

    @pytest.mark.asyncio
    async def test_run_cycle_probes_sources(self, orchestrator):
        worker = HealthCheckWorker(orchestrator, interval_seconds=60)

        await worker.run_cycle()

        assert [source.health_checks for source in orchestrator.sources] == [1, 1]
        assert orchestrator.get_status() == HealthStatus.HEALTHY

    @pytest.mark.asyncio
    async def test_runs_repeatedly_until_stopped(self, orchestrator):
        worker = HealthCheckWorker(orchestrator, interval_seconds=0.01)

        worker.start()
        await asyncio.sleep(0.1)
        await worker.stop()

        assert orchestrator.sources[0].health_checks >= 2
        assert worker.is_running is False

    @pytest.mark.asyncio
    async def test_start_is_idempotent(self, orchestrator):
        worker = HealthCheckWorker(orchestrator, interval_seconds=60)

        first = worker.start()
        second = worker.start()
        await worker.stop()

        assert first is second

    @pytest.mark.asyncio
    async def test_stop_cancels_a_sleeping_worker(self, orchestrator):
        worker = HealthCheckWorker(orchestrator, interval_seconds=3600)

        task = worker.start()
        await asyncio.sleep(0.01)
        await asyncio.wait_for(worker.stop(), timeout=1)

        assert task.done()

    @pytest.mark.asyncio
    async def test_stop_without_start(self, orchestrator):
        await HealthCheckWorker(orchestrator, interval_seconds=1).stop()

    @pytest.mark.asyncio
    async def test_cycle_errors_do_not_stop_the_loop(self, caplog):
        orchestrator = Mock(spec=DataOrchestrator)
        orchestrator.run_health_checks = AsyncMock(side_effect=[RuntimeError('probe crashed')] + [None] * 50)
        orchestrator.get_status.return_value = HealthStatus.HEALTHY
        orchestrator.get_health.return_value = []
        worker = HealthCheckWorker(orchestrator, interval_seconds=0.01)

        worker.start()
        await asyncio.sleep(0.05)
        await worker.stop()

        assert orchestrator.run_health_checks.await_count >= 2
        assert 'Error in health check cycle: probe crashed' in caplog.text
